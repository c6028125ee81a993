# thepass/api/completions.py

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from thepass.api.deps import get_current_profile
from thepass.core.db import get_db
from thepass.core.errors import DomainError
from thepass.models.profile import Profile
from thepass.schemas.completion import TaskCompletionEdit, TaskCompletionRead
from thepass.services.task_completion_service import edit_completion

router = APIRouter(prefix="/task-completions", tags=["completions"])


@router.put("/{completion_id}", response_model=TaskCompletionRead)
def edit_task_completion(
    completion_id: UUID,
    data: TaskCompletionEdit,
    me: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    """Manager correction of notes. Previous value is kept in edit_history."""
    try:
        completion = edit_completion(db, completion_id=completion_id, actor=me, notes=data.notes)
        db.commit()
    except DomainError:
        db.rollback()
        raise

    return completion
