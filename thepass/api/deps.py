# thepass/api/deps.py
from __future__ import annotations

from uuid import UUID

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from thepass.core.db import get_db
from thepass.core.errors import InvalidRequest, Unauthorized
from thepass.models.profile import Profile


# -----------------------------------------------------------------------------
# Actor identity (stand-in for the session provider)
# -----------------------------------------------------------------------------


def get_current_user_id(
    x_actor_user_id: str | None = Header(
        default=None,
        alias="X-Actor-User-Id",
        description="Profile UUID of the caller. Resolved by the upstream auth/session layer.",
        examples=["33333333-3333-3333-3333-333333333333"],
    ),
) -> UUID:
    """X-Actor-User-Id header -> UUID."""
    if not x_actor_user_id or not x_actor_user_id.strip():
        raise Unauthorized("Missing X-Actor-User-Id header")
    try:
        return UUID(x_actor_user_id.strip())
    except ValueError as e:
        raise InvalidRequest("Invalid X-Actor-User-Id format (must be UUID)") from e


def get_current_profile(
    actor_user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> Profile:
    """Profile row for the caller; role and capabilities come from here, not from headers."""
    profile = db.get(Profile, actor_user_id)
    if profile is None or profile.is_archived:
        raise Unauthorized("Unknown or archived profile")
    return profile
