# thepass/models/registry.py
"""Import every model so Base.metadata is complete (Alembic, tests)."""

from thepass.models.base import Base  # noqa: F401
from thepass.models.profile import Profile  # noqa: F401
from thepass.models.task import Task  # noqa: F401
from thepass.models.workflow import Workflow, WorkflowTask  # noqa: F401
from thepass.models.workflow_assignment import WorkflowAssignment  # noqa: F401
from thepass.models.task_completion import TaskCompletion  # noqa: F401
from thepass.models.task_transfer import TaskTransfer  # noqa: F401
from thepass.models.task_transfer_event import TaskTransferEvent  # noqa: F401
