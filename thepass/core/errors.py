# thepass/core/errors.py
from __future__ import annotations


class DomainError(Exception):
    """Base for every failure surfaced to API callers.

    `kind` is the machine-readable code, `status_code` the HTTP mapping.
    """

    kind: str = "internal"
    status_code: int = 500

    def __init__(self, message: str | None = None):
        self.message = message or self.kind.replace("_", " ").capitalize()
        super().__init__(self.message)


class Unauthorized(DomainError):
    """No or invalid actor identity."""

    kind = "unauthorized"
    status_code = 401


class Forbidden(DomainError):
    """Identity is valid but lacks the capability or does not own the resource."""

    kind = "forbidden"
    status_code = 403


class NotFound(DomainError):
    kind = "not_found"
    status_code = 404


class InvalidRequest(DomainError):
    kind = "invalid_request"
    status_code = 400


class MissingPhoto(InvalidRequest):
    kind = "missing_photo"


class MissingNotes(InvalidRequest):
    kind = "missing_notes"


class InvalidState(DomainError):
    """Operation is illegal for the entity's current state."""

    kind = "invalid_state"
    status_code = 409


class TransferStageClosed(InvalidState):
    """Transfer is not at the stage the response addresses (or is already final).

    Rendered as 403 like a wrong responder; `kind` stays invalid_state.
    """

    status_code = 403


class Conflict(DomainError):
    """Another active entity (or a concurrent write) blocks the operation."""

    kind = "conflict"
    status_code = 409


class AlreadyCompleted(Conflict):
    kind = "already_completed"


class VersionConflict(Conflict):
    kind = "version_conflict"


class Internal(DomainError):
    kind = "internal"
    status_code = 500
