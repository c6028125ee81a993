# thepass/schemas/profile.py

from datetime import datetime
from uuid import UUID

from pydantic import Field

from thepass.models.profile import ProfileRole
from thepass.schemas.base import ORMModel, StrictBaseModel


class ProfileCreate(StrictBaseModel):
    name: str = Field(min_length=1, max_length=200)
    email: str = Field(min_length=3, max_length=320, pattern=r"^[^@\s]+@[^@\s]+$")
    role: ProfileRole = ProfileRole.employee


class ProfileRoleUpdate(StrictBaseModel):
    role: ProfileRole


class ProfileRead(ORMModel):
    id: UUID
    name: str
    email: str
    role: str
    is_archived: bool
    created_at: datetime


class MeRead(ProfileRead):
    capabilities: list[str] = []
