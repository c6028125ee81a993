# thepass/api/profiles.py

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from thepass.api.deps import get_current_profile
from thepass.core.db import get_db
from thepass.core.errors import Conflict, InvalidRequest, NotFound
from thepass.core.rbac import Capability, capabilities_for, ensure_allowed
from thepass.models.profile import Profile, ProfileRole
from thepass.schemas.profile import MeRead, ProfileCreate, ProfileRead, ProfileRoleUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/profiles", tags=["profiles"])

# roles any MANAGE_PROFILES holder may create or archive
STAFF_ROLES = (ProfileRole.employee.value, ProfileRole.lead.value)


@router.get("/me", response_model=MeRead)
def read_me(me: Profile = Depends(get_current_profile)):
    base = ProfileRead.model_validate(me).model_dump()
    return MeRead(**base, capabilities=sorted(c.value for c in capabilities_for(me.role)))


@router.get("", response_model=list[ProfileRead])
def list_profiles(
    include_archived: bool = Query(False),
    me: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    ensure_allowed(Capability.MANAGE_PROFILES, me.role)

    q = select(Profile)
    if not include_archived:
        q = q.where(Profile.is_archived.is_(False))
    return db.execute(q.order_by(Profile.name.asc())).scalars().all()


@router.post("", response_model=ProfileRead, status_code=status.HTTP_201_CREATED)
def create_profile(
    data: ProfileCreate,
    me: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    ensure_allowed(Capability.MANAGE_PROFILES, me.role)
    # only admins hand out elevated roles
    if data.role.value not in STAFF_ROLES:
        ensure_allowed(Capability.MANAGE_ROLES, me.role)

    profile = Profile(name=data.name.strip(), email=data.email.strip().lower(), role=data.role.value)
    db.add(profile)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise Conflict("A profile with this email already exists") from e

    db.refresh(profile)
    logger.info("Profile created id=%s role=%s by=%s", profile.id, profile.role, me.id)
    return profile


@router.patch("/{profile_id}/role", response_model=ProfileRead)
def update_role(
    profile_id: UUID,
    data: ProfileRoleUpdate,
    me: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    ensure_allowed(Capability.MANAGE_ROLES, me.role)

    profile = db.get(Profile, profile_id)
    if profile is None:
        raise NotFound("Profile not found")

    previous = profile.role
    profile.role = data.role.value
    db.commit()
    db.refresh(profile)

    logger.info("Profile role changed id=%s %s -> %s by=%s", profile.id, previous, profile.role, me.id)
    return profile


@router.post("/{profile_id}/archive", response_model=ProfileRead)
def archive_profile(
    profile_id: UUID,
    me: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    ensure_allowed(Capability.MANAGE_PROFILES, me.role)

    profile = db.get(Profile, profile_id)
    if profile is None:
        raise NotFound("Profile not found")

    if profile.id == me.id:
        raise InvalidRequest("Cannot archive your own profile")

    # same rule as creation: elevated profiles are handled by admins only
    if profile.role not in STAFF_ROLES:
        ensure_allowed(Capability.MANAGE_ROLES, me.role)

    profile.is_archived = True
    db.commit()
    db.refresh(profile)

    logger.info("Profile archived id=%s role=%s by=%s", profile.id, profile.role, me.id)
    return profile
