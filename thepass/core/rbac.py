# thepass/core/rbac.py
from __future__ import annotations

import enum
from typing import Mapping, Set

from thepass.core.errors import Forbidden


class Capability(str, enum.Enum):
    MANAGE_PROFILES = "manage_profiles"
    MANAGE_ROLES = "manage_roles"
    MANAGE_WORKFLOWS = "manage_workflows"
    VIEW_ALL_ASSIGNMENTS = "view_all_assignments"
    EDIT_COMPLETIONS = "edit_completions"
    APPROVE_TRANSFERS = "approve_transfers"


_DEPARTMENT_MANAGER: Set[Capability] = {
    Capability.MANAGE_WORKFLOWS,
    Capability.VIEW_ALL_ASSIGNMENTS,
    Capability.APPROVE_TRANSFERS,
}

_MANAGER: Set[Capability] = _DEPARTMENT_MANAGER | {
    Capability.MANAGE_PROFILES,
    Capability.EDIT_COMPLETIONS,
}


# Role taxonomy lives only here; call sites check capabilities.
ROLE_CAPABILITIES: Mapping[str, Set[Capability]] = {
    "employee": set(),
    "lead": set(),
    "kitchen_manager": _DEPARTMENT_MANAGER,
    "ordering_manager": _DEPARTMENT_MANAGER,
    "manager": _MANAGER,
    "admin": _MANAGER | {Capability.MANAGE_ROLES},
}

KNOWN_ROLES = frozenset(ROLE_CAPABILITIES)


def capabilities_for(role: str | None) -> frozenset[Capability]:
    if not role:
        return frozenset()
    return frozenset(ROLE_CAPABILITIES.get(role.strip(), set()))


def has_capability(role: str | None, capability: Capability) -> bool:
    return capability in capabilities_for(role)


def ensure_allowed(capability: Capability, role: str | None) -> None:
    if not has_capability(role, capability):
        raise Forbidden(f"Role '{role}' is not allowed to {capability.value.replace('_', ' ')}")
