# tests/test_rbac_capabilities.py
from __future__ import annotations

import pytest

from thepass.core.errors import Forbidden
from thepass.core.rbac import (
    KNOWN_ROLES,
    Capability,
    capabilities_for,
    ensure_allowed,
    has_capability,
)
from thepass.models.profile import ProfileRole


def test_every_profile_role_has_a_capability_entry():
    assert {r.value for r in ProfileRole} == set(KNOWN_ROLES)


@pytest.mark.parametrize("role", ["employee", "lead"])
def test_staff_roles_have_no_capabilities(role):
    assert capabilities_for(role) == frozenset()


@pytest.mark.parametrize("role", ["kitchen_manager", "ordering_manager", "manager", "admin"])
def test_manager_roles_approve_transfers_and_see_all_assignments(role):
    assert has_capability(role, Capability.APPROVE_TRANSFERS)
    assert has_capability(role, Capability.VIEW_ALL_ASSIGNMENTS)
    assert has_capability(role, Capability.MANAGE_WORKFLOWS)


def test_department_managers_cannot_edit_completions_or_profiles():
    for role in ("kitchen_manager", "ordering_manager"):
        assert not has_capability(role, Capability.EDIT_COMPLETIONS)
        assert not has_capability(role, Capability.MANAGE_PROFILES)


def test_only_admin_manages_roles():
    holders = {r for r in KNOWN_ROLES if has_capability(r, Capability.MANAGE_ROLES)}
    assert holders == {"admin"}


def test_unknown_or_missing_role_has_nothing():
    assert capabilities_for(None) == frozenset()
    assert capabilities_for("") == frozenset()
    assert capabilities_for("owner") == frozenset()


def test_ensure_allowed_raises_forbidden():
    ensure_allowed(Capability.EDIT_COMPLETIONS, "manager")

    with pytest.raises(Forbidden) as ei:
        ensure_allowed(Capability.EDIT_COMPLETIONS, "employee")
    assert ei.value.status_code == 403
    assert "edit completions" in ei.value.message
