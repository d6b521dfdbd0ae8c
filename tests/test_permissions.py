# tests/test_permissions.py

"""
Tests for role -> permission evaluation and role management.
"""

import pytest

from core.errors import BridgeTransportError, InvariantViolation, RoleInUse, RoleNotFound, RoleProtected
from core.permission_helpers import PermissionModel, toggle_permission
from core.permissions import (
    DEFAULT_ROLES,
    KNOWN_PERMISSIONS,
    SYSTEM_ROLE_NAME,
    Permission,
)
from models.role import Role
from models.user import HelpdeskUser


def user_with(*roles) -> HelpdeskUser:
    return HelpdeskUser(email="someone@school.edu", roles=list(roles))


# ------------------------------------------------------------
# Evaluation
# ------------------------------------------------------------
def test_tech_can_claim_but_not_manage_users(model: PermissionModel):
    model.save_role(Role(name="Tech", permissions=["CLAIM_TICKETS"]))
    user = HelpdeskUser(email="a@x.com", roles=["Tech"])

    assert model.has_permission(user, "CLAIM_TICKETS") is True
    assert model.has_permission(user, "MANAGE_USERS") is False


@pytest.mark.parametrize("role_name", ["Admin", "Tech", "Staff", "Approver", "Parent"])
def test_membership_round_trip(model: PermissionModel, store, role_name):
    """A permission is granted exactly when the role's set contains it."""
    user = user_with(role_name)
    role_perms = set(store.roles[role_name].permissions)

    for permission in KNOWN_PERMISSIONS:
        assert model.has_permission(user, permission) == (permission in role_perms)


def test_permissions_union_across_roles(model: PermissionModel, store):
    multi = store.find_user("multi@school.edu")
    expected = set(store.roles["Staff"].permissions) | set(store.roles["Tech"].permissions)

    assert multi.roles == ["Staff", "Tech"]
    assert model.effective_permissions(multi) == frozenset(expected)


def test_super_admin_has_everything_without_a_sheet_row(model: PermissionModel, store):
    assert SYSTEM_ROLE_NAME not in store.roles
    super_admin = store.find_user("super@school.edu")

    assert all(model.has_permission(super_admin, p) for p in KNOWN_PERMISSIONS)


def test_missing_user_and_unknown_role_fail_closed(model: PermissionModel):
    assert model.has_permission(None, "VIEW_DASHBOARD") is False
    assert model.effective_permissions(None) == frozenset()
    assert model.has_permission(user_with("Ghost"), "VIEW_DASHBOARD") is False
    assert model.visible_views(user_with("Ghost")) == []


def test_permission_enum_and_plain_string_agree(model: PermissionModel, store):
    admin = store.find_user("admin@school.edu")
    assert model.has_permission(admin, Permission.MANAGE_USERS)
    assert model.has_permission(admin, "MANAGE_USERS")


# ------------------------------------------------------------
# Views and actions
# ------------------------------------------------------------
def test_views_are_any_of(model: PermissionModel, store):
    tech = store.find_user("tech@school.edu")
    views = model.visible_views(tech)

    assert "dashboard" in views
    assert "operations" in views      # MANAGE_SOPS alone is enough
    assert "assets" in views
    assert "roles" not in views
    assert "mapping" not in views


def test_parent_sees_only_dashboard(model: PermissionModel, store):
    parent = store.find_user("parent@school.edu")
    assert model.visible_views(parent) == ["dashboard"]
    assert model.allowed_actions(parent) == []


def test_approver_actions(model: PermissionModel, store):
    approver = store.find_user("approver@school.edu")
    actions = model.allowed_actions(approver)

    assert "ticket.approve" in actions
    assert "ticket.assign" in actions
    assert "ticket.claim" not in actions


def test_users_with_permission(model: PermissionModel):
    emails = {u.email for u in model.users_with_permission("CLAIM_TICKETS")}
    assert emails == {"tech@school.edu", "multi@school.edu", "super@school.edu"}


# ------------------------------------------------------------
# Toggle
# ------------------------------------------------------------
@pytest.mark.parametrize("role_name", list(DEFAULT_ROLES))
def test_toggle_is_an_involution(role_name):
    before = list(DEFAULT_ROLES[role_name]["permissions"])
    for permission in ["CLAIM_TICKETS", "MANAGE_ROLES", "VIEW_DASHBOARD"]:
        twice = toggle_permission(toggle_permission(before, permission), permission)
        assert set(twice) == set(before)


def test_toggle_adds_then_removes():
    assert toggle_permission(["A"], "B") == ["A", "B"]
    assert toggle_permission(["A", "B"], "A") == ["B"]


# ------------------------------------------------------------
# Save
# ------------------------------------------------------------
def test_save_role_writes_remote_then_local(model: PermissionModel, store, bridge):
    role = Role(name="Librarian", description="Books", permissions=["VIEW_DASHBOARD", "MANAGE_SOPS"])
    model.save_role(role)

    assert bridge.calls_to("saveRole")[-1] == (
        {"RoleName": "Librarian", "Description": "Books", "Permissions": "VIEW_DASHBOARD,MANAGE_SOPS"},
    )
    assert store.roles["Librarian"].permissions == ["VIEW_DASHBOARD", "MANAGE_SOPS"]


def test_save_role_blank_name_never_reaches_remote(model: PermissionModel, bridge):
    role = Role(name="Temp").model_copy(update={"name": "  "})

    with pytest.raises(InvariantViolation):
        model.save_role(role)
    assert bridge.calls_to("saveRole") == []


def test_save_role_transport_failure_leaves_store(model: PermissionModel, store, bridge):
    before = list(store.roles["Staff"].permissions)
    bridge.fail_on.add("saveRole")

    with pytest.raises(BridgeTransportError):
        model.save_role(Role(name="Staff", permissions=["VIEW_DASHBOARD"]))
    assert store.roles["Staff"].permissions == before


def test_last_write_wins(store):
    """Two administrators editing the same role: the later save is kept."""
    first = PermissionModel(store)
    second = PermissionModel(store)

    first.save_role(Role(name="Staff", permissions=["VIEW_DASHBOARD", "SUBMIT_TICKETS"]))
    second.save_role(Role(name="Staff", permissions=["VIEW_DASHBOARD"]))

    assert store.roles["Staff"].permissions == ["VIEW_DASHBOARD"]
    assert store.bridge.roles["Staff"]["Permissions"] == "VIEW_DASHBOARD"


# ------------------------------------------------------------
# Delete
# ------------------------------------------------------------
def test_delete_unused_role(model: PermissionModel, store, bridge):
    model.save_role(Role(name="Temp", permissions=["VIEW_DASHBOARD"]))
    model.delete_role("Temp")

    assert "Temp" not in store.roles
    assert bridge.calls_to("deleteRole") == [("Temp",)]


def test_delete_role_in_use_is_blocked(model: PermissionModel, store, bridge):
    approver = store.find_user("approver@school.edu")

    with pytest.raises(RoleInUse) as exc:
        model.delete_role("Approver")

    assert exc.value.emails == ["approver@school.edu"]
    assert bridge.calls_to("deleteRole") == []
    assert model.has_permission(approver, "APPROVE_TICKETS") is True


def test_role_removed_elsewhere_fails_closed(model: PermissionModel, store, bridge):
    """Users still naming a role that vanished from the sheet just lose its permissions."""
    del bridge.roles["Approver"]
    store.refresh()
    approver = store.find_user("approver@school.edu")

    assert model.has_permission(approver, "APPROVE_TICKETS") is False
    assert model.visible_views(approver) == []


def test_system_role_cannot_be_deleted(model: PermissionModel, bridge):
    with pytest.raises(RoleProtected):
        model.delete_role(SYSTEM_ROLE_NAME)
    assert bridge.calls_to("deleteRole") == []


def test_delete_unknown_role(model: PermissionModel):
    with pytest.raises(RoleNotFound):
        model.delete_role("Nobody")


# ------------------------------------------------------------
# Listing / seeding
# ------------------------------------------------------------
def test_get_roles_includes_system_role(model: PermissionModel):
    names = [r.name for r in model.get_roles()]
    assert SYSTEM_ROLE_NAME in names
    assert "Admin" in names


def test_seed_creates_only_missing_defaults(model: PermissionModel, store):
    created = {r.name for r in model.seed_default_roles()}

    assert created == set(DEFAULT_ROLES) - {"Admin", "Tech", "Staff", "Approver", "Parent"}
    assert set(DEFAULT_ROLES) <= set(store.roles)
    assert model.seed_default_roles() == []
