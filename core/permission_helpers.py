from typing import Dict, FrozenSet, Iterable, List, Optional

from fastapi import Depends, HTTPException

from core.errors import InvariantViolation, RoleInUse, RoleNotFound, RoleProtected
from core.logging_config import logger
from core.permissions import (
    ACTION_RULES,
    DEFAULT_ROLES,
    SYSTEM_ROLE_NAME,
    VIEW_RULES,
    Permission,
)
from core.store import AdminStore, get_store
from dependencies.auth import CurrentUser, get_current_user
from models.role import Role
from models.user import HelpdeskUser


# -----------------------------------------------------
# Pure helpers
# -----------------------------------------------------
def toggle_permission(permissions: Iterable[str], permission: str) -> List[str]:
    """Return a new list with `permission` removed if present, appended if absent."""
    current = list(permissions)
    if permission in current:
        return [p for p in current if p != permission]
    return current + [permission]


def system_role() -> Role:
    defaults = DEFAULT_ROLES[SYSTEM_ROLE_NAME]
    return Role(name=SYSTEM_ROLE_NAME, description=defaults["description"], permissions=defaults["permissions"])


# -----------------------------------------------------
# Permission model
# -----------------------------------------------------
class PermissionModel:
    """
    Role -> capability evaluation over an AdminStore.

    Checks never raise: a missing user, an unknown role or an empty store
    all resolve to "no access".
    """

    def __init__(self, store: AdminStore):
        self.store = store

    # -------------------------------------------------
    # Evaluation
    # -------------------------------------------------
    def _roles_by_name(self) -> Dict[str, Role]:
        roles = dict(self.store.roles)
        roles.setdefault(SYSTEM_ROLE_NAME, system_role())
        return roles

    def effective_permissions(self, user: Optional[HelpdeskUser]) -> FrozenSet[str]:
        if user is None:
            return frozenset()

        roles = self._roles_by_name()
        granted = set()
        for role_name in user.roles or []:
            role = roles.get(role_name)
            if role is not None:
                granted.update(role.permissions)
        return frozenset(granted)

    def has_permission(self, user: Optional[HelpdeskUser], permission: str) -> bool:
        return str(permission) in self.effective_permissions(user)

    def has_any(self, user: Optional[HelpdeskUser], permissions: Iterable[str]) -> bool:
        effective = self.effective_permissions(user)
        return any(str(p) in effective for p in permissions)

    def can_view(self, user: Optional[HelpdeskUser], view: str) -> bool:
        return self.has_any(user, VIEW_RULES.get(view, []))

    def visible_views(self, user: Optional[HelpdeskUser]) -> List[str]:
        return [view for view in VIEW_RULES if self.can_view(user, view)]

    def allowed_actions(self, user: Optional[HelpdeskUser]) -> List[str]:
        return [action for action, perms in ACTION_RULES.items() if self.has_any(user, perms)]

    def users_with_permission(self, permission: str) -> List[HelpdeskUser]:
        return [u for u in self.store.users if self.has_permission(u, permission)]

    # -------------------------------------------------
    # Role management
    # -------------------------------------------------
    def get_roles(self) -> List[Role]:
        return list(self._roles_by_name().values())

    def save_role(self, role: Role) -> Role:
        """Upsert by name. Renames are a delete plus a create from the caller's side."""
        if not (role.name or "").strip():
            raise InvariantViolation("Role name cannot be empty")

        self.store.bridge.save_role(role.to_sheet())
        self.store.put_role(role)
        logger.info(f"Saved role '{role.name}' ({len(role.permissions)} permissions)")
        return role

    def delete_role(self, name: str) -> None:
        """
        Blocks while any user still lists the role, so nobody silently
        loses access. The system role can never be deleted.
        """
        if name == SYSTEM_ROLE_NAME:
            raise RoleProtected(f"Cannot delete the {SYSTEM_ROLE_NAME} role.")

        if name not in self.store.roles:
            raise RoleNotFound(f"Role '{name}' not found")

        holders = self.store.users_with_role(name)
        if holders:
            emails = [u.email for u in holders]
            logger.warning(f"Blocked deletion of role '{name}': still assigned to {emails}")
            raise RoleInUse(name, emails)

        self.store.bridge.delete_role(name)
        self.store.remove_role(name)
        logger.info(f"Deleted role '{name}'")

    def seed_default_roles(self) -> List[Role]:
        """Save every default role the store does not define yet."""
        created = []
        for name, defaults in DEFAULT_ROLES.items():
            if name in self.store.roles:
                continue
            created.append(
                self.save_role(
                    Role(name=name, description=defaults["description"], permissions=defaults["permissions"])
                )
            )
        return created


# -----------------------------------------------------
# FastAPI dependency wrappers
# -----------------------------------------------------
def get_permission_model(store: AdminStore = Depends(get_store)) -> PermissionModel:
    return PermissionModel(store)


def requires_permission(permission: Permission):
    """
    Usage:
        @router.get("/", dependencies=[Depends(requires_permission(Permission.MANAGE_ROLES))])
    """

    def dependency(
        current_user: CurrentUser = Depends(get_current_user),
        model: PermissionModel = Depends(get_permission_model),
    ):
        if not model.has_permission(current_user.user, permission):
            raise HTTPException(
                status_code=403,
                detail=f"Insufficient permissions: '{permission}' required",
            )
        return current_user

    return dependency
