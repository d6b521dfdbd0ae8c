# routers/roles.py

from typing import Dict, List

from fastapi import APIRouter, Depends, HTTPException

from core.errors import DOMAIN_ERRORS, RoleInUse, handle_domain_error
from core.permission_helpers import (
    PermissionModel,
    get_permission_model,
    requires_permission,
    toggle_permission,
)
from core.permissions import PERMISSION_CATEGORIES, Permission
from models.role import Role


router = APIRouter(
    prefix="/roles",
    tags=["Roles"],
    dependencies=[Depends(requires_permission(Permission.MANAGE_ROLES))],
)


# ============================================================
# LIST ROLES
# ============================================================
@router.get("", response_model=List[Role])
def list_roles(model: PermissionModel = Depends(get_permission_model)):
    """All defined roles, including the reserved Super Admin role."""
    return model.get_roles()


# ============================================================
# PERMISSION CATALOG (grouped for the role editor)
# ============================================================
@router.get("/permissions", response_model=Dict[str, List[str]])
def list_permission_catalog():
    return {
        category.value: [p.value for p in perms]
        for category, perms in PERMISSION_CATEGORIES.items()
    }


# ============================================================
# SAVE ROLE (upsert by name)
# ============================================================
@router.post("", response_model=Role)
def save_role(
    payload: Role,
    model: PermissionModel = Depends(get_permission_model),
):
    try:
        return model.save_role(payload)
    except DOMAIN_ERRORS as e:
        raise handle_domain_error(e, "Failed to save role")


# ============================================================
# SEED DEFAULT ROLES
# ============================================================
@router.post("/seed", response_model=List[Role])
def seed_roles(model: PermissionModel = Depends(get_permission_model)):
    """Create any of the default roles that do not exist yet."""
    try:
        return model.seed_default_roles()
    except DOMAIN_ERRORS as e:
        raise handle_domain_error(e, "Failed to seed roles")


# ============================================================
# TOGGLE ONE PERMISSION ON A ROLE
# ============================================================
@router.post("/{role_name}/permissions/{permission}/toggle", response_model=Role)
def toggle_role_permission(
    role_name: str,
    permission: Permission,
    model: PermissionModel = Depends(get_permission_model),
):
    role = next((r for r in model.get_roles() if r.name == role_name), None)
    if role is None:
        raise HTTPException(404, f"Role '{role_name}' not found")

    updated = role.model_copy(
        update={"permissions": toggle_permission(role.permissions, permission.value)}
    )
    try:
        return model.save_role(updated)
    except DOMAIN_ERRORS as e:
        raise handle_domain_error(e, "Failed to update role")


# ============================================================
# DELETE ROLE (blocked while users still hold it)
# ============================================================
@router.delete("/{role_name}")
def delete_role(
    role_name: str,
    model: PermissionModel = Depends(get_permission_model),
):
    try:
        model.delete_role(role_name)
    except RoleInUse as e:
        raise HTTPException(409, detail={"message": e.message, "users": e.emails})
    except DOMAIN_ERRORS as e:
        raise handle_domain_error(e, "Failed to delete role")

    return {"success": True, "deleted": role_name}
