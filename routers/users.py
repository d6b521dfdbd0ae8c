# routers/users.py

from typing import List

from fastapi import APIRouter, Depends

from core.permission_helpers import PermissionModel, get_permission_model, requires_permission
from core.permissions import Permission
from models.user import UserRead

router = APIRouter(
    prefix="/users",
    tags=["Users"],
)


# ============================================================
# LIST USERS
# ============================================================
@router.get(
    "",
    response_model=List[UserRead],
    dependencies=[Depends(requires_permission(Permission.MANAGE_USERS))],
)
def list_users(model: PermissionModel = Depends(get_permission_model)):
    return [UserRead.from_user(u) for u in model.store.users]


# ============================================================
# TECHNICIANS (assignment dropdown)
# ============================================================
@router.get(
    "/technicians",
    response_model=List[UserRead],
    dependencies=[Depends(requires_permission(Permission.ASSIGN_TICKETS))],
)
def list_technicians(model: PermissionModel = Depends(get_permission_model)):
    """Everyone who can claim tickets."""
    return [
        UserRead.from_user(u)
        for u in model.users_with_permission(Permission.CLAIM_TICKETS)
    ]
