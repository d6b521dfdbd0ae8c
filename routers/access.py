# routers/access.py

from fastapi import APIRouter, Depends

from core.permission_helpers import PermissionModel, get_permission_model
from dependencies.auth import CurrentUser, get_current_user
from models.user import AccessProfile, UserRead

router = APIRouter(tags=["Access"])


# -----------------------------------------------------
# GET /me
# Everything the front end needs to decide which tabs
# and buttons to render for the signed-in user.
# -----------------------------------------------------
@router.get("/me", response_model=AccessProfile)
def get_my_access(
    current_user: CurrentUser = Depends(get_current_user),
    model: PermissionModel = Depends(get_permission_model),
):
    user = current_user.user
    return AccessProfile(
        user=UserRead.from_user(user),
        permissions=sorted(model.effective_permissions(user)),
        views=model.visible_views(user),
        actions=model.allowed_actions(user),
    )
