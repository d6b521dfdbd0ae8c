# routers/admin.py

from fastapi import APIRouter, Depends

from core.errors import DOMAIN_ERRORS, handle_domain_error
from core.logging_config import logger
from core.permission_helpers import requires_permission
from core.permissions import Permission
from core.store import AdminStore, get_store
from dependencies.auth import CurrentUser

router = APIRouter(
    prefix="/admin",
    tags=["Admin"],
)


# -----------------------------------------------------
# POST /admin/refresh
# Re-read roles, users, mappings and the sheet schema
# -----------------------------------------------------
@router.post("/refresh", summary="Admin: reload data from the spreadsheet")
def refresh_store(
    current_user: CurrentUser = Depends(requires_permission(Permission.MANAGE_SETTINGS)),
    store: AdminStore = Depends(get_store),
):
    try:
        store.refresh()
        schema = store.refresh_schema()
    except DOMAIN_ERRORS as e:
        raise handle_domain_error(e, "Failed to reload data")

    logger.info(f"Store reloaded by {current_user.email}")
    return {
        "success": True,
        "roles": len(store.roles),
        "users": len(store.users),
        "mappings": len(store.mappings),
        "sheets": schema.sheet_names(),
    }
