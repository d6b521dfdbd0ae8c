# routers/tickets.py

from typing import List

from fastapi import APIRouter, Depends

from core.errors import DOMAIN_ERRORS, handle_domain_error
from core.permission_helpers import PermissionModel, get_permission_model, requires_permission
from core.permissions import Permission
from core.ticket_visibility import load_tickets, visible_tickets
from dependencies.auth import CurrentUser
from models.ticket import Ticket

router = APIRouter(
    prefix="/tickets",
    tags=["Tickets"],
)


# ============================================================
# DASHBOARD TICKETS
# ============================================================
@router.get("", response_model=List[Ticket])
def list_my_tickets(
    current_user: CurrentUser = Depends(requires_permission(Permission.VIEW_DASHBOARD)),
    model: PermissionModel = Depends(get_permission_model),
):
    """
    Tickets visible to the caller: their department / campus / claimable
    scopes (per permission), anything they submitted or commented on,
    and public tickets. Newest first.
    """
    try:
        tickets = load_tickets(model.store)
    except DOMAIN_ERRORS as e:
        raise handle_domain_error(e, "Failed to load tickets")

    return visible_tickets(model, current_user.user, tickets)
