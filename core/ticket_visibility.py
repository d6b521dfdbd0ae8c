# core/ticket_visibility.py

"""
Which tickets a user sees on the dashboard.

A ticket is visible when any scope rule the user qualifies for matches it.
Rules tied to a permission apply only to holders of that permission;
rules with no permission apply to everyone.
"""

from datetime import datetime, timezone
from typing import Callable, List, Optional, Tuple

from core.app_fields import TICKETS_SHEET
from core.logging_config import logger
from core.permission_helpers import PermissionModel
from core.store import AdminStore
from models.enums import Department, TicketStatus
from models.ticket import Ticket
from models.user import HelpdeskUser

TicketPredicate = Callable[[Ticket, HelpdeskUser], bool]


def _in_department(ticket: Ticket, user: HelpdeskUser) -> bool:
    return bool(user.department) and ticket.category == user.department


def _campus_facilities(ticket: Ticket, user: HelpdeskUser) -> bool:
    return (
        bool(user.campus)
        and ticket.category == Department.facilities.value
        and ticket.campus == user.campus
    )


def _claimable(ticket: Ticket, user: HelpdeskUser) -> bool:
    if ticket.assignee == user.email:
        return True
    return (
        bool(user.department)
        and ticket.category == user.department
        and ticket.status == TicketStatus.new.value
        and not ticket.assignee
    )


def _open_for_bid(ticket: Ticket, user: HelpdeskUser) -> bool:
    return ticket.status == TicketStatus.open_for_bid.value


def _involved(ticket: Ticket, user: HelpdeskUser) -> bool:
    if ticket.submitter == user.email:
        return True
    return any(c.author_email == user.email for c in ticket.comments)


def _public(ticket: Ticket, user: HelpdeskUser) -> bool:
    return ticket.is_public


SCOPE_RULES: List[Tuple[Optional[str], TicketPredicate]] = [
    ("VIEW_DEPT_TICKETS", _in_department),
    ("VIEW_CAMPUS_TICKETS", _campus_facilities),
    ("CLAIM_TICKETS", _claimable),
    ("VIEW_ALL_BIDS", _open_for_bid),
    (None, _involved),
    (None, _public),
]

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def visible_tickets(
    model: PermissionModel, user: HelpdeskUser, tickets: List[Ticket]
) -> List[Ticket]:
    """Union of every applicable scope, without duplicates, newest first."""
    granted = model.effective_permissions(user)
    rules = [pred for perm, pred in SCOPE_RULES if perm is None or perm in granted]

    seen = set()
    result: List[Ticket] = []
    for ticket in tickets:
        if ticket.ticket_id in seen:
            continue
        if any(rule(ticket, user) for rule in rules):
            seen.add(ticket.ticket_id)
            result.append(ticket)

    return sorted(result, key=lambda t: t.date_submitted or _OLDEST, reverse=True)


def load_tickets(store: AdminStore) -> List[Ticket]:
    tickets = []
    for record in store.sheet_records(TICKETS_SHEET):
        ticket = Ticket.from_record(record)
        if not ticket.ticket_id:
            logger.debug("Skipping ticket row without an id")
            continue
        tickets.append(ticket)
    return tickets
