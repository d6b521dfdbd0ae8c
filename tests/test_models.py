# tests/test_models.py

"""
Tests for record validation at the sheet boundary.
"""

from datetime import timezone

import pytest
from pydantic import ValidationError

from models.field_mapping import FieldMapping
from models.role import Role
from models.ticket import Ticket
from models.user import HelpdeskUser, split_roles


# ------------------------------------------------------------
# Role
# ------------------------------------------------------------
def test_role_from_comma_string():
    role = Role.model_validate(
        {"RoleName": " Tech ", "Description": None, "Permissions": "CLAIM_TICKETS, MANAGE_SOPS,,CLAIM_TICKETS"}
    )

    assert role.name == "Tech"
    assert role.description == ""
    assert role.permissions == ["CLAIM_TICKETS", "MANAGE_SOPS"]
    assert role.to_sheet()["Permissions"] == "CLAIM_TICKETS,MANAGE_SOPS"


def test_role_requires_name():
    with pytest.raises(ValidationError):
        Role(name="", permissions=[])


def test_role_rejects_unknown_permission():
    with pytest.raises(ValidationError):
        Role(name="Odd", permissions=["TIME_TRAVEL"])


def test_role_from_sheet_drops_unknown_permission():
    role = Role.from_sheet({"RoleName": "Legacy", "Permissions": "VIEW_DASHBOARD,OLD_PERMISSION"})
    assert role.permissions == ["VIEW_DASHBOARD"]


# ------------------------------------------------------------
# FieldMapping
# ------------------------------------------------------------
def test_mapping_round_trips_sheet_columns():
    row = {"MappingID": "MAP-1", "SheetName": "Tickets", "SheetHeader": " TicketID ",
           "AppFieldID": "ticket.id", "Description": "key"}
    mapping = FieldMapping.model_validate(row)

    assert mapping.sheet_header == "TicketID"
    assert mapping.to_sheet() == {**row, "SheetHeader": "TicketID"}


@pytest.mark.parametrize(
    "row",
    [
        {"SheetName": "", "SheetHeader": "A", "AppFieldID": "ticket.id"},
        {"SheetName": "Tickets", "SheetHeader": "  ", "AppFieldID": "ticket.id"},
        {"SheetName": "Tickets", "SheetHeader": "A", "AppFieldID": "ticket.unknown"},
    ],
)
def test_mapping_validation(row):
    with pytest.raises(ValidationError):
        FieldMapping.model_validate(row)


def test_mapping_id_defaults_to_empty():
    mapping = FieldMapping(sheet_name="Tickets", sheet_header="A", app_field_id="ticket.id")
    assert mapping.mapping_id == ""


# ------------------------------------------------------------
# Users
# ------------------------------------------------------------
def test_split_roles():
    assert split_roles("Approver, Chair ,,Approver") == ["Approver", "Chair"]
    assert split_roles(None) == []


def test_user_from_record():
    user = HelpdeskUser.from_record(
        {"user.id": 42, "user.email": " B@Y.com ", "user.role": "Approver", "user.campus": ""}
    )

    assert user.user_id == "42"
    assert user.email == "b@y.com"
    assert user.primary_role == "Approver"
    assert user.campus is None


# ------------------------------------------------------------
# Tickets
# ------------------------------------------------------------
def test_ticket_from_record():
    ticket = Ticket.from_record({
        "ticket.id": 101,
        "ticket.status": "New",
        "ticket.submitter": "A@X.com",
        "ticket.date_submitted": "2026-02-01T08:30:00Z",
        "ticket.is_public": "TRUE",
        "ticket.comments": '[{"Author_Email": "T@X.com", "Text": "On it", "IsStatusChange": true}]',
    })

    assert ticket.ticket_id == "101"
    assert ticket.submitter == "a@x.com"
    assert ticket.date_submitted.tzinfo == timezone.utc
    assert ticket.is_public is True
    assert ticket.comments[0].author_email == "t@x.com"
    assert ticket.comments[0].is_status_change is True


@pytest.mark.parametrize("value", ["", "not a date", None])
def test_ticket_bad_dates_are_none(value):
    assert Ticket(ticket_id="T", date_submitted=value).date_submitted is None


def test_ticket_naive_date_is_utc():
    ticket = Ticket(ticket_id="T", date_submitted="2026-02-01T08:30:00")
    assert ticket.date_submitted.tzinfo == timezone.utc


@pytest.mark.parametrize("value", ["not json", "{}", None])
def test_ticket_unreadable_comments_are_empty(value):
    assert Ticket(ticket_id="T", comments=value).comments == []


@pytest.mark.parametrize("flag, expected", [("FALSE", False), ("TRUE", True), (False, False), ("", False)])
def test_ticket_comment_status_change_from_sheet_strings(flag, expected):
    ticket = Ticket(ticket_id="T", comments=[{"Text": "Moved", "IsStatusChange": flag}])
    assert ticket.comments[0].is_status_change is expected
