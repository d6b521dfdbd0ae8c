# core/app_fields.py

"""
Static catalog of application fields a spreadsheet column can be mapped to.

Ids take the form ``<category>.<name>``; the category is everything before
the first dot. ``default_header`` is the column name the bundled sheets
use, and is what row translation falls back to when a field is unmapped.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional


TICKETS_SHEET = "Tickets"
USERS_SHEET = "Users"

# Sheet each category lives on when nothing says otherwise
CATEGORY_SHEETS: Dict[str, str] = {
    "ticket": TICKETS_SHEET,
    "user": USERS_SHEET,
    "asset": "Assets",
    "vendor": "Vendors",
}


@dataclass(frozen=True)
class AppField:
    id: str
    label: str
    description: str = ""
    default_header: Optional[str] = None

    @property
    def category(self) -> str:
        return self.id.split(".", 1)[0]

    @property
    def suffix(self) -> str:
        return self.id.split(".", 1)[1] if "." in self.id else self.id


APP_FIELDS: List[AppField] = [
    # Tickets
    AppField("ticket.id", "Ticket ID", "Primary key of a ticket", "TicketID"),
    AppField("ticket.title", "Ticket Title", "Short summary", "Title"),
    AppField("ticket.description", "Description", "Full problem description", "Description"),
    AppField("ticket.category", "Category", "IT or Facilities", "Category"),
    AppField("ticket.status", "Status", "Workflow state", "Status"),
    AppField("ticket.priority", "Priority", "Low / Medium / High / Critical", "Priority"),
    AppField("ticket.submitter", "Submitter Email", "Who opened the ticket", "Submitter_Email"),
    AppField("ticket.assignee", "Assigned Staff", "Technician email", "Assigned_Staff"),
    AppField("ticket.date_submitted", "Date Submitted", "ISO timestamp", "Date_Submitted"),
    AppField("ticket.campus", "Campus", "Campus reference", "CampusID_Ref"),
    AppField("ticket.building", "Building", "Building reference", "BuildingID_Ref"),
    AppField("ticket.location", "Location", "Location reference", "LocationID_Ref"),
    AppField("ticket.asset", "Related Asset", "Asset reference", "Related_AssetID_Ref"),
    AppField("ticket.is_public", "Public", "Visible to every user", "IsPublic"),
    AppField("ticket.comments", "Comment Thread", "JSON list of comments", "Comments"),
    AppField("ticket.type", "Ticket Type", "Incident or Maintenance", "TicketType"),
    # Users
    AppField("user.id", "User ID", "Primary key of a user", "UserID"),
    AppField("user.email", "Email", "Login email", "Email"),
    AppField("user.name", "Full Name", "Display name", "Name"),
    AppField("user.role", "User Type", "Comma-separated role names", "User_Type"),
    AppField("user.department", "Department", "IT, Facilities, ...", "Department"),
    AppField("user.campus", "Home Campus", "Campus reference for approvers", "CampusID_Ref"),
    # Assets
    AppField("asset.id", "Asset ID", "Primary key of an asset", "AssetID"),
    AppField("asset.name", "Asset Name", "", "Asset_Name"),
    AppField("asset.location", "Asset Location", "Location reference", "LocationID_Ref"),
    AppField("asset.model", "Model Number", "", "Model_Number"),
    AppField("asset.serial", "Serial Number", "", "Serial_Number"),
    AppField("asset.install_date", "Install Date", "", "InstallDate"),
    # Vendors
    AppField("vendor.id", "Vendor ID", "Primary key of a vendor", "VendorID"),
    AppField("vendor.company", "Company Name", "", "CompanyName"),
    AppField("vendor.contact", "Contact Name", "", "ContactName"),
    AppField("vendor.email", "Vendor Email", "", "Email"),
    AppField("vendor.phone", "Phone", "", "Phone"),
    AppField("vendor.service_type", "Service Type", "IT or Facilities", "ServiceType"),
    AppField("vendor.status", "Vendor Status", "Pending / Approved", "Status"),
]

# Referenced structurally by ticket and user logic
CRITICAL_FIELDS = frozenset({
    "ticket.id",
    "ticket.comments",
    "ticket.status",
    "user.email",
    "user.role",
})

_BY_ID: Dict[str, AppField] = {f.id: f for f in APP_FIELDS}


def get_app_field(field_id: str) -> Optional[AppField]:
    return _BY_ID.get(field_id)


def is_app_field(field_id: str) -> bool:
    return field_id in _BY_ID


def is_critical(field_id: str) -> bool:
    return field_id in CRITICAL_FIELDS


def categories() -> List[str]:
    """Distinct categories in catalog order."""
    seen: List[str] = []
    for f in APP_FIELDS:
        if f.category not in seen:
            seen.append(f.category)
    return seen


def fields_in_category(category: Optional[str] = None) -> List[AppField]:
    if not category:
        return list(APP_FIELDS)
    return [f for f in APP_FIELDS if f.category == category]
