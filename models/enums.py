from enum import Enum


class BaseStrEnum(str, Enum):
    """
    Base enum that serializes cleanly to a string
    and provides a .list() method for UI dropdowns.
    """

    def __str__(self):
        return str(self.value)

    @classmethod
    def list(cls):
        return [item.value for item in cls]


# -----------------------------------------------------
# PERMISSION CATEGORY
# -----------------------------------------------------
class PermissionCategory(BaseStrEnum):
    """Groups shown as sections in the role editor."""

    tickets = "Tickets"
    tasks = "Tasks"
    assets = "Assets"
    inventory = "Inventory"
    vendors = "Vendors"
    people = "People"
    docs = "Docs & SOPs"
    system = "System"


# -----------------------------------------------------
# TICKET STATUS
# -----------------------------------------------------
class TicketStatus(BaseStrEnum):
    """Workflow state for a ticket."""

    new = "New"
    pending_approval = "Pending Approval"
    open_for_bid = "Open for Bid"
    assigned = "Assigned"
    completed = "Completed"
    resolved = "Resolved"


# -----------------------------------------------------
# DEPARTMENT
# -----------------------------------------------------
class Department(BaseStrEnum):
    """Ticket category / staff department."""

    it = "IT"
    facilities = "Facilities"
