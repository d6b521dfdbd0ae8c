# core/permissions.py

from typing import Dict, List

from models.enums import BaseStrEnum, PermissionCategory


# ============================================
# PERMISSION CATALOG (static, not user-editable)
# ============================================
class Permission(BaseStrEnum):
    # Tickets
    VIEW_DASHBOARD = "VIEW_DASHBOARD"
    SUBMIT_TICKETS = "SUBMIT_TICKETS"
    VIEW_MY_TICKETS = "VIEW_MY_TICKETS"
    VIEW_DEPT_TICKETS = "VIEW_DEPT_TICKETS"
    VIEW_CAMPUS_TICKETS = "VIEW_CAMPUS_TICKETS"
    ASSIGN_TICKETS = "ASSIGN_TICKETS"
    APPROVE_TICKETS = "APPROVE_TICKETS"
    CLAIM_TICKETS = "CLAIM_TICKETS"
    MERGE_TICKETS = "MERGE_TICKETS"

    # Tasks
    VIEW_TASKS = "VIEW_TASKS"
    MANAGE_TASKS = "MANAGE_TASKS"

    # Assets
    MANAGE_ASSETS = "MANAGE_ASSETS"
    MANAGE_SCHEDULES = "MANAGE_SCHEDULES"

    # Inventory
    VIEW_INVENTORY = "VIEW_INVENTORY"
    MANAGE_INVENTORY = "MANAGE_INVENTORY"

    # Vendors
    VIEW_ALL_BIDS = "VIEW_ALL_BIDS"
    MANAGE_VENDORS = "MANAGE_VENDORS"

    # People
    MANAGE_USERS = "MANAGE_USERS"
    APPROVE_ACCOUNTS = "APPROVE_ACCOUNTS"

    # Docs & SOPs
    MANAGE_SOPS = "MANAGE_SOPS"

    # System
    MANAGE_ROLES = "MANAGE_ROLES"
    MANAGE_SETTINGS = "MANAGE_SETTINGS"
    MANAGE_MAPPINGS = "MANAGE_MAPPINGS"


PERMISSION_CATEGORIES: Dict[PermissionCategory, List[Permission]] = {
    PermissionCategory.tickets: [
        Permission.VIEW_DASHBOARD,
        Permission.SUBMIT_TICKETS,
        Permission.VIEW_MY_TICKETS,
        Permission.VIEW_DEPT_TICKETS,
        Permission.VIEW_CAMPUS_TICKETS,
        Permission.ASSIGN_TICKETS,
        Permission.APPROVE_TICKETS,
        Permission.CLAIM_TICKETS,
        Permission.MERGE_TICKETS,
    ],
    PermissionCategory.tasks: [Permission.VIEW_TASKS, Permission.MANAGE_TASKS],
    PermissionCategory.assets: [Permission.MANAGE_ASSETS, Permission.MANAGE_SCHEDULES],
    PermissionCategory.inventory: [Permission.VIEW_INVENTORY, Permission.MANAGE_INVENTORY],
    PermissionCategory.vendors: [Permission.VIEW_ALL_BIDS, Permission.MANAGE_VENDORS],
    PermissionCategory.people: [Permission.MANAGE_USERS, Permission.APPROVE_ACCOUNTS],
    PermissionCategory.docs: [Permission.MANAGE_SOPS],
    PermissionCategory.system: [
        Permission.MANAGE_ROLES,
        Permission.MANAGE_SETTINGS,
        Permission.MANAGE_MAPPINGS,
    ],
}

KNOWN_PERMISSIONS = frozenset(Permission.list())


def is_known_permission(permission: str) -> bool:
    return permission in KNOWN_PERMISSIONS


# ============================================
# SYSTEM-RESERVED ROLE
# ============================================
SYSTEM_ROLE_NAME = "Super Admin"


# ============================================
# DEFAULT ROLE BUNDLES (seed data)
# ============================================
DEFAULT_ROLES: Dict[str, dict] = {

    # =====================================================
    # SUPER ADMIN: everything, including role management
    # =====================================================
    SYSTEM_ROLE_NAME: {
        "description": "Full system access including Role Management.",
        "permissions": Permission.list(),
    },

    # =====================================================
    # ADMIN: everything except role editing
    # =====================================================
    "Admin": {
        "description": "System administrator, limited role editing.",
        "permissions": [
            "VIEW_DASHBOARD", "SUBMIT_TICKETS", "VIEW_MY_TICKETS", "VIEW_DEPT_TICKETS",
            "VIEW_ALL_BIDS",
            "MANAGE_ASSETS", "MANAGE_USERS", "MANAGE_VENDORS", "MANAGE_SETTINGS",
            "MANAGE_SOPS", "MANAGE_SCHEDULES", "MANAGE_MAPPINGS",
            "ASSIGN_TICKETS", "APPROVE_TICKETS", "MERGE_TICKETS",
        ],
    },

    # =====================================================
    # BOARD: oversight and vendor approval
    # =====================================================
    "Board": {
        "description": "Oversight and Vendor approval.",
        "permissions": [
            "VIEW_DASHBOARD", "VIEW_ALL_BIDS", "MANAGE_VENDORS", "MANAGE_ASSETS", "MANAGE_USERS",
        ],
    },

    # =====================================================
    # CHAIR: department head
    # =====================================================
    "Chair": {
        "description": "Department Head.",
        "permissions": [
            "VIEW_DASHBOARD", "SUBMIT_TICKETS", "VIEW_MY_TICKETS", "VIEW_DEPT_TICKETS",
            "VIEW_ALL_BIDS",
            "MANAGE_ASSETS", "MANAGE_VENDORS", "MANAGE_SOPS", "MANAGE_SCHEDULES",
            "ASSIGN_TICKETS", "MERGE_TICKETS",
        ],
    },

    # =====================================================
    # APPROVER: principal or campus lead
    # =====================================================
    "Approver": {
        "description": "Principal or Campus Lead.",
        "permissions": [
            "VIEW_DASHBOARD", "SUBMIT_TICKETS", "VIEW_MY_TICKETS", "VIEW_CAMPUS_TICKETS",
            "VIEW_ALL_BIDS",
            "APPROVE_TICKETS", "ASSIGN_TICKETS", "MERGE_TICKETS",
        ],
    },

    # =====================================================
    # TECH
    # =====================================================
    "Tech": {
        "description": "Technician.",
        "permissions": [
            "VIEW_DASHBOARD", "SUBMIT_TICKETS", "VIEW_MY_TICKETS", "CLAIM_TICKETS",
            "MANAGE_ASSETS", "MANAGE_SOPS",
        ],
    },

    # =====================================================
    # STAFF
    # =====================================================
    "Staff": {
        "description": "Standard employee.",
        "permissions": ["VIEW_DASHBOARD", "SUBMIT_TICKETS", "VIEW_MY_TICKETS"],
    },

    # =====================================================
    # PARENT: public tickets only
    # =====================================================
    "Parent": {
        "description": "External user.",
        "permissions": ["VIEW_DASHBOARD"],
    },
}


# ============================================
# VIEW / ACTION VISIBILITY
# ============================================
# Each entry is visible when the user holds ANY of the listed permissions.
VIEW_RULES: Dict[str, List[str]] = {
    "dashboard": ["VIEW_DASHBOARD"],
    "new_ticket": ["SUBMIT_TICKETS"],
    "tasks": ["VIEW_TASKS", "MANAGE_TASKS"],
    "operations": ["MANAGE_SOPS", "MANAGE_SCHEDULES"],
    "assets": ["MANAGE_ASSETS"],
    "inventory": ["VIEW_INVENTORY", "MANAGE_INVENTORY"],
    "vendors": ["MANAGE_VENDORS", "VIEW_ALL_BIDS"],
    "users": ["MANAGE_USERS", "APPROVE_ACCOUNTS"],
    "roles": ["MANAGE_ROLES"],
    "mapping": ["MANAGE_MAPPINGS"],
    "settings": ["MANAGE_SETTINGS"],
}

ACTION_RULES: Dict[str, List[str]] = {
    "ticket.approve": ["APPROVE_TICKETS"],
    "ticket.assign": ["ASSIGN_TICKETS"],
    "ticket.claim": ["CLAIM_TICKETS"],
    "ticket.merge": ["MERGE_TICKETS"],
    "ticket.toggle_public": ["ASSIGN_TICKETS", "APPROVE_TICKETS"],
    "ticket.create_subtask": ["MANAGE_TASKS", "ASSIGN_TICKETS"],
    "bid.accept": ["MANAGE_VENDORS", "APPROVE_TICKETS"],
    "sop.edit": ["MANAGE_SOPS"],
    "schedule.edit": ["MANAGE_SCHEDULES"],
    "account_request.review": ["APPROVE_ACCOUNTS", "MANAGE_USERS"],
}
