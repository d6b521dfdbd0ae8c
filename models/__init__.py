# -------------------------
# Enums
# -------------------------
from .enums import (
    BaseStrEnum,
    PermissionCategory,
    TicketStatus,
    Department,
)

# Role (models.role) is imported directly: it reads the permission
# catalog in core.permissions, which itself imports models.enums.

# -------------------------
# Field Mapping Models
# -------------------------
from .field_mapping import (
    FieldMapping,
    FieldMappingRead,
    SchemaSnapshot,
    ColumnResult,
    AddColumnRequest,
)

# -------------------------
# User Models
# -------------------------
from .user import (
    HelpdeskUser,
    UserRead,
    AccessProfile,
)

# -------------------------
# Ticket Models
# -------------------------
from .ticket import (
    Ticket,
    TicketComment,
)

__all__ = [
    # enums
    "BaseStrEnum",
    "PermissionCategory",
    "TicketStatus",
    "Department",

    # field mappings
    "FieldMapping",
    "FieldMappingRead",
    "SchemaSnapshot",
    "ColumnResult",
    "AddColumnRequest",

    # users
    "HelpdeskUser",
    "UserRead",
    "AccessProfile",

    # tickets
    "Ticket",
    "TicketComment",
]
