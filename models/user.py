# models/user.py

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


def split_roles(value: Any) -> List[str]:
    """'Approver, Chair' -> ['Approver', 'Chair'] (order kept, blanks dropped)."""
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(",")
    roles: List[str] = []
    for item in value:
        name = str(item).strip()
        if name and name not in roles:
            roles.append(name)
    return roles


# ===============================================================
# USERS SHEET RECORD
# ===============================================================

class HelpdeskUser(BaseModel):
    """
    One row of the Users sheet after column translation.
    The first role is the primary one shown as the user's type.
    """
    user_id: Optional[str] = None
    email: str
    name: Optional[str] = None
    roles: List[str] = Field(default_factory=list)
    department: Optional[str] = None
    campus: Optional[str] = None

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return str(v or "").strip().lower()

    @field_validator("roles", mode="before")
    @classmethod
    def parse_roles(cls, v):
        return split_roles(v)

    @property
    def primary_role(self) -> Optional[str]:
        return self.roles[0] if self.roles else None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "HelpdeskUser":
        return cls(
            user_id=_text(record.get("user.id")),
            email=record.get("user.email"),
            name=_text(record.get("user.name")),
            roles=record.get("user.role"),
            department=_text(record.get("user.department")),
            campus=_text(record.get("user.campus")),
        )


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


# ===============================================================
# API RESPONSES
# ===============================================================

class UserRead(BaseModel):
    user_id: Optional[str] = None
    email: str
    name: Optional[str] = None
    roles: List[str] = []
    primary_role: Optional[str] = None
    department: Optional[str] = None
    campus: Optional[str] = None

    @classmethod
    def from_user(cls, user: HelpdeskUser) -> "UserRead":
        return cls(primary_role=user.primary_role, **user.model_dump())


class AccessProfile(BaseModel):
    """What the front end needs to render tabs and buttons for the caller."""
    user: UserRead
    permissions: List[str]
    views: List[str]
    actions: List[str]
