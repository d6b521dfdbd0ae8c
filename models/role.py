# models/role.py

from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.logging_config import logger
from core.permissions import is_known_permission


def _split_permissions(value: Any) -> List[str]:
    """Accept a list or the comma-separated form a sheet cell holds."""
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(",")
    result: List[str] = []
    for item in value:
        perm = str(item).strip()
        if perm and perm not in result:
            result.append(perm)
    return result


class Role(BaseModel):
    """A named, editable bundle of permissions. The name is the key users reference."""

    name: str = Field(alias="RoleName")
    description: str = Field("", alias="Description")
    permissions: List[str] = Field(default_factory=list, alias="Permissions")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("name", mode="before")
    @classmethod
    def normalize_name(cls, v):
        name = str(v or "").strip()
        if not name:
            raise ValueError("Role name cannot be empty")
        return name

    @field_validator("description", mode="before")
    @classmethod
    def normalize_description(cls, v):
        return str(v or "").strip()

    @field_validator("permissions", mode="before")
    @classmethod
    def validate_permissions(cls, v):
        perms = _split_permissions(v)
        unknown = [p for p in perms if not is_known_permission(p)]
        if unknown:
            raise ValueError(f"Unknown permissions: {', '.join(unknown)}")
        return perms

    # -------------------------------------------------
    # Sheet <-> model
    # -------------------------------------------------
    @classmethod
    def from_sheet(cls, row: Dict[str, Any]) -> "Role":
        """
        Lenient load from the Roles sheet: unknown permission ids are dropped
        (and logged) so one stale cell never locks everyone out.
        """
        perms = _split_permissions(row.get("Permissions"))
        known = [p for p in perms if is_known_permission(p)]
        if len(known) != len(perms):
            dropped = sorted(set(perms) - set(known))
            logger.warning(
                f"Role '{row.get('RoleName')}' has unknown permissions {dropped}; ignoring them"
            )
        return cls(
            name=row.get("RoleName"),
            description=row.get("Description"),
            permissions=known,
        )

    def to_sheet(self) -> Dict[str, Any]:
        return {
            "RoleName": self.name,
            "Description": self.description,
            "Permissions": ",".join(self.permissions),
        }
