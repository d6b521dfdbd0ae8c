# core/store.py

"""
In-memory view of the remote spreadsheet's administrative data.

The store holds roles, users, field mappings and the last schema snapshot.
It is only mutated after the matching remote call has succeeded, and a
failed refresh leaves every collection exactly as it was.
"""

from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from fastapi import HTTPException

from core.app_fields import USERS_SHEET
from core.config import settings
from core.errors import BridgeTransportError, handle_domain_error
from core.field_mapping import parse_schema, translate_row
from core.logging_config import logger
from core.sheets_bridge import SheetsBridge, get_sheets_bridge
from models.field_mapping import FieldMapping, SchemaSnapshot
from models.role import Role
from models.user import HelpdeskUser


def _dict_rows(rows: List[Any], kind: str) -> List[Dict[str, Any]]:
    """Drop anything that is not a sheet row object."""
    kept = []
    for row in rows:
        if not isinstance(row, dict):
            logger.warning(f"Skipping malformed {kind} row {row!r}")
            continue
        kept.append(row)
    return kept


class AdminStore:
    def __init__(self, bridge: SheetsBridge, max_age_seconds: int = 300):
        self.bridge = bridge
        self.max_age_seconds = max_age_seconds

        self.roles: Dict[str, Role] = {}
        self.mappings: List[FieldMapping] = []
        self.users: List[HelpdeskUser] = []
        self.schema: Optional[SchemaSnapshot] = None
        self.loaded_at: Optional[datetime] = None

    # -----------------------------------------------------
    # Loading
    # -----------------------------------------------------
    def refresh(self) -> None:
        """
        Reload roles, mappings and users from the remote store.
        Raises BridgeTransportError; on failure nothing is replaced.
        """
        roles: Dict[str, Role] = {}
        for row in _dict_rows(self.bridge.list_roles(), "role"):
            try:
                role = Role.from_sheet(row)
            except ValueError as e:
                logger.warning(f"Skipping invalid role row {row!r}: {e}")
                continue
            roles[role.name] = role

        mappings: List[FieldMapping] = []
        for row in _dict_rows(self.bridge.list_mappings(), "mapping"):
            try:
                mappings.append(FieldMapping.model_validate(row))
            except ValueError as e:
                logger.warning(f"Skipping invalid mapping row {row!r}: {e}")

        users: List[HelpdeskUser] = []
        for row in _dict_rows(self.bridge.list_rows(USERS_SHEET), "user"):
            user = HelpdeskUser.from_record(translate_row(mappings, USERS_SHEET, row))
            if user.email:
                users.append(user)

        self.roles = roles
        self.mappings = mappings
        self.users = users
        self.loaded_at = datetime.utcnow()
        logger.info(
            f"Store refreshed: {len(roles)} roles, {len(mappings)} mappings, {len(users)} users"
        )

    def refresh_schema(self) -> SchemaSnapshot:
        """Raises SchemaError / BridgeTransportError; the prior snapshot survives failure."""
        snapshot = parse_schema(self.bridge.fetch_schema())
        self.schema = snapshot
        return snapshot

    def is_stale(self) -> bool:
        if self.loaded_at is None:
            return True
        return datetime.utcnow() - self.loaded_at >= timedelta(seconds=self.max_age_seconds)

    def ensure_fresh(self) -> None:
        if self.is_stale():
            self.refresh()

    # -----------------------------------------------------
    # Lookups
    # -----------------------------------------------------
    def find_user(self, email: Optional[str]) -> Optional[HelpdeskUser]:
        if not email:
            return None
        wanted = email.strip().lower()
        return next((u for u in self.users if u.email == wanted), None)

    def get_role(self, name: str) -> Optional[Role]:
        return self.roles.get(name)

    def users_with_role(self, role_name: str) -> List[HelpdeskUser]:
        return [u for u in self.users if role_name in u.roles]

    def get_mapping(self, mapping_id: str) -> Optional[FieldMapping]:
        return next((m for m in self.mappings if m.mapping_id == mapping_id), None)

    def sheet_records(self, sheet_name: str) -> List[Dict[str, Any]]:
        """Raw rows of a sheet translated to {app_field_id: value}."""
        return [
            translate_row(self.mappings, sheet_name, row)
            for row in _dict_rows(self.bridge.list_rows(sheet_name), sheet_name)
        ]

    # -----------------------------------------------------
    # Local apply (after the remote call succeeded)
    # -----------------------------------------------------
    def put_role(self, role: Role) -> None:
        self.roles[role.name] = role

    def remove_role(self, name: str) -> None:
        self.roles.pop(name, None)

    def put_mapping(self, mapping: FieldMapping) -> None:
        for idx, existing in enumerate(self.mappings):
            if existing.mapping_id == mapping.mapping_id:
                self.mappings[idx] = mapping
                return
        self.mappings.append(mapping)

    def remove_mapping(self, mapping_id: str) -> None:
        self.mappings = [m for m in self.mappings if m.mapping_id != mapping_id]


# ============================================================
# Process-wide store
# ============================================================

_store: Optional[AdminStore] = None


def get_store() -> AdminStore:
    """
    FastAPI dependency. Builds the store on first use and reloads it once
    it is older than STORE_MAX_AGE_SECONDS. A failed reload keeps serving
    the previous data; a failed first load is a 502.
    """
    global _store

    if _store is None:
        bridge = get_sheets_bridge()
        if bridge is None:
            raise HTTPException(500, "Spreadsheet bridge not configured")
        _store = AdminStore(bridge, max_age_seconds=settings.STORE_MAX_AGE_SECONDS)

    try:
        _store.ensure_fresh()
    except BridgeTransportError as e:
        if _store.loaded_at is None:
            raise handle_domain_error(e, "Failed to load help desk data")
        logger.warning(f"Store refresh failed, serving cached data: {e.message}")

    return _store


def reset_store() -> None:
    """Drop the process-wide store (next request rebuilds it)."""
    global _store
    _store = None
