# core/field_mapping.py

"""
Field mapping engine.

Binds spreadsheet columns (per sheet) to application field ids and keeps
two claims unique:

* a column header is mapped at most once within its sheet;
* an application field is mapped at most once across all sheets.

Saves that would break either claim are rejected with MappingConflict
before anything is sent to the remote store. Critical mappings are only
flagged here; the confirmation step belongs to the caller.
"""

import re
import uuid
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional, Set, Tuple

from core import app_fields
from core.app_fields import APP_FIELDS, CATEGORY_SHEETS, AppField, get_app_field
from core.errors import (
    BridgeTransportError,
    InvariantViolation,
    MappingConflict,
    MappingNotFound,
    SchemaError,
)
from core.logging_config import logger
from models.field_mapping import ColumnResult, FieldMapping, FieldMappingRead, SchemaSnapshot

if TYPE_CHECKING:
    from core.store import AdminStore


_NON_ALNUM = re.compile(r"[^a-z0-9]")


def normalize_header(value: Any) -> str:
    """'Ticket_Title ' -> 'tickettitle'"""
    return _NON_ALNUM.sub("", str(value or "").lower())


# ============================================================
# Schema parsing
# ============================================================

def parse_schema(raw: Any) -> SchemaSnapshot:
    """Validate a {sheet: [headers]} response. Blank headers are skipped."""
    if not isinstance(raw, dict):
        raise SchemaError("Invalid schema received from server.")

    sheets: Dict[str, List[str]] = {}
    for name, headers in raw.items():
        if not isinstance(headers, list):
            raise SchemaError(f"Invalid column list for sheet {name!r}.")
        sheets[str(name)] = [str(h).strip() for h in headers if str(h or "").strip()]

    return SchemaSnapshot(sheets=sheets)


# ============================================================
# Row translation
# ============================================================

def _fallback_fields(mappings: Iterable[FieldMapping], sheet_name: str) -> List[AppField]:
    """Unmapped fields whose home sheet is this one; they use their default header."""
    mappings = list(mappings)
    claimed = {m.app_field_id for m in mappings}
    taken_headers = {m.sheet_header for m in mappings if m.sheet_name == sheet_name}
    return [
        f for f in APP_FIELDS
        if f.id not in claimed
        and f.default_header
        and f.default_header not in taken_headers
        and CATEGORY_SHEETS.get(f.category) == sheet_name
    ]


def translate_row(
    mappings: List[FieldMapping], sheet_name: str, row: Dict[str, Any]
) -> Dict[str, Any]:
    """Raw sheet row -> {app_field_id: value}."""
    record: Dict[str, Any] = {}

    for m in mappings:
        if m.sheet_name == sheet_name and m.sheet_header in row:
            record[m.app_field_id] = row[m.sheet_header]

    for f in _fallback_fields(mappings, sheet_name):
        if f.default_header in row:
            record[f.id] = row[f.default_header]

    return record


def to_sheet_row(
    mappings: List[FieldMapping], sheet_name: str, record: Dict[str, Any]
) -> Dict[str, Any]:
    """{app_field_id: value} -> {sheet_header: value}; unknown fields are dropped."""
    headers: Dict[str, str] = {
        m.app_field_id: m.sheet_header for m in mappings if m.sheet_name == sheet_name
    }
    for f in _fallback_fields(mappings, sheet_name):
        headers[f.id] = f.default_header

    return {headers[field_id]: value for field_id, value in record.items() if field_id in headers}


# ============================================================
# Engine
# ============================================================

class FieldMappingEngine:
    def __init__(self, store: "AdminStore"):
        self.store = store

    # -----------------------------------------------------
    # Policy
    # -----------------------------------------------------
    @staticmethod
    def is_critical(field_id: str) -> bool:
        return app_fields.is_critical(field_id)

    @staticmethod
    def categories() -> List[str]:
        return app_fields.categories()

    @staticmethod
    def fields_in_category(category: Optional[str] = None) -> List[AppField]:
        return app_fields.fields_in_category(category)

    def requires_confirmation(self, mapping: FieldMapping) -> bool:
        """
        True when an existing mapping's binding changes and either the old
        or the new target is critical. Description-only edits never need it.
        """
        existing = self.store.get_mapping(mapping.mapping_id) if mapping.mapping_id else None
        if existing is None:
            return False

        rebound = (
            existing.app_field_id != mapping.app_field_id
            or existing.sheet_name != mapping.sheet_name
            or existing.sheet_header != mapping.sheet_header
        )
        return rebound and (
            self.is_critical(existing.app_field_id) or self.is_critical(mapping.app_field_id)
        )

    # -----------------------------------------------------
    # Derived state
    # -----------------------------------------------------
    def columns(self, sheet_name: str) -> List[str]:
        if self.store.schema is None:
            return []
        return self.store.schema.columns(sheet_name)

    def mappings_for(self, sheet_name: str) -> List[FieldMapping]:
        return [m for m in self.store.mappings if m.sheet_name == sheet_name]

    def used_columns(self, sheet_name: str) -> Set[str]:
        return {m.sheet_header for m in self.mappings_for(sheet_name)}

    def used_fields(self) -> Set[str]:
        return {m.app_field_id for m in self.store.mappings}

    def unmapped_columns(self, sheet_name: str) -> List[str]:
        used = self.used_columns(sheet_name)
        return [c for c in self.columns(sheet_name) if c not in used]

    def unmapped_app_fields(self, category: Optional[str] = None) -> List[AppField]:
        used = self.used_fields()
        return [f for f in self.fields_in_category(category) if f.id not in used]

    def list_mappings(self, sheet_name: Optional[str] = None) -> List[FieldMappingRead]:
        source = self.mappings_for(sheet_name) if sheet_name else self.store.mappings
        return [
            FieldMappingRead(**m.model_dump(), is_critical=self.is_critical(m.app_field_id))
            for m in source
        ]

    # -----------------------------------------------------
    # Schema
    # -----------------------------------------------------
    def fetch_schema(self) -> SchemaSnapshot:
        try:
            return self.store.refresh_schema()
        except BridgeTransportError as e:
            logger.error(f"Mapping schema load failed: {e.message}")
            raise

    # -----------------------------------------------------
    # Save / delete
    # -----------------------------------------------------
    def find_conflicts(self, mapping: FieldMapping) -> List[FieldMapping]:
        others = [
            m for m in self.store.mappings
            if not mapping.mapping_id or m.mapping_id != mapping.mapping_id
        ]
        return [
            m for m in others
            if m.app_field_id == mapping.app_field_id
            or (m.sheet_name == mapping.sheet_name and m.sheet_header == mapping.sheet_header)
        ]

    def save_mapping(self, mapping: FieldMapping) -> FieldMapping:
        """
        Create (empty MappingID) or update a mapping.
        Raises MappingConflict when another mapping already claims the
        field or the column; the remote store is not called in that case.
        """
        conflicts = self.find_conflicts(mapping)
        if conflicts:
            reasons = []
            for m in conflicts:
                if m.app_field_id == mapping.app_field_id:
                    reasons.append(
                        f"field '{m.app_field_id}' is already mapped to {m.sheet_name}.{m.sheet_header}"
                    )
                else:
                    reasons.append(
                        f"column '{m.sheet_header}' in {m.sheet_name} is already mapped to '{m.app_field_id}'"
                    )
            raise MappingConflict(
                "Mapping rejected: " + "; ".join(reasons),
                conflicting_ids=[m.mapping_id for m in conflicts],
            )

        if not mapping.mapping_id:
            mapping = mapping.model_copy(update={"mapping_id": f"MAP-{uuid.uuid4().hex[:8]}"})

        result = self.store.bridge.save_mapping(mapping.to_sheet())

        # The store may hand back its own id
        if isinstance(result, dict) and result.get("MappingID"):
            mapping = mapping.model_copy(update={"mapping_id": str(result["MappingID"])})

        self.store.put_mapping(mapping)
        logger.info(
            f"Saved mapping {mapping.mapping_id}: {mapping.sheet_name}.{mapping.sheet_header} -> {mapping.app_field_id}"
        )
        return mapping

    def delete_field_mapping(self, mapping_id: str) -> FieldMapping:
        existing = self.store.get_mapping(mapping_id)
        if existing is None:
            raise MappingNotFound(f"Mapping {mapping_id} not found")

        if self.is_critical(existing.app_field_id):
            logger.warning(
                f"Deleting critical mapping {mapping_id} ({existing.app_field_id} <- "
                f"{existing.sheet_name}.{existing.sheet_header})"
            )

        self.store.bridge.delete_mapping(mapping_id)
        self.store.remove_mapping(mapping_id)
        return existing

    # -----------------------------------------------------
    # Columns
    # -----------------------------------------------------
    def add_column_to_sheet(self, sheet_name: str, header_name: str) -> ColumnResult:
        """
        Ask the remote store for a new physical column. A name collision
        comes back as success=False, not as an exception.
        """
        header = (header_name or "").strip()
        if not header:
            raise InvariantViolation("Column header cannot be empty")

        if self.store.schema is not None:
            if sheet_name not in self.store.schema.sheets:
                raise InvariantViolation(f"Unknown sheet: {sheet_name}")
            if header in self.store.schema.columns(sheet_name):
                return ColumnResult(
                    success=False,
                    message=f"Column '{header}' already exists in {sheet_name}",
                )

        outcome = self.store.bridge.add_column(sheet_name, header)
        result = ColumnResult(**outcome)
        if not result.success:
            logger.info(f"Column {sheet_name}.{header} not created: {result.message}")
            return result

        try:
            self.fetch_schema()
        except BridgeTransportError:
            # Column exists remotely; keep the local snapshot in step
            if self.store.schema is not None:
                self.store.schema.sheets.setdefault(sheet_name, []).append(header)

        return result

    def create_column_for_field(
        self, sheet_name: str, field_id: str
    ) -> Tuple[ColumnResult, Optional[FieldMapping]]:
        """
        Two separate calls: create the column, then map it. If the second
        call fails the column is left unmapped and shows up in
        unmapped_columns().
        """
        field = get_app_field(field_id)
        if field is None:
            raise InvariantViolation(f"Unknown application field: {field_id}")
        if field.id in self.used_fields():
            raise MappingConflict(f"Field '{field.id}' is already mapped")

        header = field.label.replace(" ", "_")
        result = self.add_column_to_sheet(sheet_name, header)
        if not result.success:
            return result, None

        mapping = self.save_mapping(
            FieldMapping(
                sheet_name=sheet_name,
                sheet_header=header,
                app_field_id=field.id,
                description=field.description,
            )
        )
        return result, mapping

    # -----------------------------------------------------
    # Auto-matching
    # -----------------------------------------------------
    @staticmethod
    def _best_match(normalized_column: str, candidates: List[AppField]) -> Optional[AppField]:
        rules = (
            lambda f: normalize_header(f.label) == normalized_column,
            lambda f: normalize_header(f.suffix) == normalized_column,
            lambda f: bool(normalize_header(f.suffix))
            and normalize_header(f.suffix) in normalized_column,
        )
        for rule in rules:
            for f in candidates:
                if rule(f):
                    return f
        return None

    def smart_match(self, sheet_name: str) -> int:
        """
        Map every unmapped column of a sheet to the best unmapped field.
        Each match is saved immediately. Returns the number created.
        """
        if self.store.schema is None:
            self.fetch_schema()

        candidates = self.unmapped_app_fields()
        created = 0

        for column in self.unmapped_columns(sheet_name):
            normalized = normalize_header(column)
            if not normalized:
                continue

            field = self._best_match(normalized, candidates)
            if field is None:
                continue

            try:
                self.save_mapping(
                    FieldMapping(
                        sheet_name=sheet_name,
                        sheet_header=column,
                        app_field_id=field.id,
                        description="Auto-matched",
                    )
                )
            except Exception:
                # Earlier matches are already saved remotely
                logger.error(
                    f"Smart match on {sheet_name} stopped at {column!r} after {created} new mapping(s)"
                )
                raise
            candidates.remove(field)
            created += 1

        logger.info(f"Smart match on {sheet_name}: {created} new mapping(s)")
        return created

    # -----------------------------------------------------
    # Translation
    # -----------------------------------------------------
    def translate_row(self, sheet_name: str, row: Dict[str, Any]) -> Dict[str, Any]:
        return translate_row(self.store.mappings, sheet_name, row)

    def to_sheet_row(self, sheet_name: str, record: Dict[str, Any]) -> Dict[str, Any]:
        return to_sheet_row(self.store.mappings, sheet_name, record)
