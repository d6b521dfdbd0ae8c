# routers/mappings.py

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from core.app_fields import AppField
from core.errors import DOMAIN_ERRORS, handle_domain_error
from core.field_mapping import FieldMappingEngine
from core.logging_config import logger
from core.permission_helpers import requires_permission
from core.permissions import Permission
from core.store import AdminStore, get_store
from models.field_mapping import (
    AddColumnRequest,
    FieldMapping,
    FieldMappingRead,
    SchemaSnapshot,
)

router = APIRouter(
    prefix="/mappings",
    tags=["Field Mappings"],
    dependencies=[Depends(requires_permission(Permission.MANAGE_MAPPINGS))],
)


def get_mapping_engine(store: AdminStore = Depends(get_store)) -> FieldMappingEngine:
    return FieldMappingEngine(store)


def _field_dict(field: AppField) -> dict:
    return {
        "id": field.id,
        "label": field.label,
        "category": field.category,
        "description": field.description,
        "is_critical": FieldMappingEngine.is_critical(field.id),
    }


def confirmation_required(detail: str) -> HTTPException:
    return HTTPException(
        status_code=428,
        detail=f"{detail} Repeat the request with confirm=true to proceed.",
    )


# ============================================================
# SCHEMA (reload from the spreadsheet)
# ============================================================
@router.get("/schema", response_model=SchemaSnapshot)
def fetch_schema(engine: FieldMappingEngine = Depends(get_mapping_engine)):
    try:
        return engine.fetch_schema()
    except DOMAIN_ERRORS as e:
        raise handle_domain_error(e, "Failed to load schema")


# ============================================================
# LIST MAPPINGS
# ============================================================
@router.get("", response_model=List[FieldMappingRead])
def list_mappings(
    sheet: Optional[str] = Query(None, description="Only mappings for this sheet"),
    engine: FieldMappingEngine = Depends(get_mapping_engine),
):
    return engine.list_mappings(sheet)


# ============================================================
# SAVE MAPPING (create when MappingID is empty)
# ============================================================
@router.post("", response_model=FieldMapping)
def save_mapping(
    payload: FieldMapping,
    confirm: bool = Query(False, description="Required when changing a critical mapping"),
    engine: FieldMappingEngine = Depends(get_mapping_engine),
):
    if engine.requires_confirmation(payload) and not confirm:
        raise confirmation_required(
            f"Mapping {payload.mapping_id} is used by core ticket/user logic."
        )

    try:
        return engine.save_mapping(payload)
    except DOMAIN_ERRORS as e:
        raise handle_domain_error(e, "Failed to save mapping")


# ============================================================
# DELETE MAPPING
# ============================================================
@router.delete("/{mapping_id}")
def delete_mapping(
    mapping_id: str,
    confirm: bool = Query(False, description="Required when deleting a critical mapping"),
    engine: FieldMappingEngine = Depends(get_mapping_engine),
):
    existing = engine.store.get_mapping(mapping_id)
    if existing is None:
        raise HTTPException(404, f"Mapping {mapping_id} not found")

    if engine.is_critical(existing.app_field_id) and not confirm:
        raise confirmation_required(
            f"'{existing.app_field_id}' is a critical field."
        )

    try:
        engine.delete_field_mapping(mapping_id)
    except DOMAIN_ERRORS as e:
        raise handle_domain_error(e, "Failed to delete mapping")

    return {"success": True, "deleted": mapping_id}


# ============================================================
# APP FIELD CATALOG
# ============================================================
@router.get("/categories", response_model=List[str])
def list_categories():
    return FieldMappingEngine.categories()


@router.get("/fields")
def list_fields(category: Optional[str] = Query(None)):
    return [_field_dict(f) for f in FieldMappingEngine.fields_in_category(category)]


@router.get("/unmapped-fields")
def list_unmapped_fields(
    category: Optional[str] = Query(None),
    engine: FieldMappingEngine = Depends(get_mapping_engine),
):
    return [_field_dict(f) for f in engine.unmapped_app_fields(category)]


# ============================================================
# PER-SHEET: UNUSED COLUMNS
# ============================================================
@router.get("/{sheet_name}/unmapped-columns", response_model=List[str])
def list_unmapped_columns(
    sheet_name: str,
    engine: FieldMappingEngine = Depends(get_mapping_engine),
):
    if engine.store.schema is None:
        try:
            engine.fetch_schema()
        except DOMAIN_ERRORS as e:
            raise handle_domain_error(e, "Failed to load schema")

    return engine.unmapped_columns(sheet_name)


# ============================================================
# PER-SHEET: ADD COLUMN
# ============================================================
@router.post("/{sheet_name}/columns")
def add_column(
    sheet_name: str,
    payload: AddColumnRequest,
    engine: FieldMappingEngine = Depends(get_mapping_engine),
):
    """
    Either `header_name` (plain column) or `app_field_id`
    (column named after the field, then mapped to it).
    """
    if not payload.header_name and not payload.app_field_id:
        raise HTTPException(400, "Provide header_name or app_field_id")

    try:
        if payload.app_field_id:
            result, mapping = engine.create_column_for_field(sheet_name, payload.app_field_id)
        else:
            result, mapping = engine.add_column_to_sheet(sheet_name, payload.header_name), None
    except DOMAIN_ERRORS as e:
        raise handle_domain_error(e, "Failed to add column")

    return {
        "success": result.success,
        "message": result.message,
        "mapping": mapping.model_dump(by_alias=True) if mapping else None,
    }


# ============================================================
# PER-SHEET: SMART MATCH
# ============================================================
@router.post("/{sheet_name}/smart-match")
def smart_match(
    sheet_name: str,
    engine: FieldMappingEngine = Depends(get_mapping_engine),
):
    try:
        created = engine.smart_match(sheet_name)
    except DOMAIN_ERRORS as e:
        raise handle_domain_error(e, "Smart match failed")

    if created == 0:
        logger.info(f"Smart match found nothing new on {sheet_name}")

    return {"success": True, "created": created}
