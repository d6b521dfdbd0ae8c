# models/field_mapping.py

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.app_fields import is_app_field


# -------------------------------------------------
# Field Mapping (one sheet column -> one app field)
# -------------------------------------------------
class FieldMapping(BaseModel):
    mapping_id: str = Field("", alias="MappingID")
    sheet_name: str = Field(alias="SheetName")
    sheet_header: str = Field(alias="SheetHeader")
    app_field_id: str = Field(alias="AppFieldID")
    description: Optional[str] = Field("", alias="Description")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("mapping_id", mode="before")
    @classmethod
    def normalize_id(cls, v):
        return str(v or "").strip()

    @field_validator("sheet_name", "sheet_header", mode="before")
    @classmethod
    def require_text(cls, v):
        text = str(v or "").strip()
        if not text:
            raise ValueError("Sheet name and column header are required")
        return text

    @field_validator("app_field_id", mode="before")
    @classmethod
    def validate_app_field(cls, v):
        field_id = str(v or "").strip()
        if not is_app_field(field_id):
            raise ValueError(f"Unknown application field: {field_id!r}")
        return field_id

    def to_sheet(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class FieldMappingRead(FieldMapping):
    """Listing entry; critical mappings are flagged for the confirmation gate."""

    is_critical: bool = False


# -------------------------------------------------
# Schema snapshot (sheet name -> ordered headers)
# -------------------------------------------------
class SchemaSnapshot(BaseModel):
    sheets: Dict[str, List[str]] = Field(default_factory=dict)
    fetched_at: datetime = Field(default_factory=datetime.utcnow)

    def columns(self, sheet_name: str) -> List[str]:
        return list(self.sheets.get(sheet_name, []))

    def sheet_names(self) -> List[str]:
        return list(self.sheets.keys())


# -------------------------------------------------
# Add-column result
# -------------------------------------------------
class ColumnResult(BaseModel):
    success: bool
    message: str = ""


class AddColumnRequest(BaseModel):
    header_name: Optional[str] = None
    app_field_id: Optional[str] = None
