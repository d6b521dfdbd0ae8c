# core/sheets_bridge.py

import json
from typing import Any, Dict, List, Optional

import requests

from core.config import settings
from core.errors import BridgeRejected, BridgeTransportError
from core.logging_config import logger


# ============================================================
# Apps Script web-app bridge
# ============================================================
#
# Every read and write against the spreadsheet goes through one
# endpoint. Request:
#     POST {"function": "<name>", "args": [...], "token": "..."}
# Response:
#     {"result": <value>}     on success
#     {"error": "<message>"}  when the script threw
# ============================================================


def _decode(value: Any) -> Any:
    """Decode string results that carry JSON, like google.script.run callers did."""
    if isinstance(value, str):
        stripped = value.strip()
        if stripped.startswith("{") or stripped.startswith("["):
            try:
                return json.loads(stripped)
            except ValueError:
                return value
    return value


def _require_success(function: str, result: Any) -> Any:
    """
    Raise BridgeRejected when a write resolved with success: false.
    Bare booleans are accepted as success flags.
    """
    if result is False:
        raise BridgeRejected(f"{function} reported failure", function)

    if isinstance(result, dict) and result.get("success") is False:
        message = result.get("message") or f"{function} reported failure"
        raise BridgeRejected(str(message), function)

    return result


def _require_list(function: str, result: Any) -> List[Dict[str, Any]]:
    """
    List reads must resolve to a JSON array. A failure envelope or any
    other shape is a transport error so callers can retry or fall back.
    """
    if result is None:
        return []

    if isinstance(result, dict) and result.get("success") is False:
        message = result.get("message") or "reported failure"
        raise BridgeTransportError(f"{function}: {message}", function)

    if not isinstance(result, list):
        raise BridgeTransportError(
            f"{function}: expected a list, got {type(result).__name__}", function
        )

    return result


class SheetsBridge:
    def __init__(
        self,
        url: str,
        token: Optional[str] = None,
        timeout: float = 15.0,
        session: Optional[requests.Session] = None,
    ):
        self.url = url
        self.token = token
        self.timeout = timeout
        self.session = session or requests.Session()

    # -----------------------------------------------------
    # Generic call
    # -----------------------------------------------------
    def call(self, function: str, *args: Any) -> Any:
        payload = {"function": function, "args": list(args)}
        if self.token:
            payload["token"] = self.token

        try:
            response = self.session.post(self.url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"Bridge call {function} failed: {e}")
            raise BridgeTransportError(f"{function}: {e}", function) from e

        if response.status_code >= 400:
            logger.error(f"Bridge call {function} returned HTTP {response.status_code}")
            raise BridgeTransportError(
                f"{function}: HTTP {response.status_code}", function
            )

        try:
            body = response.json()
        except ValueError as e:
            raise BridgeTransportError(f"{function}: response was not JSON", function) from e

        if not isinstance(body, dict):
            raise BridgeTransportError(f"{function}: unexpected response shape", function)

        if body.get("error"):
            logger.error(f"Bridge script error in {function}: {body['error']}")
            raise BridgeTransportError(f"{function}: {body['error']}", function)

        return _decode(body.get("result"))

    # -----------------------------------------------------
    # Schema + mappings
    # -----------------------------------------------------
    def fetch_schema(self) -> Any:
        # Shape is validated by the mapping engine
        return self.call("getSheetSchema")

    def list_mappings(self) -> List[Dict[str, Any]]:
        return _require_list("getFieldMappings", self.call("getFieldMappings"))

    def save_mapping(self, row: Dict[str, Any]) -> Any:
        return _require_success("saveFieldMapping", self.call("saveFieldMapping", row))

    def delete_mapping(self, mapping_id: str) -> Any:
        return _require_success("deleteFieldMapping", self.call("deleteFieldMapping", mapping_id))

    def add_column(self, sheet_name: str, header_name: str) -> Dict[str, Any]:
        """
        Returns {"success": bool, "message": str}.
        success: false is NOT raised here; column collisions are a normal outcome.
        """
        result = self.call("addColumnToSheet", sheet_name, header_name)
        if isinstance(result, dict):
            return {
                "success": bool(result.get("success")),
                "message": str(result.get("message") or ""),
            }
        return {"success": bool(result), "message": ""}

    # -----------------------------------------------------
    # Roles
    # -----------------------------------------------------
    def list_roles(self) -> List[Dict[str, Any]]:
        return _require_list("getRoles", self.call("getRoles"))

    def save_role(self, row: Dict[str, Any]) -> Any:
        return _require_success("saveRole", self.call("saveRole", row))

    def delete_role(self, role_name: str) -> Any:
        return _require_success("deleteRole", self.call("deleteRole", role_name))

    # -----------------------------------------------------
    # Raw sheet rows (Users, Tickets, ...)
    # -----------------------------------------------------
    def list_rows(self, sheet_name: str) -> List[Dict[str, Any]]:
        return _require_list("getSheetRows", self.call("getSheetRows", sheet_name))


# ============================================================
# Factory
# ============================================================

def get_sheets_bridge() -> Optional[SheetsBridge]:
    """
    Builds the bridge from settings.
    Returns None when SHEETS_BRIDGE_URL is not configured.
    """
    if not settings.SHEETS_BRIDGE_URL:
        logger.error("Missing SHEETS_BRIDGE_URL")
        return None

    return SheetsBridge(
        url=settings.SHEETS_BRIDGE_URL,
        token=settings.SHEETS_BRIDGE_TOKEN,
        timeout=settings.SHEETS_BRIDGE_TIMEOUT,
    )


# ============================================================
# Ping for health checks
# ============================================================

def ping_bridge(bridge: Optional[SheetsBridge] = None) -> dict:
    """
    Connectivity check: reads the schema and reports sheet/column counts.
    """
    bridge = bridge or get_sheets_bridge()
    if bridge is None:
        return {"service": "Sheets", "status": "not_configured"}

    try:
        schema = bridge.fetch_schema()
        if not isinstance(schema, dict):
            return {"service": "Sheets", "status": "error", "detail": "Malformed schema"}
        return {
            "service": "Sheets",
            "status": "ok",
            "sheets": {name: len(headers or []) for name, headers in schema.items()},
        }
    except BridgeTransportError as e:
        return {"service": "Sheets", "status": "error", "detail": e.message}
