# core/errors.py

from typing import List, Optional

from fastapi import HTTPException


# ============================================================
# Remote store errors
# ============================================================

class BridgeTransportError(Exception):
    """
    The remote call itself failed: network, auth, a non-2xx response,
    an exception thrown inside the script, or an unreadable body.
    Always safe to retry.
    """

    def __init__(self, message: str, function: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.function = function


class SchemaError(BridgeTransportError):
    """The schema call resolved but returned something that is not {sheet: [headers]}."""


class BridgeRejected(Exception):
    """The remote call resolved but reported success: false."""

    def __init__(self, message: str, function: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.function = function


# ============================================================
# Invariant violations (raised before any remote call)
# ============================================================

class InvariantViolation(ValueError):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class MappingConflict(InvariantViolation):
    status_code = 409

    def __init__(self, message: str, conflicting_ids: Optional[List[str]] = None):
        super().__init__(message)
        self.conflicting_ids = conflicting_ids or []


class MappingNotFound(InvariantViolation):
    status_code = 404


class RoleNotFound(InvariantViolation):
    status_code = 404


class RoleProtected(InvariantViolation):
    status_code = 400


class RoleInUse(InvariantViolation):
    status_code = 409

    def __init__(self, role_name: str, emails: List[str]):
        super().__init__(
            f"Role '{role_name}' is still assigned to {len(emails)} user(s). "
            "Reassign them before deleting the role."
        )
        self.role_name = role_name
        self.emails = emails


# Everything a core operation may raise at its caller
DOMAIN_ERRORS = (InvariantViolation, BridgeRejected, BridgeTransportError)


# ============================================================
# Conversion to HTTP
# ============================================================

def extract_bridge_error(error: Exception) -> str:
    """
    Safely extract a readable message from bridge / domain errors.
    Falls back to the first arg, then str().
    """
    if hasattr(error, "message"):
        try:
            return str(error.message)
        except Exception:
            pass

    if hasattr(error, "args") and error.args:
        try:
            return str(error.args[0])
        except Exception:
            pass

    try:
        return str(error)
    except Exception:
        return "Unknown remote store error"


def handle_domain_error(error: Exception, operation: str = "Operation") -> HTTPException:
    """
    Map a core error onto an HTTPException.
    Returns (doesn't raise) so the caller can customize or re-raise.

    Args:
        error: The exception that occurred
        operation: What failed (e.g. "Failed to save role")
    """
    from core.logging_config import logger

    detail = extract_bridge_error(error)

    if isinstance(error, InvariantViolation):
        logger.info(f"{operation}: {detail}")
        return HTTPException(status_code=error.status_code, detail=detail)

    if isinstance(error, BridgeRejected):
        logger.warning(f"{operation}: rejected by remote store: {detail}")
        return HTTPException(status_code=400, detail=f"{operation}: {detail}")

    if isinstance(error, BridgeTransportError):
        logger.error(f"{operation}: {detail}")
        return HTTPException(
            status_code=502,
            detail=f"{operation}: the spreadsheet service could not be reached. Please try again.",
        )

    logger.error(f"{operation}: {detail}", exc_info=error)
    return HTTPException(status_code=500, detail=f"{operation} failed")
