# routers/health.py

from fastapi import APIRouter
from core.sheets_bridge import ping_bridge

router = APIRouter(
    prefix="/health",
    tags=["Health"],
)


# -----------------------------------------------------
# GET /health/bridge
# Checks the spreadsheet bridge by reading the schema
# No auth required
# -----------------------------------------------------
@router.get("/bridge", summary="Spreadsheet bridge health check")
def health_bridge():
    """
    Verifies the Apps Script bridge answers.
    - Checks that the URL is configured
    - Reads the sheet schema
    - Returns the column count per sheet, or the error
    """
    status = ping_bridge()
    return {
        "service": "Sheets",
        "status": status.get("status", "unknown"),
        "details": status,
    }


# -----------------------------------------------------
# GET /health/app
# Simple API health check
# -----------------------------------------------------
@router.get("/app", summary="App health check")
async def health_app():
    """
    Lightweight health check for uptime monitors.
    """
    return {
        "service": "Help Desk API",
        "status": "ok",
    }
