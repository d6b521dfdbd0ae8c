# core/config_validator.py

from typing import List, Tuple
from core.config import settings
from core.logging_config import logger


# (setting, why it matters)
REQUIRED_SETTINGS: List[Tuple[str, str]] = [
    ("SHEETS_BRIDGE_URL", "every read and write goes through the spreadsheet bridge"),
    ("SUPABASE_URL", "bearer tokens are verified against Supabase Auth"),
    ("SUPABASE_SERVICE_ROLE_KEY", "bearer tokens are verified against Supabase Auth"),
]

RECOMMENDED_SETTINGS: List[Tuple[str, str]] = [
    ("SHEETS_BRIDGE_TOKEN", "bridge calls will be unauthenticated"),
]


def validate_required_config() -> List[str]:
    """
    Names of required settings that are unset or malformed.
    """
    missing = [name for name, _ in REQUIRED_SETTINGS if not getattr(settings, name, None)]

    url = settings.SHEETS_BRIDGE_URL
    if url and not url.startswith("https://"):
        missing.append("SHEETS_BRIDGE_URL (must be an https:// Apps Script URL)")

    return missing


def validate_optional_config() -> List[str]:
    """Warnings for recommended settings that are unset."""
    return [
        f"{name} ({reason})"
        for name, reason in RECOMMENDED_SETTINGS
        if not getattr(settings, name, None)
    ]


def validate_config_on_startup():
    """
    Called from the FastAPI startup hook.
    Raises RuntimeError when the app could not serve a single request.
    """
    missing_required = validate_required_config()
    if missing_required:
        error_msg = f"Missing required environment variables: {', '.join(missing_required)}"
        logger.error(error_msg)
        raise RuntimeError(error_msg)

    for warning in validate_optional_config():
        logger.warning(f"⚠️ Optional configuration missing: {warning}")

    logger.info(f"Configuration OK ({settings.ENV}), bridge at {settings.SHEETS_BRIDGE_URL}")
