from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    # -------------------------------------------------
    # General
    # -------------------------------------------------
    PROJECT_NAME: str = "Unified Help Desk API"
    ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    # -------------------------------------------------
    # Frontend Domains
    # -------------------------------------------------
    FRONTEND_DOMAIN: Optional[str] = None

    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
    ]

    # -------------------------------------------------
    # CORS (auto-built below)
    # -------------------------------------------------
    BACKEND_CORS_ORIGINS: List[str] = []

    # -------------------------------------------------
    # Supabase (Auth only: token -> email)
    # -------------------------------------------------
    SUPABASE_URL: Optional[str] = None
    SUPABASE_SERVICE_ROLE_KEY: Optional[str] = None

    # -------------------------------------------------
    # Spreadsheet bridge (Apps Script web app)
    # -------------------------------------------------
    SHEETS_BRIDGE_URL: Optional[str] = None
    SHEETS_BRIDGE_TOKEN: Optional[str] = None
    SHEETS_BRIDGE_TIMEOUT: float = Field(
        15.0,
        description="Seconds to wait for a single remote procedure call",
    )

    # Roles, users and mappings are re-read after this many seconds
    STORE_MAX_AGE_SECONDS: int = Field(300, ge=0)

    # -------------------------------------------------
    # Site copy
    # -------------------------------------------------
    UNAUTHORIZED_MESSAGE: str = "Your email address was not found in the Users database."
    SUPPORT_CONTACT: str = "helpdesk@gcca.edu"

    # -------------------------------------------------
    # Model Config
    # -------------------------------------------------
    class Config:
        case_sensitive = True


# Instantiate settings
settings = Settings()

# -------------------------------------------------
# Build CORS list dynamically after loading settings
# -------------------------------------------------
cors_origins = []

if settings.FRONTEND_DOMAIN:
    domain = settings.FRONTEND_DOMAIN
    if not domain.startswith("http"):
        domain = f"https://{domain}"
    cors_origins.append(domain.rstrip("/"))

cors_origins.extend([d.rstrip("/") for d in settings.ALLOWED_ORIGINS])

settings.BACKEND_CORS_ORIGINS = sorted(list(set(cors_origins)))
