from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel
from supabase import Client

from core.config import settings
from core.logging_config import logger
from core.store import AdminStore, get_store
from core.supabase_client import get_supabase_client
from models.user import HelpdeskUser


bearer_scheme = HTTPBearer()


# ============================================================
# Current User Model
# ============================================================
class CurrentUser(BaseModel):
    email: str
    user: HelpdeskUser               # row from the Users sheet

    @property
    def roles(self):
        return self.user.roles


# ============================================================
# TOKEN -> EMAIL (Supabase GoTrue)
# ============================================================
def resolve_token_email(token: str) -> Optional[str]:
    client: Client = get_supabase_client()
    if not client:
        raise HTTPException(500, "Supabase client not configured")

    try:
        auth_resp = client.auth.get_user(token)
    except Exception as e:
        logger.info(f"Token rejected by Supabase: {e}")
        return None

    if not auth_resp or not auth_resp.user:
        return None
    return auth_resp.user.email


# ============================================================
# AUTH DECODING (token -> email -> Users sheet row)
# ============================================================
def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    store: AdminStore = Depends(get_store),
) -> CurrentUser:

    unauthorized = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired authentication token",
        headers={"WWW-Authenticate": "Bearer"},
    )

    email = resolve_token_email(credentials.credentials)
    if not email:
        raise unauthorized

    # ---------------------------------------------------------
    # Only people listed in the Users sheet get in
    # ---------------------------------------------------------
    user = store.find_user(email)
    if user is None:
        logger.info(f"Access denied for {email}: not in Users sheet")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"{settings.UNAUTHORIZED_MESSAGE} Contact {settings.SUPPORT_CONTACT}.",
        )

    return CurrentUser(email=user.email, user=user)
