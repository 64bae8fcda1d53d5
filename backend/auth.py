"""
API Authentication for FastAPI endpoints

Two independent layers:
- X-API-Key: shared key(s) that protect every /api/ route (checked by the
  middleware in main.py)
- X-User-Id: identity of the user on whose behalf the request is made,
  used for ownership of climates, styles and shorts
"""

from fastapi import Header, HTTPException, status
from typing import Optional
import hashlib
import hmac
from config import settings

# API Key header name
API_KEY_HEADER = "X-API-Key"
API_KEY_QUERY = "api_key"
USER_ID_HEADER = "X-User-Id"


def get_configured_keys() -> str:
    """API key(s) from settings, empty when auth is disabled"""
    return settings.API_KEY or ""


def check_api_key(api_key: Optional[str]) -> bool:
    """
    Verify API key against configured key

    Supports:
    - Single API key from environment variable
    - Multiple API keys (comma-separated)
    - Hashed keys ("hash:<sha256 hex>")
    """
    configured_key = get_configured_keys()

    if not configured_key:
        # No API key configured - allow all requests (development mode)
        return True

    if not api_key:
        return False

    # Support multiple API keys (comma-separated)
    valid_keys = [key.strip() for key in configured_key.split(",") if key.strip()]

    # Direct match
    for valid_key in valid_keys:
        if not valid_key.startswith("hash:") and hmac.compare_digest(valid_key, api_key):
            return True

    # Hash-based comparison allows storing hashed keys in env vars
    provided_hash = hashlib.sha256(api_key.encode()).hexdigest()
    for valid_key in valid_keys:
        if valid_key.startswith("hash:"):
            stored_hash = valid_key[5:]  # Remove "hash:" prefix
            if hmac.compare_digest(stored_hash, provided_hash):
                return True

    return False


async def get_current_user_id(
    x_user_id: Optional[str] = Header(None, alias=USER_ID_HEADER)
) -> str:
    """
    Resolve the calling user from the X-User-Id header

    Usage:
        @router.get("/mine")
        async def mine(user_id: str = Depends(get_current_user_id)):
            ...
    """
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"User identity missing. Provide {USER_ID_HEADER} header.",
        )
    return x_user_id.strip()
