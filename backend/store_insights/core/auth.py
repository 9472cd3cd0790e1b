"""
Header-based access control for admin and store routes

- Admin routes require X-Admin-Key matching ADMIN_API_KEY
- Store routes require x-publishable-api-key matching STORE_PUBLISHABLE_KEY

When a key is not configured the check is skipped (development mode) and a
warning is logged.
"""
import logging
import secrets

from fastapi import Header, HTTPException

from store_insights.core.config import settings

logger = logging.getLogger(__name__)


def _keys_match(provided: str, expected: str) -> bool:
    return secrets.compare_digest(provided.encode(), expected.encode())


async def verify_admin_key(x_admin_key: str = Header(None, alias="X-Admin-Key")):
    """
    Verify the admin API key from the X-Admin-Key header.

    If ADMIN_API_KEY is not configured, allows all requests.
    """
    if not settings.ADMIN_API_KEY:
        logger.warning("ADMIN_API_KEY not configured - admin endpoints are unprotected!")
        return

    if not x_admin_key:
        logger.warning("Admin request without X-Admin-Key header")
        raise HTTPException(
            status_code=401,
            detail="Missing X-Admin-Key header. Authentication required."
        )

    if not _keys_match(x_admin_key, settings.ADMIN_API_KEY):
        logger.warning("Invalid admin key attempt")
        raise HTTPException(status_code=401, detail="Invalid API key")


async def verify_publishable_key(
    x_publishable_api_key: str = Header(None, alias="x-publishable-api-key")
):
    """Verify the storefront publishable key (store routes)"""
    if not settings.STORE_PUBLISHABLE_KEY:
        return

    if not x_publishable_api_key or not _keys_match(x_publishable_api_key, settings.STORE_PUBLISHABLE_KEY):
        raise HTTPException(
            status_code=400,
            detail="A valid publishable key is required to proceed with the request"
        )
