"""API key verification for user and chat endpoints."""

import logging

from fastapi import Header, HTTPException

from app.config import settings

logger = logging.getLogger(__name__)


async def verify_api_key(
    x_api_key: str | None = Header(default=None, alias="X-API-Key"),
    authorization: str | None = Header(default=None),
) -> str:
    """Validate API key via X-API-Key or Authorization: Bearer.

    If API_KEY is not set, passes through (no auth).
    Missing key raises 401, wrong key raises 403.
    """
    if settings.api_key is None:
        return ""

    key = x_api_key.strip() if x_api_key else None
    if not key and authorization and authorization.startswith("Bearer "):
        key = authorization[7:].strip()

    if not key:
        logger.warning("Request rejected: missing API key")
        raise HTTPException(status_code=401, detail="Missing X-API-Key")

    if key != settings.api_key:
        logger.warning("Request rejected: invalid API key")
        raise HTTPException(status_code=403, detail="Invalid API key")

    return key
