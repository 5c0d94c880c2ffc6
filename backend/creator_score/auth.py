import logging
import secrets

from fastapi import Depends, HTTPException, status
from fastapi.security import APIKeyHeader

from creator_score.config import settings

logger = logging.getLogger(__name__)

AdminKeyScheme = APIKeyHeader(name="x-api-key", auto_error=False)


def require_admin_key(api_key: str | None = Depends(AdminKeyScheme)) -> None:
    """Guard for snapshot and cache admin routes. An unset admin key rejects everything."""
    expected = settings.snapshot_admin_api_key
    if not expected or not api_key or not secrets.compare_digest(api_key, expected):
        logger.warning("Admin auth failed (key prefix: %s...)", (api_key or "")[:4])
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )
