import logging
import secrets

from fastapi import Depends, HTTPException, status
from fastapi.security import APIKeyHeader

from payitem_sync.core.config import settings

logger = logging.getLogger(__name__)

API_KEY_HEADER = "X-Internal-Api-Key"

_api_key_header = APIKeyHeader(name=API_KEY_HEADER, auto_error=False)


def require_internal_key(api_key: str | None = Depends(_api_key_header)) -> str:
    """Guard for service-to-service endpoints. Returns the presented key."""
    if not settings.internal_api_key:
        logger.warning("Internal endpoint called but INTERNAL_API_KEY is not configured")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Internal auth not configured")
    if not api_key:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing API key")
    if not secrets.compare_digest(api_key, settings.internal_api_key):
        logger.warning("Rejected internal API key ending in ...%s", api_key[-4:])
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")
    return api_key
