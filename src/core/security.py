import secrets

from fastapi import Depends, HTTPException, status
from fastapi.security import APIKeyHeader

from src.config import settings

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


async def require_admin_key(api_key: str = Depends(api_key_header)) -> str:
    """Guard for operator-only endpoints (window configuration, overrides, re-runs)."""
    if not api_key or not secrets.compare_digest(api_key, settings.ADMIN_API_KEY):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid or missing API key",
        )
    return api_key
