# commandless/interfaces/api/security.py
"""API security for bot integrations.

Every bot deployment that calls the engine holds its own X-API-Key.
``settings.api_auth_key`` may list several keys (comma-separated) so one
can be rotated while the others keep working. Rate limits are counted per
caller key, falling back to the client address, since several bots often
sit behind one gateway host.
"""

import hashlib
import secrets
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import APIKeyHeader
from slowapi import Limiter
from slowapi.util import get_remote_address

from commandless.config import settings

API_KEY_HEADER = "X-API-Key"

api_key_header = APIKeyHeader(name=API_KEY_HEADER, auto_error=False)


def configured_keys() -> list[str]:
    """Bot keys accepted by the API; empty when authentication is off."""
    return [key.strip() for key in settings.api_auth_key.split(",") if key.strip()]


def verify_api_key(api_key: Annotated[str | None, Depends(api_key_header)]) -> str:
    """Check X-API-Key against the configured bot keys.

    Raises:
        HTTPException: 401 if the key is missing, 403 if it matches no configured key.
    """
    keys = configured_keys()
    if not keys:
        return "auth_disabled"

    if not api_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Missing API key. Include {API_KEY_HEADER} header.",
        )

    if not any(secrets.compare_digest(api_key, key) for key in keys):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid API key.",
        )

    return api_key


def rate_limit_key(request: Request) -> str:
    """Bucket requests by caller key, or by client address without one.

    Keys are hashed so raw credentials never end up in limiter storage.
    """
    api_key = request.headers.get(API_KEY_HEADER)
    if api_key:
        return "key:" + hashlib.sha256(api_key.encode()).hexdigest()[:16]
    return get_remote_address(request)


limiter = Limiter(key_func=rate_limit_key)


def get_rate_limit_string() -> str:
    """Limit for template management, context and health endpoints."""
    return f"{settings.api_rate_limit}/minute"


def get_resolve_rate_limit_string() -> str:
    """Limit for /resolve, which sees one call per chat message."""
    return f"{settings.resolve_rate_limit}/minute"
