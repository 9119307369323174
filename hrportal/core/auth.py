"""
Authentication

Resolves the acting user from the platform-issued bearer token.

Provides:
- JWT verification (HS256 by default) when a signing secret is configured
- FastAPI dependency returning the user id (the token "sub" claim)
"""
from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from loguru import logger

from .config import settings
from .exceptions import UnauthorizedException

# auto_error=False: anonymous calls fall back to the system user
bearer_scheme = HTTPBearer(auto_error=False)


def decode_token(token: str) -> Optional[dict]:
    """Decode and verify a JWT, None when invalid"""
    try:
        return jwt.decode(
            token,
            settings.auth_jwt_secret,
            algorithms=[settings.auth_jwt_algorithm],
            options={"verify_aud": False},
        )
    except JWTError as exc:
        logger.debug("Token rejected: {}", exc)
        return None


async def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> str:
    """
    FastAPI dependency - id of the acting user

    Usage:
        @router.post("/items")
        async def create(user_id: str = Depends(get_current_user_id)):
            ...

    Without a configured secret tokens cannot be verified, so every call
    runs as the system user.
    """
    if not settings.auth_jwt_secret:
        return settings.system_user_id

    if credentials is None:
        return settings.system_user_id

    payload = decode_token(credentials.credentials)
    if not payload or not payload.get("sub"):
        raise UnauthorizedException()
    return str(payload["sub"])
