"""FastAPI dependencies for database, authentication, caches and time."""

from datetime import datetime, timezone
from typing import AsyncGenerator, Optional

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession
import jwt
from jwt import PyJWTError

from .cache import MemoryCache, OutputCache, memory_cache, output_cache
from .clock import Clock, system_clock
from .config import settings
from .database import get_async_session
from .exceptions import AuthenticationError
from ..notifications.dispatcher import NotificationDispatcher
from ..services.cache_invalidation import CacheInvalidator


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Database dependency that provides async database sessions.

    Yields:
        AsyncSession: Database session
    """
    async for session in get_async_session():
        yield session


def get_cache() -> MemoryCache:
    """In-process data cache shared by every request."""
    return memory_cache


def get_output_cache() -> OutputCache:
    """Tagged response cache shared by every request."""
    return output_cache


def get_clock() -> Clock:
    return system_clock


_dispatcher: Optional[NotificationDispatcher] = None


def get_dispatcher() -> NotificationDispatcher:
    """Notification fan-out, created on first use so settings are read after startup."""
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = NotificationDispatcher()
    return _dispatcher


def get_invalidator(
    cache: MemoryCache = Depends(get_cache),
    output: OutputCache = Depends(get_output_cache),
) -> CacheInvalidator:
    return CacheInvalidator(cache, output)


async def get_current_user(
    authorization: Optional[str] = Header(None, alias="Authorization")
) -> dict:
    """
    Authentication dependency that validates admin Bearer tokens.

    Args:
        authorization: Authorization header with Bearer token

    Returns:
        dict: User information from validated token

    Raises:
        AuthenticationError: If token is invalid or missing
    """
    if not authorization:
        raise AuthenticationError(detail="Authorization header missing")

    try:
        scheme, token = authorization.split()
    except ValueError:
        raise AuthenticationError(detail="Invalid authorization header format")

    if scheme.lower() != "bearer":
        raise AuthenticationError(detail="Invalid authentication scheme")

    try:
        payload = jwt.decode(
            token,
            settings.bearer_token_secret,
            algorithms=["HS256"]
        )
    except PyJWTError as e:
        raise AuthenticationError(detail=f"Token validation failed: {str(e)}")

    user_id = payload.get("sub")
    if user_id is None:
        raise AuthenticationError(detail="Invalid token payload")

    exp = payload.get("exp")
    if exp and datetime.now(timezone.utc).timestamp() > exp:
        raise AuthenticationError(detail="Token has expired")

    return {
        "user_id": user_id,
        "username": payload.get("username"),
        "email": payload.get("email"),
        "roles": payload.get("roles", []),
    }


RequiredAuth = Depends(get_current_user)
DatabaseSession = Depends(get_db)
CacheDependency = Depends(get_cache)
OutputCacheDependency = Depends(get_output_cache)
ClockDependency = Depends(get_clock)
DispatcherDependency = Depends(get_dispatcher)
InvalidatorDependency = Depends(get_invalidator)
