"""FastAPI auth dependencies: bearer users, role guards, internal token."""

from __future__ import annotations

import hmac
import logging

from fastapi import Depends, Header
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from policy_crm.core.config import settings
from policy_crm.core.exceptions import ForbiddenError, UnauthorizedError
from policy_crm.core.security import decode_token
from policy_crm.db.base import get_db
from policy_crm.domain.user import ROLE_FOUNDER, ROLE_OPS, User
from policy_crm.repositories.user import UserRepository

logger = logging.getLogger(__name__)

_bearer = HTTPBearer(auto_error=False)


async def get_optional_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    session: AsyncSession = Depends(get_db),
) -> User | None:
    """Resolve the bearer token to an active user, or None when no token was sent."""
    if credentials is None:
        return None
    payload = decode_token(credentials.credentials)
    user = await UserRepository(session).get_by_id(payload.get("sub", ""))
    if user is None or not user.is_active:
        raise UnauthorizedError("User not found or inactive")
    return user


async def get_current_user(user: User | None = Depends(get_optional_user)) -> User:
    if user is None:
        raise UnauthorizedError("Access token required")
    return user


def require_roles(*roles: str):
    """Dependency factory: the current user must hold one of ``roles``."""

    async def _checker(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            raise ForbiddenError(f"Requires role: {', '.join(roles)}")
        return user

    return _checker


require_ops = require_roles(ROLE_OPS, ROLE_FOUNDER)
require_founder = require_roles(ROLE_FOUNDER)


async def verify_internal_token(
    x_internal_token: str | None = Header(default=None),
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> None:
    """Guard for Lambda → API callbacks (``x-internal-token`` header or bearer)."""
    expected = settings.internal_api_token
    if not expected:
        logger.error("INTERNAL_API_TOKEN is not configured; rejecting internal call")
        raise UnauthorizedError("Internal API is not configured")
    supplied = x_internal_token or (credentials.credentials if credentials else None)
    if not supplied or not hmac.compare_digest(supplied, expected):
        raise UnauthorizedError("Invalid internal token")
