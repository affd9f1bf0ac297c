"""Auth service: login, registration, and profile lookup."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from policy_crm.core.exceptions import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from policy_crm.core.security import create_access_token, hash_password, verify_password
from policy_crm.domain.user import ROLE_FOUNDER, ROLES, User
from policy_crm.repositories.user import UserRepository
from policy_crm.schemas.auth import LoginRequest, RegisterRequest

logger = logging.getLogger(__name__)


def registration_errors(data: RegisterRequest) -> list[str]:
    errors = []
    if "@" not in (data.email or ""):
        errors.append("Valid email is required")
    if len((data.name or "").strip()) < 2:
        errors.append("Name must be at least 2 characters")
    if len(data.password or "") < 6:
        errors.append("Password must be at least 6 characters")
    if data.role not in ROLES:
        errors.append("Valid role is required")
    return errors


class AuthService:
    def __init__(self, session: AsyncSession):
        self._repo = UserRepository(session)

    async def login(self, data: LoginRequest) -> tuple[str, User]:
        user = await self._repo.get_by_email(data.email)
        if user is None or not verify_password(data.password, user.password_hash):
            raise UnauthorizedError("Invalid credentials")
        if not user.is_active:
            raise UnauthorizedError("Account is disabled")
        user = await self._repo.update(user.id, last_login=datetime.now(timezone.utc))
        logger.info("User %s logged in", user.email)  # type: ignore[union-attr]
        return create_access_token(user), user  # type: ignore[arg-type]

    async def register(self, data: RegisterRequest, actor: User | None) -> User:
        """Create a user. Only founders may register users once the first account exists."""
        if await self._repo.count() > 0 and (actor is None or actor.role != ROLE_FOUNDER):
            raise ForbiddenError("Only founders can register users")

        errors = registration_errors(data)
        if errors:
            raise ValidationError(errors)

        email = data.email.strip().lower()
        if await self._repo.get_by_email(email):
            raise ConflictError("User with this email already exists")

        user = await self._repo.create(
            email=email,
            password_hash=hash_password(data.password),
            name=data.name.strip(),
            role=data.role,
            phone=data.phone,
            department=data.department,
        )
        logger.info("Registered %s user %s", user.role, user.email)
        return user

    async def get_profile(self, user_id: str) -> User:
        user = await self._repo.get_by_id(user_id)
        if not user:
            raise NotFoundError("User", user_id)
        return user
