"""User management (founders) and password changes.

Founders manage every account; any signed-in user may change their own
password. Every password change is written to ``password_change_logs``.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from policy_crm.core.exceptions import BadRequestError, ConflictError, NotFoundError, ValidationError
from policy_crm.core.security import hash_password, verify_password
from policy_crm.domain.user import (
    PASSWORD_ADMIN_CHANGE,
    PASSWORD_SELF_CHANGE,
    ROLE_FOUNDER,
    ROLES,
    User,
)
from policy_crm.repositories.user import PasswordChangeLogRepository, UserRepository
from policy_crm.schemas.users import (
    AdminPasswordChangeRequest,
    ChangeOwnPasswordRequest,
    UserCreate,
    UserUpdate,
)

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8
MIN_REASON_LENGTH = 5
ROLE_ERROR = 'Role must be either "ops" or "founder"'


def _check_password(password: str | None) -> None:
    if not password:
        raise BadRequestError("Password is required")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise BadRequestError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")


class UserService:
    def __init__(self, session: AsyncSession):
        self._repo = UserRepository(session)
        self._logs = PasswordChangeLogRepository(session)

    async def get_user(self, user_id: str) -> User:
        user = await self._repo.get_by_id(user_id)
        if not user:
            raise NotFoundError("User", user_id)
        return user

    async def list_users(self, *, active_only: bool = False) -> list[User]:
        return await self._repo.list_by_name(active_only=active_only)

    async def create_user(self, data: UserCreate) -> User:
        errors = []
        if not (data.name or "").strip() or not (data.email or "").strip() or not data.password:
            errors.append("Name, email, and password are required")
        elif len(data.password) < MIN_PASSWORD_LENGTH:
            errors.append(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
        if data.role not in ROLES:
            errors.append(ROLE_ERROR)
        if errors:
            raise ValidationError(errors)

        email = data.email.strip().lower()
        if await self._repo.email_taken(email):
            raise ConflictError("User with this email already exists")

        user = await self._repo.create(
            name=data.name.strip(),
            email=email,
            password_hash=hash_password(data.password),
            role=data.role,
            phone=data.phone,
            department=data.department,
            is_active=True,
        )
        logger.info("Created %s user %s", user.role, user.email)
        return user

    async def update_user(self, user_id: str, data: UserUpdate, actor: User) -> User:
        await self.get_user(user_id)
        changes: dict[str, Any] = data.model_dump(exclude_unset=True, exclude_none=True)
        if not changes:
            raise BadRequestError("No valid fields to update")
        if "role" in changes and changes["role"] not in ROLES:
            raise BadRequestError(ROLE_ERROR)
        if "email" in changes:
            changes["email"] = changes["email"].strip().lower()
            if await self._repo.email_taken(changes["email"], exclude_id=user_id):
                raise ConflictError("Email already exists for another user")
        if changes.get("is_active") is False and user_id == actor.id:
            raise BadRequestError("Cannot deactivate your own account")

        updated = await self._repo.update(user_id, **changes)
        logger.info("Updated user %s (%s)", user_id, ", ".join(sorted(changes)))
        return updated  # type: ignore[return-value]

    async def set_status(self, user_id: str, is_active: bool, actor: User) -> User:
        if user_id == actor.id:
            raise BadRequestError("Cannot deactivate your own account")
        await self.get_user(user_id)
        updated = await self._repo.update(user_id, is_active=is_active)
        logger.info("User %s %s", user_id, "activated" if is_active else "deactivated")
        return updated  # type: ignore[return-value]

    async def delete_user(self, user_id: str, actor: User) -> User:
        if user_id == actor.id:
            raise BadRequestError("Cannot delete your own account")
        user = await self.get_user(user_id)
        await self._repo.delete(user_id)
        logger.info("Deleted user %s (%s)", user.email, user_id)
        return user

    # ------------------------------------------------------------------
    # Passwords
    # ------------------------------------------------------------------

    async def _store_password(
        self, target: User, password: str, *, actor: User, action: str, reason: str | None = None
    ) -> None:
        await self._repo.update(target.id, password_hash=hash_password(password))
        await self._logs.create(changed_by=actor.id, target_user=target.id, action=action, reason=reason)
        logger.info("Password for %s changed by %s (%s)", target.email, actor.email, action)

    async def set_password(self, user_id: str, password: str | None, actor: User) -> User:
        """Founder sets a user's password directly."""
        _check_password(password)
        target = await self.get_user(user_id)
        await self._store_password(target, password, actor=actor, action=PASSWORD_ADMIN_CHANGE)  # type: ignore[arg-type]
        return target

    async def change_own_password(self, actor: User, data: ChangeOwnPasswordRequest) -> None:
        if not data.current_password or not data.new_password or not data.confirm_password:
            raise BadRequestError("All fields are required")
        if data.new_password != data.confirm_password:
            raise BadRequestError("New passwords do not match")
        _check_password(data.new_password)

        user = await self.get_user(actor.id)
        if not verify_password(data.current_password, user.password_hash):
            raise BadRequestError("Current password is incorrect")
        await self._store_password(user, data.new_password, actor=user, action=PASSWORD_SELF_CHANGE)

    async def change_any_password(self, actor: User, data: AdminPasswordChangeRequest) -> User:
        if not data.target_user_id or not data.new_password or not data.reason:
            raise BadRequestError("Target user, new password, and reason are required")
        _check_password(data.new_password)
        if len(data.reason.strip()) < MIN_REASON_LENGTH:
            raise BadRequestError(f"Reason must be at least {MIN_REASON_LENGTH} characters long")

        target = await self._repo.get_by_id(data.target_user_id)
        if not target:
            raise NotFoundError("Target user", data.target_user_id)
        await self._store_password(
            target, data.new_password, actor=actor, action=PASSWORD_ADMIN_CHANGE, reason=data.reason.strip()
        )
        return target

    async def password_history(self, actor: User) -> list[dict[str, Any]]:
        """Founders see every change; everyone else sees changes to their own account."""
        if actor.role == ROLE_FOUNDER:
            return await self._logs.history(limit=100)
        return await self._logs.history(target_user=actor.id, limit=50)
