"""SQLAlchemy ORM model for CRM users (operations staff and founders)."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from policy_crm.db.base import Base
from policy_crm.domain.mixins import TimestampMixin, UUIDPrimaryKeyMixin

ROLE_OPS = "ops"
ROLE_FOUNDER = "founder"
ROLES = (ROLE_OPS, ROLE_FOUNDER)


class User(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    # "ops" | "founder"
    role: Mapped[str] = mapped_column(String(50), default=ROLE_OPS, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    last_login: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    department: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)


PASSWORD_SELF_CHANGE = "self_password_change"
PASSWORD_ADMIN_CHANGE = "admin_password_change"


class PasswordChangeLog(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """One row per password change; ``created_at`` is the change time."""

    __tablename__ = "password_change_logs"

    changed_by: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=True, index=True
    )
    target_user: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=True, index=True
    )
    action: Mapped[str] = mapped_column(String(50), nullable=False)
    reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
