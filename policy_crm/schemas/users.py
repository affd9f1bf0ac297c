"""User management and password change schemas."""

from __future__ import annotations

from datetime import datetime

from policy_crm.schemas.common import ApiModel


class UserCreate(ApiModel):
    name: str
    email: str
    password: str
    role: str = "ops"
    phone: str | None = None
    department: str | None = None


class UserUpdate(ApiModel):
    name: str | None = None
    email: str | None = None
    role: str | None = None
    is_active: bool | None = None
    phone: str | None = None
    department: str | None = None


class UserStatusUpdate(ApiModel):
    is_active: bool


class UserPasswordSet(ApiModel):
    password: str | None = None


class ChangeOwnPasswordRequest(ApiModel):
    current_password: str | None = None
    new_password: str | None = None
    confirm_password: str | None = None


class AdminPasswordChangeRequest(ApiModel):
    target_user_id: str | None = None
    new_password: str | None = None
    reason: str | None = None


class PasswordChangeOut(ApiModel):
    id: str
    action: str
    reason: str | None = None
    timestamp: datetime
    changed_by_name: str
    target_user_name: str
