"""Auth request/response schemas."""

from __future__ import annotations

from datetime import datetime

from policy_crm.schemas.common import ApiModel


class LoginRequest(ApiModel):
    email: str
    password: str


class RegisterRequest(ApiModel):
    email: str
    password: str
    name: str
    role: str = "ops"
    phone: str | None = None
    department: str | None = None


class UserOut(ApiModel):
    id: str
    email: str
    name: str
    role: str
    is_active: bool
    last_login: datetime | None = None
    phone: str | None = None
    department: str | None = None
    created_at: datetime
    updated_at: datetime | None = None


class TokenOut(ApiModel):
    token: str
    user: UserOut
