"""User management (founders) and password change endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from policy_crm.core.deps import get_current_user, require_founder
from policy_crm.core.response import DataResponse, MessageResponse
from policy_crm.db.base import get_db
from policy_crm.domain.user import User
from policy_crm.schemas.auth import UserOut
from policy_crm.schemas.users import (
    AdminPasswordChangeRequest,
    ChangeOwnPasswordRequest,
    PasswordChangeOut,
    UserCreate,
    UserPasswordSet,
    UserStatusUpdate,
    UserUpdate,
)
from policy_crm.services.users import UserService

router = APIRouter(prefix="/users", tags=["Users"])
password_router = APIRouter(prefix="/password", tags=["Passwords"])


@router.get("", response_model=DataResponse[list[UserOut]])
async def list_users(
    _user: User = Depends(require_founder),
    session: AsyncSession = Depends(get_db),
):
    users = await UserService(session).list_users()
    return {"data": [UserOut.model_validate(u) for u in users]}


@router.post("", response_model=DataResponse[UserOut], status_code=status.HTTP_201_CREATED)
async def create_user(
    body: UserCreate,
    _user: User = Depends(require_founder),
    session: AsyncSession = Depends(get_db),
):
    user = await UserService(session).create_user(body)
    return {"message": "User created successfully", "data": UserOut.model_validate(user)}


@router.put("/{user_id}", response_model=DataResponse[UserOut])
async def update_user(
    user_id: str,
    body: UserUpdate,
    actor: User = Depends(require_founder),
    session: AsyncSession = Depends(get_db),
):
    user = await UserService(session).update_user(user_id, body, actor)
    return {"message": "User updated successfully", "data": UserOut.model_validate(user)}


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: str,
    actor: User = Depends(require_founder),
    session: AsyncSession = Depends(get_db),
):
    user = await UserService(session).delete_user(user_id, actor)
    return {"message": f'User "{user.name}" deleted successfully'}


@router.patch("/{user_id}/status", response_model=DataResponse[UserOut])
async def set_user_status(
    user_id: str,
    body: UserStatusUpdate,
    actor: User = Depends(require_founder),
    session: AsyncSession = Depends(get_db),
):
    user = await UserService(session).set_status(user_id, body.is_active, actor)
    state = "activated" if body.is_active else "deactivated"
    return {"message": f"User {state} successfully", "data": UserOut.model_validate(user)}


@router.patch("/{user_id}/password", response_model=MessageResponse)
async def set_user_password(
    user_id: str,
    body: UserPasswordSet,
    actor: User = Depends(require_founder),
    session: AsyncSession = Depends(get_db),
):
    user = await UserService(session).set_password(user_id, body.password, actor)
    return {"message": f'Password updated successfully for user "{user.name}"'}


# ---------------------------------------------------------------------------
# /password
# ---------------------------------------------------------------------------

@password_router.post("/change-own", response_model=MessageResponse)
async def change_own_password(
    body: ChangeOwnPasswordRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
):
    await UserService(session).change_own_password(user, body)
    return {"message": "Password changed successfully"}


@password_router.post("/admin/change-any", response_model=MessageResponse)
async def change_any_password(
    body: AdminPasswordChangeRequest,
    actor: User = Depends(require_founder),
    session: AsyncSession = Depends(get_db),
):
    target = await UserService(session).change_any_password(actor, body)
    return {"message": f"Password changed successfully for {target.name}"}


@password_router.get("/history", response_model=DataResponse[list[PasswordChangeOut]])
async def password_history(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
):
    return {"data": await UserService(session).password_history(user)}


@password_router.get("/users", response_model=DataResponse[list[UserOut]])
async def password_targets(
    _user: User = Depends(require_founder),
    session: AsyncSession = Depends(get_db),
):
    """Active users a founder can reset."""
    users = await UserService(session).list_users(active_only=True)
    return {"data": [UserOut.model_validate(u) for u in users]}
