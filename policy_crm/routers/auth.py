"""Auth router: login, registration, profile."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from policy_crm.core.deps import get_current_user, get_optional_user
from policy_crm.core.response import DataResponse
from policy_crm.db.base import get_db
from policy_crm.domain.user import User
from policy_crm.schemas.auth import LoginRequest, RegisterRequest, TokenOut, UserOut
from policy_crm.services.auth import AuthService

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/login", response_model=DataResponse[TokenOut])
async def login(body: LoginRequest, session: AsyncSession = Depends(get_db)):
    token, user = await AuthService(session).login(body)
    return {"message": "Login successful", "data": {"token": token, "user": UserOut.model_validate(user)}}


@router.post("/register", response_model=DataResponse[UserOut], status_code=status.HTTP_201_CREATED)
async def register(
    body: RegisterRequest,
    actor: User | None = Depends(get_optional_user),
    session: AsyncSession = Depends(get_db),
):
    """Create a user. Open only while no users exist; afterwards founders only."""
    user = await AuthService(session).register(body, actor)
    return {"message": "User registered successfully", "data": UserOut.model_validate(user)}


@router.get("/profile", response_model=DataResponse[UserOut])
async def profile(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
):
    current = await AuthService(session).get_profile(user.id)
    return {"data": UserOut.model_validate(current)}
