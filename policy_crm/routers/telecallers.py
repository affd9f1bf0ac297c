"""Telecaller reference data router."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from policy_crm.core.deps import require_founder, require_ops
from policy_crm.core.response import DataResponse
from policy_crm.db.base import get_db
from policy_crm.domain.user import User
from policy_crm.schemas.reference import TelecallerCreate, TelecallerOut, TelecallerUpdate
from policy_crm.services.telecaller import TelecallerService

router = APIRouter(prefix="/telecallers", tags=["Telecallers"])


@router.get("", response_model=DataResponse[list[TelecallerOut]])
async def list_active(
    _user: User = Depends(require_ops),
    session: AsyncSession = Depends(get_db),
):
    items = await TelecallerService(session).list_telecallers(include_inactive=False)
    return {"data": [TelecallerOut.model_validate(t) for t in items]}


@router.get("/all", response_model=DataResponse[list[TelecallerOut]])
async def list_all(
    _user: User = Depends(require_founder),
    session: AsyncSession = Depends(get_db),
):
    items = await TelecallerService(session).list_telecallers(include_inactive=True)
    return {"data": [TelecallerOut.model_validate(t) for t in items]}


@router.post("", response_model=DataResponse[TelecallerOut], status_code=status.HTTP_201_CREATED)
async def create_telecaller(
    body: TelecallerCreate,
    _user: User = Depends(require_ops),
    session: AsyncSession = Depends(get_db),
):
    telecaller = await TelecallerService(session).create_telecaller(body)
    return {"message": "Telecaller created successfully", "data": TelecallerOut.model_validate(telecaller)}


@router.put("/{telecaller_id}", response_model=DataResponse[TelecallerOut])
async def update_telecaller(
    telecaller_id: str,
    body: TelecallerUpdate,
    _user: User = Depends(require_founder),
    session: AsyncSession = Depends(get_db),
):
    telecaller = await TelecallerService(session).update_telecaller(telecaller_id, body)
    return {"message": "Telecaller updated successfully", "data": TelecallerOut.model_validate(telecaller)}


@router.delete("/{telecaller_id}", response_model=DataResponse[TelecallerOut])
async def deactivate_telecaller(
    telecaller_id: str,
    _user: User = Depends(require_ops),
    session: AsyncSession = Depends(get_db),
):
    """Soft delete: the telecaller stays on record but drops out of the active list."""
    telecaller = await TelecallerService(session).deactivate_telecaller(telecaller_id)
    return {"message": "Telecaller deactivated", "data": TelecallerOut.model_validate(telecaller)}
