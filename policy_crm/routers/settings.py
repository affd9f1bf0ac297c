"""Business settings router (founder only)."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from policy_crm.core.deps import require_founder
from policy_crm.core.response import DataResponse
from policy_crm.db.base import get_db
from policy_crm.schemas.reference import SettingsUpdate
from policy_crm.services.settings import SettingsService

router = APIRouter(prefix="/settings", tags=["Settings"], dependencies=[Depends(require_founder)])


@router.get("", response_model=DataResponse[dict[str, float]])
async def get_settings(session: AsyncSession = Depends(get_db)):
    return {"data": await SettingsService(session).get_settings()}


@router.put("", response_model=DataResponse[dict[str, float]])
async def update_settings(body: SettingsUpdate, session: AsyncSession = Depends(get_db)):
    values = await SettingsService(session).update_settings(body.model_dump())
    return {"message": "Settings updated successfully", "data": values}


@router.post("/reset", response_model=DataResponse[dict[str, float]])
async def reset_settings(session: AsyncSession = Depends(get_db)):
    values = await SettingsService(session).reset_settings()
    return {"message": "Settings reset to defaults", "data": values}
