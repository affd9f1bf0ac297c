"""Founder dashboard router."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from policy_crm.core.deps import require_founder
from policy_crm.core.response import DataResponse
from policy_crm.db.base import get_db
from policy_crm.domain.user import User
from policy_crm.schemas.dashboard import (
    DashboardMetrics,
    ExecutiveRow,
    RolloverRow,
    SourceRow,
    TrendRow,
    VehicleRow,
)
from policy_crm.services.dashboard import DEFAULT_PERIOD, DashboardService

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])

_PERIOD_HELP = "One of 7d, 14d, 30d, 90d"


@router.get("/metrics", response_model=DataResponse[DashboardMetrics])
async def metrics(
    period: str = Query(default=DEFAULT_PERIOD, description=_PERIOD_HELP),
    _user: User = Depends(require_founder),
    session: AsyncSession = Depends(get_db),
):
    """KPIs, ratios, source mix, top executives and daily trend for a period."""
    return {"data": await DashboardService(session).metrics(period)}


@router.get("/sales-reps", response_model=DataResponse[list[ExecutiveRow]])
async def sales_reps(
    period: Optional[str] = Query(default=None, description=_PERIOD_HELP),
    _user: User = Depends(require_founder),
    session: AsyncSession = Depends(get_db),
):
    return {"data": await DashboardService(session).sales_reps(period)}


@router.get("/vehicle-analysis", response_model=DataResponse[list[VehicleRow]])
async def vehicle_analysis(
    period: Optional[str] = Query(default=None, description=_PERIOD_HELP),
    _user: User = Depends(require_founder),
    session: AsyncSession = Depends(get_db),
):
    return {"data": await DashboardService(session).vehicle_analysis(period)}


@router.get("/data-sources", response_model=DataResponse[list[SourceRow]])
async def data_sources(
    period: Optional[str] = Query(default=None, description=_PERIOD_HELP),
    _user: User = Depends(require_founder),
    session: AsyncSession = Depends(get_db),
):
    return {"data": await DashboardService(session).data_sources(period)}


@router.get("/rollover", response_model=DataResponse[list[RolloverRow]])
async def rollover(
    period: Optional[str] = Query(default=None, description=_PERIOD_HELP),
    _user: User = Depends(require_founder),
    session: AsyncSession = Depends(get_db),
):
    return {"data": await DashboardService(session).rollover_breakdown(period)}


@router.get("/trends", response_model=DataResponse[list[TrendRow]])
async def trends(
    period: str = Query(default=DEFAULT_PERIOD, description=_PERIOD_HELP),
    _user: User = Depends(require_founder),
    session: AsyncSession = Depends(get_db),
):
    return {"data": await DashboardService(session).trends(period)}
