"""Founder dashboard: period metrics, ratios and breakdowns over policies."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from policy_crm.core.exceptions import BadRequestError
from policy_crm.repositories.dashboard import DashboardRepository

PERIODS: dict[str, int] = {"7d": 7, "14d": 14, "30d": 30, "90d": 90}
DEFAULT_PERIOD = "14d"
TOP_EXECUTIVES = 5


def period_start(period: str, now: datetime | None = None) -> datetime:
    if period not in PERIODS:
        raise BadRequestError(f"Period must be one of: {', '.join(PERIODS)}")
    now = now or datetime.now(timezone.utc)
    return now - timedelta(days=PERIODS[period])


def ratios(totals: dict[str, Any]) -> dict[str, float]:
    """Loss = cashback / GWP, expense = (brokerage - cashback) / GWP, as percentages."""
    gwp = totals["total_gwp"]
    if not gwp:
        return {"loss_ratio": 0.0, "expense_ratio": 0.0, "combined_ratio": 0.0}
    loss = totals["total_cashback"] / gwp * 100
    expense = (totals["total_brokerage"] - totals["total_cashback"]) / gwp * 100
    return {
        "loss_ratio": round(loss, 2),
        "expense_ratio": round(expense, 2),
        "combined_ratio": round(loss + expense, 2),
    }


class DashboardService:
    def __init__(self, session: AsyncSession):
        self._repo = DashboardRepository(session)

    async def metrics(self, period: str = DEFAULT_PERIOD) -> dict[str, Any]:
        since = period_start(period)
        totals = await self._repo.totals(since)
        return {
            "period": period,
            "totals": totals,
            "ratios": ratios(totals),
            "source_breakdown": await self._repo.by_source(since),
            "top_executives": await self._repo.by_executive(since, limit=TOP_EXECUTIVES),
            "daily_trend": await self._repo.daily_trend(since),
        }

    async def sales_reps(self, period: str | None = None) -> list[dict[str, Any]]:
        since = period_start(period) if period else None
        return await self._repo.by_executive(since)

    async def vehicle_analysis(self, period: str | None = None) -> list[dict[str, Any]]:
        since = period_start(period) if period else None
        return await self._repo.vehicle_analysis(since, limit=20)

    async def data_sources(self, period: str | None = None) -> list[dict[str, Any]]:
        since = period_start(period) if period else None
        return await self._repo.by_source(since)

    async def rollover_breakdown(self, period: str | None = None) -> list[dict[str, Any]]:
        since = period_start(period) if period else None
        return await self._repo.by_rollover(since)

    async def trends(self, period: str = DEFAULT_PERIOD) -> list[dict[str, Any]]:
        return await self._repo.daily_trend(period_start(period))
