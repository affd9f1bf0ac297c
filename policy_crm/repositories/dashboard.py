"""Aggregate queries over policies for the founder dashboard."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from policy_crm.domain.policy import Policy

_gwp = func.coalesce(func.sum(Policy.total_premium), 0)
_brokerage = func.coalesce(func.sum(Policy.brokerage), 0)
_cashback = func.coalesce(func.sum(Policy.cashback_amount), 0)
_net = func.coalesce(func.sum(Policy.brokerage - Policy.cashback_amount), 0)


def _f(value) -> float:
    return float(value or 0)


class DashboardRepository:
    """Read-only aggregations; every method takes an optional created_at lower bound."""

    def __init__(self, session: AsyncSession):
        self._session = session

    @staticmethod
    def _since(q, since: datetime | None):
        return q.where(Policy.created_at >= since) if since is not None else q

    async def totals(self, since: datetime | None) -> dict:
        q = self._since(
            select(
                func.count(Policy.id),
                _gwp,
                _brokerage,
                _cashback,
                _net,
                func.coalesce(func.avg(Policy.total_premium), 0),
            ),
            since,
        )
        count, gwp, brokerage, cashback, net, avg = (await self._session.execute(q)).one()
        return {
            "total_policies": int(count),
            "total_gwp": _f(gwp),
            "total_brokerage": _f(brokerage),
            "total_cashback": _f(cashback),
            "net_revenue": _f(net),
            "avg_premium": _f(avg),
        }

    async def by_source(self, since: datetime | None) -> list[dict]:
        gwp = _gwp.label("gwp")
        q = self._since(
            select(Policy.source, func.count(Policy.id), gwp).group_by(Policy.source),
            since,
        ).order_by(gwp.desc())
        rows = (await self._session.execute(q)).all()
        return [{"source": s, "policies": int(c), "gwp": _f(g)} for s, c, g in rows]

    async def by_rollover(self, since: datetime | None) -> list[dict]:
        label = func.coalesce(Policy.rollover, "UNSPECIFIED").label("rollover")
        gwp = _gwp.label("gwp")
        q = self._since(
            select(label, func.count(Policy.id), gwp).group_by(label), since
        ).order_by(gwp.desc())
        rows = (await self._session.execute(q)).all()
        return [{"rollover": r, "policies": int(c), "gwp": _f(g)} for r, c, g in rows]

    async def by_executive(self, since: datetime | None, limit: int | None = None) -> list[dict]:
        net = _net.label("net_revenue")
        q = self._since(
            select(
                Policy.executive,
                func.count(Policy.id),
                _gwp,
                _brokerage,
                _cashback,
                net,
            )
            .where(Policy.executive.is_not(None))
            .group_by(Policy.executive),
            since,
        ).order_by(net.desc())
        if limit:
            q = q.limit(limit)
        rows = (await self._session.execute(q)).all()
        return [
            {
                "executive": name,
                "policies": int(count),
                "gwp": _f(gwp),
                "brokerage": _f(brokerage),
                "cashback": _f(cashback),
                "net_revenue": _f(net_revenue),
            }
            for name, count, gwp, brokerage, cashback, net_revenue in rows
        ]

    async def daily_trend(self, since: datetime | None) -> list[dict]:
        day = func.date(Policy.created_at).label("day")
        q = self._since(
            select(day, func.count(Policy.id), _gwp, _brokerage, _cashback, _net).group_by(day),
            since,
        ).order_by(day.asc())
        rows = (await self._session.execute(q)).all()
        return [
            {
                "date": str(d),
                "policies": int(c),
                "gwp": _f(g),
                "brokerage": _f(b),
                "cashback": _f(cb),
                "net_revenue": _f(n),
            }
            for d, c, g, b, cb, n in rows
        ]

    async def vehicle_analysis(self, since: datetime | None, limit: int = 20) -> list[dict]:
        net = _net.label("net_revenue")
        q = self._since(
            select(
                Policy.make,
                Policy.model,
                func.count(Policy.id),
                _gwp,
                func.coalesce(func.avg(Policy.cashback_percentage), 0),
                _cashback,
                net,
            ).group_by(Policy.make, Policy.model),
            since,
        ).order_by(net.desc()).limit(limit)
        rows = (await self._session.execute(q)).all()
        return [
            {
                "make": make,
                "model": model,
                "policies": int(count),
                "gwp": _f(gwp),
                "avg_cashback_pct": _f(avg_pct),
                "total_cashback": _f(cashback),
                "net_revenue": _f(net_revenue),
            }
            for make, model, count, gwp, avg_pct, cashback, net_revenue in rows
        ]
