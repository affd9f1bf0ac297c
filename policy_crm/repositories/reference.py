"""Reference-data repositories: telecallers, settings, monthly recurring costs."""

from __future__ import annotations

from sqlalchemy import case, func, select

from policy_crm.domain.reference import MonthlyRecurringCost, Setting, Telecaller
from policy_crm.repositories.base import BaseRepository


class TelecallerRepository(BaseRepository[Telecaller]):
    model = Telecaller

    async def name_taken(self, name: str, *, exclude_id: str | None = None) -> bool:
        q = select(Telecaller.id).where(Telecaller.name == name)
        if exclude_id:
            q = q.where(Telecaller.id != exclude_id)
        return (await self._session.execute(q)).first() is not None

    async def list_all(self, *, active_only: bool) -> list[Telecaller]:
        q = select(Telecaller).order_by(Telecaller.name.asc())
        if active_only:
            q = q.where(Telecaller.is_active.is_(True))
        return list((await self._session.execute(q)).scalars().all())


class SettingRepository(BaseRepository[Setting]):
    model = Setting

    async def as_dict(self) -> dict[str, str]:
        rows = (await self._session.execute(select(Setting))).scalars().all()
        return {row.key: row.value for row in rows}

    async def upsert(self, key: str, value: str, description: str | None = None) -> Setting:
        existing = await self.get_by(key=key)
        if existing is None:
            return await self.create(key=key, value=value, description=description)
        values = {"value": value}
        if description is not None:
            values["description"] = description
        return await self.update(existing.id, **values)  # type: ignore[return-value]


class RecurringCostRepository(BaseRepository[MonthlyRecurringCost]):
    model = MonthlyRecurringCost

    async def summary(self) -> dict:
        active = MonthlyRecurringCost.status == "active"
        row = (
            await self._session.execute(
                select(
                    func.count(MonthlyRecurringCost.id),
                    func.count(case((active, 1))),
                    func.count(case((MonthlyRecurringCost.status == "inactive", 1))),
                    func.coalesce(
                        func.sum(case((active, MonthlyRecurringCost.cost_amount), else_=0)), 0
                    ),
                    func.avg(case((active, MonthlyRecurringCost.cost_amount), else_=None)),
                )
            )
        ).one()
        return {
            "total_costs": int(row[0]),
            "active_costs": int(row[1]),
            "inactive_costs": int(row[2]),
            "total_active_amount": float(row[3] or 0),
            "average_cost": float(row[4]) if row[4] is not None else 0.0,
        }

    async def category_breakdown(self) -> list[dict]:
        total = func.coalesce(
            func.sum(
                case(
                    (MonthlyRecurringCost.status == "active", MonthlyRecurringCost.cost_amount),
                    else_=0,
                )
            ),
            0,
        ).label("total_amount")
        rows = (
            await self._session.execute(
                select(MonthlyRecurringCost.category, func.count(MonthlyRecurringCost.id), total)
                .group_by(MonthlyRecurringCost.category)
                .order_by(total.desc())
            )
        ).all()
        return [
            {"category": category, "count": int(count), "total_amount": float(amount or 0)}
            for category, count, amount in rows
        ]
