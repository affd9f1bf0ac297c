"""Monthly recurring cost service."""

from __future__ import annotations

from datetime import date
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from policy_crm.core.exceptions import NotFoundError, ValidationError
from policy_crm.core.pagination import PaginationParams
from policy_crm.domain.reference import MonthlyRecurringCost
from policy_crm.repositories.reference import RecurringCostRepository
from policy_crm.schemas.reference import CostCreate, CostUpdate

COST_STATUSES = ("active", "inactive")


def cost_errors(values: dict[str, Any]) -> list[str]:
    errors = []
    if not str(values.get("product_name") or "").strip():
        errors.append("Product name is required")
    amount = values.get("cost_amount")
    if amount is None:
        errors.append("Cost amount is required")
    elif amount <= 0:
        errors.append("Cost amount must be greater than 0")
    if not str(values.get("category") or "").strip():
        errors.append("Category is required")
    start: date | None = values.get("start_date")
    end: date | None = values.get("end_date")
    if start is None:
        errors.append("Start date is required")
    elif end is not None and end <= start:
        errors.append("End date must be after start date")
    if values.get("status") not in COST_STATUSES:
        errors.append("Status must be 'active' or 'inactive'")
    return errors


class CostService:
    def __init__(self, session: AsyncSession):
        self._repo = RecurringCostRepository(session)

    async def list_costs(
        self,
        pagination: PaginationParams,
        *,
        status: str | None = None,
        category: str | None = None,
    ) -> tuple[list[MonthlyRecurringCost], int]:
        return await self._repo.list(
            offset=pagination.offset,
            limit=pagination.limit,
            filters={"status": status, "category": category},
        )

    async def get_cost(self, cost_id: str) -> MonthlyRecurringCost:
        cost = await self._repo.get_by_id(cost_id)
        if not cost:
            raise NotFoundError("Recurring cost", cost_id)
        return cost

    async def create_cost(self, data: CostCreate, user_id: str) -> MonthlyRecurringCost:
        values = data.model_dump()
        errors = cost_errors(values)
        if errors:
            raise ValidationError(errors)
        return await self._repo.create(**values, created_by=user_id)

    async def update_cost(self, cost_id: str, data: CostUpdate) -> MonthlyRecurringCost:
        cost = await self.get_cost(cost_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        merged = {
            "product_name": cost.product_name,
            "cost_amount": cost.cost_amount,
            "category": cost.category,
            "start_date": cost.start_date,
            "end_date": cost.end_date,
            "status": cost.status,
            **changes,
        }
        errors = cost_errors(merged)
        if errors:
            raise ValidationError(errors)
        updated = await self._repo.update(cost_id, **changes)
        return updated  # type: ignore[return-value]

    async def delete_cost(self, cost_id: str) -> None:
        if not await self._repo.delete(cost_id):
            raise NotFoundError("Recurring cost", cost_id)

    async def summary(self) -> dict[str, Any]:
        return {
            **await self._repo.summary(),
            "categories": await self._repo.category_breakdown(),
        }
