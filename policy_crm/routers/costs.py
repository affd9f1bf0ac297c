"""Monthly recurring costs router.

Reads are open to any signed-in user; writes are founder only.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from policy_crm.core.deps import get_current_user, require_founder
from policy_crm.core.pagination import PaginationParams
from policy_crm.core.response import DataResponse, ListResponse, MessageResponse, paginated
from policy_crm.db.base import get_db
from policy_crm.domain.user import User
from policy_crm.schemas.reference import CostCreate, CostOut, CostSummary, CostUpdate
from policy_crm.services.costs import CostService

router = APIRouter(prefix="/monthly-recurring-costs", tags=["Recurring costs"])


@router.get("", response_model=ListResponse[CostOut])
async def list_costs(
    filter_status: Optional[str] = Query(default=None, alias="status"),
    category: Optional[str] = Query(default=None),
    pagination: PaginationParams = Depends(),
    _user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
):
    items, total = await CostService(session).list_costs(
        pagination, status=filter_status, category=category
    )
    return paginated([CostOut.model_validate(c) for c in items], total, pagination.page, pagination.limit)


@router.get("/summary", response_model=DataResponse[CostSummary])
async def cost_summary(
    _user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
):
    return {"data": await CostService(session).summary()}


@router.get("/{cost_id}", response_model=DataResponse[CostOut])
async def get_cost(
    cost_id: str,
    _user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
):
    return {"data": CostOut.model_validate(await CostService(session).get_cost(cost_id))}


@router.post("", response_model=DataResponse[CostOut], status_code=status.HTTP_201_CREATED)
async def create_cost(
    body: CostCreate,
    user: User = Depends(require_founder),
    session: AsyncSession = Depends(get_db),
):
    cost = await CostService(session).create_cost(body, user.id)
    return {"message": "Recurring cost created successfully", "data": CostOut.model_validate(cost)}


@router.put("/{cost_id}", response_model=DataResponse[CostOut])
async def update_cost(
    cost_id: str,
    body: CostUpdate,
    _user: User = Depends(require_founder),
    session: AsyncSession = Depends(get_db),
):
    cost = await CostService(session).update_cost(cost_id, body)
    return {"message": "Recurring cost updated successfully", "data": CostOut.model_validate(cost)}


@router.delete("/{cost_id}", response_model=MessageResponse)
async def delete_cost(
    cost_id: str,
    _user: User = Depends(require_founder),
    session: AsyncSession = Depends(get_db),
):
    await CostService(session).delete_cost(cost_id)
    return {"message": "Recurring cost deleted successfully"}
