"""Policy CRUD router."""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from policy_crm.core.deps import require_ops
from policy_crm.core.pagination import PaginationParams
from policy_crm.core.response import DataResponse, ListResponse, MessageResponse, paginated
from policy_crm.db.base import get_db
from policy_crm.domain.user import User
from policy_crm.schemas.policy import (
    BulkPolicyRequest,
    BulkResult,
    PolicyCreate,
    PolicyOut,
    PolicyUpdate,
)
from policy_crm.services.policy import PolicyService
from policy_crm.services.storage import StorageService, get_storage

router = APIRouter(prefix="/policies", tags=["Policies"])


def _svc(session: AsyncSession, storage: StorageService | None) -> PolicyService:
    return PolicyService(session, storage)


@router.get("", response_model=ListResponse[PolicyOut])
async def list_policies(
    filter_status: Optional[str] = Query(default=None, alias="status"),
    source: Optional[str] = Query(default=None),
    insurer: Optional[str] = Query(default=None, description="Substring match"),
    search: Optional[str] = Query(default=None, description="Policy number, vehicle number or make"),
    pagination: PaginationParams = Depends(),
    _user: User = Depends(require_ops),
    session: AsyncSession = Depends(get_db),
):
    items, total = await _svc(session, None).list_policies(
        pagination, status=filter_status, source=source, insurer=insurer, search=search,
    )
    return paginated(
        [PolicyOut.model_validate(p) for p in items],
        total, pagination.page, pagination.limit,
        message="Policies retrieved successfully",
    )


@router.post("", response_model=DataResponse[PolicyOut], status_code=status.HTTP_201_CREATED)
async def create_policy(
    body: PolicyCreate,
    user: User = Depends(require_ops),
    session: AsyncSession = Depends(get_db),
    storage: StorageService | None = Depends(get_storage),
):
    policy = await _svc(session, storage).create_policy(body, user.id)
    return {"message": "Policy created successfully", "data": PolicyOut.model_validate(policy)}


@router.post("/bulk", response_model=DataResponse[BulkResult])
async def bulk_create_policies(
    body: BulkPolicyRequest,
    user: User = Depends(require_ops),
    session: AsyncSession = Depends(get_db),
    storage: StorageService | None = Depends(get_storage),
):
    created, errors = await _svc(session, storage).bulk_create(body.policies, user.id)
    return {
        "message": f"Bulk operation completed. {len(created)} created, {len(errors)} failed.",
        "data": {"created": [PolicyOut.model_validate(p) for p in created], "errors": errors},
    }


@router.get("/{policy_id}", response_model=DataResponse[PolicyOut])
async def get_policy(
    policy_id: str,
    _user: User = Depends(require_ops),
    session: AsyncSession = Depends(get_db),
):
    policy = await _svc(session, None).get_policy(policy_id)
    return {"data": PolicyOut.model_validate(policy)}


@router.get("/{policy_id}/document", response_model=DataResponse[dict[str, Any]])
async def get_policy_document(
    policy_id: str,
    _user: User = Depends(require_ops),
    session: AsyncSession = Depends(get_db),
    storage: StorageService | None = Depends(get_storage),
):
    """Policy as stored in S3, falling back to the database row."""
    document, origin = await _svc(session, storage).get_policy_document(policy_id)
    return {"message": f"Loaded from {origin}", "data": document}


@router.put("/{policy_id}", response_model=DataResponse[PolicyOut])
async def update_policy(
    policy_id: str,
    body: PolicyUpdate,
    _user: User = Depends(require_ops),
    session: AsyncSession = Depends(get_db),
    storage: StorageService | None = Depends(get_storage),
):
    policy = await _svc(session, storage).update_policy(policy_id, body)
    return {"message": "Policy updated successfully", "data": PolicyOut.model_validate(policy)}


@router.delete("/{policy_id}", response_model=MessageResponse)
async def delete_policy(
    policy_id: str,
    _user: User = Depends(require_ops),
    session: AsyncSession = Depends(get_db),
    storage: StorageService | None = Depends(get_storage),
):
    await _svc(session, storage).delete_policy(policy_id)
    return {"message": "Policy deleted successfully"}
