"""PDF upload endpoints: thin HTTP layer.

Business logic lives in :mod:`policy_crm.services.upload`. The ``internal``
router receives results from the extraction Lambda and is guarded by the
shared internal token instead of a user JWT.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from policy_crm.core.deps import require_ops, verify_internal_token
from policy_crm.core.pagination import PaginationParams
from policy_crm.core.response import DataResponse, ListResponse, MessageResponse, paginated
from policy_crm.db.base import get_db
from policy_crm.domain.user import User
from policy_crm.schemas.upload import (
    ConfirmUploadOut,
    ConfirmUploadRequest,
    InternalFailure,
    InternalUploadUpdate,
    JobStatusOut,
    ParsedResult,
    UploadDetailOut,
    UploadOut,
    UploadStatusOut,
)
from policy_crm.services.storage import StorageService, get_storage
from policy_crm.services.textract import TextractService
from policy_crm.services.upload import UploadService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/upload", tags=["Uploads"])
internal_router = APIRouter(
    prefix="/upload/internal",
    tags=["Uploads (internal)"],
    dependencies=[Depends(verify_internal_token)],
)


def get_textract() -> TextractService:
    return TextractService()


# ---------------------------------------------------------------------------
# Internal (Lambda → API)
# ---------------------------------------------------------------------------

@internal_router.post("/by-s3key/{s3_key:path}/parsed", response_model=DataResponse[ParsedResult])
async def internal_parsed(
    s3_key: str,
    body: Optional[InternalUploadUpdate] = None,
    session: AsyncSession = Depends(get_db),
    storage: StorageService | None = Depends(get_storage),
):
    """Store a parsed result; auto-creates a policy when confidence is high enough."""
    upload, policy_id, created = await UploadService(session, storage).apply_parsed(
        s3_key, body.extracted_data if body else None
    )
    return {
        "data": {"upload": UploadOut.model_validate(upload), "policy_id": policy_id, "auto_created": created},
    }


@internal_router.post("/by-s3key/{s3_key:path}/failed", response_model=DataResponse[UploadOut])
async def internal_failed(
    s3_key: str,
    body: Optional[InternalFailure] = None,
    session: AsyncSession = Depends(get_db),
):
    error = (body.error_message or body.error) if body else None
    upload = await UploadService(session).mark_failed(s3_key, error)
    return {"message": "Upload marked as failed", "data": UploadOut.model_validate(upload)}


@internal_router.post("/by-s3key/{s3_key:path}", response_model=DataResponse[UploadOut])
async def internal_update(
    s3_key: str,
    body: InternalUploadUpdate,
    session: AsyncSession = Depends(get_db),
):
    upload = await UploadService(session).apply_result(
        s3_key, status=body.status, extracted_data=body.extracted_data, error=body.error,
    )
    return {"message": "Upload updated successfully", "data": UploadOut.model_validate(upload)}


@internal_router.get("/by-s3key/{s3_key:path}", response_model=DataResponse[UploadOut])
async def internal_get(s3_key: str, session: AsyncSession = Depends(get_db)):
    upload = await UploadService(session).get_by_s3_key(s3_key)
    return {"data": UploadOut.model_validate(upload)}


# ---------------------------------------------------------------------------
# User-facing
# ---------------------------------------------------------------------------

@router.post("/pdf", response_model=DataResponse[UploadOut], status_code=status.HTTP_201_CREATED)
async def upload_pdf(
    request: Request,
    pdf: UploadFile = File(..., description="Policy PDF (or scanned image)"),
    insurer: Optional[str] = Form(default=None),
    user: User = Depends(require_ops),
    session: AsyncSession = Depends(get_db),
    storage: StorageService | None = Depends(get_storage),
):
    """Upload a policy PDF. Extra ``manual_*`` form fields are kept as manual extras."""
    form = await request.form()
    manual_extras = {
        key[len("manual_"):]: str(value)
        for key, value in form.items()
        if key.startswith("manual_") and isinstance(value, str) and value != ""
    }
    content = await pdf.read()
    upload = await UploadService(session, storage).create_upload(
        filename=pdf.filename or "",
        content=content,
        content_type=pdf.content_type,
        insurer=insurer,
        manual_extras=manual_extras,
        user_id=user.id,
    )
    return {"message": "PDF uploaded successfully", "data": UploadOut.model_validate(upload)}


@router.get("", response_model=ListResponse[UploadOut])
async def list_uploads(
    filter_status: Optional[str] = Query(default=None, alias="status"),
    pagination: PaginationParams = Depends(),
    _user: User = Depends(require_ops),
    session: AsyncSession = Depends(get_db),
):
    items, total = await UploadService(session).list_uploads(pagination, status=filter_status)
    return paginated([UploadOut.model_validate(u) for u in items], total, pagination.page, pagination.limit)


@router.get("/{upload_id}", response_model=DataResponse[UploadDetailOut])
async def get_upload(
    upload_id: str,
    _user: User = Depends(require_ops),
    session: AsyncSession = Depends(get_db),
    storage: StorageService | None = Depends(get_storage),
):
    service = UploadService(session, storage)
    upload = await service.get_upload(upload_id)
    detail = UploadDetailOut.model_validate(upload)
    detail.download_url = service.download_url(upload)
    return {"data": detail}


@router.get("/{upload_id}/status", response_model=DataResponse[UploadStatusOut])
async def get_upload_status(
    upload_id: str,
    _user: User = Depends(require_ops),
    session: AsyncSession = Depends(get_db),
):
    upload = await UploadService(session).get_upload(upload_id)
    return {"data": UploadStatusOut.model_validate(upload)}


@router.get("/{upload_id}/job-status", response_model=DataResponse[JobStatusOut])
async def get_job_status(
    upload_id: str,
    _user: User = Depends(require_ops),
    session: AsyncSession = Depends(get_db),
    textract: TextractService = Depends(get_textract),
):
    result = await UploadService(session, textract=textract).job_status(upload_id)
    return {"data": result}


@router.post("/{upload_id}/retry", response_model=DataResponse[UploadOut])
async def retry_upload(
    upload_id: str,
    _user: User = Depends(require_ops),
    session: AsyncSession = Depends(get_db),
):
    upload = await UploadService(session).retry_upload(upload_id)
    return {"message": "Upload queued for retry", "data": UploadOut.model_validate(upload)}


@router.post("/{upload_id}/confirm", response_model=DataResponse[ConfirmUploadOut])
async def confirm_upload(
    upload_id: str,
    body: Optional[ConfirmUploadRequest] = None,
    user: User = Depends(require_ops),
    session: AsyncSession = Depends(get_db),
    storage: StorageService | None = Depends(get_storage),
):
    """Turn a reviewed upload into a saved policy."""
    upload, policy_id = await UploadService(session, storage).confirm_upload(
        upload_id, body.edited_data if body else None, user.id
    )
    return {
        "message": "Policy created from upload",
        "data": {"upload": UploadOut.model_validate(upload), "policy_id": policy_id},
    }


@router.delete("/{upload_id}", response_model=MessageResponse)
async def delete_upload(
    upload_id: str,
    _user: User = Depends(require_ops),
    session: AsyncSession = Depends(get_db),
    storage: StorageService | None = Depends(get_storage),
):
    await UploadService(session, storage).delete_upload(upload_id)
    return {"message": "Upload deleted successfully"}
