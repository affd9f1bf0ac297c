"""PDF upload schemas, including the internal callback bodies sent by the extraction Lambda."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from policy_crm.schemas.common import ApiModel


class UploadOut(ApiModel):
    id: str
    filename: str
    s3_key: str
    s3_url: str | None = None
    file_size: int | None = None
    mime_type: str | None = None
    insurer: str | None = None
    status: str
    job_id: str | None = None
    confidence_score: float | None = None
    extracted_data: dict[str, Any] | None = None
    manual_extras: dict[str, Any] | None = None
    error_message: str | None = None
    policy_id: str | None = None
    uploaded_by: str | None = None
    created_at: datetime
    updated_at: datetime


class UploadDetailOut(UploadOut):
    download_url: str | None = None


class UploadStatusOut(ApiModel):
    id: str
    status: str
    confidence_score: float | None = None
    error_message: str | None = None
    policy_id: str | None = None
    updated_at: datetime


class JobStatusOut(ApiModel):
    job_id: str
    status: str
    progress: int
    extracted_data: dict[str, Any] | None = None
    error: str | None = None


class ConfirmUploadRequest(ApiModel):
    edited_data: dict[str, Any] | None = None


class ConfirmUploadOut(ApiModel):
    upload: UploadOut
    policy_id: str


class InternalUploadUpdate(ApiModel):
    extracted_data: dict[str, Any] | None = None
    status: str | None = None
    error: str | None = None


class InternalFailure(ApiModel):
    error_message: str | None = None
    error: str | None = None


class ParsedResult(ApiModel):
    upload: UploadOut
    policy_id: str | None = None
    auto_created: bool
