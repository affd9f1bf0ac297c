"""PDF upload service: upload lifecycle plus the internal callbacks from the extraction Lambda.

Status flow::

    UPLOADED ──(Lambda result)──▶ REVIEW ──(confirm / auto-create)──▶ COMPLETED
        │                             │
        └──────(Lambda error)─────────┴──▶ FAILED ──(retry)──▶ UPLOADED
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

from sqlalchemy.ext.asyncio import AsyncSession

from policy_crm.core.config import settings
from policy_crm.core.exceptions import (
    BadRequestError,
    ConflictError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from policy_crm.core.pagination import PaginationParams
from policy_crm.domain.pdf_upload import (
    STATUS_COMPLETED,
    STATUS_FAILED,
    STATUS_REVIEW,
    STATUS_UPLOADED,
    UPLOAD_STATUSES,
    PDFUpload,
)
from policy_crm.domain.policy import SOURCE_PDF_UPLOAD
from policy_crm.repositories.user import PDFUploadRepository
from policy_crm.services.extraction import parse_number
from policy_crm.services.insurer_detection import detect_insurer
from policy_crm.services.policy import PolicyService
from policy_crm.services.storage import StorageService, build_upload_key
from policy_crm.services.textract import TextractService

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES: dict[str, str] = {
    "application/pdf": "pdf",
    "image/jpeg": "image",
    "image/jpg": "image",
    "image/png": "image",
}
CONFIRMABLE_STATUSES = (STATUS_REVIEW, STATUS_UPLOADED)


def merge_for_policy(upload: PDFUpload, edited: dict[str, Any] | None) -> dict[str, Any]:
    """Extracted fields < manual extras < reviewer edits, with cashback % derived."""
    merged: dict[str, Any] = {
        **(upload.extracted_data or {}),
        **(upload.manual_extras or {}),
        **(edited or {}),
    }
    merged.pop("manual_extras", None)
    merged.setdefault("insurer", upload.insurer)

    total = parse_number(merged.get("total_premium"))
    cashback = parse_number(merged.get("cashback_amount")) or parse_number(merged.get("cashback"))
    if cashback:
        merged["cashback_amount"] = cashback
        if total and not parse_number(merged.get("cashback_percentage")):
            merged["cashback_percentage"] = round(cashback / total * 100, 2)
    return merged


class UploadService:
    def __init__(
        self,
        session: AsyncSession,
        storage: StorageService | None = None,
        textract: TextractService | None = None,
    ):
        self._repo = PDFUploadRepository(session)
        self._policies = PolicyService(session, storage)
        self._storage = storage
        self._textract = textract

    # ------------------------------------------------------------------
    # User-facing
    # ------------------------------------------------------------------

    async def create_upload(
        self,
        *,
        filename: str,
        content: bytes,
        content_type: str | None,
        insurer: str | None,
        manual_extras: dict[str, str],
        user_id: str | None,
    ) -> PDFUpload:
        if not filename or not content:
            raise BadRequestError("PDF file is required")
        kind = ALLOWED_CONTENT_TYPES.get(content_type or "")
        if kind is None:
            raise BadRequestError("Only PDF and image files are allowed")
        if len(content) > settings.max_upload_size_bytes:
            raise BadRequestError(f"File exceeds {settings.max_upload_size_mb}MB limit")
        if not insurer:
            raise BadRequestError("Insurer is required")
        if self._storage is None:
            raise StorageError("S3 bucket is not configured. Set AWS_S3_BUCKET.")

        if kind == "pdf":
            insurer = await detect_insurer(content, insurer)

        key = build_upload_key(insurer, filename)
        metadata = {
            "insurer": insurer,
            "original_name": quote(filename),
            "uploaded_by": user_id or "",
            **{f"manual_{k}": quote(str(v)) for k, v in manual_extras.items()},
        }
        url = self._storage.upload_pdf(key, content, content_type=content_type or "application/pdf", metadata=metadata)

        upload = await self._repo.create(
            filename=filename,
            s3_key=key,
            s3_url=url,
            file_size=len(content),
            mime_type=content_type,
            insurer=insurer,
            status=STATUS_UPLOADED,
            manual_extras=manual_extras or None,
            uploaded_by=user_id,
        )
        logger.info("Upload %s stored at %s (insurer=%s)", upload.id, key, insurer)
        return upload

    async def list_uploads(
        self, pagination: PaginationParams, *, status: str | None = None
    ) -> tuple[list[PDFUpload], int]:
        return await self._repo.list(
            offset=pagination.offset, limit=pagination.limit, filters={"status": status}
        )

    async def get_upload(self, upload_id: str) -> PDFUpload:
        upload = await self._repo.get_by_id(upload_id)
        if not upload:
            raise NotFoundError("Upload", upload_id)
        return upload

    def download_url(self, upload: PDFUpload) -> str | None:
        """Short-lived GET link to the stored file, or ``None`` when storage is off."""
        if self._storage is None:
            return None
        return self._storage.presigned_url(upload.s3_key)

    async def job_status(self, upload_id: str) -> dict[str, Any]:
        upload = await self.get_upload(upload_id)
        if not upload.job_id:
            raise BadRequestError("No Textract job recorded for this upload")
        if self._textract is None:
            self._textract = TextractService()
        return self._textract.check_job(upload.job_id, upload.insurer)

    async def retry_upload(self, upload_id: str) -> PDFUpload:
        upload = await self.get_upload(upload_id)
        if upload.status != STATUS_FAILED:
            raise BadRequestError("Only FAILED uploads can be retried")
        updated = await self._repo.update(upload_id, status=STATUS_UPLOADED, error_message=None)
        return updated  # type: ignore[return-value]

    async def delete_upload(self, upload_id: str) -> None:
        upload = await self.get_upload(upload_id)
        await self._repo.delete(upload_id)
        if self._storage:
            self._storage.delete_object(upload.s3_key)
        logger.info("Deleted upload %s", upload_id)

    async def confirm_upload(
        self, upload_id: str, edited_data: dict[str, Any] | None, user_id: str | None
    ) -> tuple[PDFUpload, str]:
        upload = await self.get_upload(upload_id)
        if upload.status not in CONFIRMABLE_STATUSES:
            raise BadRequestError("Upload must be in REVIEW or UPLOADED status to confirm")

        values = merge_for_policy(upload, edited_data)
        values["confidence_score"] = upload.confidence_score
        policy = await self._policies.create_from_values(values, user_id=user_id, source=SOURCE_PDF_UPLOAD)
        updated = await self._repo.update(upload_id, policy_id=policy.id, status=STATUS_COMPLETED)
        logger.info("Upload %s confirmed as policy %s", upload_id, policy.id)
        return updated, policy.id  # type: ignore[return-value]

    # ------------------------------------------------------------------
    # Internal (extraction Lambda)
    # ------------------------------------------------------------------

    async def get_by_s3_key(self, s3_key: str) -> PDFUpload:
        upload = await self._repo.get_by_s3_key(s3_key)
        if not upload:
            raise NotFoundError("Upload", s3_key)
        return upload

    async def apply_result(
        self,
        s3_key: str,
        *,
        status: str | None,
        extracted_data: dict[str, Any] | None = None,
        error: str | None = None,
    ) -> PDFUpload:
        """Merge a Lambda callback into the upload row."""
        if status is not None and status not in UPLOAD_STATUSES:
            raise ValidationError(f"Status must be one of: {', '.join(UPLOAD_STATUSES)}")
        upload = await self.get_by_s3_key(s3_key)

        changes: dict[str, Any] = {}
        if status:
            changes["status"] = status
        if extracted_data:
            incoming = dict(extracted_data)
            extras = incoming.pop("manual_extras", None)
            changes["extracted_data"] = {**(upload.extracted_data or {}), **incoming}
            if extras:
                changes["manual_extras"] = {**(upload.manual_extras or {}), **extras}
            if incoming.get("confidence_score") is not None:
                changes["confidence_score"] = parse_number(incoming["confidence_score"])
            if incoming.get("job_id"):
                changes["job_id"] = incoming["job_id"]
        if error:
            changes["error_message"] = error
        elif status and status != STATUS_FAILED:
            changes["error_message"] = None

        if not changes:
            return upload
        updated = await self._repo.update(upload.id, **changes)
        logger.info("Upload %s updated by callback (status=%s)", upload.id, status or upload.status)
        return updated  # type: ignore[return-value]

    async def mark_failed(self, s3_key: str, error_message: str | None) -> PDFUpload:
        return await self.apply_result(
            s3_key, status=STATUS_FAILED, error=error_message or "Processing failed"
        )

    async def apply_parsed(
        self, s3_key: str, extracted_data: dict[str, Any] | None = None
    ) -> tuple[PDFUpload, str | None, bool]:
        """Store a parsed result and auto-create a policy above the confidence threshold."""
        upload = await self.apply_result(s3_key, status=STATUS_REVIEW, extracted_data=extracted_data)
        if upload.policy_id:
            return upload, upload.policy_id, False

        confidence = upload.confidence_score or 0.0
        if confidence <= settings.auto_create_confidence_threshold:
            logger.info("Upload %s left for review (confidence %.2f)", upload.id, confidence)
            return upload, None, False

        values = merge_for_policy(upload, None)
        values["confidence_score"] = confidence
        try:
            policy = await self._policies.create_from_values(
                values, user_id=upload.uploaded_by, source=SOURCE_PDF_UPLOAD
            )
        except (ValidationError, ConflictError) as exc:
            logger.warning("Auto-create skipped for upload %s: %s", upload.id, exc.message)
            return upload, None, False

        updated = await self._repo.update(upload.id, policy_id=policy.id, status=STATUS_COMPLETED)
        logger.info("Auto-created policy %s from upload %s", policy.id, upload.id)
        return updated, policy.id, True  # type: ignore[return-value]
