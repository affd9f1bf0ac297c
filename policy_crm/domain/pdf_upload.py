"""SQLAlchemy ORM model for uploaded policy PDFs and their extraction state."""

from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import JSON, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from policy_crm.db.base import Base
from policy_crm.domain.mixins import TimestampMixin, UUIDPrimaryKeyMixin

STATUS_UPLOADED = "UPLOADED"
STATUS_PROCESSING = "PROCESSING"
STATUS_REVIEW = "REVIEW"
STATUS_COMPLETED = "COMPLETED"
STATUS_FAILED = "FAILED"
UPLOAD_STATUSES = (
    STATUS_UPLOADED, STATUS_PROCESSING, STATUS_REVIEW, STATUS_COMPLETED, STATUS_FAILED,
)


class PDFUpload(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "pdf_uploads"

    filename: Mapped[str] = mapped_column(String(255), nullable=False)
    s3_key: Mapped[str] = mapped_column(String(500), nullable=False, unique=True, index=True)
    s3_url: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
    file_size: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    mime_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    insurer: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    status: Mapped[str] = mapped_column(String(20), default=STATUS_UPLOADED, nullable=False, index=True)
    job_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    confidence_score: Mapped[Optional[float]] = mapped_column(Numeric(5, 4, asdecimal=False), nullable=True)

    # Callback payloads from the extraction Lambda are merged into this document
    extracted_data: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
    manual_extras: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    policy_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    uploaded_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
