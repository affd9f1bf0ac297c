"""SQLAlchemy ORM model for motor insurance policies."""

from __future__ import annotations

from datetime import date
from typing import Optional

from sqlalchemy import Date, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from policy_crm.db.base import Base
from policy_crm.domain.mixins import TimestampMixin, UUIDPrimaryKeyMixin

# Where a policy row came from
SOURCE_PDF_UPLOAD = "PDF_UPLOAD"
SOURCE_MANUAL_FORM = "MANUAL_FORM"
SOURCE_MANUAL_GRID = "MANUAL_GRID"
SOURCE_CSV_IMPORT = "CSV_IMPORT"
SOURCES = (SOURCE_PDF_UPLOAD, SOURCE_MANUAL_FORM, SOURCE_MANUAL_GRID, SOURCE_CSV_IMPORT)

# Workflow status
STATUSES = ("DRAFT", "PARSING", "NEEDS_REVIEW", "SAVED", "REJECTED")


def _money() -> Numeric:
    return Numeric(12, 2, asdecimal=False)


class Policy(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "policies"

    policy_number: Mapped[str] = mapped_column(String(100), nullable=False, unique=True, index=True)
    vehicle_number: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    insurer: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    product_type: Mapped[str] = mapped_column(String(100), default="Private Car", nullable=False)
    vehicle_type: Mapped[str] = mapped_column(String(100), default="Private Car", nullable=False)
    make: Mapped[str] = mapped_column(String(100), default="Unknown", nullable=False)
    model: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    cc: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    manufacturing_year: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)

    issue_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    expiry_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True, index=True)

    # Financials
    idv: Mapped[float] = mapped_column(_money(), default=0, nullable=False)
    ncb: Mapped[float] = mapped_column(_money(), default=0, nullable=False)
    discount: Mapped[float] = mapped_column(_money(), default=0, nullable=False)
    net_od: Mapped[float] = mapped_column(_money(), default=0, nullable=False)
    ref: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    total_od: Mapped[float] = mapped_column(_money(), default=0, nullable=False)
    net_premium: Mapped[float] = mapped_column(_money(), default=0, nullable=False)
    total_premium: Mapped[float] = mapped_column(_money(), default=0, nullable=False)
    cashback_percentage: Mapped[float] = mapped_column(_money(), default=0, nullable=False)
    cashback_amount: Mapped[float] = mapped_column(_money(), default=0, nullable=False)
    customer_paid: Mapped[float] = mapped_column(_money(), default=0, nullable=False)
    customer_cheque_no: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    our_cheque_no: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    brokerage: Mapped[float] = mapped_column(_money(), default=0, nullable=False)
    cashback: Mapped[float] = mapped_column(_money(), default=0, nullable=False)

    # People
    executive: Mapped[str] = mapped_column(String(255), default="Unknown", nullable=False, index=True)
    caller_name: Mapped[str] = mapped_column(String(255), default="Unknown", nullable=False)
    mobile: Mapped[str] = mapped_column(String(20), default="Unknown", nullable=False)

    # "ROLLOVER" (switched insurer) | "RENEWAL" (same insurer) | free text from forms
    rollover: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    remark: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    source: Mapped[str] = mapped_column(String(50), default=SOURCE_MANUAL_FORM, nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(50), default="SAVED", nullable=False, index=True)
    confidence_score: Mapped[Optional[float]] = mapped_column(Numeric(5, 4, asdecimal=False), nullable=True)

    # JSON snapshot in object storage
    s3_key: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    created_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True, index=True)
