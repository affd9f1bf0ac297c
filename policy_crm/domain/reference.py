"""SQLAlchemy ORM models for reference data: telecallers, settings, recurring costs."""

from __future__ import annotations

from datetime import date
from typing import Optional

from sqlalchemy import Boolean, Date, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from policy_crm.db.base import Base
from policy_crm.domain.mixins import TimestampMixin, UUIDPrimaryKeyMixin


class Telecaller(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "telecallers"

    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    branch: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class Setting(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "settings"

    key: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class MonthlyRecurringCost(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "monthly_recurring_costs"

    product_name: Mapped[str] = mapped_column(String(255), nullable=False)
    cost_amount: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), default="INR", nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    # "active" | "inactive"
    status: Mapped[str] = mapped_column(String(20), default="active", nullable=False, index=True)
    category: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True, index=True)
