"""Schemas for telecallers, settings, and monthly recurring costs."""

from __future__ import annotations

from datetime import date, datetime

from policy_crm.schemas.common import ApiModel


# -- Telecallers --------------------------------------------------------------

class TelecallerCreate(ApiModel):
    name: str
    email: str | None = None
    phone: str | None = None
    branch: str | None = None


class TelecallerUpdate(ApiModel):
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    branch: str | None = None
    is_active: bool | None = None


class TelecallerOut(ApiModel):
    id: str
    name: str
    email: str | None = None
    phone: str | None = None
    branch: str | None = None
    is_active: bool
    created_at: datetime
    updated_at: datetime


# -- Settings -----------------------------------------------------------------

class SettingsUpdate(ApiModel):
    brokerage_percent: float | None = None
    rep_daily_cost: float | None = None
    expected_conversion: float | None = None
    premium_growth: float | None = None


# -- Monthly recurring costs --------------------------------------------------

class CostCreate(ApiModel):
    product_name: str | None = None
    cost_amount: float | None = None
    currency: str = "INR"
    start_date: date | None = None
    end_date: date | None = None
    status: str = "active"
    category: str | None = None
    description: str | None = None


class CostUpdate(ApiModel):
    product_name: str | None = None
    cost_amount: float | None = None
    currency: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    status: str | None = None
    category: str | None = None
    description: str | None = None


class CostOut(ApiModel):
    id: str
    product_name: str
    cost_amount: float
    currency: str
    start_date: date
    end_date: date | None = None
    status: str
    category: str
    description: str | None = None
    created_by: str | None = None
    created_at: datetime
    updated_at: datetime


class CategoryRow(ApiModel):
    category: str
    count: int
    total_amount: float


class CostSummary(ApiModel):
    total_costs: int
    active_costs: int
    inactive_costs: int
    total_active_amount: float
    average_cost: float
    categories: list[CategoryRow]
