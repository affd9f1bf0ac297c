"""Dashboard response schemas."""

from __future__ import annotations

from policy_crm.schemas.common import ApiModel


class Totals(ApiModel):
    total_policies: int
    total_gwp: float
    total_brokerage: float
    total_cashback: float
    net_revenue: float
    avg_premium: float


class Ratios(ApiModel):
    loss_ratio: float
    expense_ratio: float
    combined_ratio: float


class SourceRow(ApiModel):
    source: str
    policies: int
    gwp: float


class ExecutiveRow(ApiModel):
    executive: str
    policies: int
    gwp: float
    brokerage: float
    cashback: float
    net_revenue: float


class TrendRow(ApiModel):
    date: str
    policies: int
    gwp: float
    brokerage: float
    cashback: float
    net_revenue: float


class VehicleRow(ApiModel):
    make: str
    model: str | None = None
    policies: int
    gwp: float
    avg_cashback_pct: float
    total_cashback: float
    net_revenue: float


class RolloverRow(ApiModel):
    rollover: str
    policies: int
    gwp: float


class DashboardMetrics(ApiModel):
    period: str
    totals: Totals
    ratios: Ratios
    source_breakdown: list[SourceRow]
    top_executives: list[ExecutiveRow]
    daily_trend: list[TrendRow]
