"""Business-rule validation for policy records.

Every rule is checked and all failures are reported together in a single
:class:`ValidationError` (HTTP 400).
"""

from __future__ import annotations

from datetime import date
from typing import Any, Mapping

from policy_crm.core.exceptions import ValidationError
from policy_crm.services.extraction import parse_date

MAX_CASHBACK_PERCENT = 50.0
MAX_CASHBACK_SHARE = 0.5
NCB_RANGE = (0.0, 50.0)
MIN_DURATION_DAYS = 30
MAX_DURATION_DAYS = 1095

_NON_NEGATIVE = (
    "idv", "discount", "net_od", "total_od", "net_premium", "cashback_percentage",
    "cashback_amount", "customer_paid", "brokerage", "cashback",
)


def _num(data: Mapping[str, Any], field: str) -> float | None:
    value = data.get(field)
    if value in (None, ""):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _as_date(value: Any) -> date | None:
    iso = parse_date(value)
    return date.fromisoformat(iso) if iso else None


def policy_errors(data: Mapping[str, Any], *, require_premium: bool = True) -> list[str]:
    """Return every business-rule violation in ``data`` (empty when valid)."""
    errors: list[str] = []

    for field, label in (
        ("policy_number", "Policy number"),
        ("vehicle_number", "Vehicle number"),
        ("insurer", "Insurer"),
    ):
        if not str(data.get(field) or "").strip():
            errors.append(f"{label} is required")

    total_premium = _num(data, "total_premium")
    if (total_premium is None and require_premium) or (total_premium is not None and total_premium <= 0):
        errors.append("Total premium must be greater than 0")

    for field in _NON_NEGATIVE:
        value = _num(data, field)
        if value is not None and value < 0:
            errors.append(f"{field.replace('_', ' ').capitalize()} cannot be negative")

    net_premium = _num(data, "net_premium")
    if net_premium is not None and total_premium and net_premium > total_premium:
        errors.append("Net premium cannot exceed total premium")

    net_od, total_od = _num(data, "net_od"), _num(data, "total_od")
    if net_od is not None and total_od is not None and total_od > 0 and net_od > total_od:
        errors.append("Net OD cannot exceed total OD")

    cashback_pct = _num(data, "cashback_percentage")
    if cashback_pct is not None and cashback_pct > MAX_CASHBACK_PERCENT:
        errors.append(f"Cashback percentage cannot exceed {MAX_CASHBACK_PERCENT:g}%")

    cashback_amount = _num(data, "cashback_amount")
    if (
        cashback_amount is not None
        and total_premium
        and total_premium > 0
        and cashback_amount > total_premium * MAX_CASHBACK_SHARE
    ):
        errors.append("Cashback amount cannot exceed 50% of total premium")

    ncb = _num(data, "ncb")
    if ncb is not None and not (NCB_RANGE[0] <= ncb <= NCB_RANGE[1]):
        errors.append("NCB must be between 0 and 50")

    issue, expiry = _as_date(data.get("issue_date")), _as_date(data.get("expiry_date"))
    if issue and expiry:
        days = (expiry - issue).days
        if days < MIN_DURATION_DAYS:
            errors.append(f"Policy duration must be at least {MIN_DURATION_DAYS} days")
        elif days > MAX_DURATION_DAYS:
            errors.append(f"Policy duration cannot exceed {MAX_DURATION_DAYS} days")

    return errors


def validate_policy(data: Mapping[str, Any]) -> None:
    errors = policy_errors(data)
    if errors:
        raise ValidationError(errors)
