"""Tests for policy business rules."""

import pytest

from policy_crm.core.exceptions import ValidationError
from policy_crm.services.validation import policy_errors, validate_policy

VALID = {
    "policy_number": "P-1",
    "vehicle_number": "KA01AB1234",
    "insurer": "TATA_AIG",
    "total_premium": 10000,
    "net_premium": 8500,
    "issue_date": "2025-01-01",
    "expiry_date": "2025-12-31",
}


def _with(**changes):
    return {**VALID, **changes}


def test_valid_policy_has_no_errors():
    assert policy_errors(VALID) == []
    validate_policy(VALID)


def test_required_fields():
    errors = policy_errors({"total_premium": 100})
    assert "Policy number is required" in errors
    assert "Vehicle number is required" in errors
    assert "Insurer is required" in errors


def test_total_premium_must_be_positive():
    assert "Total premium must be greater than 0" in policy_errors(_with(total_premium=0))
    assert "Total premium must be greater than 0" in policy_errors(_with(total_premium=None))


def test_total_premium_optional_for_grid_rows():
    assert policy_errors(_with(total_premium=None), require_premium=False) == []


@pytest.mark.parametrize(
    "changes,message",
    [
        ({"idv": -1}, "Idv cannot be negative"),
        ({"net_premium": 12000}, "Net premium cannot exceed total premium"),
        ({"net_od": 600, "total_od": 500}, "Net OD cannot exceed total OD"),
        ({"cashback_percentage": 55}, "Cashback percentage cannot exceed 50%"),
        ({"cashback_amount": 5001}, "Cashback amount cannot exceed 50% of total premium"),
        ({"ncb": 65}, "NCB must be between 0 and 50"),
        ({"expiry_date": "2025-01-15"}, "Policy duration must be at least 30 days"),
        ({"expiry_date": "2029-01-01"}, "Policy duration cannot exceed 1095 days"),
    ],
)
def test_business_rules(changes, message):
    assert message in policy_errors(_with(**changes))


def test_cashback_at_half_of_premium_is_allowed():
    assert policy_errors(_with(cashback_amount=5000, cashback_percentage=50)) == []


def test_validate_policy_reports_every_failure():
    with pytest.raises(ValidationError) as exc_info:
        validate_policy(_with(policy_number="", ncb=80))
    assert exc_info.value.errors == ["Policy number is required", "NCB must be between 0 and 50"]
    assert exc_info.value.status_code == 400
