"""Policy Pydantic schemas (request DTOs and response models).

Create/update bodies leave every field optional: required-field and
range checks are business rules enforced by the validation service so a
single 400 response can list every failure.
"""

from __future__ import annotations

from datetime import date, datetime

from pydantic import Field

from policy_crm.schemas.common import ApiModel


class PolicyFields(ApiModel):
    policy_number: str | None = None
    vehicle_number: str | None = None
    insurer: str | None = None
    product_type: str | None = None
    vehicle_type: str | None = None
    make: str | None = None
    model: str | None = None
    cc: str | None = None
    manufacturing_year: str | None = None
    issue_date: date | None = None
    expiry_date: date | None = None
    idv: float | None = None
    ncb: float | None = None
    discount: float | None = None
    net_od: float | None = None
    ref: str | None = None
    total_od: float | None = None
    net_premium: float | None = None
    total_premium: float | None = None
    cashback_percentage: float | None = None
    cashback_amount: float | None = None
    customer_paid: float | None = None
    customer_cheque_no: str | None = None
    our_cheque_no: str | None = None
    executive: str | None = None
    caller_name: str | None = None
    mobile: str | None = None
    rollover: str | None = None
    remark: str | None = None
    brokerage: float | None = None
    cashback: float | None = None


class PolicyCreate(PolicyFields):
    source: str | None = None


class PolicyUpdate(PolicyFields):
    status: str | None = None


class BulkPolicyRequest(ApiModel):
    policies: list[PolicyCreate] = Field(min_length=1)


class PolicyOut(ApiModel):
    id: str
    policy_number: str
    vehicle_number: str
    insurer: str
    product_type: str
    vehicle_type: str
    make: str
    model: str | None = None
    cc: str | None = None
    manufacturing_year: str | None = None
    issue_date: date | None = None
    expiry_date: date | None = None
    idv: float
    ncb: float
    discount: float
    net_od: float
    ref: str | None = None
    total_od: float
    net_premium: float
    total_premium: float
    cashback_percentage: float
    cashback_amount: float
    customer_paid: float
    customer_cheque_no: str | None = None
    our_cheque_no: str | None = None
    executive: str
    caller_name: str
    mobile: str
    rollover: str | None = None
    remark: str | None = None
    brokerage: float
    cashback: float
    source: str
    status: str
    confidence_score: float | None = None
    s3_key: str | None = None
    created_by: str | None = None
    created_at: datetime
    updated_at: datetime


class BulkRowError(ApiModel):
    index: int
    policy_number: str | None = None
    error: str


class BulkResult(ApiModel):
    created: list[PolicyOut]
    errors: list[BulkRowError]
