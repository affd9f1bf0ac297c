"""initial schema: users, policies, pdf_uploads, telecallers, settings, recurring costs

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 00:00:00
"""

from alembic import op
import sqlalchemy as sa

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def _money(name: str) -> sa.Column:
    return sa.Column(name, sa.Numeric(12, 2), nullable=False, server_default="0")


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("role", sa.String(50), nullable=False, server_default="ops"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("last_login", sa.DateTime(timezone=True), nullable=True),
        sa.Column("phone", sa.String(20), nullable=True),
        sa.Column("department", sa.String(100), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_created_at", "users", ["created_at"])

    op.create_table(
        "policies",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("policy_number", sa.String(100), nullable=False),
        sa.Column("vehicle_number", sa.String(50), nullable=False),
        sa.Column("insurer", sa.String(100), nullable=False),
        sa.Column("product_type", sa.String(100), nullable=False, server_default="Private Car"),
        sa.Column("vehicle_type", sa.String(100), nullable=False, server_default="Private Car"),
        sa.Column("make", sa.String(100), nullable=False, server_default="Unknown"),
        sa.Column("model", sa.String(100), nullable=True),
        sa.Column("cc", sa.String(20), nullable=True),
        sa.Column("manufacturing_year", sa.String(10), nullable=True),
        sa.Column("issue_date", sa.Date(), nullable=True),
        sa.Column("expiry_date", sa.Date(), nullable=True),
        _money("idv"),
        _money("ncb"),
        _money("discount"),
        _money("net_od"),
        sa.Column("ref", sa.String(100), nullable=True),
        _money("total_od"),
        _money("net_premium"),
        _money("total_premium"),
        _money("cashback_percentage"),
        _money("cashback_amount"),
        _money("customer_paid"),
        sa.Column("customer_cheque_no", sa.String(100), nullable=True),
        sa.Column("our_cheque_no", sa.String(100), nullable=True),
        _money("brokerage"),
        _money("cashback"),
        sa.Column("executive", sa.String(255), nullable=False, server_default="Unknown"),
        sa.Column("caller_name", sa.String(255), nullable=False, server_default="Unknown"),
        sa.Column("mobile", sa.String(20), nullable=False, server_default="Unknown"),
        sa.Column("rollover", sa.String(50), nullable=True),
        sa.Column("remark", sa.Text(), nullable=True),
        sa.Column("source", sa.String(50), nullable=False, server_default="MANUAL_FORM"),
        sa.Column("status", sa.String(50), nullable=False, server_default="SAVED"),
        sa.Column("confidence_score", sa.Numeric(5, 4), nullable=True),
        sa.Column("s3_key", sa.String(500), nullable=True),
        sa.Column("created_by", sa.String(36), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_policies_policy_number", "policies", ["policy_number"], unique=True)
    for column in ("vehicle_number", "insurer", "expiry_date", "executive", "source", "status",
                   "created_by", "created_at"):
        op.create_index(f"ix_policies_{column}", "policies", [column])

    op.create_table(
        "pdf_uploads",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("filename", sa.String(255), nullable=False),
        sa.Column("s3_key", sa.String(500), nullable=False),
        sa.Column("s3_url", sa.String(1000), nullable=True),
        sa.Column("file_size", sa.Integer(), nullable=True),
        sa.Column("mime_type", sa.String(100), nullable=True),
        sa.Column("insurer", sa.String(100), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="UPLOADED"),
        sa.Column("job_id", sa.String(100), nullable=True),
        sa.Column("confidence_score", sa.Numeric(5, 4), nullable=True),
        sa.Column("extracted_data", sa.JSON(), nullable=True),
        sa.Column("manual_extras", sa.JSON(), nullable=True),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("policy_id", sa.String(36), nullable=True),
        sa.Column("uploaded_by", sa.String(36), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_pdf_uploads_s3_key", "pdf_uploads", ["s3_key"], unique=True)
    op.create_index("ix_pdf_uploads_status", "pdf_uploads", ["status"])
    op.create_index("ix_pdf_uploads_created_at", "pdf_uploads", ["created_at"])

    op.create_table(
        "telecallers",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False, unique=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(20), nullable=True),
        sa.Column("branch", sa.String(255), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("ix_telecallers_created_at", "telecallers", ["created_at"])

    op.create_table(
        "settings",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("key", sa.String(100), nullable=False, unique=True),
        sa.Column("value", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_settings_created_at", "settings", ["created_at"])

    op.create_table(
        "monthly_recurring_costs",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("product_name", sa.String(255), nullable=False),
        sa.Column("cost_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False, server_default="INR"),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("category", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("created_by", sa.String(36), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("cost_amount > 0", name="ck_recurring_cost_positive"),
    )
    for column in ("start_date", "status", "category", "created_by", "created_at"):
        op.create_index(f"ix_monthly_recurring_costs_{column}", "monthly_recurring_costs", [column])


def downgrade() -> None:
    for table in ("monthly_recurring_costs", "settings", "telecallers", "pdf_uploads", "policies", "users"):
        op.drop_table(table)
