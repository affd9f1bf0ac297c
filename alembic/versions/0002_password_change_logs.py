"""password change log

Revision ID: 0002_password_change_logs
Revises: 0001_initial
Create Date: 2026-10-19 00:00:00
"""

from alembic import op
import sqlalchemy as sa

revision = "0002_password_change_logs"
down_revision = "0001_initial"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "password_change_logs",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("changed_by", sa.String(36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=True),
        sa.Column("target_user", sa.String(36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=True),
        sa.Column("action", sa.String(50), nullable=False),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_password_change_logs_changed_by", "password_change_logs", ["changed_by"])
    op.create_index("ix_password_change_logs_target_user", "password_change_logs", ["target_user"])
    op.create_index("ix_password_change_logs_created_at", "password_change_logs", ["created_at"])


def downgrade() -> None:
    op.drop_table("password_change_logs")
