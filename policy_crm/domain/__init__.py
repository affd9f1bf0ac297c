"""Domain package — all ORM models are imported here so Alembic autogenerate detects them.

Folder intent:
  policy.py      — Policy records (manual, grid, and PDF-extracted)
  pdf_upload.py  — Uploaded PDFs and their extraction lifecycle
  user.py        — CRM users with ops / founder roles, password change log
  reference.py   — Telecallers, key/value settings, monthly recurring costs
  mixins.py      — Shared UUIDPrimaryKeyMixin, TimestampMixin
"""

from policy_crm.domain.pdf_upload import PDFUpload
from policy_crm.domain.policy import Policy
from policy_crm.domain.reference import MonthlyRecurringCost, Setting, Telecaller
from policy_crm.domain.user import PasswordChangeLog, User

__all__ = [
    "MonthlyRecurringCost",
    "PDFUpload",
    "PasswordChangeLog",
    "Policy",
    "Setting",
    "Telecaller",
    "User",
]
