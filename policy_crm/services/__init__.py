"""Services package — all business logic lives here, never in routers.

Files:
  extraction.py          — Textract blocks → policy fields + confidence
  textract.py            — Textract job start / poll / fetch / status check
  storage.py             — S3 uploads, JSON policy snapshots, best-effort deletes
  insurer_detection.py   — Insurer from PDF text (pdfplumber / OpenAI) or S3 metadata
  pipeline.py            — S3 event → Textract → internal API callback (Lambda)
  validation.py          — Policy business rules
  policy.py              — Policy CRUD, bulk grid entry, dual storage
  upload.py              — Upload lifecycle and Lambda callbacks
  dashboard.py           — Founder dashboard metrics
  auth.py                — Login / register / profile
  users.py               — Founder user management, password changes + log
  telecaller.py          — Telecaller reference data
  settings.py            — Business settings with defaults
  costs.py               — Monthly recurring costs

Rule: routers call services, services call repositories, repositories call the DB.
      No SQLAlchemy queries in routers. No FastAPI imports in services.
"""
