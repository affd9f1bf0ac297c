"""Routers package — HTTP endpoint definitions, mounted under /api.

Files:
  auth.py          — /api/auth/login, /register, /profile
  users.py         — /api/users founder user management + /api/password changes
  policies.py      — /api/policies CRUD, bulk grid entry, stored document
  uploads.py       — /api/upload/* PDF lifecycle + /api/upload/internal/* Lambda callbacks
  dashboard.py     — /api/dashboard/* founder metrics
  telecallers.py   — /api/telecallers
  settings.py      — /api/settings
  costs.py         — /api/monthly-recurring-costs
"""
