"""Pydantic schemas package.

Folder intent:
  common.py     — ApiModel base + HealthResponse (all schemas inherit ApiModel)
  auth.py       — Login / register / user profile
  users.py      — User management and password change bodies
  policy.py     — Policy create, update, bulk, and response models
  upload.py     — PDF uploads plus the Lambda callback bodies (/api/upload/internal/*)
  dashboard.py  — Founder dashboard metrics
  reference.py  — Telecallers, settings, monthly recurring costs
"""
