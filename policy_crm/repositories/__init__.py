"""Repositories package — every SQLAlchemy query lives here.

Files:
  base.py       — Generic CRUD repository (copy pattern for new entities)
  policy.py     — Policy lookups and list search
  user.py       — Users, password change log, PDF uploads
  reference.py  — Telecallers, settings, monthly recurring costs
  dashboard.py  — Read-only policy aggregations
"""
