"""Policy service: CRUD, grid bulk entry, and the S3 JSON snapshot ("dual storage").

Every policy saved through this service is written to the database and,
when a bucket is configured, mirrored as a JSON document under
``data/policies/{confirmed|manual|bulk|other}/``. Snapshot failures are
logged and never fail the request.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Mapping

from sqlalchemy.ext.asyncio import AsyncSession

from policy_crm.core.exceptions import ConflictError, NotFoundError, StorageError, ValidationError
from policy_crm.core.pagination import PaginationParams
from policy_crm.domain.policy import (
    SOURCE_MANUAL_FORM,
    SOURCE_MANUAL_GRID,
    SOURCES,
    STATUSES,
    Policy,
)
from policy_crm.repositories.policy import PolicyRepository
from policy_crm.schemas.policy import PolicyCreate, PolicyOut, PolicyUpdate
from policy_crm.services.extraction import DATE_FIELDS, NUMERIC_FIELDS, parse_date, parse_number
from policy_crm.services.settings import SettingsService
from policy_crm.services.storage import StorageService, build_snapshot_key
from policy_crm.services.validation import policy_errors, validate_policy

logger = logging.getLogger(__name__)

_WRITABLE = frozenset(PolicyCreate.model_fields) | {"status", "confidence_score", "source"}


def normalize_policy_values(values: Mapping[str, Any]) -> dict[str, Any]:
    """Keep known policy columns, coerce numbers and dates, and drop empty values."""
    out: dict[str, Any] = {}
    for field, raw in values.items():
        if field not in _WRITABLE or raw is None or raw == "":
            continue
        if field in NUMERIC_FIELDS or field == "confidence_score":
            value: Any = parse_number(raw)
        elif field in DATE_FIELDS:
            iso = parse_date(raw)
            value = date.fromisoformat(iso) if iso else None
        else:
            value = str(raw).strip() if isinstance(raw, str) else str(raw)
        if value is not None and value != "":
            out[field] = value
    return out


def policy_document(policy: Policy) -> dict[str, Any]:
    return PolicyOut.model_validate(policy).model_dump(mode="json")


class PolicyService:
    def __init__(self, session: AsyncSession, storage: StorageService | None = None):
        self._repo = PolicyRepository(session)
        self._settings = SettingsService(session)
        self._storage = storage

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def list_policies(
        self,
        pagination: PaginationParams,
        *,
        status: str | None = None,
        source: str | None = None,
        insurer: str | None = None,
        search: str | None = None,
    ) -> tuple[list[Policy], int]:
        return await self._repo.search(
            offset=pagination.offset,
            limit=pagination.limit,
            status=status,
            source=source,
            insurer=insurer,
            search=search,
        )

    async def get_policy(self, policy_id: str) -> Policy:
        policy = await self._repo.get_by_id(policy_id)
        if not policy:
            raise NotFoundError("Policy", policy_id)
        return policy

    async def get_policy_document(self, policy_id: str) -> tuple[dict[str, Any], str]:
        """Return ``(document, origin)``; the S3 snapshot wins, the DB row is the fallback."""
        policy = await self.get_policy(policy_id)
        if self._storage and policy.s3_key:
            try:
                return self._storage.get_json(policy.s3_key), "s3"
            except StorageError as exc:
                logger.warning("Snapshot read failed for policy %s, using database: %s", policy_id, exc)
        return policy_document(policy), "database"

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def _apply_defaults(self, values: dict[str, Any]) -> dict[str, Any]:
        total = values.get("total_premium")
        if total:
            values.setdefault("net_premium", total)
            values.setdefault("customer_paid", total)
            if "brokerage" not in values:
                percent = await self._settings.brokerage_percent()
                values["brokerage"] = round(total * percent / 100, 2)
        return values

    async def _snapshot(self, policy: Policy) -> Policy:
        if self._storage is None:
            return policy
        key = build_snapshot_key(policy.id, policy.source)
        try:
            self._storage.put_json(key, policy_document(policy))
        except StorageError as exc:
            logger.error("Policy %s saved without S3 snapshot: %s", policy.id, exc)
            return policy
        previous = policy.s3_key
        updated = await self._repo.update(policy.id, s3_key=key)
        if previous and previous != key:
            self._storage.delete_object(previous)
        return updated or policy

    async def create_from_values(
        self,
        values: Mapping[str, Any],
        *,
        user_id: str | None,
        source: str,
    ) -> Policy:
        """Validate and insert a policy from a plain dict (forms, confirmed PDFs)."""
        data = normalize_policy_values(values)
        data["source"] = source if source in SOURCES else SOURCE_MANUAL_FORM
        validate_policy(data)
        if await self._repo.number_taken(data["policy_number"]):
            raise ConflictError(f"Policy with number '{data['policy_number']}' already exists")

        data = await self._apply_defaults(data)
        policy = await self._repo.create(**data, created_by=user_id)
        logger.info("Created policy %s (%s) from %s", policy.policy_number, policy.id, source)
        return await self._snapshot(policy)

    async def create_policy(self, body: PolicyCreate, user_id: str | None) -> Policy:
        return await self.create_from_values(
            body.model_dump(exclude_none=True),
            user_id=user_id,
            source=body.source or SOURCE_MANUAL_FORM,
        )

    async def update_policy(self, policy_id: str, body: PolicyUpdate) -> Policy:
        policy = await self.get_policy(policy_id)
        changes = normalize_policy_values(body.model_dump(exclude_unset=True, exclude_none=True))
        if "status" in changes and changes["status"] not in STATUSES:
            raise ValidationError(f"Status must be one of: {', '.join(STATUSES)}")

        merged = {**policy_document(policy), **changes}
        validate_policy(merged)
        if "policy_number" in changes and await self._repo.number_taken(
            changes["policy_number"], exclude_id=policy_id
        ):
            raise ConflictError(f"Policy with number '{changes['policy_number']}' already exists")

        updated = await self._repo.update(policy_id, **changes)
        return await self._snapshot(updated)  # type: ignore[arg-type]

    async def delete_policy(self, policy_id: str) -> None:
        policy = await self.get_policy(policy_id)
        s3_key = policy.s3_key
        await self._repo.delete(policy_id)
        if self._storage and s3_key:
            self._storage.delete_object(s3_key)
        logger.info("Deleted policy %s", policy_id)

    async def bulk_create(
        self, rows: list[PolicyCreate], user_id: str | None
    ) -> tuple[list[Policy], list[dict[str, Any]]]:
        """Insert grid rows one by one; invalid or duplicate rows are reported, not raised."""
        created: list[Policy] = []
        errors: list[dict[str, Any]] = []
        seen: set[str] = set()

        for index, row in enumerate(rows, start=1):
            data = normalize_policy_values(row.model_dump(exclude_none=True))
            number = data.get("policy_number")
            problems = policy_errors(data, require_premium=False)
            if problems:
                errors.append({"index": index, "policy_number": number, "error": ", ".join(problems)})
                continue
            if number in seen or await self._repo.number_taken(number):  # type: ignore[arg-type]
                errors.append({"index": index, "policy_number": number, "error": "Policy number already exists"})
                continue

            seen.add(number)  # type: ignore[arg-type]
            data["source"] = SOURCE_MANUAL_GRID
            data = await self._apply_defaults(data)
            policy = await self._repo.create(**data, created_by=user_id)
            created.append(await self._snapshot(policy))

        logger.info("Bulk create: %d created, %d failed", len(created), len(errors))
        return created, errors
