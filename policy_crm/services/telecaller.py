"""Telecaller service: names must be unique; delete is a soft deactivate."""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from policy_crm.core.exceptions import ConflictError, NotFoundError, ValidationError
from policy_crm.domain.reference import Telecaller
from policy_crm.repositories.reference import TelecallerRepository
from policy_crm.schemas.reference import TelecallerCreate, TelecallerUpdate

logger = logging.getLogger(__name__)


def _clean_name(name: str | None) -> str:
    cleaned = (name or "").strip()
    if len(cleaned) < 2:
        raise ValidationError("Name must be at least 2 characters")
    return cleaned


class TelecallerService:
    def __init__(self, session: AsyncSession):
        self._repo = TelecallerRepository(session)

    async def list_telecallers(self, *, include_inactive: bool) -> list[Telecaller]:
        return await self._repo.list_all(active_only=not include_inactive)

    async def get_telecaller(self, telecaller_id: str) -> Telecaller:
        telecaller = await self._repo.get_by_id(telecaller_id)
        if not telecaller:
            raise NotFoundError("Telecaller", telecaller_id)
        return telecaller

    async def create_telecaller(self, data: TelecallerCreate) -> Telecaller:
        name = _clean_name(data.name)
        if await self._repo.name_taken(name):
            raise ConflictError(f"Telecaller '{name}' already exists")
        values = data.model_dump(exclude_none=True)
        values["name"] = name
        telecaller = await self._repo.create(**values, is_active=True)
        logger.info("Created telecaller %s", name)
        return telecaller

    async def update_telecaller(self, telecaller_id: str, data: TelecallerUpdate) -> Telecaller:
        await self.get_telecaller(telecaller_id)
        values = data.model_dump(exclude_none=True, exclude_unset=True)
        if "name" in values:
            values["name"] = _clean_name(values["name"])
            if await self._repo.name_taken(values["name"], exclude_id=telecaller_id):
                raise ConflictError(f"Telecaller '{values['name']}' already exists")
        updated = await self._repo.update(telecaller_id, **values)
        return updated  # type: ignore[return-value]

    async def deactivate_telecaller(self, telecaller_id: str) -> Telecaller:
        await self.get_telecaller(telecaller_id)
        updated = await self._repo.update(telecaller_id, is_active=False)
        logger.info("Deactivated telecaller %s", telecaller_id)
        return updated  # type: ignore[return-value]
