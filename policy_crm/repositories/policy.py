"""Policy repository: lookups by business keys plus list search."""

from __future__ import annotations

from sqlalchemy import or_, select

from policy_crm.domain.policy import Policy
from policy_crm.repositories.base import BaseRepository


class PolicyRepository(BaseRepository[Policy]):
    model = Policy

    async def number_taken(self, policy_number: str, *, exclude_id: str | None = None) -> bool:
        q = select(Policy.id).where(Policy.policy_number == policy_number)
        if exclude_id:
            q = q.where(Policy.id != exclude_id)
        return (await self._session.execute(q)).first() is not None

    async def search(
        self,
        *,
        offset: int,
        limit: int,
        status: str | None = None,
        source: str | None = None,
        insurer: str | None = None,
        search: str | None = None,
    ) -> tuple[list[Policy], int]:
        clauses = []
        if insurer:
            clauses.append(Policy.insurer.ilike(f"%{insurer}%"))
        if search:
            pattern = f"%{search}%"
            clauses.append(
                or_(
                    Policy.policy_number.ilike(pattern),
                    Policy.vehicle_number.ilike(pattern),
                    Policy.make.ilike(pattern),
                )
            )
        return await self.list(
            offset=offset,
            limit=limit,
            filters={"status": status, "source": source},
            clauses=clauses,
        )
