"""User, password change log, and PDF upload repositories."""

from __future__ import annotations

from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import aliased

from policy_crm.domain.pdf_upload import PDFUpload
from policy_crm.domain.user import PasswordChangeLog, User
from policy_crm.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    model = User

    async def get_by_email(self, email: str) -> User | None:
        return await self.get_by(email=email.lower())

    async def email_taken(self, email: str, *, exclude_id: str | None = None) -> bool:
        q = select(User.id).where(User.email == email.lower())
        if exclude_id:
            q = q.where(User.id != exclude_id)
        return (await self._session.execute(q)).first() is not None

    async def count(self) -> int:
        return (await self._session.execute(select(func.count(User.id)))).scalar_one()

    async def list_by_name(self, *, active_only: bool = False) -> list[User]:
        q = self._base_query().order_by(User.name.asc())
        if active_only:
            q = q.where(User.is_active.is_(True))
        return list((await self._session.execute(q)).scalars().all())


class PasswordChangeLogRepository(BaseRepository[PasswordChangeLog]):
    model = PasswordChangeLog

    async def history(self, *, target_user: str | None = None, limit: int = 100) -> list[dict[str, Any]]:
        """Newest first, with actor and target names resolved."""
        changer = aliased(User)
        target = aliased(User)
        q = (
            select(
                PasswordChangeLog.id,
                PasswordChangeLog.action,
                PasswordChangeLog.reason,
                PasswordChangeLog.created_at.label("timestamp"),
                changer.name.label("changed_by_name"),
                target.name.label("target_user_name"),
            )
            .join(changer, PasswordChangeLog.changed_by == changer.id)
            .join(target, PasswordChangeLog.target_user == target.id)
            .order_by(PasswordChangeLog.created_at.desc())
            .limit(limit)
        )
        if target_user:
            q = q.where(PasswordChangeLog.target_user == target_user)
        rows = (await self._session.execute(q)).mappings().all()
        return [dict(row) for row in rows]


class PDFUploadRepository(BaseRepository[PDFUpload]):
    model = PDFUpload

    async def get_by_s3_key(self, s3_key: str) -> PDFUpload | None:
        return await self.get_by(s3_key=s3_key)
