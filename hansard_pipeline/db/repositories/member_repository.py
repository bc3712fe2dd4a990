"""
Repository for member registry operations.

Responsibility: Data access layer for the ``members`` table.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import MemberModel, utcnow

logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = (
    "display_as",
    "full_title",
    "party",
    "constituency",
    "department",
    "house",
    "gender",
    "house_start_date",
    "house_end_date",
    "updated_at",
)


class MemberRepository:
    """Repository encapsulating persistence for ``MemberModel`` records."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_many(self, member_ids: Iterable[int]) -> List[MemberModel]:
        """Fetch the members whose ids are in ``member_ids``."""
        id_list = sorted(set(member_ids))
        if not id_list:
            return []
        stmt = select(MemberModel).where(MemberModel.member_id.in_(id_list))
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    def _normalize_payload(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        if payload.get("member_id") is None:
            raise ValueError("member payload missing required 'member_id'")

        data = {key: payload.get(key) for key in _UPDATABLE_FIELDS if key != "updated_at"}
        data["member_id"] = int(payload["member_id"])
        data["display_as"] = data.get("display_as") or ""

        now = utcnow()
        data["created_at"] = now
        data["updated_at"] = now
        return data

    async def upsert(self, payload: Dict[str, Any]) -> None:
        """
        Insert or update one member in a single statement.

        Uses ``ON CONFLICT`` on PostgreSQL and SQLite. A member that already
        exists keeps its ``created_at`` and, when the new payload has no
        department, its stored department.
        """
        data = self._normalize_payload(payload)

        try:
            dialect = self.session.bind.dialect.name  # type: ignore[attr-defined]
        except Exception:  # pragma: no cover - fallback for tests
            dialect = "sqlite"

        insert = pg_insert if dialect == "postgresql" else sqlite_insert
        stmt = insert(MemberModel).values(data)
        update_columns = {
            key: getattr(stmt.excluded, key)
            for key in _UPDATABLE_FIELDS
            if key != "department" or data.get("department") is not None
        }
        stmt = stmt.on_conflict_do_update(
            index_elements=[MemberModel.member_id],
            set_=update_columns,
        )
        await self.session.execute(stmt)
        logger.debug("Upserted member %s", data["member_id"])
