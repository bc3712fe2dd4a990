"""
Repository for stored proceeding records.

Responsibility: Data access layer for the ``debates`` table.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Optional, Set

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import DebateModel, utcnow

logger = logging.getLogger(__name__)


class DebateRepository:
    """Repository handling persistence for ``DebateModel`` records."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_ext_id(self, ext_id: str) -> Optional[DebateModel]:
        """Fetch a debate by its upstream external id."""
        stmt = select(DebateModel).where(DebateModel.ext_id == ext_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def existing_ext_ids(self, ext_ids: Iterable[str]) -> Set[str]:
        """Subset of ``ext_ids`` already stored."""
        id_list = [ext_id for ext_id in set(ext_ids) if ext_id]
        if not id_list:
            return set()
        stmt = select(DebateModel.ext_id).where(DebateModel.ext_id.in_(id_list))
        result = await self.session.execute(stmt)
        return set(result.scalars().all())

    async def upsert(self, payload: Dict[str, Any]) -> DebateModel:
        """Insert or update a single debate keyed by ``ext_id``."""
        ext_id = payload.get("ext_id")
        if not ext_id:
            raise ValueError("debate payload missing ext_id")

        now = utcnow()
        existing = await self.get_by_ext_id(ext_id)
        if existing:
            for key, value in payload.items():
                if key in {"id", "created_at"}:
                    continue
                if hasattr(existing, key):
                    setattr(existing, key, value)
            existing.updated_at = now
            await self.session.flush()
            logger.debug("Updated debate %s", ext_id)
            return existing

        model = DebateModel(**payload, created_at=now, updated_at=now)
        self.session.add(model)
        await self.session.flush()
        logger.debug("Inserted debate %s", ext_id)
        return model
