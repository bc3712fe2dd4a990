"""
Repository for speaker names observed in stored debates.

Responsibility: Data access layer for the ``debate_speakers`` table.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import SpeakerModel


class SpeakerRepository:
    """Repository for ``SpeakerModel`` rows."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def replace_for_debate(
        self,
        debate_id: int,
        speakers: Iterable[Tuple[str, Optional[int]]],
    ) -> int:
        """Replace the speakers stored for ``debate_id``; returns the row count."""
        await self.session.execute(
            delete(SpeakerModel).where(SpeakerModel.debate_id == debate_id)
        )
        rows = {}
        for name, member_id in speakers:
            if name and name not in rows:
                rows[name] = SpeakerModel(debate_id=debate_id, name=name, member_id=member_id)
        self.session.add_all(rows.values())
        await self.session.flush()
        return len(rows)

    async def distinct_names(self) -> List[str]:
        """Every distinct speaker name, alphabetically."""
        stmt = select(SpeakerModel.name).distinct().order_by(SpeakerModel.name)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
