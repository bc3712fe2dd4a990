"""
SQLAlchemy-backed member registry and proceeding store.

Responsibility: Bind the pipeline's storage contracts to the database
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Set

from ..models import MemberRecord, ProceedingRecord
from .models import MemberModel
from .repositories import DebateRepository, MemberRepository, SpeakerRepository
from .session import Database

logger = logging.getLogger(__name__)


def member_to_payload(member: MemberRecord) -> Dict[str, Any]:
    return {
        "member_id": member.member_id,
        "display_as": member.display_name,
        "full_title": member.full_title,
        "party": member.affiliation,
        "constituency": member.constituency,
        "department": member.department,
        "house": member.house,
        "gender": member.gender,
        "house_start_date": member.house_start_date,
        "house_end_date": member.house_end_date,
    }


def member_from_model(model: MemberModel) -> MemberRecord:
    return MemberRecord(
        member_id=model.member_id,
        display_name=model.display_as,
        constituency=model.constituency,
        affiliation=model.party,
        department=model.department,
        house=model.house,
        full_title=model.full_title,
        gender=model.gender,
        house_start_date=model.house_start_date,
        house_end_date=model.house_end_date,
    )


def record_to_payload(record: ProceedingRecord, parent_ext_id: Optional[str] = None) -> Dict[str, Any]:
    return {
        "ext_id": record.external_id,
        "parent_ext_id": parent_ext_id,
        "title": record.title,
        "parent_title": record.parent_title or None,
        "sitting_date": record.date,
        "chamber": record.chamber,
        "section": record.section,
        "record_type": record.record_type,
        "location": record.overview.location,
        "hrs_tag": record.overview.hrs_tag,
        "entries": [entry.model_dump() for entry in record.entries],
    }


def _walk(record: ProceedingRecord, parent_ext_id: Optional[str] = None) -> Iterator[tuple]:
    yield record, parent_ext_id
    for child in record.children:
        yield from _walk(child, record.external_id)


class SqlMemberRegistry:
    """
    Member registry on top of :class:`Database`.

    Example:
        registry = SqlMemberRegistry(db)
        members = await registry.query_members_by_id([4001, 4002])
    """

    def __init__(self, database: Database):
        self.database = database

    async def query_members_by_id(self, member_ids: Sequence[int]) -> List[MemberRecord]:
        async with self.database.session() as session:
            models = await MemberRepository(session).get_many(member_ids)
            return [member_from_model(model) for model in models]

    async def upsert_member(self, member: MemberRecord) -> None:
        async with self.database.session() as session:
            await MemberRepository(session).upsert(member_to_payload(member))

    async def get_distinct_speaker_names(self) -> List[str]:
        async with self.database.session() as session:
            return await SpeakerRepository(session).distinct_names()


class SqlProceedingStore:
    """Proceeding store writing records, their children and speakers."""

    def __init__(self, database: Database):
        self.database = database

    async def existing_ids(self, external_ids: Iterable[str]) -> Set[str]:
        async with self.database.session() as session:
            return await DebateRepository(session).existing_ext_ids(external_ids)

    async def save_records(self, records: Sequence[ProceedingRecord]) -> int:
        """
        Upsert ``records`` (children included) in one transaction.

        Returns the number of top-level records saved.
        """
        async with self.database.session() as session:
            debates = DebateRepository(session)
            speakers = SpeakerRepository(session)
            for record in records:
                for item, parent_ext_id in _walk(record):
                    debate = await debates.upsert(record_to_payload(item, parent_ext_id))
                    await speakers.replace_for_debate(
                        debate.id,
                        [
                            (entry.name, entry.member_id)
                            for entry in item.entries
                            if entry.name
                        ],
                    )
        logger.info("Saved %s records", len(records))
        return len(records)
