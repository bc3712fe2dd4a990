"""
Storage contracts used by the pipeline services.

The pipeline never talks to a database directly: member lookups, member
upserts, stored speaker names and record persistence all go through these
protocols so the backing store can be swapped (SQLAlchemy in production,
in-memory fakes in tests).

Responsibility: Registry and record store interfaces
"""

from typing import Iterable, List, Protocol, Sequence, Set

from ..models import MemberRecord, ProceedingRecord


class MemberRegistry(Protocol):
    """Persistent store of canonical member identities."""

    async def query_members_by_id(self, member_ids: Sequence[int]) -> List[MemberRecord]:
        ...

    async def upsert_member(self, member: MemberRecord) -> None:
        ...

    async def get_distinct_speaker_names(self) -> List[str]:
        ...


class ProceedingStore(Protocol):
    """Persistent store of assembled proceeding records."""

    async def existing_ids(self, external_ids: Iterable[str]) -> Set[str]:
        ...

    async def save_records(self, records: Sequence[ProceedingRecord]) -> int:
        ...
