"""Shared fakes for the pipeline tests."""

from typing import Callable, Dict, Iterable, List, Optional, Sequence, Set

import httpx
import pytest

from hansard_pipeline.adapters import HansardClient
from hansard_pipeline.config import HansardAPIConfig
from hansard_pipeline.models import MemberRecord, ProceedingRecord


def make_client(handler: Callable[[httpx.Request], httpx.Response]) -> HansardClient:
    """Client whose requests are answered by ``handler``; retries do not sleep."""
    return HansardClient(
        HansardAPIConfig(retry_base_delay=0.0),
        transport=httpx.MockTransport(handler),
    )


class FakeRegistry:
    """In-memory member registry recording every query."""

    def __init__(
        self,
        members: Optional[Iterable[MemberRecord]] = None,
        speaker_names: Optional[List[str]] = None,
        fail: bool = False,
    ) -> None:
        self.members: Dict[int, MemberRecord] = {m.member_id: m for m in members or []}
        self.speaker_names = speaker_names or []
        self.fail = fail
        self.queries: List[List[int]] = []
        self.upserted: List[MemberRecord] = []

    async def query_members_by_id(self, member_ids: Sequence[int]) -> List[MemberRecord]:
        self.queries.append(list(member_ids))
        if self.fail:
            raise ConnectionError("registry unavailable")
        return [self.members[i] for i in member_ids if i in self.members]

    async def upsert_member(self, member: MemberRecord) -> None:
        self.upserted.append(member)
        self.members[member.member_id] = member

    async def get_distinct_speaker_names(self) -> List[str]:
        return list(self.speaker_names)


class FakeStore:
    """In-memory proceeding store."""

    def __init__(self, existing: Optional[Set[str]] = None, fail_lookup: bool = False) -> None:
        self.existing = set(existing or ())
        self.fail_lookup = fail_lookup
        self.saved: List[ProceedingRecord] = []

    async def existing_ids(self, external_ids: Iterable[str]) -> Set[str]:
        if self.fail_lookup:
            raise ConnectionError("store unavailable")
        return {ext_id for ext_id in external_ids if ext_id in self.existing}

    async def save_records(self, records: Sequence[ProceedingRecord]) -> int:
        self.saved.extend(records)
        self.existing.update(record.external_id for record in records)
        return len(records)


@pytest.fixture
def registry() -> FakeRegistry:
    return FakeRegistry()
