"""
Record enrichment.

Turns a leaf record reference into a fully assembled
:class:`ProceedingRecord`: fetches the record body and speaker list,
parses every item's attribution, resolves members that could not be
identified from the text, strips markup and drops bare timestamp items.

Responsibility: Assemble proceeding records with attributed entries
"""

import asyncio
import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from bs4 import BeautifulSoup

from ..adapters import HansardAPIError, HansardClient
from ..models import (
    AdapterError,
    AttributionEntry,
    LeafRecordRef,
    ProceedingRecord,
    RecordOverview,
    SpeakerSummary,
)
from ..parsing import derive_record_type, normalize_affiliation, parse_attribution
from .member_resolver import MemberResolver

logger = logging.getLogger(__name__)

TIMECODE_PATTERN = re.compile(r"^\d{2}:\d{2}:\d{2}$")

_IDENTITY_FIELDS = ("name", "role", "constituency", "affiliation")


class DebateCache:
    """Assembled records of one run, keyed by external id."""

    def __init__(self):
        self._records: Dict[str, ProceedingRecord] = {}

    def get(self, external_id: str) -> Optional[ProceedingRecord]:
        return self._records.get(external_id)

    def set(self, external_id: str, record: ProceedingRecord) -> None:
        self._records[external_id] = record

    def __contains__(self, external_id: object) -> bool:
        return external_id in self._records

    def __len__(self) -> int:
        return len(self._records)


@dataclass
class PipelineRunContext:
    """Mutable state owned by a single ingestion run."""
    debate_cache: DebateCache = field(default_factory=DebateCache)
    errors: List[AdapterError] = field(default_factory=list)

    def record_error(self, error: Exception, retryable: bool = False, **context: Any) -> None:
        self.errors.append(AdapterError(
            timestamp=datetime.now(timezone.utc),
            error_type=type(error).__name__,
            message=str(error),
            context=context,
            retryable=retryable,
        ))


def strip_markup(value: Optional[str]) -> Optional[str]:
    """Plain text of an item value, with HTML tags removed."""
    if value is None:
        return None
    if "<" not in value:
        return value.strip()
    return BeautifulSoup(value, "html.parser").get_text().strip()


def is_bare_timestamp(entry: AttributionEntry) -> bool:
    """True for unattributed items whose whole text is an ``HH:MM:SS`` stamp."""
    return (
        entry.member_id is None
        and not entry.name
        and not entry.role
        and bool(entry.value)
        and bool(TIMECODE_PATTERN.match(entry.value))
    )


def _as_member_id(raw: Any) -> Optional[int]:
    if raw is None or isinstance(raw, bool):
        return None
    try:
        member_id = int(raw)
    except (TypeError, ValueError):
        return None
    return member_id or None


def _parse_record_date(raw: Optional[str]) -> Optional[date]:
    if not raw:
        return None
    try:
        return date.fromisoformat(raw[:10])
    except ValueError:
        logger.warning("Unparseable record date: %r", raw)
        return None


class RecordEnricher:
    """
    Assembles proceeding records for leaf references.

    Example:
        enricher = RecordEnricher(client, MemberResolver(registry))
        context = PipelineRunContext()
        record = await enricher.enrich(leaf, context)
    """

    def __init__(self, client: HansardClient, member_resolver: MemberResolver):
        self.client = client
        self.member_resolver = member_resolver

    async def enrich(
        self,
        leaf: LeafRecordRef,
        context: PipelineRunContext,
    ) -> Optional[ProceedingRecord]:
        """
        Assembled record for ``leaf``, or ``None`` if it could not be built.

        A record already assembled in this run is returned from the run's
        debate cache without any network I/O.
        """
        cached = context.debate_cache.get(leaf.external_id)
        if cached is not None:
            logger.debug("Debate cache hit for %s", leaf.external_id)
            return cached

        try:
            body, speakers = await asyncio.gather(
                self.client.get_record(leaf.external_id),
                self._fetch_speakers(leaf.external_id),
            )
            record = await self._assemble(leaf, body, speakers)
        except HansardAPIError as e:
            logger.error(f"Error processing record {leaf.external_id}: {e}")
            context.record_error(
                e,
                retryable=e.retries_exhausted,
                external_id=leaf.external_id,
                chamber=leaf.chamber,
                section=leaf.section,
                status_code=e.status_code,
            )
            return None
        except Exception as e:
            logger.error(f"Error processing record {leaf.external_id}: {e}", exc_info=True)
            context.record_error(
                e,
                external_id=leaf.external_id,
                chamber=leaf.chamber,
                section=leaf.section,
            )
            return None

        if record is None:
            logger.warning("Record %s has no id or title, skipping", leaf.external_id)
            return None

        context.debate_cache.set(leaf.external_id, record)
        return record

    async def _fetch_speakers(self, external_id: str) -> List[SpeakerSummary]:
        try:
            payload = await self.client.get_speakers(external_id)
        except HansardAPIError as e:
            logger.warning(f"Could not fetch speakers for {external_id}: {e}")
            return []

        if not isinstance(payload, list):
            logger.warning("Speakers response for %s is not an array", external_id)
            return []

        return [
            SpeakerSummary(
                name=item.get("DisplayAs") or "",
                member_id=_as_member_id(item.get("MemberId")),
                affiliation=normalize_affiliation(item.get("Party")),
                constituency=item.get("MemberFrom"),
            )
            for item in payload
            if isinstance(item, dict)
        ]

    async def _assemble(
        self,
        leaf: LeafRecordRef,
        body: Any,
        speakers: List[SpeakerSummary],
    ) -> Optional[ProceedingRecord]:
        if not isinstance(body, dict):
            raise ValueError(f"Unexpected record body for {leaf.external_id}")

        member_cache: Dict[int, Dict[str, Optional[str]]] = {}
        overview = self._overview(body)
        entries = await self._assemble_entries(body.get("Items"), member_cache)
        children = await self._assemble_children(
            body.get("ChildDebates"), leaf, member_cache
        )

        external_id = leaf.external_id or overview.ext_id
        title = leaf.title or overview.title
        if not external_id or not title:
            return None

        return ProceedingRecord(
            external_id=external_id,
            title=title,
            parent_title=leaf.parent_title,
            date=leaf.date or _parse_record_date(overview.date),
            chamber=leaf.chamber or overview.house,
            section=leaf.section,
            entries=entries,
            overview=overview,
            speakers=speakers,
            children=children,
        )

    @staticmethod
    def _overview(body: Dict[str, Any]) -> RecordOverview:
        raw = body.get("Overview")
        overview = RecordOverview.from_api(raw if isinstance(raw, dict) else {})
        overview.record_type = derive_record_type(overview)
        return overview

    async def _assemble_children(
        self,
        raw_children: Any,
        leaf: LeafRecordRef,
        member_cache: Dict[int, Dict[str, Optional[str]]],
    ) -> List[ProceedingRecord]:
        if not isinstance(raw_children, list):
            return []

        children: List[ProceedingRecord] = []
        for raw in raw_children:
            if not isinstance(raw, dict):
                continue
            overview = self._overview(raw)
            if not overview.ext_id or not overview.title:
                continue
            entries = await self._assemble_entries(raw.get("Items"), member_cache)
            grandchildren = await self._assemble_children(
                raw.get("ChildDebates"), leaf, member_cache
            )
            children.append(ProceedingRecord(
                external_id=overview.ext_id,
                title=overview.title,
                parent_title=leaf.title or "",
                date=_parse_record_date(overview.date) or leaf.date,
                chamber=overview.house or leaf.chamber,
                section=leaf.section,
                entries=entries,
                overview=overview,
                children=grandchildren,
            ))
        return children

    async def _assemble_entries(
        self,
        raw_items: Any,
        member_cache: Dict[int, Dict[str, Optional[str]]],
    ) -> List[AttributionEntry]:
        """
        Attributed entries for one item list.

        Identities seen earlier in the same record are reused; whatever is
        still unidentified is resolved against the registry in one batch.
        """
        if not isinstance(raw_items, list):
            return []

        pairs: List[Tuple[AttributionEntry, Dict[str, Any]]] = [
            (self._entry_from_item(item, member_cache), item)
            for item in raw_items
            if isinstance(item, dict)
        ]

        outstanding = {
            entry.member_id
            for entry, _ in pairs
            if entry.member_id is not None and not entry.has_identity
        }
        if outstanding:
            members = await self.member_resolver.resolve_members(outstanding)
            for entry, _ in pairs:
                if entry.member_id is None or entry.has_identity:
                    continue
                member = members.get(entry.member_id)
                if member is None:
                    continue
                entry.name = member.display_name or None
                entry.constituency = member.constituency
                entry.affiliation = member.affiliation
                entry.role = member.department
                member_cache[entry.member_id] = {
                    key: getattr(entry, key) for key in _IDENTITY_FIELDS
                }

        for entry, item in pairs:
            if not entry.has_identity and item.get("MemberName"):
                entry.name = str(item["MemberName"]).strip() or None

        return [entry for entry, _ in pairs if not is_bare_timestamp(entry)]

    @staticmethod
    def _entry_from_item(
        item: Dict[str, Any],
        member_cache: Dict[int, Dict[str, Optional[str]]],
    ) -> AttributionEntry:
        member_id = _as_member_id(item.get("MemberId"))
        entry = AttributionEntry(
            member_id=member_id,
            value=strip_markup(item.get("Value")),
            timecode=item.get("Timecode"),
            item_type=item.get("ItemType"),
        )
        parsed = parse_attribution(item.get("AttributedTo"))
        if parsed is not None:
            entry.name = parsed.name
            entry.role = parsed.role
            entry.constituency = parsed.constituency
            entry.affiliation = parsed.affiliation

        if member_id is None:
            return entry

        known = member_cache.get(member_id)
        if known is not None and not entry.name:
            for key in _IDENTITY_FIELDS:
                if getattr(entry, key) is None:
                    setattr(entry, key, known[key])
        elif entry.name:
            member_cache[member_id] = {key: getattr(entry, key) for key in _IDENTITY_FIELDS}

        return entry
