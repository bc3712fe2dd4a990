"""
Sitting-date resolution.

Answers "what was the most recent sitting day" for one chamber or for
Parliament as a whole. Answers are cached for a fixed time-to-live so a
scheduler polling every few minutes does not hit the overview endpoint on
every run.

Responsibility: Latest sitting date per chamber, with a TTL cache
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, Dict, Optional, Sequence

from ..adapters import HansardClient

logger = logging.getLogger(__name__)

DEFAULT_CHAMBERS = ("Commons", "Lords")
LATEST_KEY = "latest"


@dataclass
class _CacheEntry:
    value: date
    stored_at: float


class SittingDateCache:
    """
    Time-bounded cache of resolved sitting dates.

    Keys are chamber names plus the special ``"latest"`` key for the
    across-chambers answer. The clock is injectable for tests.
    """

    def __init__(
        self,
        ttl_seconds: float = 1800,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, _CacheEntry] = {}

    def get(self, key: str) -> Optional[date]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.stored_at >= self.ttl_seconds:
            del self._entries[key]
            return None
        return entry.value

    def set(self, key: str, value: date) -> None:
        self._entries[key] = _CacheEntry(value=value, stored_at=self._clock())

    def clear(self) -> None:
        self._entries.clear()


def parse_sitting_date(raw: str) -> date:
    """
    Parse the overview endpoint's answer into a calendar date.

    Accepts either a plain date (``2024-05-23``) or a datetime
    (``2024-05-23T00:00:00``), with or without surrounding quotes.

    Raises:
        ValueError: if the value is not an ISO date
    """
    cleaned = raw.replace('"', "").strip()
    try:
        return datetime.fromisoformat(cleaned).date()
    except ValueError:
        return date.fromisoformat(cleaned[:10])


class SittingDateResolver:
    """
    Resolves the latest sitting date per chamber or across chambers.

    Example:
        resolver = SittingDateResolver(client)
        latest = await resolver.resolve_last_sitting_date()
        commons = await resolver.resolve_last_sitting_date("Commons")
    """

    def __init__(
        self,
        client: HansardClient,
        cache: Optional[SittingDateCache] = None,
        chambers: Sequence[str] = DEFAULT_CHAMBERS,
    ):
        self.client = client
        self.cache = cache or SittingDateCache()
        self.chambers = tuple(chambers)

    async def resolve_last_sitting_date(self, chamber: Optional[str] = None) -> date:
        """
        Latest sitting date for ``chamber``, or the later of all chambers.

        On a tie the first chamber in the configured order wins.

        Raises:
            HansardAPIError: if the upstream lookup fails
            ValueError: if the upstream value is not a date
        """
        if chamber:
            return await self._resolve_chamber(chamber)

        cached = self.cache.get(LATEST_KEY)
        if cached is not None:
            logger.debug("Using cached latest sitting date %s", cached)
            return cached

        try:
            dates = await asyncio.gather(
                *(self._resolve_chamber(name) for name in self.chambers)
            )
        except Exception as e:
            logger.error(f"Error getting last sitting date: {e}")
            raise

        latest = dates[0]
        for candidate in dates[1:]:
            if candidate > latest:
                latest = candidate

        self.cache.set(LATEST_KEY, latest)
        logger.info("Latest sitting date across %s: %s", "/".join(self.chambers), latest)
        return latest

    async def _resolve_chamber(self, chamber: str) -> date:
        cached = self.cache.get(chamber)
        if cached is not None:
            logger.debug("Using cached sitting date for %s: %s", chamber, cached)
            return cached

        raw = await self.client.get_last_sitting_date(chamber)
        sitting_date = parse_sitting_date(raw)
        self.cache.set(chamber, sitting_date)
        logger.debug("Last sitting date for %s: %s", chamber, sitting_date)
        return sitting_date
