"""
Speaker name reconciliation.

Speaker names stored from attribution text drift from the canonical
member names (titles, initials, typos). For every distinct stored name
the member search is queried, results are scored by normalized edit
distance and sufficiently close canonical names are written to a JSON
candidate file for later review.

Responsibility: Suggest canonical names for stored speaker names
"""

import asyncio
import json
import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from ..adapters import HansardClient
from ..models import MatchCandidate
from ..utils import name_similarity
from .contracts import MemberRegistry

logger = logging.getLogger(__name__)

DEFAULT_SIMILARITY_THRESHOLD = 0.7


@dataclass
class BestMatch:
    """Highest-scoring member search result for a name."""
    result: Dict[str, Any]
    display_name: str
    score: float


@dataclass
class ReconciliationReport:
    """Counters for one reconciliation pass."""
    processed: int = 0
    discrepancies: int = 0
    recorded: int = 0
    no_results: int = 0
    skipped: int = 0
    failures: int = 0


def find_best_match(name: str, results: Iterable[Any]) -> Optional[BestMatch]:
    """
    Best-scoring result for ``name``; the first seen wins ties.

    Results without a ``DisplayAs`` string are ignored.
    """
    target = name.lower()
    best: Optional[BestMatch] = None
    for result in results:
        if not isinstance(result, dict):
            continue
        display_name = result.get("DisplayAs")
        if not isinstance(display_name, str):
            continue
        score = name_similarity(target, display_name.lower())
        if best is None or score > best.score:
            best = BestMatch(result=result, display_name=display_name, score=score)
    return best


class MatchCandidateStore:
    """
    JSON file of match candidates keyed by the observed name.

    The whole document is rewritten after every accepted candidate, via a
    temporary file and an atomic replace, so an interrupted run leaves the
    last complete document on disk.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._lock = asyncio.Lock()
        self._matches: Dict[str, MatchCandidate] = self._load()

    @property
    def matches(self) -> Dict[str, MatchCandidate]:
        return dict(self._matches)

    def get(self, name: str) -> Optional[MatchCandidate]:
        return self._matches.get(name)

    async def record(self, candidate: MatchCandidate) -> bool:
        """
        Store ``candidate`` and persist the file.

        An existing candidate for the same name is only replaced by a
        strictly higher score. Returns whether anything was written.
        """
        async with self._lock:
            existing = self._matches.get(candidate.current_name)
            if existing is not None and existing.similarity >= candidate.similarity:
                return False
            self._matches[candidate.current_name] = candidate
            await asyncio.to_thread(self._write, self._serialize())
            return True

    def _serialize(self) -> str:
        document = {
            name: {
                "currentName": match.current_name,
                "suggestedName": match.suggested_name,
                "similarity": match.similarity,
                "apiResult": match.api_result,
                "timestamp": match.timestamp.isoformat(),
            }
            for name, match in self._matches.items()
        }
        return json.dumps(document, indent=2)

    def _write(self, payload: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        tmp_path.write_text(payload, encoding="utf-8")
        os.replace(tmp_path, self.path)

    def _load(self) -> Dict[str, MatchCandidate]:
        if not self.path.exists():
            return {}
        try:
            document = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read existing matches from {self.path}: {e}")
            return {}
        if not isinstance(document, dict):
            logger.warning("Ignoring malformed matches file %s", self.path)
            return {}

        matches: Dict[str, MatchCandidate] = {}
        for name, raw in document.items():
            try:
                matches[name] = MatchCandidate(
                    current_name=raw.get("currentName", name),
                    suggested_name=raw["suggestedName"],
                    similarity=raw["similarity"],
                    api_result=raw.get("apiResult") or {},
                    timestamp=raw["timestamp"],
                )
            except (AttributeError, KeyError, ValueError) as e:
                logger.warning(f"Skipping malformed match entry {name!r}: {e}")
        logger.info("Loaded %s existing matches from %s", len(matches), self.path)
        return matches


class SpeakerReconciler:
    """
    Compares stored speaker names with the member search.

    Example:
        reconciler = SpeakerReconciler(client, registry, MatchCandidateStore("speaker_matches.json"))
        report = await reconciler.reconcile()
    """

    def __init__(
        self,
        client: HansardClient,
        registry: MemberRegistry,
        store: MatchCandidateStore,
        threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
        lookup_delay_seconds: float = 1.0,
    ):
        self.client = client
        self.registry = registry
        self.store = store
        self.threshold = threshold
        self.lookup_delay_seconds = lookup_delay_seconds

    async def reconcile(self, names: Optional[Iterable[str]] = None) -> ReconciliationReport:
        """
        Reconcile ``names``, or every distinct speaker name in the registry.

        Lookups run one at a time with a pause between consecutive lookups.
        A failure for one name is logged and the pass moves on.
        """
        if names is None:
            names = await self.registry.get_distinct_speaker_names()
        unique_names: List[str] = list(dict.fromkeys(names))

        logger.info("Processing %s unique speaker names", len(unique_names))
        report = ReconciliationReport()
        looked_up = False

        for name in unique_names:
            if not name or not name.strip():
                logger.warning("Skipping blank speaker name")
                report.skipped += 1
                continue

            if looked_up and self.lookup_delay_seconds > 0:
                await asyncio.sleep(self.lookup_delay_seconds)
            looked_up = True

            report.processed += 1
            try:
                await self._reconcile_name(name, report)
            except Exception as e:
                logger.error(f"Error processing {name}: {e}")
                report.failures += 1

        logger.info(
            "Reconciliation complete: %s processed, %s discrepancies, %s recorded, %s failed",
            report.processed, report.discrepancies, report.recorded, report.failures,
        )
        return report

    async def _reconcile_name(self, name: str, report: ReconciliationReport) -> None:
        logger.debug("Checking name: %s", name)
        response = await self.client.search_members(name=name)
        results = response.get("Results")

        if not isinstance(results, list) or not results:
            logger.info("No matches found for: %s", name)
            report.no_results += 1
            return

        best = find_best_match(name, results)
        if best is None:
            logger.info("No usable matches found for: %s", name)
            report.no_results += 1
            return

        if best.display_name == name:
            return

        report.discrepancies += 1
        is_good_match = best.score >= self.threshold
        logger.info(
            "Potential match: current=%r suggested=%r similarity=%.2f%s",
            name,
            best.display_name,
            best.score,
            "" if is_good_match else " (below threshold)",
        )
        if not is_good_match:
            return

        candidate = MatchCandidate(
            current_name=name,
            suggested_name=best.display_name,
            similarity=best.score,
            api_result=best.result,
            timestamp=datetime.now(timezone.utc),
        )
        if await self.store.record(candidate):
            report.recorded += 1
