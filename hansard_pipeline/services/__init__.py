"""
Pipeline services.

- Sitting-date resolution
- Section-tree crawling
- Record enrichment and member resolution
- Speaker name reconciliation
- Member roster sync
"""

from .contracts import MemberRegistry, ProceedingStore
from .member_resolver import MemberResolver
from .member_sync import MemberSync
from .record_enricher import DebateCache, PipelineRunContext, RecordEnricher
from .section_crawler import CrawlResult, SectionTreeCrawler
from .sitting_dates import SittingDateCache, SittingDateResolver
from .speaker_reconciler import (
    MatchCandidateStore,
    ReconciliationReport,
    SpeakerReconciler,
    find_best_match,
)

__all__ = [
    "MemberRegistry",
    "ProceedingStore",
    "MemberResolver",
    "MemberSync",
    "DebateCache",
    "PipelineRunContext",
    "RecordEnricher",
    "CrawlResult",
    "SectionTreeCrawler",
    "SittingDateCache",
    "SittingDateResolver",
    "MatchCandidateStore",
    "ReconciliationReport",
    "SpeakerReconciler",
    "find_best_match",
]
