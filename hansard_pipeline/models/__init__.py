"""
Models package for the Hansard pipeline.

This package contains all Pydantic models for:
- Pipeline responses and metadata
- Domain entities (section trees, proceedings, members, match candidates)
"""

from .adapter_models import (
    AdapterStatus,
    AdapterError,
    AdapterMetrics,
    AdapterResponse,
)
from .proceeding import (
    AttributionEntry,
    LeafRecordRef,
    MatchCandidate,
    MemberRecord,
    ProceedingRecord,
    RecordOverview,
    SectionNode,
    SpeakerSummary,
)

__all__ = [
    "AdapterStatus",
    "AdapterError",
    "AdapterMetrics",
    "AdapterResponse",
    "AttributionEntry",
    "LeafRecordRef",
    "MatchCandidate",
    "MemberRecord",
    "ProceedingRecord",
    "RecordOverview",
    "SectionNode",
    "SpeakerSummary",
]
