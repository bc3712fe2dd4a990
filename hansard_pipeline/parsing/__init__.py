"""Attribution parsing, affiliation normalization and record typing."""

from .affiliations import PARTY_MAPPINGS, normalize_affiliation
from .attribution import AttributionKind, ParsedAttribution, parse_attribution
from .record_types import derive_record_type, procedural_reason

__all__ = [
    "PARTY_MAPPINGS",
    "normalize_affiliation",
    "AttributionKind",
    "ParsedAttribution",
    "parse_attribution",
    "derive_record_type",
    "procedural_reason",
]
