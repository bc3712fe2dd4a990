"""
Speaker attribution parsing.

Hansard items carry a free-text ``AttributedTo`` string such as
``"Jane Doe (Anytown) (Lab)"``, ``"Lord Smith (CB)"`` or
``"The Secretary of State for Health (Jane Doe)"``. The rules below are
tried in order and the first match wins; the order matters because a
string with two parentheticals also matches the single-parenthetical rule.

Responsibility: Classify attribution strings and extract identity fields
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional
import logging
import re

from .affiliations import normalize_affiliation

logger = logging.getLogger(__name__)

MINISTERIAL_PREFIX = "The "

_ROLE_PATTERN = re.compile(r"^The ([^(]+)")
_NAME_CONSTITUENCY_AFFILIATION_PATTERN = re.compile(
    r"^([^(]+)\s*\(([^)]+)\)\s*\(([^)]+)\)"
)
_NAME_AFFILIATION_PATTERN = re.compile(r"^([^(]+)\s*\(([^)]+)\)")


class AttributionKind(str, Enum):
    """Shape of a parsed attribution string."""
    ROLE = "role"
    NAME_CONSTITUENCY_AFFILIATION = "name_constituency_affiliation"
    NAME_AFFILIATION = "name_affiliation"
    BARE_NAME = "bare_name"


@dataclass(frozen=True)
class ParsedAttribution:
    """Identity fields extracted from one attribution string."""
    kind: AttributionKind
    name: Optional[str] = None
    role: Optional[str] = None
    constituency: Optional[str] = None
    affiliation: Optional[str] = None


def _parse(raw: str) -> Optional[ParsedAttribution]:
    if raw.startswith(MINISTERIAL_PREFIX):
        match = _ROLE_PATTERN.match(raw)
        if not match:
            return None
        return ParsedAttribution(kind=AttributionKind.ROLE, role=match.group(1).strip())

    match = _NAME_CONSTITUENCY_AFFILIATION_PATTERN.match(raw)
    if match:
        return ParsedAttribution(
            kind=AttributionKind.NAME_CONSTITUENCY_AFFILIATION,
            name=match.group(1).strip(),
            constituency=match.group(2).strip(),
            affiliation=normalize_affiliation(match.group(3)),
        )

    match = _NAME_AFFILIATION_PATTERN.match(raw)
    if match:
        return ParsedAttribution(
            kind=AttributionKind.NAME_AFFILIATION,
            name=match.group(1).strip(),
            affiliation=normalize_affiliation(match.group(2)),
        )

    return ParsedAttribution(kind=AttributionKind.BARE_NAME, name=raw.strip())


def parse_attribution(raw: Optional[str]) -> Optional[ParsedAttribution]:
    """
    Parse an ``AttributedTo`` string.

    Returns ``None`` when there is nothing to parse or parsing fails; a bad
    attribution never aborts the record it belongs to.

    Example:
        >>> parse_attribution("Jane Doe (Anytown) (Lab)").affiliation
        'Labour'
    """
    if not raw:
        return None
    try:
        return _parse(raw)
    except Exception as exc:
        logger.error("Failed to parse attribution %r: %s", raw, exc)
        return None
