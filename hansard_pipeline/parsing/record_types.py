"""
Record type tagging and procedural content filtering.

Responsibility: Derive a human-readable type from a record overview and
decide whether an assembled record is substantive enough to keep.
"""

from __future__ import annotations

from typing import Optional, Tuple

from ..models.proceeding import ProceedingRecord, RecordOverview

# Applied in order, first occurrence only
HRS_TAG_LABELS: Tuple[Tuple[str, str], ...] = (
    ("hs_2BillTitle", "Bill Reading"),
    ("hs_2cBillTitle", "Bill Reading"),
    ("hs_8Question", "Question"),
    ("hs_8Statement", "Written Statement"),
    ("hs_8Petition", "Petition"),
    ("hs_2cStatement", "Statement"),
    ("hs_2cUrgentQuestion", "Urgent Question"),
    ("hs_2DebBill", "Debated Bill"),
    ("hs_6bDepartment", "Department Question"),
    ("hs_2BusinessWODebate", "Business Without Debate"),
    ("hs_2cWestHallDebate", "Westminster Hall"),
    ("hs_2WestHallDebate", "Westminster Hall"),
    ("hs_2cGenericHdg", "General Debate"),
    ("hs_2cDebatedMotion", "Debated Motion"),
    ("hs_2DebatedMotion", "Debated Motion"),
    ("hs_3MainHdg", "Main"),
    ("hs_2GenericHdg", "Generic Debate"),
)

DEFAULT_RECORD_TYPE = "Committee"
MIN_SINGLE_CONTRIBUTION_WORDS = 100


def derive_record_type(overview: RecordOverview) -> str:
    """Type tag for a record, from its location, title or HRS tag."""
    location = overview.location or ""
    if "Grand Committee" in location:
        return "Grand Committee"
    if "Lords Chamber" in location:
        return "Lords Chamber"

    if "Prime Minister" in (overview.title or ""):
        return "Prime Minister's Questions"

    record_type = overview.hrs_tag or DEFAULT_RECORD_TYPE
    for tag, label in HRS_TAG_LABELS:
        record_type = record_type.replace(tag, label, 1)

    return record_type


def procedural_reason(record: ProceedingRecord, strict: bool = False) -> Optional[str]:
    """
    Why ``record`` should be skipped as procedural, or ``None`` to keep it.

    Empty records, prayers and "BigBold" headings are never debates. With
    ``strict``, records without any attributed member and one-contribution
    records shorter than 100 words are skipped as well.
    """
    overview = record.overview
    if not record.entries:
        return "no entries"
    if "Prayer" in (overview.title or "") or "Prayer" in (overview.next_debate_title or ""):
        return "prayers"
    if "BigBold" in (overview.hrs_tag or ""):
        return "heading"
    if not strict:
        return None
    if all(entry.member_id is None for entry in record.entries):
        return "no member contributions"
    if len(record.entries) == 1 and record.entries[0].item_type == "Contribution":
        words = len((record.entries[0].value or "").split())
        if words < MIN_SINGLE_CONTRIBUTION_WORDS:
            return "single short contribution"
    return None
