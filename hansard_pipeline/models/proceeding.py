"""
Proceeding domain models.

Pydantic models for the Hansard section tree, assembled proceeding records,
their speaker attributions, registry members and speaker-name match
candidates.

Responsibility: Domain entities shared by crawler, enricher and reconciler
"""

from __future__ import annotations

import datetime as dt
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class SectionNode(BaseModel):
    """
    One node of a sitting day's section tree.

    A node with an external identifier is a leaf (an individual proceeding);
    anything else is a group whose children are crawled in order.
    """
    title: str = Field(default="", description="Node title as published")
    external_id: Optional[str] = Field(None, description="Leaf record identifier")
    children: List["SectionNode"] = Field(default_factory=list)

    @property
    def is_leaf(self) -> bool:
        return bool(self.external_id)

    @classmethod
    def from_api(cls, raw: Dict[str, Any]) -> "SectionNode":
        """Build a node (and its subtree) from a ``SectionTreeItems`` entry."""
        children_raw = raw.get("SectionTreeItems") or []
        children = [
            cls.from_api(child)
            for child in children_raw
            if isinstance(child, dict)
        ] if isinstance(children_raw, list) else []
        external_id = raw.get("ExternalId")
        return cls(
            title=raw.get("Title") or "",
            external_id=str(external_id) if external_id else None,
            children=children,
        )


class LeafRecordRef(BaseModel):
    """Reference to a leaf record found while crawling a section tree."""
    external_id: str
    title: Optional[str] = None
    parent_title: str = ""
    date: Optional[dt.date] = None
    chamber: Optional[str] = None
    section: Optional[str] = None


class AttributionEntry(BaseModel):
    """A single item of a proceeding with its resolved speaker identity."""
    member_id: Optional[int] = Field(None, description="Registry member id")
    name: Optional[str] = Field(None, description="Resolved display name")
    role: Optional[str] = Field(None, description="Ministerial or office title")
    constituency: Optional[str] = None
    affiliation: Optional[str] = Field(None, description="Canonical party name")
    value: Optional[str] = Field(None, description="Item text with markup stripped")
    timecode: Optional[str] = None
    item_type: Optional[str] = Field(None, description="Upstream item type, e.g. Contribution")

    @property
    def has_identity(self) -> bool:
        return bool(self.name or self.role)


class RecordOverview(BaseModel):
    """Overview metadata published with a record, plus its derived type tag."""
    ext_id: Optional[str] = None
    title: Optional[str] = None
    date: Optional[str] = None
    house: Optional[str] = None
    location: Optional[str] = None
    hrs_tag: Optional[str] = None
    next_debate_title: Optional[str] = None
    previous_debate_ext_id: Optional[str] = None
    next_debate_ext_id: Optional[str] = None
    record_type: Optional[str] = Field(None, description="Derived record-type tag")

    @classmethod
    def from_api(cls, raw: Dict[str, Any]) -> "RecordOverview":
        return cls(
            ext_id=raw.get("ExtId"),
            title=raw.get("Title"),
            date=raw.get("Date"),
            house=raw.get("House"),
            location=raw.get("Location"),
            hrs_tag=raw.get("HRSTag"),
            next_debate_title=raw.get("NextDebateTitle"),
            previous_debate_ext_id=raw.get("PreviousDebateExtId"),
            next_debate_ext_id=raw.get("NextDebateExtId"),
        )


class SpeakerSummary(BaseModel):
    """Entry of the upstream speaker list for a record."""
    name: str = ""
    member_id: Optional[int] = None
    affiliation: Optional[str] = None
    constituency: Optional[str] = None


class ProceedingRecord(BaseModel):
    """A fully assembled proceeding (debate, statement, question, ...)."""
    external_id: str = Field(description="Globally unique record identifier")
    title: str
    parent_title: str = ""
    date: Optional[dt.date] = None
    chamber: Optional[str] = None
    section: Optional[str] = None
    entries: List[AttributionEntry] = Field(default_factory=list)
    overview: RecordOverview = Field(default_factory=RecordOverview)
    speakers: List[SpeakerSummary] = Field(default_factory=list)
    children: List["ProceedingRecord"] = Field(default_factory=list)

    @property
    def record_type(self) -> Optional[str]:
        return self.overview.record_type

    def speaker_names(self) -> List[str]:
        """Distinct resolved speaker names in order of first appearance."""
        seen: Dict[str, None] = {}
        for entry in self.entries:
            if entry.name:
                seen.setdefault(entry.name, None)
        for child in self.children:
            for name in child.speaker_names():
                seen.setdefault(name, None)
        return list(seen)


class MemberRecord(BaseModel):
    """Canonical member identity as held by the registry."""
    member_id: int
    display_name: str
    constituency: Optional[str] = None
    affiliation: Optional[str] = None
    department: Optional[str] = None
    house: Optional[str] = None
    full_title: Optional[str] = None
    gender: Optional[str] = None
    house_start_date: Optional[str] = None
    house_end_date: Optional[str] = None

    @classmethod
    def from_search_result(cls, raw: Dict[str, Any]) -> "MemberRecord":
        """Build a member from a ``search/members`` result entry."""
        return cls(
            member_id=int(raw["MemberId"]),
            display_name=raw.get("DisplayAs") or "",
            constituency=raw.get("MemberFrom"),
            affiliation=raw.get("Party"),
            house=raw.get("House"),
            full_title=raw.get("FullTitle"),
            gender=raw.get("Gender"),
            house_start_date=raw.get("HouseStartDate"),
            house_end_date=raw.get("HouseEndDate"),
        )


class MatchCandidate(BaseModel):
    """Suggested canonical name for a locally observed speaker name."""
    current_name: str
    suggested_name: str
    similarity: float = Field(ge=0.0, le=1.0)
    api_result: Dict[str, Any] = Field(default_factory=dict)
    timestamp: dt.datetime


SectionNode.model_rebuild()
ProceedingRecord.model_rebuild()
