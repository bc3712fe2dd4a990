"""
SQLAlchemy database models for the Hansard pipeline.

ORM models for the member registry, stored proceedings and the speaker
names observed in them.

Responsibility: Define database schema and ORM mappings
"""

from datetime import date, datetime, timezone
from typing import List, Optional

from sqlalchemy import (
    JSON, Date, DateTime, ForeignKey, Index, Integer, String, Text, UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def utcnow() -> datetime:
    """Naive UTC timestamp for the timezone-less DateTime columns"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase):
    """Base class for all ORM models"""
    pass


class MemberModel(Base):
    """
    Database model for members of either House.

    Keyed by the upstream member id, so repeated roster syncs update rows
    in place.
    """

    __tablename__ = "members"

    member_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    display_as: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    full_title: Mapped[Optional[str]] = mapped_column(String(300), nullable=True)
    party: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, index=True)
    constituency: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    department: Mapped[Optional[str]] = mapped_column(String(300), nullable=True)
    house: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    gender: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    house_start_date: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    house_end_date: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=utcnow,
        onupdate=utcnow
    )

    def __repr__(self) -> str:
        return f"<MemberModel(member_id={self.member_id}, display_as={self.display_as})>"


class DebateModel(Base):
    """Database model for an assembled proceeding record."""

    __tablename__ = "debates"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    ext_id: Mapped[str] = mapped_column(String(100), nullable=False)
    parent_ext_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, index=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    parent_title: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    sitting_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True, index=True)
    chamber: Mapped[Optional[str]] = mapped_column(String(50), nullable=True, index=True)
    section: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    record_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    location: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    hrs_tag: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    entries: Mapped[List[dict]] = mapped_column(JSON, nullable=False, default=list)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=utcnow,
        onupdate=utcnow
    )

    speakers: Mapped[List["SpeakerModel"]] = relationship(
        back_populates="debate",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        UniqueConstraint('ext_id', name='uq_debate_ext_id'),
        Index('idx_debate_date_chamber', 'sitting_date', 'chamber'),
    )

    def __repr__(self) -> str:
        return f"<DebateModel(id={self.id}, ext_id={self.ext_id})>"


class SpeakerModel(Base):
    """A speaker name as it appeared in one stored proceeding."""

    __tablename__ = "debate_speakers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    debate_id: Mapped[int] = mapped_column(Integer, ForeignKey('debates.id'), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    member_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, index=True)

    debate: Mapped["DebateModel"] = relationship(back_populates="speakers")

    __table_args__ = (
        UniqueConstraint('debate_id', 'name', name='uq_debate_speaker'),
    )

    def __repr__(self) -> str:
        return f"<SpeakerModel(id={self.id}, name={self.name})>"
