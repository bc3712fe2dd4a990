"""Repositories for the Hansard pipeline database."""

from .debate_repository import DebateRepository
from .member_repository import MemberRepository
from .speaker_repository import SpeakerRepository

__all__ = ["DebateRepository", "MemberRepository", "SpeakerRepository"]
