"""
Database package for the Hansard pipeline.

SQLAlchemy async models, repositories, and the registry and record store
used by the pipeline.
"""

from .models import Base, DebateModel, MemberModel, SpeakerModel
from .session import Database
from .stores import SqlMemberRegistry, SqlProceedingStore

__all__ = [
    "Base",
    "DebateModel",
    "MemberModel",
    "SpeakerModel",
    "Database",
    "SqlMemberRegistry",
    "SqlProceedingStore",
]
