"""
Legislative Data Store Client Library

Async PostgreSQL record store with typed errors, plus the record models for
each legislative endpoint.

Usage:
    from lds_client import ALDS, Member

    alds = ALDS({"dsn": "postgresql://...", "pool_max": 5})
    await alds.upsert("member_data", [Member(member_id="0123")], ["member_id"])
"""

from .aclient import ALDS, ALDSConfig
from .errors import (
    CardinalityViolation,
    ConflictViolation,
    LDSOperationalError,
    RetryableError,
    TimeoutExceeded,
    WriteOutcome,
    classify,
)
from .models import CalendarEvent, Document, Member, Party, Speech, Vote

__version__ = "0.1.0"
__all__ = [
    "ALDS",
    "ALDSConfig",
    "CardinalityViolation",
    "ConflictViolation",
    "LDSOperationalError",
    "RetryableError",
    "TimeoutExceeded",
    "WriteOutcome",
    "classify",
    "CalendarEvent",
    "Document",
    "Member",
    "Party",
    "Speech",
    "Vote",
]
