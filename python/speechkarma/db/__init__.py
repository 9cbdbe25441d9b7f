"""Database module for SpeechKarma.

Provides engine creation, session management, transaction helpers, and ORM models.
"""

from speechkarma.db.engine import create_db_engine, get_engine
from speechkarma.db.models import (
    Base,
    Party,
    Politician,
    Profile,
    ReportReason,
    Statement,
    StatementReport,
    UTCDateTime,
)
from speechkarma.db.session import get_db, transaction

__all__ = [
    # Engine and session
    "create_db_engine",
    "get_engine",
    "get_db",
    "transaction",
    # Base and types
    "Base",
    "UTCDateTime",
    # Enums
    "ReportReason",
    # Models
    "Party",
    "Politician",
    "Profile",
    "Statement",
    "StatementReport",
]
