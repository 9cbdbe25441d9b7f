"""SQLAlchemy ORM models for SpeechKarma.

Defines all database tables using SQLAlchemy 2.x declarative patterns.
Column types are dialect-neutral (Uuid, UTCDateTime) so the same metadata
backs PostgreSQL in production and SQLite in the test suite.
"""

from datetime import UTC, datetime
from enum import Enum as PyEnum
from uuid import UUID, uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Text,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class UTCDateTime(TypeDecorator):
    """Timezone-aware datetime that is always UTC on the Python side.

    Naive values are assumed to already be UTC. SQLite drops tzinfo on
    storage, so it is re-attached on load.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


# =============================================================================
# Enums
# =============================================================================


class ReportReason(str, PyEnum):
    """Reasons a reader can give when flagging a statement."""

    spam = "spam"
    inaccurate = "inaccurate"
    inappropriate = "inappropriate"
    off_topic = "off_topic"
    other = "other"


# =============================================================================
# Reference data: parties, politicians, profiles
# =============================================================================


class Party(Base):
    """Political party with display metadata."""

    __tablename__ = "parties"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    abbreviation: Mapped[str | None] = mapped_column(Text, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    color_hex: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=_utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, default=_utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint(
            "color_hex IS NULL OR (length(color_hex) = 7 AND substr(color_hex, 1, 1) = '#')",
            name="ck_parties_color_hex",
        ),
    )

    politicians: Mapped[list["Politician"]] = relationship("Politician", back_populates="party")


class Politician(Base):
    """Politician profile.

    party_id is the *current* affiliation; statements always display the
    current party, never a historical one.
    """

    __tablename__ = "politicians"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    first_name: Mapped[str] = mapped_column(Text, nullable=False)
    last_name: Mapped[str] = mapped_column(Text, nullable=False)
    party_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("parties.id", ondelete="RESTRICT"), nullable=False
    )
    biography: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=_utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, default=_utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("first_name", "last_name", "party_id", name="uq_politicians_name_party"),
        CheckConstraint("length(trim(first_name)) >= 1", name="ck_politicians_first_name"),
        CheckConstraint("length(trim(last_name)) >= 1", name="ck_politicians_last_name"),
        Index("idx_politicians_last_name_first_name", "last_name", "first_name"),
    )

    party: Mapped["Party"] = relationship("Party", back_populates="politicians", lazy="joined")


class Profile(Base):
    """Public profile for an authenticated user.

    The id matches the Supabase auth user id (sub claim).
    """

    __tablename__ = "profiles"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    display_name: Mapped[str] = mapped_column(Text, nullable=False)
    is_admin: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=_utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, default=_utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint(
            "length(trim(display_name)) >= 1 AND length(display_name) <= 100",
            name="ck_profiles_display_name_length",
        ),
    )


# =============================================================================
# Statements
# =============================================================================


class Statement(Base):
    """A timestamped statement attributed to a politician.

    Timestamps:
        statement_timestamp: when the politician made the statement (caller-supplied)
        created_at: when the row was inserted; anchors the grace period
        updated_at: refreshed on every successful edit
        deleted_at: soft-delete marker, set once and never cleared
    """

    __tablename__ = "statements"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    politician_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("politicians.id", ondelete="RESTRICT"), nullable=False
    )
    statement_text: Mapped[str] = mapped_column(Text, nullable=False)
    statement_timestamp: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    created_by_user_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("profiles.id", ondelete="RESTRICT"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    deleted_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "length(trim(statement_text)) >= 10 AND length(statement_text) <= 5000",
            name="ck_statements_text_length",
        ),
        CheckConstraint(
            "statement_timestamp <= created_at",
            name="ck_statements_timestamp_not_future",
        ),
        CheckConstraint(
            "deleted_at IS NULL OR deleted_at >= created_at",
            name="ck_statements_deleted_after_created",
        ),
        Index("idx_statements_recent_feed", "created_at", "id"),
        Index("idx_statements_politician_timeline", "politician_id", "created_at", "id"),
        Index(
            "idx_statements_politician_statement_time",
            "politician_id",
            "statement_timestamp",
            "id",
        ),
        Index("idx_statements_created_by_user", "created_by_user_id", "created_at"),
    )

    politician: Mapped["Politician"] = relationship("Politician", lazy="joined")
    author: Mapped["Profile"] = relationship("Profile", lazy="joined")


class StatementReport(Base):
    """A reader-submitted flag on a statement. Write-only from the API."""

    __tablename__ = "statement_reports"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    statement_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("statements.id", ondelete="CASCADE"), nullable=False
    )
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    reported_by_user_id: Mapped[UUID | None] = mapped_column(
        Uuid, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=_utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint(
            "reason IN ('spam', 'inaccurate', 'inappropriate', 'off_topic', 'other')",
            name="ck_statement_reports_reason",
        ),
        CheckConstraint(
            "comment IS NULL OR length(comment) <= 1000",
            name="ck_statement_reports_comment_length",
        ),
    )
