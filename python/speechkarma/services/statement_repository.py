"""Statement persistence.

The repository persists and queries statements. It does no authorization:
callers (the statement service) decide whether a mutation is allowed, the
repository only enforces row constraints and reports what happened.

Mutations are optimistic: soft delete and update are a single conditional
UPDATE guarded by ``deleted_at IS NULL``. When no row matches, a follow-up
existence check tells NOT_FOUND apart from ALREADY_DELETED. Two concurrent
deletes therefore yield exactly one OK.

Reads for lists share one predicate builder between the count query and the
data query so ``total`` always describes the rows being paged.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Literal
from uuid import UUID

from sqlalchemy import ColumnElement, asc, desc, func, select
from sqlalchemy import update as sql_update
from sqlalchemy.orm import Session

from speechkarma.db.models import Statement
from speechkarma.services.policy import MAX_STATEMENT_CHARS, MIN_STATEMENT_CHARS

SortField = Literal["created_at", "statement_timestamp"]


class MutationOutcome(str, Enum):
    """Result of a conditional statement mutation."""

    OK = "ok"
    NOT_FOUND = "not_found"
    ALREADY_DELETED = "already_deleted"


class StatementConstraintError(Exception):
    """A write would violate a statement row constraint.

    Attributes:
        field: The offending column ("statement_text" or "statement_timestamp").
        message: Human-readable reason.
    """

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(message)


@dataclass(frozen=True)
class StatementFilter:
    """Which active statements a list query selects.

    ``since`` applies to ``time_field`` as an inclusive lower bound.
    """

    politician_id: UUID | None = None
    author_id: UUID | None = None
    time_field: SortField = "created_at"
    since: datetime | None = None


@dataclass(frozen=True)
class StatementSort:
    field: SortField = "created_at"
    order: Literal["asc", "desc"] = "desc"


@dataclass(frozen=True)
class PageWindow:
    limit: int
    offset: int = 0


# =============================================================================
# Validation
# =============================================================================


def check_statement_text(statement_text: str) -> None:
    """Enforce text bounds: at least 10 chars after trimming, at most 5000.

    Raises:
        StatementConstraintError: If the bounds are violated.
    """
    trimmed_chars = len(statement_text.strip())
    if trimmed_chars < MIN_STATEMENT_CHARS:
        raise StatementConstraintError(
            "statement_text",
            f"Statement text must be at least {MIN_STATEMENT_CHARS} characters",
        )
    if len(statement_text) > MAX_STATEMENT_CHARS:
        raise StatementConstraintError(
            "statement_text",
            f"Statement text must be at most {MAX_STATEMENT_CHARS} characters",
        )


def check_statement_timestamp(statement_timestamp: datetime, created_at: datetime) -> None:
    """A statement cannot have been made after it was recorded.

    Raises:
        StatementConstraintError: If statement_timestamp > created_at.
    """
    if statement_timestamp > created_at:
        raise StatementConstraintError(
            "statement_timestamp", "Statement timestamp cannot be in the future"
        )


# =============================================================================
# Writes
# =============================================================================


def insert(
    db: Session,
    *,
    politician_id: UUID,
    statement_text: str,
    statement_timestamp: datetime,
    created_by_user_id: UUID,
    now: datetime,
) -> Statement:
    """Insert a new statement with created_at = updated_at = now.

    Flushes but does not commit.

    Raises:
        StatementConstraintError: Text bounds or timestamp ordering violated.
    """
    check_statement_text(statement_text)
    check_statement_timestamp(statement_timestamp, now)

    statement = Statement(
        politician_id=politician_id,
        statement_text=statement_text,
        statement_timestamp=statement_timestamp,
        created_by_user_id=created_by_user_id,
        created_at=now,
        updated_at=now,
    )
    db.add(statement)
    db.flush()
    return statement


def _resolve_miss(db: Session, statement_id: UUID) -> MutationOutcome:
    """Explain why a conditional UPDATE matched no row."""
    exists = db.scalar(select(Statement.id).where(Statement.id == statement_id))
    return MutationOutcome.ALREADY_DELETED if exists is not None else MutationOutcome.NOT_FOUND


def soft_delete(db: Session, statement_id: UUID, now: datetime) -> MutationOutcome:
    """Mark a statement deleted at ``now`` unless it already is.

    Flushes but does not commit.
    """
    result = db.execute(
        sql_update(Statement)
        .where(Statement.id == statement_id, Statement.deleted_at.is_(None))
        .values(deleted_at=now)
    )
    if result.rowcount == 1:
        return MutationOutcome.OK
    return _resolve_miss(db, statement_id)


def update(
    db: Session,
    statement_id: UUID,
    now: datetime,
    *,
    statement_text: str | None = None,
    statement_timestamp: datetime | None = None,
) -> MutationOutcome:
    """Apply a partial edit to an active statement and refresh updated_at.

    Raises:
        StatementConstraintError: Supplied values violate row constraints.
    """
    created_at = db.scalar(select(Statement.created_at).where(Statement.id == statement_id))
    if created_at is None:
        return MutationOutcome.NOT_FOUND

    values: dict = {"updated_at": now}
    if statement_text is not None:
        check_statement_text(statement_text)
        values["statement_text"] = statement_text
    if statement_timestamp is not None:
        check_statement_timestamp(statement_timestamp, created_at)
        values["statement_timestamp"] = statement_timestamp

    result = db.execute(
        sql_update(Statement)
        .where(Statement.id == statement_id, Statement.deleted_at.is_(None))
        .values(**values)
    )
    if result.rowcount == 1:
        return MutationOutcome.OK
    return _resolve_miss(db, statement_id)


# =============================================================================
# Reads
# =============================================================================


def get(db: Session, statement_id: UUID) -> Statement | None:
    """Load one statement, including soft-deleted rows."""
    return db.get(Statement, statement_id)


def _active_predicate(statement_filter: StatementFilter) -> list[ColumnElement[bool]]:
    conditions: list[ColumnElement[bool]] = [Statement.deleted_at.is_(None)]
    if statement_filter.politician_id is not None:
        conditions.append(Statement.politician_id == statement_filter.politician_id)
    if statement_filter.author_id is not None:
        conditions.append(Statement.created_by_user_id == statement_filter.author_id)
    if statement_filter.since is not None:
        column = getattr(Statement, statement_filter.time_field)
        conditions.append(column >= statement_filter.since)
    return conditions


def list_active(
    db: Session,
    statement_filter: StatementFilter,
    sort: StatementSort,
    window: PageWindow,
) -> tuple[list[Statement], int]:
    """Page through active statements ordered by (sort field, id).

    The id tie-break runs in the same direction as the primary sort so rows
    sharing a timestamp have one stable position across pages.

    Returns:
        (rows for this window, total matching rows)
    """
    conditions = _active_predicate(statement_filter)

    total = db.scalar(select(func.count()).select_from(Statement).where(*conditions)) or 0

    direction = asc if sort.order == "asc" else desc
    rows = db.scalars(
        select(Statement)
        .where(*conditions)
        .order_by(direction(getattr(Statement, sort.field)), direction(Statement.id))
        .limit(window.limit)
        .offset(window.offset)
    ).all()

    return list(rows), total


def count_active_for_politician(db: Session, politician_id: UUID) -> int:
    return (
        db.scalar(
            select(func.count())
            .select_from(Statement)
            .where(*_active_predicate(StatementFilter(politician_id=politician_id)))
        )
        or 0
    )


def count_active_for_author(db: Session, author_id: UUID) -> int:
    return (
        db.scalar(
            select(func.count())
            .select_from(Statement)
            .where(*_active_predicate(StatementFilter(author_id=author_id)))
        )
        or 0
    )
