"""Statement service layer.

Implements the statement lifecycle: create (with optional enrichment),
edit and soft delete inside the author's grace window, detail reads, and
the feed/timeline delegations.

This module alone decides whether a mutation is accepted. The repository
below it persists or reports a constraint/race outcome; the permission
evaluator supplies can_edit/can_delete.

Error precedence for edit/delete:
1. Statement never existed -> 404 E_STATEMENT_NOT_FOUND
2. Statement deleted -> 403 E_STATEMENT_DELETED
3. Viewer is not the author -> 403 E_FORBIDDEN
4. Grace window elapsed -> 403 E_GRACE_PERIOD_EXPIRED
5. Field validation -> 400
6. Lost a race with a concurrent delete -> 403 E_STATEMENT_DELETED

Service functions correspond 1:1 with route handlers.
Routes are transport-only and call exactly one service function.
"""

from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from speechkarma.auth.permissions import (
    evaluate_statement_permissions,
    is_statement_author,
)
from speechkarma.db.models import Statement
from speechkarma.db.session import transaction
from speechkarma.errors import (
    ApiErrorCode,
    ForbiddenError,
    InvalidRequestError,
    NotFoundError,
)
from speechkarma.logging import get_logger
from speechkarma.schemas.statements import (
    CreateStatementRequest,
    DeletedStatementOut,
    FeedQuery,
    StatementOut,
    StatementPage,
    TimelineQuery,
    UpdateStatementRequest,
)
from speechkarma.services import statement_repository as repo
from speechkarma.services import timeline
from speechkarma.services.enrichment import StatementEnricher, format_summary_segment
from speechkarma.services.policy import is_within_grace_period, utcnow
from speechkarma.services.politicians import politician_exists
from speechkarma.services.redact import safe_kv
from speechkarma.services.statement_repository import MutationOutcome, StatementConstraintError

logger = get_logger(__name__)

_CONSTRAINT_ERROR_CODES = {
    "statement_text": ApiErrorCode.E_STATEMENT_TEXT_INVALID,
    "statement_timestamp": ApiErrorCode.E_STATEMENT_TIMESTAMP_INVALID,
}


# =============================================================================
# Shared Helpers
# =============================================================================


def _as_utc(value: datetime) -> datetime:
    """Treat naive timestamps as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _to_invalid_request(e: StatementConstraintError) -> InvalidRequestError:
    return InvalidRequestError(
        _CONSTRAINT_ERROR_CODES.get(e.field, ApiErrorCode.E_INVALID_REQUEST),
        e.message,
        field=e.field,
    )


def _validate_text(statement_text: str) -> str:
    """Trim and bound-check statement text.

    Raises:
        InvalidRequestError(E_STATEMENT_TEXT_INVALID): Outside [10, 5000] after trimming.
    """
    trimmed = statement_text.strip()
    try:
        repo.check_statement_text(trimmed)
    except StatementConstraintError as e:
        raise _to_invalid_request(e) from e
    return trimmed


def _validate_timestamp(statement_timestamp: datetime, upper_bound: datetime) -> datetime:
    """Raises InvalidRequestError(E_STATEMENT_TIMESTAMP_INVALID) if after ``upper_bound``."""
    value = _as_utc(statement_timestamp)
    try:
        repo.check_statement_timestamp(value, upper_bound)
    except StatementConstraintError as e:
        raise _to_invalid_request(e) from e
    return value


def _project(statement: Statement, viewer_id: UUID | None, now: datetime) -> StatementOut:
    permissions = evaluate_statement_permissions(
        statement, viewer_id, now, timeline.grace_window()
    )
    return timeline.project_statement(statement, permissions)


def _written_at(statement: Statement, now: datetime) -> datetime:
    """Timestamp to persist for an edit or delete.

    A skewed clock may put ``now`` before created_at while still inside the
    grace window; rows never record a change before their creation.
    """
    return max(now, statement.created_at)


def get_statement_or_404(db: Session, statement_id: UUID) -> Statement:
    statement = repo.get(db, statement_id)
    if statement is None:
        raise NotFoundError(ApiErrorCode.E_STATEMENT_NOT_FOUND, "Statement not found")
    return statement


def require_mutable_by(statement: Statement, viewer_id: UUID, now: datetime) -> None:
    """Check that the viewer may still edit or delete the statement at ``now``.

    Raises:
        ForbiddenError(E_STATEMENT_DELETED): Statement is soft-deleted.
        ForbiddenError(E_FORBIDDEN): Viewer is not the author.
        ForbiddenError(E_GRACE_PERIOD_EXPIRED): Window has elapsed.
    """
    if statement.deleted_at is not None:
        raise ForbiddenError(ApiErrorCode.E_STATEMENT_DELETED, "Statement has been deleted")
    if not is_statement_author(statement, viewer_id):
        raise ForbiddenError(
            ApiErrorCode.E_FORBIDDEN, "Only the author can modify this statement"
        )
    if not is_within_grace_period(statement.created_at, now, timeline.grace_window()):
        raise ForbiddenError(
            ApiErrorCode.E_GRACE_PERIOD_EXPIRED,
            "Statements can only be modified within the grace period after creation",
        )


def _raise_for_outcome(outcome: MutationOutcome) -> None:
    if outcome == MutationOutcome.NOT_FOUND:
        raise NotFoundError(ApiErrorCode.E_STATEMENT_NOT_FOUND, "Statement not found")
    if outcome == MutationOutcome.ALREADY_DELETED:
        raise ForbiddenError(ApiErrorCode.E_STATEMENT_DELETED, "Statement has been deleted")


# =============================================================================
# Create Phases
# =============================================================================


def _require_politician(db: Session, politician_id: UUID) -> None:
    """Phase 1: fail fast on an unknown politician, then end the read transaction."""
    found = politician_exists(db, politician_id)
    db.commit()
    if not found:
        raise NotFoundError(ApiErrorCode.E_POLITICIAN_NOT_FOUND, "Politician not found")


def _insert_statement(
    db: Session,
    viewer_id: UUID,
    politician_id: UUID,
    statement_text: str,
    statement_timestamp: datetime,
    now: datetime,
) -> StatementOut:
    """Phase 3: insert and project in one short transaction."""
    with transaction(db):
        try:
            statement = repo.insert(
                db,
                politician_id=politician_id,
                statement_text=statement_text,
                statement_timestamp=statement_timestamp,
                created_by_user_id=viewer_id,
                now=now,
            )
        except StatementConstraintError as e:
            raise _to_invalid_request(e) from e
        out = _project(statement, viewer_id, now)
    return out


# =============================================================================
# Statement Operations
# =============================================================================


async def create_statement(
    db: Session,
    viewer_id: UUID,
    req: CreateStatementRequest,
    enricher: StatementEnricher,
    now: datetime | None = None,
) -> StatementOut:
    """Create a statement attributed to a politician.

    Phases:
    1. Validate and check the politician (short read, then committed)
    2. Enrichment (no DB transaction held; bounded by its own timeout)
    3. Insert in a single transaction

    The summary (if any) is appended once. Enrichment failures never fail
    creation. Sync DB phases run in the threadpool so the event loop stays free.

    Raises:
        InvalidRequestError(E_STATEMENT_TEXT_INVALID): Text outside bounds.
        InvalidRequestError(E_STATEMENT_TIMESTAMP_INVALID): Timestamp in the future.
        NotFoundError(E_POLITICIAN_NOT_FOUND): Unknown politician.
    """
    now = now or utcnow()
    original_text = _validate_text(req.statement_text)
    statement_timestamp = _validate_timestamp(req.statement_timestamp, now)

    await run_in_threadpool(_require_politician, db, req.politician_id)

    statement_text = original_text
    summary = await enricher.enrich(original_text)
    if summary:
        statement_text = format_summary_segment(original_text, summary)

    out = await run_in_threadpool(
        _insert_statement,
        db,
        viewer_id,
        req.politician_id,
        statement_text,
        statement_timestamp,
        now,
    )

    logger.info(
        "statement.created",
        **safe_kv(
            statement_id=str(out.id),
            politician_id=str(req.politician_id),
            statement_text_chars=len(statement_text),
            enriched=statement_text != original_text,
        ),
    )
    return out


def update_statement(
    db: Session,
    viewer_id: UUID,
    statement_id: UUID,
    req: UpdateStatementRequest,
    now: datetime | None = None,
) -> StatementOut:
    """Edit an active statement inside the author's grace window.

    Never re-runs enrichment.
    """
    now = now or utcnow()
    statement = get_statement_or_404(db, statement_id)
    require_mutable_by(statement, viewer_id, now)

    statement_text = None
    if req.statement_text is not None:
        statement_text = _validate_text(req.statement_text)
    statement_timestamp = None
    if req.statement_timestamp is not None:
        statement_timestamp = _validate_timestamp(req.statement_timestamp, statement.created_at)

    with transaction(db):
        try:
            outcome = repo.update(
                db,
                statement_id,
                _written_at(statement, now),
                statement_text=statement_text,
                statement_timestamp=statement_timestamp,
            )
        except StatementConstraintError as e:
            raise _to_invalid_request(e) from e
        _raise_for_outcome(outcome)
    db.refresh(statement)

    logger.info(
        "statement.updated",
        **safe_kv(
            statement_id=str(statement_id),
            text_changed=statement_text is not None,
            timestamp_changed=statement_timestamp is not None,
        ),
    )
    return _project(statement, viewer_id, now)


def delete_statement(
    db: Session,
    viewer_id: UUID,
    statement_id: UUID,
    now: datetime | None = None,
) -> DeletedStatementOut:
    """Soft-delete a statement inside the author's grace window.

    A second delete of the same statement is rejected with E_STATEMENT_DELETED.
    """
    now = now or utcnow()
    statement = get_statement_or_404(db, statement_id)
    require_mutable_by(statement, viewer_id, now)

    deleted_at = _written_at(statement, now)
    with transaction(db):
        _raise_for_outcome(repo.soft_delete(db, statement_id, deleted_at))
    logger.info("statement.deleted", statement_id=str(statement_id))
    return DeletedStatementOut(id=statement_id, deleted_at=deleted_at)


def get_statement(
    db: Session,
    viewer_id: UUID | None,
    statement_id: UUID,
    now: datetime | None = None,
) -> StatementOut:
    """Detail view.

    Soft-deleted statements are returned with deleted_at set and both
    permission flags false; only a statement that never existed is a 404.
    """
    now = now or utcnow()
    statement = get_statement_or_404(db, statement_id)
    return _project(statement, viewer_id, now)


def list_statements(
    db: Session,
    viewer_id: UUID | None,
    query: FeedQuery,
    now: datetime | None = None,
) -> StatementPage:
    """Recent feed of active statements."""
    return timeline.list_recent(db, viewer_id, query, now)


def get_politician_timeline(
    db: Session,
    viewer_id: UUID | None,
    politician_id: UUID,
    query: TimelineQuery,
    now: datetime | None = None,
) -> StatementPage:
    """One politician's active statements, time-range filtered."""
    return timeline.list_politician_timeline(db, viewer_id, politician_id, query, now)
