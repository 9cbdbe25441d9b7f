"""Timeline and feed queries.

Three read paths over active statements, all returning the same paginated
projection:
- recent feed (optionally narrowed to one politician)
- politician timeline (time-range filter on a chosen field)
- per-user history

One reference ``now`` is captured per request and used for both the time
range cutoff and the can_edit/can_delete flags of every row on the page.

Pages past the end return empty ``data`` with the same pagination metadata.
"""

from collections.abc import Sequence
from datetime import datetime, timedelta
from uuid import UUID

from sqlalchemy.orm import Session

from speechkarma.auth.permissions import StatementPermissions, evaluate_many
from speechkarma.config import get_settings
from speechkarma.db.models import Statement
from speechkarma.errors import ApiErrorCode, NotFoundError
from speechkarma.schemas.common import PageQuery, PaginationOut
from speechkarma.schemas.politicians import PoliticianSummaryOut
from speechkarma.schemas.statements import (
    AuthorOut,
    FeedQuery,
    StatementOut,
    StatementPage,
    TimelineQuery,
    UserStatementsQuery,
)
from speechkarma.services import statement_repository as repo
from speechkarma.services.policy import time_range_cutoff, utcnow
from speechkarma.services.politicians import politician_exists
from speechkarma.services.profiles import profile_exists


def grace_window() -> timedelta:
    """The configured edit/delete window."""
    return get_settings().grace_period


def project_statement(statement: Statement, permissions: StatementPermissions) -> StatementOut:
    """Build the public projection of a statement for one viewer."""
    return StatementOut(
        id=statement.id,
        politician_id=statement.politician_id,
        statement_text=statement.statement_text,
        statement_timestamp=statement.statement_timestamp,
        created_by=AuthorOut.model_validate(statement.author),
        politician=PoliticianSummaryOut.model_validate(statement.politician),
        created_at=statement.created_at,
        updated_at=statement.updated_at,
        deleted_at=statement.deleted_at,
        can_edit=permissions.can_edit,
        can_delete=permissions.can_delete,
    )


def _page(
    rows: Sequence[Statement],
    total: int,
    page: PageQuery,
    viewer_id: UUID | None,
    now: datetime,
) -> StatementPage:
    permissions = evaluate_many(rows, viewer_id, now, grace_window())
    return StatementPage(
        data=[project_statement(row, permissions[row.id]) for row in rows],
        pagination=PaginationOut.build(page.page, page.limit, total),
    )


def _window(page: PageQuery) -> repo.PageWindow:
    return repo.PageWindow(limit=page.limit, offset=page.offset)


def list_recent(
    db: Session,
    viewer_id: UUID | None,
    query: FeedQuery,
    now: datetime | None = None,
) -> StatementPage:
    """All active statements, newest first by default."""
    now = now or utcnow()
    rows, total = repo.list_active(
        db,
        repo.StatementFilter(politician_id=query.politician_id),
        repo.StatementSort(field=query.sort_by, order=query.order),
        _window(query),
    )
    return _page(rows, total, query, viewer_id, now)


def list_politician_timeline(
    db: Session,
    viewer_id: UUID | None,
    politician_id: UUID,
    query: TimelineQuery,
    now: datetime | None = None,
) -> StatementPage:
    """Active statements for one politician, filtered by time range.

    Raises:
        NotFoundError(E_POLITICIAN_NOT_FOUND): If the politician does not exist.
    """
    if not politician_exists(db, politician_id):
        raise NotFoundError(ApiErrorCode.E_POLITICIAN_NOT_FOUND, "Politician not found")

    now = now or utcnow()
    rows, total = repo.list_active(
        db,
        repo.StatementFilter(
            politician_id=politician_id,
            time_field=query.time_field,
            since=time_range_cutoff(query.time_range, now),
        ),
        repo.StatementSort(field=query.sort_by, order=query.order),
        _window(query),
    )
    return _page(rows, total, query, viewer_id, now)


def list_user_statements(
    db: Session,
    viewer_id: UUID | None,
    user_id: UUID,
    query: UserStatementsQuery,
    now: datetime | None = None,
) -> StatementPage:
    """Active statements created by one user, by creation time.

    Raises:
        NotFoundError(E_PROFILE_NOT_FOUND): If the profile does not exist.
    """
    if not profile_exists(db, user_id):
        raise NotFoundError(ApiErrorCode.E_PROFILE_NOT_FOUND, "Profile not found")

    now = now or utcnow()
    rows, total = repo.list_active(
        db,
        repo.StatementFilter(author_id=user_id),
        repo.StatementSort(field="created_at", order=query.order),
        _window(query),
    )
    return _page(rows, total, query, viewer_id, now)
