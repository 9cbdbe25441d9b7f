"""Authorization predicates for statement mutations.

Single source of truth for ``can_edit`` / ``can_delete``. Every view (detail,
feed, timeline, create/update responses) goes through these functions so the
flags never disagree between list and detail.

All functions:
- Are pure (no Session, no clock reads)
- Take an explicit ``now`` so one page shares one reference instant
- Return value objects only (no HTTP exceptions)
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta
from uuid import UUID

from speechkarma.db.models import Statement
from speechkarma.services.policy import StatementLifecycle, lifecycle_state


@dataclass(frozen=True)
class StatementPermissions:
    """Derived mutation rights of one viewer over one statement."""

    can_edit: bool
    can_delete: bool


DENIED = StatementPermissions(can_edit=False, can_delete=False)


def is_statement_author(statement: Statement, viewer_id: UUID | None) -> bool:
    """True if the viewer created the statement. Anonymous viewers never are."""
    return viewer_id is not None and statement.created_by_user_id == viewer_id


def evaluate_statement_permissions(
    statement: Statement,
    viewer_id: UUID | None,
    now: datetime,
    window: timedelta,
) -> StatementPermissions:
    """Compute edit/delete rights for a viewer at ``now``.

    Both rights are granted iff the viewer is the author, the statement is not
    deleted, and ``now`` is inside the grace window.
    """
    if not is_statement_author(statement, viewer_id):
        return DENIED
    state = lifecycle_state(statement.created_at, statement.deleted_at, now, window)
    allowed = state == StatementLifecycle.ACTIVE_MUTABLE
    return StatementPermissions(can_edit=allowed, can_delete=allowed)


def evaluate_many(
    statements: Iterable[Statement],
    viewer_id: UUID | None,
    now: datetime,
    window: timedelta,
) -> dict[UUID, StatementPermissions]:
    """Evaluate a whole page against the same ``now``, keyed by statement id."""
    return {s.id: evaluate_statement_permissions(s, viewer_id, now, window) for s in statements}
