"""Statement time policy: grace window, time ranges, lifecycle.

Pure functions only. Every caller passes an explicit ``now`` so a single
reference instant can be shared across a request (cutoff computation and
permission evaluation see the same clock).
"""

from datetime import UTC, datetime, timedelta
from enum import Enum

MIN_STATEMENT_CHARS = 10
MAX_STATEMENT_CHARS = 5000


def utcnow() -> datetime:
    """Current time as an aware UTC datetime.

    The only clock source in the service layer; tests pass ``now`` explicitly
    instead of patching this.
    """
    return datetime.now(UTC)


class TimeRange(str, Enum):
    """Timeline lookback windows."""

    LAST_7_DAYS = "7d"
    LAST_30_DAYS = "30d"
    LAST_365_DAYS = "365d"
    ALL = "all"


_TIME_RANGE_DAYS: dict[TimeRange, int | None] = {
    TimeRange.LAST_7_DAYS: 7,
    TimeRange.LAST_30_DAYS: 30,
    TimeRange.LAST_365_DAYS: 365,
    TimeRange.ALL: None,
}


class StatementLifecycle(str, Enum):
    """Lifecycle state of a statement relative to a reference time."""

    ACTIVE_MUTABLE = "active_mutable"
    ACTIVE_IMMUTABLE = "active_immutable"
    DELETED = "deleted"


def is_within_grace_period(created_at: datetime, now: datetime, window: timedelta) -> bool:
    """True while ``now`` is inside ``[created_at, created_at + window)``.

    The upper bound is exclusive. A ``now`` earlier than ``created_at`` (clock
    skew between app servers) counts as inside the window.
    """
    return now - created_at < window


def time_range_cutoff(time_range: TimeRange, now: datetime) -> datetime | None:
    """Lower bound for a time-range filter, or None for ``all``."""
    days = _TIME_RANGE_DAYS[TimeRange(time_range)]
    if days is None:
        return None
    return now - timedelta(days=days)


def lifecycle_state(
    created_at: datetime,
    deleted_at: datetime | None,
    now: datetime,
    window: timedelta,
) -> StatementLifecycle:
    """Derive the lifecycle state. Deletion is terminal and wins over the clock."""
    if deleted_at is not None:
        return StatementLifecycle.DELETED
    if is_within_grace_period(created_at, now, window):
        return StatementLifecycle.ACTIVE_MUTABLE
    return StatementLifecycle.ACTIVE_IMMUTABLE
