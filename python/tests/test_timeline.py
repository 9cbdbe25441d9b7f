"""Tests for feed and timeline reads.

Tests cover:
- Recent feed ordering and politician narrowing
- Politician timeline time-range filtering on either timestamp field
- Per-user history
- Pagination metadata, including pages past the end
- can_edit/can_delete evaluated per viewer for a whole page
"""

from datetime import timedelta
from uuid import uuid4

import pytest
from sqlalchemy.orm import Session

from speechkarma.errors import ApiError, ApiErrorCode
from speechkarma.schemas.statements import FeedQuery, TimelineQuery, UserStatementsQuery
from speechkarma.services import timeline
from speechkarma.services.policy import TimeRange
from tests.factories import (
    create_test_politician,
    create_test_profile,
    create_test_statement,
    utc,
)

NOW = utc(2024, 6, 1, 12)


@pytest.fixture
def author(db_session: Session):
    return create_test_profile(db_session)


@pytest.fixture
def politician(db_session: Session):
    return create_test_politician(db_session)


class TestRecentFeed:
    def test_newest_first_and_politician_filter(self, db_session, author, politician):
        other = create_test_politician(db_session)
        older = create_test_statement(
            db_session, politician, author, created_at=NOW - timedelta(hours=2)
        )
        newer = create_test_statement(
            db_session, politician, author, created_at=NOW - timedelta(hours=1)
        )
        create_test_statement(db_session, other, author, created_at=NOW)

        page = timeline.list_recent(
            db_session, None, FeedQuery(politician_id=politician.id), now=NOW
        )

        assert [s.id for s in page.data] == [newer.id, older.id]
        assert page.pagination.total == 2

    def test_permissions_follow_viewer(self, db_session, author, politician):
        mine = create_test_statement(db_session, politician, author, created_at=NOW)
        stale = create_test_statement(
            db_session, politician, author, created_at=NOW - timedelta(hours=1)
        )
        query = FeedQuery(politician_id=politician.id)

        as_author = {s.id: s for s in timeline.list_recent(db_session, author.id, query, now=NOW).data}
        assert as_author[mine.id].can_edit is True
        assert as_author[stale.id].can_edit is False

        anonymous = timeline.list_recent(db_session, None, query, now=NOW).data
        assert not any(s.can_edit or s.can_delete for s in anonymous)

    def test_pagination_metadata(self, db_session, author, politician):
        for i in range(5):
            create_test_statement(
                db_session, politician, author, created_at=NOW - timedelta(minutes=i)
            )

        query = FeedQuery(politician_id=politician.id, page=2, limit=2)
        page = timeline.list_recent(db_session, None, query, now=NOW)

        assert len(page.data) == 2
        assert page.pagination.model_dump() == {
            "page": 2,
            "limit": 2,
            "total": 5,
            "total_pages": 3,
        }

    def test_page_past_end(self, db_session, author, politician):
        create_test_statement(db_session, politician, author, created_at=NOW)

        query = FeedQuery(politician_id=politician.id, page=9, limit=10)
        page = timeline.list_recent(db_session, None, query, now=NOW)

        assert page.data == []
        assert page.pagination.total == 1
        assert page.pagination.total_pages == 1


class TestPoliticianTimeline:
    def test_30d_filter_on_statement_timestamp(self, db_session, author, politician):
        """Recorded yesterday, but said 45 days ago: outside a 30d statement-time window."""
        recent = create_test_statement(
            db_session,
            politician,
            author,
            created_at=NOW - timedelta(days=1),
            statement_timestamp=NOW - timedelta(days=10),
        )
        create_test_statement(
            db_session,
            politician,
            author,
            created_at=NOW - timedelta(days=1),
            statement_timestamp=NOW - timedelta(days=45),
        )

        query = TimelineQuery(time_range=TimeRange.LAST_30_DAYS, sort_by="statement_timestamp")
        page = timeline.list_politician_timeline(
            db_session, None, politician.id, query, now=NOW
        )

        assert [s.id for s in page.data] == [recent.id]
        assert page.pagination.total == 1

    def test_time_field_defaults_to_sort_by(self):
        assert TimelineQuery().time_field == "created_at"
        assert TimelineQuery(sort_by="statement_timestamp").time_field == "statement_timestamp"

    def test_filter_on_created_at(self, db_session, author, politician):
        create_test_statement(
            db_session, politician, author, created_at=NOW - timedelta(days=10)
        )
        fresh = create_test_statement(
            db_session, politician, author, created_at=NOW - timedelta(days=2)
        )

        query = TimelineQuery(time_range=TimeRange.LAST_7_DAYS)
        page = timeline.list_politician_timeline(
            db_session, None, politician.id, query, now=NOW
        )

        assert [s.id for s in page.data] == [fresh.id]

    def test_all_excludes_only_deleted(self, db_session, author, politician):
        create_test_statement(db_session, politician, author, created_at=NOW - timedelta(days=900))
        create_test_statement(db_session, politician, author, created_at=NOW, deleted_at=NOW)

        page = timeline.list_politician_timeline(
            db_session, None, politician.id, TimelineQuery(), now=NOW
        )

        assert page.pagination.total == 1

    def test_unknown_politician(self, db_session):
        with pytest.raises(ApiError) as exc_info:
            timeline.list_politician_timeline(db_session, None, uuid4(), TimelineQuery(), now=NOW)
        assert exc_info.value.code == ApiErrorCode.E_POLITICIAN_NOT_FOUND


class TestUserStatements:
    def test_lists_only_that_author(self, db_session, author, politician):
        someone_else = create_test_profile(db_session)
        mine = create_test_statement(db_session, politician, author, created_at=NOW)
        create_test_statement(db_session, politician, someone_else, created_at=NOW)

        page = timeline.list_user_statements(
            db_session, None, author.id, UserStatementsQuery(), now=NOW
        )

        assert [s.id for s in page.data] == [mine.id]

    def test_unknown_profile(self, db_session):
        with pytest.raises(ApiError) as exc_info:
            timeline.list_user_statements(
                db_session, None, uuid4(), UserStatementsQuery(), now=NOW
            )
        assert exc_info.value.code == ApiErrorCode.E_PROFILE_NOT_FOUND
