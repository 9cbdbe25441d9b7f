"""Test data factories.

Centralizes helper functions that create database rows for tests.
Each factory knows the full schema requirements for its table,
so individual tests don't need to track NOT NULL constraints.

Factories flush but do not commit; rows live inside the test savepoint.
"""

from datetime import UTC, datetime, timedelta
from uuid import UUID, uuid4

from sqlalchemy.orm import Session

from speechkarma.db.models import Party, Politician, Profile, Statement

DEFAULT_TEXT = "We will lower taxes for every working family next year."


def utc(*args: int) -> datetime:
    """Shorthand for an aware UTC datetime: ``utc(2024, 3, 1, 12)``."""
    return datetime(*args, tzinfo=UTC)


def create_test_party(session: Session, name: str | None = None, **fields) -> Party:
    party = Party(
        name=name or f"Party {uuid4().hex[:8]}",
        abbreviation=fields.pop("abbreviation", "TP"),
        color_hex=fields.pop("color_hex", "#336699"),
        **fields,
    )
    session.add(party)
    session.flush()
    return party


def create_test_politician(
    session: Session,
    party: Party | None = None,
    first_name: str = "Anna",
    last_name: str | None = None,
    **fields,
) -> Politician:
    party = party or create_test_party(session)
    politician = Politician(
        first_name=first_name,
        last_name=last_name or f"Berg-{uuid4().hex[:6]}",
        party_id=party.id,
        **fields,
    )
    session.add(politician)
    session.flush()
    return politician


def create_test_profile(
    session: Session,
    user_id: UUID | None = None,
    display_name: str = "tester",
    created_at: datetime | None = None,
) -> Profile:
    created_at = created_at or datetime.now(UTC)
    profile = Profile(
        id=user_id or uuid4(),
        display_name=display_name,
        created_at=created_at,
        updated_at=created_at,
    )
    session.add(profile)
    session.flush()
    return profile


def create_test_statement(
    session: Session,
    politician: Politician,
    author: Profile,
    created_at: datetime | None = None,
    statement_timestamp: datetime | None = None,
    statement_text: str = DEFAULT_TEXT,
    deleted_at: datetime | None = None,
    statement_id: UUID | None = None,
) -> Statement:
    """Insert a statement row directly, bypassing the service.

    statement_timestamp defaults to one hour before created_at.
    """
    created_at = created_at or datetime.now(UTC)
    statement = Statement(
        id=statement_id or uuid4(),
        politician_id=politician.id,
        statement_text=statement_text,
        statement_timestamp=statement_timestamp or created_at - timedelta(hours=1),
        created_by_user_id=author.id,
        created_at=created_at,
        updated_at=created_at,
        deleted_at=deleted_at,
    )
    session.add(statement)
    session.flush()
    return statement
