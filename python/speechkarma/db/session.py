"""Sessions for route handlers and the auth bootstrap.

Services own their transaction boundaries: writes wrap their work in
`transaction(db)`. A read that precedes slow network I/O (statement
enrichment) is committed first so no transaction or pooled connection is
held across the await.
"""

from collections.abc import Generator
from contextlib import contextmanager
from functools import lru_cache

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from speechkarma.db.engine import get_engine


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    # expire_on_commit=False: response schemas are built from rows after commit
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@lru_cache
def get_session_factory() -> sessionmaker[Session]:
    return create_session_factory(get_engine())


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency: one session per request, closed afterwards."""
    with get_session_factory()() as db:
        yield db


@contextmanager
def transaction(db: Session) -> Generator[Session, None, None]:
    """Commit on success, roll back and re-raise on any exception.

    Usage:
        with transaction(db):
            db.add(report)
    """
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
