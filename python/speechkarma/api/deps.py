"""FastAPI dependencies for route handlers.

Common dependencies like database sessions and the shared enricher.
"""

from fastapi import Request

from speechkarma.db.session import get_db, get_session_factory
from speechkarma.services.enrichment import StatementEnricher

__all__ = ["get_db", "get_enricher", "get_session_factory"]


def get_enricher(request: Request) -> StatementEnricher:
    """Get the shared statement enricher from app state.

    Initialized in the app lifespan around the shared httpx.AsyncClient.
    Falls back to a disabled enricher if the lifespan did not run.
    """
    enricher = getattr(request.app.state, "enricher", None)
    if enricher is None:
        return StatementEnricher.disabled()
    return enricher
