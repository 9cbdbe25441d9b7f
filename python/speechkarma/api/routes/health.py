"""Liveness endpoint."""

from fastapi import APIRouter, Depends

from speechkarma.api.deps import get_enricher
from speechkarma.responses import success_response
from speechkarma.services.enrichment import StatementEnricher
from speechkarma.services.policy import utcnow

router = APIRouter()


@router.get("/health")
async def health_check(enricher: StatementEnricher = Depends(get_enricher)) -> dict:
    """Returns 200 while the process is up. Never touches the database.

    `ai_summary` reports whether statement enrichment is switched on and has a key.
    """
    return success_response(
        {"status": "ok", "timestamp": utcnow().isoformat(), "ai_summary": enricher.configured}
    )
