"""Politicians API routes.

Routes are transport-only: each calls exactly one service function.
Reads are public; creating a politician requires authentication.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from speechkarma.api.deps import get_db
from speechkarma.auth.middleware import Viewer, get_optional_viewer, get_viewer
from speechkarma.responses import paginated_response, success_response
from speechkarma.schemas.politicians import CreatePoliticianRequest, PoliticianListQuery
from speechkarma.schemas.statements import TimelineQuery
from speechkarma.services import politicians as politicians_service
from speechkarma.services import statements as statements_service

router = APIRouter(tags=["politicians"])


@router.get("/politicians")
def list_politicians(
    query: Annotated[PoliticianListQuery, Query()],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Search politicians by name, optionally within one party."""
    data, pagination = politicians_service.list_politicians(db=db, query=query)
    return paginated_response(data, pagination)


@router.post("/politicians", status_code=201)
def create_politician(
    request: CreatePoliticianRequest,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Create a politician.

    Errors:
        E_PARTY_NOT_FOUND (404): Unknown party.
        E_CONFLICT (409): Same name already registered for this party.
    """
    result = politicians_service.create_politician(db=db, req=request)
    return success_response(result)


@router.get("/politicians/{politician_id}")
def get_politician(
    politician_id: UUID,
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Politician detail with party and active statement count.

    Errors:
        E_POLITICIAN_NOT_FOUND (404)
    """
    result = politicians_service.get_politician(db=db, politician_id=politician_id)
    return success_response(result)


@router.get("/politicians/{politician_id}/statements")
def get_politician_timeline(
    politician_id: UUID,
    query: Annotated[TimelineQuery, Query()],
    viewer: Annotated[Viewer | None, Depends(get_optional_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """A politician's statement timeline.

    Errors:
        E_POLITICIAN_NOT_FOUND (404)
        E_INVALID_TIME_RANGE (400): time_range not one of 7d, 30d, 365d, all.
        E_INVALID_PAGINATION (400)
    """
    page = statements_service.get_politician_timeline(
        db=db,
        viewer_id=viewer.user_id if viewer else None,
        politician_id=politician_id,
        query=query,
    )
    return paginated_response(page.data, page.pagination)
