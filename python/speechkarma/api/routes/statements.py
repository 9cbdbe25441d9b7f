"""Statements API routes.

Route handlers for the statement feed, detail, lifecycle mutations, and
reports. Routes are transport-only: each calls exactly one service function.

- Reads are public; can_edit/can_delete reflect the viewer (false when anonymous)
- Create/edit/delete require authentication
- Reports may be anonymous
- Response envelope: {"data": ...} or {"data": [...], "pagination": {...}}
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from speechkarma.api.deps import get_db, get_enricher
from speechkarma.auth.middleware import Viewer, get_optional_viewer, get_viewer
from speechkarma.responses import paginated_response, success_response
from speechkarma.schemas.reports import CreateReportRequest
from speechkarma.schemas.statements import (
    CreateStatementRequest,
    FeedQuery,
    UpdateStatementRequest,
)
from speechkarma.services import reports as reports_service
from speechkarma.services import statements as statements_service
from speechkarma.services.enrichment import StatementEnricher

router = APIRouter(tags=["statements"])


def _viewer_id(viewer: Viewer | None) -> UUID | None:
    return viewer.user_id if viewer else None


@router.get("/statements")
def list_statements(
    query: Annotated[FeedQuery, Query()],
    viewer: Annotated[Viewer | None, Depends(get_optional_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Recent feed of active statements.

    Errors:
        E_INVALID_PAGINATION (400): page < 1 or limit outside 1..100.
        E_INVALID_REQUEST (400): Unknown sort_by/order value.
    """
    page = statements_service.list_statements(db=db, viewer_id=_viewer_id(viewer), query=query)
    return paginated_response(page.data, page.pagination)


@router.post("/statements", status_code=201)
async def create_statement(
    request: CreateStatementRequest,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
    enricher: Annotated[StatementEnricher, Depends(get_enricher)],
) -> dict:
    """Create a statement. An AI summary may be appended when enabled.

    Errors:
        E_UNAUTHENTICATED (401): No credentials.
        E_STATEMENT_TEXT_INVALID (400): Text shorter than 10 or longer than 5000 chars.
        E_STATEMENT_TIMESTAMP_INVALID (400): statement_timestamp in the future.
        E_POLITICIAN_NOT_FOUND (404): Unknown politician.
    """
    result = await statements_service.create_statement(
        db=db,
        viewer_id=viewer.user_id,
        req=request,
        enricher=enricher,
    )
    return success_response(result)


@router.get("/statements/{statement_id}")
def get_statement(
    statement_id: UUID,
    viewer: Annotated[Viewer | None, Depends(get_optional_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Statement detail, including soft-deleted statements (deleted_at set).

    Errors:
        E_STATEMENT_NOT_FOUND (404): Statement never existed.
    """
    result = statements_service.get_statement(
        db=db, viewer_id=_viewer_id(viewer), statement_id=statement_id
    )
    return success_response(result)


@router.patch("/statements/{statement_id}")
def update_statement(
    statement_id: UUID,
    request: UpdateStatementRequest,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Edit a statement within the grace period.

    Errors:
        E_STATEMENT_NOT_FOUND (404): Statement never existed.
        E_STATEMENT_DELETED (403): Statement was deleted.
        E_FORBIDDEN (403): Viewer is not the author.
        E_GRACE_PERIOD_EXPIRED (403): Grace period has elapsed.
        E_STATEMENT_TEXT_INVALID / E_STATEMENT_TIMESTAMP_INVALID (400)
    """
    result = statements_service.update_statement(
        db=db,
        viewer_id=viewer.user_id,
        statement_id=statement_id,
        req=request,
    )
    return success_response(result)


@router.delete("/statements/{statement_id}")
def delete_statement(
    statement_id: UUID,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Soft-delete a statement within the grace period.

    Errors:
        E_STATEMENT_NOT_FOUND (404): Statement never existed.
        E_STATEMENT_DELETED (403): Already deleted.
        E_FORBIDDEN (403): Viewer is not the author.
        E_GRACE_PERIOD_EXPIRED (403): Grace period has elapsed.
    """
    result = statements_service.delete_statement(
        db=db, viewer_id=viewer.user_id, statement_id=statement_id
    )
    return success_response(result)


@router.post("/statements/{statement_id}/reports", status_code=201)
def report_statement(
    statement_id: UUID,
    request: CreateReportRequest,
    viewer: Annotated[Viewer | None, Depends(get_optional_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Flag a statement for review. Anonymous reports are accepted.

    Errors:
        E_STATEMENT_NOT_FOUND (404): Statement never existed.
    """
    result = reports_service.create_report(
        db=db,
        viewer_id=_viewer_id(viewer),
        statement_id=statement_id,
        req=request,
    )
    return success_response(result)
