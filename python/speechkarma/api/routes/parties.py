"""Parties API routes. Public and read-only."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from speechkarma.api.deps import get_db
from speechkarma.responses import success_response
from speechkarma.schemas.parties import PartyListQuery
from speechkarma.services import parties as parties_service

router = APIRouter(tags=["parties"])


@router.get("/parties")
def list_parties(
    query: Annotated[PartyListQuery, Query()],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """List all parties."""
    result = parties_service.list_parties(db=db, query=query)
    return success_response(result)


@router.get("/parties/{party_id}")
def get_party(
    party_id: UUID,
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Party detail.

    Errors:
        E_PARTY_NOT_FOUND (404)
    """
    result = parties_service.get_party(db=db, party_id=party_id)
    return success_response(result)
