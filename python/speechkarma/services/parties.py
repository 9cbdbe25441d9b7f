"""Party service layer. Read-only over the HTTP surface."""

from uuid import UUID

from sqlalchemy import asc, desc, select
from sqlalchemy.orm import Session

from speechkarma.db.models import Party
from speechkarma.errors import ApiErrorCode, NotFoundError
from speechkarma.schemas.parties import PartyListQuery, PartyOut


def list_parties(db: Session, query: PartyListQuery) -> list[PartyOut]:
    """All parties, sorted by name (default) or creation time."""
    direction = asc if query.order == "asc" else desc
    sort_column = Party.name if query.sort == "name" else Party.created_at
    rows = db.scalars(select(Party).order_by(direction(sort_column), direction(Party.id))).all()
    return [PartyOut.model_validate(p) for p in rows]


def get_party(db: Session, party_id: UUID) -> PartyOut:
    """Raises NotFoundError(E_PARTY_NOT_FOUND) if absent."""
    party = db.get(Party, party_id)
    if party is None:
        raise NotFoundError(ApiErrorCode.E_PARTY_NOT_FOUND, "Party not found")
    return PartyOut.model_validate(party)
