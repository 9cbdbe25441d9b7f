"""Politician service layer.

Politicians are reference data: readable by anyone, creatable by any
authenticated user. The party shown is always the current affiliation.
"""

from uuid import UUID

from sqlalchemy import asc, desc, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from speechkarma.db.models import Party, Politician
from speechkarma.errors import ApiError, ApiErrorCode, ConflictError, NotFoundError
from speechkarma.logging import get_logger
from speechkarma.schemas.common import PaginationOut
from speechkarma.schemas.parties import PartyOut
from speechkarma.schemas.politicians import (
    CreatePoliticianRequest,
    PoliticianDetailOut,
    PoliticianListQuery,
    PoliticianOut,
)
from speechkarma.services import statement_repository as repo

logger = get_logger(__name__)

UNIQUE_NAME_CONSTRAINT = "uq_politicians_name_party"


def politician_exists(db: Session, politician_id: UUID) -> bool:
    """True if a politician with this id exists."""
    return db.scalar(select(Politician.id).where(Politician.id == politician_id)) is not None


def get_politician_or_404(db: Session, politician_id: UUID) -> Politician:
    politician = db.get(Politician, politician_id)
    if politician is None:
        raise NotFoundError(ApiErrorCode.E_POLITICIAN_NOT_FOUND, "Politician not found")
    return politician


def list_politicians(
    db: Session, query: PoliticianListQuery
) -> tuple[list[PoliticianOut], PaginationOut]:
    """Search and page through politicians.

    ``search`` matches a case-insensitive substring of first or last name.
    """
    conditions = []
    search = (query.search or "").strip()
    if search:
        conditions.append(
            or_(
                Politician.first_name.icontains(search, autoescape=True),
                Politician.last_name.icontains(search, autoescape=True),
            )
        )
    if query.party_id is not None:
        conditions.append(Politician.party_id == query.party_id)

    total = db.scalar(select(func.count()).select_from(Politician).where(*conditions)) or 0

    direction = asc if query.order == "asc" else desc
    sort_column = Politician.last_name if query.sort == "last_name" else Politician.created_at
    rows = db.scalars(
        select(Politician)
        .where(*conditions)
        .order_by(direction(sort_column), direction(Politician.id))
        .limit(query.limit)
        .offset(query.offset)
    ).all()

    return (
        [PoliticianOut.model_validate(p) for p in rows],
        PaginationOut.build(query.page, query.limit, total),
    )


def get_politician(db: Session, politician_id: UUID) -> PoliticianDetailOut:
    """Politician detail with its party and number of active statements.

    Raises:
        NotFoundError(E_POLITICIAN_NOT_FOUND): If the politician does not exist.
    """
    politician = get_politician_or_404(db, politician_id)
    out = PoliticianOut.model_validate(politician)
    return PoliticianDetailOut(
        **out.model_dump(exclude={"party"}),
        party=PartyOut.model_validate(politician.party),
        statements_count=repo.count_active_for_politician(db, politician_id),
    )


def _map_integrity_error(e: IntegrityError) -> ApiError:
    constraint_name = getattr(getattr(e.orig, "diag", None), "constraint_name", None)
    msg = str(e.orig) if e.orig else str(e)
    if constraint_name == UNIQUE_NAME_CONSTRAINT or "UNIQUE constraint failed: politicians" in msg:
        return ConflictError(message="Politician already exists in this party")

    logger.error("unknown_integrity_error", constraint=constraint_name, error=str(e))
    return ApiError(ApiErrorCode.E_INTERNAL, "Database constraint violation")


def create_politician(db: Session, req: CreatePoliticianRequest) -> PoliticianOut:
    """Create a politician.

    Raises:
        NotFoundError(E_PARTY_NOT_FOUND): If the party does not exist.
        ConflictError(E_CONFLICT): Same first name, last name and party already exist.
    """
    first_name = req.first_name.strip()
    last_name = req.last_name.strip()
    if not first_name or not last_name:
        raise ApiError(ApiErrorCode.E_INVALID_REQUEST, "Name cannot be blank")

    if db.get(Party, req.party_id) is None:
        raise NotFoundError(ApiErrorCode.E_PARTY_NOT_FOUND, "Party not found")

    politician = Politician(
        first_name=first_name,
        last_name=last_name,
        party_id=req.party_id,
        biography=req.biography,
    )
    try:
        db.add(politician)
        db.flush()
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise _map_integrity_error(e) from e

    db.refresh(politician)
    logger.info("politician.created", politician_id=str(politician.id))
    return PoliticianOut.model_validate(politician)
