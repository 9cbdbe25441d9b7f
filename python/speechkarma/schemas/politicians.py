"""Politician Pydantic schemas."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from speechkarma.schemas.common import PageQuery, SortOrder
from speechkarma.schemas.parties import PartyOut, PartySummaryOut

# =============================================================================
# Output Schemas
# =============================================================================


class PoliticianSummaryOut(BaseModel):
    """Politician fields embedded in statement projections.

    The party is always the politician's current affiliation.
    """

    id: UUID
    first_name: str
    last_name: str
    party: PartySummaryOut

    model_config = ConfigDict(from_attributes=True)


class PoliticianOut(PoliticianSummaryOut):
    """Politician list item."""

    party_id: UUID
    biography: str | None = None
    created_at: datetime
    updated_at: datetime


class PoliticianDetailOut(PoliticianOut):
    """Politician detail with full party record and active statement count."""

    party: PartyOut
    statements_count: int


# =============================================================================
# Request Schemas
# =============================================================================


class PoliticianListQuery(PageQuery):
    """Query parameters for GET /politicians."""

    search: str | None = Field(default=None, max_length=100)
    party_id: UUID | None = None
    sort: Literal["last_name", "created_at"] = "last_name"
    order: SortOrder = "asc"


class CreatePoliticianRequest(BaseModel):
    """Request schema for creating a politician."""

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    party_id: UUID
    biography: str | None = Field(default=None, max_length=5000)
