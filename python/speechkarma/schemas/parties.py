"""Party Pydantic schemas."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from speechkarma.schemas.common import SortOrder


class PartySummaryOut(BaseModel):
    """Party fields embedded in politician and statement projections."""

    id: UUID
    name: str
    abbreviation: str | None = None
    color_hex: str | None = None

    model_config = ConfigDict(from_attributes=True)


class PartyOut(PartySummaryOut):
    """Full party record."""

    description: str | None = None
    created_at: datetime
    updated_at: datetime


class PartyListQuery(BaseModel):
    """Query parameters for GET /parties."""

    sort: Literal["name", "created_at"] = "name"
    order: SortOrder = "asc"
