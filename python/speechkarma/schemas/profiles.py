"""Profile Pydantic schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

MAX_DISPLAY_NAME_CHARS = 100


class PublicProfileOut(BaseModel):
    """What anyone can see about a contributor."""

    id: UUID
    display_name: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProfileOut(PublicProfileOut):
    """The authenticated viewer's own profile."""

    is_admin: bool
    updated_at: datetime
    statements_count: int


class UpdateProfileRequest(BaseModel):
    """Request schema for PATCH /profiles/me.

    Length is validated after trimming in the service so the error carries
    E_DISPLAY_NAME_INVALID.
    """

    display_name: str
