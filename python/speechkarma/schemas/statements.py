"""Statement Pydantic schemas.

Contains the statement projection, create/update requests, and the query
models for the feed, politician timeline, and per-user history.

Text bounds are checked in the service (after trimming) so failures carry
E_STATEMENT_TEXT_INVALID; the schemas only enforce types.
"""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from speechkarma.schemas.common import PageQuery, PaginationOut, SortOrder
from speechkarma.schemas.politicians import PoliticianSummaryOut
from speechkarma.services.policy import TimeRange

StatementSortField = Literal["created_at", "statement_timestamp"]


# =============================================================================
# Output Schemas
# =============================================================================


class AuthorOut(BaseModel):
    """The contributor who created a statement."""

    id: UUID
    display_name: str

    model_config = ConfigDict(from_attributes=True)


class StatementOut(BaseModel):
    """Response schema for a statement.

    can_edit / can_delete are derived for the requesting viewer at the
    request's reference time; they are never stored.
    """

    id: UUID
    politician_id: UUID
    statement_text: str
    statement_timestamp: datetime
    created_by: AuthorOut
    politician: PoliticianSummaryOut
    created_at: datetime
    updated_at: datetime
    deleted_at: datetime | None = None
    can_edit: bool
    can_delete: bool


class DeletedStatementOut(BaseModel):
    """Response schema for a soft delete."""

    id: UUID
    deleted_at: datetime


# =============================================================================
# Request Schemas
# =============================================================================


class CreateStatementRequest(BaseModel):
    """Request schema for creating a statement."""

    politician_id: UUID
    statement_text: str
    statement_timestamp: datetime


class UpdateStatementRequest(BaseModel):
    """Request schema for editing a statement.

    Partial update: omitted fields are left unchanged, but at least one
    field must be supplied.
    """

    statement_text: str | None = None
    statement_timestamp: datetime | None = None

    @model_validator(mode="after")
    def require_some_field(self) -> "UpdateStatementRequest":
        if self.statement_text is None and self.statement_timestamp is None:
            raise ValueError("At least one of statement_text, statement_timestamp is required")
        return self


# =============================================================================
# Query Schemas
# =============================================================================


class FeedQuery(PageQuery):
    """Query parameters for GET /statements (recent feed)."""

    politician_id: UUID | None = None
    sort_by: StatementSortField = "created_at"
    order: SortOrder = "desc"


class TimelineQuery(PageQuery):
    """Query parameters for GET /politicians/{id}/statements.

    time_field defaults to sort_by, so ``?sort_by=statement_timestamp&time_range=30d``
    filters and sorts on when the statement was made.
    """

    time_range: TimeRange = TimeRange.ALL
    time_field: StatementSortField | None = None
    sort_by: StatementSortField = "created_at"
    order: SortOrder = "desc"

    @model_validator(mode="after")
    def default_time_field(self) -> "TimelineQuery":
        if self.time_field is None:
            self.time_field = self.sort_by
        return self


class UserStatementsQuery(PageQuery):
    """Query parameters for GET /profiles/{id}/statements. Newest first."""

    order: SortOrder = "desc"


class StatementPage(BaseModel):
    """A page of statements (service return value before enveloping)."""

    data: list[StatementOut] = Field(default_factory=list)
    pagination: PaginationOut
