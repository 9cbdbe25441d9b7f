"""Statement report Pydantic schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from speechkarma.db.models import ReportReason


class CreateReportRequest(BaseModel):
    """Request schema for flagging a statement."""

    reason: ReportReason
    comment: str | None = Field(default=None, max_length=1000)


class ReportOut(BaseModel):
    """Acknowledgement of a stored report. The reporter is not echoed."""

    id: UUID
    statement_id: UUID
    reason: ReportReason
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
