"""Pydantic schemas for request/response models.

All schemas are re-exported here for convenient imports.
"""

from speechkarma.schemas.common import PageQuery, PaginationOut, SortOrder
from speechkarma.schemas.parties import PartyListQuery, PartyOut, PartySummaryOut
from speechkarma.schemas.politicians import (
    CreatePoliticianRequest,
    PoliticianDetailOut,
    PoliticianListQuery,
    PoliticianOut,
    PoliticianSummaryOut,
)
from speechkarma.schemas.profiles import ProfileOut, PublicProfileOut, UpdateProfileRequest
from speechkarma.schemas.reports import CreateReportRequest, ReportOut
from speechkarma.schemas.statements import (
    AuthorOut,
    CreateStatementRequest,
    DeletedStatementOut,
    FeedQuery,
    StatementOut,
    StatementPage,
    TimelineQuery,
    UpdateStatementRequest,
    UserStatementsQuery,
)

__all__ = [
    # Common
    "PageQuery",
    "PaginationOut",
    "SortOrder",
    # Parties
    "PartyListQuery",
    "PartyOut",
    "PartySummaryOut",
    # Politicians
    "CreatePoliticianRequest",
    "PoliticianDetailOut",
    "PoliticianListQuery",
    "PoliticianOut",
    "PoliticianSummaryOut",
    # Profiles
    "ProfileOut",
    "PublicProfileOut",
    "UpdateProfileRequest",
    # Reports
    "CreateReportRequest",
    "ReportOut",
    # Statements
    "AuthorOut",
    "CreateStatementRequest",
    "DeletedStatementOut",
    "FeedQuery",
    "StatementOut",
    "StatementPage",
    "TimelineQuery",
    "UpdateStatementRequest",
    "UserStatementsQuery",
]
