"""Statement report sink.

Reports are write-only from the API. Anyone may report, including anonymous
readers, and soft-deleted statements remain reportable.
"""

from uuid import UUID

from sqlalchemy.orm import Session

from speechkarma.db.models import StatementReport
from speechkarma.db.session import transaction
from speechkarma.errors import ApiErrorCode, NotFoundError
from speechkarma.logging import get_logger
from speechkarma.schemas.reports import CreateReportRequest, ReportOut
from speechkarma.services import statement_repository as repo
from speechkarma.services.policy import utcnow

logger = get_logger(__name__)


def create_report(
    db: Session,
    viewer_id: UUID | None,
    statement_id: UUID,
    req: CreateReportRequest,
) -> ReportOut:
    """Store a report against a statement.

    Raises:
        NotFoundError(E_STATEMENT_NOT_FOUND): If the statement never existed.
    """
    if repo.get(db, statement_id) is None:
        raise NotFoundError(ApiErrorCode.E_STATEMENT_NOT_FOUND, "Statement not found")

    comment = req.comment.strip() if req.comment else None
    report = StatementReport(
        statement_id=statement_id,
        reason=req.reason.value,
        comment=comment or None,
        reported_by_user_id=viewer_id,
        created_at=utcnow(),
    )
    with transaction(db):
        db.add(report)
        db.flush()

    logger.info(
        "statement.reported",
        statement_id=str(statement_id),
        report_id=str(report.id),
        reason=report.reason,
        anonymous=viewer_id is None,
    )
    return ReportOut.model_validate(report)
