"""Report resolution workflow. Only upheld reports touch the transparency score."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime

from sqlalchemy.orm import Session

from clearfund.models import Report, ReportStatus
from clearfund.services.transparency import ResourceNotFoundError, TransparencyScoreEngine
from clearfund.services.workflow_errors import InvalidStateTransitionError

logger = logging.getLogger(__name__)


def resolve_report(
    db: Session,
    report_id: uuid.UUID,
    upheld: bool,
    resolution_note: str | None = None,
) -> Report:
    """Resolve a pending report as UPHELD or DISMISSED.

    UPHELD applies the report penalty to the reported organization.
    DISMISSED reports are committed without any score change.
    """
    report = db.get(Report, report_id)
    if report is None:
        raise ResourceNotFoundError("Report", report_id)
    if report.status != ReportStatus.PENDING:
        raise InvalidStateTransitionError(
            f"Report {report_id} already resolved (status={report.status})"
        )

    report.status = ReportStatus.UPHELD if upheld else ReportStatus.DISMISSED
    report.resolution_note = resolution_note
    report.resolved_at = datetime.now(UTC)

    if upheld:
        TransparencyScoreEngine(db).on_report_upheld_for_organization(
            report.organization_id, report.id
        )
    else:
        db.commit()
    logger.info("Report %s resolved (upheld=%s)", report.id, upheld)
    return report
