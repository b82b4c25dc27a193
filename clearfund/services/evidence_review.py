"""Evidence review workflow: admin approval/rejection of spending evidence.

The status change and the transparency score update commit together.
"""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime

from sqlalchemy.orm import Session

from clearfund.models import Campaign, Evidence, EvidenceStatus
from clearfund.services.transparency import ResourceNotFoundError, TransparencyScoreEngine
from clearfund.services.transparency.deadlines import is_submitted_on_time
from clearfund.services.workflow_errors import InvalidStateTransitionError

logger = logging.getLogger(__name__)


def _pending_evidence(db: Session, evidence_id: uuid.UUID) -> tuple[Evidence, Campaign]:
    evidence = db.get(Evidence, evidence_id)
    if evidence is None:
        raise ResourceNotFoundError("Evidence", evidence_id)
    if evidence.status != EvidenceStatus.PENDING:
        raise InvalidStateTransitionError(
            f"Evidence {evidence_id} already reviewed (status={evidence.status})"
        )
    campaign = db.get(Campaign, evidence.campaign_id)
    if campaign is None:
        raise ResourceNotFoundError("Campaign", evidence.campaign_id)
    return evidence, campaign


def approve_evidence(db: Session, evidence_id: uuid.UUID) -> Evidence:
    """Approve pending evidence and credit the organization's score.

    On time means submitted no later than completed_at + evidence_deadline_days.
    """
    evidence, campaign = _pending_evidence(db, evidence_id)
    on_time = is_submitted_on_time(evidence.submitted_at, campaign)
    evidence.status = EvidenceStatus.APPROVED
    evidence.reviewed_at = datetime.now(UTC)
    TransparencyScoreEngine(db).on_evidence_approved(evidence.id, on_time=on_time)
    logger.info("Evidence %s approved (on_time=%s)", evidence.id, on_time)
    return evidence


def reject_evidence(db: Session, evidence_id: uuid.UUID) -> Evidence:
    """Reject pending evidence and apply the rejection penalty."""
    evidence, _campaign = _pending_evidence(db, evidence_id)
    evidence.status = EvidenceStatus.REJECTED
    evidence.reviewed_at = datetime.now(UTC)
    TransparencyScoreEngine(db).on_evidence_rejected(evidence.id)
    logger.info("Evidence %s rejected", evidence.id)
    return evidence
