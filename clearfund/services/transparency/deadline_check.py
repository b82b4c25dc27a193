"""Evidence deadline check job.

Completed campaigns must back their collected amount with approved spending
evidence within evidence_deadline_days. Campaigns past the deadline with
insufficient approved spending are penalized once (EVIDENCE_DEADLINE_MISSED).
The ledger is the record of which campaigns were already penalized, so the
job can run any number of times, including two runs that overlap.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from clearfund.models import Campaign, CampaignStatus
from clearfund.services.transparency import scoring_constants as sc
from clearfund.services.transparency.deadlines import is_deadline_missed
from clearfund.services.transparency.engine import TransparencyScoreEngine
from clearfund.services.transparency.exceptions import (
    ResourceNotFoundError,
    ScoreUpdateConflictError,
)
from clearfund.services.transparency.recalculation import approved_spending

logger = logging.getLogger(__name__)

BATCH_SIZE = 50


def run_deadline_check(db: Session, now: datetime | None = None) -> dict:
    """Penalize completed campaigns whose evidence deadline passed without enough evidence.

    One campaign failure does not stop the run.

    Returns:
        dict with status, campaigns_checked, campaigns_penalized, errors
    """
    now = now or datetime.now(UTC)
    engine = TransparencyScoreEngine(db)
    checked = penalized = errors = 0
    logger.info("Starting evidence deadline check, now=%s", now.isoformat())

    offset = 0
    while True:
        campaigns = (
            db.query(Campaign)
            .filter(
                Campaign.status == CampaignStatus.COMPLETED,
                Campaign.completed_at.isnot(None),
            )
            .order_by(Campaign.completed_at.asc(), Campaign.id.asc())
            .offset(offset)
            .limit(BATCH_SIZE)
            .all()
        )
        if not campaigns:
            break
        offset += len(campaigns)

        spent = approved_spending(db, [c.id for c in campaigns])
        for campaign in campaigns:
            checked += 1
            if not is_deadline_missed(campaign, spent.get(campaign.id), now):
                continue
            if engine.scores.has_history_for(
                sc.EVIDENCE_DEADLINE_MISSED, sc.ENTITY_CAMPAIGN, campaign.id
            ):
                continue
            try:
                # Rechecked under the record lock; None means another run got there first
                if engine.on_evidence_deadline_missed(campaign.id) is not None:
                    penalized += 1
            except (ResourceNotFoundError, ScoreUpdateConflictError, SQLAlchemyError):
                db.rollback()
                errors += 1
                logger.exception("Deadline penalty failed for campaign %s", campaign.id)

    status = "completed" if errors == 0 else "completed_with_errors"
    logger.info(
        "Evidence deadline check %s: checked=%d penalized=%d errors=%d",
        status,
        checked,
        penalized,
        errors,
    )
    return {
        "status": status,
        "campaigns_checked": checked,
        "campaigns_penalized": penalized,
        "errors": errors,
    }
