"""Re-derive score statistics from live evidence, campaign and report rows (admin recompute)."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from sqlalchemy import func
from sqlalchemy.orm import Session

from clearfund.models import (
    Campaign,
    CampaignStatus,
    Evidence,
    EvidenceStatus,
    Report,
    ReportStatus,
)
from clearfund.services.transparency import scoring_constants as sc
from clearfund.services.transparency.calculator import calculate_change, calculate_new_score
from clearfund.services.transparency.deadlines import is_deadline_missed, is_submitted_on_time


@dataclass(frozen=True)
class ScoreStatistics:
    """Counts of every scored event, as found in the underlying data."""

    approved_on_time: int = 0
    approved_late: int = 0
    rejected: int = 0
    deadlines_missed: int = 0
    completed_campaigns: int = 0
    cancelled_campaigns: int = 0
    upheld_reports: int = 0

    def _points(self, count: int, reason: str) -> Decimal:
        return calculate_change(reason) * count

    @property
    def evidence_score(self) -> Decimal:
        return (
            self._points(self.approved_on_time, sc.EVIDENCE_APPROVED_ON_TIME)
            + self._points(self.approved_late, sc.EVIDENCE_APPROVED_LATE)
            + self._points(self.rejected, sc.EVIDENCE_REJECTED)
        )

    @property
    def timeliness_score(self) -> Decimal:
        return self._points(self.deadlines_missed, sc.EVIDENCE_DEADLINE_MISSED)

    @property
    def report_score(self) -> Decimal:
        return self._points(self.upheld_reports, sc.REPORT_UPHELD)

    @property
    def campaign_points(self) -> Decimal:
        return self._points(self.completed_campaigns, sc.CAMPAIGN_COMPLETED) + self._points(
            self.cancelled_campaigns, sc.CAMPAIGN_CANCELLED
        )

    def score(self) -> Decimal:
        """clamp(50 + sum of all deltas). Clamped once, at the end."""
        total = self.evidence_score + self.timeliness_score + self.report_score + self.campaign_points
        return calculate_new_score(sc.INITIAL_SCORE, total)

    def summary(self) -> str:
        return (
            f"approved_on_time={self.approved_on_time} approved_late={self.approved_late} "
            f"rejected={self.rejected} deadlines_missed={self.deadlines_missed} "
            f"completed={self.completed_campaigns} cancelled={self.cancelled_campaigns} "
            f"upheld_reports={self.upheld_reports}"
        )


def derive_statistics(
    db: Session, organization_id: uuid.UUID, now: datetime | None = None
) -> ScoreStatistics:
    """Count scored events for an organization straight from the source tables."""
    reviewed = (
        db.query(Evidence, Campaign)
        .join(Campaign, Evidence.campaign_id == Campaign.id)
        .filter(
            Campaign.organization_id == organization_id,
            Evidence.status.in_([EvidenceStatus.APPROVED, EvidenceStatus.REJECTED]),
        )
        .all()
    )
    on_time = late = rejected = 0
    for evidence, campaign in reviewed:
        if evidence.status == EvidenceStatus.REJECTED:
            rejected += 1
        elif is_submitted_on_time(evidence.submitted_at, campaign):
            on_time += 1
        else:
            late += 1

    campaigns = (
        db.query(Campaign)
        .filter(
            Campaign.organization_id == organization_id,
            Campaign.status.in_([CampaignStatus.COMPLETED, CampaignStatus.CANCELLED]),
        )
        .all()
    )
    completed = [c for c in campaigns if c.status == CampaignStatus.COMPLETED]
    cancelled = len(campaigns) - len(completed)

    spent_by_campaign = approved_spending(db, [c.id for c in completed])
    missed = sum(
        1 for c in completed if is_deadline_missed(c, spent_by_campaign.get(c.id), now)
    )

    upheld = (
        db.query(func.count(Report.id))
        .filter(
            Report.organization_id == organization_id,
            Report.status == ReportStatus.UPHELD,
        )
        .scalar()
    ) or 0

    return ScoreStatistics(
        approved_on_time=on_time,
        approved_late=late,
        rejected=rejected,
        deadlines_missed=missed,
        completed_campaigns=len(completed),
        cancelled_campaigns=cancelled,
        upheld_reports=upheld,
    )


def approved_spending(db: Session, campaign_ids: list[uuid.UUID]) -> dict[uuid.UUID, Decimal]:
    """Sum of APPROVED evidence amount_spent per campaign."""
    if not campaign_ids:
        return {}
    rows = (
        db.query(Evidence.campaign_id, func.sum(Evidence.amount_spent))
        .filter(
            Evidence.campaign_id.in_(campaign_ids),
            Evidence.status == EvidenceStatus.APPROVED,
        )
        .group_by(Evidence.campaign_id)
        .all()
    )
    return {campaign_id: Decimal(str(total or 0)) for campaign_id, total in rows}
