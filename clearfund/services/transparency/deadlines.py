"""Evidence deadline rules shared by review workflow, recalculation and the deadline job."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from decimal import Decimal

from clearfund.config import get_settings
from clearfund.models import Campaign, CampaignStatus


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes (SQLite round-trips) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def evidence_deadline(campaign: Campaign) -> datetime | None:
    """Return completed_at + evidence_deadline_days, or None if not completed."""
    if campaign.completed_at is None:
        return None
    days = campaign.evidence_deadline_days
    if days is None:
        days = get_settings().evidence_deadline_days_default
    return as_utc(campaign.completed_at) + timedelta(days=days)


def is_submitted_on_time(submitted_at: datetime | None, campaign: Campaign) -> bool:
    """Evidence counts as on time when submitted no later than the campaign's deadline.

    Campaigns without a deadline yet (not completed) accept evidence as on time.
    """
    deadline = evidence_deadline(campaign)
    if deadline is None or submitted_at is None:
        return True
    return as_utc(submitted_at) <= deadline


def is_deadline_missed(
    campaign: Campaign,
    approved_spent: Decimal | None,
    now: datetime | None = None,
) -> bool:
    """True when a completed campaign's deadline passed without enough approved spending."""
    if campaign.status != CampaignStatus.COMPLETED:
        return False
    deadline = evidence_deadline(campaign)
    if deadline is None:
        return False
    now = as_utc(now) if now is not None else datetime.now(UTC)
    if now <= deadline:
        return False
    spent = approved_spent if approved_spent is not None else Decimal("0.00")
    collected = campaign.collected_amount if campaign.collected_amount is not None else Decimal("0.00")
    return spent < collected
