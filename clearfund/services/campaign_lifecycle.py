"""Campaign lifecycle transitions that feed the transparency score."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime

from sqlalchemy.orm import Session

from clearfund.models import Campaign, CampaignStatus
from clearfund.services.transparency import ResourceNotFoundError, TransparencyScoreEngine
from clearfund.services.workflow_errors import (
    CampaignCreationNotAllowedError,
    InvalidStateTransitionError,
)

logger = logging.getLogger(__name__)

OPEN_STATUSES = (CampaignStatus.DRAFT, CampaignStatus.ACTIVE)


def _open_campaign(db: Session, campaign_id: uuid.UUID) -> Campaign:
    campaign = db.get(Campaign, campaign_id)
    if campaign is None:
        raise ResourceNotFoundError("Campaign", campaign_id)
    if campaign.status not in OPEN_STATUSES:
        raise InvalidStateTransitionError(
            f"Campaign {campaign_id} already ended (status={campaign.status})"
        )
    return campaign


def ensure_can_create_campaign(db: Session, organization_id: uuid.UUID) -> None:
    """Raise CampaignCreationNotAllowedError when the score is below the threshold."""
    if not TransparencyScoreEngine(db).can_create_campaign(organization_id):
        raise CampaignCreationNotAllowedError(
            f"Organization {organization_id} transparency score is below the campaign creation threshold"
        )


def complete_campaign(db: Session, campaign_id: uuid.UUID) -> Campaign:
    """Mark the campaign completed; starts the evidence deadline clock."""
    campaign = _open_campaign(db, campaign_id)
    campaign.status = CampaignStatus.COMPLETED
    campaign.completed_at = datetime.now(UTC)
    TransparencyScoreEngine(db).on_campaign_completed(campaign.id)
    logger.info("Campaign %s completed", campaign.id)
    return campaign


def cancel_campaign(db: Session, campaign_id: uuid.UUID) -> Campaign:
    campaign = _open_campaign(db, campaign_id)
    campaign.status = CampaignStatus.CANCELLED
    campaign.cancelled_at = datetime.now(UTC)
    TransparencyScoreEngine(db).on_campaign_cancelled(campaign.id)
    logger.info("Campaign %s cancelled", campaign.id)
    return campaign
