"""SQLAlchemy models."""

from clearfund.models.campaign import Campaign, CampaignStatus
from clearfund.models.evidence import Evidence, EvidenceStatus
from clearfund.models.organization import Organization
from clearfund.models.report import Report, ReportStatus
from clearfund.models.transparency_score import TransparencyScore
from clearfund.models.transparency_score_history import TransparencyScoreHistory

__all__ = [
    "Campaign",
    "CampaignStatus",
    "Evidence",
    "EvidenceStatus",
    "Organization",
    "Report",
    "ReportStatus",
    "TransparencyScore",
    "TransparencyScoreHistory",
]
