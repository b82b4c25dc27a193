"""Transparency score schemas for API responses."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class TransparencyScoreResponse(BaseModel):
    """Current score of one organization with counters and level."""

    model_config = ConfigDict(from_attributes=True)

    organization_id: UUID
    organization_name: str | None = None
    current_score: Decimal
    score_level: str
    score_level_tr: str
    can_create_campaign: bool
    evidence_score: Decimal = Decimal("0.00")
    timeliness_score: Decimal = Decimal("0.00")
    report_score: Decimal = Decimal("0.00")
    total_campaigns: int = 0
    completed_campaigns: int = 0
    total_evidences: int = 0
    approved_evidences: int = 0
    rejected_evidences: int = 0
    on_time_reports: int = 0
    late_reports: int = 0
    last_calculated_at: datetime | None = None


class ScoreHistoryItem(BaseModel):
    """One ledger row."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    previous_score: Decimal
    new_score: Decimal
    change_amount: Decimal
    change_reason: str
    related_entity_type: str | None = None
    related_entity_id: UUID | None = None
    notes: str | None = None
    created_at: datetime


class ScoreHistoryListResponse(BaseModel):
    """Paginated score history, newest first."""

    organization_id: UUID
    items: list[ScoreHistoryItem]
    total: int
    page: int = 1
    page_size: int = 20


class LeaderboardEntry(BaseModel):
    """Ranked organization for the public transparency board."""

    rank: int
    organization_id: UUID
    organization_name: str
    logo_url: str | None = None
    current_score: Decimal
    score_level: str
    completed_campaigns: int


class LeaderboardResponse(BaseModel):
    """One page of the leaderboard."""

    items: list[LeaderboardEntry]
    page: int = 1
    page_size: int = 10


class LowScoreListResponse(BaseModel):
    """Organizations below the campaign creation threshold, lowest first."""

    items: list[TransparencyScoreResponse]
    total: int
    threshold: Decimal
    page: int = 1
    page_size: int = 20


class CanCreateCampaignResponse(BaseModel):
    """Campaign creation eligibility."""

    organization_id: UUID
    can_create_campaign: bool
    current_score: Decimal
    threshold: Decimal


class LedgerVerificationResponse(BaseModel):
    """Result of replaying the score history against the live record."""

    organization_id: UUID
    consistent: bool
    entries: int
    replayed_score: Decimal
    current_score: Decimal | None
    violations: list[str]

