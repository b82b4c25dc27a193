"""Pydantic schemas for request/response validation."""

from clearfund.schemas.transparency import (
    CanCreateCampaignResponse,
    LeaderboardEntry,
    LeaderboardResponse,
    LedgerVerificationResponse,
    LowScoreListResponse,
    ScoreHistoryItem,
    ScoreHistoryListResponse,
    TransparencyScoreResponse,
)

__all__ = [
    "CanCreateCampaignResponse",
    "LeaderboardEntry",
    "LeaderboardResponse",
    "LedgerVerificationResponse",
    "LowScoreListResponse",
    "ScoreHistoryItem",
    "ScoreHistoryListResponse",
    "TransparencyScoreResponse",
]
