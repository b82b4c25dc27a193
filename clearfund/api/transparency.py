"""Transparency score API routes (public scores, leaderboard, admin recalculation)."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query

from clearfund.api.deps import get_score_engine, require_internal_token
from clearfund.schemas.transparency import (
    CanCreateCampaignResponse,
    LeaderboardResponse,
    LedgerVerificationResponse,
    LowScoreListResponse,
    ScoreHistoryListResponse,
    TransparencyScoreResponse,
)
from clearfund.services.transparency import (
    RecalculationError,
    ResourceNotFoundError,
    ScoreUpdateConflictError,
    TransparencyScoreEngine,
)

router = APIRouter()
admin_router = APIRouter()


def _not_found(exc: ResourceNotFoundError) -> HTTPException:
    return HTTPException(status_code=404, detail=f"{exc.resource} not found")


@router.get("/organizations/{organization_id}", response_model=TransparencyScoreResponse)
def api_get_organization_score(
    organization_id: UUID,
    engine: TransparencyScoreEngine = Depends(get_score_engine),
) -> TransparencyScoreResponse:
    """Current transparency score of an organization."""
    try:
        return engine.get_organization_score(organization_id)
    except ResourceNotFoundError as exc:
        raise _not_found(exc)


@router.get(
    "/organizations/{organization_id}/history",
    response_model=ScoreHistoryListResponse,
)
def api_get_score_history(
    organization_id: UUID,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    engine: TransparencyScoreEngine = Depends(get_score_engine),
) -> ScoreHistoryListResponse:
    """Score change history, newest first."""
    try:
        return engine.get_score_history(organization_id, page=page, page_size=page_size)
    except ResourceNotFoundError as exc:
        raise _not_found(exc)


@router.get(
    "/organizations/{organization_id}/can-create-campaign",
    response_model=CanCreateCampaignResponse,
)
def api_can_create_campaign(
    organization_id: UUID,
    engine: TransparencyScoreEngine = Depends(get_score_engine),
) -> CanCreateCampaignResponse:
    """Whether the organization's score allows creating a new campaign."""
    try:
        return engine.get_campaign_eligibility(organization_id)
    except ResourceNotFoundError as exc:
        raise _not_found(exc)


@router.get("/leaderboard", response_model=LeaderboardResponse)
def api_get_leaderboard(
    page: int = Query(1, ge=1),
    page_size: int | None = Query(None, ge=1, le=100),
    engine: TransparencyScoreEngine = Depends(get_score_engine),
) -> LeaderboardResponse:
    """Organizations ranked by transparency score."""
    return engine.get_leaderboard(page=page, page_size=page_size)


# ── Admin (token-authenticated) ─────────────────────────────────────


@admin_router.get("/low-score", response_model=LowScoreListResponse)
def api_get_low_score_organizations(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    engine: TransparencyScoreEngine = Depends(get_score_engine),
    _token: None = Depends(require_internal_token),
) -> LowScoreListResponse:
    """Organizations currently blocked from creating campaigns."""
    return engine.get_low_score_organizations(page=page, page_size=page_size)


@admin_router.post("/{organization_id}/recalculate", response_model=TransparencyScoreResponse)
def api_recalculate_score(
    organization_id: UUID,
    engine: TransparencyScoreEngine = Depends(get_score_engine),
    _token: None = Depends(require_internal_token),
) -> TransparencyScoreResponse:
    """Force a full recalculation from evidence, campaign and report data."""
    try:
        engine.recalculate_score(organization_id)
    except ResourceNotFoundError as exc:
        raise _not_found(exc)
    except ScoreUpdateConflictError:
        raise HTTPException(status_code=503, detail="Score update conflict, retry later")
    except RecalculationError as exc:
        raise HTTPException(status_code=500, detail=str(exc))
    return engine.get_organization_score(organization_id)


@admin_router.get(
    "/{organization_id}/verify-ledger",
    response_model=LedgerVerificationResponse,
)
def api_verify_ledger(
    organization_id: UUID,
    engine: TransparencyScoreEngine = Depends(get_score_engine),
    _token: None = Depends(require_internal_token),
) -> LedgerVerificationResponse:
    """Replay the score history and report drift against the live score."""
    try:
        return engine.verify_ledger(organization_id)
    except ResourceNotFoundError as exc:
        raise _not_found(exc)
