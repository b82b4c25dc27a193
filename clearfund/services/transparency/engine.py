"""Transparency Score Engine.

Event handlers called by the evidence review, campaign lifecycle and report
resolution workflows, plus the queries behind the transparency API.

Every mutation follows the same template:

    resolve organization -> (savepoint) load record FOR UPDATE or lazily
    initialize -> calculator delta + clamped new score -> counters ->
    version-checked UPDATE -> ledger INSERT -> release savepoint -> commit

The record UPDATE and the ledger INSERT share one savepoint, so a conflict
rolls back both and the handler is retried from the top. Pending changes the
calling workflow made in the same session are committed together with the
score.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal
from typing import TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from clearfund.config import get_settings
from clearfund.models import (
    Campaign,
    Evidence,
    Organization,
    Report,
    TransparencyScore,
)
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
from clearfund.services.transparency import scoring_constants as sc
from clearfund.services.transparency.calculator import (
    calculate_change,
    calculate_new_score,
    get_score_level,
    get_score_level_tr,
    quantize_score,
)
from clearfund.services.transparency.exceptions import (
    RecalculationError,
    ResourceNotFoundError,
    ScoreUpdateConflictError,
)
from clearfund.services.transparency.ledger import build_history_entry, replay_history
from clearfund.services.transparency.recalculation import derive_statistics
from clearfund.services.transparency.score_repository import (
    ScoreRepository,
    is_duplicate_score_record,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

CounterUpdate = Callable[[TransparencyScore, Decimal], None]


@dataclass(frozen=True)
class ScoreChange:
    """A committed score mutation (mirrors the ledger row written for it)."""

    organization_id: uuid.UUID
    previous_score: Decimal
    new_score: Decimal
    change_amount: Decimal
    change_reason: str
    related_entity_type: str | None = None
    related_entity_id: uuid.UUID | None = None

    @property
    def crossed_below_threshold(self) -> bool:
        """True when this change closed the campaign creation gate."""
        threshold = sc.CAMPAIGN_CREATION_THRESHOLD
        return self.previous_score >= threshold and self.new_score < threshold


def _now() -> datetime:
    return datetime.now(UTC)


class TransparencyScoreEngine:
    """Maintains per-organization transparency scores and their change ledger.

    One instance per unit of work; it commits the session it is given.
    """

    def __init__(self, db: Session, max_retries: int | None = None) -> None:
        self.db = db
        self.scores = ScoreRepository(db)
        if max_retries is None:
            max_retries = get_settings().score_update_max_retries
        self.max_retries = max(1, max_retries)

    # ── Collaborator lookups ────────────────────────────────────────────

    def _require_organization(self, organization_id: uuid.UUID) -> Organization:
        organization = self.db.get(Organization, organization_id)
        if organization is None:
            raise ResourceNotFoundError("Organization", organization_id)
        return organization

    def _require_campaign(self, campaign_id: uuid.UUID) -> Campaign:
        campaign = self.db.get(Campaign, campaign_id)
        if campaign is None:
            raise ResourceNotFoundError("Campaign", campaign_id)
        return campaign

    def _require_evidence(self, evidence_id: uuid.UUID) -> Evidence:
        evidence = self.db.get(Evidence, evidence_id)
        if evidence is None:
            raise ResourceNotFoundError("Evidence", evidence_id)
        return evidence

    # ── Atomic unit with retry ──────────────────────────────────────────

    def _run_atomic(self, organization_id: uuid.UUID, unit: Callable[[], T]) -> T:
        """Run unit inside a savepoint and commit; retry on version or uniqueness conflicts.

        StaleDataError: another writer updated the record since we read it.
        IntegrityError on the unique organization id: another writer created the
        record first (lazy init race). Any other integrity error is permanent
        and propagates.
        """
        for attempt in range(1, self.max_retries + 1):
            try:
                with self.db.begin_nested():
                    result = unit()
                    self.db.flush()
                self.db.commit()
                return result
            except (StaleDataError, IntegrityError) as exc:
                if isinstance(exc, IntegrityError) and not is_duplicate_score_record(exc):
                    raise
                logger.info(
                    "Score update conflict for organization %s (attempt %d/%d): %s",
                    organization_id,
                    attempt,
                    self.max_retries,
                    type(exc).__name__,
                )
        raise ScoreUpdateConflictError(organization_id, self.max_retries)

    def _create_record(self, organization_id: uuid.UUID) -> TransparencyScore:
        """Insert a baseline record and its INITIALIZED ledger row."""
        record = TransparencyScore(
            organization_id=organization_id,
            current_score=sc.INITIAL_SCORE,
            evidence_score=Decimal("0.00"),
            timeliness_score=Decimal("0.00"),
            report_score=Decimal("0.00"),
            total_campaigns=0,
            completed_campaigns=0,
            total_evidences=0,
            approved_evidences=0,
            rejected_evidences=0,
            on_time_reports=0,
            late_reports=0,
            last_calculated_at=_now(),
        )
        self.scores.save(record)
        self.scores.insert_history(
            build_history_entry(
                organization_id,
                previous_score=sc.INITIAL_SCORE,
                new_score=sc.INITIAL_SCORE,
                change_reason=sc.INITIALIZED,
            )
        )
        logger.info("Initialized transparency score for organization %s", organization_id)
        return record

    def _load_or_create(self, organization_id: uuid.UUID) -> TransparencyScore:
        record = self.scores.find_by_organization_id(organization_id, for_update=True)
        if record is None:
            record = self._create_record(organization_id)
        return record

    def _apply(
        self,
        organization_id: uuid.UUID,
        reason: str,
        update_counters: CounterUpdate | None = None,
        related_entity_type: str | None = None,
        related_entity_id: uuid.UUID | None = None,
        notes: str | None = None,
        once_per_entity: bool = False,
    ) -> ScoreChange | None:
        """Apply one reason's delta to an organization's record and append the ledger row.

        once_per_entity: skip (return None) when the ledger already holds this
        reason for the related entity. Checked after the record lock is taken,
        so overlapping callers cannot both apply it.
        """

        def unit() -> ScoreChange | None:
            record = self._load_or_create(organization_id)
            if once_per_entity and self.scores.has_history_for(
                reason, related_entity_type, related_entity_id
            ):
                return None
            delta = calculate_change(reason)
            previous = quantize_score(record.current_score)
            new = calculate_new_score(previous, delta)

            record.current_score = new
            if update_counters is not None:
                update_counters(record, delta)
            record.last_calculated_at = _now()
            self.scores.save(record)

            entry = self.scores.insert_history(
                build_history_entry(
                    organization_id,
                    previous_score=previous,
                    new_score=new,
                    change_reason=reason,
                    related_entity_type=related_entity_type,
                    related_entity_id=related_entity_id,
                    notes=notes,
                )
            )
            return ScoreChange(
                organization_id=organization_id,
                previous_score=previous,
                new_score=new,
                change_amount=entry.change_amount,
                change_reason=reason,
                related_entity_type=related_entity_type,
                related_entity_id=related_entity_id,
            )

        change = self._run_atomic(organization_id, unit)
        if change is None:
            logger.info(
                "Skipped %s for organization %s: already recorded for %s %s",
                reason,
                organization_id,
                related_entity_type,
                related_entity_id,
            )
            return None
        self._log_change(change)
        return change

    def _log_change(self, change: ScoreChange) -> None:
        logger.info(
            "Transparency score %s for organization %s: %s -> %s (%s)",
            change.change_reason,
            change.organization_id,
            change.previous_score,
            change.new_score,
            change.change_amount,
        )
        if change.crossed_below_threshold:
            logger.warning(
                "Organization %s dropped below campaign creation threshold %s (score %s)",
                change.organization_id,
                sc.CAMPAIGN_CREATION_THRESHOLD,
                change.new_score,
            )

    # ── Mutating operations ─────────────────────────────────────────────

    def initialize_score(self, organization_id: uuid.UUID) -> ScoreChange | None:
        """Create the baseline record (50.00) and INITIALIZED ledger row.

        Idempotent: returns None when a record already exists.
        """
        self._require_organization(organization_id)

        def unit() -> ScoreChange | None:
            if self.scores.find_by_organization_id(organization_id) is not None:
                return None
            self._create_record(organization_id)
            return ScoreChange(
                organization_id=organization_id,
                previous_score=sc.INITIAL_SCORE,
                new_score=sc.INITIAL_SCORE,
                change_amount=Decimal("0.00"),
                change_reason=sc.INITIALIZED,
            )

        return self._run_atomic(organization_id, unit)

    def on_evidence_approved(self, evidence_id: uuid.UUID, on_time: bool) -> ScoreChange:
        """Evidence passed admin review; on_time selects the +5 or +3 reason."""
        evidence = self._require_evidence(evidence_id)
        campaign = self._require_campaign(evidence.campaign_id)
        reason = sc.EVIDENCE_APPROVED_ON_TIME if on_time else sc.EVIDENCE_APPROVED_LATE

        def counters(record: TransparencyScore, delta: Decimal) -> None:
            record.approved_evidences += 1
            record.total_evidences += 1
            if on_time:
                record.on_time_reports += 1
            else:
                record.late_reports += 1
            record.evidence_score += delta

        return self._apply(
            campaign.organization_id,
            reason,
            counters,
            related_entity_type=sc.ENTITY_EVIDENCE,
            related_entity_id=evidence.id,
        )

    def on_evidence_rejected(self, evidence_id: uuid.UUID) -> ScoreChange:
        evidence = self._require_evidence(evidence_id)
        campaign = self._require_campaign(evidence.campaign_id)

        def counters(record: TransparencyScore, delta: Decimal) -> None:
            record.rejected_evidences += 1
            record.total_evidences += 1
            record.evidence_score += delta

        return self._apply(
            campaign.organization_id,
            sc.EVIDENCE_REJECTED,
            counters,
            related_entity_type=sc.ENTITY_EVIDENCE,
            related_entity_id=evidence.id,
        )

    def on_evidence_deadline_missed(self, campaign_id: uuid.UUID) -> ScoreChange | None:
        """Penalize a campaign whose evidence deadline passed. No evidence needs to exist.

        Applied at most once per campaign; returns None if already penalized.
        """
        campaign = self._require_campaign(campaign_id)

        def counters(record: TransparencyScore, delta: Decimal) -> None:
            record.timeliness_score += delta

        return self._apply(
            campaign.organization_id,
            sc.EVIDENCE_DEADLINE_MISSED,
            counters,
            related_entity_type=sc.ENTITY_CAMPAIGN,
            related_entity_id=campaign.id,
            once_per_entity=True,
        )

    def on_campaign_completed(self, campaign_id: uuid.UUID) -> ScoreChange:
        campaign = self._require_campaign(campaign_id)

        def counters(record: TransparencyScore, delta: Decimal) -> None:
            record.total_campaigns += 1
            record.completed_campaigns += 1

        return self._apply(
            campaign.organization_id,
            sc.CAMPAIGN_COMPLETED,
            counters,
            related_entity_type=sc.ENTITY_CAMPAIGN,
            related_entity_id=campaign.id,
        )

    def on_campaign_cancelled(self, campaign_id: uuid.UUID) -> ScoreChange:
        campaign = self._require_campaign(campaign_id)

        def counters(record: TransparencyScore, delta: Decimal) -> None:
            record.total_campaigns += 1

        return self._apply(
            campaign.organization_id,
            sc.CAMPAIGN_CANCELLED,
            counters,
            related_entity_type=sc.ENTITY_CAMPAIGN,
            related_entity_id=campaign.id,
        )

    def on_report_upheld_for_organization(
        self, organization_id: uuid.UUID, report_id: uuid.UUID
    ) -> ScoreChange:
        """Apply the report penalty. Callers only invoke this for upheld reports."""
        self._require_organization(organization_id)
        if self.db.get(Report, report_id) is None:
            raise ResourceNotFoundError("Report", report_id)

        def counters(record: TransparencyScore, delta: Decimal) -> None:
            record.report_score += delta

        return self._apply(
            organization_id,
            sc.REPORT_UPHELD,
            counters,
            related_entity_type=sc.ENTITY_REPORT,
            related_entity_id=report_id,
        )

    def recalculate_score(
        self, organization_id: uuid.UUID, now: datetime | None = None
    ) -> ScoreChange:
        """Administrative full recompute from evidence, campaign and report data.

        Counters and component trackers are rewritten from the source rows
        instead of trusting the incremental values; the score becomes
        clamp(50 + sum of deltas). Writes one RECALCULATED ledger row whose
        delta may be zero. On failure the previous state is left untouched.
        """
        self._require_organization(organization_id)
        try:
            stats = derive_statistics(self.db, organization_id, now)
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Recalculation failed for organization %s", organization_id)
            raise RecalculationError(
                f"Could not derive score data for organization {organization_id}"
            ) from exc

        def unit() -> ScoreChange:
            record = self._load_or_create(organization_id)
            previous = quantize_score(record.current_score)
            new = stats.score()

            record.current_score = new
            record.evidence_score = stats.evidence_score
            record.timeliness_score = stats.timeliness_score
            record.report_score = stats.report_score
            record.approved_evidences = stats.approved_on_time + stats.approved_late
            record.rejected_evidences = stats.rejected
            record.total_evidences = record.approved_evidences + stats.rejected
            record.on_time_reports = stats.approved_on_time
            record.late_reports = stats.approved_late
            record.completed_campaigns = stats.completed_campaigns
            record.total_campaigns = stats.completed_campaigns + stats.cancelled_campaigns
            record.last_calculated_at = _now()
            self.scores.save(record)

            entry = self.scores.insert_history(
                build_history_entry(
                    organization_id,
                    previous_score=previous,
                    new_score=new,
                    change_reason=sc.RECALCULATED,
                    notes=stats.summary(),
                )
            )
            return ScoreChange(
                organization_id=organization_id,
                previous_score=previous,
                new_score=new,
                change_amount=entry.change_amount,
                change_reason=sc.RECALCULATED,
            )

        try:
            change = self._run_atomic(organization_id, unit)
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Recalculation failed for organization %s", organization_id)
            raise RecalculationError(
                f"Could not persist recalculated score for organization {organization_id}"
            ) from exc
        self._log_change(change)
        return change

    # ── Queries ─────────────────────────────────────────────────────────

    def _current_score(self, organization_id: uuid.UUID) -> Decimal:
        record = self.scores.find_by_organization_id(organization_id)
        if record is None:
            return sc.INITIAL_SCORE
        return quantize_score(record.current_score)

    def can_create_campaign(self, organization_id: uuid.UUID) -> bool:
        """current_score >= 40.00 (inclusive). Records not yet created count as 50.00."""
        self._require_organization(organization_id)
        return self._current_score(organization_id) >= sc.CAMPAIGN_CREATION_THRESHOLD

    def get_campaign_eligibility(self, organization_id: uuid.UUID) -> CanCreateCampaignResponse:
        self._require_organization(organization_id)
        score = self._current_score(organization_id)
        return CanCreateCampaignResponse(
            organization_id=organization_id,
            can_create_campaign=score >= sc.CAMPAIGN_CREATION_THRESHOLD,
            current_score=score,
            threshold=sc.CAMPAIGN_CREATION_THRESHOLD,
        )

    def get_organization_score(self, organization_id: uuid.UUID) -> TransparencyScoreResponse:
        """Current score view; a baseline view when no event has been recorded yet."""
        organization = self._require_organization(organization_id)
        record = self.scores.find_by_organization_id(organization_id)
        if record is None:
            return _baseline_response(organization)
        return _score_response(record, organization)

    def get_score_history(
        self, organization_id: uuid.UUID, page: int = 1, page_size: int = 20
    ) -> ScoreHistoryListResponse:
        """Ledger rows for an organization, newest first."""
        self._require_organization(organization_id)
        entries, total = self.scores.history_page(organization_id, page, page_size)
        return ScoreHistoryListResponse(
            organization_id=organization_id,
            items=[ScoreHistoryItem.model_validate(e) for e in entries],
            total=total,
            page=page,
            page_size=page_size,
        )

    def get_leaderboard(self, page: int = 1, page_size: int | None = None) -> LeaderboardResponse:
        """Organizations ranked by score desc, ties broken by completed campaigns desc."""
        if page_size is None:
            page_size = get_settings().leaderboard_page_size
        rows = self.scores.leaderboard(page, page_size)
        start_rank = (page - 1) * page_size + 1
        items = [
            LeaderboardEntry(
                rank=start_rank + index,
                organization_id=organization.id,
                organization_name=organization.legal_name,
                logo_url=organization.logo_url,
                current_score=quantize_score(record.current_score),
                score_level=get_score_level(record.current_score),
                completed_campaigns=record.completed_campaigns,
            )
            for index, (record, organization) in enumerate(rows)
        ]
        return LeaderboardResponse(items=items, page=page, page_size=page_size)

    def get_low_score_organizations(
        self, page: int = 1, page_size: int = 20
    ) -> LowScoreListResponse:
        """Organizations whose score blocks campaign creation, lowest first."""
        threshold = sc.CAMPAIGN_CREATION_THRESHOLD
        rows, total = self.scores.below_threshold(threshold, page, page_size)
        return LowScoreListResponse(
            items=[_score_response(record, organization) for record, organization in rows],
            total=total,
            threshold=threshold,
            page=page,
            page_size=page_size,
        )

    def verify_ledger(self, organization_id: uuid.UUID) -> LedgerVerificationResponse:
        """Replay the history chain and compare it with the live record."""
        self._require_organization(organization_id)
        record = self.scores.find_by_organization_id(organization_id)
        replay = replay_history(self.scores.history_chain(organization_id))
        violations = list(replay.violations)
        current = quantize_score(record.current_score) if record is not None else None
        if current is not None and replay.replayed_score != current:
            violations.append(
                f"replayed score {replay.replayed_score} != current_score {current}"
            )
        return LedgerVerificationResponse(
            organization_id=organization_id,
            consistent=not violations,
            entries=replay.entries,
            replayed_score=replay.replayed_score,
            current_score=current,
            violations=violations,
        )


def _score_response(
    record: TransparencyScore, organization: Organization | None = None
) -> TransparencyScoreResponse:
    score = quantize_score(record.current_score)
    return TransparencyScoreResponse(
        organization_id=record.organization_id,
        organization_name=organization.legal_name if organization is not None else None,
        current_score=score,
        score_level=get_score_level(score),
        score_level_tr=get_score_level_tr(score),
        can_create_campaign=score >= sc.CAMPAIGN_CREATION_THRESHOLD,
        evidence_score=quantize_score(record.evidence_score),
        timeliness_score=quantize_score(record.timeliness_score),
        report_score=quantize_score(record.report_score),
        total_campaigns=record.total_campaigns,
        completed_campaigns=record.completed_campaigns,
        total_evidences=record.total_evidences,
        approved_evidences=record.approved_evidences,
        rejected_evidences=record.rejected_evidences,
        on_time_reports=record.on_time_reports,
        late_reports=record.late_reports,
        last_calculated_at=record.last_calculated_at,
    )


def _baseline_response(organization: Organization) -> TransparencyScoreResponse:
    score = sc.INITIAL_SCORE
    return TransparencyScoreResponse(
        organization_id=organization.id,
        organization_name=organization.legal_name,
        current_score=score,
        score_level=get_score_level(score),
        score_level_tr=get_score_level_tr(score),
        can_create_campaign=score >= sc.CAMPAIGN_CREATION_THRESHOLD,
    )
