"""Tests for TransparencyScoreEngine event handlers and the campaign creation gate."""

from __future__ import annotations

import logging
import uuid
from decimal import Decimal

import pytest

from clearfund.services.transparency import (
    ResourceNotFoundError,
    TransparencyScoreEngine,
)
from clearfund.services.transparency import scoring_constants as sc
from tests.factories import (
    load_history,
    load_score,
    make_campaign,
    make_evidence,
    make_organization,
    make_report,
    set_score,
)

ENGINE_LOGGER = "clearfund.services.transparency.engine"


# ── initialize_score ───────────────────────────────────────────────────


class TestInitializeScore:
    def test_creates_baseline_record_and_ledger_row(self, db, score_engine, organization) -> None:
        change = score_engine.initialize_score(organization.id)

        assert change is not None
        assert change.change_reason == sc.INITIALIZED
        record = load_score(db, organization.id)
        assert record.current_score == Decimal("50.00")
        assert record.total_campaigns == 0
        assert record.approved_evidences == 0
        history = load_history(db, organization.id)
        assert [h.change_reason for h in history] == [sc.INITIALIZED]
        assert history[0].previous_score == history[0].new_score == Decimal("50.00")
        assert history[0].change_amount == Decimal("0.00")

    def test_is_idempotent(self, db, score_engine, organization) -> None:
        """Second call is a no-op: one record, one ledger row."""
        score_engine.initialize_score(organization.id)
        assert score_engine.initialize_score(organization.id) is None
        assert len(load_history(db, organization.id)) == 1

    def test_unknown_organization(self, db, score_engine) -> None:
        missing = uuid.uuid4()
        with pytest.raises(ResourceNotFoundError) as exc_info:
            score_engine.initialize_score(missing)
        assert exc_info.value.resource == "Organization"
        assert load_score(db, missing) is None


# ── Evidence handlers ──────────────────────────────────────────────────


class TestEvidenceHandlers:
    def test_approved_on_time(self, db, score_engine, organization) -> None:
        campaign = make_campaign(db, organization)
        evidence = make_evidence(db, campaign)
        score_engine.initialize_score(organization.id)

        change = score_engine.on_evidence_approved(evidence.id, on_time=True)

        assert change.previous_score == Decimal("50.00")
        assert change.new_score == Decimal("55.00")
        assert change.change_amount == Decimal("5.00")
        record = load_score(db, organization.id)
        assert record.current_score == Decimal("55.00")
        assert record.approved_evidences == 1
        assert record.total_evidences == 1
        assert record.on_time_reports == 1
        assert record.late_reports == 0
        assert record.evidence_score == Decimal("5.00")
        last = load_history(db, organization.id)[-1]
        assert last.change_reason == sc.EVIDENCE_APPROVED_ON_TIME
        assert last.related_entity_type == sc.ENTITY_EVIDENCE
        assert last.related_entity_id == evidence.id

    def test_approved_late(self, db, score_engine, organization) -> None:
        campaign = make_campaign(db, organization)
        evidence = make_evidence(db, campaign)

        change = score_engine.on_evidence_approved(evidence.id, on_time=False)

        assert change.new_score == Decimal("53.00")
        record = load_score(db, organization.id)
        assert record.late_reports == 1
        assert record.on_time_reports == 0
        assert record.approved_evidences == 1

    def test_first_event_initializes_lazily(self, db, score_engine, organization) -> None:
        """No record yet: the handler creates the baseline first, then applies the delta."""
        campaign = make_campaign(db, organization)
        evidence = make_evidence(db, campaign)

        score_engine.on_evidence_approved(evidence.id, on_time=True)

        reasons = [h.change_reason for h in load_history(db, organization.id)]
        assert reasons == [sc.INITIALIZED, sc.EVIDENCE_APPROVED_ON_TIME]
        assert load_score(db, organization.id).current_score == Decimal("55.00")

    def test_rejected(self, db, score_engine, organization) -> None:
        campaign = make_campaign(db, organization)
        evidence = make_evidence(db, campaign)

        change = score_engine.on_evidence_rejected(evidence.id)

        assert change.new_score == Decimal("45.00")
        record = load_score(db, organization.id)
        assert record.rejected_evidences == 1
        assert record.total_evidences == 1
        assert record.evidence_score == Decimal("-5.00")

    def test_deadline_missed(self, db, score_engine, organization) -> None:
        campaign = make_campaign(db, organization, status="COMPLETED", completed_days_ago=20)

        change = score_engine.on_evidence_deadline_missed(campaign.id)

        assert change.new_score == Decimal("40.00")
        assert change.related_entity_type == sc.ENTITY_CAMPAIGN
        record = load_score(db, organization.id)
        assert record.timeliness_score == Decimal("-10.00")
        assert record.total_evidences == 0

    def test_deadline_missed_applies_once_per_campaign(
        self, db, score_engine, organization
    ) -> None:
        campaign = make_campaign(db, organization, status="COMPLETED", completed_days_ago=20)
        score_engine.on_evidence_deadline_missed(campaign.id)

        assert score_engine.on_evidence_deadline_missed(campaign.id) is None
        record = load_score(db, organization.id)
        assert record.current_score == Decimal("40.00")
        assert record.timeliness_score == Decimal("-10.00")
        reasons = [h.change_reason for h in load_history(db, organization.id)]
        assert reasons == [sc.INITIALIZED, sc.EVIDENCE_DEADLINE_MISSED]

    def test_unknown_evidence_changes_nothing(self, db, score_engine, organization) -> None:
        with pytest.raises(ResourceNotFoundError) as exc_info:
            score_engine.on_evidence_approved(uuid.uuid4(), on_time=True)
        assert exc_info.value.resource == "Evidence"
        assert load_score(db, organization.id) is None
        assert load_history(db, organization.id) == []


# ── Campaign and report handlers ───────────────────────────────────────


class TestCampaignAndReportHandlers:
    def test_campaign_completed(self, db, score_engine, organization) -> None:
        campaign = make_campaign(db, organization)

        change = score_engine.on_campaign_completed(campaign.id)

        assert change.new_score == Decimal("53.00")
        record = load_score(db, organization.id)
        assert record.total_campaigns == 1
        assert record.completed_campaigns == 1

    def test_campaign_cancelled(self, db, score_engine, organization) -> None:
        campaign = make_campaign(db, organization)

        change = score_engine.on_campaign_cancelled(campaign.id)

        assert change.new_score == Decimal("48.00")
        record = load_score(db, organization.id)
        assert record.total_campaigns == 1
        assert record.completed_campaigns == 0

    def test_unknown_campaign(self, score_engine) -> None:
        with pytest.raises(ResourceNotFoundError):
            score_engine.on_campaign_completed(uuid.uuid4())

    def test_report_upheld(self, db, score_engine, organization) -> None:
        report = make_report(db, organization)

        change = score_engine.on_report_upheld_for_organization(organization.id, report.id)

        assert change.new_score == Decimal("35.00")
        assert change.related_entity_type == sc.ENTITY_REPORT
        assert change.related_entity_id == report.id
        assert load_score(db, organization.id).report_score == Decimal("-15.00")

    def test_report_upheld_unknown_organization(self, db, score_engine, organization) -> None:
        report = make_report(db, organization)
        with pytest.raises(ResourceNotFoundError) as exc_info:
            score_engine.on_report_upheld_for_organization(uuid.uuid4(), report.id)
        assert exc_info.value.resource == "Organization"

    def test_report_upheld_unknown_report(self, db, score_engine, organization) -> None:
        with pytest.raises(ResourceNotFoundError) as exc_info:
            score_engine.on_report_upheld_for_organization(organization.id, uuid.uuid4())
        assert exc_info.value.resource == "Report"
        assert load_score(db, organization.id) is None

    def test_crossing_threshold_logs_warning(
        self, db, score_engine, organization, caplog: pytest.LogCaptureFixture
    ) -> None:
        report = make_report(db, organization)
        caplog.set_level(logging.INFO, logger=ENGINE_LOGGER)

        change = score_engine.on_report_upheld_for_organization(organization.id, report.id)

        assert change.crossed_below_threshold
        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert any("campaign creation threshold" in r.getMessage() for r in warnings)


# ── Clamping ───────────────────────────────────────────────────────────


class TestClamping:
    def test_saturates_at_100(self, db, score_engine, organization) -> None:
        """Ledger keeps the applied delta (+2.00), not the nominal one (+5.00)."""
        campaign = make_campaign(db, organization)
        evidence = make_evidence(db, campaign)
        score_engine.initialize_score(organization.id)
        set_score(db, organization.id, "98.00")

        change = score_engine.on_evidence_approved(evidence.id, on_time=True)

        assert change.new_score == Decimal("100.00")
        assert change.change_amount == Decimal("2.00")
        last = load_history(db, organization.id)[-1]
        assert last.previous_score + last.change_amount == last.new_score

    def test_saturates_at_0(self, db, score_engine, organization) -> None:
        campaign = make_campaign(db, organization)
        evidence = make_evidence(db, campaign)
        score_engine.initialize_score(organization.id)
        set_score(db, organization.id, "3.00")

        change = score_engine.on_evidence_rejected(evidence.id)

        assert change.new_score == Decimal("0.00")
        assert change.change_amount == Decimal("-3.00")
        assert load_score(db, organization.id).current_score == Decimal("0.00")


# ── End-to-end scenario ────────────────────────────────────────────────


def test_score_trajectory(db, score_engine, organization) -> None:
    """init 50 -> approved on time 55 -> rejected 50 -> campaign completed 53."""
    campaign = make_campaign(db, organization)
    first = make_evidence(db, campaign)
    second = make_evidence(db, campaign)

    score_engine.initialize_score(organization.id)
    score_engine.on_evidence_approved(first.id, on_time=True)
    score_engine.on_evidence_rejected(second.id)
    score_engine.on_campaign_completed(campaign.id)

    record = load_score(db, organization.id)
    assert record.current_score == Decimal("53.00")
    assert record.approved_evidences == 1
    assert record.rejected_evidences == 1
    assert record.total_evidences == 2
    assert record.completed_campaigns == 1

    history = load_history(db, organization.id)
    assert [(h.previous_score, h.new_score) for h in history] == [
        (Decimal("50.00"), Decimal("50.00")),
        (Decimal("50.00"), Decimal("55.00")),
        (Decimal("55.00"), Decimal("50.00")),
        (Decimal("50.00"), Decimal("53.00")),
    ]


# ── Campaign creation gate ─────────────────────────────────────────────


class TestCanCreateCampaign:
    @pytest.mark.parametrize(
        ("score", "expected"),
        [
            ("50.00", True),
            ("40.00", True),
            ("39.99", False),
            ("30.00", False),
            ("0.00", False),
        ],
    )
    def test_threshold_is_inclusive(self, db, score_engine, organization, score, expected) -> None:
        score_engine.initialize_score(organization.id)
        set_score(db, organization.id, score)
        assert score_engine.can_create_campaign(organization.id) is expected

    def test_without_record_uses_baseline(self, score_engine, organization) -> None:
        assert score_engine.can_create_campaign(organization.id) is True

    def test_unknown_organization(self, score_engine) -> None:
        with pytest.raises(ResourceNotFoundError):
            score_engine.can_create_campaign(uuid.uuid4())

    def test_eligibility_response(self, db, score_engine, organization) -> None:
        score_engine.initialize_score(organization.id)
        set_score(db, organization.id, "39.99")
        eligibility = score_engine.get_campaign_eligibility(organization.id)
        assert eligibility.can_create_campaign is False
        assert eligibility.current_score == Decimal("39.99")
        assert eligibility.threshold == Decimal("40.00")


def test_organizations_are_scored_independently(db, score_engine) -> None:
    first = make_organization(db, "Birinci Vakıf")
    second = make_organization(db, "İkinci Dernek")
    report = make_report(db, first)

    score_engine.on_report_upheld_for_organization(first.id, report.id)
    score_engine.initialize_score(second.id)

    assert load_score(db, first.id).current_score == Decimal("35.00")
    assert load_score(db, second.id).current_score == Decimal("50.00")


def test_engine_uses_configured_retries(db) -> None:
    assert TransparencyScoreEngine(db).max_retries == 3
    assert TransparencyScoreEngine(db, max_retries=7).max_retries == 7


def test_engine_runs_at_least_one_attempt(db) -> None:
    assert TransparencyScoreEngine(db, max_retries=0).max_retries == 1
    assert TransparencyScoreEngine(db, max_retries=-2).max_retries == 1
