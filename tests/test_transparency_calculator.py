"""Tests for the transparency score calculator and its constants."""

from __future__ import annotations

from decimal import Decimal

import pytest

from clearfund.services.transparency import scoring_constants as sc
from clearfund.services.transparency.calculator import (
    calculate_change,
    calculate_new_score,
    get_score_level,
    get_score_level_tr,
    quantize_score,
)

# ── calculate_change ───────────────────────────────────────────────────


class TestCalculateChange:
    """Closed delta table; anything else scores zero."""

    @pytest.mark.parametrize(
        ("reason", "expected"),
        [
            (sc.EVIDENCE_APPROVED_ON_TIME, Decimal("5.00")),
            (sc.EVIDENCE_APPROVED_LATE, Decimal("3.00")),
            (sc.EVIDENCE_REJECTED, Decimal("-5.00")),
            (sc.EVIDENCE_DEADLINE_MISSED, Decimal("-10.00")),
            (sc.CAMPAIGN_COMPLETED, Decimal("3.00")),
            (sc.CAMPAIGN_CANCELLED, Decimal("-2.00")),
            (sc.REPORT_UPHELD, Decimal("-15.00")),
        ],
    )
    def test_known_reasons(self, reason: str, expected: Decimal) -> None:
        assert calculate_change(reason) == expected

    @pytest.mark.parametrize("reason", ["SOMETHING_NEW", "", None, sc.INITIALIZED, sc.RECALCULATED])
    def test_unknown_reason_is_zero(self, reason) -> None:
        """Unrecognized reasons yield 0.00 rather than raising."""
        assert calculate_change(reason) == Decimal("0.00")

    def test_table_covers_every_reason(self) -> None:
        assert len(sc.SCORE_CHANGES) == 7


# ── calculate_new_score ────────────────────────────────────────────────


class TestCalculateNewScore:
    def test_adds_delta(self) -> None:
        assert calculate_new_score(Decimal("50.00"), Decimal("5.00")) == Decimal("55.00")

    def test_saturates_at_maximum(self) -> None:
        assert calculate_new_score(Decimal("98.00"), Decimal("5.00")) == Decimal("100.00")

    def test_saturates_at_minimum(self) -> None:
        assert calculate_new_score(Decimal("3.00"), Decimal("-5.00")) == Decimal("0.00")

    def test_exact_bounds_are_kept(self) -> None:
        assert calculate_new_score(Decimal("95.00"), Decimal("5.00")) == Decimal("100.00")
        assert calculate_new_score(Decimal("5.00"), Decimal("-5.00")) == Decimal("0.00")

    def test_result_has_two_decimals(self) -> None:
        result = calculate_new_score(Decimal("50"), Decimal("3"))
        assert result == Decimal("53.00")
        assert result.as_tuple().exponent == -2

    @pytest.mark.parametrize("reason", [*sc.SCORE_CHANGES, "SOMETHING_NEW"])
    @pytest.mark.parametrize("score", ["0.00", "0.01", "3.00", "50.00", "97.50", "99.99", "100.00"])
    def test_every_reason_stays_in_bounds(self, score: str, reason: str) -> None:
        new = calculate_new_score(Decimal(score), calculate_change(reason))
        assert sc.MIN_SCORE <= new <= sc.MAX_SCORE


def test_quantize_score_rounds_half_up() -> None:
    assert quantize_score("39.995") == Decimal("40.00")
    assert quantize_score(12) == Decimal("12.00")


# ── Levels ─────────────────────────────────────────────────────────────


class TestScoreLevel:
    """Level thresholds are inclusive lower bounds."""

    @pytest.mark.parametrize(
        ("score", "expected"),
        [
            ("100.00", sc.LEVEL_VERY_HIGH),
            ("85.00", sc.LEVEL_VERY_HIGH),
            ("80.01", sc.LEVEL_VERY_HIGH),
            ("80.00", sc.LEVEL_VERY_HIGH),
            ("79.99", sc.LEVEL_HIGH),
            ("70.00", sc.LEVEL_HIGH),
            ("60.01", sc.LEVEL_HIGH),
            ("60.00", sc.LEVEL_HIGH),
            ("59.99", sc.LEVEL_MEDIUM),
            ("50.00", sc.LEVEL_MEDIUM),
            ("40.01", sc.LEVEL_MEDIUM),
            ("40.00", sc.LEVEL_MEDIUM),
            ("39.99", sc.LEVEL_LOW),
            ("35.00", sc.LEVEL_LOW),
            ("20.01", sc.LEVEL_LOW),
            ("20.00", sc.LEVEL_LOW),
            ("19.99", sc.LEVEL_VERY_LOW),
            ("10.00", sc.LEVEL_VERY_LOW),
            ("0.00", sc.LEVEL_VERY_LOW),
        ],
    )
    def test_boundaries(self, score: str, expected: str) -> None:
        assert get_score_level(Decimal(score)) == expected

    def test_turkish_labels(self) -> None:
        assert get_score_level_tr(Decimal("85.00")) == "Çok Yüksek"
        assert get_score_level_tr(Decimal("50.00")) == "Orta"
        assert get_score_level_tr(Decimal("5.00")) == "Çok Düşük"


def test_campaign_threshold_matches_medium_level() -> None:
    """The creation gate opens exactly where the Medium level starts."""
    assert sc.CAMPAIGN_CREATION_THRESHOLD == sc.THRESHOLD_MEDIUM == Decimal("40.00")
    assert get_score_level(sc.CAMPAIGN_CREATION_THRESHOLD) == sc.LEVEL_MEDIUM


def test_initial_score_within_bounds() -> None:
    assert sc.MIN_SCORE <= sc.INITIAL_SCORE <= sc.MAX_SCORE
    assert sc.INITIAL_SCORE == Decimal("50.00")
