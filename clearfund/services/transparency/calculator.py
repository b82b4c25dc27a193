"""Transparency score calculator: pure functions, no state, no I/O."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from clearfund.services.transparency.scoring_constants import (
    LEVEL_VERY_LOW,
    MAX_SCORE,
    MIN_SCORE,
    SCORE_CHANGES,
    SCORE_LEVEL_LABELS_TR,
    SCORE_LEVELS,
    SCORE_QUANTUM,
)


def quantize_score(value: Decimal | int | float | str) -> Decimal:
    """Return value as a two-decimal Decimal (half-up)."""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(SCORE_QUANTUM, rounding=ROUND_HALF_UP)


def calculate_change(reason: str | None) -> Decimal:
    """Return the signed point delta for a change reason.

    Unrecognized reasons (including None) yield 0.00 instead of raising,
    so new trigger types can be logged before they carry points.
    """
    if reason is None:
        return Decimal("0.00")
    return SCORE_CHANGES.get(reason, Decimal("0.00"))


def calculate_new_score(current: Decimal, change: Decimal) -> Decimal:
    """Apply change to current and clamp the result into [0.00, 100.00].

    Saturating: exceeding either bound pins to that bound.
    """
    new_score = quantize_score(current) + quantize_score(change)
    if new_score < MIN_SCORE:
        return MIN_SCORE
    if new_score > MAX_SCORE:
        return MAX_SCORE
    return new_score


def get_score_level(score: Decimal) -> str:
    """Bucket a score: >=80 Very High, >=60 High, >=40 Medium, >=20 Low, else Very Low."""
    score = quantize_score(score)
    for threshold, label in SCORE_LEVELS:
        if score >= threshold:
            return label
    return LEVEL_VERY_LOW


def get_score_level_tr(score: Decimal) -> str:
    """Turkish display label for the score's level."""
    return SCORE_LEVEL_LABELS_TR[get_score_level(score)]
