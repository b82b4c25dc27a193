"""Score history ledger: entry construction and trajectory replay.

The ledger is the audit trail of a ScoreRecord. Replaying it from the
initialization value must land exactly on the live current_score.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import Decimal

from clearfund.models import TransparencyScoreHistory
from clearfund.services.transparency.calculator import (
    calculate_change,
    calculate_new_score,
    quantize_score,
)
from clearfund.services.transparency.scoring_constants import INITIAL_SCORE, SCORE_CHANGES


def build_history_entry(
    organization_id: uuid.UUID,
    previous_score: Decimal,
    new_score: Decimal,
    change_reason: str,
    related_entity_type: str | None = None,
    related_entity_id: uuid.UUID | None = None,
    notes: str | None = None,
) -> TransparencyScoreHistory:
    """Build a ledger row. change_amount is the applied (post-clamp) delta."""
    previous_score = quantize_score(previous_score)
    new_score = quantize_score(new_score)
    return TransparencyScoreHistory(
        organization_id=organization_id,
        previous_score=previous_score,
        new_score=new_score,
        change_amount=new_score - previous_score,
        change_reason=change_reason,
        related_entity_type=related_entity_type,
        related_entity_id=related_entity_id,
        notes=notes,
    )


@dataclass
class LedgerReplay:
    """Outcome of replaying an organization's history chain."""

    entries: int
    replayed_score: Decimal
    violations: list[str] = field(default_factory=list)

    @property
    def consistent(self) -> bool:
        return not self.violations


def replay_history(entries: Iterable[TransparencyScoreHistory]) -> LedgerReplay:
    """Replay ledger rows (oldest first) and collect chain violations.

    Checks per row:
    - previous_score equals the prior row's new_score (or 50.00 for the first row)
    - previous_score + change_amount == new_score
    - for reasons in the delta table, new_score == clamp(previous_score + delta)
    """
    score = INITIAL_SCORE
    violations: list[str] = []
    count = 0
    for entry in entries:
        count += 1
        previous = quantize_score(entry.previous_score)
        new = quantize_score(entry.new_score)
        change = quantize_score(entry.change_amount)
        if previous != score:
            violations.append(
                f"entry {entry.id}: previous_score {previous} != expected {score}"
            )
        if previous + change != new:
            violations.append(
                f"entry {entry.id}: {previous} + {change} != new_score {new}"
            )
        if entry.change_reason in SCORE_CHANGES:
            expected = calculate_new_score(previous, calculate_change(entry.change_reason))
            if expected != new:
                violations.append(
                    f"entry {entry.id}: {entry.change_reason} should yield {expected}, got {new}"
                )
        score = new
    return LedgerReplay(entries=count, replayed_score=score, violations=violations)
