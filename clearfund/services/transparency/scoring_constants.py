"""Transparency score constants.

Centralized configuration for the Transparency Score Engine. No magic numbers
inside the calculator or engine: all values defined here.
"""

from __future__ import annotations

from decimal import Decimal

# ── Change reasons ──────────────────────────────────────────────────────

EVIDENCE_APPROVED_ON_TIME = "EVIDENCE_APPROVED_ON_TIME"
EVIDENCE_APPROVED_LATE = "EVIDENCE_APPROVED_LATE"
EVIDENCE_REJECTED = "EVIDENCE_REJECTED"
EVIDENCE_DEADLINE_MISSED = "EVIDENCE_DEADLINE_MISSED"
CAMPAIGN_COMPLETED = "CAMPAIGN_COMPLETED"
CAMPAIGN_CANCELLED = "CAMPAIGN_CANCELLED"
REPORT_UPHELD = "REPORT_UPHELD"

# Ledger-only reasons; not in the delta table, so they score 0.00
INITIALIZED = "INITIALIZED"
RECALCULATED = "RECALCULATED"

# ── Point deltas (closed table) ─────────────────────────────────────────

SCORE_CHANGES: dict[str, Decimal] = {
    EVIDENCE_APPROVED_ON_TIME: Decimal("5.00"),
    EVIDENCE_APPROVED_LATE: Decimal("3.00"),
    EVIDENCE_REJECTED: Decimal("-5.00"),
    EVIDENCE_DEADLINE_MISSED: Decimal("-10.00"),
    CAMPAIGN_COMPLETED: Decimal("3.00"),
    CAMPAIGN_CANCELLED: Decimal("-2.00"),
    REPORT_UPHELD: Decimal("-15.00"),
}

# ── Bounds ──────────────────────────────────────────────────────────────

MIN_SCORE = Decimal("0.00")
MAX_SCORE = Decimal("100.00")
INITIAL_SCORE = Decimal("50.00")
SCORE_QUANTUM = Decimal("0.01")

# ── Level thresholds (inclusive lower bounds, highest first) ───────────

LEVEL_VERY_HIGH = "Very High"
LEVEL_HIGH = "High"
LEVEL_MEDIUM = "Medium"
LEVEL_LOW = "Low"
LEVEL_VERY_LOW = "Very Low"

THRESHOLD_VERY_HIGH = Decimal("80.00")
THRESHOLD_HIGH = Decimal("60.00")
THRESHOLD_MEDIUM = Decimal("40.00")
THRESHOLD_LOW = Decimal("20.00")

SCORE_LEVELS: tuple[tuple[Decimal, str], ...] = (
    (THRESHOLD_VERY_HIGH, LEVEL_VERY_HIGH),
    (THRESHOLD_HIGH, LEVEL_HIGH),
    (THRESHOLD_MEDIUM, LEVEL_MEDIUM),
    (THRESHOLD_LOW, LEVEL_LOW),
)

# Turkish display labels used by the public transparency page
SCORE_LEVEL_LABELS_TR: dict[str, str] = {
    LEVEL_VERY_HIGH: "Çok Yüksek",
    LEVEL_HIGH: "Yüksek",
    LEVEL_MEDIUM: "Orta",
    LEVEL_LOW: "Düşük",
    LEVEL_VERY_LOW: "Çok Düşük",
}

# ── Campaign creation gate ──────────────────────────────────────────────

# Must stay equal to the "Medium" threshold; the comparison is inclusive.
CAMPAIGN_CREATION_THRESHOLD = THRESHOLD_MEDIUM

# ── Ledger related-entity types ─────────────────────────────────────────

ENTITY_EVIDENCE = "EVIDENCE"
ENTITY_CAMPAIGN = "CAMPAIGN"
ENTITY_REPORT = "REPORT"
