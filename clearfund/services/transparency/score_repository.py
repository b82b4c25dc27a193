"""Score store and ledger persistence for the Transparency Score Engine.

Thin query layer over TransparencyScore / TransparencyScoreHistory. Writes
flush but never commit; the engine owns the transaction boundary.
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from clearfund.models import Organization, TransparencyScore, TransparencyScoreHistory

# PostgreSQL reports the constraint name, SQLite the failing column
_DUPLICATE_RECORD_MARKERS = (
    "uq_transparency_scores_organization_id",
    "UNIQUE constraint failed: transparency_scores.organization_id",
)


def is_duplicate_score_record(exc: IntegrityError) -> bool:
    """True when exc is the unique violation on a second record for the same organization."""
    message = str(exc.orig)
    return any(marker in message for marker in _DUPLICATE_RECORD_MARKERS)


class ScoreRepository:
    """Repository for ScoreRecord rows and their append-only history."""

    def __init__(self, db: Session) -> None:
        self._db = db

    def find_by_organization_id(
        self, organization_id: uuid.UUID, for_update: bool = False
    ) -> TransparencyScore | None:
        """Load the score record for an organization, always fresh from the database.

        for_update adds SELECT ... FOR UPDATE (a no-op on SQLite, where
        writers are already serialized by the database lock).
        """
        query = (
            self._db.query(TransparencyScore)
            .filter(TransparencyScore.organization_id == organization_id)
            .populate_existing()
        )
        if for_update:
            query = query.with_for_update()
        return query.first()

    def save(self, record: TransparencyScore) -> TransparencyScore:
        """Persist a new or modified record. Version-checked on UPDATE."""
        self._db.add(record)
        self._db.flush()
        return record

    def insert_history(self, entry: TransparencyScoreHistory) -> TransparencyScoreHistory:
        """Append a ledger row."""
        self._db.add(entry)
        self._db.flush()
        return entry

    # ── Ledger reads ────────────────────────────────────────────────────

    def history_page(
        self, organization_id: uuid.UUID, page: int, page_size: int
    ) -> tuple[list[TransparencyScoreHistory], int]:
        """Return (entries newest first, total count) for one page."""
        base = self._db.query(TransparencyScoreHistory).filter(
            TransparencyScoreHistory.organization_id == organization_id
        )
        total = base.count()
        entries = (
            base.order_by(
                TransparencyScoreHistory.created_at.desc(),
                TransparencyScoreHistory.id.desc(),
            )
            .offset((page - 1) * page_size)
            .limit(page_size)
            .all()
        )
        return entries, total

    def history_chain(self, organization_id: uuid.UUID) -> list[TransparencyScoreHistory]:
        """All ledger rows for an organization in creation order."""
        return (
            self._db.query(TransparencyScoreHistory)
            .filter(TransparencyScoreHistory.organization_id == organization_id)
            .order_by(
                TransparencyScoreHistory.created_at.asc(),
                TransparencyScoreHistory.id.asc(),
            )
            .all()
        )

    def has_history_for(
        self, reason: str, related_entity_type: str, related_entity_id: uuid.UUID
    ) -> bool:
        """True if a ledger row with this reason already references the entity."""
        row = (
            self._db.query(TransparencyScoreHistory.id)
            .filter(
                TransparencyScoreHistory.change_reason == reason,
                TransparencyScoreHistory.related_entity_type == related_entity_type,
                TransparencyScoreHistory.related_entity_id == related_entity_id,
            )
            .first()
        )
        return row is not None

    # ── Rankings ────────────────────────────────────────────────────────

    def leaderboard(
        self, page: int, page_size: int
    ) -> list[tuple[TransparencyScore, Organization]]:
        """Records ranked by score desc, then completed campaigns desc."""
        return (
            self._db.query(TransparencyScore, Organization)
            .join(Organization, TransparencyScore.organization_id == Organization.id)
            .order_by(
                TransparencyScore.current_score.desc(),
                TransparencyScore.completed_campaigns.desc(),
                Organization.legal_name.asc(),
            )
            .offset((page - 1) * page_size)
            .limit(page_size)
            .all()
        )

    def below_threshold(
        self, threshold: Decimal, page: int, page_size: int
    ) -> tuple[list[tuple[TransparencyScore, Organization]], int]:
        """Records with current_score < threshold, lowest first, plus total count."""
        base = (
            self._db.query(TransparencyScore, Organization)
            .join(Organization, TransparencyScore.organization_id == Organization.id)
            .filter(TransparencyScore.current_score < threshold)
        )
        total = (
            self._db.query(func.count(TransparencyScore.id))
            .filter(TransparencyScore.current_score < threshold)
            .scalar()
        ) or 0
        rows = (
            base.order_by(
                TransparencyScore.current_score.asc(),
                Organization.legal_name.asc(),
            )
            .offset((page - 1) * page_size)
            .limit(page_size)
            .all()
        )
        return rows, total
