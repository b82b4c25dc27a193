"""TransparencyScoreHistory model: append-only score change ledger."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Index, Integer, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from clearfund.db.session import Base


class TransparencyScoreHistory(Base):
    """One row per score mutation. Never updated or deleted.

    change_amount is the applied (post-clamp) delta, so
    previous_score + change_amount == new_score holds for every row.
    """

    __tablename__ = "transparency_score_history"

    __table_args__ = (
        Index(
            "ix_transparency_score_history_org_created",
            "organization_id",
            "created_at",
        ),
        Index(
            "ix_transparency_score_history_related",
            "related_entity_type",
            "related_entity_id",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    organization_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    previous_score: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
    new_score: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
    change_amount: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
    change_reason: Mapped[str] = mapped_column(String(64), nullable=False)
    related_entity_type: Mapped[str | None] = mapped_column(String(32), nullable=True)
    related_entity_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )
