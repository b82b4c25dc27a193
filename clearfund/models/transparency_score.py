"""TransparencyScore model: one reputation record per organization."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from clearfund.db.session import Base


class TransparencyScore(Base):
    """Current transparency score, component trackers and lifetime counters.

    ``version_id`` is the optimistic-lock column: every UPDATE is issued with
    ``WHERE version_id = <loaded value>`` and raises StaleDataError when a
    concurrent writer got there first.
    """

    __tablename__ = "transparency_scores"

    __table_args__ = (
        CheckConstraint(
            "current_score >= 0 AND current_score <= 100",
            name="ck_transparency_scores_current_score_range",
        ),
        UniqueConstraint("organization_id", name="uq_transparency_scores_organization_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    organization_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
    )
    current_score: Mapped[Decimal] = mapped_column(
        Numeric(5, 2), default=Decimal("50.00"), nullable=False
    )
    # Diagnostic sub-totals; not required to sum to current_score
    evidence_score: Mapped[Decimal] = mapped_column(
        Numeric(7, 2), default=Decimal("0.00"), nullable=False
    )
    timeliness_score: Mapped[Decimal] = mapped_column(
        Numeric(7, 2), default=Decimal("0.00"), nullable=False
    )
    report_score: Mapped[Decimal] = mapped_column(
        Numeric(7, 2), default=Decimal("0.00"), nullable=False
    )
    total_campaigns: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    completed_campaigns: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_evidences: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    approved_evidences: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    rejected_evidences: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    on_time_reports: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    late_reports: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    last_calculated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    version_id: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    __mapper_args__ = {"version_id_col": version_id}

    organization: Mapped["Organization"] = relationship(
        "Organization", back_populates="transparency_score"
    )
