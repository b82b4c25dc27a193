"""Organization model: the fundraising entity whose transparency is scored."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from sqlalchemy import DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from clearfund.db.session import Base


class Organization(Base):
    """Organization (foundation/association) collecting donations."""

    __tablename__ = "organizations"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    legal_name: Mapped[str] = mapped_column(String(255), nullable=False)
    logo_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    campaigns: Mapped[list["Campaign"]] = relationship(
        "Campaign", back_populates="organization", passive_deletes=True
    )
    transparency_score: Mapped["TransparencyScore | None"] = relationship(
        "TransparencyScore", back_populates="organization", uselist=False
    )
