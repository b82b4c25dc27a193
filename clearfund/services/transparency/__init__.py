"""Transparency Score Engine: organization reputation scoring and change ledger."""

from clearfund.services.transparency.engine import ScoreChange, TransparencyScoreEngine
from clearfund.services.transparency.exceptions import (
    RecalculationError,
    ResourceNotFoundError,
    ScoreUpdateConflictError,
)

__all__ = [
    "RecalculationError",
    "ResourceNotFoundError",
    "ScoreChange",
    "ScoreUpdateConflictError",
    "TransparencyScoreEngine",
]
