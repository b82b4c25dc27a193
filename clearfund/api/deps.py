"""Shared FastAPI dependencies for API routes."""

from __future__ import annotations

import logging
import secrets

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from clearfund.config import get_settings
from clearfund.db.session import get_db  # re-export
from clearfund.services.transparency import TransparencyScoreEngine

__all__ = [
    "get_db",
    "get_score_engine",
    "require_internal_token",
]

logger = logging.getLogger(__name__)


def get_score_engine(db: Session = Depends(get_db)) -> TransparencyScoreEngine:
    """Transparency score engine bound to the request's session."""
    return TransparencyScoreEngine(db)


def require_internal_token(x_internal_token: str = Header(...)) -> None:
    """Validate the internal job token from the request header.

    Uses constant-time comparison to prevent timing attacks.
    Raises 403 if the token is empty or does not match the configured value.
    """
    expected = get_settings().internal_job_token
    if not expected or not secrets.compare_digest(x_internal_token, expected):
        logger.warning("Internal endpoint auth failed: invalid or missing token")
        raise HTTPException(status_code=403, detail="Invalid internal token")
