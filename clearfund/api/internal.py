"""Internal job endpoints for cron/scripts.

These endpoints are secured with a static token (X-Internal-Token header),
NOT user auth.  They are meant for automated triggers only.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from clearfund.api.deps import require_internal_token
from clearfund.db.session import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/internal", include_in_schema=False)


@router.post("/run_deadline_check")
def run_deadline_check_endpoint(
    db: Session = Depends(get_db),
    _token: None = Depends(require_internal_token),
):
    """Penalize completed campaigns whose evidence deadline passed.

    Returns the job summary.
    """
    from clearfund.services.transparency.deadline_check import run_deadline_check

    try:
        return run_deadline_check(db)
    except Exception as exc:
        logger.exception("Internal deadline check failed")
        return {"status": "failed", "error": str(exc)}
