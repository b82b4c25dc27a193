#!/usr/bin/env python3
"""Recalculate or verify transparency scores (admin maintenance).

Usage:
    python scripts/recalculate_scores.py --organization-id <uuid>
    python scripts/recalculate_scores.py --all
    python scripts/recalculate_scores.py --all --verify-only

--verify-only replays each organization's score history and reports drift
without writing anything.
"""

from __future__ import annotations

import argparse
import sys
import uuid
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from clearfund.db.session import SessionLocal
from clearfund.models import Organization
from clearfund.services.transparency import (
    RecalculationError,
    ScoreUpdateConflictError,
    TransparencyScoreEngine,
)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument("--organization-id", type=uuid.UUID)
    target.add_argument("--all", action="store_true")
    parser.add_argument("--verify-only", action="store_true")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    db = SessionLocal()
    failures = 0
    try:
        if args.all:
            org_ids = [row.id for row in db.query(Organization.id).all()]
        else:
            org_ids = [args.organization_id]

        engine = TransparencyScoreEngine(db)
        for org_id in org_ids:
            if args.verify_only:
                result = engine.verify_ledger(org_id)
                print(
                    f"organization={org_id} consistent={result.consistent} "
                    f"entries={result.entries} replayed={result.replayed_score} "
                    f"current={result.current_score}"
                )
                for violation in result.violations:
                    print(f"  {violation}", file=sys.stderr)
                failures += 0 if result.consistent else 1
                continue
            try:
                change = engine.recalculate_score(org_id)
            except (RecalculationError, ScoreUpdateConflictError) as e:
                failures += 1
                print(f"organization={org_id} ERROR: {e}", file=sys.stderr)
                continue
            print(
                f"organization={org_id} previous={change.previous_score} "
                f"new={change.new_score} change={change.change_amount}"
            )
        return 0 if failures == 0 else 1
    except Exception as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
