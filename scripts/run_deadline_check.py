#!/usr/bin/env python3
"""Run the evidence deadline check job locally.

Usage:
    python scripts/run_deadline_check.py

Penalizes completed campaigns whose evidence deadline passed without
enough approved spending evidence. Each campaign is penalized at most once.
Exits 0 on success, 1 on failure.
"""

from __future__ import annotations

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from clearfund.db.session import SessionLocal
from clearfund.services.transparency.deadline_check import run_deadline_check


def main() -> int:
    db = SessionLocal()
    try:
        result = run_deadline_check(db)
        print(
            f"status={result['status']} "
            f"campaigns_checked={result['campaigns_checked']} "
            f"campaigns_penalized={result['campaigns_penalized']} "
            f"errors={result['errors']}"
        )
        return 0 if result["errors"] == 0 else 1
    except Exception as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
