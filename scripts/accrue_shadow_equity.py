#!/usr/bin/env python3
"""
Apply elapsed monthly accrual to stored shadow-equity records.

Safe to run from cron: each loan is updated under its own lock and only for
whole months since its watermark, so re-running in the same month is a no-op.

Usage:
    python scripts/accrue_shadow_equity.py                 # every stored loan
    python scripts/accrue_shadow_equity.py LOAN-1 LOAN-2   # selected loans
    python scripts/accrue_shadow_equity.py --as-of 2026-06-01T00:00:00+00:00
"""
from pathlib import Path
import json
import os
import sys
import uuid

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
os.chdir(ROOT)

from estate_engine.accrual import run_accrual
from estate_engine.config import settings
from estate_engine.db import get_conn, migrate
from estate_engine.logging import setup_logging
from estate_engine.utils import now_utc, parse_datetime


def main():
    import argparse
    p = argparse.ArgumentParser(description="Accrue shadow equity for stored loans.")
    p.add_argument("loan_ids", nargs="*", help="Loan ids (default: all stored)")
    p.add_argument("--as-of", default=None, help="ISO timestamp to accrue up to (default now, UTC)")
    args = p.parse_args()

    setup_logging()
    conn = get_conn(settings.db_path)
    migrate(conn)
    as_of = parse_datetime(args.as_of) if args.as_of else now_utc()
    owner = f"accrual-{uuid.uuid4()}"
    loan_ids = args.loan_ids or [r[0] for r in conn.execute("SELECT loan_id FROM shadow_equity ORDER BY loan_id")]
    results = [
        run_accrual(conn, loan_id, as_of, owner, ttl_seconds=settings.accrual_lock_ttl_seconds)
        for loan_id in loan_ids
    ]
    print(json.dumps(results, indent=2, default=str))


if __name__ == "__main__":
    main()
