#!/usr/bin/env python3
"""
Print the consolidated position and open risk signals for one portfolio as JSON.

The snapshot comes from a JSON file or from the local DB (by portfolio id).

Usage:
    python scripts/portfolio_report.py --file snapshot.json
    python scripts/portfolio_report.py --portfolio family-1
    python scripts/portfolio_report.py --file snapshot.json --base EUR --as-of 2026-03-01
    python scripts/portfolio_report.py --file snapshot.json --store   # also save the snapshot to the DB
"""
from pathlib import Path
import json
import os
import sys
from datetime import date

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
os.chdir(ROOT)

from estate_engine.config import settings
from estate_engine.db import get_conn, load_snapshot_record, migrate, save_snapshot_record
from estate_engine.errors import EngineError
from estate_engine.logging import bind_portfolio, setup_logging
from estate_engine.models import load_snapshot
from estate_engine import service


def main():
    import argparse
    p = argparse.ArgumentParser(description="Consolidated portfolio report.")
    src = p.add_mutually_exclusive_group(required=True)
    src.add_argument("--file", help="Snapshot JSON file")
    src.add_argument("--portfolio", help="Portfolio id stored in the local DB")
    p.add_argument("--base", default=None, help="Reporting currency (default BASE_CURRENCY)")
    p.add_argument("--as-of", default=None, help="Date for deadline maths (YYYY-MM-DD, default today)")
    p.add_argument("--store", action="store_true", help="Save a --file snapshot to the DB")
    args = p.parse_args()

    setup_logging()
    conn = get_conn(settings.db_path)
    migrate(conn)

    try:
        if args.file:
            with open(args.file) as fh:
                snap = load_snapshot(json.load(fh))
            if args.store:
                save_snapshot_record(conn, snap)
        else:
            snap = load_snapshot_record(conn, args.portfolio)
            if snap is None:
                print(f"No snapshot stored for {args.portfolio}", file=sys.stderr)
                return 1
        bind_portfolio(snap.portfolio_id)
        as_of = date.fromisoformat(args.as_of) if args.as_of else date.today()
        summary = service.compute_portfolio_summary(snap, args.base)
        report = {
            "portfolio_id": snap.portfolio_id,
            "as_of": as_of.isoformat(),
            "summary": summary.model_dump(mode="json"),
            "iht": service.compute_iht_exposure(snap.assets, snap.entities, args.base).model_dump(mode="json"),
            "consolidation_cost": service.compute_consolidation_cost(snap, args.base),
            "pruning": [e.model_dump(mode="json") for e in service.build_pruning_list(snap.assets, as_of)],
            "signals": service.evaluate_signals(snap, as_of, args.base),
        }
    except EngineError as exc:
        print(f"Invalid input: {exc}", file=sys.stderr)
        return 2
    print(json.dumps(report, indent=2, sort_keys=True))
    return 0


if __name__ == "__main__":
    sys.exit(main())
