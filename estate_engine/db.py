import json
import sqlite3
from pathlib import Path

from .models import PortfolioSnapshot, ShadowEquity, load_shadow_equity, load_snapshot
from .utils import now_utc_iso, sha256_json

def get_conn(db_path: str) -> sqlite3.Connection:
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(db_path, isolation_level=None)  # autocommit
    conn.execute("PRAGMA journal_mode=WAL;")
    conn.execute("PRAGMA foreign_keys=ON;")
    return conn

DDL = [
    # Latest snapshot of entities/assets/debts per portfolio
    """
CREATE TABLE IF NOT EXISTS portfolio_snapshots (
  portfolio_id TEXT PRIMARY KEY,
  payload_json TEXT NOT NULL,
  payload_sha256 TEXT NOT NULL,
  updated_at_utc TEXT NOT NULL
);
""",

    # Shadow equity records; last_accrual_utc is the accrual watermark
    """
CREATE TABLE IF NOT EXISTS shadow_equity (
  loan_id TEXT PRIMARY KEY,
  entity_id TEXT,
  record_json TEXT NOT NULL,
  months_accrued INTEGER NOT NULL DEFAULT 0,
  last_accrual_utc TEXT,
  updated_at_utc TEXT NOT NULL
);
""",
    "CREATE INDEX IF NOT EXISTS ix_shadow_equity_entity ON shadow_equity(entity_id);",

    """
CREATE TABLE IF NOT EXISTS locks(
  name TEXT PRIMARY KEY,
  owner TEXT NOT NULL,
  acquired_at_utc TEXT NOT NULL,
  expires_at_utc TEXT NOT NULL
);
""",
]

def migrate(conn: sqlite3.Connection):
    cur = conn.cursor()
    for stmt in DDL:
        cur.execute(stmt)

def save_snapshot_record(conn: sqlite3.Connection, snap: PortfolioSnapshot):
    payload = snap.model_dump(mode="json")
    conn.execute(
        """
        INSERT INTO portfolio_snapshots(portfolio_id, payload_json, payload_sha256, updated_at_utc)
        VALUES(?,?,?,?)
        ON CONFLICT(portfolio_id) DO UPDATE SET
          payload_json=excluded.payload_json,
          payload_sha256=excluded.payload_sha256,
          updated_at_utc=excluded.updated_at_utc
        """,
        (snap.portfolio_id, json.dumps(payload, sort_keys=True), sha256_json(payload), now_utc_iso()),
    )

def load_snapshot_record(conn: sqlite3.Connection, portfolio_id: str) -> PortfolioSnapshot | None:
    row = conn.execute(
        "SELECT payload_json FROM portfolio_snapshots WHERE portfolio_id=?", (portfolio_id,)
    ).fetchone()
    if not row:
        return None
    return load_snapshot(json.loads(row[0]))

def save_shadow_equity(conn: sqlite3.Connection, record: ShadowEquity):
    payload = record.model_dump(mode="json")
    conn.execute(
        """
        INSERT INTO shadow_equity(loan_id, entity_id, record_json, months_accrued, last_accrual_utc, updated_at_utc)
        VALUES(?,?,?,?,?,?)
        ON CONFLICT(loan_id) DO UPDATE SET
          entity_id=excluded.entity_id,
          record_json=excluded.record_json,
          months_accrued=excluded.months_accrued,
          last_accrual_utc=excluded.last_accrual_utc,
          updated_at_utc=excluded.updated_at_utc
        """,
        (
            record.loan_id,
            record.entity_id,
            json.dumps(payload, sort_keys=True),
            record.months_accrued,
            payload.get("last_accrual_at"),
            now_utc_iso(),
        ),
    )

def load_shadow_equity_record(conn: sqlite3.Connection, loan_id: str) -> ShadowEquity | None:
    row = conn.execute("SELECT record_json FROM shadow_equity WHERE loan_id=?", (loan_id,)).fetchone()
    if not row:
        return None
    return load_shadow_equity(json.loads(row[0]))
