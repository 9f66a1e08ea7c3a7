import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone, timedelta

def acquire_lock(conn: sqlite3.Connection, name: str, owner: str, ttl_seconds: int = 600) -> bool:
    now = datetime.now(timezone.utc)
    exp = now + timedelta(seconds=ttl_seconds)
    conn.execute("BEGIN IMMEDIATE")
    try:
        row = conn.execute("SELECT owner, expires_at_utc FROM locks WHERE name=?", (name,)).fetchone()
        if row and row[0] != owner and datetime.fromisoformat(row[1]) >= now:
            conn.execute("ROLLBACK")
            return False
        conn.execute(
            """
            INSERT INTO locks(name, owner, acquired_at_utc, expires_at_utc) VALUES(?,?,?,?)
            ON CONFLICT(name) DO UPDATE SET owner=excluded.owner,
              acquired_at_utc=excluded.acquired_at_utc, expires_at_utc=excluded.expires_at_utc
            """,
            (name, owner, now.isoformat(), exp.isoformat()),
        )
        conn.execute("COMMIT")
        return True
    except Exception:
        conn.execute("ROLLBACK")
        raise

def release_lock(conn: sqlite3.Connection, name: str, owner: str):
    conn.execute("DELETE FROM locks WHERE name=? AND owner=?", (name, owner))

@contextmanager
def record_lock(conn: sqlite3.Connection, name: str, owner: str, ttl_seconds: int = 600):
    """Yield True while ``owner`` holds ``name``; yield False without blocking when someone else does."""
    acquired = acquire_lock(conn, name, owner, ttl_seconds)
    try:
        yield acquired
    finally:
        if acquired:
            release_lock(conn, name, owner)
