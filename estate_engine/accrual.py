"""Monthly shadow-equity accrual against the persisted watermark.

This is the single writer for a loan's record: it takes the per-loan lock,
works out how many whole months have passed since ``last_accrual_at`` and
applies them in one ``accrue`` call. The watermark moves forward by exactly
the months applied, so a partial month carries into the next run.
"""
import sqlite3
from datetime import datetime, timezone

import structlog
from dateutil.relativedelta import relativedelta

from .db import load_shadow_equity_record, save_shadow_equity
from .engine.shadow_equity import accrue
from .errors import InvalidInputError
from .locking import record_lock
from .utils import ensure_aware

log = structlog.get_logger()

def months_elapsed(last: datetime, as_of: datetime) -> int:
    last = ensure_aware(last).astimezone(timezone.utc)
    as_of = ensure_aware(as_of).astimezone(timezone.utc)
    if as_of <= last:
        return 0
    delta = relativedelta(as_of, last)
    return delta.years * 12 + delta.months

def run_accrual(conn: sqlite3.Connection, loan_id: str, as_of: datetime, owner: str, ttl_seconds: int = 600) -> dict:
    as_of = ensure_aware(as_of).astimezone(timezone.utc)
    with record_lock(conn, f"shadow_equity:{loan_id}", owner, ttl_seconds) as held:
        if not held:
            log.warning("shadow_equity_accrual_skipped", loan_id=loan_id, reason="lock_held")
            return {"loan_id": loan_id, "accrued": False, "months": 0, "skipped": "lock_held"}

        record = load_shadow_equity_record(conn, loan_id)
        if record is None:
            raise InvalidInputError(f"no shadow equity record for loan {loan_id!r}")

        if record.last_accrual_at is None:
            save_shadow_equity(conn, record.model_copy(update={"last_accrual_at": as_of}))
            log.info("shadow_equity_watermark_initialized", loan_id=loan_id, as_of=as_of.isoformat())
            return {"loan_id": loan_id, "accrued": False, "months": 0, "skipped": "initialized"}

        months = months_elapsed(record.last_accrual_at, as_of)
        if months == 0:
            return {"loan_id": loan_id, "accrued": False, "months": 0, "skipped": "up_to_date"}

        watermark = ensure_aware(record.last_accrual_at) + relativedelta(months=months)
        updated = accrue(record, months, as_of=watermark)
        save_shadow_equity(conn, updated)
        log.info(
            "shadow_equity_accrued",
            loan_id=loan_id,
            months=months,
            shadow_equity=round(updated.current_shadow_equity, 2),
            watermark=watermark.isoformat(),
        )
        return {
            "loan_id": loan_id,
            "accrued": True,
            "months": months,
            "skipped": None,
            "current_shadow_equity": updated.current_shadow_equity,
            "last_accrual_at": watermark.isoformat(),
        }
