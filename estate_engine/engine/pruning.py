from __future__ import annotations

from datetime import date, datetime
from typing import Iterable

from ..models import Asset, PruningEntry
from ..utils import to_local_date
from .constants import PRUNING_CRITICAL_DAYS, PRUNING_HIGH_DAYS, URGENCY_RANK

DEFAULT_REASON = "Strategic sale"


def days_remaining(deadline: date | datetime, now: date | datetime, local_tz: str = "UTC") -> int:
    """Calendar days from ``now`` to ``deadline``; overdue deadlines read as 0."""
    diff = (to_local_date(deadline, local_tz) - to_local_date(now, local_tz)).days
    return max(0, diff)


def urgency(days: int) -> str:
    if days < PRUNING_CRITICAL_DAYS:
        return "CRITICAL"
    if days < PRUNING_HIGH_DAYS:
        return "HIGH"
    return "MEDIUM"


def build_list(assets: Iterable[Asset], now: date | datetime, local_tz: str = "UTC") -> list[PruningEntry]:
    entries = []
    for asset in assets:
        if asset.status != "For-Sale":
            continue
        plan = asset.disposal
        if plan is None or plan.deadline is None:
            continue
        days = days_remaining(plan.deadline, now, local_tz)
        entries.append(
            PruningEntry(
                asset_id=asset.id,
                asset_name=asset.name,
                current_value=asset.valuation,
                currency=asset.currency,
                deadline=plan.deadline,
                days_remaining=days,
                urgency=urgency(days),
                reason=plan.notes or DEFAULT_REASON,
            )
        )
    # sorted() is stable: ties keep input order
    return sorted(entries, key=lambda e: (URGENCY_RANK[e.urgency], e.days_remaining))
