from __future__ import annotations

import hashlib
from datetime import date, datetime
from typing import List

from ..models import PortfolioSnapshot
from ..utils import to_local_date
from .constants import SEVERITY_CRITICAL, SEVERITY_HIGH, SEVERITY_WARNING
from .currency import CurrencyNormalizer
from .decay import compute_decay
from .iht import iht_exposure
from .portfolio import aggregate
from .pruning import build_list

def _fp(category: str, title: str) -> str:
    h = hashlib.sha256()
    h.update(f"{category}:{title}".encode())
    return h.hexdigest()[:16]

def _mk(category: str, as_of_date_local: str, severity: int, title: str, details: dict | None = None):
    fingerprint = _fp(category, title)
    return {
        "id": f"{category}_{fingerprint}_{as_of_date_local}",
        "fingerprint": fingerprint,
        "as_of_date_local": as_of_date_local,
        "category": category,
        "severity": int(severity),
        "title": title,
        "details": details,
    }

def _fmt_money(x, currency: str):
    return f"{currency} {float(x):,.0f}"

def evaluate_signals(
    snap: PortfolioSnapshot,
    now: date | datetime,
    normalizer: CurrencyNormalizer,
    base_currency: str,
    local_tz: str = "UTC",
    iht_threshold: float = 2_000_000.0,
    iht_rate: float = 0.20,
    ltv_warning_pct: float = 60.0,
    ltv_critical_pct: float = 75.0,
) -> List[dict]:
    as_of = to_local_date(now, local_tz).isoformat()
    alerts: List[dict] = []
    assets = {a.id: a for a in snap.assets}

    # 1) Equity decay on rolled-up debt
    for debt in snap.debts:
        asset = assets.get(debt.asset_id) if debt.asset_id else None
        if asset is None or not debt.is_compounding:
            continue
        decay = compute_decay(asset, debt, normalizer)
        if decay.alert_level == "SAFE":
            continue
        severity = SEVERITY_CRITICAL if decay.alert_level == "CRITICAL" else SEVERITY_WARNING
        title = f"{asset.name} equity decay {decay.alert_level.lower()}"
        alerts.append(_mk("decay", as_of, severity, title, decay.model_dump(mode="json")))

    # 2) Disposal deadlines
    for entry in build_list(snap.assets, now, local_tz):
        if entry.urgency == "MEDIUM":
            continue
        severity = SEVERITY_CRITICAL if entry.urgency == "CRITICAL" else SEVERITY_HIGH
        title = f"{entry.asset_name} sale due in {entry.days_remaining} days"
        alerts.append(_mk("pruning", as_of, severity, title, entry.model_dump(mode="json")))

    # 3) Inheritance tax
    iht = iht_exposure(snap.assets, snap.entities, normalizer, base_currency, iht_threshold, iht_rate)
    if iht.is_exposed:
        title = f"Personal assets exceed IHT threshold by {_fmt_money(iht.excess, base_currency)}"
        alerts.append(_mk("iht", as_of, SEVERITY_HIGH, title, iht.model_dump(mode="json")))

    # 4) Leverage
    summary = aggregate(snap.assets, snap.debts, base_currency, normalizer)
    if summary.ltv >= ltv_critical_pct:
        alerts.append(_mk("ltv", as_of, SEVERITY_CRITICAL, f"Portfolio LTV {summary.ltv:.1f}%", {"ltv": summary.ltv}))
    elif summary.ltv >= ltv_warning_pct:
        alerts.append(_mk("ltv", as_of, SEVERITY_WARNING, f"Portfolio LTV {summary.ltv:.1f}%", {"ltv": summary.ltv}))

    return sorted(alerts, key=lambda a: -a["severity"])
