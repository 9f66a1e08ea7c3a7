from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Iterable

from ..models import Asset, AssetEquity, Debt, PortfolioSummary
from .currency import CurrencyNormalizer


def _debts_by_asset(debts: Iterable[Debt]) -> tuple[dict[str, list[Debt]], list[Debt]]:
    by_asset: dict[str, list[Debt]] = {}
    unattached: list[Debt] = []
    for debt in debts:
        if debt.asset_id:
            by_asset.setdefault(debt.asset_id, []).append(debt)
        else:
            unattached.append(debt)
    return by_asset, unattached


def ltv_pct(total_debt: float, gross_value: float) -> float:
    if gross_value == 0:
        return 0.0
    return total_debt / gross_value * 100


def asset_equity(asset: Asset, debts: list[Debt], normalizer: CurrencyNormalizer, base_currency: str) -> AssetEquity:
    """Net one asset against its secured debts and split the net by owner percentage."""
    gross = normalizer.convert(asset.valuation, asset.currency, base_currency)
    debt_total = sum(normalizer.convert(d.current_balance, d.currency, base_currency) for d in debts)
    net = gross - debt_total
    principal = net * asset.principal_owner.percentage / 100
    minority = sum(net * owner.percentage / 100 for owner in asset.minority_owners)
    return AssetEquity(
        asset_id=asset.id,
        name=asset.name,
        gross_value=gross,
        debt=debt_total,
        net_equity=net,
        principal_equity=principal,
        minority_equity=minority,
        ltv=ltv_pct(debt_total, gross),
    )


def aggregate(
    assets: list[Asset],
    debts: list[Debt],
    base_currency: str,
    normalizer: CurrencyNormalizer,
    workers: int = 1,
) -> PortfolioSummary:
    by_asset, unattached = _debts_by_asset(debts)
    known = {a.id for a in assets}
    # debts pointing at assets outside this set still count against the portfolio
    orphaned = [d for aid, group in by_asset.items() if aid not in known for d in group]

    def _one(asset: Asset) -> AssetEquity:
        return asset_equity(asset, by_asset.get(asset.id, []), normalizer, base_currency)

    if workers and workers > 1 and len(assets) > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            rows = list(pool.map(_one, assets))
    else:
        rows = [_one(a) for a in assets]

    unallocated = sum(
        normalizer.convert(d.current_balance, d.currency, base_currency) for d in unattached + orphaned
    )
    gross = sum(r.gross_value for r in rows)
    total_debt = sum(r.debt for r in rows) + unallocated
    return PortfolioSummary(
        base_currency=base_currency.upper(),
        gross_value=gross,
        total_debt=total_debt,
        unallocated_debt=unallocated,
        net_equity=gross - total_debt,
        principal_equity=sum(r.principal_equity for r in rows),
        minority_equity=sum(r.minority_equity for r in rows),
        ltv=ltv_pct(total_debt, gross),
        assets=rows,
    )
