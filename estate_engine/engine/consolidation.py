from __future__ import annotations

from ..models import Asset, ConsolidationScenario, Debt
from .currency import CurrencyNormalizer


def consolidation_scenario(
    asset: Asset,
    debts: list[Debt],
    normalizer: CurrencyNormalizer,
    base_currency: str,
    discount_factor: float = 0.7,
) -> ConsolidationScenario:
    """Cost of buying the minority owners out of one asset at a discount to their equity."""
    gross = normalizer.convert(asset.valuation, asset.currency, base_currency)
    debt_total = sum(normalizer.convert(d.current_balance, d.currency, base_currency) for d in debts)
    net = gross - debt_total
    minority = net * asset.minority_percentage / 100
    return ConsolidationScenario(
        asset_id=asset.id,
        net_equity=net,
        minority_equity=minority,
        minority_discount_factor=discount_factor,
        buyout_cost=minority * discount_factor,
        principal_equity_after=net,
    )


def total_consolidation_cost(
    assets: list[Asset],
    debts: list[Debt],
    normalizer: CurrencyNormalizer,
    base_currency: str,
    discount_factor: float = 0.7,
) -> float:
    total = 0.0
    for asset in assets:
        secured = [d for d in debts if d.asset_id == asset.id]
        total += consolidation_scenario(asset, secured, normalizer, base_currency, discount_factor).buyout_cost
    return total


def sale_impact(sale_price: float, sale_debt: float, target_debt: float, consolidation_cost: float) -> dict:
    profit = sale_price - sale_debt
    payoff = min(profit, target_debt)
    remaining = profit - payoff
    return {
        "profit": profit,
        "target_debt_payoff": payoff,
        "remaining_for_consolidation": remaining,
        "can_complete_consolidation": remaining >= consolidation_cost,
    }
