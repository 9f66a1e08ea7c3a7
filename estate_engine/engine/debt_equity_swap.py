"""Debt-for-equity swaps: what share of an asset a family loan can buy.

A loan converts into equity held by the minority owners, valued at the
asset's net equity after its secured debts. The purchase is capped at the
minority stake; whatever the loan cannot buy stays a loan.
"""
from __future__ import annotations

from ..errors import InvalidInputError
from ..models import Asset, Debt, DebtEquitySwap, PortfolioSnapshot
from .currency import CurrencyNormalizer


def _terms_summary(loan_amount: float, currency: str, asset: Asset, purchased_pct: float, after_pct: float) -> str:
    return (
        f"Loan of {currency} {loan_amount:,.0f} converts to {purchased_pct:.1f}% ownership in {asset.name}. "
        f"After conversion, total ownership will be {after_pct:.1f}%. "
        f"Asset valuation: {asset.currency} {asset.valuation:,.0f}."
    )


def debt_equity_swap(
    loan_amount: float,
    currency: str,
    asset: Asset,
    debts: list[Debt],
    normalizer: CurrencyNormalizer,
    current_ownership: float | None = None,
) -> DebtEquitySwap:
    """Swap ``loan_amount`` for minority equity in ``asset``.

    ``current_ownership`` is the acquirer's percentage before the swap and
    defaults to the principal owner's share.
    """
    if loan_amount < 0:
        raise InvalidInputError(f"loan amount must be non-negative, got {loan_amount}")
    loan = normalizer.convert(loan_amount, currency, asset.currency)
    debt_total = sum(normalizer.convert(d.current_balance, d.currency, asset.currency) for d in debts)
    net = asset.valuation - debt_total
    if net <= 0:
        raise InvalidInputError(f"asset {asset.id!r} has no net equity to swap into ({net:,.2f})")

    minority_equity = net * asset.minority_percentage / 100
    purchased = min(loan, minority_equity)
    purchased_pct = purchased / net * 100
    if current_ownership is None:
        current_ownership = asset.principal_owner.percentage
    after = current_ownership + purchased_pct
    return DebtEquitySwap(
        loan_amount=loan_amount,
        currency=currency.upper(),
        target_entity_id=asset.entity_id,
        target_asset_id=asset.id,
        current_valuation=asset.valuation,
        net_equity=net,
        equity_purchased=purchased,
        ownership_purchased=purchased_pct,
        ownership_after=after,
        terms_summary=_terms_summary(loan_amount, currency.upper(), asset, purchased_pct, after),
    )


def entity_debt_equity_swap(
    loan_amount: float,
    currency: str,
    snapshot: PortfolioSnapshot,
    entity_id: str,
    normalizer: CurrencyNormalizer,
) -> list[DebtEquitySwap]:
    """Spread a loan to ``entity_id`` across its assets in proportion to valuation."""
    if snapshot.entity(entity_id) is None:
        raise InvalidInputError(f"unknown entity {entity_id!r}")
    assets = [a for a in snapshot.assets if a.entity_id == entity_id]
    # weights are compared in the loan currency so mixed-currency holdings split fairly
    weights = [normalizer.convert(a.valuation, a.currency, currency) for a in assets]
    total = sum(weights)
    if total <= 0:
        raise InvalidInputError(f"entity {entity_id!r} holds no valued assets to swap into")
    # an unvalued asset takes no share of the loan
    return [
        debt_equity_swap(loan_amount * weight / total, currency, asset, snapshot.debts_for_asset(asset.id), normalizer)
        for asset, weight in zip(assets, weights)
        if weight > 0
    ]
