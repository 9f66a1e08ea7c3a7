"""Equity decay ("Oakwood decay") under a compounding, rolled-up debt.

The horizon is a run-rate approximation: remaining equity divided by one
year of interest on the current balance. It is not a root-solve of the
compounding equation and is kept that way so alert levels stay comparable
with historical readings. Months are a uniform 30 days.
"""
from __future__ import annotations

import numpy as np
import pandas as pd

from ..errors import InvalidDebtTypeError, InvalidInputError
from ..models import Asset, Debt, OakwoodDecay
from .constants import DAYS_PER_MONTH, DAYS_PER_YEAR, DECAY_CRITICAL_YEARS, DECAY_WARNING_YEARS
from .currency import CurrencyNormalizer


def classify_decay(years_until_zero: float) -> str:
    if years_until_zero < DECAY_CRITICAL_YEARS:
        return "CRITICAL"
    if years_until_zero < DECAY_WARNING_YEARS:
        return "WARNING"
    return "SAFE"


def _balance_in_asset_currency(asset: Asset, debt: Debt, normalizer: CurrencyNormalizer | None) -> float:
    if debt.currency.upper() == asset.currency.upper():
        return debt.current_balance
    if normalizer is None:
        raise InvalidInputError(
            f"debt {debt.id!r} is in {debt.currency} but asset {asset.id!r} is in {asset.currency}; a rate table is required"
        )
    return normalizer.convert(debt.current_balance, debt.currency, asset.currency)


def compute_decay(asset: Asset, debt: Debt, normalizer: CurrencyNormalizer | None = None) -> OakwoodDecay:
    if not debt.is_compounding:
        raise InvalidDebtTypeError(debt.id, debt.type)
    balance = _balance_in_asset_currency(asset, debt, normalizer)
    current_equity = asset.valuation - balance
    annual_rate = debt.interest_rate / 100
    daily_accrual = balance * annual_rate / DAYS_PER_YEAR

    years_until_zero = 0.0
    if daily_accrual > 0 and current_equity > 0:
        years_until_zero = current_equity / (balance * annual_rate)

    return OakwoodDecay(
        asset_id=asset.id,
        debt_id=debt.id,
        current_equity=current_equity,
        debt_balance=balance,
        interest_rate=debt.interest_rate,
        daily_interest_accrual=daily_accrual,
        monthly_decay=daily_accrual * DAYS_PER_MONTH,
        years_until_zero=years_until_zero,
        alert_level=classify_decay(years_until_zero),
    )


def project_equity_at_date(current_equity: float, debt_balance: float, interest_rate: float, years_from_now: float) -> float:
    """Equity left after the debt compounds for ``years_from_now`` against a flat asset value.

    ``interest_rate`` is an annual percentage, as stored on ``Debt``.
    """
    future_debt = debt_balance * (1 + interest_rate / 100) ** years_from_now
    asset_value = current_equity + debt_balance
    return max(0.0, asset_value - future_debt)


def equity_projection_curve(
    asset: Asset,
    debt: Debt,
    years: int,
    step: float = 1.0,
    normalizer: CurrencyNormalizer | None = None,
) -> pd.DataFrame:
    if not debt.is_compounding:
        raise InvalidDebtTypeError(debt.id, debt.type)
    if years < 0 or step <= 0:
        raise InvalidInputError("projection horizon must be non-negative and step positive")
    balance = _balance_in_asset_currency(asset, debt, normalizer)
    horizon = np.arange(0.0, years + step / 2, step)
    debt_path = balance * np.power(1 + debt.interest_rate / 100, horizon)
    equity = np.maximum(0.0, asset.valuation - debt_path)
    return pd.DataFrame({"year": horizon, "debt_balance": debt_path, "equity": equity})
