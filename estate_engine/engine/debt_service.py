from __future__ import annotations

import math
from datetime import date
from typing import Iterable

from dateutil.relativedelta import relativedelta

from ..models import Debt
from .constants import MONTHS_PER_YEAR
from .currency import CurrencyNormalizer


def monthly_payment(principal: float, annual_rate: float, term_years: float) -> float:
    """Level annuity payment, rounded to pence. ``annual_rate`` is a percentage."""
    if principal <= 0 or term_years <= 0:
        return 0.0
    r = annual_rate / 100 / MONTHS_PER_YEAR
    n = term_years * MONTHS_PER_YEAR
    if r == 0:
        return principal / n
    growth = (1 + r) ** n
    return round(principal * r * growth / (growth - 1), 2)


def ltv_pct(loan_balance: float, property_value: float) -> float:
    if property_value <= 0:
        return 0.0
    return round(loan_balance / property_value * 100, 2)


def remaining_balance(principal: float, annual_rate: float, term_years: float, payments_made: int) -> float:
    total = term_years * MONTHS_PER_YEAR
    if payments_made >= total:
        return 0.0
    r = annual_rate / 100 / MONTHS_PER_YEAR
    if r == 0:
        return principal - monthly_payment(principal, annual_rate, term_years) * payments_made
    balance = principal * ((1 + r) ** total - (1 + r) ** payments_made) / ((1 + r) ** total - 1)
    return max(0.0, round(balance, 2))


def amortization_schedule(principal: float, annual_rate: float, term_years: float, start: date) -> list[dict]:
    r = annual_rate / 100 / MONTHS_PER_YEAR
    payment = monthly_payment(principal, annual_rate, term_years)
    balance = principal
    rows = []
    for n in range(1, int(term_years * MONTHS_PER_YEAR) + 1):
        interest = balance * r
        principal_part = payment - interest
        balance = max(0.0, balance - principal_part)
        rows.append({
            "payment_number": n,
            "payment_date": start + relativedelta(months=n - 1),
            "principal": round(principal_part, 2),
            "interest": round(interest, 2),
            "balance": round(balance, 2),
        })
        if balance <= 0:
            break
    return rows


def dscr(net_operating_income: float, total_debt_service: float) -> float:
    if total_debt_service <= 0:
        return 0.0
    return round(net_operating_income / total_debt_service, 2)


def icr(ebitda: float, interest_expense: float) -> float:
    if interest_expense <= 0:
        return 0.0
    return round(ebitda / interest_expense, 2)


def stress_test_rate_change(balance: float, current_rate: float, new_rate: float, remaining_years: float) -> dict:
    current = monthly_payment(balance, current_rate, remaining_years)
    stressed = monthly_payment(balance, new_rate, remaining_years)
    increase = stressed - current
    return {
        "current_payment": round(current, 2),
        "new_payment": round(stressed, 2),
        "payment_increase": round(increase, 2),
        "payment_increase_pct": round(increase / current * 100, 2) if current else None,
    }


def stress_test_valuation_change(balance: float, current_value: float, new_value: float) -> dict:
    current = ltv_pct(balance, current_value)
    stressed = ltv_pct(balance, new_value)
    return {"current_ltv": current, "new_ltv": stressed, "ltv_change": round(stressed - current, 2)}


def years_remaining(balance: float, payment: float, annual_rate: float) -> float | None:
    """Years to clear ``balance`` at ``payment`` per month; None when the payment never covers interest."""
    if payment <= 0 or balance <= 0:
        return 0.0
    r = annual_rate / 100 / MONTHS_PER_YEAR
    if r == 0:
        return balance / payment / MONTHS_PER_YEAR
    coverage = 1 - balance * r / payment
    if coverage <= 0:
        return None
    years = -math.log(coverage) / math.log(1 + r) / MONTHS_PER_YEAR
    return max(0.0, round(years, 2))


def weighted_average_rate(debts: Iterable[Debt], normalizer: CurrencyNormalizer, base_currency: str) -> float:
    weighted = 0.0
    total = 0.0
    for d in debts:
        bal = normalizer.convert(d.current_balance, d.currency, base_currency)
        weighted += bal * d.interest_rate
        total += bal
    return weighted / total if total else 0.0
