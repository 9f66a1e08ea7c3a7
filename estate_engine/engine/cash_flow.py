from __future__ import annotations

from typing import Iterable

from ..models import CashFlowInputs, CashFlowOutputs, Debt, FreeCashFlow, MonthlyIncome
from .constants import MONTHS_PER_YEAR
from .currency import CurrencyNormalizer


def global_cash_flow(inputs: CashFlowInputs, normalizer: CurrencyNormalizer, base_currency: str) -> CashFlowOutputs:
    """Gross monthly income across the independent streams. Inputs are summed as given."""
    car_park = inputs.car_park_normal + inputs.car_park_event
    portfolio_value = normalizer.convert(
        inputs.external_portfolio_value, inputs.external_portfolio_currency, base_currency
    )
    portfolio_monthly = portfolio_value * inputs.external_portfolio_yield_pct / 100 / MONTHS_PER_YEAR
    total = inputs.hotel_lease + inputs.revenue_share + car_park + portfolio_monthly
    return CashFlowOutputs(
        monthly_income=MonthlyIncome(
            hotel_lease=inputs.hotel_lease,
            revenue_share=inputs.revenue_share,
            car_park=car_park,
            external_portfolio=portfolio_monthly,
            total=total,
        ),
        # no expenses are modelled: the salary is the gross figure
        monthly_sovereign_salary=total,
        annual_projection=total * MONTHS_PER_YEAR,
    )


def monthly_debt_service(debt: Debt) -> float:
    if debt.monthly_payment:
        return debt.monthly_payment
    if debt.is_compounding:
        return 0.0
    return debt.current_balance * debt.interest_rate / 100 / MONTHS_PER_YEAR


def free_cash_flow(
    monthly_income: float,
    debts: Iterable[Debt],
    normalizer: CurrencyNormalizer,
    base_currency: str,
    cash_buffer: float = 0.0,
    warning_threshold: float = 50_000.0,
) -> FreeCashFlow:
    payments = sum(normalizer.convert(monthly_debt_service(d), d.currency, base_currency) for d in debts)
    free = monthly_income - payments
    return FreeCashFlow(
        monthly_income=monthly_income,
        monthly_debt_payments=payments,
        monthly_free_cash_flow=free,
        cash_buffer=cash_buffer,
        is_positive=free > 0,
        warning_threshold=warning_threshold,
        has_warning=cash_buffer < warning_threshold,
    )
