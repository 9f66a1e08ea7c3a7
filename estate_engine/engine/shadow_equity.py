from __future__ import annotations

from datetime import datetime

from ..errors import InvalidInputError
from ..models import ShadowEquity
from .constants import MONTHS_PER_YEAR
from .currency import CurrencyNormalizer


def monthly_shadow_equity(loan_amount: float, interest_rate: float, months_elapsed: int = 0) -> tuple[float, float]:
    """Return (instantaneous monthly accrual, compounded growth over ``months_elapsed``)."""
    monthly_rate = interest_rate / 100 / MONTHS_PER_YEAR
    monthly_accrual = loan_amount * monthly_rate
    compounded = loan_amount * ((1 + monthly_rate) ** months_elapsed - 1)
    return monthly_accrual, compounded


def accrue(record: ShadowEquity, months_to_add: int, as_of: datetime | None = None) -> ShadowEquity:
    """Apply ``months_to_add`` elapsed months to a shadow-equity record in one step.

    Callers pass the delta since the record's last accrual and persist the
    returned watermark; the engine never reads the clock. Calling twice for
    the same period compounds twice.
    """
    if isinstance(months_to_add, bool) or not isinstance(months_to_add, int) or months_to_add < 0:
        raise InvalidInputError(f"months_to_add must be a non-negative integer, got {months_to_add!r}")
    if record.loan_amount < 0:
        raise InvalidInputError(f"loan {record.loan_id!r} has a negative loan amount")
    monthly_accrual, growth = monthly_shadow_equity(record.loan_amount, record.interest_rate, months_to_add)
    update = {
        "monthly_interest_accrual": monthly_accrual,
        "current_shadow_equity": record.current_shadow_equity + growth,
        "months_accrued": record.months_accrued + months_to_add,
    }
    if as_of is not None:
        update["last_accrual_at"] = as_of
    return record.model_copy(update=update)


def ownership_percentage(
    record: ShadowEquity,
    entity_total_value: float,
    entity_currency: str,
    normalizer: CurrencyNormalizer,
) -> float:
    if entity_total_value == 0:
        raise InvalidInputError(f"entity value is zero; ownership of loan {record.loan_id!r} is undefined")
    value = normalizer.convert(record.current_shadow_equity, record.currency, entity_currency)
    return value / entity_total_value * 100
