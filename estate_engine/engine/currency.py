"""Currency normalization over a swappable rate table.

Factors convert one unit of a currency into the portfolio base currency, so
``convert(x, "USD", "GBP") == x * rates["USD"] / rates["GBP"]``. There is no
fallback for codes outside the table.
"""
from __future__ import annotations

import threading
from typing import Mapping

from .. import config
from ..errors import InvalidInputError, UnknownCurrencyError


class CurrencyNormalizer:
    def __init__(self, rates: Mapping[str, float], base_currency: str = "GBP"):
        table = {str(code).upper(): float(factor) for code, factor in rates.items()}
        base = base_currency.upper()
        if base not in table:
            raise UnknownCurrencyError(base, table.keys())
        bad = [code for code, factor in table.items() if not factor > 0]
        if bad:
            raise InvalidInputError(f"rate factors must be positive: {', '.join(sorted(bad))}")
        self._rates = table
        self.base_currency = base

    @property
    def currencies(self) -> frozenset[str]:
        return frozenset(self._rates)

    def factor(self, code: str) -> float:
        try:
            return self._rates[code.upper()]
        except (KeyError, AttributeError):
            raise UnknownCurrencyError(str(code), self._rates.keys()) from None

    def convert(self, amount: float, from_currency: str, to_currency: str) -> float:
        src = self.factor(from_currency)
        dst = self.factor(to_currency)
        if from_currency.upper() == to_currency.upper():
            return amount
        return amount * src / dst

    def to_base(self, amount: float, currency: str) -> float:
        return self.convert(amount, currency, self.base_currency)


_lock = threading.Lock()
_active: CurrencyNormalizer | None = None


def normalizer_from_settings(cfg=None) -> CurrencyNormalizer:
    cfg = cfg or config.settings
    return CurrencyNormalizer(cfg.rate_table(), cfg.base_currency)


def get_normalizer() -> CurrencyNormalizer:
    global _active
    with _lock:
        if _active is None:
            _active = normalizer_from_settings()
        return _active


def reload_rates(rates: Mapping[str, float] | None = None, base_currency: str | None = None) -> CurrencyNormalizer:
    """Swap the process-wide rate table. Without arguments, re-read configuration."""
    global _active
    if rates is None:
        fresh = config.reload_settings()
        normalizer = normalizer_from_settings(fresh)
    else:
        normalizer = CurrencyNormalizer(rates, base_currency or config.settings.base_currency)
    with _lock:
        _active = normalizer
    return normalizer
