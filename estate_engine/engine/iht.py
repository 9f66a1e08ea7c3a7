from __future__ import annotations

from typing import Iterable

from ..models import Asset, Entity, IHTExposure
from .currency import CurrencyNormalizer


def iht_exposure(
    assets: Iterable[Asset],
    entities: Iterable[Entity],
    normalizer: CurrencyNormalizer,
    base_currency: str,
    threshold: float,
    effective_rate: float,
) -> IHTExposure:
    personal = {e.id for e in entities if e.is_personal}
    value = sum(
        normalizer.convert(a.valuation, a.currency, base_currency) for a in assets if a.entity_id in personal
    )
    excess = max(0.0, value - threshold)
    return IHTExposure(
        personal_assets_value=value,
        threshold=threshold,
        excess=excess,
        effective_rate=effective_rate,
        estimated_tax=excess * effective_rate,
        is_exposed=excess > 0,
    )
