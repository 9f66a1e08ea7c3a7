from typing import Iterable, Tuple, List

from ..errors import InvalidInputError, UnknownCurrencyError
from ..models import Asset, Debt, PortfolioSnapshot

OWNERSHIP_TOLERANCE = 1e-6

def _unsupported(code: str, currencies) -> bool:
    return currencies is not None and code.upper() not in currencies

def asset_reasons(asset: Asset, currencies=None) -> List[str]:
    reasons = []
    if asset.valuation < 0:
        reasons.append(f"asset {asset.id}: negative valuation {asset.valuation}")
    shares = [asset.principal_owner] + list(asset.minority_owners)
    if any(s.percentage < 0 for s in shares):
        reasons.append(f"asset {asset.id}: negative ownership percentage")
    if asset.ownership_total > 100 + OWNERSHIP_TOLERANCE:
        reasons.append(f"asset {asset.id}: ownership sums to {asset.ownership_total:g} > 100")
    if _unsupported(asset.currency, currencies):
        reasons.append(f"asset {asset.id}: unsupported currency {asset.currency}")
    return reasons

def debt_reasons(debt: Debt, currencies=None) -> List[str]:
    reasons = []
    if debt.principal < 0:
        reasons.append(f"debt {debt.id}: negative principal {debt.principal}")
    if debt.current_balance < 0:
        reasons.append(f"debt {debt.id}: negative balance {debt.current_balance}")
    if _unsupported(debt.currency, currencies):
        reasons.append(f"debt {debt.id}: unsupported currency {debt.currency}")
    return reasons

def validate_snapshot(snap: PortfolioSnapshot, currencies=None) -> Tuple[bool, List[str]]:
    reasons = []
    entity_ids = {e.id for e in snap.entities}
    asset_ids = set()
    for asset in snap.assets:
        if asset.id in asset_ids:
            reasons.append(f"asset {asset.id}: duplicate id")
        asset_ids.add(asset.id)
        if asset.entity_id not in entity_ids:
            reasons.append(f"asset {asset.id}: unknown entity {asset.entity_id}")
        reasons.extend(asset_reasons(asset, currencies))
    for debt in snap.debts:
        reasons.extend(debt_reasons(debt, currencies))
        if debt.asset_id is None and debt.entity_id is None:
            reasons.append(f"debt {debt.id}: references neither an asset nor an entity")
        if debt.asset_id is not None and debt.asset_id not in asset_ids:
            reasons.append(f"debt {debt.id}: unknown asset {debt.asset_id}")
        if debt.entity_id is not None and debt.entity_id not in entity_ids:
            reasons.append(f"debt {debt.id}: unknown entity {debt.entity_id}")
    return (len(reasons) == 0), reasons

def _raise_for(reasons: List[str], records: Iterable, currencies) -> None:
    if not reasons:
        return
    unknown = sorted({r.currency.upper() for r in records if _unsupported(r.currency, currencies)})
    # a currency outside the rate table is its own error kind when nothing else is wrong
    if unknown and all(": unsupported currency " in r for r in reasons):
        raise UnknownCurrencyError(unknown[0], currencies)
    raise InvalidInputError(reasons=reasons)

def ensure_valid_snapshot(snap: PortfolioSnapshot, currencies=None) -> PortfolioSnapshot:
    _, reasons = validate_snapshot(snap, currencies)
    _raise_for(reasons, list(snap.assets) + list(snap.debts), currencies)
    return snap

def ensure_valid_records(assets: Iterable[Asset] = (), debts: Iterable[Debt] = (), currencies=None) -> None:
    """Value checks for entry points that take loose assets and debts rather than a snapshot."""
    assets, debts = list(assets), list(debts)
    reasons = []
    for asset in assets:
        reasons.extend(asset_reasons(asset, currencies))
    for debt in debts:
        reasons.extend(debt_reasons(debt, currencies))
    _raise_for(reasons, assets + debts, currencies)
