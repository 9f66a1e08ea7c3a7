from __future__ import annotations

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import InvalidInputError

EntityKind = Literal["Corporate", "Individual", "Trust/Foundation"]
AssetStatus = Literal["Operational", "Leased", "Strategic-Hold", "Renovation", "For-Sale"]
DebtType = Literal["Fixed", "Variable", "Equity-Release"]
DecayAlert = Literal["SAFE", "WARNING", "CRITICAL"]
Urgency = Literal["CRITICAL", "HIGH", "MEDIUM"]


class Record(BaseModel):
    model_config = ConfigDict(frozen=True)


# --- inputs -----------------------------------------------------------------

class OwnerShare(Record):
    name: str
    percentage: float


class Entity(Record):
    id: str
    name: str
    kind: EntityKind

    @property
    def is_personal(self) -> bool:
        return self.kind != "Corporate"


class DisposalPlan(Record):
    deadline: Optional[date] = None
    notes: Optional[str] = None


class Asset(Record):
    id: str
    entity_id: str
    name: str
    valuation: float
    currency: str
    principal_owner: OwnerShare
    minority_owners: list[OwnerShare] = Field(default_factory=list)
    status: AssetStatus = "Operational"
    tier: Optional[str] = None
    location: Optional[str] = None
    acquisition_price: Optional[float] = None
    acquisition_date: Optional[date] = None
    monthly_payment: Optional[float] = None
    annual_turnover: Optional[float] = None
    disposal: Optional[DisposalPlan] = None

    @property
    def ownership_total(self) -> float:
        return self.principal_owner.percentage + sum(o.percentage for o in self.minority_owners)

    @property
    def minority_percentage(self) -> float:
        return sum(o.percentage for o in self.minority_owners)


class Debt(Record):
    id: str
    asset_id: Optional[str] = None
    entity_id: Optional[str] = None
    creditor: str
    principal: float
    current_balance: float
    interest_rate: float  # annual, percent
    type: DebtType = "Fixed"
    is_compounding: bool = False
    currency: str
    maturity_date: Optional[date] = None
    monthly_payment: Optional[float] = None


class ShadowEquity(Record):
    loan_id: str
    entity_id: Optional[str] = None
    loan_amount: float
    interest_rate: float  # annual, percent
    currency: str
    current_shadow_equity: float = 0.0
    monthly_interest_accrual: float = 0.0
    months_accrued: int = 0
    last_accrual_at: Optional[datetime] = None


class PortfolioSnapshot(Record):
    portfolio_id: str
    entities: list[Entity] = Field(default_factory=list)
    assets: list[Asset] = Field(default_factory=list)
    debts: list[Debt] = Field(default_factory=list)

    def entity(self, entity_id: str) -> Optional[Entity]:
        for ent in self.entities:
            if ent.id == entity_id:
                return ent
        return None

    def debts_for_asset(self, asset_id: str) -> list[Debt]:
        return [d for d in self.debts if d.asset_id == asset_id]


class EventModeConfig(Record):
    normal_daily_rate: float
    event_daily_rate: float
    spaces: int


class CashFlowInputs(Record):
    hotel_lease: float = 0.0
    revenue_share: float = 0.0
    car_park_normal: float = 0.0
    car_park_event: float = 0.0
    external_portfolio_value: float = 0.0
    external_portfolio_currency: str = "USD"
    external_portfolio_yield_pct: float = 0.0


# --- outputs ----------------------------------------------------------------

class AssetEquity(Record):
    asset_id: str
    name: str
    gross_value: float
    debt: float
    net_equity: float
    principal_equity: float
    minority_equity: float
    ltv: float


class PortfolioSummary(Record):
    base_currency: str
    gross_value: float
    total_debt: float
    unallocated_debt: float = 0.0
    net_equity: float
    principal_equity: float
    minority_equity: float
    ltv: float
    assets: list[AssetEquity] = Field(default_factory=list)


class OakwoodDecay(Record):
    asset_id: str
    debt_id: str
    current_equity: float
    debt_balance: float
    interest_rate: float
    daily_interest_accrual: float
    monthly_decay: float
    years_until_zero: float
    alert_level: DecayAlert


class PruningEntry(Record):
    asset_id: str
    asset_name: str
    current_value: float
    currency: str
    deadline: date
    days_remaining: int
    urgency: Urgency
    reason: str


class MonthlyIncome(Record):
    hotel_lease: float
    revenue_share: float
    car_park: float
    external_portfolio: float
    total: float


class CashFlowOutputs(Record):
    monthly_income: MonthlyIncome
    monthly_sovereign_salary: float
    annual_projection: float


class FreeCashFlow(Record):
    monthly_income: float
    monthly_debt_payments: float
    monthly_free_cash_flow: float
    cash_buffer: float
    is_positive: bool
    warning_threshold: float
    has_warning: bool


class IHTExposure(Record):
    personal_assets_value: float
    threshold: float
    excess: float
    effective_rate: float
    estimated_tax: float
    is_exposed: bool


class ConsolidationScenario(Record):
    asset_id: str
    net_equity: float
    minority_equity: float
    minority_discount_factor: float
    buyout_cost: float
    principal_equity_after: float


class DebtEquitySwap(Record):
    loan_amount: float
    currency: str
    target_entity_id: str
    target_asset_id: str
    current_valuation: float
    net_equity: float
    equity_purchased: float
    ownership_purchased: float  # percent of the asset
    ownership_after: float  # percent of the asset
    terms_summary: str


# --- boundary parsing ---------------------------------------------------------

def _parse(model, payload: dict):
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        reasons = [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()]
        raise InvalidInputError(reasons=reasons) from exc


def load_snapshot(payload: dict) -> PortfolioSnapshot:
    return _parse(PortfolioSnapshot, payload)


def load_shadow_equity(payload: dict) -> ShadowEquity:
    return _parse(ShadowEquity, payload)
