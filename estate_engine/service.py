"""Entry points for the UI/API layer.

Each call reads configuration and the active rate table once, delegates to a
pure calculator and returns a frozen record. Nothing here holds state between
calls; time-dependent operations take ``now`` explicitly.
"""
from __future__ import annotations

import time
from datetime import date, datetime
from typing import Iterable

import structlog

from . import config
from .engine import (
    cash_flow,
    consolidation,
    debt_equity_swap,
    decay,
    event_mode,
    iht,
    portfolio,
    pruning,
    shadow_equity,
    signals,
)
from .engine.currency import CurrencyNormalizer, get_normalizer
from .engine.validation import ensure_valid_records, ensure_valid_snapshot
from .errors import InvalidInputError
from .models import (
    Asset,
    CashFlowInputs,
    CashFlowOutputs,
    Debt,
    DebtEquitySwap,
    Entity,
    EventModeConfig,
    FreeCashFlow,
    IHTExposure,
    OakwoodDecay,
    PortfolioSnapshot,
    PortfolioSummary,
    PruningEntry,
    ShadowEquity,
)

log = structlog.get_logger()


def _normalizer(normalizer: CurrencyNormalizer | None) -> CurrencyNormalizer:
    return normalizer or get_normalizer()


def _base(base_currency: str | None, normalizer: CurrencyNormalizer) -> str:
    return (base_currency or normalizer.base_currency).upper()


def compute_portfolio_summary(
    snapshot: PortfolioSnapshot,
    base_currency: str | None = None,
    normalizer: CurrencyNormalizer | None = None,
    workers: int | None = None,
) -> PortfolioSummary:
    fx = _normalizer(normalizer)
    base = _base(base_currency, fx)
    ensure_valid_snapshot(snapshot, fx.currencies)
    started = time.monotonic()
    summary = portfolio.aggregate(
        snapshot.assets,
        snapshot.debts,
        base,
        fx,
        workers=workers if workers is not None else config.settings.aggregate_workers,
    )
    log.info(
        "portfolio_summary_built",
        portfolio_id=snapshot.portfolio_id,
        assets=len(snapshot.assets),
        debts=len(snapshot.debts),
        base_currency=base,
        ltv=round(summary.ltv, 3),
        elapsed_sec=round(time.monotonic() - started, 3),
    )
    return summary


def compute_decay(asset: Asset, debt: Debt, normalizer: CurrencyNormalizer | None = None) -> OakwoodDecay:
    fx = _normalizer(normalizer)
    ensure_valid_records([asset], [debt], fx.currencies)
    result = decay.compute_decay(asset, debt, fx)
    if result.alert_level != "SAFE":
        log.info(
            "equity_decay_alert",
            asset_id=asset.id,
            debt_id=debt.id,
            alert_level=result.alert_level,
            years_until_zero=round(result.years_until_zero, 2),
        )
    return result


def project_equity_at_date(current_equity: float, debt_balance: float, interest_rate: float, years_from_now: float) -> float:
    return decay.project_equity_at_date(current_equity, debt_balance, interest_rate, years_from_now)


def accrue_shadow_equity(record: ShadowEquity, months_elapsed: int, as_of: datetime | None = None) -> ShadowEquity:
    updated = shadow_equity.accrue(record, months_elapsed, as_of=as_of)
    log.debug(
        "shadow_equity_recomputed",
        loan_id=record.loan_id,
        months=months_elapsed,
        before=round(record.current_shadow_equity, 2),
        after=round(updated.current_shadow_equity, 2),
    )
    return updated


def shadow_equity_ownership(
    record: ShadowEquity,
    entity_value: float,
    entity_currency: str | None = None,
    normalizer: CurrencyNormalizer | None = None,
) -> float:
    fx = _normalizer(normalizer)
    return shadow_equity.ownership_percentage(record, entity_value, _base(entity_currency, fx), fx)


def build_pruning_list(assets: Iterable[Asset], now: date | datetime) -> list[PruningEntry]:
    return pruning.build_list(assets, now, config.settings.local_tz)


def compute_event_mode_yield(cfg: EventModeConfig, event_dates: Iterable[date] = ()) -> float:
    return event_mode.event_mode_yield(cfg, event_dates, config.settings.event_days_in_month)


def compute_annual_event_mode_yield(cfg: EventModeConfig, avg_events_per_month: float | None = None) -> float:
    if avg_events_per_month is None:
        avg_events_per_month = config.settings.event_avg_days_per_month
    return event_mode.annual_event_mode_yield(cfg, avg_events_per_month, config.settings.event_days_in_month)


def compute_month_yield(cfg: EventModeConfig, calendar: event_mode.EventCalendar, year: int, month: int) -> float:
    return event_mode.month_yield(cfg, calendar, year, month, config.settings.event_days_in_month)


def compute_cash_flow(
    inputs: CashFlowInputs,
    base_currency: str | None = None,
    normalizer: CurrencyNormalizer | None = None,
) -> CashFlowOutputs:
    fx = _normalizer(normalizer)
    return cash_flow.global_cash_flow(inputs, fx, _base(base_currency, fx))


def compute_free_cash_flow(
    monthly_income: float,
    debts: Iterable[Debt],
    cash_buffer: float = 0.0,
    base_currency: str | None = None,
    normalizer: CurrencyNormalizer | None = None,
) -> FreeCashFlow:
    fx = _normalizer(normalizer)
    debts = list(debts)
    ensure_valid_records(debts=debts, currencies=fx.currencies)
    result = cash_flow.free_cash_flow(
        monthly_income,
        debts,
        fx,
        _base(base_currency, fx),
        cash_buffer=cash_buffer,
        warning_threshold=config.settings.cash_buffer_warning,
    )
    if result.has_warning:
        log.warning("cash_buffer_below_threshold", cash_buffer=cash_buffer, threshold=result.warning_threshold)
    return result


def compute_iht_exposure(
    assets: Iterable[Asset],
    entities: Iterable[Entity],
    base_currency: str | None = None,
    normalizer: CurrencyNormalizer | None = None,
) -> IHTExposure:
    fx = _normalizer(normalizer)
    assets = list(assets)
    ensure_valid_records(assets, currencies=fx.currencies)
    return iht.iht_exposure(
        assets,
        entities,
        fx,
        _base(base_currency, fx),
        config.settings.iht_threshold,
        config.settings.iht_effective_rate,
    )


def compute_consolidation_cost(
    snapshot: PortfolioSnapshot,
    base_currency: str | None = None,
    normalizer: CurrencyNormalizer | None = None,
) -> float:
    fx = _normalizer(normalizer)
    ensure_valid_snapshot(snapshot, fx.currencies)
    return consolidation.total_consolidation_cost(
        snapshot.assets,
        snapshot.debts,
        fx,
        _base(base_currency, fx),
        config.settings.minority_discount_factor,
    )


def evaluate_signals(
    snapshot: PortfolioSnapshot,
    now: date | datetime,
    base_currency: str | None = None,
    normalizer: CurrencyNormalizer | None = None,
) -> list[dict]:
    fx = _normalizer(normalizer)
    ensure_valid_snapshot(snapshot, fx.currencies)
    cfg = config.settings
    alerts = signals.evaluate_signals(
        snapshot,
        now,
        fx,
        _base(base_currency, fx),
        local_tz=cfg.local_tz,
        iht_threshold=cfg.iht_threshold,
        iht_rate=cfg.iht_effective_rate,
        ltv_warning_pct=cfg.ltv_warning_pct,
        ltv_critical_pct=cfg.ltv_critical_pct,
    )
    log.info("signals_evaluated", portfolio_id=snapshot.portfolio_id, count=len(alerts))
    return alerts


def compute_debt_equity_swap(
    snapshot: PortfolioSnapshot,
    asset_id: str,
    loan_amount: float,
    currency: str,
    normalizer: CurrencyNormalizer | None = None,
) -> DebtEquitySwap:
    fx = _normalizer(normalizer)
    ensure_valid_snapshot(snapshot, fx.currencies)
    asset = next((a for a in snapshot.assets if a.id == asset_id), None)
    if asset is None:
        raise InvalidInputError(f"unknown asset {asset_id!r}")
    swap = debt_equity_swap.debt_equity_swap(loan_amount, currency, asset, snapshot.debts_for_asset(asset_id), fx)
    log.info(
        "debt_equity_swap_computed",
        portfolio_id=snapshot.portfolio_id,
        asset_id=asset_id,
        ownership_purchased=round(swap.ownership_purchased, 3),
    )
    return swap


def compute_entity_debt_equity_swap(
    snapshot: PortfolioSnapshot,
    entity_id: str,
    loan_amount: float,
    currency: str,
    normalizer: CurrencyNormalizer | None = None,
) -> list[DebtEquitySwap]:
    fx = _normalizer(normalizer)
    ensure_valid_snapshot(snapshot, fx.currencies)
    return debt_equity_swap.entity_debt_equity_swap(loan_amount, currency, snapshot, entity_id, fx)
