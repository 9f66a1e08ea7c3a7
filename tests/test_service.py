import unittest
from datetime import date

from estate_engine import service
from estate_engine.config import DEFAULT_FX_RATES
from estate_engine.engine.currency import CurrencyNormalizer, reload_rates
from estate_engine.engine.event_mode import StaticEventCalendar
from estate_engine.errors import InvalidInputError, UnknownCurrencyError
from estate_engine.models import (
    Asset,
    CashFlowInputs,
    Debt,
    Entity,
    EventModeConfig,
    OwnerShare,
    PortfolioSnapshot,
    ShadowEquity,
)


def _snapshot(currency="GBP"):
    return PortfolioSnapshot(
        portfolio_id="family-1",
        entities=[Entity(id="e1", name="Holdings Ltd", kind="Corporate")],
        assets=[
            Asset(
                id="a1",
                entity_id="e1",
                name="Hotel",
                valuation=1_000_000.0,
                currency=currency,
                principal_owner=OwnerShare(name="principal", percentage=70.0),
                minority_owners=[OwnerShare(name="uncles", percentage=30.0)],
            )
        ],
        debts=[
            Debt(id="d1", asset_id="a1", creditor="Bank", principal=400_000.0, current_balance=400_000.0,
                 interest_rate=5.0, currency="GBP")
        ],
    )


class ServiceTests(unittest.TestCase):
    def setUp(self):
        reload_rates(DEFAULT_FX_RATES, "GBP")
        self.fx = CurrencyNormalizer(DEFAULT_FX_RATES, "GBP")

    def test_portfolio_summary(self):
        summary = service.compute_portfolio_summary(_snapshot(), normalizer=self.fx)
        self.assertEqual(summary.base_currency, "GBP")
        self.assertAlmostEqual(summary.principal_equity, 420_000.0)
        self.assertAlmostEqual(summary.ltv, 40.0)
        self.assertIsInstance(summary.model_dump(mode="json"), dict)

    def test_portfolio_summary_uses_active_rate_table(self):
        summary = service.compute_portfolio_summary(_snapshot(), "EUR", workers=2)
        self.assertAlmostEqual(summary.gross_value, 1_000_000.0 / 0.85)

    def test_portfolio_summary_rejects_unsupported_currency(self):
        with self.assertRaises(UnknownCurrencyError) as ctx:
            service.compute_portfolio_summary(_snapshot(currency="JPY"), "GBP", normalizer=self.fx)
        self.assertEqual(ctx.exception.code, "JPY")

    def test_unsupported_currency_with_other_faults_is_invalid_input(self):
        snap = _snapshot(currency="JPY")
        bad = snap.model_copy(update={"assets": [snap.assets[0].model_copy(update={"valuation": -1.0})]})
        with self.assertRaises(InvalidInputError) as ctx:
            service.compute_portfolio_summary(bad, normalizer=self.fx)
        self.assertIn("asset a1: unsupported currency JPY", ctx.exception.reasons)
        self.assertIn("asset a1: negative valuation -1.0", ctx.exception.reasons)

    def test_unknown_base_currency(self):
        with self.assertRaises(UnknownCurrencyError):
            service.compute_portfolio_summary(_snapshot(), "JPY", normalizer=self.fx)

    def test_shadow_equity_round(self):
        record = ShadowEquity(loan_id="L1", loan_amount=100_000.0, interest_rate=6.0, currency="USD")
        updated = service.accrue_shadow_equity(record, 12)
        pct = service.shadow_equity_ownership(updated, 1_000_000.0, "GBP", self.fx)
        self.assertAlmostEqual(pct, updated.current_shadow_equity * 0.79 / 1_000_000.0 * 100)

    def test_event_mode_defaults_from_config(self):
        cfg = EventModeConfig(normal_daily_rate=10.0, event_daily_rate=50.0, spaces=15)
        self.assertAlmostEqual(service.compute_event_mode_yield(cfg, [date(2026, 5, 16)]), 29 * 150 + 750)
        self.assertAlmostEqual(service.compute_annual_event_mode_yield(cfg), (28 * 150 + 2 * 750) * 12)

    def test_month_yield_from_calendar(self):
        cfg = EventModeConfig(normal_daily_rate=10.0, event_daily_rate=50.0, spaces=15)
        calendar = StaticEventCalendar([date(2026, 5, 16), date(2026, 5, 16), date(2026, 6, 1)])
        self.assertAlmostEqual(service.compute_month_yield(cfg, calendar, 2026, 5), 29 * 150 + 750)

    def test_cash_flow_and_free_cash_flow(self):
        out = service.compute_cash_flow(CashFlowInputs(hotel_lease=37_500.0), normalizer=self.fx)
        self.assertAlmostEqual(out.annual_projection, 450_000.0)
        fcf = service.compute_free_cash_flow(out.monthly_sovereign_salary, _snapshot().debts, cash_buffer=60_000.0,
                                             normalizer=self.fx)
        self.assertAlmostEqual(fcf.monthly_free_cash_flow, 37_500.0 - 400_000.0 * 0.05 / 12)
        self.assertFalse(fcf.has_warning)

    def test_iht_uses_configured_threshold(self):
        snap = _snapshot()
        personal = [Entity(id="e1", name="Me", kind="Individual")]
        out = service.compute_iht_exposure(snap.assets, personal, normalizer=self.fx)
        self.assertEqual(out.threshold, 2_000_000.0)
        self.assertFalse(out.is_exposed)

    def test_consolidation_cost(self):
        self.assertAlmostEqual(service.compute_consolidation_cost(_snapshot(), normalizer=self.fx), 126_000.0)

    def test_pruning_and_signals(self):
        snap = _snapshot()
        self.assertEqual(service.build_pruning_list(snap.assets, date(2026, 1, 1)), [])
        self.assertEqual(service.evaluate_signals(snap, date(2026, 1, 1), normalizer=self.fx), [])

    def test_decay_and_projection(self):
        snap = _snapshot()
        debt = snap.debts[0].model_copy(update={"is_compounding": True, "type": "Equity-Release"})
        decay = service.compute_decay(snap.assets[0], debt)
        self.assertEqual(decay.alert_level, "SAFE")
        self.assertAlmostEqual(decay.years_until_zero, 30.0)
        self.assertAlmostEqual(service.project_equity_at_date(600_000.0, 400_000.0, 5.0, 1), 580_000.0)


class EntryPointValidationTests(unittest.TestCase):
    def setUp(self):
        self.fx = CurrencyNormalizer(DEFAULT_FX_RATES, "GBP")
        self.snap = _snapshot()

    def test_iht_rejects_negative_valuation(self):
        asset = self.snap.assets[0].model_copy(update={"valuation": -5_000_000.0})
        personal = [Entity(id="e1", name="Me", kind="Individual")]
        with self.assertRaises(InvalidInputError) as ctx:
            service.compute_iht_exposure([asset], personal, normalizer=self.fx)
        self.assertEqual(ctx.exception.reasons, ["asset a1: negative valuation -5000000.0"])

    def test_iht_rejects_unknown_currency(self):
        asset = self.snap.assets[0].model_copy(update={"currency": "JPY"})
        with self.assertRaises(UnknownCurrencyError):
            service.compute_iht_exposure([asset], [], normalizer=self.fx)

    def test_decay_rejects_negative_balance(self):
        debt = self.snap.debts[0].model_copy(update={"is_compounding": True, "current_balance": -1.0})
        with self.assertRaises(InvalidInputError):
            service.compute_decay(self.snap.assets[0], debt, normalizer=self.fx)

    def test_free_cash_flow_rejects_negative_balance(self):
        debt = self.snap.debts[0].model_copy(update={"current_balance": -1.0})
        with self.assertRaises(InvalidInputError):
            service.compute_free_cash_flow(10_000.0, iter([debt]), normalizer=self.fx)

    def test_consolidation_cost_validates_snapshot(self):
        bad = self.snap.model_copy(update={"debts": [self.snap.debts[0].model_copy(update={"asset_id": "gone"})]})
        with self.assertRaises(InvalidInputError):
            service.compute_consolidation_cost(bad, normalizer=self.fx)


class DebtEquitySwapServiceTests(unittest.TestCase):
    def setUp(self):
        self.fx = CurrencyNormalizer(DEFAULT_FX_RATES, "GBP")

    def test_asset_swap(self):
        swap = service.compute_debt_equity_swap(_snapshot(), "a1", 100_000.0, "GBP", normalizer=self.fx)
        self.assertAlmostEqual(swap.net_equity, 600_000.0)
        self.assertAlmostEqual(swap.ownership_purchased, 100_000.0 / 600_000.0 * 100)
        self.assertAlmostEqual(swap.ownership_after, 70.0 + 100_000.0 / 600_000.0 * 100)

    def test_unknown_asset(self):
        with self.assertRaises(InvalidInputError):
            service.compute_debt_equity_swap(_snapshot(), "nope", 100_000.0, "GBP", normalizer=self.fx)

    def test_entity_swap(self):
        swaps = service.compute_entity_debt_equity_swap(_snapshot(), "e1", 500_000.0, "GBP", normalizer=self.fx)
        self.assertEqual([s.target_asset_id for s in swaps], ["a1"])
        self.assertAlmostEqual(swaps[0].equity_purchased, 180_000.0)


if __name__ == "__main__":
    unittest.main()
