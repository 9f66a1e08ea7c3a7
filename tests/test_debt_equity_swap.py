import unittest

from estate_engine.config import DEFAULT_FX_RATES
from estate_engine.engine.currency import CurrencyNormalizer
from estate_engine.engine.debt_equity_swap import debt_equity_swap, entity_debt_equity_swap
from estate_engine.errors import InvalidInputError, UnknownCurrencyError
from estate_engine.models import Asset, Debt, Entity, OwnerShare, PortfolioSnapshot


def _asset(asset_id="hotel", entity_id="holdco", valuation=1_000_000.0, principal=70.0, currency="GBP"):
    return Asset(
        id=asset_id,
        entity_id=entity_id,
        name=asset_id.title(),
        valuation=valuation,
        currency=currency,
        principal_owner=OwnerShare(name="principal", percentage=principal),
        minority_owners=[OwnerShare(name="uncles", percentage=100.0 - principal)],
    )


def _debt(asset_id="hotel", balance=400_000.0, currency="GBP"):
    return Debt(id=f"d-{asset_id}", asset_id=asset_id, creditor="Bank", principal=balance,
                current_balance=balance, interest_rate=5.0, currency=currency)


class AssetSwapTests(unittest.TestCase):
    def setUp(self):
        self.fx = CurrencyNormalizer(DEFAULT_FX_RATES, "GBP")

    def test_loan_buys_minority_equity(self):
        swap = debt_equity_swap(60_000.0, "GBP", _asset(), [_debt()], self.fx)
        self.assertAlmostEqual(swap.net_equity, 600_000.0)
        self.assertAlmostEqual(swap.equity_purchased, 60_000.0)
        self.assertAlmostEqual(swap.ownership_purchased, 10.0)
        self.assertAlmostEqual(swap.ownership_after, 80.0)
        self.assertEqual(swap.target_entity_id, "holdco")
        self.assertIn("converts to 10.0% ownership in Hotel", swap.terms_summary)
        self.assertIn("total ownership will be 80.0%", swap.terms_summary)

    def test_purchase_capped_at_minority_stake(self):
        swap = debt_equity_swap(1_000_000.0, "GBP", _asset(), [_debt()], self.fx)
        self.assertAlmostEqual(swap.equity_purchased, 180_000.0)
        self.assertAlmostEqual(swap.ownership_after, 100.0)

    def test_loan_and_debts_converted_to_asset_currency(self):
        swap = debt_equity_swap(100_000.0, "usd", _asset(), [_debt(currency="EUR")], self.fx)
        self.assertAlmostEqual(swap.net_equity, 1_000_000.0 - 400_000.0 * 0.85)
        self.assertAlmostEqual(swap.equity_purchased, 79_000.0)
        self.assertEqual(swap.currency, "USD")
        self.assertEqual(swap.loan_amount, 100_000.0)

    def test_explicit_starting_ownership(self):
        swap = debt_equity_swap(60_000.0, "GBP", _asset(), [_debt()], self.fx, current_ownership=50.0)
        self.assertAlmostEqual(swap.ownership_after, 60.0)

    def test_no_net_equity(self):
        with self.assertRaises(InvalidInputError):
            debt_equity_swap(60_000.0, "GBP", _asset(), [_debt(balance=1_000_000.0)], self.fx)

    def test_negative_loan(self):
        with self.assertRaises(InvalidInputError):
            debt_equity_swap(-1.0, "GBP", _asset(), [], self.fx)

    def test_unknown_loan_currency(self):
        with self.assertRaises(UnknownCurrencyError):
            debt_equity_swap(1.0, "JPY", _asset(), [], self.fx)


class EntitySwapTests(unittest.TestCase):
    def setUp(self):
        self.fx = CurrencyNormalizer(DEFAULT_FX_RATES, "GBP")
        self.snap = PortfolioSnapshot(
            portfolio_id="family-1",
            entities=[
                Entity(id="holdco", name="Holdings Ltd", kind="Corporate"),
                Entity(id="cyprus", name="Cyprus Co", kind="Corporate"),
            ],
            assets=[
                _asset("hotel"),
                _asset("cafe", valuation=500_000.0, principal=50.0),
                _asset("villa", entity_id="cyprus", valuation=800_000.0, currency="EUR"),
            ],
            debts=[_debt("hotel")],
        )

    def test_loan_split_by_valuation(self):
        swaps = entity_debt_equity_swap(300_000.0, "GBP", self.snap, "holdco", self.fx)
        self.assertEqual([s.target_asset_id for s in swaps], ["hotel", "cafe"])
        self.assertAlmostEqual(swaps[0].loan_amount, 200_000.0)
        self.assertAlmostEqual(swaps[0].equity_purchased, 180_000.0)
        self.assertAlmostEqual(swaps[1].loan_amount, 100_000.0)
        self.assertAlmostEqual(swaps[1].ownership_purchased, 20.0)
        self.assertAlmostEqual(swaps[1].ownership_after, 70.0)

    def test_unvalued_asset_takes_no_share(self):
        snap = self.snap.model_copy(update={"assets": self.snap.assets + [_asset("plot", valuation=0.0)]})
        swaps = entity_debt_equity_swap(300_000.0, "GBP", snap, "holdco", self.fx)
        self.assertEqual([s.target_asset_id for s in swaps], ["hotel", "cafe"])

    def test_unknown_entity(self):
        with self.assertRaises(InvalidInputError):
            entity_debt_equity_swap(1.0, "GBP", self.snap, "nobody", self.fx)

    def test_entity_without_valued_assets(self):
        snap = self.snap.model_copy(update={"entities": self.snap.entities + [Entity(id="shell", name="Shell", kind="Corporate")]})
        with self.assertRaises(InvalidInputError):
            entity_debt_equity_swap(1.0, "GBP", snap, "shell", self.fx)


if __name__ == "__main__":
    unittest.main()
