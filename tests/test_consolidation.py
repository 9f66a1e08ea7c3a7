import unittest

from estate_engine.config import DEFAULT_FX_RATES
from estate_engine.engine.consolidation import consolidation_scenario, sale_impact, total_consolidation_cost
from estate_engine.engine.currency import CurrencyNormalizer
from estate_engine.models import Asset, Debt, OwnerShare


def _asset(asset_id="hotel", valuation=1_000_000.0, minority=(20.0, 10.0), currency="GBP"):
    return Asset(
        id=asset_id,
        entity_id="holdco",
        name=asset_id,
        valuation=valuation,
        currency=currency,
        principal_owner=OwnerShare(name="principal", percentage=100.0 - sum(minority)),
        minority_owners=[OwnerShare(name=f"m{i}", percentage=p) for i, p in enumerate(minority)],
    )


def _debt(asset_id="hotel", balance=400_000.0):
    return Debt(id=f"d-{asset_id}", asset_id=asset_id, creditor="Bank", principal=balance,
                current_balance=balance, interest_rate=5.0, currency="GBP")


class ConsolidationTests(unittest.TestCase):
    def setUp(self):
        self.fx = CurrencyNormalizer(DEFAULT_FX_RATES, "GBP")

    def test_buyout_at_discount(self):
        s = consolidation_scenario(_asset(), [_debt()], self.fx, "GBP", 0.7)
        self.assertAlmostEqual(s.net_equity, 600_000.0)
        self.assertAlmostEqual(s.minority_equity, 180_000.0)
        self.assertAlmostEqual(s.buyout_cost, 126_000.0)
        self.assertAlmostEqual(s.principal_equity_after, 600_000.0)

    def test_wholly_owned_asset_costs_nothing(self):
        s = consolidation_scenario(_asset(minority=()), [_debt()], self.fx, "GBP")
        self.assertEqual(s.buyout_cost, 0.0)

    def test_total_matches_debts_to_assets(self):
        assets = [_asset("hotel"), _asset("villa", 500_000.0, (50.0,), "EUR")]
        debts = [_debt("hotel"), _debt("villa", 25_000.0)]
        total = total_consolidation_cost(assets, debts, self.fx, "GBP", 0.75)
        villa_net = 500_000.0 * 0.85 - 25_000.0
        self.assertAlmostEqual(total, 180_000.0 * 0.75 + villa_net * 0.5 * 0.75)

    def test_sale_impact(self):
        out = sale_impact(2_000_000.0, 800_000.0, 500_000.0, 600_000.0)
        self.assertEqual(out["profit"], 1_200_000.0)
        self.assertEqual(out["target_debt_payoff"], 500_000.0)
        self.assertEqual(out["remaining_for_consolidation"], 700_000.0)
        self.assertTrue(out["can_complete_consolidation"])
        self.assertFalse(sale_impact(1_000_000.0, 800_000.0, 500_000.0, 1.0)["can_complete_consolidation"])


if __name__ == "__main__":
    unittest.main()
