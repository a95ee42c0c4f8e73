import unittest

import pandas as pd
from pandas.testing import assert_frame_equal

from dividend_screener import screening
from dividend_screener.errors import MissingColumn

INFLATION = 3.4
SP500_DIVY = 1.61
MAX_DIVY = 10.0


def companies(**extra):
    data = {"Symbol": ["ABM", "INTC", "CAT"], "Div Yield": [5.54, 1.32, 4.0]}
    data.update(extra)
    return pd.DataFrame(data)


class TestYieldStage(unittest.TestCase):
    def test_keeps_yields_above_floor_sorted(self):
        result = screening.screen_yield(companies(), SP500_DIVY, INFLATION, 3.9, MAX_DIVY)
        expected = pd.DataFrame({"Symbol": ["ABM", "CAT"], "Div Yield": [5.54, 4.0]})
        assert_frame_equal(result, expected)

    def test_min_yield_above_floor_restricts(self):
        table = pd.DataFrame({"Symbol": ["ABM", "INTC", "CAT"], "Div Yield": [9.0, 1.32, 4.0]})
        result = screening.screen_yield(table, SP500_DIVY, INFLATION, 5.0, MAX_DIVY)
        self.assertEqual(result["Symbol"].tolist(), ["ABM"])
        result = screening.screen_yield(companies(), SP500_DIVY, INFLATION, 5.0, MAX_DIVY)
        self.assertEqual(result["Symbol"].tolist(), ["ABM"])

    def test_min_yield_below_floor_changes_nothing(self):
        low = screening.screen_yield(companies(), SP500_DIVY, INFLATION, 0.0, MAX_DIVY)
        at_floor = screening.screen_yield(companies(), SP500_DIVY, INFLATION, 3.4, MAX_DIVY)
        assert_frame_equal(low, at_floor)
        self.assertEqual(low["Symbol"].tolist(), ["ABM", "CAT"])

    def test_max_yield(self):
        table = pd.DataFrame({"Symbol": ["ABM", "INTC", "CAT"], "Div Yield": [11.0, 1.32, 4.0]})
        result = screening.screen_yield(table, SP500_DIVY, INFLATION, 3.0, MAX_DIVY)
        self.assertEqual(result["Symbol"].tolist(), ["CAT"])

    def test_bounds(self):
        # Floor is exclusive, ceiling inclusive
        table = pd.DataFrame({"Symbol": ["LOW", "TOP"], "Div Yield": [4.0, 10.0]})
        result = screening.screen_yield(table, SP500_DIVY, INFLATION, 4.0, 10.0)
        self.assertEqual(result["Symbol"].tolist(), ["TOP"])

    def test_floor_from_index_yield(self):
        self.assertAlmostEqual(screening.minimum_yield(3.0, 3.4, 1.0), 4.5)
        self.assertAlmostEqual(screening.minimum_yield(1.61, 3.4, 1.0), 3.4)
        self.assertAlmostEqual(screening.minimum_yield(1.61, 3.4, 4.7), 4.7)

    def test_min_above_max_matches_nothing(self):
        result = screening.screen_yield(companies(), SP500_DIVY, INFLATION, 6.0, 5.0)
        self.assertTrue(result.empty)
        self.assertEqual(list(result.columns), ["Symbol", "Div Yield"])

    def test_idempotent(self):
        once = screening.screen_yield(companies(), SP500_DIVY, INFLATION, 3.9, MAX_DIVY)
        twice = screening.screen_yield(once, SP500_DIVY, INFLATION, 3.9, MAX_DIVY)
        assert_frame_equal(once, twice)

    def test_missing_yield_is_excluded(self):
        table = pd.DataFrame({"Symbol": ["ABM", "NAN"], "Div Yield": [5.54, float("nan")]})
        result = screening.screen_yield(table, SP500_DIVY, INFLATION, 3.9, MAX_DIVY)
        self.assertEqual(result["Symbol"].tolist(), ["ABM"])

    def test_missing_column(self):
        with self.assertRaises(MissingColumn) as cm:
            screening.screen_yield(pd.DataFrame({"Symbol": ["ABM"]}), SP500_DIVY, INFLATION, 3.9, MAX_DIVY)
        self.assertEqual(cm.exception.column, "Div Yield")


class TestPayoutStage(unittest.TestCase):
    def test_payout(self):
        table = companies(**{"Current Div": [0.54, 1.62, 0.14], "CF/Share": [10.0, 2.0, 20.0]})
        result = screening.screen_payout(table, 0.75)
        expected = pd.DataFrame({
            "Symbol": ["ABM", "CAT"],
            "Div Yield": [5.54, 4.0],
            "Current Div": [0.54, 0.14],
            "CF/Share": [10.0, 20.0],
        })
        assert_frame_equal(result, expected)

    def test_ratio_at_threshold_is_excluded(self):
        table = companies(**{"Current Div": [0.75, 0.5, 0.1], "CF/Share": [1.0, 1.0, 1.0]})
        result = screening.screen_payout(table, 0.75)
        self.assertEqual(result["Symbol"].tolist(), ["CAT", "INTC"])
        ratios = result["Current Div"] / result["CF/Share"]
        self.assertTrue((ratios < 0.75).all())

    def test_sorted_by_yield_not_ratio(self):
        table = companies(**{"Current Div": [0.5, 0.1, 0.01], "CF/Share": [1.0, 1.0, 1.0]})
        result = screening.screen_payout(table, 0.75)
        self.assertEqual(result["Symbol"].tolist(), ["ABM", "CAT", "INTC"])

    def test_missing_values_are_excluded(self):
        table = companies(**{"Current Div": [0.5, None, 0.1], "CF/Share": [1.0, 1.0, None]})
        result = screening.screen_payout(table, 0.75)
        self.assertEqual(result["Symbol"].tolist(), ["ABM"])

    def test_missing_column(self):
        with self.assertRaises(MissingColumn) as cm:
            screening.screen_payout(companies(**{"Current Div": [0.5, 0.1, 0.1]}), 0.75)
        self.assertEqual(cm.exception.column, "CF/Share")
        # The ranking column is required too
        with self.assertRaises(MissingColumn) as cm:
            screening.screen_payout(pd.DataFrame({"Current Div": [0.5], "CF/Share": [1.0]}), 0.75)
        self.assertEqual(cm.exception.column, "Div Yield")


class TestGrowthStage(unittest.TestCase):
    def growth_table(self):
        return companies(**{
            "Current Div": [0.54, 1.62, 0.14],
            "CF/Share": [10.0, 2.0, 20.0],
            "DGR 1Y": [7.05, 0.68, 3.94],
            "DGR 3Y": [8.51, 0.91, 3.07],
            "DGR 5Y": [8.96, 3.36, 5.29],
            "DGR 10Y": [8.87, 9.34, 4.97],
        })

    def test_growth(self):
        result = screening.screen_growth(self.growth_table(), 7.0)
        expected = self.growth_table().iloc[[0]].reset_index(drop=True)
        assert_frame_equal(result, expected)

    def test_sorted_by_dgr_1y(self):
        result = screening.screen_growth(self.growth_table(), 0.0)
        self.assertEqual(result["Symbol"].tolist(), ["ABM", "CAT"])
        self.assertTrue((result["DGR 1Y"] >= 0.0).all())
        self.assertTrue((result["DGR 5Y"] / result["DGR 10Y"] >= 1.0).all())

    def test_slowing_growth_is_excluded(self):
        table = pd.DataFrame({
            "Symbol": ["SLOW", "FLAT"],
            "DGR 1Y": [20.0, 12.0],
            "DGR 5Y": [9.0, 10.0],
            "DGR 10Y": [10.0, 10.0],
        })
        result = screening.screen_growth(table, 10.0)
        self.assertEqual(result["Symbol"].tolist(), ["FLAT"])

    def test_missing_dgr_is_excluded(self):
        table = pd.DataFrame({
            "Symbol": ["ABM", "NEW"],
            "DGR 1Y": [12.0, 15.0],
            "DGR 5Y": [10.0, 10.0],
            "DGR 10Y": [9.0, None],
        })
        result = screening.screen_growth(table, 10.0)
        self.assertEqual(result["Symbol"].tolist(), ["ABM"])

    def test_missing_column(self):
        with self.assertRaises(MissingColumn) as cm:
            screening.screen_growth(companies(**{"DGR 1Y": [1.0, 1.0, 1.0]}), 7.0)
        self.assertEqual(cm.exception.column, "DGR 5Y")


class TestPipeline(unittest.TestCase):
    def test_thresholds_payout_ratio(self):
        self.assertAlmostEqual(screening.Thresholds(max_payout_rate=75.0).max_payout_ratio, 0.75)

    def test_run_pipeline(self):
        table = pd.DataFrame({
            "Symbol": ["ABM", "INTC", "CAT", "MMM"],
            "Div Yield": [5.54, 1.32, 6.0, 7.0],
            "Current Div": [0.54, 1.62, 0.14, 9.0],
            "CF/Share": [10.0, 2.0, 20.0, 10.0],
            "DGR 1Y": [12.0, 0.68, 11.0, 15.0],
            "DGR 5Y": [8.96, 3.36, 5.29, 9.0],
            "DGR 10Y": [8.87, 9.34, 4.97, 8.0],
        })
        thresholds = screening.Thresholds(
            min_yield=4.7, max_yield=10.0, min_growth_rate=10.0,
            max_payout_rate=75.0, inflation=3.4, index_yield=1.61,
        )
        result = screening.run_pipeline(table, thresholds)
        # MMM fails the payout stage, INTC the yield stage
        self.assertEqual(result["Symbol"].tolist(), ["ABM", "CAT"])
        self.assertEqual(list(result.index), [0, 1])

    def test_input_not_modified(self):
        table = companies()
        before = table.copy()
        screening.screen_yield(table, SP500_DIVY, INFLATION, 3.9, MAX_DIVY)
        assert_frame_equal(table, before)


if __name__ == "__main__":
    unittest.main()
