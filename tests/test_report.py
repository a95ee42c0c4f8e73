import unittest

import pandas as pd

from dividend_screener import report
from dividend_screener.errors import MissingColumn, SymbolNotFound
from dividend_screener.fetch import CompanyScore


def champions():
    return pd.DataFrame({
        "Company": ["ABM Industries", "Intel", "Caterpillar"],
        "Symbol": ["ABM", "INTC", "CAT"],
        "Div Yield": [5.54, 1.32, 4.0],
        "Current Div": [0.54, 1.62, 0.14],
        "Price": [36.0, 30.0, None],
        "Annualized": [2.16, 0.5, 5.2],
        "CF/Share": [10.0, 2.0, 20.0],
    })


class TestProject(unittest.TestCase):
    def test_full_table(self):
        summary = report.project(champions())
        self.assertEqual(
            list(summary.columns),
            ["Symbol", "Company", "Current Div", "Div Yield", "Price", "Div Payout Rate[%]"],
        )
        self.assertEqual(summary["Symbol"].tolist(), ["ABM", "INTC", "CAT"])
        rates = summary["Div Payout Rate[%]"].tolist()
        self.assertAlmostEqual(rates[0], 21.6)
        self.assertAlmostEqual(rates[1], 25.0)
        self.assertAlmostEqual(rates[2], 26.0)

    def test_single_symbol(self):
        summary = report.project(champions(), "CAT")
        self.assertEqual(len(summary), 1)
        self.assertEqual(summary["Company"][0], "Caterpillar")
        self.assertAlmostEqual(summary["Div Payout Rate[%]"][0], 26.0)

    def test_unknown_symbol(self):
        with self.assertRaises(SymbolNotFound) as cm:
            report.project(champions(), "MSFT")
        self.assertEqual(cm.exception.symbol, "MSFT")

    def test_empty_table(self):
        summary = report.project(champions().iloc[0:0])
        self.assertTrue(summary.empty)
        self.assertIn("Div Payout Rate[%]", summary.columns)

    def test_missing_column(self):
        with self.assertRaises(MissingColumn) as cm:
            report.project(champions().drop(columns=["Annualized"]))
        self.assertEqual(cm.exception.column, "Annualized")

    def test_source_table_untouched(self):
        table = champions()
        report.project(table)
        self.assertNotIn("Div Payout Rate[%]", table.columns)


class TestRender(unittest.TestCase):
    def test_render_missing_values(self):
        text = report.render(report.project(champions(), "CAT"))
        self.assertIn("Caterpillar", text)
        self.assertIn("N/A", text)
        self.assertIn("Div Payout Rate[%]", text)

    def test_render_scores(self):
        score = CompanyScore(
            symbol="ABM", price=40.0, current_div=0.225, currency="USD", frequency=4,
            div_yield=2.25, growth_rate=1.234, payout_ratio=30.5,
        )
        text = report.render_scores([score])
        self.assertIn("ABM", text)
        self.assertIn("0.225 USD", text)
        self.assertIn("1.23", text)


if __name__ == "__main__":
    unittest.main()
