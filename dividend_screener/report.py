"""Summary tables printed by the CLI."""

import logging
from typing import List, Optional, Sequence

import pandas as pd
from tabulate import tabulate

from .errors import MissingColumn, SymbolNotFound
from .fetch import CompanyScore

logger = logging.getLogger(__name__)

SUMMARY_COLUMNS = ["Symbol", "Company", "Current Div", "Div Yield", "Price"]
PAYOUT_RATE = "Div Payout Rate[%]"


def _require(table: pd.DataFrame, columns: Sequence[str]) -> None:
    for column in columns:
        if column not in table.columns:
            raise MissingColumn(column)


def project(table: pd.DataFrame, symbol: Optional[str] = None) -> pd.DataFrame:
    """Select the summary columns and add the payout rate.

    ``Div Payout Rate[%]`` is ``Annualized / CF/Share * 100``.  When
    ``symbol`` is given only that company is kept.
    """
    _require(table, SUMMARY_COLUMNS + ["Annualized", "CF/Share"])

    if symbol is not None:
        table = table[table["Symbol"] == symbol]
        if table.empty:
            raise SymbolNotFound(symbol)

    selected = table[SUMMARY_COLUMNS].reset_index(drop=True)
    annualized = pd.to_numeric(table["Annualized"], errors="coerce")
    cf_share = pd.to_numeric(table["CF/Share"], errors="coerce")
    selected[PAYOUT_RATE] = (annualized / cf_share * 100.0).to_numpy()
    logger.info("Selected companies: %d", len(selected))
    return selected


def render(table: pd.DataFrame) -> str:
    """Format a projection as a grid, showing missing values as N/A."""
    display = table.astype(object).where(table.notna(), "N/A")
    return tabulate(display, headers="keys", tablefmt="grid", showindex=False, floatfmt=".2f")


def render_scores(scores: List[CompanyScore]) -> str:
    rows = [
        {
            "Symbol": s.symbol,
            "Price": round(s.price, 2),
            "Current Div": f"{s.current_div} {s.currency}",
            "Frequency": s.frequency,
            "Div Yield (%)": round(s.div_yield, 2),
            "Avg DGR (%)": round(s.growth_rate, 2),
            "Payout (%)": round(s.payout_ratio, 2),
        }
        for s in scores
    ]
    return tabulate(rows, headers="keys", tablefmt="grid")
