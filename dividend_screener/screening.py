"""Screening stages applied to the company table.

Each stage takes a DataFrame and returns a new, filtered and sorted one:
* screen_yield – dividend yield above inflation and the index yield floor.
* screen_payout – dividend covered by cash flow per share.
* screen_growth – recent dividend growth not slowing down.

A missing value in a column a stage looks at simply fails that stage.
"""

import logging
from dataclasses import dataclass

import pandas as pd

from . import config
from .errors import MissingColumn

logger = logging.getLogger(__name__)

DIV_YIELD = "Div Yield"
CURRENT_DIV = "Current Div"
CF_PER_SHARE = "CF/Share"
DGR_1Y = "DGR 1Y"
DGR_5Y = "DGR 5Y"
DGR_10Y = "DGR 10Y"


@dataclass(frozen=True)
class Thresholds:
    """Screening limits, all in percent."""

    min_yield: float = config.DEFAULT_MIN_DIV_YIELD
    max_yield: float = config.DEFAULT_MAX_DIV_YIELD
    min_growth_rate: float = config.DEFAULT_MIN_DIV_GROWTH_RATE
    max_payout_rate: float = config.DEFAULT_MAX_DIV_PAYOUT_RATE
    inflation: float = config.DEFAULT_INFLATION
    index_yield: float = config.DEFAULT_SP500_DIVY

    @property
    def max_payout_ratio(self) -> float:
        """Payout limit as a fraction, the unit :func:`screen_payout` expects."""
        return self.max_payout_rate / 100.0


def _numeric(table: pd.DataFrame, column: str) -> pd.Series:
    if column not in table.columns:
        raise MissingColumn(column)
    # An all-missing column is stored as text; treat it as NaN
    return pd.to_numeric(table[column], errors="coerce")


def _sorted(table: pd.DataFrame, mask: pd.Series, column: str) -> pd.DataFrame:
    filtered = table[mask.fillna(False).astype(bool)]
    return filtered.sort_values(
        column, ascending=False, kind="mergesort", na_position="last"
    ).reset_index(drop=True)


def minimum_yield(index_yield: float, inflation: float, min_yield: float) -> float:
    """Lowest acceptable yield: beat inflation, 1.5x the index and the user's minimum."""
    return max(min_yield, inflation, index_yield * config.INDEX_YIELD_MULTIPLIER)


def screen_yield(table: pd.DataFrame, index_yield: float, inflation: float,
                 min_yield: float, max_yield: float) -> pd.DataFrame:
    """Keep companies with ``minimum < Div Yield <= max_yield``.

    A yield exactly at the floor is not enough, a yield exactly at the
    maximum is still accepted.  Yields above the maximum are suspicious and
    their cash flow should be checked by hand.
    """
    divy = _numeric(table, DIV_YIELD)
    floor = minimum_yield(index_yield, inflation, min_yield)
    logger.info("Minimal accepted Div Yield: %.2f%%, maximal: %.2f%%", floor, max_yield)
    mask = (divy > floor) & (divy <= max_yield)
    return _sorted(table, mask, DIV_YIELD)


def screen_payout(table: pd.DataFrame, max_ratio: float) -> pd.DataFrame:
    """Keep companies where ``Current Div / CF/Share < max_ratio``.

    ``max_ratio`` is a fraction (0.75 for 75%).  The result stays ranked by
    dividend yield.
    """
    current_div = _numeric(table, CURRENT_DIV)
    cf_share = _numeric(table, CF_PER_SHARE)
    if DIV_YIELD not in table.columns:
        raise MissingColumn(DIV_YIELD)
    mask = (current_div / cf_share) < max_ratio
    return _sorted(table, mask, DIV_YIELD)


def screen_growth(table: pd.DataFrame, min_growth_rate: float) -> pd.DataFrame:
    """Keep companies growing their dividend at least ``min_growth_rate`` a year
    whose 5 year growth is not below the 10 year growth."""
    dgr_1y = _numeric(table, DGR_1Y)
    dgr_5y = _numeric(table, DGR_5Y)
    dgr_10y = _numeric(table, DGR_10Y)
    mask = ((dgr_5y / dgr_10y) >= config.MIN_DGR_5Y_TO_10Y_RATIO) & (dgr_1y >= min_growth_rate)
    return _sorted(table, mask, DGR_1Y)


def run_pipeline(table: pd.DataFrame, thresholds: Thresholds) -> pd.DataFrame:
    """Run the yield, payout and growth stages one after another."""
    shortlisted = screen_yield(
        table,
        thresholds.index_yield,
        thresholds.inflation,
        thresholds.min_yield,
        thresholds.max_yield,
    )
    logger.info("Shortlisted by Div Yield: %d of %d", len(shortlisted), len(table))

    shortlisted = screen_payout(shortlisted, thresholds.max_payout_ratio)
    logger.info("Shortlisted by Div Yield and Div Pay-Out: %d", len(shortlisted))

    shortlisted = screen_growth(shortlisted, thresholds.min_growth_rate)
    logger.info("Shortlisted by Div Yield, Div Pay-Out and Div Growth: %d", len(shortlisted))
    return shortlisted
