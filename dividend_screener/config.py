"""Defaults and logging setup for dividend_screener."""

import logging
from dataclasses import dataclass

# Screening defaults (percentages)
DEFAULT_LIST = "Champions"
DEFAULT_INFLATION = 3.4
DEFAULT_MIN_DIV_YIELD = 4.7
DEFAULT_MAX_DIV_YIELD = 10.0
DEFAULT_MIN_DIV_GROWTH_RATE = 10.0
DEFAULT_MAX_DIV_PAYOUT_RATE = 75.0
DEFAULT_SP500_DIVY = 1.61

# The reference index yield is scaled by this factor to get a yield floor.
INDEX_YIELD_MULTIPLIER = 1.5
# DGR 5Y / DGR 10Y must be at least this (no slowing dividend growth).
MIN_DGR_5Y_TO_10Y_RATIO = 1.0

POLYGON_API_URL = "https://api.polygon.io"
POLYGON_API_KEY_ENV = "POLYGON_API_KEY"
HTTP_TIMEOUT = 15

HEADERS = {
    "User-Agent": "dividend-screener/1.0",
    "Accept": "application/json",
}


@dataclass(frozen=True)
class LoggingConfig:
    """How the process logs.  Built once by the CLI and applied at start-up."""

    level: str = "ERROR"
    fmt: str = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
    datefmt: str = "%Y-%m-%d %H:%M:%S"


def configure_logging(config: LoggingConfig) -> None:
    """Install a single stream handler on the root logger."""
    level = logging.getLevelName(config.level.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {config.level}")
    logging.basicConfig(level=level, format=config.fmt, datefmt=config.datefmt, force=True)
