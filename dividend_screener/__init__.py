"""Top level package for dividend_screener.

The package provides a small CLI tool that screens lists of dividend growth
companies (Champions, Contenders, Challengers) from an XLSX workbook against
yield, payout and growth thresholds, and scores single companies from
Polygon.io dividend, price and financial statement data.
"""

__version__ = "1.0.0"

__all__ = ["cli", "config", "errors", "fetch", "report", "screening", "sheet", "utils"]
