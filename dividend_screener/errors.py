"""Exceptions raised by dividend_screener.

Ingestion and screening errors abort the whole screening request.  Metric and
market-data errors only concern the company being scored.
"""

from typing import Optional, Sequence


class ScreenerError(Exception):
    """Base class for all errors raised by the package."""


class CategoryNotFound(ScreenerError):
    def __init__(self, category: str, available: Sequence[str] = ()):
        self.category = category
        self.available = list(available)
        msg = f"Category '{category}' not found"
        if self.available:
            msg += f" (available: {', '.join(self.available)})"
        super().__init__(msg)


class MissingColumn(ScreenerError):
    def __init__(self, column: str):
        self.column = column
        super().__init__(f"Column '{column}' does not exist")


class TableConstructionError(ScreenerError):
    """Sheet rows could not be assembled into an aligned table."""


class SymbolNotFound(ScreenerError):
    def __init__(self, symbol: str):
        self.symbol = symbol
        super().__init__(f"Company symbol '{symbol}' not present in selected list")


class EmptyHistory(ScreenerError):
    """No dividend payments are available."""


class InsufficientHistory(ScreenerError):
    """Too few dividend payments to compute a growth rate."""


class DivisionByZero(ScreenerError, ZeroDivisionError):
    """A metric denominator (price, payment or cash flow) is zero."""


class ExternalDataIncomplete(ScreenerError):
    def __init__(self, symbol: str, field: str, detail: Optional[str] = None):
        self.symbol = symbol
        self.field = field
        msg = f"{symbol}: missing {field}"
        if detail:
            msg += f" ({detail})"
        super().__init__(msg)
