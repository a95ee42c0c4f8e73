"""Dividend metrics computed from a payment history.

Provides:
* annualized_yield – trailing dividend yield for a share price.
* average_growth_rate – mean payment-over-payment growth.
* payout_ratio – share of net cash flow paid out as dividends.

All functions are pure; ``history`` must be ordered by pay date (see
:func:`sort_history`).
"""

from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Sequence

from .errors import DivisionByZero, EmptyHistory, InsufficientHistory


@dataclass(frozen=True)
class DividendPayment:
    """One cash dividend paid on ``pay_date``."""

    pay_date: date
    cash_amount: float


def sort_history(payments: Iterable[DividendPayment]) -> List[DividendPayment]:
    """Return payments oldest first."""
    return sorted(payments, key=lambda p: p.pay_date)


def annualized_yield(history: Sequence[DividendPayment], price: float, frequency: int) -> float:
    """Return the dividend yield as a percentage.

    With a full year of payments (``frequency`` of them) the last
    ``frequency`` payments are summed.  With less history the most recent
    payment is multiplied by ``frequency``.
    """
    if not history:
        raise EmptyHistory("No dividend payments to annualize")
    if price == 0:
        raise DivisionByZero("Share price is zero")

    if len(history) < frequency:
        annual = history[-1].cash_amount * frequency
    else:
        annual = sum(p.cash_amount for p in history[len(history) - frequency:])
    return annual / price * 100.0


def average_growth_rate(history: Sequence[DividendPayment]) -> float:
    """Return the mean of ``(next / prev - 1) * 100`` over consecutive payments."""
    if len(history) < 2:
        raise InsufficientHistory(
            f"Need at least 2 dividend payments, got {len(history)}"
        )

    changes = []
    for prev, cur in zip(history, history[1:]):
        if prev.cash_amount == 0:
            raise DivisionByZero(f"Dividend paid on {prev.pay_date} is zero")
        changes.append((cur.cash_amount / prev.cash_amount - 1.0) * 100.0)
    return sum(changes) / len(changes)


def payout_ratio(current_div: float, shares_outstanding: float, net_cash_flow: float) -> float:
    """Return dividends paid over net cash flow as a percentage."""
    if net_cash_flow == 0:
        raise DivisionByZero("Net cash flow is zero")
    return current_div * shares_outstanding / net_cash_flow * 100.0
