"""Market data from the Polygon.io REST API.

Fetches a company's dividend history, previous close price and quarterly
financial statements, and combines them into a :class:`CompanyScore`.
Missing fields in the responses raise :class:`ExternalDataIncomplete` so that
only the company being scored fails.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple

import requests

from . import config
from .errors import EmptyHistory, ExternalDataIncomplete
from .utils import (
    DividendPayment,
    annualized_yield,
    average_growth_rate,
    payout_ratio,
    sort_history,
)

logger = logging.getLogger(__name__)

DIVIDENDS_URL = config.POLYGON_API_URL + "/v3/reference/dividends"
PREV_CLOSE_URL = config.POLYGON_API_URL + "/v2/aggs/ticker/{symbol}/prev"
FINANCIALS_URL = config.POLYGON_API_URL + "/vX/reference/financials"

NET_CASH_FLOW = "net_cash_flow_continuing"
AVERAGE_SHARES = "basic_average_shares"


@dataclass(frozen=True)
class CompanyScore:
    symbol: str
    price: float
    current_div: float
    currency: str
    frequency: int
    div_yield: float
    growth_rate: float
    payout_ratio: float


def _get(url: str, api_key: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    query = dict(params or {})
    query["apiKey"] = api_key
    response = requests.get(url, params=query, headers=config.HEADERS, timeout=config.HTTP_TIMEOUT)
    response.raise_for_status()
    return response.json()


def _get_results(url: str, api_key: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
    """Collect ``results`` from every page of a paginated endpoint."""
    data = _get(url, api_key, params)
    results = list(data.get("results") or [])
    next_url = data.get("next_url")
    while next_url:
        # next_url already carries the query, only the key is missing
        data = _get(next_url, api_key)
        results.extend(data.get("results") or [])
        next_url = data.get("next_url")
    return results


def _parse_date(symbol: str, field: str, raw: Optional[str]) -> date:
    if not raw:
        raise ExternalDataIncomplete(symbol, field)
    try:
        return datetime.strptime(raw, "%Y-%m-%d").date()
    except ValueError:
        raise ExternalDataIncomplete(symbol, field, f"unparseable date {raw!r}")


def _number(symbol: str, field: str, raw: Any, kind=float):
    if raw is None:
        raise ExternalDataIncomplete(symbol, field)
    try:
        return kind(raw)
    except (TypeError, ValueError):
        raise ExternalDataIncomplete(symbol, field, f"not a number: {raw!r}")


def fetch_dividends(symbol: str, api_key: str) -> Tuple[List[DividendPayment], int, str]:
    """Return ``(history, frequency, currency)`` with history oldest first."""
    records = _get_results(DIVIDENDS_URL, api_key, {"ticker": symbol, "limit": 1000})
    if not records:
        raise EmptyHistory(f"{symbol}: no dividend data")

    payments = []
    for record in records:
        logger.info("%s: ex date: %s, payment date: %s, frequency: %s, div type: %s amount: %s",
                    symbol, record.get("ex_dividend_date"), record.get("pay_date"),
                    record.get("frequency"), record.get("dividend_type"), record.get("cash_amount"))
        amount = _number(symbol, "cash_amount", record.get("cash_amount"))
        pay_date = _parse_date(symbol, "pay_date", record.get("pay_date"))
        payments.append(DividendPayment(pay_date, amount))

    frequency = _number(symbol, "frequency", records[0].get("frequency"), int)
    currency = records[0].get("currency") or ""
    return sort_history(payments), frequency, currency


def fetch_previous_close(symbol: str, api_key: str) -> float:
    """Return the previous day's closing price."""
    data = _get(PREV_CLOSE_URL.format(symbol=symbol), api_key, {"adjusted": "true"})
    results = data.get("results") or []
    if not results:
        raise ExternalDataIncomplete(symbol, "previous close price")
    return _number(symbol, "previous close price", results[0].get("c"))


def fetch_financials(symbol: str, api_key: str) -> List[Dict[str, Any]]:
    """Return the quarterly financial statement records for ``symbol``."""
    return _get_results(FINANCIALS_URL, api_key,
                        {"ticker": symbol, "timeframe": "quarterly", "limit": 100})


def _line_item(symbol: str, record: Dict[str, Any], statement: str, item: str) -> float:
    items = (record.get("financials") or {}).get(statement)
    if not items:
        raise ExternalDataIncomplete(symbol, statement)
    entry = items.get(item) or {}
    if entry.get("value") is None:
        raise ExternalDataIncomplete(symbol, item, f"not reported in {statement}")
    logger.info("%s: %s %s %s: %s of %s, labeled as %s",
                record.get("company_name"), record.get("fiscal_year"), record.get("fiscal_period"),
                item, entry["value"], entry.get("unit"), entry.get("label"))
    return _number(symbol, item, entry["value"])


def find_statement_values(symbol: str, financials: List[Dict[str, Any]],
                          pay_date: date) -> Tuple[float, float]:
    """Return ``(net cash flow, basic average shares)`` of the quarter
    containing ``pay_date``."""
    for record in financials:
        if record.get("timeframe") != "quarterly":
            continue
        logger.info("%s: start date: %s, end date: %s, fiscal_year: %s, fiscal_period: %s",
                    symbol, record.get("start_date"), record.get("end_date"),
                    record.get("fiscal_year"), record.get("fiscal_period"))
        try:
            start = _parse_date(symbol, "start_date", record.get("start_date"))
            end = _parse_date(symbol, "end_date", record.get("end_date"))
        except ExternalDataIncomplete as e:
            logger.warning("Skipping statement without a usable window: %s", e)
            continue
        if start < pay_date < end:
            net_cash_flow = _line_item(symbol, record, "cash_flow_statement", NET_CASH_FLOW)
            shares = _line_item(symbol, record, "income_statement", AVERAGE_SHARES)
            return net_cash_flow, shares
    raise ExternalDataIncomplete(symbol, "financial statement",
                                 f"no quarter contains payment date {pay_date}")


def score_company(symbol: str, api_key: str) -> CompanyScore:
    """Compute yield, growth and payout ratio of ``symbol`` from market data."""
    history, frequency, currency = fetch_dividends(symbol, api_key)
    current = history[-1]
    growth = average_growth_rate(history)
    logger.info("Current Div: %s %s, Frequency: %d, Average DGR(samples: %d): %.2f",
                current.cash_amount, currency, frequency, len(history), growth)

    price = fetch_previous_close(symbol, api_key)
    divy = annualized_yield(history, price, frequency)
    logger.info("Stock price: %s, Div Yield[%%]: %.2f", price, divy)

    financials = fetch_financials(symbol, api_key)
    net_cash_flow, shares = find_statement_values(symbol, financials, current.pay_date)
    payout = payout_ratio(current.cash_amount, shares, net_cash_flow)

    return CompanyScore(
        symbol=symbol,
        price=price,
        current_div=current.cash_amount,
        currency=currency,
        frequency=frequency,
        div_yield=divy,
        growth_rate=growth,
        payout_ratio=payout,
    )
