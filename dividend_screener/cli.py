"""Command‑line interface for dividend_screener.

Provides sub‑commands to screen a dividend list workbook against yield,
payout and growth thresholds, and to score companies from Polygon.io
market data.
"""

import zipfile

import click
import requests
from openpyxl.utils.exceptions import InvalidFileException
from tqdm import tqdm

from . import __version__
from . import config
from . import fetch
from . import report
from . import screening
from . import sheet
from .errors import ScreenerError

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


@click.group()
@click.version_option(version=__version__, prog_name="dividend-screener")
@click.option("--log-level", default="ERROR", show_default=True,
              type=click.Choice(LOG_LEVELS, case_sensitive=False), help="Logging verbosity.")
def main(log_level):
    """Dividend growth companies screener.

    Lists in XLSX format can be fetched from
    https://moneyzine.com/investments/dividend-champions/
    """
    config.configure_logging(config.LoggingConfig(level=log_level))


def load_table(data: str, category: str):
    try:
        sheets = sheet.read_workbook(data)
    except (OSError, InvalidFileException, zipfile.BadZipFile) as e:
        raise click.ClickException(f"Could not open XLSX {data}: {e}")
    try:
        return sheet.ingest(sheets, category)
    except ScreenerError as e:
        raise click.ClickException(str(e))


@main.command()
@click.option("--data", required=True, type=click.Path(exists=True, dir_okay=False),
              help="Dividend list workbook in XLSX format.")
@click.option("--list", "category", default=config.DEFAULT_LIST, show_default=True,
              help='Name of the list: "Champions", "Contenders", "Challengers" or "All".')
@click.option("--company", "companies", multiple=True,
              help="Symbol of a company from the list to show instead of screening (repeatable).")
@click.option("--inflation", type=float, default=config.DEFAULT_INFLATION, show_default=True,
              help="Average USA inflation during investment time (%).")
@click.option("--min-div-yield", type=float, default=config.DEFAULT_MIN_DIV_YIELD, show_default=True,
              help="Minimum accepted dividend yield (%).")
@click.option("--max-div-yield", type=float, default=config.DEFAULT_MAX_DIV_YIELD, show_default=True,
              help="Maximum accepted dividend yield (%).")
@click.option("--min-div-growth-rate", type=float, default=config.DEFAULT_MIN_DIV_GROWTH_RATE,
              show_default=True, help="Minimum accepted 1 year dividend growth rate (%).")
@click.option("--max-div-payout-rate", type=float, default=config.DEFAULT_MAX_DIV_PAYOUT_RATE,
              show_default=True, help="Maximum accepted dividend payout rate (%).")
@click.option("--sp500-divy", type=float, default=config.DEFAULT_SP500_DIVY, show_default=True,
              help="Average dividend yield of the S&P 500 (%).")
@click.pass_context
def screen(ctx, data, category, companies, inflation, min_div_yield, max_div_yield,
           min_div_growth_rate, max_div_payout_rate, sp500_divy):
    """Shortlist companies of a list, or show selected companies."""
    table = load_table(data, category)

    # Without handpicked companies run the whole screening
    if not companies:
        thresholds = screening.Thresholds(
            min_yield=min_div_yield,
            max_yield=max_div_yield,
            min_growth_rate=min_div_growth_rate,
            max_payout_rate=max_div_payout_rate,
            inflation=inflation,
            index_yield=sp500_divy,
        )
        try:
            summary = report.project(screening.run_pipeline(table, thresholds))
        except ScreenerError as e:
            raise click.ClickException(str(e))

        if summary.empty:
            click.echo("No companies matched all filters.")
        else:
            click.echo(f"Found {len(summary)} companies matching your criteria:\n")
            click.echo(report.render(summary))
        return

    failed = []
    for symbol in companies:
        try:
            summary = report.project(table, symbol)
        except ScreenerError as e:
            click.echo(f"Error: {e}", err=True)
            failed.append(symbol)
            continue
        click.echo(report.render(summary))

    if failed:
        click.echo(f"\nNot shown: {', '.join(failed)}", err=True)
        ctx.exit(1)


@main.command()
@click.argument("symbols", nargs=-1, required=True)
@click.option("--api-key", envvar=config.POLYGON_API_KEY_ENV, required=True,
              help=f"Polygon.io API key (defaults to ${config.POLYGON_API_KEY_ENV}).")
@click.pass_context
def score(ctx, symbols, api_key):
    """Compute dividend yield, growth and payout ratio from market data."""
    scores = []
    failed = []
    for symbol in tqdm(symbols, desc="Scoring companies", disable=len(symbols) < 2):
        try:
            scores.append(fetch.score_company(symbol, api_key))
        except (ScreenerError, requests.RequestException) as e:
            click.echo(f"\nError scoring {symbol}: {e}", err=True)
            failed.append(symbol)

    if scores:
        click.echo(report.render_scores(scores))
    if failed:
        click.echo(f"\nNot scored: {', '.join(failed)}", err=True)
        ctx.exit(1)


if __name__ == "__main__":
    main()
