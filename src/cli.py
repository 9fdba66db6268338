"""Command-line interface for the EGX screener."""

import asyncio
import json
import logging
import math
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table
from rich.text import Text

from config.settings import EGX_INDICES, CriteriaDefaults, Settings, get_settings
from src.clients.gemini_client import GeminiClient
from src.clients.supabase_client import SupabaseWatchlistStore
from src.errors import ConfigurationError, PersistenceError, WatchlistError
from src.filters.criteria import FilterResult, count_undervalued, screen_stocks, watchlist_view
from src.ingest.screening import DataProvider, ScreeningSession
from src.models.criteria import ScreeningCriteria, WindowRange
from src.models.stock import ScreeningResult, StockRecord
from src.ranking.sorter import SortKey, SortToggle
from src.watchlist.synchronizer import WatchlistStore, WatchlistSynchronizer

console = Console()


def setup_logging(settings: Settings, verbose: bool) -> None:
    """Configure logging from settings; verbose switches to DEBUG."""
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level.upper(), logging.WARNING)
    logging.basicConfig(level=level, format=settings.log_format)


def build_provider(settings: Settings) -> DataProvider:
    return GeminiClient.from_settings(settings)


def build_store(settings: Settings) -> Optional[WatchlistStore]:
    return SupabaseWatchlistStore.from_settings(settings)


async def close_clients(*clients) -> None:
    for client in clients:
        close = getattr(client, "close", None)
        if close is not None:
            await close()


# -----------------------------------------------------------------------------
# Formatting
# -----------------------------------------------------------------------------


def format_change(change: float) -> Text:
    """Format a percentage change with color coding."""
    if math.isnan(change):
        return Text("n/a", style="dim")
    color = "green" if change >= 0 else "red"
    return Text(f"{change:+.1f}%", style=color)


def format_optional(value: Optional[float], present: bool) -> str:
    if not present:
        return "—"
    return f"{value:,.2f}"


def format_upside(stock: StockRecord) -> Text:
    if not stock.is_undervalued or stock.upside is None:
        return Text("")
    return Text(f"+{stock.upside * 100:.1f}% Upside", style="bold green")


def display_results(
    result: ScreeningResult,
    stocks: list[StockRecord],
    filtered: FilterResult,
    watchlist: frozenset[str],
) -> None:
    """Display matched stocks, market analysis, watchlist, universe overview and sources."""
    title = EGX_INDICES[result.index].name if result.index in EGX_INDICES else result.index
    table = Table(
        title=f"{title} - Matched Stocks ({filtered.pass_count} of {filtered.total_input})",
        show_lines=False,
    )

    table.add_column("", justify="center")
    table.add_column("Symbol", style="bold")
    table.add_column("Name", style="dim")
    table.add_column("Price", justify="right")
    table.add_column("6M", justify="right")
    table.add_column("1M", justify="right")
    table.add_column("1W", justify="right")
    table.add_column("P/E", justify="right")
    table.add_column("Fair Value", justify="right")
    table.add_column("Upside", justify="right")

    for stock in stocks:
        table.add_row(
            Text("★", style="yellow") if stock.symbol in watchlist else "",
            stock.symbol,
            stock.name,
            f"{stock.current_price:,.2f}",
            format_change(stock.change_6m),
            format_change(stock.change_1m),
            format_change(stock.change_1w),
            f"{stock.pe_ratio:.1f}" if stock.has_pe_ratio else "—",
            format_optional(stock.fair_value, stock.has_fair_value),
            format_upside(stock),
        )

    if stocks:
        console.print(table)
    else:
        console.print("[yellow]No stocks match the current filters.[/yellow]")

    if result.analysis:
        console.print(Panel(result.analysis, title="Market Pulse", border_style="blue"))

    display_watchlist(result, watchlist)
    display_overview(result, filtered)

    if result.sources:
        console.print("[dim]Sources:[/dim]")
        for source in result.sources:
            console.print(f"  {source.title} [dim]{source.uri}[/dim]")


def display_watchlist(result: ScreeningResult, watchlist: frozenset[str]) -> None:
    """Saved symbols present in this result, with their current price."""
    saved = watchlist_view(result.all_stocks, watchlist)
    if not saved:
        return

    console.print("[bold yellow]My Watchlist[/bold yellow]")
    table = Table(show_header=False, box=None)
    table.add_column("Symbol", style="bold")
    table.add_column("Price", justify="right", style="dim")
    for stock in saved:
        table.add_row(stock.symbol, f"{stock.current_price:,.2f}")
    console.print(table)


def overview_bar(change: float, scale: float, width: int = 20) -> str:
    """Bar for a 6-month change, scaled to the largest move in the result."""
    if math.isnan(change) or change == 0 or scale <= 0:
        return ""
    return "█" * max(1, round(abs(change) / scale * width))


def display_overview(result: ScreeningResult, filtered: FilterResult) -> None:
    """6-month change of every record, highlighting the ones that matched."""
    changes = [abs(s.change_6m) for s in result.all_stocks if not math.isnan(s.change_6m)]
    scale = max(changes, default=0.0)

    console.print(
        f"[bold]EGX Universe Overview[/bold] ({filtered.pass_count} matched, "
        f"{count_undervalued(result.all_stocks)} undervalued)"
    )
    table = Table(show_header=False, box=None)
    table.add_column("Symbol", style="bold")
    table.add_column("6M", justify="right")
    table.add_column("Bar")
    table.add_column("Match")

    for stock in result.all_stocks:
        matched = filtered.is_match(stock.symbol)
        table.add_row(
            stock.symbol,
            format_change(stock.change_6m),
            Text(overview_bar(stock.change_6m, scale), style="green" if matched else "bright_black"),
            Text("match", style="green") if matched else "",
        )
    console.print(table)


def results_to_json(
    result: ScreeningResult,
    stocks: list[StockRecord],
    filtered: FilterResult,
    watchlist: frozenset[str],
) -> str:
    rows = []
    for stock in stocks:
        row = {key: _finite_or_none(value) for key, value in stock.model_dump(mode="json").items()}
        row["upside"] = stock.upside
        row["saved"] = stock.symbol in watchlist
        rows.append(row)

    return json.dumps(
        {
            "index": result.index,
            "fetched_at": result.fetched_at.isoformat(),
            "matched": filtered.pass_count,
            "total": filtered.total_input,
            "undervalued": count_undervalued(result.all_stocks),
            "stocks": rows,
            "watchlist": [stock.symbol for stock in watchlist_view(result.all_stocks, watchlist)],
            "analysis": result.analysis,
            "sources": [source.model_dump() for source in result.sources],
        },
        allow_nan=False,
    )


def _finite_or_none(value):
    # malformed provider numbers are NaN; JSON has no literal for them
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


# -----------------------------------------------------------------------------
# Commands
# -----------------------------------------------------------------------------


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose logging")
@click.pass_context
def main(ctx, verbose):
    """EGX Screener - momentum and value screening for Egyptian Exchange indices."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    setup_logging(get_settings(), verbose)


@main.command()
def indices():
    """List the supported indices."""
    table = Table(title="EGX Indices")
    table.add_column("ID", style="bold")
    table.add_column("Name")
    table.add_column("Description", style="dim")

    for index in EGX_INDICES.values():
        table.add_row(index.id, index.name, index.description)

    console.print(table)


@main.command()
@click.option("--index", "-i", "index", type=click.Choice(list(EGX_INDICES)), help="Index to screen")
@click.option("--6m/--no-6m", "enable_6m", default=CriteriaDefaults.ENABLED_6M, help="6-month window")
@click.option("--min-6m", type=float, default=CriteriaDefaults.MIN_6M, show_default=True)
@click.option("--max-6m", type=float, default=CriteriaDefaults.MAX_6M, show_default=True)
@click.option("--1m/--no-1m", "enable_1m", default=CriteriaDefaults.ENABLED_1M, help="1-month window")
@click.option("--min-1m", type=float, default=CriteriaDefaults.MIN_1M, show_default=True)
@click.option("--max-1m", type=float, default=CriteriaDefaults.MAX_1M, show_default=True)
@click.option(
    "--absolute-1m/--floor-1m",
    "use_absolute_1m",
    default=CriteriaDefaults.USE_ABSOLUTE_1M,
    help="Catch big 1-month moves either way, or only gains above --min-1m",
)
@click.option("--1w/--no-1w", "enable_1w", default=CriteriaDefaults.ENABLED_1W, help="1-week window")
@click.option("--min-1w", type=float, default=CriteriaDefaults.MIN_1W, show_default=True)
@click.option("--max-1w", type=float, default=CriteriaDefaults.MAX_1W, show_default=True)
@click.option("--undervalued", is_flag=True, help="Only stocks trading below fair value")
@click.option("--watchlist-only", is_flag=True, help="Only saved stocks")
@click.option(
    "--sort",
    "sort_keys",
    multiple=True,
    type=click.Choice([key.value for key in SortKey]),
    help="Sort column; repeat the same key to flip to ascending",
)
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.pass_context
def screen(
    ctx,
    index: Optional[str],
    enable_6m: bool,
    min_6m: float,
    max_6m: float,
    enable_1m: bool,
    min_1m: float,
    max_1m: float,
    use_absolute_1m: bool,
    enable_1w: bool,
    min_1w: float,
    max_1w: float,
    undervalued: bool,
    watchlist_only: bool,
    sort_keys: tuple[str, ...],
    json_output: bool,
):
    """Fetch an index and show the stocks matching the criteria."""
    settings = get_settings()
    index = index or settings.default_index

    criteria = ScreeningCriteria(
        six_month=WindowRange(enabled=enable_6m, min_change=min_6m, max_change=max_6m),
        one_month=WindowRange(enabled=enable_1m, min_change=min_1m, max_change=max_1m),
        one_week=WindowRange(enabled=enable_1w, min_change=min_1w, max_change=max_1w),
        use_absolute_1m=use_absolute_1m,
        undervalued_only=undervalued,
        watchlist_only=watchlist_only,
    )

    sorter = SortToggle()
    for key in sort_keys:
        sorter.select(key)

    async def run() -> int:
        try:
            provider = build_provider(settings)
        except ConfigurationError as e:
            console.print(f"[red]Error:[/red] {e}")
            return 1

        store = build_store(settings)
        try:
            session = ScreeningSession(provider)
            watchlist = WatchlistSynchronizer(store)
            await watchlist.load()

            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                console=console,
                transient=True,
            ) as progress:
                progress.add_task(f"Analyzing {index}...", total=None)
                outcome = await session.fetch(index)
        finally:
            await close_clients(provider, store)

        if outcome is None or not outcome.is_success:
            error = outcome.error if outcome else "fetch already in progress"
            console.print(f"[red]Failed to fetch {index} data:[/red] {error}")
            return 1

        membership = watchlist.membership()
        filtered = screen_stocks(outcome.result.all_stocks, criteria, watchlist=membership)
        ordered = sorter.apply(filtered.passed)

        if json_output:
            console.print_json(results_to_json(outcome.result, ordered, filtered, membership))
        else:
            display_results(outcome.result, ordered, filtered, membership)
        return 0

    ctx.exit(asyncio.run(run()))


@main.command()
@click.pass_context
def watchlist(ctx):
    """List saved symbols."""
    settings = get_settings()

    async def run() -> int:
        store = build_store(settings)
        try:
            synchronizer = WatchlistSynchronizer(store)
            if not synchronizer.is_configured:
                console.print("[yellow]Watchlist store is not configured.[/yellow]")
                return 1
            symbols = await synchronizer.load(strict=True)
        except PersistenceError as e:
            console.print(f"[red]Failed to load watchlist:[/red] {e}")
            return 1
        finally:
            await close_clients(store)

        if not symbols:
            console.print("Watchlist is empty.")
            return 0

        table = Table(title=f"My Watchlist ({len(symbols)})")
        table.add_column("Symbol", style="bold")
        for symbol in sorted(symbols):
            table.add_row(symbol)
        console.print(table)
        return 0

    ctx.exit(asyncio.run(run()))


@main.command()
@click.argument("symbol")
@click.option("--index", "-i", "index", type=click.Choice(list(EGX_INDICES)), help="Index holding the symbol")
@click.pass_context
def toggle(ctx, symbol: str, index: Optional[str]):
    """Save or remove a symbol from the watchlist."""
    settings = get_settings()
    index = index or settings.default_index

    async def run() -> int:
        store = build_store(settings)
        synchronizer = WatchlistSynchronizer(store)
        if not synchronizer.is_configured:
            console.print("[red]Error:[/red] Watchlist store is not configured")
            return 1

        try:
            provider = build_provider(settings)
        except ConfigurationError as e:
            await close_clients(store)
            console.print(f"[red]Error:[/red] {e}")
            return 1

        try:
            await synchronizer.load()
            session = ScreeningSession(provider)
            outcome = await session.fetch(index)
            if outcome is None or not outcome.is_success:
                console.print(f"[red]Failed to fetch {index} data:[/red] {outcome.error if outcome else ''}")
                return 1

            stock = outcome.result.get(symbol)
            if stock is None:
                console.print(f"[red]Error:[/red] {symbol.upper()} is not part of {index}")
                return 1

            try:
                saved = await synchronizer.toggle(stock)
            except WatchlistError as e:
                console.print(f"[red]Failed to update watchlist:[/red] {e}")
                return 1
        finally:
            await close_clients(provider, store)

        if saved:
            console.print(f"[green]Saved[/green] {stock.symbol} at {stock.current_price:,.2f}")
        else:
            console.print(f"[yellow]Removed[/yellow] {stock.symbol}")
        return 0

    ctx.exit(asyncio.run(run()))


if __name__ == "__main__":
    main()
