"""Example: Screen one index and show undervalued momentum names."""

import asyncio
import sys

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from config.settings import EGX_INDICES, get_settings
from src.clients.gemini_client import GeminiClient
from src.filters.criteria import screen_stocks
from src.ingest.screening import ScreeningSession
from src.models.criteria import ScreeningCriteria
from src.ranking.sorter import SortKey, SortState, sort_stocks


console = Console()


def format_upside(upside) -> Text:
    """Format upside with color coding."""
    if upside is None:
        return Text("n/a", style="dim")
    color = "green" if upside > 0 else "red"
    return Text(f"{upside * 100:+.1f}%", style=f"bold {color}")


def display_result(result, stocks):
    """Display screening result with rich formatting."""
    table = Table(show_header=True, box=None, padding=(0, 2))
    table.add_column("Symbol", style="bold")
    table.add_column("Price", justify="right")
    table.add_column("Fair Value", justify="right")
    table.add_column("Upside", justify="right")

    for stock in stocks:
        table.add_row(
            stock.symbol,
            f"{stock.current_price:,.2f}",
            f"{stock.fair_value:,.2f}",
            format_upside(stock.upside),
        )

    panel = Panel(
        table,
        title=Text(EGX_INDICES[result.index].name, style="bold white"),
        subtitle=f"Fetched: {result.fetched_at.strftime('%Y-%m-%d %H:%M:%S')} UTC",
        border_style="blue",
    )
    console.print(panel)

    # Market analysis
    console.print()
    console.rule("[bold blue]Market Pulse[/bold blue]")
    console.print(f"  {result.analysis}")
    console.rule(style="blue")


async def main(index: str):
    settings = get_settings()

    # Default windows plus the undervalued flag, best upside first
    criteria = ScreeningCriteria(undervalued_only=True)

    async with GeminiClient.from_settings(settings) as client:
        session = ScreeningSession(client)
        outcome = await session.fetch(index)

    if not outcome.is_success:
        console.print(f"[red]Fetch failed:[/red] {outcome.error}")
        sys.exit(1)

    filtered = screen_stocks(outcome.result.all_stocks, criteria)
    display_result(outcome.result, sort_stocks(filtered.passed, SortState(SortKey.UPSIDE)))


if __name__ == "__main__":
    if len(sys.argv) < 2 or sys.argv[1].upper() not in EGX_INDICES:
        print(f"Usage: python -m examples.screen_index <{'|'.join(EGX_INDICES)}>")
        sys.exit(1)
    asyncio.run(main(sys.argv[1].upper()))
