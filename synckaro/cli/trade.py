"""Trading commands: manual trade entry, history, panic and market status.

Trades recorded here are simulated; nothing is sent to a broker.
"""

from typing import Optional

import click
from rich.panel import Panel
from rich.table import Table

from synckaro.cli.common import console, get_app, pnl_text, require_user, when
from synckaro.core.market_hours import is_market_open, market_status
from synckaro.core.panic import PanicHandler, get_panic_handler
from synckaro.models import Exchange, TradeStatus, TradeType
from synckaro.services import TradeService

STATUS_COLORS = {
    TradeStatus.PENDING: "yellow",
    TradeStatus.EXECUTED: "cyan",
    TradeStatus.COMPLETED: "green",
    TradeStatus.FAILED: "red",
    TradeStatus.CANCELLED: "dim",
}


@click.command()
@click.argument("side", type=click.Choice(["buy", "sell"], case_sensitive=False))
@click.argument("stock")
@click.argument("quantity", type=click.IntRange(min=1))
@click.option("--price", type=click.FloatRange(min=0), default=None, help="Limit price (market if omitted).")
@click.option("--exchange", type=click.Choice(["NSE", "BSE"], case_sensitive=False), default="NSE")
@click.option("--student", "student_id", default=None, help="Student the trade is for.")
@click.pass_context
def trade(
    ctx: click.Context,
    side: str,
    stock: str,
    quantity: int,
    price: Optional[float],
    exchange: str,
    student_id: Optional[str],
) -> None:
    """Record a trade for the signed-in teacher.

    \b
    Examples:
      synckaro trade buy RELIANCE 10
      synckaro trade sell INFY 5 --price 1520.5 --exchange BSE
    """
    app = get_app(ctx)
    user = require_user(app)

    is_open, message = is_market_open()
    if not is_open:
        console.print(f"[yellow]⚠ {message}. Recording the trade anyway.[/yellow]")

    recorded = TradeService(app.repos).create(
        teacher_id=user.id,
        stock=stock,
        quantity=quantity,
        trade_type=TradeType(side.upper()),
        exchange=Exchange(exchange.upper()),
        price=price,
        student_id=student_id,
        teacher_name=user.name or None,
    )
    price_text = f"₹{recorded.price:,.2f}" if recorded.price is not None else "MARKET"
    console.print(Panel(
        f"[green]Trade recorded![/green]\n\n"
        f"ID: {recorded.id}\n"
        f"{recorded.type.value} {recorded.quantity} {recorded.stock} @ {price_text} "
        f"on {recorded.exchange.value}\n"
        f"Status: {recorded.status.value}",
        title="[bold green]Trade[/bold green]",
        border_style="green",
    ))


@click.command()
@click.option(
    "--status",
    type=click.Choice([s.value for s in TradeStatus]),
    default=None,
    help="Filter by status.",
)
@click.option("--limit", "-n", default=20, show_default=True, help="Rows to show.")
@click.pass_context
def trades(ctx: click.Context, status: Optional[str], limit: int) -> None:
    """Show the signed-in teacher's trade history, newest first."""
    app = get_app(ctx)
    user = require_user(app)
    rows = TradeService(app.repos).history(user.id, TradeStatus(status) if status else None)

    if not rows:
        console.print("[dim]No trades found.[/dim]")
        return

    table = Table(title=f"Trades ({len(rows)})")
    table.add_column("When", style="dim")
    table.add_column("Stock", style="cyan")
    table.add_column("Side")
    table.add_column("Qty", justify="right")
    table.add_column("Price", justify="right")
    table.add_column("Status")
    table.add_column("Student")
    table.add_column("P&L", justify="right")

    for row in rows[:limit]:
        side_color = "green" if row.type == TradeType.BUY else "red"
        color = STATUS_COLORS.get(row.status, "white")
        table.add_row(
            when(row.occurred_at),
            row.stock,
            f"[{side_color}]{row.type.value}[/{side_color}]",
            str(row.quantity),
            f"₹{row.price:,.2f}" if row.price is not None else "-",
            f"[{color}]{row.status.value}[/{color}]",
            row.student_name or "-",
            pnl_text(row.pnl),
        )
    console.print(table)


@click.command()
@click.option("--confirm", is_flag=True, help="Skip confirmation prompt.")
@click.pass_context
def panic(ctx: click.Context, confirm: bool) -> None:
    """Close every open trade of the signed-in teacher and its students.

    Pending and executed trades are marked completed.
    """
    app = get_app(ctx)
    require_user(app)

    if not confirm:
        if not click.confirm("Close ALL open trades?"):
            console.print("[dim]Cancelled.[/dim]")
            return

    closed = get_panic_handler(app.session, PanicHandler(app.repos))()
    if closed == 0:
        console.print("[dim]No open trades to close.[/dim]")
        return
    console.print(Panel(
        f"[green]Closed {closed} open trade(s).[/green]",
        title="[bold red]Panic[/bold red]",
        border_style="red",
    ))


@click.command()
def market() -> None:
    """Show Indian market session status."""
    status = market_status()
    color = "green" if status["is_open"] else "yellow"
    console.print(Panel(
        f"[{color}]{status['message']}[/{color}]\n\n"
        f"{status['day']}, {status['date']} {status['current_time']} IST",
        title="[bold cyan]Market Status[/bold cyan]",
        border_style="cyan",
    ))
