"""Seed data and platform statistics commands."""

import click
from rich.panel import Panel
from rich.table import Table

from synckaro.cli.common import console, get_app, money, pnl_text, when


@click.command()
@click.option("--regenerate", is_flag=True, help="Clear everything and seed again.")
@click.option("--clear", "clear_", is_flag=True, help="Remove all seeded collections.")
@click.option("--confirm", is_flag=True, help="Skip confirmation prompt.")
@click.pass_context
def seed(ctx: click.Context, regenerate: bool, clear_: bool, confirm: bool) -> None:
    """Populate the store with demo data.

    An empty store is seeded with teachers, students, trades, activity
    logs, zombie students and connection requests. A store that already
    has teachers only gets its connection pool topped up.

    \b
    Examples:
      synckaro seed               # Seed an empty store
      synckaro seed --regenerate  # Start over with fresh data
      synckaro seed --clear       # Remove all data
    """
    if regenerate and clear_:
        raise click.UsageError("--regenerate and --clear are mutually exclusive")

    app = get_app(ctx, seed=False)

    if (regenerate or clear_) and not confirm:
        action = "regenerate" if regenerate else "clear"
        if not click.confirm(f"This will {action} all SyncKaro data. Continue?"):
            console.print("[dim]Cancelled.[/dim]")
            return

    if clear_:
        app.loader.clear()
        console.print("[green]✓ Seed data cleared[/green]")
        return

    seeded = app.loader.regenerate() if regenerate else app.loader.load()
    if seeded:
        stats = app.repos.stats.get()
        console.print(Panel(
            f"[green]Seed data loaded![/green]\n\n"
            f"Teachers: {stats.total_teachers if stats else 0}\n"
            f"Students: {stats.total_students if stats else 0}\n"
            f"Trades:   {stats.total_trades if stats else 0}",
            title="[bold green]Seed Complete[/bold green]",
            border_style="green",
        ))
    else:
        console.print("[dim]Seed data already present; connection pool checked.[/dim]")


@click.command()
@click.pass_context
def stats(ctx: click.Context) -> None:
    """Show the platform-wide statistics snapshot."""
    app = get_app(ctx)
    snapshot = app.repos.stats.get()
    if snapshot is None:
        console.print("[yellow]No statistics recorded yet. Run 'synckaro seed'.[/yellow]")
        return

    table = Table(title="Platform Statistics", show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Teachers", str(snapshot.total_teachers))
    table.add_row("Students", str(snapshot.total_students))
    table.add_row("Trades", str(snapshot.total_trades))
    table.add_row("Capital", money(snapshot.total_capital))
    table.add_row("Profit/Loss", pnl_text(snapshot.total_profit_loss))
    table.add_row("Average Win Rate", f"{snapshot.average_win_rate:.2f}%")
    table.add_row("Generated", when(app.repos.stats.generated_at()))
    console.print(table)
