"""Teacher administration commands."""

from typing import Optional

import click
from rich.panel import Panel
from rich.table import Table

from synckaro.cli.common import console, fail, get_app, money, pnl_text, when
from synckaro.models import TeacherStatus
from synckaro.services import TeacherService

STATUS_CHOICES = [s.value for s in TeacherStatus]


@click.command()
@click.option("--status", type=click.Choice(STATUS_CHOICES), default=None, help="Filter by status.")
@click.option("--search", "-s", default=None, help="Match on name, email or mobile.")
@click.pass_context
def teachers(ctx: click.Context, status: Optional[str], search: Optional[str]) -> None:
    """List teachers with their rollups.

    \b
    Examples:
      synckaro teachers
      synckaro teachers --status live
      synckaro teachers -s priya
    """
    app = get_app(ctx)
    service = TeacherService(app.repos)
    rows = service.list_teachers(TeacherStatus(status) if status else None, search)

    if not rows:
        console.print("[dim]No teachers found.[/dim]")
        return

    table = Table(title=f"Teachers ({len(rows)})")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Status")
    table.add_column("Students", justify="right")
    table.add_column("Trades", justify="right")
    table.add_column("Capital", justify="right")
    table.add_column("P&L", justify="right")
    table.add_column("Win %", justify="right")

    for teacher in rows:
        table.add_row(
            teacher.id,
            teacher.name,
            teacher.status.value,
            str(teacher.total_students),
            str(teacher.total_trades),
            money(teacher.total_capital),
            pnl_text(teacher.profit_loss),
            f"{teacher.win_rate}%",
        )
    console.print(table)


@click.command()
@click.argument("teacher_id")
@click.option("--logs", "-n", default=10, show_default=True, help="Activity entries to show.")
@click.pass_context
def teacher(ctx: click.Context, teacher_id: str, logs: int) -> None:
    """Show one teacher with recent activity."""
    app = get_app(ctx)
    service = TeacherService(app.repos)
    found = service.get(teacher_id)
    if found is None:
        fail(f"Teacher {teacher_id} not found.")

    console.print(Panel(
        f"[bold]{found.name}[/bold] ({found.status.value})\n"
        f"{found.email} · {found.phone or found.mobile}\n"
        f"Specialization: {found.specialization or '-'}\n"
        f"Joined: {when(found.joined_date)}\n\n"
        f"Students: {found.total_students}   Trades: {found.total_trades}   "
        f"Win rate: {found.win_rate}%\n"
        f"Capital: {money(found.total_capital)}   P&L: {pnl_text(found.profit_loss)}",
        title=f"[bold cyan]{found.id}[/bold cyan]",
        border_style="cyan",
    ))

    activity = service.activity(teacher_id)[:logs]
    if activity:
        table = Table(title="Recent Activity")
        table.add_column("When", style="dim")
        table.add_column("Action", style="cyan")
        table.add_column("Details")
        for entry in activity:
            table.add_row(when(entry.timestamp), entry.action.value, entry.details)
        console.print(table)


@click.command(name="teacher-delete")
@click.argument("teacher_ids", nargs=-1, required=True)
@click.option("--confirm", is_flag=True, help="Skip confirmation prompt.")
@click.pass_context
def teacher_delete(ctx: click.Context, teacher_ids: tuple[str, ...], confirm: bool) -> None:
    """Delete one or more teachers.

    Students and trades of deleted teachers are kept.
    """
    app = get_app(ctx)
    if not confirm and not click.confirm(f"Delete {len(teacher_ids)} teacher(s)?"):
        console.print("[dim]Cancelled.[/dim]")
        return

    removed = TeacherService(app.repos).bulk_delete(teacher_ids)
    if not removed:
        fail("No matching teachers found.")
    console.print(f"[green]✓ Deleted {removed} teacher(s)[/green]")


@click.command(name="teacher-status")
@click.argument("status", type=click.Choice(STATUS_CHOICES))
@click.argument("teacher_ids", nargs=-1, required=True)
@click.pass_context
def teacher_status(ctx: click.Context, status: str, teacher_ids: tuple[str, ...]) -> None:
    """Set the status of one or more teachers.

    \b
    Examples:
      synckaro teacher-status inactive teacher-3 teacher-4
    """
    app = get_app(ctx)
    updated = TeacherService(app.repos).bulk_update_status(teacher_ids, TeacherStatus(status))
    if not updated:
        fail("No matching teachers found.")
    console.print(f"[green]✓ Updated {updated} teacher(s) to {status}[/green]")
