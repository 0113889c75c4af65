"""Student management commands for the signed-in teacher."""

import click
from pydantic import ValidationError
from rich.table import Table

from synckaro.cli.common import console, fail, get_app, money, pnl_text, require_user
from synckaro.services import StudentCreate, StudentService, validate_contact


@click.command()
@click.pass_context
def students(ctx: click.Context) -> None:
    """List the signed-in teacher's students."""
    app = get_app(ctx)
    user = require_user(app)
    rows = StudentService(app.repos).list_students(user.id)

    if not rows:
        console.print("[dim]No students linked yet.[/dim]")
        return

    table = Table(title=f"Students of {user.name or user.id} ({len(rows)})")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Mobile")
    table.add_column("Status")
    table.add_column("Capital", justify="right")
    table.add_column("P&L", justify="right")
    table.add_column("Risk %", justify="right")
    table.add_column("Strategy")

    for student in rows:
        status_color = "green" if student.status.value == "active" else "dim"
        table.add_row(
            student.id,
            student.name,
            student.mobile,
            f"[{status_color}]{student.status.value}[/{status_color}]",
            money(student.current_capital),
            pnl_text(student.profit_loss),
            f"{student.risk_percentage:g}",
            student.strategy or "-",
        )
    console.print(table)


@click.command(name="student-add")
@click.option("--name", required=True, help="Full name.")
@click.option("--email", required=True, help="Email address.")
@click.option("--mobile", required=True, help="10-digit mobile number.")
@click.option("--capital", type=float, default=0.0, show_default=True, help="Initial capital.")
@click.option("--risk", type=float, default=10.0, show_default=True, help="Risk percentage.")
@click.option("--strategy", default="", help="Trading strategy label.")
@click.pass_context
def student_add(
    ctx: click.Context,
    name: str,
    email: str,
    mobile: str,
    capital: float,
    risk: float,
    strategy: str,
) -> None:
    """Add a student to the signed-in teacher."""
    app = get_app(ctx)
    user = require_user(app)

    contact_error = validate_contact(email, mobile)
    if contact_error:
        fail(contact_error, title="Invalid student")

    try:
        data = StudentCreate(
            name=name,
            email=email,
            mobile=mobile,
            teacher_name=user.name or None,
            initial_capital=capital,
            risk_percentage=risk,
            strategy=strategy,
        )
    except ValidationError as exc:
        fail(str(exc.errors()[0]["msg"]), title="Invalid student")

    student = StudentService(app.repos).create(user.id, data)
    console.print(f"[green]✓ Added {student.name} ({student.id})[/green]")


@click.command(name="student-status")
@click.argument("student_id")
@click.argument("state", type=click.Choice(["active", "inactive"]))
@click.pass_context
def student_status(ctx: click.Context, student_id: str, state: str) -> None:
    """Activate or deactivate one of your students."""
    app = get_app(ctx)
    user = require_user(app)
    updated = StudentService(app.repos).toggle_status(student_id, state == "active", user.id)
    if updated is None:
        fail(f"Student {student_id} not found.")
    console.print(f"[green]✓ {updated.name} is now {updated.status.value}[/green]")


@click.command(name="student-delete")
@click.argument("student_id")
@click.option("--confirm", is_flag=True, help="Skip confirmation prompt.")
@click.pass_context
def student_delete(ctx: click.Context, student_id: str, confirm: bool) -> None:
    """Delete one of your students."""
    app = get_app(ctx)
    user = require_user(app)
    if not confirm and not click.confirm(f"Delete student {student_id}?"):
        console.print("[dim]Cancelled.[/dim]")
        return
    if not StudentService(app.repos).delete(student_id, user.id):
        fail(f"Student {student_id} not found.")
    console.print(f"[green]✓ Deleted {student_id}[/green]")
