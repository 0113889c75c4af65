"""Connection request commands.

Teachers link zombie students (students with no teacher) through
requests that are accepted, rejected or cancelled.
"""

from typing import Optional

import click
from rich.table import Table

from synckaro.cli.common import console, fail, get_app, money, require_user, when
from synckaro.core.connections import ConnectionWorkflow, WorkflowResult
from synckaro.models import ConnectionRequest, ConnectionStatus

STATUS_CHOICES = [s.value for s in ConnectionStatus]


def _workflow(ctx: click.Context):
    app = get_app(ctx)
    user = require_user(app)
    return app, user, ConnectionWorkflow(app.repos)


def _owned(ctx: click.Context, request_id: str) -> ConnectionWorkflow:
    """Workflow for a request the signed-in teacher owns; others are reported missing."""
    app, user, workflow = _workflow(ctx)
    request = app.repos.connections.get(request_id)
    if request is None or request.teacher_id != user.id:
        fail(f"Request {request_id} not found", title="Not Found")
    return workflow


def _report(result: WorkflowResult, verb: str) -> None:
    """Print the outcome of a transition, exiting non-zero on failure."""
    if not result.ok:
        fail(result.message or result.status.value, title=result.status.value.replace("_", " ").title())
    console.print(f"[green]✓ Request {result.request.id} {verb}[/green]")


def _requests_table(title: str, requests: list[ConnectionRequest], names: dict[str, str]) -> Table:
    table = Table(title=title)
    table.add_column("ID", style="cyan")
    table.add_column("Student")
    table.add_column("Status")
    table.add_column("Created", style="dim")
    table.add_column("Responded", style="dim")
    for request in requests:
        color = {"pending": "yellow", "accepted": "green", "rejected": "red"}[request.status.value]
        table.add_row(
            request.id,
            names.get(request.student_id, request.student_id),
            f"[{color}]{request.status.value}[/{color}]",
            when(request.created_at),
            when(request.responded_at),
        )
    return table


@click.group()
def connections() -> None:
    """Connection requests between you and zombie students.

    \b
    Commands:
      summary   - Pending counts and zombie pool size
      search    - Find zombie students
      request   - Send a request to a student
      incoming  - Requests students sent you
      outgoing  - Requests you sent
      accept    - Accept a pending request
      reject    - Reject a pending request
      cancel    - Delete a request
    """
    pass


@connections.command()
@click.pass_context
def summary(ctx: click.Context) -> None:
    """Show pending request counts and the zombie pool size."""
    _, user, workflow = _workflow(ctx)
    counts = workflow.summary(user.id)

    table = Table(title="Connections", show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Count", justify="right")
    table.add_row("Incoming pending", str(counts.incoming_pending))
    table.add_row("Outgoing pending", str(counts.outgoing_pending))
    table.add_row("Zombie students", str(counts.zombie_students))
    table.add_row("Connected students", str(counts.connected_students))
    console.print(table)


@connections.command()
@click.argument("query", required=False)
@click.pass_context
def search(ctx: click.Context, query: Optional[str]) -> None:
    """List zombie students, optionally matching QUERY."""
    _, user, workflow = _workflow(ctx)
    zombies = workflow.list_zombie_students(query)

    if not zombies:
        console.print("[dim]No zombie students found.[/dim]")
        return

    table = Table(title=f"Zombie Students ({len(zombies)})")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Email")
    table.add_column("Mobile")
    table.add_column("Capital", justify="right")
    table.add_column("Requested", justify="center")
    for student in zombies:
        requested = workflow.has_active_request(user.id, student.id)
        table.add_row(
            student.id,
            student.name,
            student.email,
            student.mobile,
            money(student.current_capital),
            "[yellow]●[/yellow]" if requested else "",
        )
    console.print(table)


@connections.command()
@click.argument("student_id")
@click.pass_context
def request(ctx: click.Context, student_id: str) -> None:
    """Send a connection request to a student."""
    _, user, workflow = _workflow(ctx)
    _report(workflow.create_request(user.id, student_id), "sent")


def _list(ctx: click.Context, incoming: bool, status: Optional[str]) -> None:
    app, user, workflow = _workflow(ctx)
    statuses = [ConnectionStatus(status)] if status else None
    if incoming:
        rows, title = workflow.incoming(user.id, statuses), "Incoming Requests"
    else:
        rows, title = workflow.outgoing(user.id, statuses), "Outgoing Requests"

    if not rows:
        console.print("[dim]No requests found.[/dim]")
        return
    names = {s.id: s.name for s in app.repos.students.all()}
    console.print(_requests_table(f"{title} ({len(rows)})", rows, names))


@connections.command()
@click.option("--status", type=click.Choice(STATUS_CHOICES), default=None, help="Filter by status.")
@click.pass_context
def incoming(ctx: click.Context, status: Optional[str]) -> None:
    """Requests students sent you, newest first."""
    _list(ctx, True, status)


@connections.command()
@click.option("--status", type=click.Choice(STATUS_CHOICES), default=None, help="Filter by status.")
@click.pass_context
def outgoing(ctx: click.Context, status: Optional[str]) -> None:
    """Requests you sent, newest first."""
    _list(ctx, False, status)


@connections.command()
@click.argument("request_id")
@click.pass_context
def accept(ctx: click.Context, request_id: str) -> None:
    """Accept a pending request and link its student to you."""
    workflow = _owned(ctx, request_id)
    _report(workflow.accept(request_id), "accepted")


@connections.command()
@click.argument("request_id")
@click.pass_context
def reject(ctx: click.Context, request_id: str) -> None:
    """Reject a pending request."""
    workflow = _owned(ctx, request_id)
    _report(workflow.reject(request_id), "rejected")


@connections.command()
@click.argument("request_id")
@click.pass_context
def cancel(ctx: click.Context, request_id: str) -> None:
    """Delete a request regardless of its status."""
    workflow = _owned(ctx, request_id)
    _report(workflow.cancel(request_id), "cancelled")
