"""Session commands: act as a teacher without a real auth backend."""

import click
from rich.panel import Panel

from synckaro.cli.common import console, fail, get_app
from synckaro.models import CurrentUser, UserRole


@click.command()
@click.argument("teacher_id")
@click.pass_context
def login(ctx: click.Context, teacher_id: str) -> None:
    """Sign in as an existing teacher.

    \b
    Examples:
      synckaro login teacher-1
    """
    app = get_app(ctx)
    teacher = app.repos.teachers.get(teacher_id)
    if teacher is None:
        fail(f"Teacher {teacher_id} not found.", title="Login failed")

    app.session.sign_in(CurrentUser(
        id=teacher.id,
        name=teacher.name,
        mobile=teacher.mobile,
        email=teacher.email,
        role=UserRole.TEACHER,
    ))
    console.print(Panel(
        f"[green]Signed in as {teacher.name}[/green]\n\n"
        f"ID: {teacher.id}\n"
        f"Mobile: {teacher.mobile}",
        title="[bold green]Login Successful[/bold green]",
        border_style="green",
    ))


@click.command()
@click.pass_context
def logout(ctx: click.Context) -> None:
    """Sign out the current user."""
    app = get_app(ctx, seed=False)
    app.session.sign_out()
    console.print("[green]✓ Signed out[/green]")


@click.command()
@click.pass_context
def whoami(ctx: click.Context) -> None:
    """Show the signed-in user."""
    app = get_app(ctx, seed=False)
    user = app.session.current_user()
    if user is None:
        console.print("[dim]Not signed in.[/dim]")
        return
    console.print(f"[bold cyan]{user.name or user.id}[/bold cyan] ({user.id}, {user.role.value})")
