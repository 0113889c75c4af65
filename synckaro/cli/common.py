"""Shared helpers for CLI commands."""

import logging
from dataclasses import dataclass
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel

from synckaro.config import get_db_path, get_log_level, get_namespace, get_zombie_count, load_config
from synckaro.core.seed import SeedGenerator, SeedLoader, SeedParameters
from synckaro.core.session import Session
from synckaro.db.repositories import Repositories
from synckaro.db.store import KeyValueStore
from synckaro.models import CurrentUser

console = Console()


@dataclass
class App:
    """Everything a command needs, built once per invocation."""

    config: dict
    store: KeyValueStore
    repos: Repositories
    session: Session
    loader: SeedLoader


def setup_logging(config: dict, verbosity: int) -> None:
    """Route log records through rich at the configured level."""
    level = get_log_level(config)
    if verbosity == 1:
        level = min(level, logging.INFO)
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def get_app(ctx: click.Context, seed: bool = True) -> App:
    """Build the application objects for this invocation.

    Args:
        ctx: Click context carrying the config path.
        seed: Seed an empty store before returning.
    """
    obj = ctx.ensure_object(dict)
    if "app" in obj:
        return obj["app"]

    config = obj.get("config") or load_config(obj.get("config_path"))
    store = KeyValueStore(get_db_path(config), namespace=get_namespace(config))
    if not store.available:
        console.print("[yellow]Storage is unavailable; changes will not be saved.[/yellow]")
    repos = Repositories.from_store(store)
    params = SeedParameters(zombie_count=get_zombie_count(config))
    app = App(
        config=config,
        store=store,
        repos=repos,
        session=Session(store),
        loader=SeedLoader(repos, SeedGenerator(params)),
    )
    if seed:
        app.loader.load()
    obj["app"] = app
    return app


def error_panel(message: str, title: str = "Error") -> None:
    console.print(Panel(
        f"[red]{message}[/red]",
        title=f"[bold red]{title}[/bold red]",
        border_style="red",
    ))


def fail(message: str, title: str = "Error") -> None:
    """Print an error panel and exit with status 1."""
    error_panel(message, title)
    raise SystemExit(1)


def require_user(app: App) -> CurrentUser:
    """Get the signed-in user or exit with a hint."""
    user = app.session.current_user()
    if user is None:
        fail(
            "Not signed in.\n\n"
            "Run [cyan]synckaro login TEACHER_ID[/cyan] first.",
            title="Not signed in",
        )
    return user


def pnl_text(value: Optional[float]) -> str:
    value = value or 0.0
    color = "green" if value >= 0 else "red"
    sign = "+" if value >= 0 else ""
    return f"[{color}]{sign}₹{value:,.2f}[/{color}]"


def money(value: Optional[float]) -> str:
    return f"₹{(value or 0.0):,.2f}"


def when(value) -> str:
    return value.strftime("%d %b %Y %H:%M") if value else "-"
