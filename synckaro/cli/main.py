"""Main CLI entry point for SyncKaro.

This module provides the main click group and lazy loading
of command modules to keep startup fast.
"""

from pathlib import Path

import click

from synckaro.cli.common import fail, setup_logging
from synckaro.config import load_config
from synckaro.errors import ConfigError


class LazyGroup(click.Group):
    """A click Group that lazily loads commands.

    Command modules are only imported when one of their
    commands is actually invoked.
    """

    def __init__(self, *args, lazy_subcommands: dict[str, str] | None = None, **kwargs):
        """Initialize the lazy group.

        Args:
            lazy_subcommands: Mapping of command names to ``module:attribute`` paths.
        """
        super().__init__(*args, **kwargs)
        self._lazy_subcommands = lazy_subcommands or {}

    def list_commands(self, ctx: click.Context) -> list[str]:
        """List all available commands."""
        base = super().list_commands(ctx)
        lazy = list(self._lazy_subcommands.keys())
        return sorted(set(base + lazy))

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        """Get a command by name, lazily loading if needed."""
        if cmd_name in self.commands:
            return self.commands[cmd_name]
        if cmd_name in self._lazy_subcommands:
            return self._lazy_load(cmd_name)
        return None

    def _lazy_load(self, cmd_name: str) -> click.Command:
        """Import ``module:attribute`` and register the command it names."""
        import importlib

        module_path, _, attr_name = self._lazy_subcommands[cmd_name].partition(":")
        module = importlib.import_module(module_path)
        cmd = getattr(module, attr_name or cmd_name, None)
        if not isinstance(cmd, click.Command):
            raise click.ClickException(f"Could not find command '{cmd_name}' in {module_path}")

        self.add_command(cmd, cmd_name)
        return cmd


LAZY_SUBCOMMANDS = {
    # Seed data
    "seed": "synckaro.cli.seed:seed",
    "stats": "synckaro.cli.seed:stats",
    # Session
    "login": "synckaro.cli.auth:login",
    "logout": "synckaro.cli.auth:logout",
    "whoami": "synckaro.cli.auth:whoami",
    # Teachers
    "teachers": "synckaro.cli.teachers:teachers",
    "teacher": "synckaro.cli.teachers:teacher",
    "teacher-delete": "synckaro.cli.teachers:teacher_delete",
    "teacher-status": "synckaro.cli.teachers:teacher_status",
    # Students
    "students": "synckaro.cli.students:students",
    "student-add": "synckaro.cli.students:student_add",
    "student-status": "synckaro.cli.students:student_status",
    "student-delete": "synckaro.cli.students:student_delete",
    # Trading
    "trade": "synckaro.cli.trade:trade",
    "trades": "synckaro.cli.trade:trades",
    "panic": "synckaro.cli.trade:panic",
    "market": "synckaro.cli.trade:market",
    # Connections
    "connections": "synckaro.cli.connections:connections",
}


CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


@click.group(cls=LazyGroup, lazy_subcommands=LAZY_SUBCOMMANDS, context_settings=CONTEXT_SETTINGS)
@click.option(
    "--config", "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to config.toml (default: ~/.config/synckaro/config.toml).",
)
@click.option("-v", "--verbose", count=True, help="Increase log verbosity (-v, -vv).")
@click.version_option(package_name="synckaro")
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None, verbose: int) -> None:
    """SyncKaro - admin console for a copy-trading platform.

    Manage teachers, their students and trades, and link unaffiliated
    students to teachers through connection requests.

    \b
    Quick Start:
      synckaro seed                 # Populate an empty store
      synckaro login teacher-1      # Act as a teacher
      synckaro connections summary  # Pending requests and zombie pool
      synckaro panic                # Close every open trade
    """
    ctx.ensure_object(dict)
    try:
        config = load_config(config_path)
    except ConfigError as exc:
        fail(str(exc), title="Configuration error")
    ctx.obj["config_path"] = config_path
    ctx.obj["config"] = config
    setup_logging(config, verbose)


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
