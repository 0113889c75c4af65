"""CLI commands for SyncKaro.

This package provides the command-line console for SyncKaro,
covering seed data, teachers, students, trades and connections.
"""

from synckaro.cli.main import cli, main

__all__ = ["cli", "main"]
