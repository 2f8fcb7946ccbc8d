"""Subcommand modules for entryport.

Provides register_commands() which uses deferred imports so that
``entryport --help`` never loads the services or the database layer.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register the standalone commands on the root CLI group."""
    from entryport.commands.export import export
    from entryport.commands.handlers import handlers
    from entryport.commands.import_cmd import import_cmd
    from entryport.commands.seed import seed

    cli.add_command(export)
    cli.add_command(import_cmd)
    cli.add_command(handlers)
    cli.add_command(seed)
