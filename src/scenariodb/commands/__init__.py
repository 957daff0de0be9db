"""Subcommand modules for scenariodb.

Provides register_commands() which uses deferred imports to keep
``scenariodb --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all standalone commands on the root CLI group."""
    from scenariodb.commands.delete import delete
    from scenariodb.commands.import_cmd import import_cmd
    from scenariodb.commands.init_cmd import init_cmd
    from scenariodb.commands.show import show

    cli.add_command(init_cmd)
    cli.add_command(show)
    cli.add_command(import_cmd)
    cli.add_command(delete)
