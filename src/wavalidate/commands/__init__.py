"""Subcommand modules for wavalidate.

Provides register_commands() which uses deferred imports to keep
``wavalidate --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register the command group and standalone commands on the root CLI group."""
    from wavalidate.commands.session import session

    cli.add_command(session)

    from wavalidate.commands.files import files
    from wavalidate.commands.validate import validate

    cli.add_command(validate)
    cli.add_command(files)
