"""Command group: manage named sessions (credential areas)."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from wavalidate.commands._base import WavGroup

if TYPE_CHECKING:
    from wavalidate.commands._context import AppContext

_SESSION_EXAMPLES = """\
  wavalidate session list
  wavalidate session create office
  wavalidate session remove office --yes"""


@click.group(cls=WavGroup, examples=_SESSION_EXAMPLES)
def session() -> None:
    """List, create, and remove sessions."""


@session.command("list")
@click.pass_obj
def list_cmd(app: AppContext) -> None:
    """List sessions and whether they are paired."""
    from wavalidate.services.session import SessionService

    app.emit(SessionService(app.workspace).list_sessions())


@session.command(examples="  wavalidate session create office")
@click.argument("name")
@click.pass_obj
def create(app: AppContext, name: str) -> None:
    """Create an empty credential area; pairing happens on first use."""
    from wavalidate.services.session import SessionService

    app.emit(SessionService(app.workspace).create(name))


@session.command(
    examples="  wavalidate session remove office\n  wavalidate session remove office --yes"
)
@click.argument("name")
@click.option("-y", "--yes", is_flag=True, help="Do not ask for confirmation.")
@click.pass_obj
def remove(app: AppContext, name: str, yes: bool) -> None:
    """Delete a session's credentials (needed after a logout)."""
    from wavalidate.services.session import SessionService

    if not yes and app.interactive and not click.confirm(
        f"Delete the credentials of session {name}?"
    ):
        raise click.Abort
    app.emit(SessionService(app.workspace).remove(name))
