"""Command: validate a file of phone numbers."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from wavalidate.commands._base import WavCommand

if TYPE_CHECKING:
    from wavalidate.commands._context import AppContext

# Not a valid session name, so it can never clash with one.
NEW_SESSION = "+new"

_VALIDATE_EXAMPLES = """\
  wavalidate validate                                  # choose session and file
  wavalidate validate numbers.txt --session office
  wavalidate --no-interact validate numbers.txt --session office
  wavalidate --json validate numbers.txt --session office"""


def _choose_session(app: AppContext) -> str:
    from wavalidate.services.session import SessionService

    result = SessionService(app.workspace).list_sessions()
    names = [item["name"] for item in result.data.get("items", [])]
    if names:
        click.echo("Sessions: " + ", ".join(names), err=True)
    choice = click.prompt(
        f"Session (or {NEW_SESSION} to create one)",
        type=click.Choice([*names, NEW_SESSION]),
        default=names[0] if names else NEW_SESSION,
        err=True,
    )
    if choice != NEW_SESSION:
        return str(choice)
    return str(click.prompt("New session name", err=True)).strip()


def _choose_file(app: AppContext) -> str:
    from wavalidate.services.validate import ValidationService

    result = ValidationService(app.workspace).list_files()
    names = [item["name"] for item in result.data.get("items", [])]
    if not names:
        msg = f"No input files in {app.workspace.root}"
        raise click.UsageError(msg)
    for idx, name in enumerate(names, start=1):
        click.echo(f"{idx:>3}. {name}", err=True)
    return str(click.prompt("Input file", type=click.Choice(names), default=names[0], err=True))


@click.command("validate", cls=WavCommand, examples=_VALIDATE_EXAMPLES)
@click.argument("file", required=False)
@click.option("-s", "--session", "session_name", default=None, help="Session to validate with.")
@click.pass_obj
def validate(app: AppContext, file: str | None, session_name: str | None) -> None:
    """Check which numbers in FILE have an account.

    Results go to FILE_results.csv next to the input; an existing result
    file is never overwritten.
    """
    if session_name is None:
        if not app.interactive:
            msg = "--session is required with --no-interact or --json"
            raise click.UsageError(msg)
        session_name = _choose_session(app)

    if file is None:
        if not app.interactive:
            msg = "FILE is required with --no-interact or --json"
            raise click.UsageError(msg)
        file = _choose_file(app)

    from wavalidate.services.validate import ValidationService

    app.emit(
        ValidationService(app.workspace).validate_file(
            session_name, file, on_progress=app.progress
        )
    )
