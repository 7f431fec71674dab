"""Command: list the input files that can be validated."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from wavalidate.commands._base import WavCommand

if TYPE_CHECKING:
    from wavalidate.commands._context import AppContext

_FILES_EXAMPLES = """\
  wavalidate files
  wavalidate -v files      # include file sizes
  wavalidate -q files      # names only, one per line"""


@click.command("files", cls=WavCommand, examples=_FILES_EXAMPLES)
@click.pass_obj
def files(app: AppContext) -> None:
    """List input files in the working directory."""
    from wavalidate.services.validate import ValidationService

    app.emit(ValidationService(app.workspace).list_files())
