"""AppContext — shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``.  Provides lazy Workspace initialization and
centralized result emission (stdout/stderr routing + exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from wavalidate.output.formatters import OutputSettings, format_progress, format_result

if TYPE_CHECKING:
    from wavalidate.config.settings import WavSettings
    from wavalidate.domain.records import ResultRecord, ValidationOutcome
    from wavalidate.infrastructure.workspace import Workspace
    from wavalidate.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    The workspace is created on first use so ``--help`` and ``--version``
    never load plugins.
    """

    def __init__(self, settings: WavSettings, *, workspace: Workspace | None = None) -> None:
        self.settings = settings
        self._workspace = workspace

        from wavalidate.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    @property
    def workspace(self) -> Workspace:
        """The workspace (created lazily on first access)."""
        if self._workspace is None:
            from wavalidate.infrastructure.workspace import Workspace

            self._workspace = Workspace(self.settings)
        return self._workspace

    @property
    def interactive(self) -> bool:
        return not self.settings.no_interact and not self.settings.json_output

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
          Warnings go to stderr so they don't pollute piped output.
        * Failure: writes to stderr, exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            # In JSON mode, warnings are already in the serialized payload.
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)

    def progress(self, raw: str, record: ResultRecord, _outcome: ValidationOutcome | None) -> None:
        """Per-line progress on stderr; silent in quiet and JSON modes."""
        if self.settings.quiet or self.settings.json_output:
            return
        click.echo(format_progress(raw, record.address, record.exists), err=True)
