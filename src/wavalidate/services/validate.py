"""ValidationService — validate a file of phone numbers end to end.

Pipeline: CHECK INPUT -> RESOLVE POLICY + TRANSPORT -> CONNECT -> WAIT READY
-> PICK OUTPUT PATH -> BATCH -> REPORT

Setup failures (missing or wrong input, no transport, dead session) are
returned before the output file is created, so they never leave a
partial result file behind.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from wavalidate.domain.sessions import normalize_session_name, validate_session_name
from wavalidate.infrastructure.inputs import (
    check_decodable,
    has_allowed_extension,
    iter_lines,
    list_candidate_files,
)
from wavalidate.infrastructure.results import ResultSink, available_results_path
from wavalidate.services.base import BaseService
from wavalidate.services.batch import BatchRunner
from wavalidate.services.result import ServiceResult
from wavalidate.services.session import (
    SessionLoggedOutError,
    SessionManager,
    SessionUnavailableError,
)
from wavalidate.services.validator import Validator

if TYPE_CHECKING:
    from wavalidate.domain.formatting import FormattingPolicy
    from wavalidate.infrastructure.transport import MessagingTransport
    from wavalidate.services.batch import ProgressCallback

logger = logging.getLogger(__name__)

OP = "validate_file"


class ValidationService(BaseService):
    """Runs batch validations against the workspace's messaging transport."""

    def list_files(self) -> ServiceResult:
        """List the input files in the workspace root that can be validated."""
        settings = self._workspace.settings
        try:
            files = list_candidate_files(self._workspace.root, extensions=settings.input.extensions)
        except OSError as exc:
            return ServiceResult.failure("list_files", "FILE_NOT_FOUND", str(exc))
        items = [
            {"name": p.name, "path": str(p), "size": p.stat().st_size} for p in files
        ]
        return ServiceResult(ok=True, op="list_files", data={"count": len(items), "items": items})

    def validate_file(
        self,
        session_name: str,
        input_path: str | Path,
        *,
        on_progress: ProgressCallback | None = None,
    ) -> ServiceResult:
        """Validate every number in *input_path* using session *session_name*.

        Blocking wrapper around :meth:`validate_file_async`.
        """
        return asyncio.run(
            self.validate_file_async(session_name, input_path, on_progress=on_progress)
        )

    async def validate_file_async(
        self,
        session_name: str,
        input_path: str | Path,
        *,
        on_progress: ProgressCallback | None = None,
    ) -> ServiceResult:
        settings = self._workspace.settings
        name = normalize_session_name(session_name)
        if not validate_session_name(name):
            return ServiceResult.failure(
                OP, "INVALID_SESSION_NAME", f"Invalid session name: {session_name!r}"
            )

        path = self._resolve_input(input_path)
        if not path.is_file():
            return ServiceResult.failure(
                OP, "FILE_NOT_FOUND", f"Input file not found: {input_path}", path=str(path)
            )
        if not has_allowed_extension(path, settings.input.extensions):
            allowed = ", ".join(settings.input.extensions)
            return ServiceResult.failure(
                OP,
                "INPUT_FORMAT",
                f"{path.name} is not a supported input file ({allowed}); nothing validated",
                path=str(path),
            )

        try:
            check_decodable(path, encoding=settings.input.encoding)
        except (UnicodeDecodeError, LookupError) as exc:
            return ServiceResult.failure(
                OP,
                "INPUT_FORMAT",
                f"{path.name} is not valid {settings.input.encoding} text: {exc}; "
                "nothing validated",
                path=str(path),
            )

        try:
            policy = self._workspace.formatting_policy()
        except ValueError as exc:
            return ServiceResult.failure(OP, "INVALID_CONFIG", str(exc))

        transport = self._workspace.transport()
        if transport is None:
            return ServiceResult.failure(
                OP,
                "NO_TRANSPORT",
                "No messaging transport installed; install a plugin that "
                "implements the provide_transport hook",
            )

        return await self._run(name, path, policy, transport, on_progress)

    async def _run(
        self,
        name: str,
        path: Path,
        policy: FormattingPolicy,
        transport: MessagingTransport,
        on_progress: ProgressCallback | None,
    ) -> ServiceResult:
        settings = self._workspace.settings
        session_cfg = settings.session
        manager = SessionManager(
            name,
            credentials=self._workspace.credentials,
            transport=transport,
            reconnect_delay=session_cfg.reconnect_delay,
            max_reconnect_attempts=session_cfg.max_reconnect_attempts,
            plugins=self._workspace.plugins,
        )
        try:
            try:
                await manager.initialize()
                await manager.wait_ready(session_cfg.ready_timeout)
            except (SessionUnavailableError, TimeoutError) as exc:
                return _session_failure(exc, name)
            except (OSError, ValueError) as exc:
                return ServiceResult.failure(
                    OP, "CREDENTIALS_ERROR", f"Cannot load credentials for {name}: {exc}"
                )

            output = available_results_path(
                path, suffix=settings.output.suffix, extension=settings.output.extension
            )
            try:
                sink = ResultSink.open(output, header=settings.output.header)
            except OSError as exc:
                return ServiceResult.failure(
                    OP, "OUTPUT_UNWRITABLE", f"Cannot write {output}: {exc}", path=str(output)
                )

            logger.info("Validating %s, results in %s", path.name, output.name)
            runner = BatchRunner(
                manager,
                Validator(manager, address_domain=session_cfg.address_domain),
                sink,
                policy=policy,
                skip_unformattable=settings.batch.skip_unformattable,
                ready_timeout=session_cfg.ready_timeout,
                on_progress=on_progress,
            )
            with sink:
                try:
                    await runner.run(iter_lines(path, encoding=settings.input.encoding))
                except (SessionUnavailableError, TimeoutError) as exc:
                    return _session_failure(
                        exc, name, output=str(output), **runner.summary.to_dict()
                    )
                except UnicodeDecodeError as exc:
                    return ServiceResult.failure(
                        OP,
                        "INPUT_FORMAT",
                        f"{path.name} is not valid {settings.input.encoding} text: {exc}",
                        output=str(output),
                        **runner.summary.to_dict(),
                    )
        finally:
            await manager.shutdown()

        summary = runner.summary.to_dict()
        warnings: list[str] = []
        if runner.summary.indeterminate:
            warnings.append(
                f"{runner.summary.indeterminate} lookup(s) were indeterminate and recorded as false"
            )
        self._dispatch_event(
            "post_batch",
            {"input_path": str(path), "output_path": str(output), "summary": summary},
            warnings,
        )
        return ServiceResult(
            ok=True,
            op=OP,
            data={
                "session": name,
                "input": self._display_path(path),
                "output": self._display_path(output),
                **summary,
            },
            warnings=warnings,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _resolve_input(self, input_path: str | Path) -> Path:
        path = Path(input_path).expanduser()
        return path if path.is_absolute() else self._workspace.root / path

    def _display_path(self, path: Path) -> str:
        try:
            return str(path.relative_to(self._workspace.root))
        except ValueError:
            return str(path)


def _session_failure(exc: Exception, name: str, **detail: object) -> ServiceResult:
    if isinstance(exc, SessionLoggedOutError):
        return ServiceResult.failure(
            OP,
            "SESSION_LOGGED_OUT",
            f"Session {name} was logged out; run 'wavalidate session remove {name}' "
            "and pair again",
            **detail,
        )
    if isinstance(exc, TimeoutError):
        return ServiceResult.failure(OP, "READY_TIMEOUT", str(exc), **detail)
    return ServiceResult.failure(OP, "SESSION_UNAVAILABLE", str(exc), **detail)
