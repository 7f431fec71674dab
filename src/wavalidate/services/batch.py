"""BatchRunner — the sequential format -> validate -> record loop.

INVARIANT: One validation in flight at a time, and rows are appended in
input order.  A reconnect pauses the loop (it waits for readiness before
every lookup) instead of reordering or retrying anything.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING, Any

from wavalidate.domain.formatting import format_number
from wavalidate.domain.records import ResultRecord, ValidationOutcome

if TYPE_CHECKING:
    from wavalidate.domain.formatting import FormattingPolicy
    from wavalidate.infrastructure.results import ResultSink
    from wavalidate.services.session import SessionManager
    from wavalidate.services.validator import Validator

logger = logging.getLogger(__name__)

# (raw line, written record, outcome or None when no lookup was made)
ProgressCallback = Callable[[str, ResultRecord, ValidationOutcome | None], None]


@dataclass
class BatchSummary:
    """Counters for one batch run."""

    processed: int = 0
    exists: int = 0
    missing: int = 0
    indeterminate: int = 0
    unformattable: int = 0
    blank: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class BatchRunner:
    """Drive a validation run over an iterable of input lines.

    Blank lines are skipped without a record.  A line with no digits is
    written as ``("", false)`` without contacting the network, or
    dropped entirely when *skip_unformattable* is set.
    """

    def __init__(
        self,
        session: SessionManager,
        validator: Validator,
        sink: ResultSink,
        *,
        policy: FormattingPolicy | None = None,
        skip_unformattable: bool = False,
        ready_timeout: float | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        self._session = session
        self._validator = validator
        self._sink = sink
        self._policy = policy
        self._skip_unformattable = skip_unformattable
        self._ready_timeout = ready_timeout
        self._on_progress = on_progress
        self._summary = BatchSummary()

    @property
    def summary(self) -> BatchSummary:
        return self._summary

    async def run(self, lines: Iterable[str]) -> list[ResultRecord]:
        """Process *lines* in order and return the records written.

        Raises:
            SessionUnavailableError: the session died; rows written so far
                stay in the output file.
            TimeoutError: a configured readiness timeout expired.
        """
        await self._session.wait_ready(self._ready_timeout)

        records: list[ResultRecord] = []
        for line in lines:
            raw = line.strip()
            if not raw:
                self._summary.blank += 1
                continue

            record, outcome = await self._process(raw)
            if record is None:
                continue
            self._sink.append(record)
            records.append(record)
            self._count(record, outcome)
            self._report(raw, record, outcome)

        logger.info(
            "Batch finished: %d processed, %d exist, %d indeterminate",
            self._summary.processed,
            self._summary.exists,
            self._summary.indeterminate,
        )
        return records

    async def _process(self, raw: str) -> tuple[ResultRecord | None, ValidationOutcome | None]:
        address = format_number(raw, self._policy)
        if not address:
            self._summary.unformattable += 1
            if self._skip_unformattable:
                logger.debug("Skipping unformattable line %r", raw)
                return None, None
            return ResultRecord(address="", exists=False), None

        await self._session.wait_ready(self._ready_timeout)
        outcome = await self._validator.validate(address)
        return ResultRecord(address=address, exists=outcome.exists), outcome

    def _count(self, record: ResultRecord, outcome: ValidationOutcome | None) -> None:
        self._summary.processed += 1
        if record.exists:
            self._summary.exists += 1
        else:
            self._summary.missing += 1
        if outcome is not None and outcome.indeterminate:
            self._summary.indeterminate += 1

    def _report(self, raw: str, record: ResultRecord, outcome: ValidationOutcome | None) -> None:
        if self._on_progress is None:
            return
        try:
            self._on_progress(raw, record, outcome)
        except Exception:
            logger.warning("Progress callback failed", exc_info=True)
