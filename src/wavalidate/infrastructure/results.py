"""Result sink: collision-free output path selection and CSV appends.

INVARIANT: A run never overwrites an existing file.  The output path is
``<input stem>_results.csv``; if taken, ``_results2.csv``,
``_results3.csv``, ... are tried in order.  Paths handed out by this
process are remembered and never handed out twice.
"""

from __future__ import annotations

import csv
import threading
from pathlib import Path
from typing import TYPE_CHECKING, TextIO

if TYPE_CHECKING:
    from types import TracebackType

    from wavalidate.domain.records import ResultRecord

DEFAULT_SUFFIX = "_results"
DEFAULT_EXTENSION = ".csv"
DEFAULT_HEADER = ("phone", "validate")

_claimed: set[Path] = set()
_claim_lock = threading.Lock()


def available_results_path(
    input_path: Path,
    *,
    suffix: str = DEFAULT_SUFFIX,
    extension: str = DEFAULT_EXTENSION,
) -> Path:
    """Pick an unused output path next to *input_path*.

    Examples:
        numbers.txt -> numbers_results.csv
        numbers.txt (with numbers_results.csv present) -> numbers_results2.csv
    """
    base = input_path.with_suffix("")
    counter = 1
    with _claim_lock:
        while True:
            tag = suffix if counter == 1 else f"{suffix}{counter}"
            candidate = base.with_name(f"{base.name}{tag}{extension}")
            if candidate.resolve() not in _claimed and not candidate.exists():
                _claimed.add(candidate.resolve())
                return candidate
            counter += 1


class ResultSink:
    """Append-only CSV writer for ResultRecords.

    The header is written once when the sink is opened.  Every row is
    flushed as soon as it is written, so an abrupt stop loses nothing
    that was already reported.

    Usage::

        with ResultSink.open(path) as sink:
            sink.append(record)
    """

    def __init__(self, path: Path, stream: TextIO) -> None:
        self._path = path
        self._stream = stream
        self._writer = csv.writer(stream, lineterminator="\n")
        self._rows = 0

    @classmethod
    def open(
        cls,
        path: Path,
        *,
        header: tuple[str, str] = DEFAULT_HEADER,
    ) -> ResultSink:
        """Open *path* in append mode and write the header."""
        stream = path.open("a", encoding="utf-8", newline="")
        sink = cls(path, stream)
        sink._writer.writerow(header)
        stream.flush()
        return sink

    @property
    def path(self) -> Path:
        return self._path

    @property
    def rows_written(self) -> int:
        return self._rows

    def append(self, record: ResultRecord) -> None:
        """Write *record* as ``address,true|false`` and flush."""
        self._writer.writerow(record.to_row())
        self._stream.flush()
        self._rows += 1

    def close(self) -> None:
        if not self._stream.closed:
            self._stream.close()

    def __enter__(self) -> ResultSink:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
