"""Input file discovery and lazy line reading."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from pathlib import Path


def list_candidate_files(directory: Path, *, extensions: Iterable[str] | None = None) -> list[Path]:
    """List regular files in *directory* (non-recursive), sorted by name.

    When *extensions* is given, only files with one of those suffixes
    (case-insensitive) are returned.
    """
    allowed = {ext.lower() for ext in extensions} if extensions is not None else None
    files = [p for p in directory.iterdir() if p.is_file() and not p.name.startswith(".")]
    if allowed is not None:
        files = [p for p in files if p.suffix.lower() in allowed]
    return sorted(files, key=lambda p: p.name)


def has_allowed_extension(path: Path, extensions: Iterable[str]) -> bool:
    return path.suffix.lower() in {ext.lower() for ext in extensions}


def iter_lines(path: Path, *, encoding: str = "utf-8") -> Iterator[str]:
    """Yield logical lines of *path* one at a time.

    Universal newline mode folds ``\\r\\n`` and ``\\r`` into line breaks;
    the trailing break is stripped.  A UTF-8 BOM is dropped.
    """
    if encoding.lower().replace("-", "") == "utf8":
        encoding = "utf-8-sig"
    with path.open(encoding=encoding, newline=None) as fh:
        for line in fh:
            yield line.rstrip("\n")


def check_decodable(path: Path, *, encoding: str = "utf-8") -> None:
    """Read *path* through once so bad bytes surface before any output exists.

    Raises:
        UnicodeDecodeError: the file is not valid *encoding* text.
        LookupError: *encoding* is unknown.
    """
    for _line in iter_lines(path, encoding=encoding):
        pass
