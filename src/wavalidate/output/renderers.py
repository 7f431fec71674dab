"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO).  The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json as _json
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from wavalidate.output.console import create_console, get_output, style_for_existence

if TYPE_CHECKING:
    from collections.abc import Callable

    from rich.console import Console

    from wavalidate.services.result import ServiceResult

    Renderer = Callable[..., None]


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op}: {msg}"

    if result.op == "validate_file":
        return str(result.data.get("output", ""))

    items = result.data.get("items")
    if isinstance(items, list):
        return "\n".join(_extract_name(item) for item in items if _extract_name(item))

    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _extract_name(item: Any) -> str:
    if isinstance(item, dict):
        val = item.get("name")
        return str(val) if val is not None else ""
    return str(item)


def _status_line(console: Console, result: ServiceResult) -> None:
    """Print the OK status line."""
    console.print(Text("OK", style="wav.ok"), Text(f"  {result.op}", style="wav.op"), sep="")


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="wav.key")
    if key in ("path", "input", "output"):
        v = Text(str(value), style="wav.path")
    elif key in ("name", "session"):
        v = Text(str(value), style="wav.name")
    else:
        v = Text(str(value))
    console.print(k, v, sep="")


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="wav.error")
    op = Text(f"  {result.op}", style="wav.op")
    console.print(label, op, Text(f": {msg}"), sep="")
    if err and err.detail.get("output"):
        console.print(Text(f"  partial results: {err.detail['output']}", style="wav.path"))
    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(Text(f"    {k}: {v}"))


# ── Validation ────────────────────────────────────────────────────────


def _render_validate(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render validate_file as a short summary of the run."""
    d = result.data
    _status_line(console, result)
    for key in ("session", "input", "output"):
        if key in d:
            _field(console, key, d[key])

    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Processed", justify="right")
    table.add_column("Exist", justify="right", style=style_for_existence(True))
    table.add_column("Missing", justify="right", style=style_for_existence(False))
    table.add_column("Indeterminate", justify="right", style="wav.warning")
    table.add_row(
        str(d.get("processed", 0)),
        str(d.get("exists", 0)),
        str(d.get("missing", 0)),
        str(d.get("indeterminate", 0)),
    )
    console.print(table)

    if verbose:
        _field(console, "blank", d.get("blank", 0))
        _field(console, "unformattable", d.get("unformattable", 0))


def _render_files(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render list_files as a numbered list."""
    items = result.data.get("items", [])
    if not items:
        console.print(Text("No input files found", style="dim"))
        return
    for idx, item in enumerate(items, start=1):
        line = Text(f"{idx:>3}. ")
        line.append(str(item.get("name", "")), style="wav.name")
        if verbose:
            line.append(f"  {item.get('size', 0)} bytes", style="dim")
        console.print(line)


# ── Sessions ──────────────────────────────────────────────────────────


def _render_session_list(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    items = result.data.get("items", [])
    if not items:
        console.print(Text("No sessions yet (wavalidate session create NAME)", style="dim"))
        return
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Name", style="wav.name", no_wrap=True)
    table.add_column("Paired")
    if verbose:
        table.add_column("Path", style="wav.path")
    for item in items:
        row = [str(item.get("name", "")), "yes" if item.get("paired") else "no"]
        if verbose:
            row.append(str(item.get("path", "")))
        table.add_row(*row)
    console.print(table)
    console.print(f"\n{result.data.get('count', len(items))} sessions")


def _render_session_mutation(
    result: ServiceResult, console: Console, *, verbose: bool = False
) -> None:
    _status_line(console, result)
    for key in ("name", "path"):
        if key in result.data:
            _field(console, key, result.data[key])


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            _field(console, key, _json.dumps(value, separators=(",", ":")))
        else:
            _field(console, key, value)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Renderer] = {
    "validate_file": _render_validate,
    "list_files": _render_files,
    "session_list": _render_session_list,
    "session_create": _render_session_mutation,
    "session_remove": _render_session_mutation,
}
