"""Built-in plugin that shows pairing tokens on the terminal.

The token is printed as text on stderr.  Turning it into a scannable
image is left to the transport or to another plugin.
"""

from __future__ import annotations

import sys

import pluggy
from rich.console import Console
from rich.panel import Panel

hookimpl = pluggy.HookimplMarker("wavalidate")


class PairingDisplayPlugin:
    """Print each pairing token the network asks the user to confirm."""

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console(file=sys.stderr, highlight=False)

    @hookimpl
    def pairing_requested(self, session_name: str, token: str) -> None:
        self._console.print(
            Panel(
                token,
                title=f"Session {session_name}: pair this device",
                subtitle="link it from the messaging app",
                expand=False,
            )
        )
