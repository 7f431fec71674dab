"""Tests for the built-in pairing display plugin."""

from __future__ import annotations

from io import StringIO

from rich.console import Console

from wavalidate.plugins.builtins.pairing import PairingDisplayPlugin
from wavalidate.plugins.manager import PluginManager


def test_prints_token() -> None:
    buffer = StringIO()
    plugin = PairingDisplayPlugin(console=Console(file=buffer, width=80, no_color=True))
    plugin.pairing_requested(session_name="office", token="2@ABCDEF")
    output = buffer.getvalue()
    assert "2@ABCDEF" in output
    assert "office" in output


def test_called_through_hook() -> None:
    buffer = StringIO()
    pm = PluginManager()
    pm.register_plugin(
        PairingDisplayPlugin(console=Console(file=buffer, width=80, no_color=True)),
        name="pairing",
    )
    pm.notify("pairing_requested", session_name="office", token="TOKEN-1")
    assert "TOKEN-1" in buffer.getvalue()
