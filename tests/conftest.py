"""Shared pytest fixtures and test helpers for wavalidate tests."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterable
from pathlib import Path
from typing import Any

import pluggy
import pytest
from click.testing import CliRunner

from wavalidate.config.settings import WavSettings
from wavalidate.domain.lifecycle import DisconnectReason
from wavalidate.infrastructure.transport import (
    ConnectionClosed,
    ConnectionOpened,
    CredentialsUpdated,
    EventChannel,
    PairingRequested,
)
from wavalidate.infrastructure.workspace import Workspace
from wavalidate.plugins.manager import PluginManager

hookimpl = pluggy.HookimplMarker("wavalidate")


# ---------------------------------------------------------------------------
# In-memory messaging transport
# ---------------------------------------------------------------------------


class FakeConnection:
    """Connection handle that answers lookups from the transport's tables."""

    def __init__(self, transport: FakeTransport, channel: EventChannel) -> None:
        self.transport = transport
        self.channel = channel
        self.closed = False

    async def lookup(self, query: str) -> list[Any]:
        self.transport.lookups.append(query)
        address = query.split("@", 1)[0]
        if self.transport.on_lookup is not None:
            await self.transport.on_lookup(self, address)
        if address in self.transport.failing:
            raise ConnectionError("directory unavailable")
        if address in self.transport.registered:
            return [{"jid": query, "exists": True}]
        return []

    async def close(self) -> None:
        self.closed = True


class FakeTransport:
    """Scripted transport.

    Each ``open()`` pops one action from *script* (default ``"open"``):

    - ``open``    emit ConnectionOpened
    - ``lost``    emit ConnectionClosed(connection_lost)
    - ``logout``  emit ConnectionClosed(logged_out)
    - ``silent``  emit nothing
    - ``raise``   raise from open()
    """

    def __init__(
        self,
        *,
        registered: Iterable[str] = (),
        failing: Iterable[str] = (),
        script: Iterable[str] = (),
        pairing_token: str | None = None,
        credentials_update: dict[str, Any] | None = None,
    ) -> None:
        self.registered = set(registered)
        self.failing = set(failing)
        self.script = list(script)
        self.pairing_token = pairing_token
        self.credentials_update = credentials_update
        self.lookups: list[str] = []
        self.opens: list[tuple[str, dict[str, Any]]] = []
        self.connections: list[FakeConnection] = []
        self.on_lookup: Callable[[FakeConnection, str], Awaitable[None]] | None = None

    async def open(
        self, session_name: str, credentials: dict[str, Any], channel: EventChannel
    ) -> FakeConnection:
        self.opens.append((session_name, dict(credentials)))
        action = self.script.pop(0) if self.script else "open"
        if action == "raise":
            raise ConnectionError("network unreachable")

        connection = FakeConnection(self, channel)
        self.connections.append(connection)
        if self.pairing_token is not None and not credentials:
            channel.emit(PairingRequested(token=self.pairing_token))
        if self.credentials_update is not None:
            channel.emit(CredentialsUpdated(credentials=self.credentials_update))
        if action == "open":
            channel.emit(ConnectionOpened())
        elif action == "lost":
            channel.emit(ConnectionClosed(reason=DisconnectReason.CONNECTION_LOST))
        elif action == "logout":
            channel.emit(ConnectionClosed(reason=DisconnectReason.LOGGED_OUT))
        return connection

    async def wait_for_opens(self, count: int, timeout: float = 1.0) -> None:
        async def _poll() -> None:
            while len(self.opens) < count:
                await asyncio.sleep(0.001)

        await asyncio.wait_for(_poll(), timeout)


class RecordingPlugin:
    """Records lifecycle hook calls."""

    def __init__(self) -> None:
        self.pairings: list[tuple[str, str]] = []
        self.states: list[tuple[str, str, str | None]] = []
        self.batches: list[dict[str, Any]] = []

    @hookimpl
    def pairing_requested(self, session_name: str, token: str) -> None:
        self.pairings.append((session_name, token))

    @hookimpl
    def session_state_changed(
        self, session_name: str, previous: str, state: str, reason: str | None
    ) -> None:
        self.states.append((previous, state, reason))

    @hookimpl
    def post_batch(self, input_path: str, output_path: str, summary: dict[str, Any]) -> None:
        self.batches.append({"input": input_path, "output": output_path, **summary})


class TransportPlugin:
    """Supplies a fixed transport through the provide_transport hook."""

    def __init__(self, transport: Any) -> None:
        self.transport = transport

    @hookimpl
    def provide_transport(self, settings: WavSettings) -> Any:
        return self.transport


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's WAVALIDATE_* environment out of the tests."""
    import os

    for key in list(os.environ):
        if key.startswith("WAVALIDATE_"):
            monkeypatch.delenv(key)


@pytest.fixture
def settings(tmp_path: Path) -> WavSettings:
    """Settings rooted at tmp_path with an immediate reconnect."""
    return WavSettings.from_cli(root=tmp_path, session={"reconnect_delay": 0.0})


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def recorder() -> RecordingPlugin:
    return RecordingPlugin()


@pytest.fixture
def plugins(recorder: RecordingPlugin) -> PluginManager:
    pm = PluginManager()
    pm.register_plugin(recorder, name="recorder")
    return pm


@pytest.fixture
def workspace(
    settings: WavSettings, plugins: PluginManager, transport: FakeTransport
) -> Workspace:
    return Workspace(settings, plugins=plugins, transport=transport)


@pytest.fixture
def cli_transport(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, transport: FakeTransport
) -> FakeTransport:
    """Run CLI commands in tmp_path with the fake transport installed."""
    monkeypatch.chdir(tmp_path)
    (tmp_path / "wavalidate.toml").write_text("[session]\nreconnect_delay = 0.0\n")
    monkeypatch.setattr(Workspace, "transport", lambda self: transport)
    return transport
