"""Transport port — the boundary to the external messaging client library.

wavalidate does not speak the messaging network's wire protocol.  A
transport adapter (installed as a plugin, see ``provide_transport``)
implements :class:`MessagingTransport` and reports what happens on the
wire by emitting connection events into an :class:`EventChannel`.

The channel is the only way the connection layer talks to the session
manager.  ``emit`` is safe to call from any thread, so adapters built on
callback-driven or thread-based client libraries can forward events
without touching the event loop themselves.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from wavalidate.domain.lifecycle import DisconnectReason

# ---------------------------------------------------------------------------
# Connection events
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PairingRequested:
    """The network wants the user to pair this session (e.g. scan a code)."""

    token: str


@dataclass(frozen=True)
class ConnectionOpened:
    """The handshake completed; the connection can serve lookups."""


@dataclass(frozen=True)
class ConnectionClosed:
    """The connection went away."""

    reason: str = DisconnectReason.UNKNOWN
    detail: str | None = None


@dataclass(frozen=True)
class CredentialsUpdated:
    """The client library produced new credential material to persist."""

    credentials: dict[str, Any] = field(default_factory=dict)


ConnectionEvent = PairingRequested | ConnectionOpened | ConnectionClosed | CredentialsUpdated


class EventChannel:
    """Write end of the queue between one connection and its session manager.

    Every channel is stamped with the connection *generation* it was
    created for; the session manager drops events from generations it has
    already replaced.
    """

    def __init__(
        self,
        queue: asyncio.Queue[tuple[int, ConnectionEvent]],
        generation: int,
        *,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._queue = queue
        self._generation = generation
        self._loop = loop or asyncio.get_running_loop()

    @property
    def generation(self) -> int:
        return self._generation

    def emit(self, event: ConnectionEvent) -> None:
        """Queue *event* for the session manager (thread-safe)."""
        item = (self._generation, event)
        self._loop.call_soon_threadsafe(self._queue.put_nowait, item)


# ---------------------------------------------------------------------------
# Adapter protocols
# ---------------------------------------------------------------------------


@runtime_checkable
class Connection(Protocol):
    """An open connection handle, owned by the session manager."""

    async def lookup(self, query: str) -> list[Any]:
        """Ask the directory whether *query* exists.

        Returns the list of matching accounts; an empty list means the
        address is not registered.
        """
        ...

    async def close(self) -> None:
        """Release the connection. Must be safe to call more than once."""
        ...


@runtime_checkable
class MessagingTransport(Protocol):
    """Factory for connections to the messaging network."""

    async def open(
        self,
        session_name: str,
        credentials: dict[str, Any],
        channel: EventChannel,
    ) -> Connection:
        """Start connecting with *credentials*.

        Returns immediately with a connection handle; progress (pairing,
        open, close, credential updates) is reported through *channel*.
        """
        ...
