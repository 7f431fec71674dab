"""SessionManager — one messaging session's connection lifecycle.

The transport reports what happens on the wire as events pushed into an
:class:`~wavalidate.infrastructure.transport.EventChannel`.  A single pump
task drains the channel and drives the connection state machine from
:mod:`wavalidate.domain.lifecycle`:

- ``PairingRequested``   -> ``pairing_requested`` hook (may repeat)
- ``CredentialsUpdated`` -> persisted immediately
- ``ConnectionOpened``   -> ``open``; the only way readiness becomes true
- ``ConnectionClosed``   -> ``closed_terminal`` on logout, otherwise
  ``closed_transient`` plus exactly one reconnect after a fixed delay

INVARIANT: Event handling never raises into the caller.  Failures end up
as a reconnect or as the terminal state, reported through logs, the
``state`` property, and the ``session_state_changed`` hook.
"""

from __future__ import annotations

import asyncio
import contextlib
from typing import TYPE_CHECKING

import structlog

from wavalidate.domain.lifecycle import (
    ConnectionState,
    DisconnectReason,
    is_terminal_disconnect,
    is_valid_transition,
)
from wavalidate.domain.sessions import normalize_session_name, validate_session_name
from wavalidate.infrastructure.credentials import CREDENTIALS_FILENAME
from wavalidate.infrastructure.transport import (
    ConnectionClosed,
    ConnectionEvent,
    ConnectionOpened,
    CredentialsUpdated,
    EventChannel,
    PairingRequested,
)
from wavalidate.services.base import BaseService
from wavalidate.services.result import ServiceResult

if TYPE_CHECKING:
    from wavalidate.infrastructure.credentials import CredentialStore
    from wavalidate.infrastructure.transport import Connection, MessagingTransport
    from wavalidate.plugins.manager import PluginManager

log = structlog.get_logger(__name__)

DEFAULT_RECONNECT_DELAY = 5.0
RECONNECT_LIMIT_REASON = "reconnect_limit"


class SessionUnavailableError(RuntimeError):
    """The session can no longer become ready."""

    def __init__(self, session_name: str, state: str, reason: str | None = None) -> None:
        self.session_name = session_name
        self.state = state
        self.reason = reason
        suffix = f" ({reason})" if reason else ""
        super().__init__(f"Session {session_name!r} is {state}{suffix}")


class SessionLoggedOutError(SessionUnavailableError):
    """The network logged the session out; its credentials must be discarded."""


class SessionManager:
    """Owns the connection of one named session.

    Args:
        name: Session name; also the credential area name.
        credentials: Store that loads and persists credential state.
        transport: Adapter that opens connections to the network.
        reconnect_delay: Seconds to wait before a reconnect attempt.
        max_reconnect_attempts: Consecutive reconnects allowed before the
            session is declared dead.  None retries forever.
        plugins: Receives ``pairing_requested`` and
            ``session_state_changed`` notifications.
    """

    def __init__(
        self,
        name: str,
        *,
        credentials: CredentialStore,
        transport: MessagingTransport,
        reconnect_delay: float = DEFAULT_RECONNECT_DELAY,
        max_reconnect_attempts: int | None = None,
        plugins: PluginManager | None = None,
    ) -> None:
        self._name = name
        self._credentials = credentials
        self._transport = transport
        self._reconnect_delay = reconnect_delay
        self._max_reconnect_attempts = max_reconnect_attempts
        self._plugins = plugins

        self._state = ConnectionState.IDLE
        self._connection: Connection | None = None
        self._generation = 0
        self._queue: asyncio.Queue[tuple[int, ConnectionEvent]] = asyncio.Queue()
        self._open_lock = asyncio.Lock()
        self._pump_task: asyncio.Task[None] | None = None
        self._reconnect_task: asyncio.Task[None] | None = None
        self._reconnect_attempts = 0
        self._ready = asyncio.Event()
        self._dead = asyncio.Event()
        self._dead_reason: str | None = None
        self._log = log.bind(session=name)

    # ------------------------------------------------------------------
    # Read-only view
    # ------------------------------------------------------------------

    @property
    def name(self) -> str:
        return self._name

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state is ConnectionState.OPEN

    @property
    def is_dead(self) -> bool:
        return self._dead.is_set()

    @property
    def dead_reason(self) -> str | None:
        return self._dead_reason

    @property
    def connection(self) -> Connection | None:
        """Current connection handle. Callers must not replace or close it."""
        return self._connection

    @property
    def reconnect_attempts(self) -> int:
        return self._reconnect_attempts

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def initialize(self) -> None:
        """Load credentials and open a connection.

        Idempotent: a no-op while a connection is already connecting or
        open.  A transport that fails to open counts as a transient
        disconnect and schedules a reconnect.

        Raises:
            SessionUnavailableError: the session is dead or shut down.
            OSError, ValueError: the credential area cannot be read.
        """
        async with self._open_lock:
            if self._state in (ConnectionState.CONNECTING, ConnectionState.OPEN):
                return
            if self._dead.is_set():
                raise self._unavailable_error()

            self._ensure_pump()
            credentials = self._credentials.load(self._name)

            self._generation += 1
            channel = EventChannel(self._queue, self._generation)
            self._transition(ConnectionState.CONNECTING)
            try:
                self._connection = await self._transport.open(self._name, credentials, channel)
            except Exception as exc:
                self._log.warning("session.open_failed", error=str(exc))
                await self._handle_closed(
                    ConnectionClosed(reason=DisconnectReason.CONNECTION_LOST, detail=str(exc))
                )

    async def wait_ready(self, timeout: float | None = None) -> None:
        """Suspend until the connection is open.

        Returns at once when already open.  No polling: the waiter is
        woken by the ``open`` transition or by the session dying.

        Raises:
            SessionLoggedOutError: the session was logged out meanwhile.
            SessionUnavailableError: the session was shut down or gave up.
            TimeoutError: *timeout* seconds passed without readiness.
        """
        if self._dead.is_set():
            raise self._unavailable_error()
        if self._ready.is_set():
            return

        ready = asyncio.ensure_future(self._ready.wait())
        dead = asyncio.ensure_future(self._dead.wait())
        try:
            await asyncio.wait({ready, dead}, timeout=timeout, return_when=asyncio.FIRST_COMPLETED)
        finally:
            ready.cancel()
            dead.cancel()

        if self._dead.is_set():
            raise self._unavailable_error()
        if not self._ready.is_set():
            msg = f"Session {self._name!r} not ready after {timeout}s"
            raise TimeoutError(msg)

    async def shutdown(self) -> None:
        """Stop the pump, cancel any pending reconnect, close the connection."""
        if self._state is ConnectionState.STOPPED:
            return
        self._transition(ConnectionState.STOPPED)
        self._dead.set()
        await self._cancel_reconnect()
        if self._pump_task is not None:
            self._pump_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._pump_task
            self._pump_task = None
        await self._drop_connection()

    # ------------------------------------------------------------------
    # Event pump
    # ------------------------------------------------------------------

    def _ensure_pump(self) -> None:
        if self._pump_task is None or self._pump_task.done():
            self._pump_task = asyncio.get_running_loop().create_task(
                self._pump(), name=f"wavalidate-session-{self._name}"
            )

    async def _pump(self) -> None:
        while True:
            generation, event = await self._queue.get()
            # Events wait until the connection that emitted them is installed.
            async with self._open_lock:
                if generation != self._generation:
                    self._log.debug("session.stale_event", event_type=type(event).__name__)
                    continue
                try:
                    await self._apply(event)
                except Exception:
                    self._log.exception("session.event_failed", event_type=type(event).__name__)

    async def _apply(self, event: ConnectionEvent) -> None:
        if self._state is ConnectionState.STOPPED:
            return
        if isinstance(event, PairingRequested):
            self._log.info("session.pairing_requested")
            self._notify("pairing_requested", session_name=self._name, token=event.token)
        elif isinstance(event, CredentialsUpdated):
            try:
                self._credentials.save(self._name, event.credentials)
            except (OSError, TypeError, ValueError) as exc:
                self._log.error("session.credentials_save_failed", error=str(exc))
        elif isinstance(event, ConnectionOpened):
            if self._transition(ConnectionState.OPEN):
                self._reconnect_attempts = 0
                self._log.info("session.connected")
        elif isinstance(event, ConnectionClosed):
            await self._handle_closed(event)

    # ------------------------------------------------------------------
    # Disconnect handling
    # ------------------------------------------------------------------

    async def _handle_closed(self, event: ConnectionClosed) -> None:
        if self._state in (ConnectionState.CLOSED_TERMINAL, ConnectionState.STOPPED):
            return

        if is_terminal_disconnect(event.reason):
            await self._enter_terminal(event.reason)
            self._log.warning(
                "session.logged_out",
                hint=f"remove the credential area (wavalidate session remove {self._name}) "
                "and pair again",
            )
            return

        self._transition(ConnectionState.CLOSED_TRANSIENT, event.reason)
        limit = self._max_reconnect_attempts
        if limit is not None and self._reconnect_attempts >= limit:
            self._log.error("session.reconnect_limit", attempts=self._reconnect_attempts)
            await self._enter_terminal(RECONNECT_LIMIT_REASON)
            return
        self._schedule_reconnect(event)

    def _schedule_reconnect(self, event: ConnectionClosed) -> None:
        if self._reconnect_task is not None and not self._reconnect_task.done():
            return
        self._reconnect_attempts += 1
        self._log.info(
            "session.reconnect_scheduled",
            reason=str(event.reason),
            detail=event.detail,
            delay=self._reconnect_delay,
            attempt=self._reconnect_attempts,
        )
        self._reconnect_task = asyncio.get_running_loop().create_task(self._reconnect())

    async def _reconnect(self) -> None:
        await asyncio.sleep(self._reconnect_delay)
        # Detach so a failure inside initialize() can schedule the next attempt.
        self._reconnect_task = None
        await self._drop_connection()
        try:
            await self.initialize()
        except SessionUnavailableError:
            return
        except Exception as exc:
            self._log.warning("session.reconnect_failed", error=str(exc))
            await self._handle_closed(
                ConnectionClosed(reason=DisconnectReason.CONNECTION_LOST, detail=str(exc))
            )

    async def _enter_terminal(self, reason: str) -> None:
        self._transition(ConnectionState.CLOSED_TERMINAL, reason)
        self._dead_reason = reason
        self._dead.set()
        await self._cancel_reconnect()
        await self._drop_connection()

    async def _cancel_reconnect(self) -> None:
        task = self._reconnect_task
        self._reconnect_task = None
        if task is None or task.done() or task is asyncio.current_task():
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def _drop_connection(self) -> None:
        connection, self._connection = self._connection, None
        if connection is None:
            return
        try:
            await connection.close()
        except Exception as exc:
            self._log.debug("session.close_failed", error=str(exc))

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------

    def _transition(self, target: ConnectionState, reason: str | None = None) -> bool:
        previous = self._state
        if not is_valid_transition(previous, target):
            self._log.debug("session.ignored_transition", current=str(previous), target=str(target))
            return False
        self._state = target
        if target is ConnectionState.OPEN:
            self._ready.set()
        else:
            self._ready.clear()
        self._log.debug(
            "session.state", previous=str(previous), state=str(target), reason=reason
        )
        self._notify(
            "session_state_changed",
            session_name=self._name,
            previous=str(previous),
            state=str(target),
            reason=str(reason) if reason is not None else None,
        )
        return True

    def _notify(self, hook_name: str, **payload: object) -> None:
        if self._plugins is not None:
            self._plugins.notify(hook_name, **payload)

    def _unavailable_error(self) -> SessionUnavailableError:
        if self._dead_reason is not None and is_terminal_disconnect(self._dead_reason):
            return SessionLoggedOutError(self._name, str(self._state), self._dead_reason)
        return SessionUnavailableError(self._name, str(self._state), self._dead_reason)


# ---------------------------------------------------------------------------
# Credential area administration
# ---------------------------------------------------------------------------


class SessionService(BaseService):
    """List, create, and remove named sessions (their credential areas)."""

    def list_sessions(self) -> ServiceResult:
        store = self._workspace.credentials
        items = [
            {
                "name": name,
                "path": str(store.area(name)),
                "paired": (store.area(name) / CREDENTIALS_FILENAME).is_file(),
            }
            for name in store.list_sessions()
        ]
        return ServiceResult(ok=True, op="session_list", data={"count": len(items), "items": items})

    def create(self, name: str) -> ServiceResult:
        op = "session_create"
        name = normalize_session_name(name)
        if not validate_session_name(name):
            return ServiceResult.failure(
                op,
                "INVALID_SESSION_NAME",
                f"Invalid session name: {name!r} (letters, digits, '.', '_', '-'; "
                "must not start with '.')",
            )
        store = self._workspace.credentials
        if store.exists(name):
            return ServiceResult.failure(op, "SESSION_EXISTS", f"Session {name} already exists")
        try:
            path = store.create(name)
        except OSError as exc:
            return ServiceResult.failure(op, "CREDENTIALS_ERROR", str(exc))
        return ServiceResult(ok=True, op=op, data={"name": name, "path": str(path)})

    def remove(self, name: str) -> ServiceResult:
        op = "session_remove"
        name = normalize_session_name(name)
        if not validate_session_name(name):
            return ServiceResult.failure(
                op, "INVALID_SESSION_NAME", f"Invalid session name: {name!r}"
            )
        try:
            removed = self._workspace.credentials.remove(name)
        except OSError as exc:
            return ServiceResult.failure(op, "CREDENTIALS_ERROR", str(exc))
        if not removed:
            return ServiceResult.failure(op, "SESSION_NOT_FOUND", f"No session named {name}")
        return ServiceResult(ok=True, op=op, data={"name": name, "removed": True})
