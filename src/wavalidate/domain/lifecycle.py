"""Connection lifecycle states and transition rules.

The session connection is an explicit finite-state machine:

    idle -> connecting -> open -> closed_transient -> connecting -> ...
                                \\-> closed_terminal

``closed_terminal`` is reached only through an explicit logout (or an
exhausted reconnect cap) and is final.  ``stopped`` is a local shutdown,
not a network event.
"""

from __future__ import annotations

from enum import StrEnum


class ConnectionState(StrEnum):
    """Lifecycle state of one session's connection."""

    IDLE = "idle"
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSED_TRANSIENT = "closed_transient"
    CLOSED_TERMINAL = "closed_terminal"
    STOPPED = "stopped"


class DisconnectReason(StrEnum):
    """Why the messaging network closed a connection.

    Transport adapters map their library-specific status codes onto these.
    Only ``LOGGED_OUT`` is terminal.
    """

    LOGGED_OUT = "logged_out"
    CONNECTION_LOST = "connection_lost"
    CONNECTION_CLOSED = "connection_closed"
    TIMED_OUT = "timed_out"
    RESTART_REQUIRED = "restart_required"
    UNKNOWN = "unknown"


CONNECTION_TRANSITIONS: dict[str, list[str]] = {
    "idle": ["connecting", "stopped"],
    "connecting": ["open", "closed_transient", "closed_terminal", "stopped"],
    "open": ["closed_transient", "closed_terminal", "stopped"],
    "closed_transient": ["connecting", "closed_terminal", "stopped"],
    "closed_terminal": ["stopped"],
    "stopped": [],
}


def is_valid_transition(
    current: str,
    target: str,
    transitions: dict[str, list[str]] = CONNECTION_TRANSITIONS,
) -> bool:
    """Check if transitioning from *current* to *target* is allowed."""
    allowed = transitions.get(current, [])
    return target in allowed


def is_terminal_disconnect(reason: str) -> bool:
    """Return True when *reason* means the session was explicitly logged out."""
    return reason == DisconnectReason.LOGGED_OUT
