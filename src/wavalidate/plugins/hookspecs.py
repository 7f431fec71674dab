"""Pluggy hook specifications for wavalidate.

Setup-time hooks supply collaborators (the messaging transport, extra
formatting policies).  Lifecycle hooks observe the session and batch;
their failures are logged and never interrupt a run.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pluggy

if TYPE_CHECKING:
    from wavalidate.config.settings import WavSettings
    from wavalidate.domain.formatting import PolicyFactory
    from wavalidate.infrastructure.transport import MessagingTransport

hookspec = pluggy.HookspecMarker("wavalidate")


class WavalidateHookSpec:
    """Hook specifications for the wavalidate plugin system."""

    # -- setup ---------------------------------------------------------

    @hookspec(firstresult=True)
    def provide_transport(self, settings: WavSettings) -> MessagingTransport | None:
        """Return the messaging transport adapter to connect with.

        The first non-None result wins.
        """

    @hookspec
    def register_format_policies(self) -> dict[str, PolicyFactory] | None:
        """Return ``{policy_name: factory}`` for extra formatting policies."""

    # -- lifecycle -----------------------------------------------------

    @hookspec
    def pairing_requested(self, session_name: str, token: str) -> None:
        """Called each time the network asks the user to pair a session."""

    @hookspec
    def session_state_changed(
        self,
        session_name: str,
        previous: str,
        state: str,
        reason: str | None,
    ) -> None:
        """Called after every connection state transition."""

    @hookspec
    def post_batch(
        self,
        input_path: str,
        output_path: str,
        summary: dict[str, Any],
    ) -> None:
        """Called after a batch run finished writing its output file."""
