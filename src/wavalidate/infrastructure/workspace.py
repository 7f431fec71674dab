"""Workspace — the single dependency injected into every service.

Bundles the resolved settings with the collaborators built from them:
the credential store, the plugin manager (loaded lazily, so ``--help``
never imports third-party plugins), the formatting policy, and the
messaging transport supplied by a plugin.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from wavalidate.domain.formatting import build_policy
from wavalidate.infrastructure.credentials import CredentialStore

if TYPE_CHECKING:
    from wavalidate.config.settings import WavSettings
    from wavalidate.domain.formatting import FormattingPolicy
    from wavalidate.infrastructure.transport import MessagingTransport
    from wavalidate.plugins.manager import PluginManager

logger = logging.getLogger(__name__)


class Workspace:
    """Settings plus the long-lived collaborators of one invocation.

    Args:
        settings: Resolved settings.
        plugins: Pre-built plugin manager (tests); discovered lazily otherwise.
        transport: Explicit transport, bypassing the ``provide_transport`` hook.
    """

    def __init__(
        self,
        settings: WavSettings,
        *,
        plugins: PluginManager | None = None,
        transport: MessagingTransport | None = None,
    ) -> None:
        self._settings = settings
        self._credentials = CredentialStore(settings.auth_root)
        self._plugins = plugins
        self._transport = transport

    @property
    def settings(self) -> WavSettings:
        return self._settings

    @property
    def root(self) -> Path:
        return self._settings.root

    @property
    def credentials(self) -> CredentialStore:
        return self._credentials

    @property
    def plugins(self) -> PluginManager:
        """The plugin manager (discovery runs on first access)."""
        if self._plugins is None:
            from wavalidate.plugins.builtins.pairing import PairingDisplayPlugin
            from wavalidate.plugins.manager import PluginManager

            pm = PluginManager()
            if self._settings.plugins.pairing.get("enabled", True):
                pm.register_plugin(PairingDisplayPlugin(), name="pairing")
            names = pm.discover_and_load(local_dir=self.root / self._settings.plugins.local_dir)
            logger.debug("Loaded plugins: %s", ", ".join(names) or "(none)")
            self._plugins = pm
        return self._plugins

    def formatting_policy(self) -> FormattingPolicy:
        """Build the configured formatting policy.

        Plugins are loaded first so plugin-provided policies resolve.

        Raises:
            ValueError: if the configured policy name is unknown.
        """
        cfg = self._settings.format
        _ = self.plugins
        return build_policy(cfg.policy, cfg.policy_options())

    def transport(self) -> MessagingTransport | None:
        """The explicit transport, or whatever a plugin provides."""
        if self._transport is None:
            self._transport = self.plugins.get_transport(self._settings)
        return self._transport
