"""Plugin discovery, loading, and hook dispatch.

Discovery: the ``wavalidate.plugins`` entry point group plus single-file
plugins in a local directory (``.wavalidate/plugins/`` by default).
"""

from __future__ import annotations

import importlib.util
import inspect
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

import pluggy

from wavalidate.plugins.hookspecs import WavalidateHookSpec

if TYPE_CHECKING:
    from wavalidate.config.settings import WavSettings
    from wavalidate.infrastructure.transport import MessagingTransport

PROJECT_NAME = "wavalidate"
ENTRY_POINT_GROUP = "wavalidate.plugins"

logger = logging.getLogger(__name__)


class PluginManager:
    """Thin wrapper over :class:`pluggy.PluginManager` for wavalidate hooks."""

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(WavalidateHookSpec)
        self._loaded = False

    def discover_and_load(self, *, local_dir: Path | None = None) -> list[str]:
        """Load entry-point plugins and local single-file plugins.

        Formatting policies exposed by the loaded plugins are registered
        right away.  Returns the names of all registered plugins.
        """
        self._pm.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
        self._instantiate_class_plugins()
        if local_dir is not None:
            self._discover_local(local_dir)
        for plugin in self._pm.get_plugins():
            self._register_plugin_policies(plugin)
        self._loaded = True
        return self.list_plugin_names()

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        """Register a plugin instance directly (built-ins, tests)."""
        resolved_name = name or plugin.__class__.__name__
        self._pm.register(plugin, name=resolved_name)
        if self._loaded:
            self._register_plugin_policies(plugin)
        logger.debug("Registered plugin: %s", resolved_name)

    def unregister(self, plugin: object) -> None:
        self._pm.unregister(plugin)

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    @property
    def hook(self) -> pluggy.HookRelay:
        return self._pm.hook

    def get_plugins(self) -> list[object]:
        return list(self._pm.get_plugins())

    def list_plugin_names(self) -> list[str]:
        return [self._pm.get_name(p) or p.__class__.__name__ for p in self._pm.get_plugins()]

    # ------------------------------------------------------------------
    # Dispatch helpers
    # ------------------------------------------------------------------

    def get_transport(self, settings: WavSettings) -> MessagingTransport | None:
        """Ask plugins for a transport adapter; None when nobody provides one."""
        return self._pm.hook.provide_transport(settings=settings)

    def notify(self, hook_name: str, **payload: Any) -> str | None:
        """Call a lifecycle hook, converting any plugin failure into a warning.

        Returns the warning text on failure, None on success.
        """
        hook_fn = getattr(self._pm.hook, hook_name, None)
        if hook_fn is None:
            return None
        try:
            hook_fn(**payload)
        except Exception:
            logger.warning("Plugin hook %s failed", hook_name, exc_info=True)
            return f"Plugin hook {hook_name} failed"
        return None

    # ------------------------------------------------------------------
    # Local directory discovery
    # ------------------------------------------------------------------

    def _discover_local(self, local_dir: Path) -> None:
        """Import every ``*.py`` in *local_dir* and register its plugin classes.

        Files starting with ``_`` are skipped.  A plugin that fails to
        import or instantiate is logged and skipped.
        """
        if not local_dir.is_dir():
            return

        for py_file in sorted(local_dir.glob("*.py")):
            if py_file.name.startswith("_"):
                continue
            module_name = f"wavalidate_local_plugin_{py_file.stem}"
            try:
                spec = importlib.util.spec_from_file_location(module_name, py_file)
                if spec is None or spec.loader is None:
                    logger.warning("Could not create module spec for %s", py_file)
                    continue
                module = importlib.util.module_from_spec(spec)
                sys.modules[module_name] = module
                spec.loader.exec_module(module)
            except Exception:
                logger.warning("Failed to load local plugin %s", py_file, exc_info=True)
                sys.modules.pop(module_name, None)
                continue

            for _attr, obj in inspect.getmembers(module, inspect.isclass):
                if obj.__module__ != module_name or not self._has_hook_impls(obj):
                    continue
                try:
                    self.register_plugin(obj(), name=f"{module_name}.{obj.__name__}")
                except Exception:
                    logger.warning(
                        "Failed to instantiate plugin class %s from %s",
                        obj.__name__,
                        py_file,
                        exc_info=True,
                    )

    def _instantiate_class_plugins(self) -> None:
        """Swap plugin classes registered by entry points for instances."""
        for plugin in list(self._pm.get_plugins()):
            if not inspect.isclass(plugin) or not self._has_hook_impls(plugin):
                continue
            plugin_name = self._pm.get_name(plugin) or plugin.__name__
            self._pm.unregister(plugin)
            try:
                instance = plugin()
            except Exception:
                logger.warning("Failed to instantiate plugin %s", plugin_name, exc_info=True)
                continue
            self._pm.register(instance, name=plugin_name)

    @staticmethod
    def _register_plugin_policies(plugin: object) -> None:
        """Feed a plugin's ``register_format_policies`` result into the registry."""
        from wavalidate.domain.formatting import register_policy

        hook = getattr(plugin, "register_format_policies", None)
        if hook is None:
            return
        try:
            policies = hook()
        except Exception:
            logger.warning("Failed to collect formatting policies", exc_info=True)
            return
        if not policies:
            return
        if not isinstance(policies, dict):
            logger.warning("Plugin returned non-dict formatting policies: %r", policies)
            return
        for name, factory in policies.items():
            try:
                register_policy(name, factory)
            except (TypeError, ValueError):
                logger.warning("Skipping formatting policy %r", name, exc_info=True)

    @staticmethod
    def _has_hook_impls(cls: type) -> bool:
        """True if *cls* has a method decorated with ``@hookimpl``."""
        return any(
            callable(getattr(cls, name, None))
            and getattr(getattr(cls, name), f"{PROJECT_NAME}_impl", None)
            for name in dir(cls)
            if not name.startswith("_")
        )
