"""Tests for local directory plugin discovery in PluginManager."""

from __future__ import annotations

from pathlib import Path

from wavalidate.plugins.manager import PluginManager

_VALID_PLUGIN_SRC = """\
import pluggy

hookimpl = pluggy.HookimplMarker("wavalidate")


class LocalTransportPlugin:
    @hookimpl
    def provide_transport(self, settings):
        return "local-transport"
"""

_SYNTAX_ERROR_SRC = """\
def broken(
"""

_NO_HOOKS_SRC = """\
class NotAPlugin:
    def provide_transport(self, settings):
        return "ignored"
"""


def _write(directory: Path, name: str, source: str) -> None:
    directory.mkdir(parents=True, exist_ok=True)
    (directory / name).write_text(source)


class TestLocalDiscovery:
    def test_loads_plugin_file(self, tmp_path: Path, settings) -> None:
        plugin_dir = tmp_path / "plugins"
        _write(plugin_dir, "transport.py", _VALID_PLUGIN_SRC)
        pm = PluginManager()
        names = pm.discover_and_load(local_dir=plugin_dir)
        assert any("LocalTransportPlugin" in n for n in names)
        assert pm.get_transport(settings) == "local-transport"

    def test_broken_file_skipped(self, tmp_path: Path) -> None:
        plugin_dir = tmp_path / "plugins"
        _write(plugin_dir, "broken.py", _SYNTAX_ERROR_SRC)
        _write(plugin_dir, "good.py", _VALID_PLUGIN_SRC)
        names = PluginManager().discover_and_load(local_dir=plugin_dir)
        assert any("LocalTransportPlugin" in n for n in names)
        assert not any("broken" in n for n in names)

    def test_classes_without_hooks_ignored(self, tmp_path: Path) -> None:
        plugin_dir = tmp_path / "plugins"
        _write(plugin_dir, "plain.py", _NO_HOOKS_SRC)
        names = PluginManager().discover_and_load(local_dir=plugin_dir)
        assert not any("NotAPlugin" in n for n in names)

    def test_underscore_files_skipped(self, tmp_path: Path) -> None:
        plugin_dir = tmp_path / "plugins"
        _write(plugin_dir, "_private.py", _VALID_PLUGIN_SRC)
        names = PluginManager().discover_and_load(local_dir=plugin_dir)
        assert not any("LocalTransportPlugin" in n for n in names)
