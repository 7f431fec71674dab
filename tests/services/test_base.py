"""Tests for BaseService event dispatch."""

from __future__ import annotations

import pluggy

from wavalidate.infrastructure.workspace import Workspace
from wavalidate.services.base import BaseService

hookimpl = pluggy.HookimplMarker("wavalidate")


class _Exploding:
    @hookimpl
    def post_batch(self, input_path: str, output_path: str, summary: dict) -> None:
        raise RuntimeError("boom")


def test_dispatch_failure_becomes_warning(workspace: Workspace) -> None:
    workspace.plugins.register_plugin(_Exploding())
    warnings: list[str] = []
    BaseService(workspace)._dispatch_event(
        "post_batch", {"input_path": "a", "output_path": "b", "summary": {}}, warnings
    )
    assert warnings == ["Plugin hook post_batch failed"]


def test_dispatch_success_adds_nothing(workspace: Workspace) -> None:
    warnings: list[str] = []
    BaseService(workspace)._dispatch_event(
        "post_batch", {"input_path": "a", "output_path": "b", "summary": {}}, warnings
    )
    assert warnings == []
