"""Filesystem credential store, one credential area per session.

Layout::

    <root>/<auth_dir>/<session name>/creds.json

The credential payload is opaque to wavalidate: it is whatever JSON
object the transport hands back through ``CredentialsUpdated``.  Writes
go through a temporary file and ``os.replace`` so a crash mid-write
never leaves a truncated ``creds.json`` behind.
"""

from __future__ import annotations

import json
import logging
import os
import shutil
from pathlib import Path
from typing import Any

from wavalidate.domain.sessions import validate_session_name

CREDENTIALS_FILENAME = "creds.json"

logger = logging.getLogger(__name__)


class CredentialStore:
    """Load and persist per-session authentication material."""

    def __init__(self, auth_root: Path) -> None:
        self._root = auth_root

    @property
    def root(self) -> Path:
        return self._root

    def area(self, name: str) -> Path:
        """Resolve the credential directory for session *name*.

        Raises:
            ValueError: if *name* is not filesystem-safe.
        """
        if not validate_session_name(name):
            msg = f"Invalid session name: {name!r}"
            raise ValueError(msg)
        path = self._root / name
        if not path.resolve().is_relative_to(self._root.resolve()):
            msg = f"Session path escapes credential root: {path}"
            raise ValueError(msg)
        return path

    def exists(self, name: str) -> bool:
        return self.area(name).is_dir()

    def list_sessions(self) -> list[str]:
        """Names of all sessions that have a credential area, sorted."""
        if not self._root.is_dir():
            return []
        return sorted(
            p.name for p in self._root.iterdir() if p.is_dir() and validate_session_name(p.name)
        )

    def create(self, name: str) -> Path:
        """Create an empty credential area (no-op if it already exists)."""
        path = self.area(name)
        path.mkdir(parents=True, exist_ok=True)
        return path

    def load(self, name: str) -> dict[str, Any]:
        """Return the stored credential state, creating the area if absent.

        A missing ``creds.json`` yields an empty state, which makes the
        transport start interactive pairing.
        """
        path = self.create(name) / CREDENTIALS_FILENAME
        if not path.is_file():
            return {}
        data = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            msg = f"Credential file {path} does not contain a JSON object"
            raise ValueError(msg)
        return data

    def save(self, name: str, state: dict[str, Any]) -> Path:
        """Persist *state* for session *name*, replacing the previous file."""
        area = self.create(name)
        target = area / CREDENTIALS_FILENAME
        tmp = area / f".{CREDENTIALS_FILENAME}.tmp"
        tmp.write_text(json.dumps(state, separators=(",", ":")), encoding="utf-8")
        os.replace(tmp, target)
        logger.debug("Saved credentials for session %s", name)
        return target

    def remove(self, name: str) -> bool:
        """Delete the credential area. Returns False if it did not exist."""
        path = self.area(name)
        if not path.exists():
            return False
        shutil.rmtree(path)
        return True
