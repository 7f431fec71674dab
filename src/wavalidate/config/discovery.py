"""Config file discovery.

``wavalidate.toml`` is looked up from the working directory towards the
filesystem root, so a config placed next to a folder of number lists
applies to every run started below it.  ``WAVALIDATE_CONFIG`` pins an
explicit file and disables the walk-up.
"""

from __future__ import annotations

import os
from pathlib import Path

CONFIG_FILENAME = "wavalidate.toml"
CONFIG_ENV_VAR = "WAVALIDATE_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Return the nearest wavalidate.toml at or above *start*, or None."""
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        pinned = Path(env_path)
        return pinned if pinned.is_file() else None

    directory = (start or Path.cwd()).resolve()
    for candidate_dir in (directory, *directory.parents):
        candidate = candidate_dir / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None
