"""Config file discovery.

The walk-up finder locates ``entryport.toml`` the way git finds ``.git/``.
``ENTRYPORT_CONFIG`` and ``--config`` override discovery.
"""

from __future__ import annotations

import os
from pathlib import Path

CONFIG_FILENAME = "entryport.toml"
CONFIG_ENV_VAR = "ENTRYPORT_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Walk up from *start* (default: cwd) looking for ``entryport.toml``.

    ``ENTRYPORT_CONFIG`` wins when set; a missing file there means no config.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        p = Path(env_path)
        return p if p.is_file() else None

    current = (start or Path.cwd()).resolve()
    while True:
        candidate = current / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        if current.parent == current:
            return None
        current = current.parent
