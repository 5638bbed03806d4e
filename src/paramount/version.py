"""Version helpers for paramount."""

from __future__ import annotations

import os
from importlib import metadata


def get_version() -> str:
    env_version = os.environ.get("PARAMOUNT_VERSION")
    if env_version:
        return env_version
    try:
        return metadata.version("paramount")
    except metadata.PackageNotFoundError:
        return "unknown"
