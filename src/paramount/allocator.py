"""Server/client directory pairs for a run."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from .errors import FilesystemError

logger = logging.getLogger(__name__)

MOUNT_SUBDIR = "mount"
CLIENT_SUBDIR = "client"


@dataclass(frozen=True)
class MountPair:
    identifier: int
    server_dir: Path
    client_dir: Path


def pair_dirname(index: int) -> str:
    return f"d{index:04}"


def _make_dir(path: Path, what: str) -> None:
    try:
        path.mkdir()
    except OSError as exc:
        raise FilesystemError(
            f"Failed to create {what} {path}: {exc.strerror or exc}"
        ) from exc


def allocate_pairs(root: str | Path, count: int) -> list[MountPair]:
    """Create ``count`` server directories and client mountpoints under ``root``.

    Layout is ``root/mount/dNNNN`` and ``root/client/dNNNN``. Nothing is rolled
    back on failure; the caller owns ``root`` and removes it wholesale.
    """
    if count < 0:
        raise ValueError(f"count must be >= 0, got {count}")
    # The kernel reports resolved paths in the mount table.
    root = Path(os.path.realpath(root))

    mount_root = root / MOUNT_SUBDIR
    _make_dir(mount_root, "mount root directory")
    server_dirs = []
    for index in range(count):
        server_dir = mount_root / pair_dirname(index)
        _make_dir(server_dir, "mount directory")
        logger.debug("Created mount %s", server_dir)
        server_dirs.append(server_dir)

    client_root = root / CLIENT_SUBDIR
    _make_dir(client_root, "client root directory")
    pairs = []
    for index, server_dir in enumerate(server_dirs):
        client_dir = client_root / pair_dirname(index)
        _make_dir(client_dir, "client directory")
        logger.debug("Created client mountpoint %s", client_dir)
        pairs.append(MountPair(identifier=index, server_dir=server_dir, client_dir=client_dir))
    return pairs


def client_root_of(root: str | Path) -> Path:
    return Path(os.path.realpath(root)) / CLIENT_SUBDIR
