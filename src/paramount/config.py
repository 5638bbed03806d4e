"""Shared config defaults for paramount runs."""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_EXPORTS_FILE = os.environ.get(
    "PARAMOUNT_EXPORTS_FILE", "/etc/exports.d/paramount.exports"
)
DEFAULT_EXPORT_TAG = os.environ.get("PARAMOUNT_EXPORT_TAG", "paramount")
DEFAULT_MOUNT_TABLE = os.environ.get("PARAMOUNT_MOUNT_TABLE", "/proc/self/mounts")
DEFAULT_SERVER_HOST = os.environ.get("PARAMOUNT_SERVER_HOST", "127.0.0.1")
DEFAULT_NFS_VERSION = os.environ.get("PARAMOUNT_NFS_VERSION", "3")
DEFAULT_TMP_PREFIX = os.environ.get("PARAMOUNT_TMP_PREFIX", "paramount")
DEFAULT_THREADS = os.environ.get("PARAMOUNT_THREADS")


def _parse_threads(value: str | None) -> int:
    if value is None:
        return 128
    try:
        threads = int(value)
    except ValueError:
        return 128
    return threads if threads >= 0 else 128


DEFAULT_THREADS_VALUE = _parse_threads(DEFAULT_THREADS)


@dataclass(frozen=True)
class RunConfig:
    threads: int = DEFAULT_THREADS_VALUE
    preserve: bool = False
    verbose: bool = False
    exports_file: str = DEFAULT_EXPORTS_FILE
    export_tag: str = DEFAULT_EXPORT_TAG
    mount_table: str = DEFAULT_MOUNT_TABLE
    server_host: str = DEFAULT_SERVER_HOST
    nfs_version: str = DEFAULT_NFS_VERSION
    tmp_prefix: str = DEFAULT_TMP_PREFIX
    # None means the platform temp directory.
    tmp_parent: str | None = None
