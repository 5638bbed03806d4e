"""Reader for the Linux live mount table (``/proc/self/mounts``)."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

NFS_TYPES = frozenset({"nfs", "nfs4"})

_OCTAL_ESCAPE = re.compile(r"\\([0-7]{3})")


@dataclass(frozen=True)
class LiveMountRecord:
    device: str
    mountpoint: str
    fstype: str
    options: tuple[str, ...]

    @property
    def is_nfs(self) -> bool:
        return self.fstype in NFS_TYPES


def _unescape(field: str) -> str:
    # The kernel escapes space, tab, newline and backslash as \ooo.
    return _OCTAL_ESCAPE.sub(lambda m: chr(int(m.group(1), 8)), field)


def parse_mount_table(lines: Iterable[str]) -> list[LiveMountRecord]:
    records = []
    for line in lines:
        parts = line.split()
        if len(parts) < 4:
            continue
        device, mountpoint, fstype, options = parts[:4]
        records.append(
            LiveMountRecord(
                device=_unescape(device),
                mountpoint=_unescape(mountpoint),
                fstype=fstype,
                options=tuple(options.split(",")),
            )
        )
    return records


def read_mount_table(path: str | Path = "/proc/self/mounts") -> list[LiveMountRecord]:
    # Mount paths are raw bytes; keep undecodable ones intact for umount.
    with open(path, "r", encoding="utf-8", errors="surrogateescape") as mounts:
        return parse_mount_table(mounts)


def nfs_mountpoints_under(records: Iterable[LiveMountRecord], root: str | Path) -> list[str]:
    """NFS mountpoints at or below ``root``, deepest first."""
    root_str = str(root).rstrip("/")
    prefix = root_str + "/"
    found = [
        record.mountpoint
        for record in records
        if record.is_nfs
        and (record.mountpoint == root_str or record.mountpoint.startswith(prefix))
    ]
    return sorted(set(found), key=lambda p: (-p.count("/"), p))
