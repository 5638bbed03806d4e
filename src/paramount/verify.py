"""Cross-check the live mount table against the expected server/client map."""

from __future__ import annotations

import logging
from typing import Iterable

from .allocator import MountPair
from .errors import VerificationError
from .mounttab import LiveMountRecord

logger = logging.getLogger(__name__)


def build_expected_map(pairs: Iterable[MountPair]) -> dict[str, str]:
    return {str(pair.server_dir): str(pair.client_dir) for pair in pairs}


def export_path(device: str) -> str:
    """Strip the ``host:`` prefix from an NFS device string."""
    # Split on ":/" so bracketed IPv6 hosts keep their colons.
    index = device.find(":/")
    if index >= 0:
        return device[index + 1 :]
    return device


def verify_mounts(
    records: Iterable[LiveMountRecord],
    expected: dict[str, str],
    required: Iterable[str] | None = None,
) -> None:
    """Raise VerificationError on the first inconsistency found.

    Every live ``nfs``/``nfs4`` record must map to an expected server
    directory and sit on that directory's client mountpoint. Records of other
    filesystem types are ignored. When ``required`` is given, each listed
    server directory must also appear among the live NFS records.
    """
    seen = set()
    for record in records:
        if not record.is_nfs:
            continue
        source = export_path(record.device)
        client = expected.get(source)
        if client is None:
            raise VerificationError(record.device, f"Mount '{record.device}' not found in map")
        if client != record.mountpoint:
            raise VerificationError(
                record.device,
                f"Mount '{record.device}' expected mountpoint {client} found {record.mountpoint}",
            )
        seen.add(source)

    for server_dir in required or ():
        if server_dir not in seen:
            raise VerificationError(
                server_dir, f"Mount '{server_dir}' missing from live mount table"
            )
    logger.debug("Mounts check out")
