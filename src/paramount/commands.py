"""Wrappers around the exportfs, mount and umount utilities."""

from __future__ import annotations

import logging
import os
import shlex
import shutil
import subprocess
from typing import Sequence

from .allocator import MountPair
from .config import RunConfig
from .errors import SystemCommandError

logger = logging.getLogger(__name__)


def _sudo_prefix() -> list[str]:
    override = os.environ.get("PARAMOUNT_SUDO_CMD")
    if override is not None:
        return shlex.split(override)
    return ["sudo"]


def _maybe_sudo(cmd: list[str]) -> list[str]:
    if os.geteuid() == 0:
        return cmd
    prefix = _sudo_prefix()
    if not prefix:
        return cmd
    if shutil.which(prefix[0]) is None:
        raise SystemCommandError(cmd, 127, f"not root and sudo command not found: {prefix[0]}")
    return [*prefix, *cmd]


def _require_cmd(name: str) -> str:
    path = shutil.which(name)
    if path is None:
        raise SystemCommandError([name], 127, "command not found")
    return path


def _stderr_text(result: subprocess.CompletedProcess) -> str:
    return (result.stderr or "").strip()


class CommandRunner:
    """Runs the host utilities a run depends on.

    Only exit statuses matter to callers. Nothing here applies a timeout: a
    hung ``mount`` hangs its worker.
    """

    def __init__(self, config: RunConfig | None = None) -> None:
        self.config = config or RunConfig()

    def mount_command(self, pair: MountPair) -> list[str]:
        options = f"rw,nfsvers={self.config.nfs_version}"
        source = f"{self.config.server_host}:{pair.server_dir}"
        return [_require_cmd("mount"), "-t", "nfs", "-o", options, source, str(pair.client_dir)]

    def reload_exports(self) -> None:
        cmd = _maybe_sudo([_require_cmd("exportfs"), "-ra"])
        logger.debug("run exportfs: %s", " ".join(cmd))
        result = subprocess.run(cmd, capture_output=True, text=True)
        if result.returncode != 0:
            raise SystemCommandError(cmd, result.returncode, _stderr_text(result))

    def mount(self, pair: MountPair) -> int:
        cmd = _maybe_sudo(self.mount_command(pair))
        logger.debug("mounter %d cmd '%s'", pair.identifier, " ".join(cmd))
        result = subprocess.run(cmd, capture_output=True, text=True)
        if result.returncode != 0:
            logger.debug(
                "mounter %d exit %d: %s", pair.identifier, result.returncode, _stderr_text(result)
            )
        return result.returncode

    def unmount(self, mountpoints: Sequence[str]) -> None:
        """Force-unmount ``mountpoints`` in one call, detaching any that are busy."""
        if not mountpoints:
            logger.debug("no NFS mounts to unmount")
            return
        cmd = _maybe_sudo([_require_cmd("umount"), "-f", "-l", *mountpoints])
        logger.debug("unmount %d NFS mounts", len(mountpoints))
        result = subprocess.run(cmd, capture_output=True, text=True)
        if result.returncode != 0:
            raise SystemCommandError(cmd, result.returncode, _stderr_text(result))
