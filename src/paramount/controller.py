"""End-to-end run sequencing and exactly-once teardown."""

from __future__ import annotations

import atexit
import enum
import logging
import signal
import sys
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable

from .allocator import MountPair, allocate_pairs, client_root_of
from .commands import CommandRunner
from .config import RunConfig
from .errors import FilesystemError, InterruptedRunError, ParamountError
from .exports import build_export_entries, remove_export_table, write_export_table
from .launcher import MountOutcome, count_failures, launch_mounts
from .mounttab import LiveMountRecord, nfs_mountpoints_under, read_mount_table
from .tempdir import ScopedTempDir
from .verify import build_expected_map, verify_mounts

logger = logging.getLogger(__name__)

MountTableReader = Callable[[], Iterable[LiveMountRecord]]

DEFAULT_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class CleanupState(enum.Enum):
    ARMED = "armed"
    FIRED = "fired"
    CONSUMED = "consumed"


@dataclass
class RunResult:
    outcomes: list[MountOutcome] = field(default_factory=list)
    failures: int = 0
    verified: bool = False
    cleaned: bool = False
    error: str | None = None
    interrupted_by: int | None = None

    @property
    def exit_code(self) -> int:
        if self.error is None and self.failures == 0 and self.verified and self.cleaned:
            return 0
        return 1


class LifecycleController:
    """Owns one run: allocate, export, mount, verify, then tear down.

    Teardown goes through ``cleanup()``, which runs at most once whichever of
    normal completion, an error, a signal or interpreter exit reaches it
    first. Signal handlers never do the teardown themselves; they raise
    ``InterruptedRunError`` in the main thread so ``run()`` unwinds into its
    ``finally`` block.
    """

    def __init__(
        self,
        config: RunConfig,
        runner: CommandRunner | None = None,
        mount_table_reader: MountTableReader | None = None,
        signals: Iterable[int] = DEFAULT_SIGNALS,
    ) -> None:
        self.config = config
        self.runner = runner or CommandRunner(config)
        self._mount_table_reader = mount_table_reader or (
            lambda: read_mount_table(config.mount_table)
        )
        self.signals = tuple(signals)
        self.state = CleanupState.ARMED
        self.tempdir: ScopedTempDir | None = None
        self.pairs: list[MountPair] = []
        self._export_written = False
        self._cleanup_ok = False
        self._interrupted_by: int | None = None

    @property
    def root(self) -> Path | None:
        return self.tempdir.path if self.tempdir is not None else None

    def run(self) -> RunResult:
        result = RunResult()
        previous = self._install_signal_handlers()
        atexit.register(self.cleanup)
        try:
            try:
                self._provision_and_check(result)
            except ParamountError as exc:
                result.error = str(exc)
                print(f"error: {exc}", file=sys.stderr)
            finally:
                result.cleaned = self.cleanup()
        finally:
            self._restore_signal_handlers(previous)
            atexit.unregister(self.cleanup)
        result.interrupted_by = self._interrupted_by
        return result

    def _provision_and_check(self, result: RunResult) -> None:
        config = self.config
        self.tempdir = ScopedTempDir(config.tmp_prefix, config.tmp_parent)
        if config.preserve:
            self.tempdir.preserve()
        logger.debug("Temporary root %s", self.tempdir.path)

        self.pairs = allocate_pairs(self.tempdir.path, config.threads)

        entries = build_export_entries(self.pairs)
        self._export_written = True
        write_export_table(config.exports_file, entries, config.export_tag)
        self.runner.reload_exports()

        result.outcomes = launch_mounts(self.pairs, self.runner.mount)
        result.failures = count_failures(result.outcomes)
        if result.failures:
            print(f"Got {result.failures} mount failures", file=sys.stderr)

        logger.debug("Scan mounts")
        records = self._read_live_mounts()
        mounted = [
            str(pair.server_dir)
            for pair, outcome in zip(self.pairs, result.outcomes)
            if outcome.ok
        ]
        verify_mounts(records, build_expected_map(self.pairs), required=mounted)
        result.verified = True

    def _read_live_mounts(self) -> list[LiveMountRecord]:
        try:
            return list(self._mount_table_reader())
        except (OSError, ValueError) as exc:
            reason = getattr(exc, "strerror", None) or exc
            raise FilesystemError(
                f"Failed to read mount table {self.config.mount_table}: {reason}"
            ) from exc

    def cleanup(self) -> bool:
        """Tear down everything this run created; later calls are no-ops.

        Every step is attempted even if an earlier one fails. Returns True when
        all steps succeeded.
        """
        if self.state is not CleanupState.ARMED:
            return self._cleanup_ok
        self.state = CleanupState.FIRED
        logger.debug("cleanup")

        ok = True
        if self.tempdir is not None:
            ok = self._step("unmount all NFS mounts", self._unmount_all) and ok
        if self._export_written:
            ok = self._step(
                "remove export file", lambda: remove_export_table(self.config.exports_file)
            ) and ok
            ok = self._step("run exportfs", self.runner.reload_exports) and ok
        if self.tempdir is not None:
            ok = self._step("remove temp dir", self.tempdir.delete_now) and ok

        self._cleanup_ok = ok
        self.state = CleanupState.CONSUMED
        return ok

    def _step(self, label: str, action: Callable[[], object]) -> bool:
        logger.debug(label)
        try:
            action()
        except Exception as exc:
            print(f"cleanup: {label} failed: {exc}", file=sys.stderr)
            return False
        return True

    def _unmount_all(self) -> None:
        client_root = client_root_of(self.tempdir.path)
        targets = nfs_mountpoints_under(self._read_live_mounts(), client_root)
        self.runner.unmount(targets)

    def _handle_signal(self, signum, frame) -> None:
        if self.state is not CleanupState.ARMED:
            # Teardown already under way or done.
            return
        self._interrupted_by = signum
        raise InterruptedRunError(signum)

    def _install_signal_handlers(self) -> dict[int, object]:
        previous: dict[int, object] = {}
        if threading.current_thread() is not threading.main_thread():
            logger.debug("not on the main thread; signal handlers not installed")
            return previous
        for signum in self.signals:
            previous[signum] = signal.signal(signum, self._handle_signal)
        return previous

    def _restore_signal_handlers(self, previous: dict[int, object]) -> None:
        for signum, handler in previous.items():
            signal.signal(signum, handler if handler is not None else signal.SIG_DFL)
