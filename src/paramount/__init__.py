"""paramount: concurrent NFS mount stress and verification harness."""

from .allocator import MountPair, allocate_pairs
from .commands import CommandRunner
from .config import RunConfig
from .controller import CleanupState, LifecycleController, RunResult
from .errors import (
    FilesystemError,
    InterruptedRunError,
    ParamountError,
    SystemCommandError,
    VerificationError,
    WriteError,
)
from .exports import ExportEntry, build_export_entries, write_export_table
from .launcher import MountOutcome, launch_mounts
from .mounttab import LiveMountRecord, read_mount_table
from .verify import build_expected_map, verify_mounts
from .cli import main as paramount_main

__all__ = [
    "MountPair",
    "allocate_pairs",
    "CommandRunner",
    "RunConfig",
    "CleanupState",
    "LifecycleController",
    "RunResult",
    "FilesystemError",
    "InterruptedRunError",
    "ParamountError",
    "SystemCommandError",
    "VerificationError",
    "WriteError",
    "ExportEntry",
    "build_export_entries",
    "write_export_table",
    "MountOutcome",
    "launch_mounts",
    "LiveMountRecord",
    "read_mount_table",
    "build_expected_map",
    "verify_mounts",
    "paramount_main",
]
