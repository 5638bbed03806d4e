"""Error types raised while provisioning, mounting and verifying a run."""

from __future__ import annotations


class ParamountError(Exception):
    """Base class for every fatal run error."""


class FilesystemError(ParamountError):
    """A run directory could not be created or removed."""


class WriteError(ParamountError):
    """The export configuration file could not be written or removed."""


class SystemCommandError(ParamountError):
    def __init__(self, cmd: list[str], returncode: int, detail: str = "") -> None:
        self.cmd = list(cmd)
        self.returncode = returncode
        self.detail = detail
        message = f"{' '.join(self.cmd)} failed with exit status {returncode}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class VerificationError(ParamountError):
    def __init__(self, device: str, message: str) -> None:
        self.device = device
        super().__init__(message)


class InterruptedRunError(ParamountError):
    """Raised in the main thread when a termination signal arrives mid-run."""

    def __init__(self, signum: int) -> None:
        self.signum = signum
        super().__init__(f"interrupted by signal {signum}")
