"""Self-deleting temporary directory."""

from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path

from .errors import FilesystemError


class ScopedTempDir:
    """A uniquely named directory removed on release unless preserved.

    The directory is created on construction. ``delete_now()`` purges it
    recursively; it is safe to call more than once and does nothing after
    ``preserve()``.
    """

    def __init__(self, prefix: str = "temp", parent: str | Path | None = None) -> None:
        try:
            created = tempfile.mkdtemp(prefix=f"{prefix}.", dir=parent)
        except OSError as exc:
            raise FilesystemError(
                f"Failed to create temporary directory: {exc.strerror or exc}"
            ) from exc
        self.path = Path(os.path.realpath(created))
        self._preserve = False
        self._deleted = False

    @property
    def preserved(self) -> bool:
        return self._preserve

    def preserve(self) -> None:
        self._preserve = True

    def delete_now(self) -> None:
        if self._preserve or self._deleted:
            return
        try:
            shutil.rmtree(self.path)
        except FileNotFoundError:
            pass
        except OSError as exc:
            raise FilesystemError(
                f"Failed to remove temporary directory {self.path}: {exc.strerror or exc}"
            ) from exc
        self._deleted = True

    def __enter__(self) -> "ScopedTempDir":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.delete_now()
