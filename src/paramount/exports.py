"""Export table construction for the run's server directories.

The table is written as a single block between ``### BEGIN <tag>`` and
``### END <tag>`` lines. Activating it (``exportfs -ra``) is left to the
caller.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from .allocator import MountPair
from .errors import WriteError

logger = logging.getLogger(__name__)

BASE_OPTIONS = ("rw", "no_subtree_check", "no_root_squash")


@dataclass(frozen=True)
class ExportEntry:
    server_dir: Path
    fsid: str
    options: tuple[str, ...]

    @property
    def option_string(self) -> str:
        return ",".join(self.options)

    def line(self) -> str:
        return f"{self.server_dir}\t*({self.option_string})"


def fsid_for(identifier: int) -> str:
    return f"00000000-0000-0000-0000-00000000{identifier:04x}"


def build_export_entries(pairs: Iterable[MountPair]) -> list[ExportEntry]:
    entries = []
    for pair in pairs:
        fsid = fsid_for(pair.identifier)
        entry = ExportEntry(
            server_dir=pair.server_dir,
            fsid=fsid,
            options=(*BASE_OPTIONS, f"fsid={fsid}"),
        )
        logger.debug("options: %s", entry.option_string)
        entries.append(entry)
    return entries


def begin_marker(tag: str) -> str:
    return f"### BEGIN {tag}"


def end_marker(tag: str) -> str:
    return f"### END {tag}"


def render_export_table(entries: Iterable[ExportEntry], tag: str) -> str:
    lines = [begin_marker(tag)]
    lines.extend(entry.line() for entry in entries)
    lines.append(end_marker(tag))
    return "\n".join(lines) + "\n"


def write_export_table(path: str | Path, entries: Iterable[ExportEntry], tag: str) -> None:
    content = render_export_table(entries, tag)
    try:
        with open(path, "w", encoding="utf-8") as handle:
            handle.write(content)
    except OSError as exc:
        raise WriteError(
            f"Failed to write export file {path}: {exc.strerror or exc}"
        ) from exc
    logger.debug("Wrote export table %s", path)


def read_export_block(path: str | Path, tag: str) -> list[str]:
    """Return the lines between this tag's markers, or ``[]`` if absent."""
    try:
        with open(path, "r", encoding="utf-8") as handle:
            lines = handle.read().splitlines()
    except FileNotFoundError:
        return []
    except OSError as exc:
        raise WriteError(f"Failed to read export file {path}: {exc.strerror or exc}") from exc

    begin, end = begin_marker(tag), end_marker(tag)
    block: list[str] = []
    inside = False
    for line in lines:
        if line == begin:
            inside = True
            block = []
            continue
        if line == end and inside:
            return block
        if inside:
            block.append(line)
    return []


def remove_export_table(path: str | Path) -> bool:
    """Delete the export file. Returns False if it was already gone."""
    try:
        os.remove(path)
    except FileNotFoundError:
        return False
    except OSError as exc:
        raise WriteError(f"Failed to remove export file {path}: {exc.strerror or exc}") from exc
    return True
