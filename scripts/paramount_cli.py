#!/usr/bin/env python3
"""Run paramount from a source checkout without installing it."""

from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
sys.path.insert(0, str(SRC))

from paramount.cli import main  # noqa: E402


if __name__ == "__main__":
    raise SystemExit(main())
