# planboard/util/console.py
from __future__ import annotations

import sys
from typing import Any

TAG = "[planboard]"


def eprint(*args: Any) -> None:
    print(*args, file=sys.stderr)


def status(level: str, msg: str, *, tag: str = TAG) -> None:
    """User-facing status line on stderr, e.g. `[planboard] WARN: ...`."""
    eprint(f"{tag} {level.upper()}: {msg}")
