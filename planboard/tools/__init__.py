"""planboard.tools package

Developer utilities (hygiene checks, CI gate).

Keep this package's __init__ free of eager imports so `python -m
planboard.tools.<name>` has no import-time side effects.
"""

from __future__ import annotations

__all__: list[str] = []
