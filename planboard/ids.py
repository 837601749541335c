"""Identifier generation.

Every created project, resource, resource group, day off and project group
gets an id from an `IdGenerator`. `RandomIds` is the default; `SequentialIds`
is deterministic and is what tests and replays use.
"""

from __future__ import annotations

import uuid
from typing import Dict, Iterable, Protocol, Set

PREFIXES: Dict[str, str] = {
    "project": "p",
    "project_group": "pg",
    "resource": "r",
    "resource_group": "rg",
    "day_off": "d",
    "schedule": "schedule",
}


def _prefix(kind: str) -> str:
    return PREFIXES.get(kind, kind or "id")


class IdGenerator(Protocol):
    def new(self, kind: str) -> str:
        """Return a fresh id for an entity of `kind`."""


class RandomIds:
    """uuid4-backed ids; collision resistant across writers."""

    def new(self, kind: str) -> str:
        return f"{_prefix(kind)}_{uuid.uuid4().hex[:16]}"


class SequentialIds:
    """Counter-backed ids (`p_1`, `p_2`, ...); skips ids already taken."""

    def __init__(self, taken: Iterable[str] = ()) -> None:
        self._counters: Dict[str, int] = {}
        self._taken: Set[str] = set(taken)

    def reserve(self, ids: Iterable[str]) -> None:
        self._taken.update(ids)

    def new(self, kind: str) -> str:
        prefix = _prefix(kind)
        n = self._counters.get(prefix, 0)
        while True:
            n += 1
            candidate = f"{prefix}_{n}"
            if candidate not in self._taken:
                break
        self._counters[prefix] = n
        self._taken.add(candidate)
        return candidate


DEFAULT_IDS: IdGenerator = RandomIds()


__all__ = ["DEFAULT_IDS", "IdGenerator", "PREFIXES", "RandomIds", "SequentialIds"]
