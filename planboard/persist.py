# planboard/persist.py
"""Document-store adapters and the load/save policy around them.

The engine never owns persistence: a `DocumentStore` is any object with async
`load(key, default)` / `save(key, value)`. `Persistence` tries the primary
store first and falls back to a secondary one; failures are logged and never
propagate into the engine.
"""

from __future__ import annotations

import asyncio
import copy
import dataclasses
import logging
import re
from pathlib import Path
from typing import Any, Dict, Optional, Protocol, Union

from .ids import IdGenerator
from .model import AppState
from .resources import default_resource_groups
from .schema import state_from_payload, state_to_payload
from .util.jsonio import read_json, write_json

log = logging.getLogger(__name__)

STATE_KEY = "state"

_KEY_RE = re.compile(r"[^A-Za-z0-9_.-]+")


class DocumentStore(Protocol):
    async def load(self, key: str, default: Any = None) -> Any: ...

    async def save(self, key: str, value: Any) -> None: ...


class MemoryStore:
    """In-process store; values are deep-copied in and out."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None) -> None:
        self.data: Dict[str, Any] = copy.deepcopy(initial or {})
        self.saves = 0

    async def load(self, key: str, default: Any = None) -> Any:
        if key not in self.data:
            return default
        return copy.deepcopy(self.data[key])

    async def save(self, key: str, value: Any) -> None:
        self.data[key] = copy.deepcopy(value)
        self.saves += 1


class JsonFileStore:
    """One JSON document per key under `root` (`<root>/<key>.json`)."""

    def __init__(self, root: Union[str, Path]) -> None:
        self.root = Path(root)

    def path_for(self, key: str) -> Path:
        name = _KEY_RE.sub("_", key).strip("._") or "default"
        return self.root / f"{name}.json"

    async def load(self, key: str, default: Any = None) -> Any:
        p = self.path_for(key)
        if not p.exists():
            return default
        return await asyncio.to_thread(read_json, p)

    async def save(self, key: str, value: Any) -> None:
        await asyncio.to_thread(write_json, self.path_for(key), value)


def default_state(ids: IdGenerator | None = None) -> AppState:
    return AppState(resource_groups=default_resource_groups(ids))


class Persistence:
    def __init__(
        self,
        primary: DocumentStore,
        fallback: Optional[DocumentStore] = None,
        *,
        key: str = STATE_KEY,
        ids: IdGenerator | None = None,
    ) -> None:
        self.primary = primary
        self.fallback = fallback
        self.key = key
        self._ids = ids

    async def _load_from(self, store: DocumentStore, label: str) -> Optional[AppState]:
        try:
            payload = await store.load(self.key, None)
        except Exception as exc:
            log.warning("load from %s store failed: %s", label, exc)
            return None
        if not isinstance(payload, dict):
            return None
        try:
            return state_from_payload(payload)
        except (TypeError, ValueError) as exc:
            log.warning("%s store holds an unreadable payload: %s", label, exc)
            return None

    async def load_state(self) -> AppState:
        """Primary, then fallback, then the default seed state."""
        state = await self._load_from(self.primary, "primary")
        if state is None and self.fallback is not None:
            state = await self._load_from(self.fallback, "fallback")
        if state is None:
            log.info("no saved state found; starting from defaults")
            return default_state(self._ids)
        if not state.resource_groups:
            state = dataclasses.replace(state, resource_groups=default_resource_groups(self._ids))
        return state

    async def save_state(self, state: AppState) -> bool:
        """Write to primary, on failure to fallback. Returns True if any write succeeded."""
        payload = state_to_payload(state)
        try:
            await self.primary.save(self.key, payload)
            return True
        except Exception as exc:
            log.warning("save to primary store failed: %s", exc)
        if self.fallback is None:
            return False
        try:
            await self.fallback.save(self.key, payload)
            log.info("state saved to fallback store")
            return True
        except Exception as exc:
            log.error("save to fallback store failed: %s", exc)
            return False


__all__ = [
    "DocumentStore",
    "JsonFileStore",
    "MemoryStore",
    "Persistence",
    "STATE_KEY",
    "default_state",
]
