# planboard/schedules.py
"""Named schedules: several independent boards in one document store.

The registry (the list of schedules plus the current one) lives under
`SCHEDULES_KEY`; each schedule keeps its board under `schedule_key(id)` and is
read and written through an ordinary `Persistence`. The default schedule
cannot be deleted. A board saved before schedules existed (under `STATE_KEY`)
is adopted by the default schedule on first load.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from .ids import DEFAULT_IDS, IdGenerator
from .model import AppState
from .persist import STATE_KEY, DocumentStore, Persistence
from .schema import state_to_payload
from .util.dates import utc_iso_z_now

log = logging.getLogger(__name__)

SCHEDULES_KEY = "schedules"
DEFAULT_SCHEDULE_ID = "default"
DEFAULT_SCHEDULE_NAME = "My Schedule"


@dataclass(frozen=True)
class Schedule:
    id: str
    name: str
    description: str = ""
    created_at: str = ""
    updated_at: str = ""
    is_default: bool = False
    copied_from: Optional[str] = None


def schedule_key(schedule_id: str) -> str:
    return f"schedule_{schedule_id}"


def duplicate_schedule(state: AppState, *, copy_groups: bool = True, copy_projects: bool = True) -> AppState:
    """Board for a copied schedule.

    Day offs and settings always carry over. `copy_groups` controls the
    resource hierarchy; `copy_projects` controls projects and project groups.
    """
    return dataclasses.replace(
        state,
        resource_groups=state.resource_groups if copy_groups else (),
        projects=state.projects if copy_projects else (),
        project_groups=state.project_groups if copy_projects else (),
    )


def _clean_name(name: str) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValueError("Please enter a schedule name")
    return cleaned


def _schedule_to_dict(s: Schedule) -> Dict[str, Any]:
    return {
        "id": s.id,
        "name": s.name,
        "description": s.description,
        "createdAt": s.created_at,
        "updatedAt": s.updated_at or None,
        "isDefault": s.is_default,
        "copiedFrom": s.copied_from,
    }


def _schedule_from_dict(d: Any) -> Optional[Schedule]:
    if not isinstance(d, dict):
        return None
    sid = str(d.get("id") or "").strip()
    if not sid:
        return None
    return Schedule(
        id=sid,
        name=str(d.get("name") or "").strip() or DEFAULT_SCHEDULE_NAME,
        description=str(d.get("description") or ""),
        created_at=str(d.get("createdAt") or ""),
        updated_at=str(d.get("updatedAt") or ""),
        is_default=bool(d.get("isDefault")),
        copied_from=d.get("copiedFrom") or None,
    )


class ScheduleManager:
    def __init__(
        self,
        store: DocumentStore,
        fallback: Optional[DocumentStore] = None,
        *,
        ids: IdGenerator | None = None,
        now: Callable[[], str] = utc_iso_z_now,
    ) -> None:
        self.store = store
        self.fallback = fallback
        self._ids = ids or DEFAULT_IDS
        self._now = now
        self._schedules: List[Schedule] = []
        self.current_id: Optional[str] = None

    # --- registry --------------------------------------------------------------

    @property
    def schedules(self) -> Tuple[Schedule, ...]:
        return tuple(self._schedules)

    @property
    def current(self) -> Optional[Schedule]:
        return self.get(self.current_id) if self.current_id else None

    def get(self, schedule_id: str) -> Optional[Schedule]:
        for s in self._schedules:
            if s.id == schedule_id:
                return s
        return None

    def _default(self) -> Schedule:
        for s in self._schedules:
            if s.is_default:
                return s
        return self._schedules[0]

    async def load(self) -> Tuple[Schedule, ...]:
        """Read the registry, seeding the default schedule when there is none."""
        try:
            doc = await self.store.load(SCHEDULES_KEY, None)
        except Exception as exc:
            log.warning("load of schedule registry failed: %s", exc)
            doc = None
        doc = doc if isinstance(doc, dict) else {}
        schedules = [s for s in (_schedule_from_dict(x) for x in doc.get("schedules") or []) if s]

        seeded = not schedules
        if seeded:
            schedules = [
                Schedule(
                    id=DEFAULT_SCHEDULE_ID,
                    name=DEFAULT_SCHEDULE_NAME,
                    description="Default schedule",
                    created_at=self._now(),
                    is_default=True,
                )
            ]
        elif not any(s.is_default for s in schedules):
            schedules[0] = dataclasses.replace(schedules[0], is_default=True)
        self._schedules = schedules

        current = doc.get("current")
        self.current_id = current if isinstance(current, str) and self.get(current) else self._default().id

        await self._adopt_legacy_state()
        if seeded:
            await self._save_registry()
        return self.schedules

    async def _adopt_legacy_state(self) -> None:
        target = schedule_key(self._default().id)
        if await self.store.load(target, None) is not None:
            return
        legacy = await self.store.load(STATE_KEY, None)
        if isinstance(legacy, dict):
            await self.store.save(target, legacy)
            log.info("moved the existing board into schedule %r", self._default().id)

    async def _save_registry(self) -> None:
        await self.store.save(
            SCHEDULES_KEY,
            {"current": self.current_id, "schedules": [_schedule_to_dict(s) for s in self._schedules]},
        )

    def _replace(self, schedule: Schedule) -> None:
        self._schedules = [schedule if s.id == schedule.id else s for s in self._schedules]

    # --- boards ----------------------------------------------------------------

    def persistence(self, schedule_id: Optional[str] = None) -> Persistence:
        sid = schedule_id or self.current_id or DEFAULT_SCHEDULE_ID
        return Persistence(self.store, self.fallback, key=schedule_key(sid), ids=self._ids)

    async def load_state(self, schedule_id: Optional[str] = None) -> AppState:
        return await self.persistence(schedule_id).load_state()

    # --- operations ------------------------------------------------------------

    async def create(self, name: str, description: str = "", *, state: Optional[AppState] = None, copied_from: Optional[str] = None) -> Schedule:
        """Register a schedule with an empty (or the given) board and switch to it."""
        cleaned = _clean_name(name)
        sid = self._ids.new("schedule")
        while self.get(sid) is not None:
            sid = self._ids.new("schedule")
        schedule = Schedule(
            id=sid,
            name=cleaned,
            description=(description or "").strip(),
            created_at=self._now(),
            copied_from=copied_from,
        )
        await self.store.save(schedule_key(schedule.id), state_to_payload(state or AppState()))
        self._schedules.append(schedule)
        self.current_id = schedule.id
        await self._save_registry()
        log.info("created schedule %r (%s)", schedule.name, schedule.id)
        return schedule

    async def edit(self, schedule_id: str, *, name: Optional[str] = None, description: Optional[str] = None) -> Optional[Schedule]:
        s = self.get(schedule_id)
        if s is None:
            return None
        updated = dataclasses.replace(
            s,
            name=_clean_name(name) if name is not None else s.name,
            description=description.strip() if description is not None else s.description,
            updated_at=self._now(),
        )
        self._replace(updated)
        await self._save_registry()
        return updated

    async def switch(self, schedule_id: str) -> Optional[AppState]:
        """Make `schedule_id` current and return its board; None for unknown ids."""
        if self.get(schedule_id) is None:
            return None
        self.current_id = schedule_id
        await self._save_registry()
        return await self.load_state(schedule_id)

    async def delete(self, schedule_id: str) -> bool:
        s = self.get(schedule_id)
        if s is None:
            return False
        if s.is_default:
            raise ValueError("Cannot delete the default schedule")
        self._schedules = [x for x in self._schedules if x.id != schedule_id]
        if self.current_id == schedule_id:
            self.current_id = self._default().id
        await self._save_registry()
        log.info("deleted schedule %r (%s)", s.name, s.id)
        return True

    async def duplicate(
        self,
        name: str,
        description: str = "",
        *,
        source_id: Optional[str] = None,
        copy_groups: bool = True,
        copy_projects: bool = True,
    ) -> Schedule:
        """Copy a schedule's board (default: the current one) into a new schedule."""
        source = self.get(source_id or self.current_id or "")
        if source is None:
            raise ValueError(f"Unknown schedule: {source_id!r}")
        board = duplicate_schedule(await self.load_state(source.id), copy_groups=copy_groups, copy_projects=copy_projects)
        return await self.create(name, description, state=board, copied_from=source.id)


__all__ = [
    "DEFAULT_SCHEDULE_ID",
    "DEFAULT_SCHEDULE_NAME",
    "SCHEDULES_KEY",
    "Schedule",
    "ScheduleManager",
    "duplicate_schedule",
    "schedule_key",
]
