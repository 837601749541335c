# planboard/state.py
"""Canonical state holder.

`StateContainer.dispatch` is the single mutation entry point: it runs the
reducer, swaps the state, notifies subscribers synchronously and then asks the
persistence layer to save. Saves never roll back state.

With a running asyncio loop a save is a fire-and-forget task. Without one
(plain scripts, the CLI, synchronous tests) the save runs to completion inside
`dispatch`, so a slow store blocks the caller. Hosts that cannot afford that
pass `autosave=False`, watch `dirty` and call `save()` when convenient.
"""

from __future__ import annotations

import asyncio
import datetime as dt
import logging
from typing import Callable, List, Optional, Sequence, Set

from .commands import CommandResult, CreateProject, DeleteProjects, DuplicateProject, UpdateProject, apply_command
from .ids import IdGenerator
from .model import AppState, DayOff, Project
from .persist import Persistence

log = logging.getLogger(__name__)

Subscriber = Callable[[AppState, CommandResult], None]


class StateContainer:
    def __init__(
        self,
        state: AppState | None = None,
        *,
        persistence: Optional[Persistence] = None,
        ids: IdGenerator | None = None,
        autosave: bool = True,
    ) -> None:
        self._state = state if state is not None else AppState()
        self._persistence = persistence
        self.autosave = autosave
        self.dirty = False
        self._ids = ids
        self._subscribers: List[Subscriber] = []
        self._pending: Set["asyncio.Task[bool]"] = set()
        self.last_result: Optional[CommandResult] = None

    @property
    def state(self) -> AppState:
        return self._state

    @property
    def ids(self) -> IdGenerator | None:
        return self._ids

    def subscribe(self, fn: Subscriber) -> Callable[[], None]:
        """Register a render callback; returns an unsubscribe function."""
        self._subscribers.append(fn)

        def _unsubscribe() -> None:
            if fn in self._subscribers:
                self._subscribers.remove(fn)

        return _unsubscribe

    def dispatch(self, command: object) -> CommandResult:
        result = apply_command(self._state, command, ids=self._ids)
        self.last_result = result
        if not result.changed:
            return result

        self._state = result.state
        for fn in list(self._subscribers):
            fn(self._state, result)
        self._request_save()
        return result

    # --- persistence ----------------------------------------------------------

    def _request_save(self) -> None:
        if self._persistence is None:
            return
        if not self.autosave:
            self.dirty = True
            return
        coro = self._persistence.save_state(self._state)
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        if loop is None:
            asyncio.run(coro)
            return

        task = loop.create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._save_done)

    def _save_done(self, task: "asyncio.Task[bool]") -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            log.error("state save raised: %s", exc)

    async def save(self) -> bool:
        """Save the current state now; clears `dirty` when a store accepted it."""
        if self._persistence is None:
            return False
        ok = await self._persistence.save_state(self._state)
        if ok:
            self.dirty = False
        return ok

    async def flush(self) -> None:
        """Wait for in-flight saves (tests, shutdown)."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def load(self) -> AppState:
        """Replace the state with what the persistence layer holds (no save, no notify)."""
        if self._persistence is not None:
            self._state = await self._persistence.load_state()
        return self._state


class ContainerCallbacks:
    """`TimelineCallbacks` bound to a StateContainer."""

    def __init__(self, container: StateContainer, *, on_render: Optional[Callable[[], None]] = None) -> None:
        self.container = container
        self._on_render = on_render

    def on_cell_click(self, resource_id: str, date: dt.date) -> Optional[str]:
        result = self.container.dispatch(CreateProject(resource_id=resource_id, start=date))
        return result.created[0] if result.created else None

    def on_project_create(self, project: Project) -> Optional[str]:
        result = self.container.dispatch(
            CreateProject(
                resource_id=project.resource_id,
                start=project.start,
                end=project.end,
                name=project.name,
                color=project.color,
                notes=project.notes,
            )
        )
        return result.created[0] if result.created else None

    def on_project_update(self, project: Project) -> None:
        self.container.dispatch(
            UpdateProject(
                project_id=project.id,
                name=project.name,
                color=project.color,
                notes=project.notes,
                start=project.start,
                end=project.end,
                resource_id=project.resource_id,
                pinned=project.pinned,
            )
        )

    def on_project_delete(self, project_id: str) -> None:
        self.container.dispatch(DeleteProjects(project_ids=(project_id,)))

    def on_project_duplicate(self, project_id: str) -> Optional[str]:
        result = self.container.dispatch(DuplicateProject(project_id))
        return result.created[0] if result.created else None

    def on_render_request(self) -> None:
        if self._on_render is not None:
            self._on_render()

    def get_all_projects(self) -> Sequence[Project]:
        return self.container.state.projects

    def get_day_offs(self) -> Sequence[DayOff]:
        return self.container.state.day_offs


__all__ = ["ContainerCallbacks", "StateContainer", "Subscriber"]
