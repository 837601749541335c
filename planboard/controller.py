# planboard/controller.py
"""Pointer/keyboard state machine for the timeline.

The controller never mutates state itself. It reads the current `AppState`
through `get_state`, previews gestures by running the reducer on a scratch
copy, and commits by handing typed commands to `dispatch` (or to the
`TimelineCallbacks` for the simple create/delete/duplicate paths).

States:
  IDLE -> PENDING_DRAG   bar pressed without Ctrl
  PENDING_DRAG -> DRAGGING   pointer moved >= DRAG_THRESHOLD px on either axis
  IDLE -> RESIZING   resize handle pressed
  IDLE -> HOLD_NAVIGATING   prev/next control pressed
Any state returns to IDLE on pointer_up or cancel().
"""

from __future__ import annotations

import dataclasses
import datetime as dt
import enum
import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Protocol, Sequence, Tuple, Union

from .commands import (
    SIDE_END,
    SIDE_START,
    AddToGroup,
    CommandResult,
    DeleteProjects,
    DuplicateGroup,
    GroupProjects,
    MoveProject,
    RemoveFromGroup,
    ResizeProject,
    SetViewMode,
    ShiftAnchor,
    TogglePin,
    UpdateProject,
    apply_command,
)
from .confirm import (
    KIND_DELETE,
    KIND_DELETE_GROUP,
    KIND_PINNED_MOVE,
    AlwaysConfirm,
    ConfirmRequest,
    Confirmer,
)
from .grouping import ProjectGroupStore
from .ids import SequentialIds
from .layout import Cell, GridLayout, LayoutConfig, build_grid, hit_test, hit_test_column
from .model import AppState, DayOff, Project
from .navigation import AsyncioTicker, HoldNavigator, ManualTicker, Ticker

log = logging.getLogger(__name__)

DRAG_THRESHOLD = 5

Dispatch = Callable[[object], CommandResult]
Notify = Callable[[str], None]


class GestureState(enum.Enum):
    IDLE = "idle"
    PENDING_DRAG = "pending_drag"
    DRAGGING = "dragging"
    RESIZING = "resizing"
    HOLD_NAVIGATING = "hold_navigating"


@dataclass(frozen=True)
class Modifiers:
    ctrl: bool = False
    shift: bool = False


NO_MODIFIERS = Modifiers()


@dataclass(frozen=True)
class BarTarget:
    project_id: str


@dataclass(frozen=True)
class HandleTarget:
    project_id: str
    side: str      # SIDE_START | SIDE_END


@dataclass(frozen=True)
class CellTarget:
    resource_id: str
    date: dt.date


@dataclass(frozen=True)
class NavTarget:
    direction: int     # -1 prev, +1 next


Target = Union[BarTarget, HandleTarget, CellTarget, NavTarget]


@dataclass(frozen=True)
class Preview:
    """Ghost of an uncommitted gesture: where every affected project would land."""

    projects: Tuple[Project, ...]
    cell: Optional[Cell] = None


class TimelineCallbacks(Protocol):
    def on_cell_click(self, resource_id: str, date: dt.date) -> Optional[str]: ...

    def on_project_create(self, project: Project) -> Optional[str]: ...

    def on_project_update(self, project: Project) -> None: ...

    def on_project_delete(self, project_id: str) -> None: ...

    def on_project_duplicate(self, project_id: str) -> Optional[str]: ...

    def on_render_request(self) -> None: ...

    def get_all_projects(self) -> Sequence[Project]: ...

    def get_day_offs(self) -> Sequence[DayOff]: ...


class TimelineController:
    def __init__(
        self,
        get_state: Callable[[], AppState],
        dispatch: Dispatch,
        callbacks: TimelineCallbacks,
        *,
        confirmer: Optional[Confirmer] = None,
        ticker: Optional[Ticker] = None,
        config: Optional[LayoutConfig] = None,
        today: Optional[dt.date] = None,
        notify: Optional[Notify] = None,
    ) -> None:
        self._get_state = get_state
        self._dispatch = dispatch
        self.callbacks = callbacks
        self.confirmer: Confirmer = confirmer or AlwaysConfirm()
        self.config = config or LayoutConfig()
        self.today = today
        self._notify = notify
        # Without a running loop, hold ticks go to a ManualTicker the host can advance.
        self.ticker: Ticker = ticker or AsyncioTicker(fallback=ManualTicker())
        self.navigator = HoldNavigator(self._nav_step, self.ticker)

        self.gesture = GestureState.IDLE
        self.preview: Optional[Preview] = None
        self._selection: Dict[str, None] = {}
        self._project_id: Optional[str] = None
        self._side: Optional[str] = None
        self._origin: Tuple[float, float] = (0.0, 0.0)
        self._grid: Optional[GridLayout] = None
        self._grid_state: Optional[AppState] = None

    @classmethod
    def for_container(cls, container, **kwargs) -> "TimelineController":
        """Bind reads, commands and callbacks to a `StateContainer`."""
        from .state import ContainerCallbacks

        return cls(lambda: container.state, container.dispatch, ContainerCallbacks(container), **kwargs)

    # --- helpers ---------------------------------------------------------------

    @property
    def state(self) -> AppState:
        return self._get_state()

    @property
    def grid(self) -> GridLayout:
        state = self.state
        if self._grid is None or self._grid_state is not state:
            self._grid = build_grid(state, config=self.config, today=self.today)
            self._grid_state = state
        return self._grid

    @property
    def selection(self) -> Tuple[str, ...]:
        ids = {p.id for p in self.state.projects}
        return tuple(pid for pid in self._selection if pid in ids)

    def _store(self) -> ProjectGroupStore:
        return ProjectGroupStore(self.state.project_groups)

    def _with_group(self, project_id: str) -> List[str]:
        store = self._store()
        g = store.get_group_by_project(project_id)
        if g is None:
            return [project_id]
        return [p.id for p in store.members(g.id, self.state.projects)] or [project_id]

    def notice(self, message: str) -> None:
        log.info("%s", message)
        if self._notify is not None:
            self._notify(message)

    def _run(self, command: object) -> CommandResult:
        result = self._dispatch(command)
        for n in result.notices:
            self.notice(n.message)
        return result

    def _render(self) -> None:
        self.callbacks.on_render_request()

    def _reset_gesture(self) -> None:
        self.gesture = GestureState.IDLE
        self.preview = None
        self._project_id = None
        self._side = None

    # --- pointer ---------------------------------------------------------------

    def pointer_down(self, x: float, y: float, *, target: Target, modifiers: Modifiers = NO_MODIFIERS) -> None:
        if self.gesture is not GestureState.IDLE:
            self._abort_gesture()

        if isinstance(target, BarTarget):
            if self.state.project_by_id(target.project_id) is None:
                return
            if modifiers.ctrl:
                self._toggle_selection(target.project_id, remove=modifiers.shift)
                return
            self.gesture = GestureState.PENDING_DRAG
            self._project_id = target.project_id
            self._origin = (x, y)
        elif isinstance(target, HandleTarget):
            p = self.state.project_by_id(target.project_id)
            if p is None:
                return
            if target.side not in (SIDE_START, SIDE_END):
                raise ValueError(f"Unknown resize side: {target.side!r}")
            self.gesture = GestureState.RESIZING
            self._project_id = p.id
            self._side = target.side
            self.preview = Preview(projects=(p,))
        elif isinstance(target, CellTarget):
            self.callbacks.on_cell_click(target.resource_id, target.date)
        elif isinstance(target, NavTarget):
            self.navigator.start(target.direction)
            if self.navigator.holding:
                self.gesture = GestureState.HOLD_NAVIGATING

    def pointer_move(self, x: float, y: float) -> Optional[Preview]:
        if self.gesture is GestureState.PENDING_DRAG:
            ox, oy = self._origin
            if abs(x - ox) < DRAG_THRESHOLD and abs(y - oy) < DRAG_THRESHOLD:
                return None
            self.gesture = GestureState.DRAGGING

        if self.gesture is GestureState.DRAGGING:
            cell = hit_test(x, y, self.grid)
            if cell is not None:
                self.preview = self._move_preview(cell)
            return self.preview

        if self.gesture is GestureState.RESIZING:
            d = hit_test_column(x, self.grid)
            if d is not None and self.preview is not None:
                cur = self.preview.projects[0]
                if self._side == SIDE_START and d <= cur.end and d != cur.start:
                    self.preview = Preview(projects=(_replace_start(cur, d),))
                elif self._side == SIDE_END and d >= cur.start and d != cur.end:
                    self.preview = Preview(projects=(_replace_end(cur, d),))
            return self.preview

        return None

    def _move_preview(self, cell: Cell) -> Preview:
        state = self.state
        cmd = MoveProject(self._project_id or "", cell.date, cell.resource_id, unpin=True)
        result = apply_command(state, cmd, ids=SequentialIds())
        affected = self._with_group(self._project_id or "")
        moved = tuple(p for p in (result.state.project_by_id(pid) for pid in affected) if p is not None)
        return Preview(projects=moved, cell=cell)

    def pointer_up(self, x: float, y: float) -> Optional[CommandResult]:
        gesture = self.gesture
        project_id = self._project_id
        preview = self.preview
        side = self._side
        self._reset_gesture()

        if gesture is GestureState.PENDING_DRAG and project_id is not None:
            self._select_single(project_id)
            return None

        if gesture is GestureState.DRAGGING and project_id is not None:
            if preview is None or preview.cell is None:
                return None
            return self._commit_move(project_id, preview.cell)

        if gesture is GestureState.RESIZING and project_id is not None and preview is not None:
            original = self.state.project_by_id(project_id)
            ghost = preview.projects[0]
            if original is None:
                return None
            if side == SIDE_START and ghost.start != original.start:
                return self._run(ResizeProject(project_id, SIDE_START, ghost.start))
            if side == SIDE_END and ghost.end != original.end:
                return self._run(ResizeProject(project_id, SIDE_END, ghost.end))
            return None

        if gesture is GestureState.HOLD_NAVIGATING:
            self.navigator.stop()
        return None

    def pointer_leave(self) -> None:
        if self.gesture is GestureState.HOLD_NAVIGATING:
            self.navigator.stop()
            self._reset_gesture()

    def _commit_move(self, project_id: str, cell: Cell) -> Optional[CommandResult]:
        state = self.state
        affected = [state.project_by_id(pid) for pid in self._with_group(project_id)]
        unpin = False
        if any(p is not None and p.pinned for p in affected):
            ok = self.confirmer.confirm(
                ConfirmRequest(
                    kind=KIND_PINNED_MOVE,
                    title="Pinned project",
                    message="You are trying to move a pinned project. Unpin it and move?",
                )
            )
            if not ok:
                self.notice("Move cancelled: project is pinned.")
                return None
            unpin = True
        return self._run(MoveProject(project_id, cell.date, cell.resource_id, unpin=unpin))

    def _abort_gesture(self) -> None:
        if self.navigator.holding:
            self.navigator.stop()
        self._reset_gesture()

    def cancel(self) -> None:
        """Escape: abort any gesture or hold, then clear a non-empty selection."""
        self._abort_gesture()
        if self._selection:
            self.clear_selection()

    # --- keyboard --------------------------------------------------------------

    def key_down(self, key: str, modifiers: Modifiers = NO_MODIFIERS) -> Optional[CommandResult]:
        k = key.lower() if len(key) == 1 else key
        if k == "g" and modifiers.ctrl:
            return self.group_selection()
        if key == "Delete" and self._selection:
            return self.delete_selection()
        if key == "Escape":
            self.cancel()
            return None
        if key in ("ArrowLeft", "ArrowRight") and not self.navigator.holding:
            self.navigator.start(-1 if key == "ArrowLeft" else 1)
            self.gesture = GestureState.HOLD_NAVIGATING
        return None

    def key_up(self, key: str) -> None:
        if key in ("ArrowLeft", "ArrowRight") and self.navigator.holding:
            self.navigator.stop()
            self._reset_gesture()

    # --- selection -------------------------------------------------------------

    def _select_single(self, project_id: str) -> None:
        ids = self._with_group(project_id)
        self._selection = dict.fromkeys(ids)
        if len(ids) > 1:
            self.notice(f"{len(ids)} projects selected (entire group)")
        else:
            self.notice("1 project selected")
        self._render()

    def _toggle_selection(self, project_id: str, *, remove: bool) -> None:
        ids = self._with_group(project_id)
        if remove:
            for pid in ids:
                self._selection.pop(pid, None)
            self.notice(f"{len(ids)} project(s) removed from selection")
        else:
            for pid in ids:
                self._selection.setdefault(pid, None)
            self.notice(f"{len(self._selection)} project(s) selected. Press Ctrl+G to group.")
        self._render()

    def select_group(self, project_id: str) -> None:
        self._select_single(project_id)

    def clear_selection(self) -> None:
        self._selection.clear()
        self.notice("All projects deselected.")
        self._render()

    def group_selection(self) -> Optional[CommandResult]:
        selected = self.selection
        if len(selected) < 2:
            self.notice("Select at least 2 projects to create a group")
            return None
        result = self._run(GroupProjects(selected))
        self._selection.clear()
        self._render()
        return result

    def delete_selection(self) -> Optional[CommandResult]:
        selected = self.selection
        if not selected:
            return None
        store = self._store()
        group_ids: List[str] = []
        plain: List[str] = []
        for pid in selected:
            g = store.get_group_by_project(pid)
            if g is None:
                plain.append(pid)
            elif g.id not in group_ids:
                group_ids.append(g.id)

        state = self.state
        if group_ids:
            names = ", ".join(g.name for g in (store.get_group(gid) for gid in group_ids) if g is not None)
            total = sum(len(store.members(gid, state.projects)) for gid in group_ids)
            request = ConfirmRequest(
                kind=KIND_DELETE_GROUP,
                title="Delete groups",
                message=(
                    f"Are you sure you want to delete {len(group_ids)} group(s) ({names}) "
                    f"containing {total} project(s)?\n\nThis action cannot be undone."
                ),
            )
        else:
            names = ", ".join(p.name for p in (state.project_by_id(pid) for pid in plain) if p is not None)
            request = ConfirmRequest(
                kind=KIND_DELETE,
                title="Delete projects",
                message=(
                    f"Are you sure you want to delete {len(plain)} project(s) ({names})?"
                    "\n\nThis action cannot be undone."
                ),
                suppressible=True,
            )
        if not self.confirmer.confirm(request):
            return None
        result = self._run(DeleteProjects(project_ids=tuple(plain), group_ids=tuple(group_ids)))
        self._selection.clear()
        self._render()
        return result

    # --- context actions -------------------------------------------------------

    def duplicate_project(self, project_id: str) -> Optional[str]:
        return self.callbacks.on_project_duplicate(project_id)

    def duplicate_group(self, group_id: str) -> CommandResult:
        return self._run(DuplicateGroup(group_id))

    def delete_project(self, project_id: str) -> bool:
        p = self.state.project_by_id(project_id)
        if p is None:
            return False
        ok = self.confirmer.confirm(
            ConfirmRequest(
                kind=KIND_DELETE,
                title="Delete project",
                message=f'Are you sure you want to delete "{p.name}"?',
                suppressible=True,
            )
        )
        if not ok:
            return False
        self.callbacks.on_project_delete(project_id)
        self._selection.pop(project_id, None)
        self.notice(f'Deleted project "{p.name}"')
        return True

    def delete_group(self, group_id: str) -> Optional[CommandResult]:
        store = self._store()
        g = store.get_group(group_id)
        members = store.members(group_id, self.state.projects) if g is not None else []
        if g is None or not members:
            self.notice("No projects to delete in this group.")
            return None
        ok = self.confirmer.confirm(
            ConfirmRequest(
                kind=KIND_DELETE_GROUP,
                title="Delete group",
                message=f'Delete group "{g.name}" and its {len(members)} projects?',
            )
        )
        if not ok:
            return None
        result = self._run(DeleteProjects(group_ids=(group_id,)))
        for p in members:
            self._selection.pop(p.id, None)
        return result

    def toggle_pin(self, project_id: str, *, whole_group: bool = False) -> CommandResult:
        return self._run(TogglePin(project_id, whole_group=whole_group))

    def change_color(self, project_id: str, color: str) -> CommandResult:
        return self._run(UpdateProject(project_id, color=color))

    def ungroup(self, project_id: str) -> CommandResult:
        return self._run(RemoveFromGroup(project_id))

    def add_to_group(self, project_id: str, group_id: str) -> CommandResult:
        return self._run(AddToGroup(group_id, project_id))

    # --- navigation ------------------------------------------------------------

    def _nav_step(self, days: int) -> None:
        self._dispatch(ShiftAnchor(days, today=self.today))

    def set_view_mode(self, view_mode: str) -> Optional[CommandResult]:
        if self.navigator.holding and view_mode != self.state.settings.view_mode:
            self.notice("View mode is locked during navigation")
            return None
        return self._run(SetViewMode(view_mode))


def _replace_start(p: Project, d: dt.date) -> Project:
    return dataclasses.replace(p, start=d)


def _replace_end(p: Project, d: dt.date) -> Project:
    return dataclasses.replace(p, end=d)


__all__ = [
    "BarTarget",
    "CellTarget",
    "DRAG_THRESHOLD",
    "GestureState",
    "HandleTarget",
    "Modifiers",
    "NavTarget",
    "Preview",
    "TimelineCallbacks",
    "TimelineController",
]
