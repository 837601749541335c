# planboard/commands.py
"""Typed state commands and the reducer that applies them.

Every mutation of an `AppState` goes through `apply_command`, which returns a
`CommandResult` holding the new state. Rejected commands (unknown ids,
inverting resizes, pinned moves without `unpin`) return the input state
unchanged with `changed=False` and a notice saying why.
"""

from __future__ import annotations

import dataclasses
import datetime as dt
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Type

from . import maintenance, resources
from .grouping import ProjectGroupStore
from .ids import DEFAULT_IDS, IdGenerator
from .interval import add_days, days_between, is_inverted, shift
from .layout import DEFAULT_LOOKBACK_DAYS, view_days
from .model import (
    DEFAULT_PROJECT_COLOR,
    DEFAULT_PROJECT_NAME,
    AppState,
    DayOff,
    Project,
    Settings,
    day_off_color,
)

log = logging.getLogger(__name__)

SIDE_START = "start"
SIDE_END = "end"

COPY_SUFFIX = " (Copy)"


@dataclass(frozen=True)
class Notice:
    level: str      # info | warning
    message: str


@dataclass(frozen=True)
class CommandResult:
    state: AppState
    changed: bool
    notices: Tuple[Notice, ...] = ()
    created: Tuple[str, ...] = ()     # ids of entities created by the command


# --- commands ----------------------------------------------------------------

@dataclass(frozen=True)
class CreateProject:
    resource_id: str
    start: dt.date
    end: Optional[dt.date] = None      # defaults to a one-day project
    name: str = DEFAULT_PROJECT_NAME
    color: str = DEFAULT_PROJECT_COLOR
    notes: str = ""


@dataclass(frozen=True)
class UpdateProject:
    project_id: str
    name: Optional[str] = None
    color: Optional[str] = None
    notes: Optional[str] = None
    start: Optional[dt.date] = None
    end: Optional[dt.date] = None
    resource_id: Optional[str] = None
    pinned: Optional[bool] = None


@dataclass(frozen=True)
class MoveProject:
    """Drop `project_id` at `start` (and optionally on `resource_id`).

    A grouped project drags its whole group by the same day offset.
    """

    project_id: str
    start: dt.date
    resource_id: Optional[str] = None
    unpin: bool = False


@dataclass(frozen=True)
class ResizeProject:
    project_id: str
    side: str          # SIDE_START | SIDE_END
    date: dt.date


@dataclass(frozen=True)
class DeleteProjects:
    project_ids: Tuple[str, ...] = ()
    group_ids: Tuple[str, ...] = ()     # every member of these groups is deleted too


@dataclass(frozen=True)
class DuplicateProject:
    project_id: str


@dataclass(frozen=True)
class DuplicateGroup:
    group_id: str


@dataclass(frozen=True)
class GroupProjects:
    project_ids: Tuple[str, ...]
    name: Optional[str] = None


@dataclass(frozen=True)
class AddToGroup:
    group_id: str
    project_id: str


@dataclass(frozen=True)
class RemoveFromGroup:
    project_id: str


@dataclass(frozen=True)
class Ungroup:
    group_id: str


@dataclass(frozen=True)
class RenameProjectGroup:
    group_id: str
    name: str


@dataclass(frozen=True)
class TogglePin:
    project_id: str
    whole_group: bool = False


@dataclass(frozen=True)
class AddDayOff:
    date: dt.date
    type: str = "other"
    notes: str = ""
    color: Optional[str] = None


@dataclass(frozen=True)
class RemoveDayOff:
    day_off_id: str


@dataclass(frozen=True)
class SetViewMode:
    view_mode: str


@dataclass(frozen=True)
class ShiftAnchor:
    days: int
    today: Optional[dt.date] = None


@dataclass(frozen=True)
class SetAnchor:
    anchor_date: Optional[dt.date]


@dataclass(frozen=True)
class AddResourceGroup:
    name: str = resources.DEFAULT_GROUP_NAME


@dataclass(frozen=True)
class DeleteResourceGroup:
    group_id: str


@dataclass(frozen=True)
class RenameResourceGroup:
    group_id: str
    name: str


@dataclass(frozen=True)
class MoveResourceGroup:
    group_id: str
    delta: int


@dataclass(frozen=True)
class AddResource:
    group_id: str
    name: str = resources.DEFAULT_RESOURCE_NAME


@dataclass(frozen=True)
class DeleteResource:
    resource_id: str


@dataclass(frozen=True)
class RenameResource:
    resource_id: str
    name: str


@dataclass(frozen=True)
class ClearOldProjects:
    today: Optional[dt.date] = None
    months: int = maintenance.OLD_PROJECT_MONTHS


@dataclass(frozen=True)
class ClearProjectGroups:
    pass


@dataclass(frozen=True)
class ClearAll:
    pass


@dataclass(frozen=True)
class ReplaceState:
    state: AppState


# --- helpers -----------------------------------------------------------------

@dataclass
class _Ctx:
    ids: IdGenerator
    notices: List[Notice] = field(default_factory=list)
    created: List[str] = field(default_factory=list)

    def info(self, msg: str) -> None:
        self.notices.append(Notice("info", msg))

    def warn(self, msg: str) -> None:
        self.notices.append(Notice("warning", msg))


def _store(state: AppState, ctx: _Ctx) -> ProjectGroupStore:
    names = {p.id: p.name for p in state.projects}
    return ProjectGroupStore(state.project_groups, ids=ctx.ids, name_of=names.get)


def _replace_projects(state: AppState, updated: Dict[str, Project]) -> Tuple[Project, ...]:
    return tuple(updated.get(p.id, p) for p in state.projects)


def _affected(state: AppState, store: ProjectGroupStore, project: Project) -> List[Project]:
    """The project plus its group mates, canonical order."""
    g = store.get_group_by_project(project.id)
    if g is None:
        return [project]
    members = store.members(g.id, state.projects)
    return members or [project]


def _resource_group_id(state: AppState, resource_id: str, fallback: str) -> str:
    g = state.group_of_resource(resource_id)
    return g.id if g is not None else fallback


def _with_groups(state: AppState, store: ProjectGroupStore) -> AppState:
    return dataclasses.replace(state, project_groups=store.groups)


Handler = Callable[[AppState, object, _Ctx], AppState]


# --- handlers ----------------------------------------------------------------

def _create_project(state: AppState, cmd: CreateProject, ctx: _Ctx) -> AppState:
    group = state.group_of_resource(cmd.resource_id)
    if group is None:
        ctx.warn(f"Unknown resource: {cmd.resource_id}")
        return state
    end = cmd.end if cmd.end is not None else cmd.start
    if end < cmd.start:
        ctx.warn("Project end date must not be before its start date.")
        return state
    p = Project(
        id=ctx.ids.new("project"),
        name=cmd.name.strip() or DEFAULT_PROJECT_NAME,
        resource_id=cmd.resource_id,
        group_id=group.id,
        start=cmd.start,
        end=end,
        color=cmd.color or DEFAULT_PROJECT_COLOR,
        notes=cmd.notes,
    )
    ctx.created.append(p.id)
    return dataclasses.replace(state, projects=state.projects + (p,))


def _update_project(state: AppState, cmd: UpdateProject, ctx: _Ctx) -> AppState:
    p = state.project_by_id(cmd.project_id)
    if p is None:
        return state

    changes: Dict[str, object] = {}
    for name in ("name", "notes", "start", "end", "pinned"):
        v = getattr(cmd, name)
        if v is not None and v != getattr(p, name):
            changes[name] = v
    if cmd.resource_id is not None and cmd.resource_id != p.resource_id:
        if state.resource_by_id(cmd.resource_id) is None:
            ctx.warn(f"Unknown resource: {cmd.resource_id}")
            return state
        changes["resource_id"] = cmd.resource_id
        changes["group_id"] = _resource_group_id(state, cmd.resource_id, p.group_id)

    updated = dataclasses.replace(p, **changes) if changes else p
    if is_inverted(updated):
        ctx.warn("Project end date must not be before its start date.")
        return state

    out: Dict[str, Project] = {p.id: updated}

    if cmd.color is not None and cmd.color != p.color:
        store = _store(state, ctx)
        group = store.get_group_by_project(p.id)
        targets = _affected(state, store, p)
        for member in targets:
            base = out.get(member.id, member)
            out[member.id] = dataclasses.replace(base, color=cmd.color)
        if group is not None:
            ctx.info(f'Updated color for {len(targets)} projects in group "{group.name}"')

    if all(out[k] == state.project_by_id(k) for k in out):
        return state
    return dataclasses.replace(state, projects=_replace_projects(state, out))


def _move_project(state: AppState, cmd: MoveProject, ctx: _Ctx) -> AppState:
    p = state.project_by_id(cmd.project_id)
    if p is None:
        return state

    store = _store(state, ctx)
    group = store.get_group_by_project(p.id)
    affected = _affected(state, store, p)

    if any(m.pinned for m in affected) and not cmd.unpin:
        ctx.warn("Pinned projects cannot be moved. Unpin first.")
        return state

    offset = days_between(p.start, cmd.start)
    target_resource = cmd.resource_id if cmd.resource_id is not None else p.resource_id
    if state.resource_by_id(target_resource) is None:
        ctx.warn(f"Unknown resource: {target_resource}")
        return state
    relocate = target_resource != p.resource_id

    if relocate and group is not None and not store.can_change_resource(group.id, state.projects):
        ctx.warn(f'Group "{group.name}" spans several resources; dates moved, resources unchanged.')
        relocate = False

    out: Dict[str, Project] = {}
    for m in affected:
        moved = shift(m, offset)
        changes: Dict[str, object] = {}
        if relocate:
            changes["resource_id"] = target_resource
            changes["group_id"] = _resource_group_id(state, target_resource, m.group_id)
        if cmd.unpin and m.pinned:
            changes["pinned"] = False
        if changes:
            moved = dataclasses.replace(moved, **changes)
        if moved != m:
            out[m.id] = moved

    if not out:
        return state
    return dataclasses.replace(state, projects=_replace_projects(state, out))


def _resize_project(state: AppState, cmd: ResizeProject, ctx: _Ctx) -> AppState:
    p = state.project_by_id(cmd.project_id)
    if p is None:
        return state
    if cmd.side == SIDE_START:
        if cmd.date > p.end or cmd.date == p.start:
            return state
        updated = dataclasses.replace(p, start=cmd.date)
    elif cmd.side == SIDE_END:
        if cmd.date < p.start or cmd.date == p.end:
            return state
        updated = dataclasses.replace(p, end=cmd.date)
    else:
        raise ValueError(f"Unknown resize side: {cmd.side!r}")
    return dataclasses.replace(state, projects=_replace_projects(state, {p.id: updated}))


def _delete_projects(state: AppState, cmd: DeleteProjects, ctx: _Ctx) -> AppState:
    store = _store(state, ctx)
    doomed = {pid for pid in cmd.project_ids if state.project_by_id(pid) is not None}
    for gid in cmd.group_ids:
        g = store.get_group(gid)
        if g is not None:
            doomed.update(g.project_ids)
            store.delete_group(gid)
    if not doomed and len(store) == len(state.project_groups):
        return state

    kept = tuple(p for p in state.projects if p.id not in doomed)
    store.prune_missing(p.id for p in kept)
    removed = len(state.projects) - len(kept)
    ctx.info(f"Deleted {removed} project(s)")
    return dataclasses.replace(state, projects=kept, project_groups=store.groups)


def _copy_of(p: Project, new_id: str) -> Project:
    return dataclasses.replace(p, id=new_id, name=f"{p.name}{COPY_SUFFIX}", pinned=False)


def _duplicate_project(state: AppState, cmd: DuplicateProject, ctx: _Ctx) -> AppState:
    p = state.project_by_id(cmd.project_id)
    if p is None:
        return state
    dup = _copy_of(p, ctx.ids.new("project"))
    ctx.created.append(dup.id)
    return dataclasses.replace(state, projects=state.projects + (dup,))


def _duplicate_group(state: AppState, cmd: DuplicateGroup, ctx: _Ctx) -> AppState:
    store = _store(state, ctx)
    g = store.get_group(cmd.group_id)
    members = store.members(cmd.group_id, state.projects) if g is not None else []
    if g is None or not members:
        ctx.warn("No projects to duplicate in this group.")
        return state

    copies = [_copy_of(m, ctx.ids.new("project")) for m in members]
    new_group = store.create_group([c.id for c in copies], f"{g.name}{COPY_SUFFIX}")
    ctx.created.extend(c.id for c in copies)
    if new_group is not None:
        ctx.created.append(new_group.id)
    ctx.info(f"Duplicated {len(copies)} projects to a new group!")
    return dataclasses.replace(state, projects=state.projects + tuple(copies), project_groups=store.groups)


def _recolor_to_group(state: AppState, store: ProjectGroupStore, group_id: str, project_ids: Sequence[str]) -> Tuple[Project, ...]:
    members = store.members(group_id, state.projects)
    if not members:
        return state.projects
    color = members[0].color
    wanted = set(project_ids)
    return tuple(dataclasses.replace(p, color=color) if p.id in wanted and p.color != color else p for p in state.projects)


def _group_projects(state: AppState, cmd: GroupProjects, ctx: _Ctx) -> AppState:
    selected = [pid for pid in dict.fromkeys(cmd.project_ids) if state.project_by_id(pid) is not None]
    if len(selected) < 2:
        ctx.warn("Select at least 2 projects to create a group")
        return state

    store = _store(state, ctx)
    touched: List[str] = []
    ungrouped: List[str] = []
    for pid in selected:
        g = store.get_group_by_project(pid)
        if g is None:
            ungrouped.append(pid)
        elif g.id not in touched:
            touched.append(g.id)

    if not touched:
        group = store.create_group(selected, cmd.name)
        if group is None:
            return state
        ctx.created.append(group.id)
        ctx.info("Group created successfully!")
        return _with_groups(state, store)

    if len(touched) == 1:
        if not ungrouped:
            ctx.info("All selected projects are already in the same group")
            return state
        added = [pid for pid in ungrouped if store.add_project_to_group(touched[0], pid)]
        ctx.info(f"{len(added)} project(s) added to existing group!")
        projects = _recolor_to_group(state, store, touched[0], added)
        return dataclasses.replace(state, projects=projects, project_groups=store.groups)

    merged = store.merge_groups(touched, ungrouped, cmd.name)
    if merged is None:
        return state
    ctx.created.append(merged.id)
    ctx.info(f"Merged {len(touched)} groups into one!")
    return _with_groups(state, store)


def _add_to_group(state: AppState, cmd: AddToGroup, ctx: _Ctx) -> AppState:
    if state.project_by_id(cmd.project_id) is None:
        return state
    store = _store(state, ctx)
    if not store.add_project_to_group(cmd.group_id, cmd.project_id):
        return state
    g = store.get_group(cmd.group_id)
    if g is not None:
        ctx.info(f'Added project to group "{g.name}"')
    projects = _recolor_to_group(state, store, cmd.group_id, [cmd.project_id])
    return dataclasses.replace(state, projects=projects, project_groups=store.groups)


def _remove_from_group(state: AppState, cmd: RemoveFromGroup, ctx: _Ctx) -> AppState:
    store = _store(state, ctx)
    if not store.remove_project_from_group(cmd.project_id):
        return state
    ctx.info("Project ungrouped")
    return _with_groups(state, store)


def _ungroup(state: AppState, cmd: Ungroup, ctx: _Ctx) -> AppState:
    store = _store(state, ctx)
    if not store.delete_group(cmd.group_id):
        return state
    return _with_groups(state, store)


def _rename_project_group(state: AppState, cmd: RenameProjectGroup, ctx: _Ctx) -> AppState:
    store = _store(state, ctx)
    if not store.rename_group(cmd.group_id, cmd.name):
        return state
    return _with_groups(state, store)


def _toggle_pin(state: AppState, cmd: TogglePin, ctx: _Ctx) -> AppState:
    p = state.project_by_id(cmd.project_id)
    if p is None:
        return state
    if not cmd.whole_group:
        ctx.info(f'Project "{p.name}" {"unpinned" if p.pinned else "pinned"}')
        return dataclasses.replace(state, projects=_replace_projects(state, {p.id: dataclasses.replace(p, pinned=not p.pinned)}))

    store = _store(state, ctx)
    members = _affected(state, store, p)
    # All pinned -> unpin all; otherwise pin all.
    pinned = not all(m.pinned for m in members)
    out = {m.id: dataclasses.replace(m, pinned=pinned) for m in members if m.pinned != pinned}
    ctx.info(f"{len(members)} projects {'pinned' if pinned else 'unpinned'}")
    return dataclasses.replace(state, projects=_replace_projects(state, out))


def _add_day_off(state: AppState, cmd: AddDayOff, ctx: _Ctx) -> AppState:
    d = DayOff(
        id=ctx.ids.new("day_off"),
        date=cmd.date,
        type=cmd.type,
        color=cmd.color or day_off_color(cmd.type),
        notes=cmd.notes,
    )
    ctx.created.append(d.id)
    return dataclasses.replace(state, day_offs=state.day_offs + (d,))


def _remove_day_off(state: AppState, cmd: RemoveDayOff, ctx: _Ctx) -> AppState:
    kept = tuple(d for d in state.day_offs if d.id != cmd.day_off_id)
    if len(kept) == len(state.day_offs):
        return state
    return dataclasses.replace(state, day_offs=kept)


def _set_view_mode(state: AppState, cmd: SetViewMode, ctx: _Ctx) -> AppState:
    view_days(cmd.view_mode)  # raises UnknownViewModeError
    if cmd.view_mode == state.settings.view_mode:
        return state
    return dataclasses.replace(state, settings=dataclasses.replace(state.settings, view_mode=cmd.view_mode))


def _shift_anchor(state: AppState, cmd: ShiftAnchor, ctx: _Ctx) -> AppState:
    if not cmd.days:
        return state
    base = state.settings.anchor_date
    if base is None:
        base = add_days(cmd.today or dt.date.today(), -DEFAULT_LOOKBACK_DAYS)
    return dataclasses.replace(state, settings=Settings(state.settings.view_mode, add_days(base, cmd.days)))


def _set_anchor(state: AppState, cmd: SetAnchor, ctx: _Ctx) -> AppState:
    if cmd.anchor_date == state.settings.anchor_date:
        return state
    return dataclasses.replace(state, settings=Settings(state.settings.view_mode, cmd.anchor_date))


def _resource_edit(fn: Callable[..., resources.Groups], *fields: str, with_ids: bool = False) -> Handler:
    def handler(state: AppState, cmd: object, ctx: _Ctx) -> AppState:
        kwargs = {"ids": ctx.ids} if with_ids else {}
        try:
            groups = fn(state.resource_groups, *(getattr(cmd, f) for f in fields), **kwargs)
        except ValueError as exc:
            ctx.warn(str(exc))
            return state
        if groups == state.resource_groups:
            return state
        if with_ids:
            before = {r.id for _g, r in state.iter_resources()} | {g.id for g in state.resource_groups}
            after = {r.id for g in groups for r in g.resources} | {g.id for g in groups}
            ctx.created.extend(sorted(after - before))
        return dataclasses.replace(state, resource_groups=groups)

    return handler


def _clear_old_projects(state: AppState, cmd: ClearOldProjects, ctx: _Ctx) -> AppState:
    out = maintenance.clear_old_projects(state, today=cmd.today, months=cmd.months)
    if out is not state:
        ctx.info(f"Cleared {len(state.projects) - len(out.projects)} old projects!")
    return out


def _clear_project_groups(state: AppState, cmd: ClearProjectGroups, ctx: _Ctx) -> AppState:
    out = maintenance.clear_project_groups(state)
    if out is not state:
        ctx.info(f"Cleared {len(state.project_groups)} project groups!")
    return out


def _clear_all(state: AppState, cmd: ClearAll, ctx: _Ctx) -> AppState:
    if not (state.projects or state.day_offs or state.project_groups):
        return state
    return maintenance.clear_all(state)


def _replace_state(state: AppState, cmd: ReplaceState, ctx: _Ctx) -> AppState:
    return cmd.state


HANDLERS: Dict[Type[object], Handler] = {
    CreateProject: _create_project,
    UpdateProject: _update_project,
    MoveProject: _move_project,
    ResizeProject: _resize_project,
    DeleteProjects: _delete_projects,
    DuplicateProject: _duplicate_project,
    DuplicateGroup: _duplicate_group,
    GroupProjects: _group_projects,
    AddToGroup: _add_to_group,
    RemoveFromGroup: _remove_from_group,
    Ungroup: _ungroup,
    RenameProjectGroup: _rename_project_group,
    TogglePin: _toggle_pin,
    AddDayOff: _add_day_off,
    RemoveDayOff: _remove_day_off,
    SetViewMode: _set_view_mode,
    ShiftAnchor: _shift_anchor,
    SetAnchor: _set_anchor,
    AddResourceGroup: _resource_edit(resources.add_group, "name", with_ids=True),
    DeleteResourceGroup: _resource_edit(resources.delete_group, "group_id"),
    RenameResourceGroup: _resource_edit(resources.rename_group, "group_id", "name"),
    MoveResourceGroup: _resource_edit(resources.move_group, "group_id", "delta"),
    AddResource: _resource_edit(resources.add_resource, "group_id", "name", with_ids=True),
    DeleteResource: _resource_edit(resources.delete_resource, "resource_id"),
    RenameResource: _resource_edit(resources.rename_resource, "resource_id", "name"),
    ClearOldProjects: _clear_old_projects,
    ClearProjectGroups: _clear_project_groups,
    ClearAll: _clear_all,
    ReplaceState: _replace_state,
}


def apply_command(state: AppState, command: object, *, ids: IdGenerator | None = None) -> CommandResult:
    """Apply one command; the input state is never modified."""
    handler = HANDLERS.get(type(command))
    if handler is None:
        raise TypeError(f"Unknown command: {type(command).__name__}")
    ctx = _Ctx(ids=ids or DEFAULT_IDS)
    new_state = handler(state, command, ctx)
    changed = new_state is not state and new_state != state
    for n in ctx.notices:
        log.debug("%s: %s %s", type(command).__name__, n.level, n.message)
    return CommandResult(
        state=new_state if changed else state,
        changed=changed,
        notices=tuple(ctx.notices),
        created=tuple(ctx.created) if changed else (),
    )


__all__ = [
    "AddDayOff",
    "AddResource",
    "AddResourceGroup",
    "AddToGroup",
    "ClearAll",
    "ClearOldProjects",
    "ClearProjectGroups",
    "CommandResult",
    "CreateProject",
    "DeleteProjects",
    "DeleteResource",
    "DeleteResourceGroup",
    "DuplicateGroup",
    "DuplicateProject",
    "GroupProjects",
    "HANDLERS",
    "MoveProject",
    "MoveResourceGroup",
    "Notice",
    "RemoveDayOff",
    "RemoveFromGroup",
    "RenameProjectGroup",
    "RenameResource",
    "RenameResourceGroup",
    "ReplaceState",
    "ResizeProject",
    "SIDE_END",
    "SIDE_START",
    "SetAnchor",
    "SetViewMode",
    "ShiftAnchor",
    "TogglePin",
    "Ungroup",
    "UpdateProject",
    "apply_command",
]
