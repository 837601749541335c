"""planboard.api

Stable *library* entrypoint for planboard.

Policy:
  - Only names listed in __all__ are considered public API.
  - Everything else is internal and may change without notice.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional, Union

from planboard.commands import (
    AddDayOff,
    AddResource,
    AddResourceGroup,
    AddToGroup,
    ClearAll,
    ClearOldProjects,
    ClearProjectGroups,
    CommandResult,
    CreateProject,
    DeleteProjects,
    DeleteResource,
    DeleteResourceGroup,
    DuplicateGroup,
    DuplicateProject,
    GroupProjects,
    MoveProject,
    MoveResourceGroup,
    Notice,
    RemoveDayOff,
    RemoveFromGroup,
    RenameProjectGroup,
    RenameResource,
    RenameResourceGroup,
    ReplaceState,
    ResizeProject,
    SetAnchor,
    SetViewMode,
    ShiftAnchor,
    TogglePin,
    Ungroup,
    UpdateProject,
    apply_command,
)
from planboard.confirm import AlwaysConfirm, ConfirmRequest, Confirmer, NeverConfirm, SuppressibleConfirmer
from planboard.controller import (
    BarTarget,
    CellTarget,
    GestureState,
    HandleTarget,
    Modifiers,
    NavTarget,
    Preview,
    TimelineCallbacks,
    TimelineController,
)
from planboard.grouping import ProjectGroupStore
from planboard.ids import IdGenerator, RandomIds, SequentialIds
from planboard.interval import Interval, duration, overlaps, shift
from planboard.layout import (
    BarGeometry,
    Cell,
    GridLayout,
    LayoutConfig,
    UnknownViewModeError,
    ViewWindow,
    build_grid,
    compute_view,
    hit_test,
    hit_test_column,
)
from planboard.model import AppState, DayOff, Project, ProjectGroup, Resource, ResourceGroup, Settings
from planboard.navigation import AsyncioTicker, HoldNavigator, ManualTicker
from planboard.persist import DocumentStore, JsonFileStore, MemoryStore, Persistence, default_state
from planboard.render.inline import render_timeline_html
from planboard.schedules import Schedule, ScheduleManager, duplicate_schedule
from planboard.schema import LATEST_SCHEMA_VERSION, state_from_payload, state_to_payload, upgrade_payload
from planboard.stacking import assign_lanes
from planboard.state import ContainerCallbacks, StateContainer
from planboard.util.jsonio import read_json, write_json
from planboard.validate import PayloadValidationError, assert_valid_payload, validate_state

JsonPath = Union[str, Path]
Payload = Dict[str, Any]


def load_state_from_json(path: JsonPath) -> AppState:
    """Read a state file of any supported schema version."""
    obj = read_json(path)
    if not isinstance(obj, dict):
        raise PayloadValidationError("payload must be a JSON object")
    return state_from_payload(obj)


def save_state_to_json(path: JsonPath, state: AppState) -> None:
    write_json(path, state_to_payload(state))


def normalize_payload(payload: Payload) -> Payload:
    """Upgrade to the latest schema and validate; raises PayloadValidationError."""
    upgraded = upgrade_payload(payload)
    assert_valid_payload(upgraded)
    return upgraded


def new_board(*, ids: Optional[IdGenerator] = None) -> AppState:
    """Empty board seeded with the default resource group."""
    return default_state(ids)


__all__ = [
    "AddDayOff",
    "AddResource",
    "AddResourceGroup",
    "AddToGroup",
    "AlwaysConfirm",
    "AppState",
    "AsyncioTicker",
    "BarGeometry",
    "BarTarget",
    "Cell",
    "CellTarget",
    "ClearAll",
    "ClearOldProjects",
    "ClearProjectGroups",
    "CommandResult",
    "ConfirmRequest",
    "Confirmer",
    "ContainerCallbacks",
    "CreateProject",
    "DayOff",
    "DeleteProjects",
    "DeleteResource",
    "DeleteResourceGroup",
    "DocumentStore",
    "DuplicateGroup",
    "DuplicateProject",
    "GestureState",
    "GridLayout",
    "GroupProjects",
    "HandleTarget",
    "HoldNavigator",
    "IdGenerator",
    "Interval",
    "JsonFileStore",
    "LATEST_SCHEMA_VERSION",
    "LayoutConfig",
    "ManualTicker",
    "MemoryStore",
    "Modifiers",
    "MoveProject",
    "MoveResourceGroup",
    "NavTarget",
    "NeverConfirm",
    "Notice",
    "PayloadValidationError",
    "Persistence",
    "Preview",
    "Project",
    "ProjectGroup",
    "ProjectGroupStore",
    "RandomIds",
    "RemoveDayOff",
    "RemoveFromGroup",
    "RenameProjectGroup",
    "RenameResource",
    "RenameResourceGroup",
    "ReplaceState",
    "ResizeProject",
    "Resource",
    "ResourceGroup",
    "Schedule",
    "ScheduleManager",
    "SequentialIds",
    "SetAnchor",
    "SetViewMode",
    "Settings",
    "ShiftAnchor",
    "StateContainer",
    "SuppressibleConfirmer",
    "TimelineCallbacks",
    "TimelineController",
    "TogglePin",
    "Ungroup",
    "UnknownViewModeError",
    "UpdateProject",
    "ViewWindow",
    "apply_command",
    "assign_lanes",
    "build_grid",
    "compute_view",
    "duplicate_schedule",
    "duration",
    "hit_test",
    "hit_test_column",
    "load_state_from_json",
    "new_board",
    "normalize_payload",
    "overlaps",
    "render_timeline_html",
    "save_state_to_json",
    "shift",
    "state_from_payload",
    "state_to_payload",
    "upgrade_payload",
    "validate_state",
]
