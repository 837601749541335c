# planboard/model.py
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional, Tuple

DEFAULT_PROJECT_NAME = "New Project"
DEFAULT_PROJECT_COLOR = "#b39ddb"

VIEW_WEEK = "week"
VIEW_TWO_WEEK = "twoWeek"
VIEW_MONTH = "month"

# Visible window length (days) per view mode.
VIEW_DAYS: Dict[str, int] = {
    VIEW_WEEK: 7,
    VIEW_TWO_WEEK: 14,
    VIEW_MONTH: 30,
}

DAY_OFF_TYPES = ("holiday", "weekend", "sick", "personal", "other")

DAY_OFF_COLORS: Dict[str, str] = {
    "holiday": "#ff6b6b",
    "weekend": "#4ecdc4",
    "sick": "#ffa726",
    "personal": "#ab47bc",
    "other": "#95a5a6",
}


def day_off_color(kind: str | None) -> str:
    return DAY_OFF_COLORS.get(str(kind or ""), DAY_OFF_COLORS["other"])


@dataclass(frozen=True)
class Resource:
    id: str
    name: str


@dataclass(frozen=True)
class ResourceGroup:
    """A sidebar group; its resources are the grid rows, in order."""

    id: str
    name: str
    resources: Tuple[Resource, ...] = ()


@dataclass(frozen=True)
class Project:
    id: str
    name: str
    resource_id: str
    group_id: str          # owning ResourceGroup id (informational)
    start: dt.date
    end: dt.date           # inclusive
    color: str = DEFAULT_PROJECT_COLOR
    notes: str = ""
    pinned: bool = False


@dataclass(frozen=True)
class DayOff:
    id: str
    date: dt.date
    type: str = "other"    # one of DAY_OFF_TYPES
    color: str = DAY_OFF_COLORS["other"]
    notes: str = ""


@dataclass(frozen=True)
class ProjectGroup:
    """Projects that move, recolor and delete as a unit (always >= 2 members)."""

    id: str
    name: str
    project_ids: Tuple[str, ...]
    created_at: str = ""


@dataclass(frozen=True)
class Settings:
    view_mode: str = VIEW_WEEK
    anchor_date: Optional[dt.date] = None


@dataclass(frozen=True)
class AppState:
    resource_groups: Tuple[ResourceGroup, ...] = ()
    projects: Tuple[Project, ...] = ()
    day_offs: Tuple[DayOff, ...] = ()
    project_groups: Tuple[ProjectGroup, ...] = ()
    settings: Settings = field(default_factory=Settings)

    def project_by_id(self, project_id: str) -> Optional[Project]:
        for p in self.projects:
            if p.id == project_id:
                return p
        return None

    def iter_resources(self) -> Iterator[Tuple[ResourceGroup, Resource]]:
        for g in self.resource_groups:
            for r in g.resources:
                yield g, r

    def resource_by_id(self, resource_id: str) -> Optional[Resource]:
        for _g, r in self.iter_resources():
            if r.id == resource_id:
                return r
        return None

    def group_of_resource(self, resource_id: str) -> Optional[ResourceGroup]:
        for g, r in self.iter_resources():
            if r.id == resource_id:
                return g
        return None

    def resource_group_by_id(self, group_id: str) -> Optional[ResourceGroup]:
        for g in self.resource_groups:
            if g.id == group_id:
                return g
        return None

    def project_group_by_id(self, group_id: str) -> Optional[ProjectGroup]:
        for g in self.project_groups:
            if g.id == group_id:
                return g
        return None


__all__ = [
    "AppState",
    "DAY_OFF_COLORS",
    "DAY_OFF_TYPES",
    "DEFAULT_PROJECT_COLOR",
    "DEFAULT_PROJECT_NAME",
    "DayOff",
    "Project",
    "ProjectGroup",
    "Resource",
    "ResourceGroup",
    "Settings",
    "VIEW_DAYS",
    "VIEW_MONTH",
    "VIEW_TWO_WEEK",
    "VIEW_WEEK",
    "day_off_color",
]
