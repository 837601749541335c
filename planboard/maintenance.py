# planboard/maintenance.py
"""Data-cleanup helpers: storage statistics and bulk clearing."""

from __future__ import annotations

import dataclasses
import datetime as dt
from dataclasses import dataclass
from typing import Tuple

from .grouping import ProjectGroupStore
from .model import AppState, Project
from .schema import state_to_payload
from .util.dates import months_before
from .util.jsonio import dumps

OLD_PROJECT_MONTHS = 6


@dataclass(frozen=True)
class StorageStats:
    groups: int
    resources: int
    projects: int
    project_groups: int
    day_offs: int
    storage_size_kb: float
    old_projects: int


def old_projects(state: AppState, *, today: dt.date | None = None, months: int = OLD_PROJECT_MONTHS) -> Tuple[Project, ...]:
    """Projects whose end date lies before `today - months`."""
    cutoff = months_before(today or dt.date.today(), months)
    return tuple(p for p in state.projects if p.end < cutoff)


def storage_stats(state: AppState, *, today: dt.date | None = None, months: int = OLD_PROJECT_MONTHS) -> StorageStats:
    encoded = dumps(state_to_payload(state, generated_at="-"))
    return StorageStats(
        groups=len(state.resource_groups),
        resources=sum(len(g.resources) for g in state.resource_groups),
        projects=len(state.projects),
        project_groups=len(state.project_groups),
        day_offs=len(state.day_offs),
        storage_size_kb=round(len(encoded.encode("utf-8")) / 1024, 2),
        old_projects=len(old_projects(state, today=today, months=months)),
    )


def clear_old_projects(state: AppState, *, today: dt.date | None = None, months: int = OLD_PROJECT_MONTHS) -> AppState:
    stale = {p.id for p in old_projects(state, today=today, months=months)}
    if not stale:
        return state
    kept = tuple(p for p in state.projects if p.id not in stale)
    store = ProjectGroupStore(state.project_groups)
    store.prune_missing(p.id for p in kept)
    return dataclasses.replace(state, projects=kept, project_groups=store.groups)


def clear_project_groups(state: AppState) -> AppState:
    if not state.project_groups:
        return state
    return dataclasses.replace(state, project_groups=())


def clear_all(state: AppState) -> AppState:
    """Drop every project, day off and project group; rows and settings stay."""
    return dataclasses.replace(state, projects=(), day_offs=(), project_groups=())


__all__ = [
    "OLD_PROJECT_MONTHS",
    "StorageStats",
    "clear_all",
    "clear_old_projects",
    "clear_project_groups",
    "old_projects",
    "storage_stats",
]
