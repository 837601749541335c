"""Small deterministic boards shared by the contract tests."""

from __future__ import annotations

import datetime as dt
from typing import Iterable, Optional, Tuple

from planboard.model import AppState, Project, ProjectGroup, Resource, ResourceGroup, Settings

D = dt.date


def project(
    pid: str,
    start: dt.date,
    end: dt.date,
    *,
    resource_id: str = "r1",
    group_id: str = "rg1",
    name: Optional[str] = None,
    color: str = "#b39ddb",
    pinned: bool = False,
) -> Project:
    return Project(
        id=pid,
        name=name or pid.upper(),
        resource_id=resource_id,
        group_id=group_id,
        start=start,
        end=end,
        color=color,
        pinned=pinned,
    )


def board(
    projects: Iterable[Project] = (),
    groups: Iterable[ProjectGroup] = (),
    *,
    anchor: Optional[dt.date] = D(2024, 1, 1),
    view_mode: str = "week",
) -> AppState:
    """Two resource groups: rg1 = {r1, r2}, rg2 = {r3}."""
    rgs: Tuple[ResourceGroup, ...] = (
        ResourceGroup("rg1", "Development", (Resource("r1", "Developer 1"), Resource("r2", "Developer 2"))),
        ResourceGroup("rg2", "Design", (Resource("r3", "Designer"),)),
    )
    return AppState(
        resource_groups=rgs,
        projects=tuple(projects),
        project_groups=tuple(groups),
        settings=Settings(view_mode=view_mode, anchor_date=anchor),
    )


def pgroup(gid: str, *pids: str, name: str = "G") -> ProjectGroup:
    return ProjectGroup(id=gid, name=name, project_ids=tuple(pids), created_at="2024-01-01T00:00:00Z")
