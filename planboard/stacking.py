# planboard/stacking.py
from __future__ import annotations

from typing import Dict, Iterable, List, Sequence

from .interval import DateSpan, overlaps
from .model import Project


def stack_lanes(projects: Sequence[Project]) -> List[List[Project]]:
    """Greedy lane packing.

    Projects are visited by ascending start (sorted() is stable, so ties keep
    input order). Each goes into the first lane whose most recent project does
    not overlap it; otherwise a new lane is opened.
    """
    ordered = sorted(projects, key=lambda p: p.start)
    lanes: List[List[Project]] = []
    for proj in ordered:
        for lane in lanes:
            if not overlaps(proj, lane[-1]):
                lane.append(proj)
                break
        else:
            lanes.append([proj])
    return lanes


def assign_lanes(projects: Sequence[Project]) -> Dict[str, int]:
    """Return {project_id: lane_index} for one resource's projects."""
    out: Dict[str, int] = {}
    for idx, lane in enumerate(stack_lanes(projects)):
        for proj in lane:
            out[proj.id] = idx
    return out


def lane_count(projects: Sequence[Project]) -> int:
    # An empty row still takes one lane of height.
    return max(1, len(stack_lanes(projects)))


def visible_for_resource(projects: Iterable[Project], resource_id: str, window: DateSpan) -> List[Project]:
    """Projects on `resource_id` that overlap the visible window, input order kept."""
    return [p for p in projects if p.resource_id == resource_id and overlaps(p, window)]


__all__ = [
    "assign_lanes",
    "lane_count",
    "stack_lanes",
    "visible_for_resource",
]
