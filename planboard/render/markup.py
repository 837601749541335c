# planboard/render/markup.py
"""Absolutely positioned markup for a GridLayout."""

from __future__ import annotations

from html import escape
from typing import Dict, List

from ..grouping import ProjectGroupStore
from ..layout import GridLayout
from ..model import AppState, Project

WEEKDAY_ABBR = ("Mo", "Tu", "We", "Th", "Fr", "Sa", "Su")


def _box(left: int, top: int, width: int, height: int) -> str:
    return f"left:{left}px;top:{top}px;width:{width}px;height:{height}px"


def header_markup(grid: GridLayout) -> List[str]:
    cfg = grid.config
    out: List[str] = []
    for m in grid.window.months:
        left = cfg.name_col_width + m.first_index * cfg.day_width
        out.append(
            f'<div class="pb-month" style="{_box(left, 0, m.length * cfg.day_width, 24)}">{escape(m.label)}</div>'
        )
    for c in grid.columns:
        label = f"{WEEKDAY_ABBR[c.date.weekday()]} {c.date.day}"
        out.append(f'<div class="pb-day" style="left:{c.left}px;width:{c.width}px">{label}</div>')
    return out


def column_markup(grid: GridLayout) -> List[str]:
    top = grid.config.header_height
    height = grid.height - top
    out: List[str] = []
    for c in grid.columns:
        classes = ["pb-col"]
        if c.weekend:
            classes.append("weekend")
        if c.today:
            classes.append("today")
        style = _box(c.left, top, c.width, height)
        if c.day_off_color:
            style += f";background:{escape(c.day_off_color)}33"
        out.append(f'<div class="{" ".join(classes)}" data-date="{c.date.isoformat()}" style="{style}"></div>')
    return out


def row_markup(grid: GridLayout) -> List[str]:
    cfg = grid.config
    out: List[str] = []
    for band in grid.groups:
        out.append(
            f'<div class="pb-group" style="{_box(0, band.top, grid.width, cfg.group_header_height)}">'
            f"{escape(band.name)}</div>"
        )
    for row in grid.rows:
        out.append(
            f'<div class="pb-row" data-resource="{escape(row.resource_id)}" '
            f'style="{_box(0, row.top, grid.width, row.height)}">'
            f'<span class="pb-row-name" style="width:{cfg.name_col_width}px">{escape(row.resource_name)}</span></div>'
        )
    return out


def bar_markup(grid: GridLayout, state: AppState) -> List[str]:
    store = ProjectGroupStore(state.project_groups)
    by_id: Dict[str, Project] = {p.id: p for p in state.projects}
    out: List[str] = []
    for bar in grid.bars:
        p = by_id.get(bar.project_id)
        if p is None:
            continue
        group = store.get_group_by_project(p.id)
        label = f"{group.name} - {p.name}" if group is not None else p.name
        classes = ["pb-bar"]
        if p.pinned:
            classes.append("pinned")
        if bar.clipped_left:
            classes.append("clip-left")
        if bar.clipped_right:
            classes.append("clip-right")
        out.append(
            f'<div class="{" ".join(classes)}" data-project="{escape(p.id)}" title="{escape(label)}" '
            f'style="{_box(bar.left, bar.top, bar.width, bar.height)};background:{escape(p.color)}">'
            f"{escape(label)}</div>"
        )
    return out


def board_markup(grid: GridLayout, state: AppState) -> str:
    parts = [f'<div class="pb-board" style="width:{grid.width}px;height:{grid.height}px">']
    parts += column_markup(grid)
    parts += header_markup(grid)
    parts += row_markup(grid)
    parts += bar_markup(grid, state)
    parts.append("</div>")
    return "\n".join(parts)


__all__ = ["bar_markup", "board_markup", "column_markup", "header_markup", "row_markup"]
