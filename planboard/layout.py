# planboard/layout.py
"""Timeline geometry.

Everything here is pure: the grid is a coordinate table computed from an
`AppState` and a visible window, and hit-testing is a lookup on that table,
so nothing depends on a rendering surface.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from .interval import add_days
from .model import VIEW_DAYS, AppState, DayOff
from .stacking import assign_lanes, visible_for_resource

MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)

# Days before today shown when no anchor is stored.
DEFAULT_LOOKBACK_DAYS = 7


class UnknownViewModeError(ValueError):
    """Raised for a view mode outside VIEW_DAYS."""


def view_days(view_mode: str) -> int:
    try:
        return VIEW_DAYS[view_mode]
    except KeyError:
        raise UnknownViewModeError(f"Unknown view mode: {view_mode!r} (expected one of {sorted(VIEW_DAYS)})") from None


@dataclass(frozen=True)
class MonthSpan:
    year: int
    month: int
    label: str
    first_index: int
    length: int


@dataclass(frozen=True)
class ViewWindow:
    start: dt.date
    end: dt.date
    dates: Tuple[dt.date, ...]
    months: Tuple[MonthSpan, ...]

    def index_of(self, d: dt.date) -> Optional[int]:
        if d < self.start or d > self.end:
            return None
        return (d - self.start).days


def month_spans(dates: Sequence[dt.date], *, today: dt.date | None = None) -> Tuple[MonthSpan, ...]:
    """Group consecutive dates by month for the secondary header row.

    The year is appended to the label only for months outside the current year.
    """
    this_year = (today or dt.date.today()).year
    out: List[MonthSpan] = []
    for i, d in enumerate(dates):
        last = out[-1] if out else None
        if last is not None and last.year == d.year and last.month == d.month:
            out[-1] = MonthSpan(last.year, last.month, last.label, last.first_index, last.length + 1)
            continue
        label = MONTH_NAMES[d.month - 1]
        if d.year != this_year:
            label = f"{label} {d.year}"
        out.append(MonthSpan(d.year, d.month, label, i, 1))
    return tuple(out)


def compute_view(view_mode: str, anchor_date: dt.date | None = None, *, today: dt.date | None = None) -> ViewWindow:
    today = today or dt.date.today()
    days = view_days(view_mode)
    start = anchor_date if anchor_date is not None else add_days(today, -DEFAULT_LOOKBACK_DAYS)
    dates = tuple(add_days(start, i) for i in range(days))
    return ViewWindow(start=start, end=dates[-1], dates=dates, months=month_spans(dates, today=today))


@dataclass(frozen=True)
class LayoutConfig:
    name_col_width: int = 160
    day_width: int = 40
    lane_height: int = 26
    bar_inset: int = 3
    bar_height: int = 22
    header_height: int = 48
    group_header_height: int = 24
    group_padding: int = 6


@dataclass(frozen=True)
class Column:
    index: int
    date: dt.date
    left: int
    width: int
    today: bool = False
    weekend: bool = False
    day_off_color: Optional[str] = None


@dataclass(frozen=True)
class Row:
    resource_id: str
    resource_name: str
    group_id: str
    top: int
    height: int
    lanes: int


@dataclass(frozen=True)
class GroupBand:
    group_id: str
    name: str
    top: int
    height: int


@dataclass(frozen=True)
class BarGeometry:
    project_id: str
    resource_id: str
    lane: int
    left: int
    top: int
    width: int
    height: int
    start_index: int
    end_index: int
    clipped_left: bool
    clipped_right: bool


@dataclass(frozen=True)
class Cell:
    resource_id: str
    date: dt.date


@dataclass(frozen=True)
class GridLayout:
    window: ViewWindow
    config: LayoutConfig
    columns: Tuple[Column, ...]
    rows: Tuple[Row, ...]
    groups: Tuple[GroupBand, ...]
    bars: Tuple[BarGeometry, ...]
    width: int
    height: int

    def row_for(self, resource_id: str) -> Optional[Row]:
        for r in self.rows:
            if r.resource_id == resource_id:
                return r
        return None

    def bar_for(self, project_id: str) -> Optional[BarGeometry]:
        for b in self.bars:
            if b.project_id == project_id:
                return b
        return None


def _day_off_map(day_offs: Sequence[DayOff]) -> Dict[dt.date, DayOff]:
    out: Dict[dt.date, DayOff] = {}
    for d in day_offs:
        out.setdefault(d.date, d)  # first entry for a date wins
    return out


def build_columns(window: ViewWindow, config: LayoutConfig, day_offs: Sequence[DayOff], *, today: dt.date) -> Tuple[Column, ...]:
    offs = _day_off_map(day_offs)
    cols: List[Column] = []
    for i, d in enumerate(window.dates):
        off = offs.get(d)
        cols.append(
            Column(
                index=i,
                date=d,
                left=config.name_col_width + i * config.day_width,
                width=config.day_width,
                today=(d == today),
                weekend=(d.weekday() >= 5),
                day_off_color=off.color if off is not None else None,
            )
        )
    return tuple(cols)


def _visible_index_range(start: dt.date, end: dt.date, window: ViewWindow) -> Tuple[int, int]:
    # First visible date >= start, last visible date <= end (clipped at the edges).
    first = max(start, window.start)
    last = min(end, window.end)
    return (first - window.start).days, (last - window.start).days


def build_grid(
    state: AppState,
    window: ViewWindow | None = None,
    config: LayoutConfig | None = None,
    *,
    today: dt.date | None = None,
) -> GridLayout:
    today = today or dt.date.today()
    config = config or LayoutConfig()
    if window is None:
        window = compute_view(state.settings.view_mode, state.settings.anchor_date, today=today)

    columns = build_columns(window, config, state.day_offs, today=today)
    rows: List[Row] = []
    bands: List[GroupBand] = []
    bars: List[BarGeometry] = []

    y = config.header_height
    for group in state.resource_groups:
        band_top = y
        y += config.group_header_height
        for res in group.resources:
            projs = [p for p in visible_for_resource(state.projects, res.id, window) if p.start <= p.end]
            lanes = assign_lanes(projs)
            n_lanes = max(1, max(lanes.values(), default=-1) + 1)
            height = n_lanes * config.lane_height + 2 * config.bar_inset
            rows.append(Row(res.id, res.name, group.id, y, height, n_lanes))

            for p in projs:
                si, ei = _visible_index_range(p.start, p.end, window)
                c0 = columns[si]
                c1 = columns[ei]
                lane = lanes[p.id]
                bars.append(
                    BarGeometry(
                        project_id=p.id,
                        resource_id=res.id,
                        lane=lane,
                        left=c0.left + 1,
                        top=y + config.bar_inset + lane * config.lane_height,
                        width=(c1.left + c1.width) - c0.left - 2,
                        height=config.bar_height,
                        start_index=si,
                        end_index=ei,
                        clipped_left=p.start < window.start,
                        clipped_right=p.end > window.end,
                    )
                )
            y += height
        y += config.group_padding
        bands.append(GroupBand(group.id, group.name, band_top, y - band_top))

    width = config.name_col_width + len(columns) * config.day_width
    return GridLayout(
        window=window,
        config=config,
        columns=columns,
        rows=tuple(rows),
        groups=tuple(bands),
        bars=tuple(bars),
        width=width,
        height=y,
    )


def hit_test_column(x: float, grid: GridLayout) -> Optional[dt.date]:
    cfg = grid.config
    if x < cfg.name_col_width:
        return None
    idx = int((x - cfg.name_col_width) // cfg.day_width)
    if idx < 0 or idx >= len(grid.columns):
        return None
    return grid.columns[idx].date


def hit_test(x: float, y: float, grid: GridLayout) -> Optional[Cell]:
    """Map a pointer position to the (resource, date) cell under it, if any."""
    d = hit_test_column(x, grid)
    if d is None:
        return None
    for row in grid.rows:
        if row.top <= y < row.top + row.height:
            return Cell(row.resource_id, d)
    return None


__all__ = [
    "BarGeometry",
    "Cell",
    "Column",
    "GridLayout",
    "GroupBand",
    "LayoutConfig",
    "MonthSpan",
    "Row",
    "UnknownViewModeError",
    "ViewWindow",
    "build_columns",
    "build_grid",
    "compute_view",
    "hit_test",
    "hit_test_column",
    "month_spans",
    "view_days",
]
