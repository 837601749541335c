# planboard/export.py
from __future__ import annotations

import csv
import io
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from .model import AppState
from .schema import state_to_payload
from .util.dates import utc_iso_z_now
from .util.jsonio import dumps

CSV_HEADER = ("Group", "Resource", "Project", "Start", "End", "Color", "Notes")


@dataclass(frozen=True)
class ExportRow:
    group: str
    resource: str
    project: str
    start: str
    end: str
    color: str
    notes: str

    def as_tuple(self) -> Tuple[str, ...]:
        return (self.group, self.resource, self.project, self.start, self.end, self.color, self.notes)


def export_rows(state: AppState) -> List[ExportRow]:
    """One row per project, in project-list order; names resolved through ids."""
    rows: List[ExportRow] = []
    for p in state.projects:
        group = state.group_of_resource(p.resource_id) or state.resource_group_by_id(p.group_id)
        res = state.resource_by_id(p.resource_id)
        rows.append(
            ExportRow(
                group=group.name if group is not None else "",
                resource=res.name if res is not None else p.resource_id,
                project=p.name,
                start=p.start.isoformat(),
                end=p.end.isoformat(),
                color=p.color or "",
                notes=p.notes or "",
            )
        )
    return rows


def to_csv(state: AppState) -> str:
    buf = io.StringIO()
    w = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    w.writerow(CSV_HEADER)
    for row in export_rows(state):
        w.writerow(row.as_tuple())
    return buf.getvalue()


def to_json(state: AppState, *, pretty: bool = True) -> str:
    return dumps([dict(zip((h.lower() for h in CSV_HEADER), r.as_tuple())) for r in export_rows(state)], pretty=pretty)


def export_all(state: AppState, *, exported_at: str | None = None) -> Dict[str, Any]:
    """Full backup document: the state payload plus an export timestamp."""
    return {
        "exportDate": exported_at or utc_iso_z_now(),
        "data": state_to_payload(state),
    }


__all__ = ["CSV_HEADER", "ExportRow", "export_all", "export_rows", "to_csv", "to_json"]
