# planboard/schema.py
"""State payload schema.

The payload is the JSON document exchanged with the document store and the
CLI. Two versions exist:

  v1 (legacy, no `schema_version`): resource groups and resources are keyed by
      display name; `projects[].resourceId` holds the resource *name* and
      `groupId` the group *name*; view mode `2week`; anchor in
      `settings.timelineStart`; project groups under `projectGroups`.
  v2: surrogate ids for resources and resource groups
      (`resource_groups[].id`, `resources[].id`), projects reference them by
      id, `settings = {viewMode, anchorDate}`, `meta.schema` stamped.

`upgrade_payload` is additive, idempotent and never mutates its input.
"""

from __future__ import annotations

import copy
import re
from typing import Any, Dict, List, Optional, Tuple

from .grouping import ProjectGroupStore
from .model import (
    DEFAULT_PROJECT_COLOR,
    DEFAULT_PROJECT_NAME,
    VIEW_DAYS,
    VIEW_WEEK,
    AppState,
    DayOff,
    Project,
    ProjectGroup,
    Resource,
    ResourceGroup,
    Settings,
    day_off_color,
)
from .util.dates import coerce_date, format_date, utc_iso_z_now

SCHEMA_NAME = "planboard.state"
LATEST_SCHEMA_VERSION = 2

_LEGACY_VIEW_MODES = {"2week": "twoWeek", "two_week": "twoWeek", "2weeks": "twoWeek"}

_SLUG_RE = re.compile(r"[^a-z0-9]+")


def _slug(s: str) -> str:
    out = _SLUG_RE.sub("-", s.lower()).strip("-")
    return out or "x"


def normalize_view_mode(v: Any) -> str:
    s = str(v or "").strip()
    s = _LEGACY_VIEW_MODES.get(s, s)
    return s if s in VIEW_DAYS else VIEW_WEEK


def detect_schema_version(payload: Dict[str, Any]) -> int:
    sv = payload.get("schema_version")
    if isinstance(sv, int):
        return sv
    return 1


# --- v1 -> v2 -----------------------------------------------------------------

def _upgrade_groups_v1(groups_in: Any) -> Tuple[List[Dict[str, Any]], Dict[Tuple[str, str], str], Dict[str, str], Dict[str, str]]:
    """Assign deterministic surrogate ids to name-keyed groups/resources.

    Returns (groups, (group_name, resource_name) -> resource_id,
    resource_name -> first resource_id, group_name -> group_id).
    """
    groups: List[Dict[str, Any]] = []
    by_pair: Dict[Tuple[str, str], str] = {}
    by_name: Dict[str, str] = {}
    group_ids: Dict[str, str] = {}

    for gi, g in enumerate(groups_in if isinstance(groups_in, list) else []):
        if not isinstance(g, dict):
            continue
        gname = str(g.get("name") or "").strip() or f"Group {gi + 1}"
        gid = str(g.get("id") or "").strip() or f"rg_{gi + 1}_{_slug(gname)}"
        group_ids.setdefault(gname, gid)

        resources: List[Dict[str, str]] = []
        res_in = g.get("resources")
        for ri, r in enumerate(res_in if isinstance(res_in, list) else []):
            if isinstance(r, str):
                r = {"name": r}
            if not isinstance(r, dict):
                continue
            rname = str(r.get("name") or "").strip() or f"Resource {ri + 1}"
            rid = str(r.get("id") or "").strip() or f"r_{gi + 1}_{ri + 1}_{_slug(rname)}"
            resources.append({"id": rid, "name": rname})
            by_pair.setdefault((gname, rname), rid)
            by_name.setdefault(rname, rid)

        groups.append({"id": gid, "name": gname, "resources": resources})

    return groups, by_pair, by_name, group_ids


def apply_schema_v2(payload: Dict[str, Any]) -> Dict[str, Any]:
    if not isinstance(payload, dict):
        raise TypeError(f"payload must be dict; got {type(payload).__name__}")

    meta_in = payload.get("meta")
    if (
        payload.get("schema_version") == 2
        and isinstance(meta_in, dict)
        and isinstance(meta_in.get("schema"), dict)
        and meta_in["schema"].get("name") == SCHEMA_NAME
        and meta_in["schema"].get("version") == 2
    ):
        return payload

    src = copy.deepcopy(payload)
    out: Dict[str, Any] = {}

    if detect_schema_version(src) >= 2:
        groups = src.get("resource_groups") if isinstance(src.get("resource_groups"), list) else []
        projects_in = src.get("projects") if isinstance(src.get("projects"), list) else []
        settings_in = src.get("settings") if isinstance(src.get("settings"), dict) else {}
        out["resource_groups"] = groups
        out["projects"] = projects_in
        out["day_offs"] = src.get("day_offs") if isinstance(src.get("day_offs"), list) else []
        out["project_groups"] = src.get("project_groups") if isinstance(src.get("project_groups"), list) else []
        out["settings"] = {
            "viewMode": normalize_view_mode(settings_in.get("viewMode")),
            "anchorDate": settings_in.get("anchorDate"),
        }
    else:
        groups, by_pair, by_name, group_ids = _upgrade_groups_v1(src.get("groups"))
        projects: List[Dict[str, Any]] = []
        data = src.get("data") if isinstance(src.get("data"), dict) else src
        for p in data.get("projects") or []:
            if not isinstance(p, dict):
                continue
            q = dict(p)
            rname = str(p.get("resourceId") or "")
            gname = str(p.get("groupId") or "")
            # Unresolvable names are kept as-is; validate_state reports them.
            q["resourceId"] = by_pair.get((gname, rname)) or by_name.get(rname) or rname
            q["groupId"] = group_ids.get(gname, gname)
            projects.append(q)
        settings_in = data.get("settings") if isinstance(data.get("settings"), dict) else {}
        out["resource_groups"] = groups
        out["projects"] = projects
        out["day_offs"] = data.get("dayOffs") if isinstance(data.get("dayOffs"), list) else []
        pg = src.get("projectGroups", data.get("projectGroups"))
        out["project_groups"] = pg if isinstance(pg, list) else []
        out["settings"] = {
            "viewMode": normalize_view_mode(settings_in.get("viewMode")),
            "anchorDate": settings_in.get("anchorDate", settings_in.get("timelineStart")),
        }

    meta = dict(meta_in) if isinstance(meta_in, dict) else {}
    meta["schema"] = {"name": SCHEMA_NAME, "version": 2}
    meta.setdefault("generated_at", utc_iso_z_now())

    out["schema_version"] = 2
    out["meta"] = meta
    return out


def upgrade_payload(payload: Dict[str, Any], *, target_version: int = LATEST_SCHEMA_VERSION) -> Dict[str, Any]:
    if not isinstance(payload, dict):
        raise TypeError(f"payload must be dict; got {type(payload).__name__}")
    # Backup documents (export_all) wrap a versioned payload under `data`.
    inner = payload.get("data")
    if "schema_version" not in payload and isinstance(inner, dict) and isinstance(inner.get("schema_version"), int):
        payload = inner
    cur = detect_schema_version(payload)
    if cur > LATEST_SCHEMA_VERSION or target_version > LATEST_SCHEMA_VERSION:
        raise ValueError(f"Unsupported schema_version: {max(cur, target_version)} (latest={LATEST_SCHEMA_VERSION})")
    if target_version < 2:
        return payload
    return apply_schema_v2(payload)


# --- payload <-> AppState -----------------------------------------------------

def _s(v: Any, default: str = "") -> str:
    if v is None:
        return default
    return v if isinstance(v, str) else str(v)


def _project_from_dict(p: Dict[str, Any]) -> Optional[Project]:
    pid = _s(p.get("id")).strip()
    start = coerce_date(p.get("start"))
    end = coerce_date(p.get("end"))
    if not pid or start is None:
        return None
    return Project(
        id=pid,
        name=_s(p.get("name"), DEFAULT_PROJECT_NAME),
        resource_id=_s(p.get("resourceId")),
        group_id=_s(p.get("groupId")),
        start=start,
        end=end if end is not None else start,
        color=_s(p.get("color")) or DEFAULT_PROJECT_COLOR,
        notes=_s(p.get("notes")),
        pinned=bool(p.get("pinned", False)),
    )


def _day_off_from_dict(d: Dict[str, Any]) -> Optional[DayOff]:
    day = coerce_date(d.get("date"))
    did = _s(d.get("id")).strip()
    if day is None or not did:
        return None
    kind = _s(d.get("type"), "other") or "other"
    return DayOff(id=did, date=day, type=kind, color=_s(d.get("color")) or day_off_color(kind), notes=_s(d.get("notes")))


def state_from_payload(payload: Dict[str, Any]) -> AppState:
    """Build an AppState from a payload of any supported version.

    Entries that cannot be interpreted (missing id, unparseable dates) are
    skipped rather than raising.
    """
    doc = upgrade_payload(payload)

    groups: List[ResourceGroup] = []
    for g in doc.get("resource_groups") or []:
        if not isinstance(g, dict):
            continue
        resources = tuple(
            Resource(id=_s(r.get("id")), name=_s(r.get("name")))
            for r in (g.get("resources") or [])
            if isinstance(r, dict) and _s(r.get("id"))
        )
        groups.append(ResourceGroup(id=_s(g.get("id")), name=_s(g.get("name")), resources=resources))

    projects = [p for p in (_project_from_dict(x) for x in doc.get("projects") or [] if isinstance(x, dict)) if p]
    day_offs = [d for d in (_day_off_from_dict(x) for x in doc.get("day_offs") or [] if isinstance(x, dict)) if d]

    project_groups: List[ProjectGroup] = []
    for g in doc.get("project_groups") or []:
        if not isinstance(g, dict) or not _s(g.get("id")):
            continue
        ids = g.get("projectIds") or []
        project_groups.append(
            ProjectGroup(
                id=_s(g.get("id")),
                name=_s(g.get("name"), "New Group"),
                project_ids=tuple(_s(x) for x in ids if _s(x)),
                created_at=_s(g.get("createdAt")),
            )
        )

    # Stored groups may predate deletions; restore the membership invariants.
    store = ProjectGroupStore(project_groups)
    store.prune_missing(p.id for p in projects)

    settings_in = doc.get("settings") or {}
    settings = Settings(
        view_mode=normalize_view_mode(settings_in.get("viewMode")),
        anchor_date=coerce_date(settings_in.get("anchorDate")),
    )

    return AppState(
        resource_groups=tuple(groups),
        projects=tuple(projects),
        day_offs=tuple(day_offs),
        project_groups=store.groups,
        settings=settings,
    )


def project_to_dict(p: Project) -> Dict[str, Any]:
    return {
        "id": p.id,
        "name": p.name,
        "resourceId": p.resource_id,
        "groupId": p.group_id,
        "start": p.start.isoformat(),
        "end": p.end.isoformat(),
        "color": p.color,
        "notes": p.notes,
        "pinned": p.pinned,
    }


def state_to_payload(state: AppState, *, generated_at: str | None = None) -> Dict[str, Any]:
    return {
        "schema_version": LATEST_SCHEMA_VERSION,
        "meta": {
            "schema": {"name": SCHEMA_NAME, "version": LATEST_SCHEMA_VERSION},
            "generated_at": generated_at or utc_iso_z_now(),
        },
        "resource_groups": [
            {"id": g.id, "name": g.name, "resources": [{"id": r.id, "name": r.name} for r in g.resources]}
            for g in state.resource_groups
        ],
        "projects": [project_to_dict(p) for p in state.projects],
        "day_offs": [
            {"id": d.id, "date": d.date.isoformat(), "type": d.type, "color": d.color, "notes": d.notes}
            for d in state.day_offs
        ],
        "project_groups": [
            {"id": g.id, "name": g.name, "projectIds": list(g.project_ids), "createdAt": g.created_at}
            for g in state.project_groups
        ],
        "settings": {
            "viewMode": state.settings.view_mode,
            "anchorDate": format_date(state.settings.anchor_date),
        },
    }


__all__ = [
    "LATEST_SCHEMA_VERSION",
    "SCHEMA_NAME",
    "apply_schema_v2",
    "detect_schema_version",
    "normalize_view_mode",
    "project_to_dict",
    "state_from_payload",
    "state_to_payload",
    "upgrade_payload",
]
