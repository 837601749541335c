"""Payload and state validation helpers (library-facing)."""

from __future__ import annotations

import re
from typing import Any, Dict, List, Set

from .interval import is_inverted
from .model import VIEW_DAYS, AppState
from .schema import LATEST_SCHEMA_VERSION as _LATEST_SCHEMA_VERSION
from .schema import SCHEMA_NAME


class PayloadValidationError(ValueError):
    """Raised when a payload fails validation."""


LATEST_SCHEMA_VERSION = _LATEST_SCHEMA_VERSION

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_COLOR_RE = re.compile(r"^#[0-9a-fA-F]{6}$")


def _require(cond: bool, msg: str, errs: List[str]) -> None:
    if not cond:
        errs.append(msg)


def _is_date_str(v: Any) -> bool:
    return isinstance(v, str) and bool(_DATE_RE.match(v))


def _nonempty_str(v: Any) -> bool:
    return isinstance(v, str) and bool(v.strip())


def validate_schema_v2(payload: Dict[str, Any], *, label: str = "payload") -> List[str]:
    errs: List[str] = []

    _require(payload.get("schema_version") == 2, f"{label}: schema_version must be 2", errs)

    meta = payload.get("meta")
    _require(isinstance(meta, dict), f"{label}: meta must be dict", errs)
    if isinstance(meta, dict):
        schema = meta.get("schema")
        _require(
            isinstance(schema, dict) and schema.get("name") == SCHEMA_NAME,
            f"{label}: meta.schema.name must be {SCHEMA_NAME!r}",
            errs,
        )

    groups = payload.get("resource_groups")
    projects = payload.get("projects")
    day_offs = payload.get("day_offs")
    pgroups = payload.get("project_groups")
    settings = payload.get("settings")

    _require(isinstance(groups, list), f"{label}: resource_groups must be list", errs)
    _require(isinstance(projects, list), f"{label}: projects must be list", errs)
    _require(isinstance(day_offs, list), f"{label}: day_offs must be list", errs)
    _require(isinstance(pgroups, list), f"{label}: project_groups must be list", errs)
    _require(isinstance(settings, dict), f"{label}: settings must be dict", errs)

    if isinstance(groups, list):
        for i, g in enumerate(groups):
            if not isinstance(g, dict):
                errs.append(f"{label}: resource_groups[{i}] must be dict")
                continue
            _require(_nonempty_str(g.get("id")), f"{label}: resource_groups[{i}].id must be non-empty string", errs)
            _require(isinstance(g.get("resources"), list), f"{label}: resource_groups[{i}].resources must be list", errs)
            for j, r in enumerate(g.get("resources") or []):
                ok = isinstance(r, dict) and _nonempty_str(r.get("id"))
                _require(ok, f"{label}: resource_groups[{i}].resources[{j}].id must be non-empty string", errs)

    if isinstance(projects, list):
        for i, p in enumerate(projects):
            if not isinstance(p, dict):
                errs.append(f"{label}: projects[{i}] must be dict")
                continue
            _require(_nonempty_str(p.get("id")), f"{label}: projects[{i}].id must be non-empty string", errs)
            _require(_is_date_str(p.get("start")), f"{label}: projects[{i}].start must be YYYY-MM-DD", errs)
            _require(_is_date_str(p.get("end")), f"{label}: projects[{i}].end must be YYYY-MM-DD", errs)
            color = p.get("color")
            if color is not None:
                _require(
                    isinstance(color, str) and bool(_COLOR_RE.match(color)),
                    f"{label}: projects[{i}].color must be #rrggbb",
                    errs,
                )

    if isinstance(day_offs, list):
        for i, d in enumerate(day_offs):
            ok = isinstance(d, dict) and _is_date_str(d.get("date"))
            _require(ok, f"{label}: day_offs[{i}].date must be YYYY-MM-DD", errs)

    if isinstance(pgroups, list):
        for i, g in enumerate(pgroups):
            if not isinstance(g, dict):
                errs.append(f"{label}: project_groups[{i}] must be dict")
                continue
            _require(_nonempty_str(g.get("id")), f"{label}: project_groups[{i}].id must be non-empty string", errs)
            _require(isinstance(g.get("projectIds"), list), f"{label}: project_groups[{i}].projectIds must be list", errs)

    if isinstance(settings, dict):
        _require(
            settings.get("viewMode") in VIEW_DAYS,
            f"{label}: settings.viewMode must be one of {sorted(VIEW_DAYS)}",
            errs,
        )
        anchor = settings.get("anchorDate")
        _require(anchor is None or _is_date_str(anchor), f"{label}: settings.anchorDate must be YYYY-MM-DD or null", errs)

    return errs


def validate_payload(payload: Dict[str, Any], *, label: str = "payload") -> List[str]:
    if not isinstance(payload, dict):
        return [f"{label}: payload must be a dict/object"]
    sv = payload.get("schema_version")
    if sv == 2:
        return validate_schema_v2(payload, label=label)
    if isinstance(sv, int):
        return [f"Unsupported schema_version: {sv} (latest={LATEST_SCHEMA_VERSION})"]
    return [f"{label}: schema_version must be an int (legacy payloads need upgrade_payload first)"]


def assert_valid_payload(payload: Dict[str, Any]) -> None:
    if not isinstance(payload, dict):
        raise PayloadValidationError("payload must be a JSON object")
    errs = validate_payload(payload, label="payload")
    if errs:
        raise PayloadValidationError(errs[0])


def validate_state(state: AppState) -> List[str]:
    """Referential and structural problems in an in-memory state.

    Nothing here is fatal to the engine: unknown references simply render
    nowhere, so these are reported rather than raised.
    """
    errs: List[str] = []

    resource_ids: Set[str] = set()
    group_ids: Set[str] = set()
    for g in state.resource_groups:
        if g.id in group_ids:
            errs.append(f"duplicate resource group id: {g.id}")
        group_ids.add(g.id)
        for r in g.resources:
            if r.id in resource_ids:
                errs.append(f"duplicate resource id: {r.id}")
            resource_ids.add(r.id)

    project_ids: Set[str] = set()
    for p in state.projects:
        if p.id in project_ids:
            errs.append(f"duplicate project id: {p.id}")
        project_ids.add(p.id)
        if p.resource_id not in resource_ids:
            errs.append(f"project {p.id}: unknown resource {p.resource_id!r}")
        if is_inverted(p):
            errs.append(f"project {p.id}: start {p.start.isoformat()} is after end {p.end.isoformat()}")

    seen: Dict[str, str] = {}
    for g in state.project_groups:
        if len(g.project_ids) < 2:
            errs.append(f"project group {g.id}: fewer than two members")
        for pid in g.project_ids:
            if pid not in project_ids:
                errs.append(f"project group {g.id}: unknown project {pid!r}")
            if pid in seen and seen[pid] != g.id:
                errs.append(f"project {pid}: member of both {seen[pid]} and {g.id}")
            seen.setdefault(pid, g.id)

    if state.settings.view_mode not in VIEW_DAYS:
        errs.append(f"settings: unknown view mode {state.settings.view_mode!r}")

    return errs


__all__ = [
    "LATEST_SCHEMA_VERSION",
    "PayloadValidationError",
    "assert_valid_payload",
    "validate_payload",
    "validate_schema_v2",
    "validate_state",
]
