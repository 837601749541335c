from __future__ import annotations

import argparse
import asyncio
import dataclasses
import datetime as dt
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from .export import export_all, to_csv, to_json
from .layout import UnknownViewModeError, build_grid, compute_view
from .maintenance import clear_all, clear_old_projects, clear_project_groups, storage_stats
from .model import VIEW_DAYS, AppState
from .persist import JsonFileStore
from .render.inline import render_timeline_html
from .schedules import ScheduleManager
from .schema import state_from_payload, state_to_payload, upgrade_payload
from .util.console import eprint, status
from .util.dates import parse_date_yyyy_mm_dd
from .util.jsonio import dumps, read_json, write_json
from .validate import validate_payload, validate_state

ENV_VIEW = "PLANBOARD_VIEW"
ENV_STATE = "PLANBOARD_STATE"
ENV_STORE = "PLANBOARD_STORE"


def _parse_date(s: Optional[str], flag: str) -> Optional[dt.date]:
    if not s:
        return None
    try:
        return parse_date_yyyy_mm_dd(s)
    except ValueError:
        raise SystemExit(f"Invalid {flag} value (expected YYYY-MM-DD): {s!r}")


def _load_payload(path: str) -> dict:
    if not path:
        raise SystemExit(f"No state file given (pass --state or set {ENV_STATE})")
    try:
        payload = read_json(path)
    except FileNotFoundError:
        raise SystemExit(f"State file not found: {path}")
    except ValueError as e:
        raise SystemExit(f"State file is not valid JSON: {path}: {e}")
    if not isinstance(payload, dict):
        raise SystemExit(f"State file must hold a JSON object: {path}")
    return payload


def _load_state(path: str) -> AppState:
    try:
        return state_from_payload(_load_payload(path))
    except ValueError as e:
        raise SystemExit(f"Cannot read state: {e}")


def _write_text(out: Optional[str], text: str) -> None:
    if not out or out == "-":
        sys.stdout.write(text)
        if not text.endswith("\n"):
            sys.stdout.write("\n")
        return
    p = Path(out)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(text, encoding="utf-8")
    print(str(p.resolve()))


def cmd_render(args: argparse.Namespace) -> int:
    state = _load_state(args.state)
    today = _parse_date(args.today, "--today") or dt.date.today()
    view = args.view or state.settings.view_mode
    anchor = _parse_date(args.start, "--start") or state.settings.anchor_date
    try:
        window = compute_view(view, anchor, today=today)
    except UnknownViewModeError as e:
        raise SystemExit(str(e))
    grid = build_grid(state, window, today=today)
    _write_text(args.out, render_timeline_html(grid, state))
    return 0


def cmd_export(args: argparse.Namespace) -> int:
    state = _load_state(args.state)
    if args.format == "csv":
        text = to_csv(state)
    elif args.format == "json":
        text = to_json(state)
    else:
        text = dumps(export_all(state), pretty=True)
    _write_text(args.out, text)
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    payload = _load_payload(args.state)
    try:
        upgraded = upgrade_payload(payload)
    except ValueError as e:
        status("error", str(e))
        return 2
    errs = validate_payload(upgraded)
    warns: List[str] = []
    if not errs:
        warns = validate_state(state_from_payload(upgraded))
    for e in errs:
        status("error", e)
    for w in warns:
        status("warn", w)
    if errs or (warns and args.strict):
        return 1
    status("ok", f"{args.state} is valid")
    return 0


def cmd_stats(args: argparse.Namespace) -> int:
    state = _load_state(args.state)
    today = _parse_date(args.today, "--today")
    st = storage_stats(state, today=today, months=args.months)
    if args.json:
        print(dumps(dataclasses.asdict(st), pretty=True))
        return 0
    print(f"Resource groups: {st.groups}")
    print(f"Resources:       {st.resources}")
    print(f"Projects:        {st.projects}")
    print(f"Project groups:  {st.project_groups}")
    print(f"Days off:        {st.day_offs}")
    print(f"Storage size:    {st.storage_size_kb} KB")
    print(f"Old projects:    {st.old_projects} (ended more than {args.months} months ago)")
    return 0


def cmd_upgrade(args: argparse.Namespace) -> int:
    payload = _load_payload(args.state)
    try:
        upgraded = upgrade_payload(payload)
    except ValueError as e:
        raise SystemExit(str(e))
    out = args.out or args.state
    if out == "-":
        print(dumps(upgraded, pretty=True))
    else:
        write_json(out, upgraded)
        status("ok", f"wrote schema v{upgraded['schema_version']} payload to {out}")
    return 0


def cmd_clean(args: argparse.Namespace) -> int:
    state = _load_state(args.state)
    today = _parse_date(args.today, "--today")
    if args.what == "old":
        new_state = clear_old_projects(state, today=today, months=args.months)
    elif args.what == "groups":
        new_state = clear_project_groups(state)
    else:
        new_state = clear_all(state)

    removed_projects = len(state.projects) - len(new_state.projects)
    removed_groups = len(state.project_groups) - len(new_state.project_groups)
    if new_state == state:
        status("ok", "nothing to clear")
        return 0
    if not args.yes:
        eprint(f"Would remove {removed_projects} project(s) and {removed_groups} project group(s). Re-run with --yes.")
        return 1
    write_json(args.state, state_to_payload(new_state))
    status("ok", f"removed {removed_projects} project(s) and {removed_groups} project group(s)")
    return 0


async def _run_schedule(args: argparse.Namespace) -> int:
    mgr = ScheduleManager(JsonFileStore(args.store))
    await mgr.load()
    action = args.action

    if action == "list":
        for s in mgr.schedules:
            mark = "*" if s.id == mgr.current_id else " "
            extra = f"  ({s.description})" if s.description else ""
            print(f"{mark} {s.id}  {s.name}{extra}")
        return 0

    if action in ("edit", "use", "delete", "export") and mgr.get(args.id) is None:
        status("error", f"unknown schedule: {args.id}")
        return 1

    try:
        if action == "create":
            s = await mgr.create(args.name, args.description)
        elif action == "duplicate":
            s = await mgr.duplicate(
                args.name,
                args.description,
                source_id=args.source,
                copy_groups=not args.no_groups,
                copy_projects=not args.no_projects,
            )
        elif action == "edit":
            s = await mgr.edit(args.id, name=args.name, description=args.description)
        elif action == "use":
            await mgr.switch(args.id)
            s = mgr.get(args.id)
        elif action == "delete":
            s = mgr.get(args.id)
            await mgr.delete(args.id)
        else:
            state = await mgr.load_state(args.id)
            _write_text(args.out, dumps(state_to_payload(state), pretty=True))
            return 0
    except ValueError as e:
        status("error", str(e))
        return 1
    status("ok", f"{action}: {s.name!r} ({s.id})")
    return 0


def cmd_schedule(args: argparse.Namespace) -> int:
    if not args.store:
        raise SystemExit(f"No schedule store given (pass --store or set {ENV_STORE})")
    return asyncio.run(_run_schedule(args))


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="planboard", description="Resource timeline planning board tools.")
    ap.add_argument("-v", "--verbose", action="count", default=0, help="Log more (repeat for debug).")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--state",
        default=os.getenv(ENV_STATE, ""),
        help=f"State JSON file (default: env {ENV_STATE})",
    )

    sub = ap.add_subparsers(dest="command", required=True)

    r = sub.add_parser("render", parents=[common], help="Write a static HTML snapshot of the timeline")
    r.add_argument(
        "--view",
        default=os.getenv(ENV_VIEW) or None,
        choices=sorted(VIEW_DAYS),
        help=f"View mode (default: env {ENV_VIEW} or the saved setting)",
    )
    r.add_argument("--start", default=None, help="First visible date YYYY-MM-DD (default: saved anchor or today-7)")
    r.add_argument("--today", default=None, help="Override today's date (YYYY-MM-DD)")
    r.add_argument("--out", default="-", help="Output path or - for stdout")
    r.set_defaults(func=cmd_render)

    e = sub.add_parser("export", parents=[common], help="Export projects as CSV/JSON or a full backup")
    e.add_argument("--format", choices=("csv", "json", "backup"), default="csv")
    e.add_argument("--out", default="-", help="Output path or - for stdout")
    e.set_defaults(func=cmd_export)

    v = sub.add_parser("validate", parents=[common], help="Validate a state file")
    v.add_argument("--strict", action="store_true", help="Treat state warnings as errors")
    v.set_defaults(func=cmd_validate)

    s = sub.add_parser("stats", parents=[common], help="Show storage statistics")
    s.add_argument("--today", default=None, help="Override today's date (YYYY-MM-DD)")
    s.add_argument("--months", type=int, default=6, help="Age threshold for old projects (default: 6)")
    s.add_argument("--json", action="store_true", help="Print JSON")
    s.set_defaults(func=cmd_stats)

    u = sub.add_parser("upgrade", parents=[common], help="Upgrade a state file to the latest schema")
    u.add_argument("--out", default=None, help="Output path (default: overwrite --state; - for stdout)")
    u.set_defaults(func=cmd_upgrade)

    c = sub.add_parser("clean", parents=[common], help="Remove old projects, project groups or everything")
    c.add_argument("what", choices=("old", "groups", "all"))
    c.add_argument("--today", default=None, help="Override today's date (YYYY-MM-DD)")
    c.add_argument("--months", type=int, default=6, help="Age threshold for 'old' (default: 6)")
    c.add_argument("--yes", action="store_true", help="Actually write the cleaned state")
    c.set_defaults(func=cmd_clean)

    sc = sub.add_parser("schedule", help="Manage named schedules in a store directory")
    sc.add_argument(
        "--store",
        default=os.getenv(ENV_STORE, ""),
        help=f"Directory holding the schedule documents (default: env {ENV_STORE})",
    )
    sc.set_defaults(func=cmd_schedule)
    acts = sc.add_subparsers(dest="action", required=True)
    acts.add_parser("list", help="List schedules; * marks the current one")
    a = acts.add_parser("create", help="Create an empty schedule and switch to it")
    a.add_argument("name")
    a.add_argument("--description", default="")
    a = acts.add_parser("duplicate", help="Copy a schedule (default: the current one)")
    a.add_argument("name")
    a.add_argument("--description", default="")
    a.add_argument("--from", dest="source", default=None, help="Schedule id to copy")
    a.add_argument("--no-groups", action="store_true", help="Do not copy resource groups")
    a.add_argument("--no-projects", action="store_true", help="Do not copy projects or project groups")
    a = acts.add_parser("edit", help="Rename or re-describe a schedule")
    a.add_argument("id")
    a.add_argument("--name", default=None)
    a.add_argument("--description", default=None)
    for name, text in (("use", "Switch to a schedule"), ("delete", "Delete a schedule (not the default)")):
        acts.add_parser(name, help=text).add_argument("id")
    a = acts.add_parser("export", help="Write a schedule's board as a state JSON file")
    a.add_argument("id")
    a.add_argument("--out", default="-", help="Output path or - for stdout")

    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="[planboard] %(levelname)s %(name)s: %(message)s")
    return int(args.func(args) or 0)


if __name__ == "__main__":
    raise SystemExit(main())
