from __future__ import annotations

import argparse
import datetime as dt
import re
import sys
from pathlib import Path
from typing import List, Tuple

sys.dont_write_bytecode = True

TAG = "[planboard-doctor]"


def _find_repo_root(start: Path) -> Path | None:
    cur = start.resolve()
    for _ in range(12):
        if (cur / "planboard" / "__init__.py").exists():
            return cur
        if cur.parent == cur:
            break
        cur = cur.parent
    return None


def _scan_tree(root: Path, *, verbose_artifacts: bool = False) -> Tuple[List[str], List[str]]:
    """Release-breaking leftovers: patch rejects, copy artifacts, bytecode."""
    warnings: List[str] = []
    errors: List[str] = []

    bad_name = re.compile(r"^Copy \(\d+\) ")
    skip_dirs = {".git", "build", "dist", ".venv", ".mypy_cache", ".pytest_cache", ".ruff_cache"}
    pycache_count = 0
    pyc_count = 0

    for p in root.rglob("*"):
        if any(part in skip_dirs for part in p.parts):
            continue
        if p.is_dir():
            if p.name == "__pycache__":
                pycache_count += 1
                if verbose_artifacts:
                    warnings.append(f"Found __pycache__ directory: {p.relative_to(root)}")
            continue

        name = p.name
        rel = str(p.relative_to(root))
        if bad_name.search(name):
            errors.append(f"Stray copy artifact: {rel}")
        if name.endswith((".rej", ".orig")):
            errors.append(f"Patch artifact present: {rel}")
        if name.endswith(".pyc"):
            pyc_count += 1

    if not verbose_artifacts and pycache_count:
        warnings.append(f"Found {pycache_count} __pycache__ directories (run clean to remove).")
    if pyc_count:
        warnings.append(f"Found {pyc_count} .pyc files (run clean to remove).")
    return warnings, errors


def _check_fixtures(root: Path) -> Tuple[List[str], List[str]]:
    """Every JSON fixture under tests/fixtures must upgrade to a valid latest-schema payload.

    Referential warnings are skipped; fixtures may hold orphans on purpose.
    """
    warnings: List[str] = []
    errors: List[str] = []
    fixtures = root / "tests" / "fixtures"
    if not fixtures.is_dir():
        return warnings, errors

    from planboard.schema import upgrade_payload
    from planboard.util.jsonio import read_json
    from planboard.validate import validate_payload

    for p in sorted(fixtures.glob("*.json")):
        rel = p.relative_to(root)
        try:
            payload = upgrade_payload(read_json(p))
        except (ValueError, TypeError, AttributeError) as e:
            errors.append(f"Fixture does not load: {rel}: {e}")
            continue
        errors += validate_payload(payload, label=str(rel))
    return warnings, errors


def _smoke_render() -> Tuple[List[str], List[str]]:
    """Build a tiny board, run a few commands through the reducer and render it."""
    warnings: List[str] = []
    errors: List[str] = []

    try:
        from planboard.commands import CreateProject, GroupProjects, apply_command
        from planboard.ids import SequentialIds
        from planboard.layout import build_grid
        from planboard.persist import default_state
        from planboard.render.inline import render_timeline_html
        from planboard.validate import validate_state
    except ImportError as e:
        errors.append(f"Import failed: {e}")
        return warnings, errors

    ids = SequentialIds()
    today = dt.date(2024, 1, 8)
    state = default_state(ids)
    rid = state.resource_groups[0].resources[0].id
    created: List[str] = []
    for start in (dt.date(2024, 1, 1), dt.date(2024, 1, 2)):
        res = apply_command(state, CreateProject(rid, start, start + dt.timedelta(days=2)), ids=ids)
        state = res.state
        created.extend(res.created)
    state = apply_command(state, GroupProjects(tuple(created)), ids=ids).state

    problems = validate_state(state)
    errors += [f"smoke state: {p}" for p in problems]

    grid = build_grid(state, today=today)
    if len(grid.bars) != 2:
        errors.append(f"smoke grid: expected 2 bars, got {len(grid.bars)}")
    if sorted(b.lane for b in grid.bars) != [0, 1]:
        errors.append("smoke grid: overlapping projects were not stacked into separate lanes")

    html = render_timeline_html(grid, state)
    if "__DATA_JSON__" in html or "__BODY_MARKUP__" in html:
        errors.append("rendered HTML still contains a template placeholder")
    if '"schema_version"' not in html:
        warnings.append("rendered HTML does not obviously embed the state payload (verify manually)")
    return warnings, errors


def main(argv: List[str] | None = None) -> int:
    ap = argparse.ArgumentParser(prog="planboard.tools.doctor", description="Repository hygiene & smoke checks for planboard.")
    ap.add_argument("--root", default="", help="Repo root (defaults to auto-detect from CWD).")
    ap.add_argument("--strict", action="store_true", help="Treat warnings as errors (exit code 2).")
    ap.add_argument("--verbose-artifacts", action="store_true", help="List every __pycache__ directory.")
    args = ap.parse_args(argv)

    root = Path(args.root).expanduser() if args.root else _find_repo_root(Path.cwd())
    if not root:
        print("ERROR: Could not locate repo root (expected planboard/__init__.py). Run with --root /path/to/repo", file=sys.stderr)
        return 2

    print(f"{TAG} repo_root: {root}")
    print(f"{TAG} python: {sys.executable}")

    warnings, errors = _scan_tree(root, verbose_artifacts=bool(args.verbose_artifacts))
    for check in (_check_fixtures(root), _smoke_render()):
        warnings += check[0]
        errors += check[1]

    if errors:
        print(f"\n{TAG} ERRORS:")
        for e in errors:
            print(f"  - {e}")
    if warnings:
        print(f"\n{TAG} WARNINGS:")
        for w in warnings:
            print(f"  - {w}")

    if errors:
        print(f"\n{TAG} RESULT: FAIL")
        return 2
    if warnings and args.strict:
        print(f"\n{TAG} RESULT: WARN (strict => FAIL)")
        return 2
    if warnings:
        print(f"\n{TAG} RESULT: WARN")
        return 1
    print(f"\n{TAG} RESULT: OK")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
