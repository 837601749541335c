"""One-command CI gate for the planboard repo.

Steps run in order and stop at the first failure:

  doctor      repo hygiene scan + smoke render (warnings pass unless --strict)
  compileall  byte-compile the package
  ruff        lint, only when ruff is on PATH
  smoke-cli   validate the legacy fixture and render it through the CLI
  tests       unittest discovery under tests/

Run with `python -m planboard.tools.ci`.
"""

from __future__ import annotations

import argparse
import os
import shutil
import subprocess
import sys
import tempfile
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, FrozenSet, List, Optional

TAG = "[planboard-ci]"
LEGACY_FIXTURE = Path("tests") / "fixtures" / "legacy_v1_state.json"


@dataclass(frozen=True)
class Step:
    name: str
    cmd: List[str]
    tolerated: FrozenSet[int] = field(default_factory=frozenset)


def _repo_root() -> Path:
    return Path(__file__).resolve().parents[2]


def _elapsed(started: float) -> str:
    secs = time.time() - started
    if secs < 1:
        return f"{int(secs * 1000)}ms"
    if secs < 60:
        return f"{secs:.2f}s"
    return f"{int(secs // 60)}m{secs % 60:04.1f}s"


def _clean_env(repo: Path) -> Dict[str, str]:
    env = {k: v for k, v in os.environ.items() if not k.startswith("PLANBOARD_")}
    env["PYTHONPATH"] = str(repo)
    env["TZ"] = "UTC"
    return env


def _plan(ns: argparse.Namespace, repo: Path, scratch: Path) -> List[Step]:
    py = sys.executable
    steps: List[Step] = []
    if not ns.skip_doctor:
        doctor = [py, "-m", "planboard.tools.doctor", "--root", str(repo)]
        steps.append(Step("doctor", doctor + (["--strict"] if ns.strict else []), frozenset() if ns.strict else frozenset({1})))
    if not ns.skip_compileall:
        steps.append(Step("compileall", [py, "-m", "compileall", "-q", "planboard"]))
    if not ns.skip_lint:
        if shutil.which("ruff"):
            steps.append(Step("ruff", ["ruff", "check", "planboard", "tests"]))
        else:
            print(f"{TAG} WARN: ruff not found; skipping lint")
    if not ns.skip_smoke and (repo / LEGACY_FIXTURE).is_file():
        # Warnings from the orphaned fixture project are expected.
        steps.append(Step("smoke-cli validate", [py, "-m", "planboard", "validate", "--state", str(LEGACY_FIXTURE)]))
        upgraded = str(scratch / "state.json")
        steps.append(Step("smoke-cli upgrade", [py, "-m", "planboard", "upgrade", "--state", str(LEGACY_FIXTURE), "--out", upgraded]))
        steps.append(
            Step(
                "smoke-cli render",
                [py, "-m", "planboard", "render", "--state", upgraded, "--today", "2024-01-03", "--out", str(scratch / "board.html")],
            )
        )
    if not ns.skip_tests:
        steps.append(Step("tests", [py, "-m", "unittest", "discover", "-s", "tests"]))
    return steps


def _run(step: Step, *, cwd: Path, env: Dict[str, str]) -> bool:
    started = time.time()
    p = subprocess.run(step.cmd, cwd=str(cwd), env=env, capture_output=True, text=True)
    if p.returncode == 0:
        verdict = "OK"
    elif p.returncode in step.tolerated:
        verdict = "WARN"
    else:
        verdict = "FAIL"
    print(f"{TAG} {verdict}: {step.name} ({_elapsed(started)})")
    output = "\n".join(s for s in ((p.stdout or "").strip(), (p.stderr or "").strip()) if s)
    if output and (verdict != "OK" or step.name == "tests"):
        print(output)
    return verdict != "FAIL"


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(prog="planboard-ci", description="One-command CI gate (UTC, PLANBOARD_* env cleared).")
    ap.add_argument("--strict", action="store_true", help="Treat doctor warnings as errors.")
    ap.add_argument("--skip-doctor", action="store_true", help="Skip repo hygiene checks.")
    ap.add_argument("--skip-compileall", action="store_true", help="Skip python -m compileall.")
    ap.add_argument("--skip-lint", action="store_true", help="Skip ruff (if installed).")
    ap.add_argument("--skip-smoke", action="store_true", help="Skip the CLI smoke run over the legacy fixture.")
    ap.add_argument("--skip-tests", action="store_true", help="Skip unit/contract tests.")
    ns = ap.parse_args(argv)

    repo = _repo_root()
    env = _clean_env(repo)
    started = time.time()
    with tempfile.TemporaryDirectory(prefix="planboard-ci-") as td:
        for step in _plan(ns, repo, Path(td)):
            if not _run(step, cwd=repo, env=env):
                print(f"{TAG} RESULT: FAIL at {step.name} ({_elapsed(started)})")
                return 2
    print(f"{TAG} RESULT: OK ({_elapsed(started)})")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
