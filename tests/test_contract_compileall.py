from __future__ import annotations

import unittest
from pathlib import Path


REPO_ROOT = Path(__file__).resolve().parent.parent


class TestCompileAllContract(unittest.TestCase):
    def _sources(self):
        for top in ("planboard", "tests"):
            yield from sorted((REPO_ROOT / top).rglob("*.py"))

    def test_every_source_compiles(self) -> None:
        sources = list(self._sources())
        self.assertTrue(any(p.parent.name == "planboard" for p in sources), f"no package sources under {REPO_ROOT}")
        for path in sources:
            with self.subTest(path=str(path.relative_to(REPO_ROOT))):
                compile(path.read_text(encoding="utf-8"), str(path), "exec", dont_inherit=True)


if __name__ == "__main__":
    unittest.main(verbosity=2)
