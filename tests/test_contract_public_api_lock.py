from __future__ import annotations

import unittest


class TestPublicApiLockContract(unittest.TestCase):
    def test_api_module_exports_are_present(self) -> None:
        import planboard.api as api

        self.assertTrue(hasattr(api, "__all__"))
        self.assertIsInstance(api.__all__, (list, tuple))
        self.assertEqual(len(api.__all__), len(set(api.__all__)))

        for name in api.__all__:
            self.assertIsInstance(name, str)
            self.assertTrue(hasattr(api, name), f"planboard.api missing public name: {name}")
            self.assertIsNotNone(getattr(api, name), f"planboard.api {name} is None")

    def test_package_reexports_match_api_all(self) -> None:
        import planboard
        import planboard.api as api

        self.assertEqual(list(planboard.__all__), list(api.__all__))
        for name in api.__all__:
            self.assertTrue(hasattr(planboard, name), f"planboard package does not re-export: {name}")
            self.assertIs(getattr(planboard, name), getattr(api, name), f"planboard.{name} must be same object as planboard.api.{name}")

    def test_core_names_are_public(self) -> None:
        import planboard.api as api

        for name in ("StateContainer", "TimelineController", "apply_command", "build_grid", "hit_test", "ProjectGroupStore"):
            self.assertIn(name, api.__all__)

    def test_helpers_round_trip(self) -> None:
        import tempfile
        from pathlib import Path

        from planboard.api import PayloadValidationError, SequentialIds, load_state_from_json, new_board, normalize_payload, save_state_to_json

        state = new_board(ids=SequentialIds())
        self.assertEqual(state.resource_groups[0].id, "rg_1")
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "s.json"
            save_state_to_json(path, state)
            self.assertEqual(load_state_from_json(path), state)
            path.write_text("[1, 2]", encoding="utf-8")
            with self.assertRaises(PayloadValidationError):
                load_state_from_json(path)
        with self.assertRaises(PayloadValidationError):
            normalize_payload({"schema_version": 2, "projects": [{"id": "x", "start": "soon"}]})
        self.assertEqual(normalize_payload({"groups": []})["schema_version"], 2)


if __name__ == "__main__":
    unittest.main(verbosity=2)
