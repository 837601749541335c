import unittest
from dataclasses import replace

from planboard.model import Settings
from planboard.schema import state_to_payload
from planboard.validate import PayloadValidationError, assert_valid_payload, validate_payload, validate_state

from boards import D, board, pgroup, project


class TestValidatePayloadContract(unittest.TestCase):
    def _payload(self):
        return state_to_payload(board([project("a", D(2024, 1, 1), D(2024, 1, 2))]), generated_at="x")

    def test_valid_payload(self) -> None:
        self.assertEqual(validate_payload(self._payload()), [])
        assert_valid_payload(self._payload())

    def test_reports_field_errors(self) -> None:
        p = self._payload()
        p["projects"][0]["start"] = "01/01/2024"
        p["projects"][0]["color"] = "red"
        p["settings"]["viewMode"] = "2week"
        errs = validate_payload(p)
        self.assertIn("payload: projects[0].start must be YYYY-MM-DD", errs)
        self.assertIn("payload: projects[0].color must be #rrggbb", errs)
        self.assertTrue(any("settings.viewMode" in e for e in errs))

    def test_missing_sections(self) -> None:
        errs = validate_payload({"schema_version": 2, "meta": {"schema": {"name": "planboard.state"}}}, label="doc")
        self.assertIn("doc: resource_groups must be list", errs)
        self.assertIn("doc: settings must be dict", errs)

    def test_versions(self) -> None:
        self.assertEqual(validate_payload({"schema_version": 9}), ["Unsupported schema_version: 9 (latest=2)"])
        self.assertIn("upgrade_payload", validate_payload({"groups": []})[0])
        self.assertEqual(validate_payload([]), ["payload: payload must be a dict/object"])  # type: ignore[arg-type]

    def test_assert_raises_value_error(self) -> None:
        with self.assertRaises(PayloadValidationError):
            assert_valid_payload({"schema_version": 2})
        with self.assertRaises(ValueError):
            assert_valid_payload("nope")  # type: ignore[arg-type]


class TestValidateStateContract(unittest.TestCase):
    def test_clean_board(self) -> None:
        state = board([project("a", D(2024, 1, 1), D(2024, 1, 2)), project("b", D(2024, 1, 1), D(2024, 1, 2))], [pgroup("g", "a", "b")])
        self.assertEqual(validate_state(state), [])

    def test_reports_every_problem(self) -> None:
        state = board(
            [
                project("a", D(2024, 1, 5), D(2024, 1, 2)),
                project("a", D(2024, 1, 1), D(2024, 1, 2)),
                project("c", D(2024, 1, 1), D(2024, 1, 2), resource_id="ghost"),
            ],
            [pgroup("g1", "a"), pgroup("g2", "a", "zzz")],
        )
        state = replace(state, settings=Settings(view_mode="year"))
        errs = validate_state(state)
        self.assertIn("duplicate project id: a", errs)
        self.assertIn("project a: start 2024-01-05 is after end 2024-01-02", errs)
        self.assertIn("project c: unknown resource 'ghost'", errs)
        self.assertIn("project group g1: fewer than two members", errs)
        self.assertIn("project group g2: unknown project 'zzz'", errs)
        self.assertIn("project a: member of both g1 and g2", errs)
        self.assertIn("settings: unknown view mode 'year'", errs)


if __name__ == "__main__":
    unittest.main(verbosity=2)
