import csv
import io
import unittest
from dataclasses import replace

from planboard.export import CSV_HEADER, export_all, export_rows, to_csv, to_json
from planboard.schema import upgrade_payload
from planboard.util.jsonio import loads

from boards import D, board, project


class TestExportContract(unittest.TestCase):
    def setUp(self) -> None:
        b = project("b", D(2024, 1, 3), D(2024, 1, 4), resource_id="r3", group_id="rg2")
        self.state = board([
            project("a", D(2024, 1, 1), D(2024, 1, 2)),
            replace(b, notes='says "hi", twice'),
            project("ghost", D(2024, 1, 5), D(2024, 1, 5), resource_id="gone"),
        ])

    def test_rows_resolve_names(self) -> None:
        rows = export_rows(self.state)
        self.assertEqual(rows[0].as_tuple(), ("Development", "Developer 1", "A", "2024-01-01", "2024-01-02", "#b39ddb", ""))
        self.assertEqual((rows[1].group, rows[1].resource), ("Design", "Designer"))
        # unknown resource: group from the project's group id, resource id as-is
        self.assertEqual((rows[2].group, rows[2].resource), ("Development", "gone"))

    def test_csv_quotes_everything(self) -> None:
        text = to_csv(self.state)
        lines = text.splitlines()
        self.assertEqual(lines[0], ",".join(f'"{h}"' for h in CSV_HEADER))
        self.assertEqual(lines[1], '"Development","Developer 1","A","2024-01-01","2024-01-02","#b39ddb",""')
        parsed = list(csv.reader(io.StringIO(text)))
        self.assertEqual(parsed[2][6], 'says "hi", twice')
        self.assertEqual(len(parsed), 4)

    def test_json_uses_lowercase_keys(self) -> None:
        rows = loads(to_json(self.state))
        self.assertEqual(sorted(rows[0]), sorted(h.lower() for h in CSV_HEADER))
        self.assertEqual(rows[1]["resource"], "Designer")

    def test_backup_document(self) -> None:
        doc = export_all(self.state, exported_at="2024-02-01T00:00:00Z")
        self.assertEqual(doc["exportDate"], "2024-02-01T00:00:00Z")
        self.assertEqual(doc["data"]["schema_version"], 2)
        self.assertEqual(len(doc["data"]["projects"]), 3)
        self.assertIs(upgrade_payload(doc), doc["data"])


if __name__ == "__main__":
    unittest.main(verbosity=2)
