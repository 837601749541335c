import unittest
from dataclasses import replace

from planboard.commands import ClearAll, ClearOldProjects, ClearProjectGroups, apply_command
from planboard.maintenance import (
    OLD_PROJECT_MONTHS,
    clear_all,
    clear_old_projects,
    clear_project_groups,
    old_projects,
    storage_stats,
)
from planboard.model import DayOff
from planboard.util.dates import months_before

from boards import D, board, pgroup, project

TODAY = D(2024, 7, 15)


class TestMaintenanceContract(unittest.TestCase):
    def setUp(self) -> None:
        self.state = board(
            [
                project("old", D(2023, 12, 1), D(2024, 1, 10)),
                project("edge", D(2024, 1, 1), D(2024, 1, 15)),
                project("new", D(2024, 7, 1), D(2024, 7, 20)),
                project("next", D(2024, 7, 21), D(2024, 7, 25)),
            ],
            [pgroup("g1", "old", "edge"), pgroup("g2", "new", "next")],
        )

    def test_months_before_clamps_day(self) -> None:
        self.assertEqual(months_before(TODAY, OLD_PROJECT_MONTHS), D(2024, 1, 15))
        self.assertEqual(months_before(D(2024, 8, 31), 6), D(2024, 2, 29))
        self.assertEqual(months_before(D(2024, 3, 31), 1), D(2024, 2, 29))
        self.assertEqual(months_before(D(2024, 1, 31), 13), D(2022, 12, 31))

    def test_old_projects_use_end_date(self) -> None:
        self.assertEqual([p.id for p in old_projects(self.state, today=TODAY)], ["old"])
        self.assertEqual([p.id for p in old_projects(self.state, today=TODAY, months=1)], ["old", "edge"])

    def test_storage_stats(self) -> None:
        st = storage_stats(self.state, today=TODAY)
        self.assertEqual((st.groups, st.resources, st.projects, st.project_groups, st.day_offs), (2, 3, 4, 2, 0))
        self.assertEqual(st.old_projects, 1)
        self.assertGreater(st.storage_size_kb, 0)

    def test_clear_old_projects_prunes_groups(self) -> None:
        out = clear_old_projects(self.state, today=TODAY)
        self.assertEqual([p.id for p in out.projects], ["edge", "new", "next"])
        self.assertEqual([g.id for g in out.project_groups], ["g2"])
        fresh = board([project("new", D(2024, 7, 1), D(2024, 7, 20))])
        self.assertIs(clear_old_projects(fresh, today=TODAY), fresh)

    def test_clear_groups_and_all(self) -> None:
        self.assertEqual(clear_project_groups(self.state).project_groups, ())
        state = board(self.state.projects)
        self.assertIs(clear_project_groups(state), state)

        with_off = replace(self.state, day_offs=(DayOff("d1", D(2024, 1, 1)),))
        out = clear_all(with_off)
        self.assertEqual((out.projects, out.day_offs, out.project_groups), ((), (), ()))
        self.assertEqual(out.resource_groups, with_off.resource_groups)
        self.assertEqual(out.settings, with_off.settings)

    def test_commands_report_counts(self) -> None:
        res = apply_command(self.state, ClearOldProjects(today=TODAY))
        self.assertEqual([n.message for n in res.notices], ["Cleared 1 old projects!"])
        res = apply_command(self.state, ClearProjectGroups())
        self.assertEqual([n.message for n in res.notices], ["Cleared 2 project groups!"])
        self.assertTrue(apply_command(self.state, ClearAll()).changed)
        self.assertFalse(apply_command(board(), ClearAll()).changed)


if __name__ == "__main__":
    unittest.main(verbosity=2)
