import unittest

from planboard.commands import (
    SIDE_END,
    SIDE_START,
    AddDayOff,
    AddResource,
    AddToGroup,
    CreateProject,
    DeleteProjects,
    DeleteResource,
    DuplicateGroup,
    DuplicateProject,
    GroupProjects,
    MoveProject,
    MoveResourceGroup,
    RemoveDayOff,
    RemoveFromGroup,
    RenameProjectGroup,
    RenameResource,
    ResizeProject,
    SetViewMode,
    ShiftAnchor,
    TogglePin,
    Ungroup,
    UpdateProject,
    apply_command,
)
from planboard.ids import SequentialIds
from planboard.layout import UnknownViewModeError

from boards import D, board, pgroup, project


def _run(state, cmd):
    return apply_command(state, cmd, ids=SequentialIds())


def _messages(result):
    return [n.message for n in result.notices]


class TestGroupedEdits(unittest.TestCase):
    def setUp(self) -> None:
        self.state = board(
            [
                project("a", D(2024, 1, 1), D(2024, 1, 3)),
                project("b", D(2024, 1, 2), D(2024, 1, 5)),
                project("c", D(2024, 1, 6), D(2024, 1, 8), color="#00ff00"),
            ],
            [pgroup("g1", "a", "b")],
        )

    def test_dragging_a_grouped_project_shifts_the_whole_group(self) -> None:
        res = _run(self.state, MoveProject("a", D(2024, 1, 3)))
        self.assertTrue(res.changed)
        a = res.state.project_by_id("a")
        b = res.state.project_by_id("b")
        self.assertEqual((a.start, a.end), (D(2024, 1, 3), D(2024, 1, 5)))
        self.assertEqual((b.start, b.end), (D(2024, 1, 4), D(2024, 1, 7)))
        self.assertEqual(res.state.project_by_id("c"), self.state.project_by_id("c"))

    def test_color_change_propagates_to_group(self) -> None:
        res = _run(self.state, UpdateProject("a", color="#ff0000"))
        self.assertEqual(res.state.project_by_id("a").color, "#ff0000")
        self.assertEqual(res.state.project_by_id("b").color, "#ff0000")
        self.assertEqual(res.state.project_by_id("c").color, "#00ff00")
        self.assertIn('Updated color for 2 projects in group "G"', _messages(res))

    def test_deleting_the_group_deletes_its_members(self) -> None:
        res = _run(self.state, DeleteProjects(group_ids=("g1",)))
        self.assertEqual([p.id for p in res.state.projects], ["c"])
        self.assertEqual(res.state.project_groups, ())

    def test_deleting_one_member_dissolves_a_pair(self) -> None:
        res = _run(self.state, DeleteProjects(project_ids=("a",)))
        self.assertEqual([p.id for p in res.state.projects], ["b", "c"])
        self.assertEqual(res.state.project_groups, ())

    def test_deleting_one_member_of_a_larger_group_keeps_it(self) -> None:
        state = board(self.state.projects, [pgroup("g1", "a", "b", "c")])
        res = _run(state, DeleteProjects(project_ids=("a",)))
        self.assertEqual(res.state.project_groups[0].project_ids, ("b", "c"))

    def test_pinned_member_blocks_group_move(self) -> None:
        state = _run(self.state, UpdateProject("b", pinned=True)).state
        res = _run(state, MoveProject("a", D(2024, 1, 3)))
        self.assertFalse(res.changed)
        self.assertIs(res.state, state)
        self.assertIn("Pinned projects cannot be moved. Unpin first.", _messages(res))

        res = _run(state, MoveProject("a", D(2024, 1, 3), unpin=True))
        self.assertTrue(res.changed)
        self.assertFalse(res.state.project_by_id("b").pinned)
        self.assertEqual(res.state.project_by_id("b").start, D(2024, 1, 4))

    def test_group_relocates_when_single_resource(self) -> None:
        res = _run(self.state, MoveProject("a", D(2024, 1, 1), resource_id="r3"))
        for pid in ("a", "b"):
            p = res.state.project_by_id(pid)
            self.assertEqual((p.resource_id, p.group_id), ("r3", "rg2"))

    def test_mixed_resource_group_keeps_resources(self) -> None:
        state = board(
            [project("a", D(2024, 1, 1), D(2024, 1, 3)), project("b", D(2024, 1, 1), D(2024, 1, 3), resource_id="r2")],
            [pgroup("g1", "a", "b", name="Mixed")],
        )
        res = _run(state, MoveProject("a", D(2024, 1, 2), resource_id="r3"))
        self.assertEqual(res.state.project_by_id("a").resource_id, "r1")
        self.assertEqual(res.state.project_by_id("b").resource_id, "r2")
        self.assertEqual(res.state.project_by_id("b").start, D(2024, 1, 2))
        self.assertTrue(any("Mixed" in m for m in _messages(res)))

    def test_toggle_pin_whole_group(self) -> None:
        state = _run(self.state, TogglePin("a")).state
        self.assertTrue(state.project_by_id("a").pinned)
        # mixed -> pin all
        state = _run(state, TogglePin("b", whole_group=True)).state
        self.assertTrue(state.project_by_id("a").pinned and state.project_by_id("b").pinned)
        # all pinned -> unpin all
        state = _run(state, TogglePin("a", whole_group=True)).state
        self.assertFalse(state.project_by_id("a").pinned or state.project_by_id("b").pinned)

    def test_duplicate_group(self) -> None:
        res = _run(self.state, DuplicateGroup("g1"))
        self.assertEqual(len(res.state.projects), 5)
        copies = res.state.projects[3:]
        self.assertEqual([c.name for c in copies], ["A (Copy)", "B (Copy)"])
        new_group = res.state.project_groups[-1]
        self.assertEqual(new_group.name, "G (Copy)")
        self.assertEqual(new_group.project_ids, tuple(c.id for c in copies))
        self.assertIn(new_group.id, res.created)
        self.assertIn("Duplicated 2 projects to a new group!", _messages(res))

    def test_ungroup_and_remove_from_group(self) -> None:
        res = _run(self.state, Ungroup("g1"))
        self.assertEqual(res.state.project_groups, ())
        self.assertEqual(len(res.state.projects), 3)
        res = _run(self.state, RemoveFromGroup("b"))
        self.assertEqual(res.state.project_groups, ())
        self.assertFalse(_run(self.state, RemoveFromGroup("c")).changed)

    def test_rename_project_group(self) -> None:
        res = _run(self.state, RenameProjectGroup("g1", "Launch"))
        self.assertEqual(res.state.project_groups[0].name, "Launch")
        self.assertFalse(_run(self.state, RenameProjectGroup("g1", " ")).changed)

    def test_add_to_group_recolors(self) -> None:
        res = _run(self.state, AddToGroup("g1", "c"))
        self.assertEqual(res.state.project_groups[0].project_ids, ("a", "b", "c"))
        self.assertEqual(res.state.project_by_id("c").color, "#b39ddb")


class TestGroupProjects(unittest.TestCase):
    def _state(self, groups=()):
        return board(
            [
                project("a", D(2024, 1, 1), D(2024, 1, 2)),
                project("b", D(2024, 1, 3), D(2024, 1, 4)),
                project("c", D(2024, 1, 5), D(2024, 1, 6), color="#123456"),
                project("d", D(2024, 1, 7), D(2024, 1, 8)),
            ],
            groups,
        )

    def test_needs_two_projects(self) -> None:
        res = _run(self._state(), GroupProjects(("a",)))
        self.assertFalse(res.changed)
        self.assertEqual(_messages(res), ["Select at least 2 projects to create a group"])
        self.assertFalse(_run(self._state(), GroupProjects(("a", "nope"))).changed)

    def test_new_group(self) -> None:
        res = _run(self._state(), GroupProjects(("a", "b")))
        g = res.state.project_groups[0]
        self.assertEqual((g.id, g.name, g.project_ids), ("pg_1", "A Group", ("a", "b")))
        self.assertEqual(res.created, ("pg_1",))
        self.assertEqual(_messages(res), ["Group created successfully!"])

    def test_extend_existing_group(self) -> None:
        res = _run(self._state([pgroup("g1", "a", "b")]), GroupProjects(("a", "c")))
        self.assertEqual(res.state.project_groups[0].project_ids, ("a", "b", "c"))
        self.assertEqual(res.state.project_by_id("c").color, "#b39ddb")
        self.assertEqual(_messages(res), ["1 project(s) added to existing group!"])

    def test_already_grouped(self) -> None:
        res = _run(self._state([pgroup("g1", "a", "b")]), GroupProjects(("b", "a")))
        self.assertFalse(res.changed)
        self.assertEqual(_messages(res), ["All selected projects are already in the same group"])

    def test_merge_groups(self) -> None:
        res = _run(self._state([pgroup("g1", "a", "b"), pgroup("g2", "c", "d")]), GroupProjects(("a", "c")))
        self.assertEqual(len(res.state.project_groups), 1)
        self.assertEqual(res.state.project_groups[0].project_ids, ("a", "b", "c", "d"))
        self.assertEqual(_messages(res), ["Merged 2 groups into one!"])
        # merging does not recolor
        self.assertEqual(res.state.project_by_id("c").color, "#123456")


class TestSingleProjectEdits(unittest.TestCase):
    def setUp(self) -> None:
        self.state = board([project("a", D(2024, 1, 5), D(2024, 1, 8))])

    def test_resize_end_before_start_is_rejected(self) -> None:
        res = _run(self.state, ResizeProject("a", SIDE_END, D(2024, 1, 4)))
        self.assertFalse(res.changed)
        a = res.state.project_by_id("a")
        self.assertEqual((a.start, a.end), (D(2024, 1, 5), D(2024, 1, 8)))

    def test_resize_both_sides(self) -> None:
        s = _run(self.state, ResizeProject("a", SIDE_END, D(2024, 1, 5))).state
        self.assertEqual(s.project_by_id("a").end, D(2024, 1, 5))
        s = _run(self.state, ResizeProject("a", SIDE_START, D(2024, 1, 1))).state
        self.assertEqual(s.project_by_id("a").start, D(2024, 1, 1))
        self.assertFalse(_run(self.state, ResizeProject("a", SIDE_START, D(2024, 1, 9))).changed)
        with self.assertRaises(ValueError):
            _run(self.state, ResizeProject("a", "middle", D(2024, 1, 6)))

    def test_update_rejects_inversion(self) -> None:
        res = _run(self.state, UpdateProject("a", end=D(2024, 1, 1)))
        self.assertFalse(res.changed)
        self.assertEqual(res.notices[0].level, "warning")

    def test_update_resource_follows_group(self) -> None:
        res = _run(self.state, UpdateProject("a", resource_id="r3", name="Renamed"))
        a = res.state.project_by_id("a")
        self.assertEqual((a.resource_id, a.group_id, a.name), ("r3", "rg2", "Renamed"))
        self.assertFalse(_run(self.state, UpdateProject("a", resource_id="zzz")).changed)

    def test_create_project(self) -> None:
        res = _run(self.state, CreateProject("r2", D(2024, 1, 3)))
        self.assertEqual(res.created, ("p_1",))
        p = res.state.project_by_id("p_1")
        self.assertEqual((p.name, p.resource_id, p.group_id, p.start, p.end), ("New Project", "r2", "rg1", D(2024, 1, 3), D(2024, 1, 3)))
        self.assertFalse(_run(self.state, CreateProject("zzz", D(2024, 1, 3))).changed)
        self.assertFalse(_run(self.state, CreateProject("r1", D(2024, 1, 3), D(2024, 1, 2))).changed)

    def test_duplicate_project_is_unpinned_copy(self) -> None:
        state = _run(self.state, TogglePin("a")).state
        res = _run(state, DuplicateProject("a"))
        dup = res.state.projects[-1]
        self.assertEqual((dup.id, dup.name, dup.pinned), ("p_1", "A (Copy)", False))
        self.assertEqual((dup.start, dup.end), (D(2024, 1, 5), D(2024, 1, 8)))

    def test_unknown_ids_are_noops(self) -> None:
        for cmd in (MoveProject("zzz", D(2024, 1, 1)), UpdateProject("zzz", name="x"), DeleteProjects(("zzz",)), Ungroup("zzz")):
            res = _run(self.state, cmd)
            self.assertFalse(res.changed, cmd)
            self.assertIs(res.state, self.state)

    def test_unknown_command_type(self) -> None:
        with self.assertRaises(TypeError):
            _run(self.state, object())


class TestSettingsAndRows(unittest.TestCase):
    def test_day_offs(self) -> None:
        res = _run(board(), AddDayOff(D(2024, 1, 2), "holiday"))
        d = res.state.day_offs[0]
        self.assertEqual((d.id, d.color), ("d_1", "#ff6b6b"))
        self.assertEqual(_run(res.state, RemoveDayOff("d_1")).state.day_offs, ())

    def test_view_mode(self) -> None:
        self.assertEqual(_run(board(), SetViewMode("month")).state.settings.view_mode, "month")
        self.assertFalse(_run(board(), SetViewMode("week")).changed)
        with self.assertRaises(UnknownViewModeError):
            _run(board(), SetViewMode("year"))

    def test_shift_anchor(self) -> None:
        s = _run(board(), ShiftAnchor(-1)).state
        self.assertEqual(s.settings.anchor_date, D(2023, 12, 31))
        s = _run(board(anchor=None), ShiftAnchor(1, today=D(2024, 1, 10))).state
        self.assertEqual(s.settings.anchor_date, D(2024, 1, 4))

    def test_resource_edits(self) -> None:
        res = _run(board(), AddResource("rg2", "Illustrator"))
        self.assertEqual(res.created, ("r_1",))
        self.assertEqual([r.name for r in res.state.resource_groups[1].resources], ["Designer", "Illustrator"])

        res = _run(board(), AddResource("rg2", "   "))
        self.assertFalse(res.changed)
        self.assertEqual(_messages(res), ["Resource name cannot be empty."])

        s = _run(board(), RenameResource("r3", "Lead Designer")).state
        self.assertEqual(s.resource_by_id("r3").name, "Lead Designer")
        s = _run(board(), MoveResourceGroup("rg2", -1)).state
        self.assertEqual([g.id for g in s.resource_groups], ["rg2", "rg1"])

    def test_deleting_a_resource_leaves_its_projects(self) -> None:
        state = board([project("a", D(2024, 1, 1), D(2024, 1, 2), resource_id="r3", group_id="rg2")])
        s = _run(state, DeleteResource("r3")).state
        self.assertIsNone(s.resource_by_id("r3"))
        self.assertEqual(len(s.projects), 1)


if __name__ == "__main__":
    unittest.main(verbosity=2)
