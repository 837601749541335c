import random
import unittest

from planboard.grouping import DEFAULT_GROUP_NAME, ProjectGroupStore
from planboard.ids import SequentialIds

from boards import D, pgroup, project


def _check_invariants(tc: unittest.TestCase, store: ProjectGroupStore) -> None:
    seen = set()
    for g in store.groups:
        tc.assertGreaterEqual(len(g.project_ids), 2, g)
        tc.assertEqual(len(set(g.project_ids)), len(g.project_ids), g)
        for pid in g.project_ids:
            tc.assertNotIn(pid, seen, f"{pid} in two groups")
            seen.add(pid)


class TestGroupingStoreContract(unittest.TestCase):
    def _store(self, groups=(), names=None) -> ProjectGroupStore:
        names = names or {}
        return ProjectGroupStore(groups, ids=SequentialIds(), name_of=names.get, now=lambda: "2024-01-01T00:00:00Z")

    def test_create_requires_two_distinct_members(self) -> None:
        store = self._store()
        self.assertIsNone(store.create_group(["a"]))
        self.assertIsNone(store.create_group(["a", "a"]))
        g = store.create_group(["a", "b", "a"])
        self.assertIsNotNone(g)
        self.assertEqual(g.project_ids, ("a", "b"))
        self.assertEqual(g.id, "pg_1")
        self.assertEqual(g.created_at, "2024-01-01T00:00:00Z")

    def test_default_name_uses_first_project(self) -> None:
        store = self._store(names={"a": "Website"})
        self.assertEqual(store.create_group(["a", "b"]).name, "Website Group")
        store2 = self._store()
        self.assertEqual(store2.create_group(["a", "b"]).name, DEFAULT_GROUP_NAME)
        self.assertEqual(store2.create_group(["c", "d"], "Launch").name, "Launch")

    def test_create_steals_members_and_cascades(self) -> None:
        store = self._store([pgroup("g1", "a", "b")])
        g = store.create_group(["b", "c"])
        self.assertIsNone(store.get_group("g1"))
        self.assertEqual(store.get_group_by_project("b").id, g.id)
        _check_invariants(self, store)

    def test_add_project_to_group(self) -> None:
        store = self._store([pgroup("g1", "a", "b"), pgroup("g2", "c", "d", "e")])
        self.assertFalse(store.add_project_to_group("nope", "x"))
        self.assertFalse(store.add_project_to_group("g1", "a"))
        self.assertTrue(store.add_project_to_group("g1", "c"))
        self.assertEqual(store.get_group("g1").project_ids, ("a", "b", "c"))
        self.assertEqual(store.get_group("g2").project_ids, ("d", "e"))
        _check_invariants(self, store)

    def test_remove_deletes_degenerate_group(self) -> None:
        store = self._store([pgroup("g1", "a", "b"), pgroup("g2", "c", "d", "e")])
        self.assertTrue(store.remove_project_from_group("c"))
        self.assertEqual(store.get_group("g2").project_ids, ("d", "e"))
        self.assertTrue(store.remove_project_from_group("a"))
        self.assertIsNone(store.get_group("g1"))
        self.assertIsNone(store.get_group_by_project("b"))
        self.assertFalse(store.remove_project_from_group("zzz"))

    def test_merge_groups(self) -> None:
        store = self._store([pgroup("g1", "a", "b"), pgroup("g2", "c", "d")], names={"a": "Alpha"})
        merged = store.merge_groups(["g1", "g2"], ["e"])
        self.assertEqual(merged.project_ids, ("a", "b", "c", "d", "e"))
        self.assertEqual(merged.name, "Alpha Group")
        self.assertEqual([g.id for g in store.groups], [merged.id])
        self.assertIsNone(store.merge_groups(["missing"]))

    def test_rename_delete_clear(self) -> None:
        store = self._store([pgroup("g1", "a", "b"), pgroup("g2", "c", "d")])
        self.assertTrue(store.rename_group("g1", "  Renamed "))
        self.assertEqual(store.get_group("g1").name, "Renamed")
        self.assertFalse(store.rename_group("g1", "   "))
        self.assertFalse(store.rename_group("nope", "x"))
        self.assertTrue(store.delete_group("g2"))
        self.assertFalse(store.delete_group("g2"))
        self.assertEqual(store.clear(), 1)
        self.assertEqual(len(store), 0)

    def test_cleanup_is_idempotent(self) -> None:
        store = self._store([pgroup("g1", "a"), pgroup("g2", "b", "c")])
        self.assertEqual(store.cleanup_empty_groups(), 1)
        self.assertEqual(store.cleanup_empty_groups(), 0)
        self.assertEqual([g.id for g in store.groups], ["g2"])

    def test_prune_missing(self) -> None:
        store = self._store([pgroup("g1", "a", "b", "c"), pgroup("g2", "d", "e")])
        dropped = store.prune_missing(["a", "b", "d"])
        self.assertEqual(dropped, 2)
        self.assertEqual([g.id for g in store.groups], ["g1"])
        self.assertEqual(store.get_group("g1").project_ids, ("a", "b"))

    def test_prune_missing_restores_single_membership(self) -> None:
        store = self._store([pgroup("g1", "a", "x"), pgroup("g2", "a", "b", "b"), pgroup("g3", "b", "c", "d")])
        store.prune_missing(["a", "b", "c", "d"])
        self.assertEqual([(g.id, g.project_ids) for g in store.groups], [("g2", ("a", "b")), ("g3", ("c", "d"))])

    def test_default_clock_stamps_utc_z(self) -> None:
        g = ProjectGroupStore(ids=SequentialIds()).create_group(["a", "b"])
        self.assertRegex(g.created_at, r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}Z$")

    def test_members_and_can_change_resource(self) -> None:
        ps = [
            project("a", D(2024, 1, 1), D(2024, 1, 2)),
            project("b", D(2024, 1, 3), D(2024, 1, 4)),
            project("c", D(2024, 1, 3), D(2024, 1, 4), resource_id="r2"),
        ]
        store = self._store([pgroup("g1", "b", "a"), pgroup("g2", "a", "c")])
        # canonical project order, not group order
        self.assertEqual([p.id for p in store.members("g1", ps)], ["a", "b"])
        self.assertTrue(store.can_change_resource("g1", ps))
        self.assertFalse(store.can_change_resource("g2", ps))
        self.assertFalse(store.can_change_resource("nope", ps))

    def test_invariants_hold_under_random_operations(self) -> None:
        rng = random.Random(7)
        pids = [f"p{i}" for i in range(8)]
        store = self._store()
        for _ in range(500):
            op = rng.randrange(5)
            if op == 0:
                store.create_group(rng.sample(pids, rng.randint(0, 4)))
            elif op == 1 and len(store):
                g = rng.choice(store.groups)
                store.add_project_to_group(g.id, rng.choice(pids))
            elif op == 2:
                store.remove_project_from_group(rng.choice(pids))
            elif op == 3 and len(store) >= 2:
                gs = rng.sample([g.id for g in store.groups], 2)
                store.merge_groups(gs, rng.sample(pids, rng.randint(0, 2)))
            elif op == 4 and len(store):
                store.delete_group(rng.choice(store.groups).id)
            _check_invariants(self, store)


if __name__ == "__main__":
    unittest.main(verbosity=2)
