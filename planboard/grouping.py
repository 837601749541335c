# planboard/grouping.py
"""Project-group store.

Invariants after every mutating call:
  - each group has at least two members;
  - a project id appears in at most one group.

Unknown group/project ids never raise: the call is a no-op and the return
value says so (False / None).
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Iterator, List, Optional, Sequence, Set, Tuple

from .ids import DEFAULT_IDS, IdGenerator
from .model import Project, ProjectGroup
from .util.dates import utc_iso_z_now

log = logging.getLogger(__name__)

DEFAULT_GROUP_NAME = "New Group"

NameLookup = Callable[[str], Optional[str]]


def _dedupe(ids: Iterable[str]) -> List[str]:
    seen: Set[str] = set()
    out: List[str] = []
    for i in ids:
        if not isinstance(i, str) or not i or i in seen:
            continue
        seen.add(i)
        out.append(i)
    return out


def default_group_name(project_ids: Sequence[str], name_of: Optional[NameLookup]) -> str:
    if project_ids and name_of is not None:
        first = name_of(project_ids[0])
        if first:
            return f"{first} Group"
    return DEFAULT_GROUP_NAME


class ProjectGroupStore:
    """Mutable working copy of the project-group list.

    The store owns only its own list; callers hand in the canonical tuple and
    read `groups` back when done.
    """

    def __init__(
        self,
        groups: Iterable[ProjectGroup] = (),
        *,
        ids: IdGenerator | None = None,
        name_of: NameLookup | None = None,
        now: Callable[[], str] = utc_iso_z_now,
    ) -> None:
        self._groups: List[ProjectGroup] = list(groups)
        self._ids = ids or DEFAULT_IDS
        self._name_of = name_of
        self._now = now

    @property
    def groups(self) -> Tuple[ProjectGroup, ...]:
        return tuple(self._groups)

    def __len__(self) -> int:
        return len(self._groups)

    def __iter__(self) -> Iterator[ProjectGroup]:
        return iter(list(self._groups))

    # --- lookup ---------------------------------------------------------------

    def get_group(self, group_id: str) -> Optional[ProjectGroup]:
        for g in self._groups:
            if g.id == group_id:
                return g
        return None

    def get_group_by_project(self, project_id: str) -> Optional[ProjectGroup]:
        for g in self._groups:
            if project_id in g.project_ids:
                return g
        return None

    def grouped_project_ids(self) -> List[str]:
        out: List[str] = []
        for g in self._groups:
            out.extend(g.project_ids)
        return out

    def members(self, group_id: str, projects: Iterable[Project]) -> List[Project]:
        """Group members in canonical project-list order; ids missing from `projects` are skipped."""
        g = self.get_group(group_id)
        if g is None:
            return []
        wanted = set(g.project_ids)
        return [p for p in projects if p.id in wanted]

    def can_change_resource(self, group_id: str, projects: Iterable[Project]) -> bool:
        """Only single-resource groups may be relocated to another resource."""
        members = self.members(group_id, projects)
        if not members:
            return False
        first = members[0].resource_id
        return all(p.resource_id == first for p in members)

    # --- mutation -------------------------------------------------------------

    def _replace(self, group: ProjectGroup) -> None:
        for i, g in enumerate(self._groups):
            if g.id == group.id:
                self._groups[i] = group
                return

    def _detach(self, project_id: str, *, keep: str | None = None) -> bool:
        changed = False
        for g in list(self._groups):
            if g.id == keep or project_id not in g.project_ids:
                continue
            self._replace(
                ProjectGroup(
                    id=g.id,
                    name=g.name,
                    project_ids=tuple(x for x in g.project_ids if x != project_id),
                    created_at=g.created_at,
                )
            )
            changed = True
        return changed

    def create_group(self, project_ids: Iterable[str], name: str | None = None) -> Optional[ProjectGroup]:
        ids = _dedupe(project_ids)
        if len(ids) < 2:
            return None

        # A project may only live in one group: pull members out of older groups.
        for pid in ids:
            self._detach(pid)

        group = ProjectGroup(
            id=self._ids.new("project_group"),
            name=(name or "").strip() or default_group_name(ids, self._name_of),
            project_ids=tuple(ids),
            created_at=self._now(),
        )
        self._groups.append(group)
        self.cleanup_empty_groups()
        return group

    def add_project_to_group(self, group_id: str, project_id: str) -> bool:
        g = self.get_group(group_id)
        if g is None or not project_id or project_id in g.project_ids:
            return False
        self._detach(project_id, keep=group_id)
        g = self.get_group(group_id)
        if g is None:
            return False
        self._replace(
            ProjectGroup(id=g.id, name=g.name, project_ids=g.project_ids + (project_id,), created_at=g.created_at)
        )
        self.cleanup_empty_groups()
        return True

    def remove_project_from_group(self, project_id: str) -> bool:
        changed = self._detach(project_id)
        if changed:
            self.cleanup_empty_groups()
        return changed

    def merge_groups(
        self,
        group_ids: Iterable[str],
        extra_project_ids: Iterable[str] = (),
        name: str | None = None,
    ) -> Optional[ProjectGroup]:
        sources = [g for g in (self.get_group(gid) for gid in _dedupe(group_ids)) if g is not None]
        union: List[str] = []
        for g in sources:
            union.extend(g.project_ids)
        union.extend(extra_project_ids)
        union = _dedupe(union)
        if len(union) < 2:
            return None

        merged = self.create_group(union, name)
        for g in sources:
            self.delete_group(g.id)
        return merged

    def delete_group(self, group_id: str) -> bool:
        before = len(self._groups)
        self._groups = [g for g in self._groups if g.id != group_id]
        return len(self._groups) != before

    def rename_group(self, group_id: str, name: str) -> bool:
        g = self.get_group(group_id)
        new_name = (name or "").strip()
        if g is None or not new_name:
            return False
        self._replace(ProjectGroup(id=g.id, name=new_name, project_ids=g.project_ids, created_at=g.created_at))
        return True

    def cleanup_empty_groups(self) -> int:
        keep = [g for g in self._groups if len(g.project_ids) > 1]
        removed = len(self._groups) - len(keep)
        if removed:
            log.debug("removed %d degenerate project group(s)", removed)
        self._groups = keep
        return removed

    def prune_missing(self, valid_project_ids: Iterable[str]) -> int:
        """Drop member ids absent from the canonical project list, then clean up.

        A project listed by several groups stays in the first group that keeps
        at least two members. Returns the number of member ids dropped.
        """
        valid = set(valid_project_ids)
        claimed: Set[str] = set()
        dropped = 0
        for g in list(self._groups):
            kept = tuple(_dedupe(pid for pid in g.project_ids if pid in valid and pid not in claimed))
            if len(kept) > 1:
                claimed.update(kept)
            if len(kept) != len(g.project_ids):
                dropped += len(g.project_ids) - len(kept)
                self._replace(ProjectGroup(id=g.id, name=g.name, project_ids=kept, created_at=g.created_at))
        self.cleanup_empty_groups()
        return dropped

    def clear(self) -> int:
        n = len(self._groups)
        self._groups = []
        return n


__all__ = ["DEFAULT_GROUP_NAME", "ProjectGroupStore", "default_group_name"]
