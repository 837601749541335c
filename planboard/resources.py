# planboard/resources.py
"""Editing of the resource-group hierarchy (the grid rows).

Groups and resources are addressed by surrogate id, so renaming never breaks
the project -> resource reference. Every function returns a new tuple.
"""

from __future__ import annotations

from typing import Tuple

from .ids import DEFAULT_IDS, IdGenerator
from .model import Resource, ResourceGroup

Groups = Tuple[ResourceGroup, ...]

DEFAULT_GROUP_NAME = "New Group"
DEFAULT_RESOURCE_NAME = "New Resource"


def _clean_name(name: str, what: str) -> str:
    s = (name or "").strip()
    if not s:
        raise ValueError(f"{what} name cannot be empty.")
    return s


def default_resource_groups(ids: IdGenerator | None = None) -> Groups:
    """Seed hierarchy used when no saved groups exist."""
    ids = ids or DEFAULT_IDS
    return (
        ResourceGroup(
            id=ids.new("resource_group"),
            name="Development",
            resources=(
                Resource(id=ids.new("resource"), name="Developer 1"),
                Resource(id=ids.new("resource"), name="Developer 2"),
            ),
        ),
    )


def add_group(groups: Groups, name: str = DEFAULT_GROUP_NAME, *, ids: IdGenerator | None = None) -> Groups:
    ids = ids or DEFAULT_IDS
    return groups + (ResourceGroup(id=ids.new("resource_group"), name=_clean_name(name, "Group")),)


def delete_group(groups: Groups, group_id: str) -> Groups:
    return tuple(g for g in groups if g.id != group_id)


def rename_group(groups: Groups, group_id: str, name: str) -> Groups:
    new_name = _clean_name(name, "Group")
    return tuple(ResourceGroup(g.id, new_name, g.resources) if g.id == group_id else g for g in groups)


def move_group(groups: Groups, group_id: str, delta: int) -> Groups:
    """Swap a group with its neighbour; moving past either end is a no-op."""
    idx = next((i for i, g in enumerate(groups) if g.id == group_id), None)
    if idx is None or delta == 0:
        return groups
    target = idx + (1 if delta > 0 else -1)
    if target < 0 or target >= len(groups):
        return groups
    out = list(groups)
    out[idx], out[target] = out[target], out[idx]
    return tuple(out)


def add_resource(
    groups: Groups,
    group_id: str,
    name: str = DEFAULT_RESOURCE_NAME,
    *,
    ids: IdGenerator | None = None,
) -> Groups:
    ids = ids or DEFAULT_IDS
    clean = _clean_name(name, "Resource")
    out = []
    for g in groups:
        if g.id == group_id:
            g = ResourceGroup(g.id, g.name, g.resources + (Resource(id=ids.new("resource"), name=clean),))
        out.append(g)
    return tuple(out)


def delete_resource(groups: Groups, resource_id: str) -> Groups:
    return tuple(
        ResourceGroup(g.id, g.name, tuple(r for r in g.resources if r.id != resource_id)) for g in groups
    )


def rename_resource(groups: Groups, resource_id: str, name: str) -> Groups:
    clean = _clean_name(name, "Resource")
    return tuple(
        ResourceGroup(
            g.id,
            g.name,
            tuple(Resource(r.id, clean) if r.id == resource_id else r for r in g.resources),
        )
        for g in groups
    )


__all__ = [
    "DEFAULT_GROUP_NAME",
    "DEFAULT_RESOURCE_NAME",
    "add_group",
    "add_resource",
    "default_resource_groups",
    "delete_group",
    "delete_resource",
    "move_group",
    "rename_group",
    "rename_resource",
]
