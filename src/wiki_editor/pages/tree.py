"""Hierarchy reconstruction for tree views over the flat page collection."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

from .models import Page


@dataclass(slots=True)
class TreeNode:
    """Page with nested children."""

    page: Page
    children: list["TreeNode"] = field(default_factory=list)

    @property
    def id(self) -> str:
        return self.page.id

    def iter_subtree(self) -> Iterable["TreeNode"]:
        """Yield the node and all descendants in depth-first order."""

        yield self
        for child in self.children:
            yield from child.iter_subtree()


@dataclass(slots=True)
class Forest:
    """Result of rebuilding the hierarchy from ``parent_id`` references.

    ``roots`` hold pages without a parent, ``orphans`` pages whose parent no
    longer exists, and ``detached`` pages that none of those reach (cycles).
    """

    roots: list[TreeNode] = field(default_factory=list)
    orphans: list[TreeNode] = field(default_factory=list)
    detached: list[Page] = field(default_factory=list)

    def iter_nodes(self) -> Iterable[TreeNode]:
        for node in [*self.roots, *self.orphans]:
            yield from node.iter_subtree()


def children_of(pages: Sequence[Page], parent_id: Optional[str]) -> list[Page]:
    """Return the direct children of ``parent_id`` in creation order."""

    return [page for page in pages if page.parent_id == parent_id]


def build_forest(pages: Sequence[Page]) -> Forest:
    known_ids = {page.id for page in pages}
    visited: set[str] = set()

    def _build(page: Page) -> TreeNode:
        visited.add(page.id)
        node = TreeNode(page=page)
        for child in children_of(pages, page.id):
            if child.id not in visited:
                node.children.append(_build(child))
        return node

    forest = Forest()
    for page in pages:
        if page.is_root:
            forest.roots.append(_build(page))
    for page in pages:
        if not page.is_root and page.parent_id not in known_ids and page.id not in visited:
            forest.orphans.append(_build(page))
    forest.detached = [page for page in pages if page.id not in visited]
    return forest
