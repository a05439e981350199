"""Disjoint-set over opaque identifiers, registered lazily on first sight."""

from __future__ import annotations

from collections.abc import Hashable, Iterable


class UnionFind:
    def __init__(self) -> None:
        self.parent: dict[Hashable, Hashable] = {}

    def find(self, x: Hashable) -> Hashable:
        """Return the representative of x, registering x as its own root if unseen."""
        if x not in self.parent:
            self.parent[x] = x
            return x

        root = x
        while self.parent[root] != root:
            root = self.parent[root]

        # Path compression
        while self.parent[x] != root:
            self.parent[x], x = root, self.parent[x]
        return root

    def union(self, x: Hashable, y: Hashable) -> None:
        """Merge the classes of x and y; the root of x is attached under the root of y."""
        root_x = self.find(x)
        root_y = self.find(y)
        if root_x != root_y:
            self.parent[root_x] = root_y

    def connected(self, x: Hashable, y: Hashable) -> bool:
        return self.find(x) == self.find(y)

    def groups(self, items: Iterable[Hashable]) -> list[list[Hashable]]:
        """Partition items by representative, keeping first-seen order."""
        grouped: dict[Hashable, list[Hashable]] = {}
        for item in items:
            grouped.setdefault(self.find(item), []).append(item)
        return list(grouped.values())
