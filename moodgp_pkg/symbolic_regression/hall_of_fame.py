"""Hall of fame: the best equation seen for every complexity."""

from __future__ import annotations

import math

from .expression_tree import ExpressionTree


class HallOfFame:
    """Best-loss member per complexity ``1..maxsize``, across the whole search.

    Members are stored as copies, so later mutation of the populations cannot
    change them.
    """

    def __init__(self, maxsize: int = 20):
        self.maxsize = maxsize
        self._members: dict[int, ExpressionTree] = {}

    def update(self, tree: ExpressionTree) -> bool:
        """Offer a tree; returns True if it became the member for its complexity."""
        size = tree.complexity()
        if size > self.maxsize or not math.isfinite(tree.loss):
            return False
        current = self._members.get(size)
        if current is not None and current.loss <= tree.loss:
            return False
        self._members[size] = tree.copy()
        return True

    def update_all(self, population: list[ExpressionTree]) -> int:
        return sum(self.update(tree) for tree in population)

    def members(self) -> list[ExpressionTree]:
        """Members in increasing complexity."""
        return [self._members[size] for size in sorted(self._members)]

    def best(self) -> ExpressionTree | None:
        if not self._members:
            return None
        return min(self._members.values(), key=lambda t: t.loss)

    def __contains__(self, size: int) -> bool:
        return size in self._members

    def __len__(self) -> int:
        return len(self._members)

    def __iter__(self):
        return iter(self.members())

    def __repr__(self) -> str:
        return f"HallOfFame({len(self)} members, maxsize={self.maxsize})"
