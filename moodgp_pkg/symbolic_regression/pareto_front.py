"""Dominating equations and the accuracy/complexity trade-off.

A dominating equation is one for which every simpler equation fits worse.
Keeping only those gives a short menu, from the simplest equation that says
anything about the mood data to the most accurate one.
"""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field
from typing import Any

import numpy as np
import pandas as pd


@dataclass(frozen=True)
class ParetoSolution:
    """One dominating equation.

    Attributes:
        expression: Infix string as printed by the expression tree
        sympy_expr: The same equation as a SymPy expression
        loss: Mean squared error on the data the frontier was computed on
        complexity: Node count
        tree: The ExpressionTree, for predictions
    """

    expression: str
    sympy_expr: Any
    loss: float
    complexity: int
    tree: Any = field(default=None, compare=False, repr=False)

    def score(self, parsimony: float) -> float:
        """Loss plus the complexity penalty used during the search."""
        return self.loss + parsimony * self.complexity

    def dominates(self, other: ParetoSolution) -> bool:
        """No worse on loss and complexity, and better on at least one."""
        if self.loss > other.loss or self.complexity > other.complexity:
            return False
        return self.loss < other.loss or self.complexity < other.complexity

    def __lt__(self, other: ParetoSolution) -> bool:
        return (self.loss, self.complexity) < (other.loss, other.complexity)


def dominating_solutions(candidates: list[ParetoSolution]) -> list[ParetoSolution]:
    """Keep each candidate whose loss beats every simpler candidate.

    Candidates are walked in increasing complexity; among equal complexity the
    lowest loss is considered first. The result is sorted by complexity.
    """
    dominating: list[ParetoSolution] = []
    best_loss = float("inf")
    for candidate in sorted(candidates, key=lambda s: (s.complexity, s.loss)):
        if candidate.loss < best_loss and np.isfinite(candidate.loss):
            dominating.append(candidate)
            best_loss = candidate.loss
    return dominating


class ParetoFront:
    """Non-dominated equations, at most one per complexity.

    Iteration and every list returned are ordered simplest first.
    """

    def __init__(self, solutions: list[ParetoSolution] | None = None, max_size: int = 100):
        self.max_size = max_size
        self._by_complexity: dict[int, ParetoSolution] = {}
        for solution in solutions or []:
            self.add(solution)

    @property
    def solutions(self) -> list[ParetoSolution]:
        return [self._by_complexity[c] for c in sorted(self._by_complexity)]

    def add(self, solution: ParetoSolution) -> bool:
        """Insert ``solution`` unless an existing equation is at least as good.

        Returns:
            True if the solution is now part of the front
        """
        if any(
            s.dominates(solution) or (s.loss, s.complexity) == (solution.loss, solution.complexity)
            for s in self._by_complexity.values()
        ):
            return False

        self._by_complexity = {
            c: s for c, s in self._by_complexity.items() if not solution.dominates(s)
        }
        self._by_complexity[solution.complexity] = solution
        if len(self._by_complexity) > self.max_size:
            self._thin_out()
        return True

    def _thin_out(self):
        # Evenly spaced ranks; the simplest and the most complex always stay
        kept = self.solutions
        ranks = np.unique(np.linspace(0, len(kept) - 1, self.max_size).round().astype(int))
        self._by_complexity = {kept[i].complexity: kept[i] for i in ranks}

    def get_best(self, complexity_budget: int | None = None) -> ParetoSolution | None:
        """Most accurate equation within ``complexity_budget`` nodes.

        Falls back to the simplest equation when nothing fits the budget.
        """
        affordable = [
            s
            for s in self.solutions
            if complexity_budget is None or s.complexity <= complexity_budget
        ]
        if affordable:
            return min(affordable, key=lambda s: s.loss)
        return self.get_simplest()

    def get_simplest(self) -> ParetoSolution | None:
        solutions = self.solutions
        return solutions[0] if solutions else None

    def get_most_accurate(self) -> ParetoSolution | None:
        return self.get_best()

    def get_knee_point(self) -> ParetoSolution | None:
        """Equation where extra complexity stops paying off.

        Both axes are rescaled to [0, 1]; the knee is the point lying furthest
        below the chord from the simplest to the most complex equation.
        """
        solutions = self.solutions
        if len(solutions) < 3:
            return self.get_best()

        points = np.array([(s.complexity, s.loss) for s in solutions], dtype=float)
        span = np.maximum(points.max(axis=0) - points.min(axis=0), [1.0, 1e-10])
        points = (points - points.min(axis=0)) / span

        chord = points[-1] - points[0]
        offsets = points - points[0]
        distance = np.abs(chord[0] * offsets[:, 1] - chord[1] * offsets[:, 0])
        return solutions[int(np.argmax(distance))]

    def to_list(self) -> list[dict]:
        return [
            {"complexity": s.complexity, "loss": s.loss, "expression": s.expression}
            for s in self.solutions
        ]

    def to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame(self.to_list(), columns=["complexity", "loss", "expression"])

    def __len__(self) -> int:
        return len(self._by_complexity)

    def __iter__(self):
        return iter(self.solutions)

    def __repr__(self) -> str:
        return f"ParetoFront({len(self)} equations)"
