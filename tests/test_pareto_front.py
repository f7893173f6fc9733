"""
Tests for dominating-equation selection and the Pareto front container.
"""

import pandas as pd
import pytest

from moodgp_pkg.symbolic_regression.pareto_front import ParetoFront
from moodgp_pkg.symbolic_regression.pareto_front import ParetoSolution
from moodgp_pkg.symbolic_regression.pareto_front import dominating_solutions


def sol(complexity, loss, expression=None):
    expression = expression or f"eq{complexity}"
    return ParetoSolution(expression, expression, loss, complexity, tree=None)


def test_dominating_solutions_strictly_improve():
    candidates = [sol(1, 5.0), sol(3, 4.0), sol(5, 4.5), sol(7, 4.0), sol(9, 1.0)]
    result = dominating_solutions(candidates)
    assert [(s.complexity, s.loss) for s in result] == [(1, 5.0), (3, 4.0), (9, 1.0)]


def test_dominating_solutions_prefers_lowest_loss_at_equal_complexity():
    result = dominating_solutions([sol(3, 2.0, "a"), sol(3, 1.0, "b")])
    assert [s.expression for s in result] == ["b"]


def test_dominating_solutions_skips_infinite_loss():
    result = dominating_solutions([sol(1, float("inf")), sol(2, 3.0)])
    assert [s.complexity for s in result] == [2]


def test_dominates():
    assert sol(3, 1.0).dominates(sol(5, 2.0))
    assert sol(3, 1.0).dominates(sol(3, 2.0))
    assert not sol(3, 1.0).dominates(sol(3, 1.0))
    assert not sol(3, 1.0).dominates(sol(1, 2.0))


def test_score_adds_parsimony():
    assert sol(10, 1.0).score(0.01) == pytest.approx(1.1)


def test_front_removes_dominated_members():
    front = ParetoFront()
    assert front.add(sol(5, 2.0))
    assert front.add(sol(3, 1.0))
    assert len(front) == 1
    assert not front.add(sol(7, 3.0))
    assert not front.add(sol(3, 1.0, "duplicate"))


def test_front_queries():
    front = ParetoFront([sol(1, 10.0), sol(3, 4.0), sol(5, 3.5), sol(9, 1.0)])
    assert front.get_simplest().complexity == 1
    assert front.get_most_accurate().complexity == 9
    assert front.get_best().complexity == 9
    assert front.get_best(complexity_budget=4).complexity == 3
    assert front.get_best(complexity_budget=0).complexity == 1
    assert [s.complexity for s in front] == [1, 3, 5, 9]


def test_knee_point():
    # Big gain up to complexity 3, little afterwards
    front = ParetoFront([sol(1, 10.0), sol(3, 1.0), sol(11, 0.5), sol(20, 0.4)])
    assert front.get_knee_point().complexity == 3


def test_empty_front():
    front = ParetoFront()
    assert front.get_best() is None
    assert front.get_knee_point() is None
    assert front.to_list() == []


def test_to_dataframe():
    front = ParetoFront([sol(3, 1.0), sol(1, 2.0)])
    df = front.to_dataframe()
    assert isinstance(df, pd.DataFrame)
    assert list(df.columns) == ["complexity", "loss", "expression"]
    assert df["complexity"].tolist() == [1, 3]


def test_trim_keeps_extremes():
    solutions = [sol(c, 100.0 - c) for c in range(1, 21)]
    front = ParetoFront(solutions, max_size=5)
    complexities = sorted(s.complexity for s in front)
    assert len(complexities) <= 5
    assert complexities[-1] == 20
