import random

import numpy as np
import pytest

from moodgp_pkg.symbolic_regression.expression_tree import ExpressionNode
from moodgp_pkg.symbolic_regression.expression_tree import ExpressionTree
from moodgp_pkg.symbolic_regression.expression_tree import NodeType
from moodgp_pkg.symbolic_regression.operators import MUTATIONS
from moodgp_pkg.symbolic_regression.operators import apply_mutation
from moodgp_pkg.symbolic_regression.operators import constant_optimization
from moodgp_pkg.symbolic_regression.operators import crossover
from moodgp_pkg.symbolic_regression.operators import hoist_mutation
from moodgp_pkg.symbolic_regression.operators import mutate_constant
from moodgp_pkg.symbolic_regression.operators import shrink_mutation
from moodgp_pkg.symbolic_regression.operators import tournament_selection


def linear_tree(slope=1.0, intercept=0.0):
    """slope * x + intercept"""
    root = ExpressionNode(
        NodeType.BINARY_OP,
        "add",
        [
            ExpressionNode(
                NodeType.BINARY_OP,
                "mul",
                [ExpressionNode(NodeType.CONSTANT, slope), ExpressionNode(NodeType.VARIABLE, "x")],
            ),
            ExpressionNode(NodeType.CONSTANT, intercept),
        ],
    )
    return ExpressionTree(root=root, variables=["x"])


@pytest.mark.parametrize("mutation", MUTATIONS)
def test_mutations_leave_parent_untouched(mutation):
    rng = random.Random(0)
    parent = linear_tree(2.0, 1.0)
    before = parent.to_string()
    for _ in range(10):
        child = apply_mutation(
            parent, mutation, binary_operators=["add", "mul"], unary_operators=["tanh"], rng=rng
        )
        assert isinstance(child, ExpressionTree)
        assert child.variables == ["x"]
    assert parent.to_string() == before


def test_unknown_mutation():
    with pytest.raises(ValueError):
        apply_mutation(linear_tree(), "teleport", rng=random.Random(0))


def test_mutate_constant_changes_exactly_one_constant():
    rng = random.Random(5)
    parent = linear_tree(2.0, 1.0)
    child = mutate_constant(parent, rng=rng)
    old = [n.value for n in parent.get_all_nodes() if n.node_type == NodeType.CONSTANT]
    new = [n.value for n in child.get_all_nodes() if n.node_type == NodeType.CONSTANT]
    assert sum(a != b for a, b in zip(old, new)) == 1


def test_hoist_and_shrink_never_grow():
    rng = random.Random(2)
    parent = linear_tree(2.0, 1.0)
    for _ in range(20):
        assert hoist_mutation(parent, rng).complexity() < parent.complexity()
        assert shrink_mutation(parent, rng).complexity() < parent.complexity()


def test_constant_optimization_fits_linear_data():
    X = np.linspace(-3, 3, 50).reshape(-1, 1)
    y = 3.0 * X[:, 0] - 2.0
    optimized = constant_optimization(linear_tree(1.0, 0.0), X, y)
    np.testing.assert_allclose(optimized.evaluate(X), y, atol=1e-2)


def test_constant_optimization_without_constants_is_a_copy():
    tree = ExpressionTree(root=ExpressionNode(NodeType.VARIABLE, "x"), variables=["x"])
    X = np.arange(5.0).reshape(-1, 1)
    optimized = constant_optimization(tree, X, X[:, 0] * 2)
    assert optimized is not tree
    assert optimized.to_string() == "x"


def test_crossover_respects_maxsize():
    rng = random.Random(1)
    for _ in range(30):
        a = ExpressionTree.random_tree(["x"], 4, rng=rng)
        b = ExpressionTree.random_tree(["x"], 4, rng=rng)
        for child in crossover(a, b, maxsize=9, rng=rng):
            assert child.complexity() <= max(9, a.complexity(), b.complexity())


def test_tournament_selection_picks_lowest_score():
    population = [linear_tree(float(i)) for i in range(5)]
    for i, tree in enumerate(population):
        tree.score = float(10 - i)
    winner = tournament_selection(population, tournament_size=5, rng=random.Random(0))
    assert winner is population[-1]
