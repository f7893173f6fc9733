import random

import numpy as np
import pytest
import sympy as sp

from moodgp_pkg.symbolic_regression.expression_tree import ExpressionNode
from moodgp_pkg.symbolic_regression.expression_tree import ExpressionTree
from moodgp_pkg.symbolic_regression.expression_tree import NodeType
from moodgp_pkg.symbolic_regression.expression_tree import canonical_operator
from moodgp_pkg.symbolic_regression.expression_tree import node_to_symbolic


def const(value):
    return ExpressionNode(NodeType.CONSTANT, value)


def var(name):
    return ExpressionNode(NodeType.VARIABLE, name)


def binary(op, left, right):
    return ExpressionNode(NodeType.BINARY_OP, op, [left, right])


def unary(op, child):
    return ExpressionNode(NodeType.UNARY_OP, op, [child])


@pytest.fixture
def tree():
    # tanh(a) * 2 + b
    root = binary("add", binary("mul", unary("tanh", var("a")), const(2.0)), var("b"))
    return ExpressionTree(root=root, variables=["a", "b"])


def test_evaluate_uses_column_order(tree):
    X = np.array([[0.0, 1.0], [1.0, -1.0]])
    expected = np.tanh(X[:, 0]) * 2 + X[:, 1]
    np.testing.assert_allclose(tree.evaluate(X), expected)


def test_relu_operator():
    t = ExpressionTree(root=unary("relu", var("x")), variables=["x"])
    np.testing.assert_array_equal(t.evaluate(np.array([-2.0, 0.0, 3.0])), [0.0, 0.0, 3.0])


def test_incomplete_evaluation_is_flagged():
    """Division by zero on one sample makes the whole evaluation incomplete."""
    t = ExpressionTree(root=binary("div", const(1.0), var("x")), variables=["x"])
    pred, complete = t.eval_tree_array(np.array([[1.0], [0.0]]))
    assert not complete
    assert pred[0] == 1.0


def test_complete_evaluation():
    t = ExpressionTree(root=binary("pow", var("x"), const(2.0)), variables=["x"])
    pred, complete = t.eval_tree_array(np.array([[3.0], [-1.0]]))
    assert complete
    np.testing.assert_allclose(pred, [9.0, 1.0])


def test_negative_base_fractional_power_is_incomplete():
    t = ExpressionTree(root=binary("pow", var("x"), const(0.5)), variables=["x"])
    _, complete = t.eval_tree_array(np.array([[-4.0]]))
    assert not complete


def test_complexity_and_depth(tree):
    assert tree.complexity() == 6
    assert tree.depth() == 4


def test_to_string(tree):
    assert tree.to_string() == "((tanh(a) * 2) + b)"


def test_to_sympy(tree):
    a, b = sp.symbols("a b")
    assert sp.simplify(tree.to_sympy() - (2 * sp.tanh(a) + b)) == 0


def test_relu_to_sympy():
    t = ExpressionTree(root=unary("relu", var("x")), variables=["x"])
    assert t.to_sympy() == sp.Max(0, sp.Symbol("x"))


def test_node_to_symbolic_renames_positionally(tree):
    expr = node_to_symbolic(tree, ["wellbeingPast2", "exercisePast7"])
    names = {s.name for s in expr.free_symbols}
    assert names == {"wellbeingPast2", "exercisePast7"}


def test_copy_is_independent(tree):
    clone = tree.copy()
    clone.get_all_nodes()[-1].value = "a"
    assert tree.to_string() == "((tanh(a) * 2) + b)"


def test_get_all_nodes_root_first(tree):
    nodes = tree.get_all_nodes()
    assert nodes[0] is tree.root
    assert len(nodes) == tree.complexity()


def test_replace_subtree(tree):
    target = tree.root.children[0]
    tree.replace_subtree(target, var("a"))
    assert tree.to_string() == "(a + b)"
    assert tree.root.children[0].parent is tree.root


def test_replace_root(tree):
    tree.replace_subtree(tree.root, const(1.0))
    assert tree.complexity() == 1
    assert tree.root.parent is None


def test_fold_constants():
    root = binary("add", var("x"), binary("mul", const(2.0), const(3.0)))
    t = ExpressionTree(root=root, variables=["x"])
    t.fold_constants()
    assert t.to_string() == "(x + 6)"


def test_fold_constants_keeps_non_finite_structure():
    root = binary("div", const(1.0), const(0.0))
    t = ExpressionTree(root=root, variables=["x"])
    t.fold_constants()
    assert t.complexity() == 3


@pytest.mark.parametrize("method", ["grow", "full"])
def test_random_tree_respects_depth(method):
    rng = random.Random(3)
    for _ in range(20):
        t = ExpressionTree.random_tree(
            ["a", "b"], max_depth=3, unary_operators=["tanh"], method=method, rng=rng
        )
        assert t.depth() <= 3


def test_random_tree_reproducible():
    first = ExpressionTree.random_tree(["a"], 4, rng=random.Random(11))
    second = ExpressionTree.random_tree(["a"], 4, rng=random.Random(11))
    assert first.to_string() == second.to_string()


def test_canonical_operator():
    assert canonical_operator("+") == "add"
    assert canonical_operator("**") == "pow"
    assert canonical_operator("tanh") == "tanh"
    with pytest.raises(ValueError):
        canonical_operator("frobnicate")
