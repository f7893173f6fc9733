from moodgp_pkg.symbolic_regression.expression_tree import ExpressionNode
from moodgp_pkg.symbolic_regression.expression_tree import ExpressionTree
from moodgp_pkg.symbolic_regression.expression_tree import NodeType
from moodgp_pkg.symbolic_regression.hall_of_fame import HallOfFame


def make_tree(n_nodes, loss):
    """A chain of negations over x with ``n_nodes`` nodes."""
    node = ExpressionNode(NodeType.VARIABLE, "x")
    for _ in range(n_nodes - 1):
        node = ExpressionNode(NodeType.UNARY_OP, "neg", [node])
    return ExpressionTree(root=node, variables=["x"], loss=loss)


def test_keeps_best_per_complexity():
    hof = HallOfFame(maxsize=10)
    assert hof.update(make_tree(3, 2.0))
    assert hof.update(make_tree(3, 1.0))
    assert not hof.update(make_tree(3, 1.5))
    assert len(hof) == 1
    assert hof.members()[0].loss == 1.0


def test_rejects_oversized_and_non_finite():
    hof = HallOfFame(maxsize=4)
    assert not hof.update(make_tree(5, 0.1))
    assert not hof.update(make_tree(2, float("inf")))
    assert not hof.update(make_tree(2, float("nan")))
    assert len(hof) == 0
    assert hof.best() is None


def test_members_sorted_by_complexity():
    hof = HallOfFame()
    hof.update_all([make_tree(5, 0.5), make_tree(1, 3.0), make_tree(3, 1.0)])
    assert [t.complexity() for t in hof] == [1, 3, 5]
    assert 3 in hof
    assert 2 not in hof
    assert hof.best().loss == 0.5


def test_members_are_copies():
    hof = HallOfFame()
    tree = make_tree(2, 1.0)
    hof.update(tree)
    tree.root.value = "abs"
    assert hof.members()[0].root.value == "neg"
