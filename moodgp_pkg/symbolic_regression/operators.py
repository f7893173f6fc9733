"""Genetic operators for evolving expression trees.

This module implements mutation and crossover operators for genetic programming:
- Constant mutation: Nudge one constant
- Point mutation: Replace nodes with others of same arity
- Subtree mutation: Replace a subtree with a random new one
- Insert mutation: Wrap a node in a new operator
- Hoist mutation: Replace tree with one of its subtrees (simplification)
- Shrink mutation: Replace an operator subtree with a terminal
- Constant optimization: Fit all constants at once with Nelder-Mead
- Crossover: Swap subtrees between two parent trees

Every operator returns a new tree and leaves its input untouched.
"""

from __future__ import annotations

import random

import numpy as np
from scipy.optimize import minimize

from .expression_tree import ExpressionNode
from .expression_tree import ExpressionTree
from .expression_tree import NodeType
from .expression_tree import random_constant


def mutate_constant(
    tree: ExpressionTree, temperature: float = 1.0, rng: random.Random | None = None
) -> ExpressionTree:
    """Multiply or divide one random constant by a factor close to 1.

    Higher ``temperature`` allows larger steps; occasionally the sign flips.
    """
    rng = rng or random
    new_tree = tree.copy()
    constants = [n for n in new_tree.get_all_nodes() if n.node_type == NodeType.CONSTANT]
    if not constants:
        return new_tree

    node = rng.choice(constants)
    factor = (1.0 + 0.5 * rng.random() * temperature) ** (1 if rng.random() < 0.5 else -1)
    node.value = float(node.value) * factor
    if rng.random() < 0.05:
        node.value = -node.value
    return new_tree


def point_mutation(
    tree: ExpressionTree,
    mutation_rate: float = 0.1,
    binary_operators: list[str] | None = None,
    unary_operators: list[str] | None = None,
    rng: random.Random | None = None,
) -> ExpressionTree:
    """Point mutation: Replace operators/terminals with others of same arity.

    Args:
        tree: Tree to mutate
        mutation_rate: Probability of mutating each node
        binary_operators: Allowed binary operators
        unary_operators: Allowed unary operators
        rng: Random generator

    Returns:
        Mutated tree (new copy)
    """
    rng = rng or random
    binary_ops = list(binary_operators or ["add", "sub", "mul", "div"])
    unary_ops = list(unary_operators or [])
    new_tree = tree.copy()

    for node in new_tree.get_all_nodes():
        if rng.random() > mutation_rate:
            continue

        if node.node_type == NodeType.CONSTANT:
            node.value = random_constant(rng)
        elif node.node_type == NodeType.VARIABLE:
            other_vars = [v for v in tree.variables if v != node.value]
            if other_vars:
                node.value = rng.choice(other_vars)
        elif node.node_type == NodeType.UNARY_OP:
            if unary_ops:
                node.value = rng.choice(unary_ops)
        else:
            node.value = rng.choice(binary_ops)

    return new_tree


def subtree_mutation(
    tree: ExpressionTree,
    max_depth: int = 3,
    binary_operators: list[str] | None = None,
    unary_operators: list[str] | None = None,
    rng: random.Random | None = None,
) -> ExpressionTree:
    """Subtree mutation: Replace a random subtree with a new random one."""
    rng = rng or random
    new_tree = tree.copy()
    target_node = new_tree.get_random_node(rng)
    new_subtree = ExpressionTree.random_tree(
        variables=tree.variables,
        max_depth=max_depth,
        binary_operators=binary_operators,
        unary_operators=unary_operators,
        method="grow",
        rng=rng,
    ).root
    new_tree.replace_subtree(target_node, new_subtree)
    return new_tree


def insert_mutation(
    tree: ExpressionTree,
    binary_operators: list[str] | None = None,
    unary_operators: list[str] | None = None,
    rng: random.Random | None = None,
) -> ExpressionTree:
    """Wrap a random node in a new operator.

    Unary operators wrap the node directly; binary operators pair it with a
    fresh terminal on a random side.
    """
    rng = rng or random
    binary_ops = list(binary_operators or ["add", "sub", "mul", "div"])
    unary_ops = list(unary_operators or [])
    new_tree = tree.copy()
    target = new_tree.get_random_node(rng)
    replacement = target.copy_subtree()

    if unary_ops and rng.random() < 0.5:
        wrapper = ExpressionNode(NodeType.UNARY_OP, rng.choice(unary_ops), [replacement])
    else:
        if tree.variables and rng.random() < 0.5:
            terminal = ExpressionNode(NodeType.VARIABLE, rng.choice(tree.variables))
        else:
            terminal = ExpressionNode(NodeType.CONSTANT, random_constant(rng))
        children = [replacement, terminal] if rng.random() < 0.5 else [terminal, replacement]
        wrapper = ExpressionNode(NodeType.BINARY_OP, rng.choice(binary_ops), children)

    new_tree.replace_subtree(target, wrapper)
    return new_tree


def hoist_mutation(tree: ExpressionTree, rng: random.Random | None = None) -> ExpressionTree:
    """Hoist mutation: Replace tree with one of its subtrees (simplification).

    Helps prevent bloat.
    """
    rng = rng or random
    new_tree = tree.copy()
    non_root = [n for n in new_tree.get_all_nodes() if n.parent is not None]
    if not non_root:
        return new_tree

    hoisted = rng.choice(non_root).copy_subtree()
    new_tree.root = hoisted
    return new_tree


def shrink_mutation(tree: ExpressionTree, rng: random.Random | None = None) -> ExpressionTree:
    """Shrink mutation: Replace a random operator subtree with a terminal."""
    rng = rng or random
    new_tree = tree.copy()
    non_terminals = [n for n in new_tree.get_all_nodes() if not n.is_terminal]
    if not non_terminals:
        return new_tree

    target = rng.choice(non_terminals)
    if tree.variables and rng.random() < 0.5:
        replacement = ExpressionNode(NodeType.VARIABLE, rng.choice(tree.variables))
    else:
        replacement = ExpressionNode(NodeType.CONSTANT, random_constant(rng))
    new_tree.replace_subtree(target, replacement)
    return new_tree


def constant_optimization(
    tree: ExpressionTree,
    X: np.ndarray,
    y: np.ndarray,
    max_iter: int = 100,
) -> ExpressionTree:
    """Fit all constants of the tree to the data at once.

    Uses Nelder-Mead on the mean squared error. The tree is only changed if
    the fit improves on the current constants.

    Returns:
        Tree with optimized constants (new copy)
    """
    new_tree = tree.copy()
    constants = [n for n in new_tree.get_all_nodes() if n.node_type == NodeType.CONSTANT]
    if not constants:
        return new_tree

    def objective(values: np.ndarray) -> float:
        for node, value in zip(constants, values):
            node.value = float(value)
        pred, complete = new_tree.eval_tree_array(X)
        if not complete:
            return float("inf")
        with np.errstate(over="ignore", invalid="ignore"):
            loss = float(np.mean((pred - y) ** 2))
        return loss if np.isfinite(loss) else float("inf")

    start = np.array([float(n.value) for n in constants])
    start_loss = objective(start)
    result = minimize(
        objective,
        start,
        method="Nelder-Mead",
        options={"maxiter": max_iter * len(constants), "xatol": 1e-6, "fatol": 1e-9},
    )

    best = result.x if np.isfinite(result.fun) and result.fun < start_loss else start
    for node, value in zip(constants, best):
        node.value = float(value)
    return new_tree


def crossover(
    parent1: ExpressionTree,
    parent2: ExpressionTree,
    maxsize: int = 20,
    rng: random.Random | None = None,
) -> tuple[ExpressionTree, ExpressionTree]:
    """Crossover: Swap subtrees between two parent trees.

    An offspring that would exceed ``maxsize`` nodes is replaced by a copy of
    its parent.
    """
    rng = rng or random
    offspring1 = parent1.copy()
    offspring2 = parent2.copy()

    point1 = offspring1.get_random_node(rng)
    point2 = offspring2.get_random_node(rng)
    subtree1 = point1.copy_subtree()
    subtree2 = point2.copy_subtree()

    offspring1.replace_subtree(point1, subtree2)
    offspring2.replace_subtree(point2, subtree1)

    if offspring1.complexity() > maxsize:
        offspring1 = parent1.copy()
    if offspring2.complexity() > maxsize:
        offspring2 = parent2.copy()
    return offspring1, offspring2


def tournament_selection(
    population: list[ExpressionTree],
    tournament_size: int = 5,
    rng: random.Random | None = None,
) -> ExpressionTree:
    """Select the lowest-score individual from a random tournament (not a copy)."""
    rng = rng or random
    tournament = rng.sample(population, min(tournament_size, len(population)))
    return min(tournament, key=lambda t: t.score)


MUTATIONS = ("constant", "point", "subtree", "insert", "hoist", "shrink", "simplify")
# Relative frequencies, in the order of MUTATIONS
MUTATION_WEIGHTS = (0.3, 0.2, 0.1, 0.15, 0.1, 0.1, 0.05)


def apply_mutation(
    tree: ExpressionTree,
    mutation_type: str = "random",
    binary_operators: list[str] | None = None,
    unary_operators: list[str] | None = None,
    temperature: float = 1.0,
    rng: random.Random | None = None,
) -> ExpressionTree:
    """Apply one mutation to a tree.

    Args:
        tree: Tree to mutate
        mutation_type: One of MUTATIONS, or 'random' for a weighted draw
        binary_operators: Allowed binary operators
        unary_operators: Allowed unary operators
        temperature: Step size scale for constant mutation
        rng: Random generator

    Returns:
        Mutated tree (new copy)
    """
    rng = rng or random
    if mutation_type == "random":
        mutation_type = rng.choices(MUTATIONS, weights=MUTATION_WEIGHTS)[0]

    if mutation_type == "constant":
        return mutate_constant(tree, temperature, rng)
    if mutation_type == "point":
        return point_mutation(tree, 0.2, binary_operators, unary_operators, rng)
    if mutation_type == "subtree":
        return subtree_mutation(
            tree, binary_operators=binary_operators, unary_operators=unary_operators, rng=rng
        )
    if mutation_type == "insert":
        return insert_mutation(tree, binary_operators, unary_operators, rng)
    if mutation_type == "hoist":
        return hoist_mutation(tree, rng)
    if mutation_type == "shrink":
        return shrink_mutation(tree, rng)
    if mutation_type == "simplify":
        new_tree = tree.copy()
        new_tree.fold_constants()
        return new_tree
    raise ValueError(f"Unknown mutation type: {mutation_type}")
