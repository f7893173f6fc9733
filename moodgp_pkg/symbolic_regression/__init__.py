"""Symbolic Regression Module.

This module provides genetic programming-based symbolic regression
for discovering mathematical equations from data.

Main Components:
    - ExpressionTree: Tree-based representation of mathematical expressions
    - equation_search: Evolves several populations and fills a HallOfFame
    - calculate_pareto_frontier: Dominating equations of a hall of fame
    - SymbolicRegressor: fit/predict wrapper around both

Example:
    >>> from moodgp_pkg.symbolic_regression import (
    ...     SearchOptions, calculate_pareto_frontier, equation_search)
    >>> import numpy as np
    >>> X = np.random.randn(100, 2)
    >>> y = 2 * np.tanh(X[:, 0]) + X[:, 1]
    >>> options = SearchOptions(npopulations=2, seed=0)
    >>> hof = equation_search(X, y, niterations=2, variable_names=['a', 'b'], options=options)
    >>> dominating = calculate_pareto_frontier(X, y, hof, options)
    >>> print(dominating[-1].sympy_expr)
"""

from .expression_tree import BINARY_OPERATORS
from .expression_tree import UNARY_OPERATORS
from .expression_tree import ExpressionNode
from .expression_tree import ExpressionTree
from .expression_tree import NodeType
from .expression_tree import node_to_symbolic
from .genetic_engine import SearchOptions
from .genetic_engine import SymbolicRegressor
from .genetic_engine import calculate_pareto_frontier
from .genetic_engine import equation_search
from .hall_of_fame import HallOfFame
from .operators import apply_mutation
from .operators import constant_optimization
from .operators import crossover
from .operators import hoist_mutation
from .operators import insert_mutation
from .operators import mutate_constant
from .operators import point_mutation
from .operators import shrink_mutation
from .operators import subtree_mutation
from .operators import tournament_selection
from .pareto_front import ParetoFront
from .pareto_front import ParetoSolution
from .pareto_front import dominating_solutions

__all__ = [
    # Expression Trees
    "ExpressionTree",
    "ExpressionNode",
    "NodeType",
    "UNARY_OPERATORS",
    "BINARY_OPERATORS",
    "node_to_symbolic",
    # Genetic Operators
    "mutate_constant",
    "point_mutation",
    "subtree_mutation",
    "insert_mutation",
    "hoist_mutation",
    "shrink_mutation",
    "constant_optimization",
    "crossover",
    "tournament_selection",
    "apply_mutation",
    # Hall of fame and Pareto optimization
    "HallOfFame",
    "ParetoFront",
    "ParetoSolution",
    "dominating_solutions",
    # Main Algorithm
    "SearchOptions",
    "equation_search",
    "calculate_pareto_frontier",
    "SymbolicRegressor",
]
