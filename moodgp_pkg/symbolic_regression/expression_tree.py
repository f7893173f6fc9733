"""Expression Tree data structure for Genetic Programming Symbolic Regression.

Equations are trees whose leaves are constants or input variables and whose
inner nodes are unary or binary operators. Evaluation is vectorised over
all samples at once and reports whether every value came out finite: an
equation that divides by zero or takes the log of a negative number on any
sample is *incomplete* and gets an infinite loss during the search.

Key Classes:
    - NodeType: Enum for terminal/operator node types
    - ExpressionNode: Single node in the expression tree
    - ExpressionTree: Complete tree with evaluation and manipulation methods
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from dataclasses import field
from enum import Enum
from enum import auto
from typing import Callable

import numpy as np
import sympy as sp


class NodeType(Enum):
    """Types of nodes in an expression tree."""

    CONSTANT = auto()  # Numeric constant (e.g., 0.31)
    VARIABLE = auto()  # Input feature (e.g., wellbeingPast7)
    UNARY_OP = auto()  # Unary operator (e.g., tanh, relu)
    BINARY_OP = auto()  # Binary operator (e.g., +, -, *, /)


def relu(x):
    return np.maximum(x, 0.0)


def square(x):
    return x * x


def cube(x):
    return x * x * x


# Operators follow real arithmetic: domain errors produce NaN/inf and are
# caught by the completeness check instead of being patched over.
UNARY_OPERATORS: dict[str, Callable[[np.ndarray], np.ndarray]] = {
    "tanh": np.tanh,
    "relu": relu,
    "neg": np.negative,
    "abs": np.abs,
    "exp": np.exp,
    "log": np.log,
    "sqrt": np.sqrt,
    "square": square,
    "cube": cube,
    "sin": np.sin,
    "cos": np.cos,
}

BINARY_OPERATORS: dict[str, Callable[[np.ndarray, np.ndarray], np.ndarray]] = {
    "add": np.add,
    "sub": np.subtract,
    "mul": np.multiply,
    "div": np.divide,
    "pow": np.power,
    "max": np.maximum,
    "min": np.minimum,
}

# Infix spelling of the binary operators
BINARY_SYMBOLS = {"add": "+", "sub": "-", "mul": "*", "div": "/", "pow": "^"}

# Accept the usual math spellings wherever operators are configured
OPERATOR_ALIASES = {"+": "add", "-": "sub", "*": "mul", "/": "div", "^": "pow", "**": "pow"}

SYMPY_UNARY: dict[str, Callable] = {
    "tanh": sp.tanh,
    "relu": lambda x: sp.Max(0, x),
    "neg": lambda x: -x,
    "abs": sp.Abs,
    "exp": sp.exp,
    "log": sp.log,
    "sqrt": sp.sqrt,
    "square": lambda x: x**2,
    "cube": lambda x: x**3,
    "sin": sp.sin,
    "cos": sp.cos,
}

SYMPY_BINARY: dict[str, Callable] = {
    "add": lambda x, y: x + y,
    "sub": lambda x, y: x - y,
    "mul": lambda x, y: x * y,
    "div": lambda x, y: x / y,
    "pow": lambda x, y: x**y,
    "max": sp.Max,
    "min": sp.Min,
}


def canonical_operator(name: str) -> str:
    """Map '+', '*', ... to the internal operator names and validate them."""
    op = OPERATOR_ALIASES.get(name.strip(), name.strip())
    if op not in UNARY_OPERATORS and op not in BINARY_OPERATORS:
        raise ValueError(f"Unknown operator: {name}")
    return op


def random_constant(rng: random.Random) -> float:
    if rng.random() < 0.2:
        return float(rng.randint(1, 3))
    return rng.gauss(0.0, 1.0)


@dataclass(eq=False)
class ExpressionNode:
    """A node in an expression tree.

    Attributes:
        node_type: Type of this node (CONSTANT, VARIABLE, UNARY_OP, BINARY_OP)
        value: For CONSTANT: the numeric value; for VARIABLE: the feature name;
               for operators: the operator name (e.g., 'add', 'tanh')
        children: List of child nodes (empty for terminals, 1 for unary, 2 for binary)
        parent: Reference to parent node (None for root)
    """

    node_type: NodeType
    value: object
    children: list[ExpressionNode] = field(default_factory=list)
    parent: ExpressionNode | None = field(default=None, repr=False)

    def __post_init__(self):
        for child in self.children:
            child.parent = self

    @property
    def is_terminal(self) -> bool:
        return self.node_type in (NodeType.CONSTANT, NodeType.VARIABLE)

    def evaluate(self, columns: dict[str, np.ndarray], n_samples: int) -> np.ndarray:
        """Evaluate this subtree on every sample.

        Args:
            columns: Feature name -> column of values
            n_samples: Number of samples (for broadcasting constants)
        """
        if self.node_type == NodeType.CONSTANT:
            return np.full(n_samples, float(self.value))

        if self.node_type == NodeType.VARIABLE:
            try:
                return columns[self.value]
            except KeyError:
                raise ValueError(f"Unknown variable: {self.value}") from None

        if self.node_type == NodeType.UNARY_OP:
            op_func = UNARY_OPERATORS.get(self.value)
            if op_func is None:
                raise ValueError(f"Unknown unary operator: {self.value}")
            return op_func(self.children[0].evaluate(columns, n_samples))

        op_func = BINARY_OPERATORS.get(self.value)
        if op_func is None:
            raise ValueError(f"Unknown binary operator: {self.value}")
        return op_func(
            self.children[0].evaluate(columns, n_samples),
            self.children[1].evaluate(columns, n_samples),
        )

    def to_sympy(self, symbols: dict[str, sp.Symbol]) -> sp.Expr:
        if self.node_type == NodeType.CONSTANT:
            return sp.Float(self.value, 6)
        if self.node_type == NodeType.VARIABLE:
            return symbols.get(self.value, sp.Symbol(self.value))
        if self.node_type == NodeType.UNARY_OP:
            return SYMPY_UNARY[self.value](self.children[0].to_sympy(symbols))
        return SYMPY_BINARY[self.value](
            self.children[0].to_sympy(symbols), self.children[1].to_sympy(symbols)
        )

    def copy_subtree(self) -> ExpressionNode:
        """Create a deep copy of this subtree (detached from any parent)."""
        return ExpressionNode(
            node_type=self.node_type,
            value=self.value,
            children=[child.copy_subtree() for child in self.children],
        )

    def count_nodes(self) -> int:
        return 1 + sum(child.count_nodes() for child in self.children)

    def depth(self) -> int:
        if not self.children:
            return 1
        return 1 + max(child.depth() for child in self.children)

    def __str__(self) -> str:
        if self.node_type == NodeType.CONSTANT:
            return f"{self.value:.5g}"
        if self.node_type == NodeType.VARIABLE:
            return str(self.value)
        if self.node_type == NodeType.UNARY_OP:
            return f"{self.value}({self.children[0]})"
        if self.value in BINARY_SYMBOLS:
            return f"({self.children[0]} {BINARY_SYMBOLS[self.value]} {self.children[1]})"
        return f"{self.value}({self.children[0]}, {self.children[1]})"


@dataclass
class ExpressionTree:
    """A candidate equation.

    Attributes:
        root: Root node of the expression tree
        variables: Feature names, in the column order of the data matrix
        loss: Cached mean squared error on the training data (lower is better)
        score: Cached loss plus parsimony penalty, used for selection
        birth: Generation counter at which this tree was created
    """

    root: ExpressionNode
    variables: list[str] = field(default_factory=lambda: ["x"])
    loss: float = field(default=float("inf"))
    score: float = field(default=float("inf"))
    birth: int = field(default=0)

    def _columns(self, X: np.ndarray) -> dict[str, np.ndarray]:
        if X.shape[1] < len(self.variables):
            raise ValueError(
                f"Data has {X.shape[1]} columns but the equation uses "
                f"{len(self.variables)} variables"
            )
        return {name: X[:, i] for i, name in enumerate(self.variables)}

    def eval_tree_array(self, X) -> tuple[np.ndarray, bool]:
        """Evaluate on a (n_samples, n_features) matrix.

        Returns:
            Tuple of (predictions, complete) where ``complete`` is False if
            any prediction is NaN or infinite
        """
        X = np.asarray(X, dtype=float)
        if X.ndim == 1:
            X = X.reshape(-1, 1)
        with np.errstate(all="ignore"):
            result = self.root.evaluate(self._columns(X), X.shape[0])
        result = np.asarray(result, dtype=float)
        return result, bool(np.all(np.isfinite(result)))

    def evaluate(self, X) -> np.ndarray:
        """Predictions only; check completeness with :meth:`eval_tree_array`."""
        return self.eval_tree_array(X)[0]

    def to_sympy(self) -> sp.Expr:
        symbols = {var: sp.Symbol(var) for var in self.variables}
        return self.root.to_sympy(symbols)

    def to_string(self) -> str:
        return str(self.root)

    def copy(self) -> ExpressionTree:
        return ExpressionTree(
            root=self.root.copy_subtree(),
            variables=self.variables,
            loss=self.loss,
            score=self.score,
            birth=self.birth,
        )

    def complexity(self) -> int:
        """Return the complexity (number of nodes) of this tree."""
        return self.root.count_nodes()

    def depth(self) -> int:
        return self.root.depth()

    def get_all_nodes(self) -> list[ExpressionNode]:
        """Flat list of all nodes, root first."""
        nodes = []
        stack = [self.root]
        while stack:
            node = stack.pop()
            nodes.append(node)
            stack.extend(reversed(node.children))
        return nodes

    def get_random_node(self, rng: random.Random | None = None) -> ExpressionNode:
        return (rng or random).choice(self.get_all_nodes())

    def replace_subtree(self, old_node: ExpressionNode, new_subtree: ExpressionNode):
        """Put ``new_subtree`` where ``old_node`` is."""
        if old_node.parent is None:
            self.root = new_subtree
            new_subtree.parent = None
            return
        parent = old_node.parent
        # Find by identity, not equality
        for i, child in enumerate(parent.children):
            if child is old_node:
                parent.children[i] = new_subtree
                new_subtree.parent = parent
                return

    def fold_constants(self):
        """Replace operator subtrees that only involve constants by their value.

        Example: (x + (2 * 3)) -> (x + 6)
        """
        self.root = self._fold_recursive(self.root)
        self.root.parent = None

    def _fold_recursive(self, node: ExpressionNode) -> ExpressionNode:
        for i, child in enumerate(node.children):
            node.children[i] = self._fold_recursive(child)
            node.children[i].parent = node

        if not node.is_terminal and all(
            c.node_type == NodeType.CONSTANT for c in node.children
        ):
            with np.errstate(all="ignore"):
                value = float(node.evaluate({}, 1)[0])
            # Keep the structure if folding would bake in a NaN/inf
            if np.isfinite(value):
                return ExpressionNode(NodeType.CONSTANT, value)
        return node

    @staticmethod
    def random_tree(
        variables: list[str],
        max_depth: int = 4,
        binary_operators: list[str] | None = None,
        unary_operators: list[str] | None = None,
        method: str = "grow",
        rng: random.Random | None = None,
    ) -> ExpressionTree:
        """Generate a random expression tree.

        Args:
            variables: Feature names
            max_depth: Maximum tree depth
            binary_operators: Allowed binary operator names (default: + - * /)
            unary_operators: Allowed unary operator names (default: none)
            method: 'grow' (variable depth) or 'full' (max depth for all branches)
            rng: Random generator (module-level ``random`` if None)
        """
        rng = rng or random
        binary_ops = list(binary_operators or ["add", "sub", "mul", "div"])
        unary_ops = list(unary_operators or [])

        def build_node(depth: int) -> ExpressionNode:
            if depth >= max_depth or (
                method == "grow" and depth > 1 and rng.random() < 0.3
            ):
                if variables and rng.random() < 0.6:
                    return ExpressionNode(NodeType.VARIABLE, rng.choice(variables))
                return ExpressionNode(NodeType.CONSTANT, random_constant(rng))

            if unary_ops and rng.random() < 0.25:
                return ExpressionNode(
                    NodeType.UNARY_OP, rng.choice(unary_ops), [build_node(depth + 1)]
                )
            return ExpressionNode(
                NodeType.BINARY_OP,
                rng.choice(binary_ops),
                [build_node(depth + 1), build_node(depth + 1)],
            )

        return ExpressionTree(root=build_node(1), variables=variables)

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"ExpressionTree({self.to_string()}, loss={self.loss:.6g})"


def node_to_symbolic(tree: ExpressionTree, variable_names: list[str] | None = None) -> sp.Expr:
    """Convert a tree to SymPy, optionally renaming its variables.

    ``variable_names`` is positional: the i-th name replaces the tree's i-th variable.
    """
    if variable_names is None:
        return tree.to_sympy()
    symbols = {
        old: sp.Symbol(new) for old, new in zip(tree.variables, variable_names)
    }
    return tree.root.to_sympy(symbols)
