"""Genetic Programming Symbolic Regression Engine.

Several independent populations evolve under a least-squares loss with a
small parsimony penalty. After every iteration the best members migrate
between populations and the hall of fame records the best equation of each
complexity. The Pareto frontier is computed from the hall of fame at the end.
"""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass
from dataclasses import field

import numpy as np
import pandas as pd

from ..config import GP_BINARY_OPERATORS
from ..config import GP_GENERATIONS_PER_ITERATION
from ..config import GP_MAXSIZE
from ..config import GP_NITERATIONS
from ..config import GP_NPOPULATIONS
from ..config import GP_PARSIMONY
from ..config import GP_POPULATION_SIZE
from ..config import GP_SEED
from ..config import GP_TIMEOUT
from ..config import GP_UNARY_OPERATORS
from ..types import NotFittedError
from ..types import ValidationError
from .expression_tree import BINARY_OPERATORS
from .expression_tree import UNARY_OPERATORS
from .expression_tree import ExpressionTree
from .expression_tree import canonical_operator
from .expression_tree import node_to_symbolic
from .hall_of_fame import HallOfFame
from .operators import apply_mutation
from .operators import constant_optimization
from .operators import crossover
from .operators import tournament_selection
from .pareto_front import ParetoFront
from .pareto_front import ParetoSolution
from .pareto_front import dominating_solutions

logger = logging.getLogger(__name__)


@dataclass
class SearchOptions:
    """Configuration for the equation search."""

    binary_operators: list[str] = field(default_factory=lambda: list(GP_BINARY_OPERATORS))
    unary_operators: list[str] = field(default_factory=lambda: list(GP_UNARY_OPERATORS))
    npopulations: int = GP_NPOPULATIONS
    population_size: int = GP_POPULATION_SIZE
    generations_per_iteration: int = GP_GENERATIONS_PER_ITERATION
    maxsize: int = GP_MAXSIZE
    max_initial_depth: int = 4
    parsimony: float = GP_PARSIMONY
    tournament_size: int = 10
    crossover_rate: float = 0.2
    elitism: int = 2
    migration_rate: float = 0.05  # Share of each population replaced by migrants
    hof_migration_rate: float = 0.02  # Share replaced by hall-of-fame members
    optimize_probability: float = 0.1  # Chance per generation to optimize constants
    optimize_top: int = 3  # How many of the best get their constants optimized
    seed: int | None = GP_SEED
    timeout: float | None = GP_TIMEOUT
    verbose: bool = True

    def __post_init__(self):
        try:
            self.binary_operators = [canonical_operator(op) for op in self.binary_operators]
            self.unary_operators = [canonical_operator(op) for op in self.unary_operators]
        except ValueError as e:
            raise ValidationError(str(e)) from e
        if not self.binary_operators or any(
            op not in BINARY_OPERATORS for op in self.binary_operators
        ):
            raise ValidationError(
                f"Invalid binary operators: {self.binary_operators}"
            )
        if any(op not in UNARY_OPERATORS for op in self.unary_operators):
            raise ValidationError(f"Invalid unary operators: {self.unary_operators}")
        if self.npopulations < 1:
            raise ValidationError("npopulations must be at least 1")
        if self.population_size < max(2, self.elitism + 1):
            raise ValidationError(
                f"population_size must exceed elitism ({self.elitism}), "
                f"got {self.population_size}"
            )
        if self.maxsize < 1:
            raise ValidationError("maxsize must be at least 1")


def _check_data(X, y) -> tuple[np.ndarray, np.ndarray]:
    X = np.asarray(X, dtype=float)
    y = np.asarray(y, dtype=float).ravel()
    if X.ndim == 1:
        X = X.reshape(-1, 1)
    if X.ndim != 2:
        raise ValidationError(f"X must be 2-dimensional, got shape {X.shape}")
    if X.shape[0] != y.shape[0]:
        raise ValidationError(
            f"X has {X.shape[0]} samples but y has {y.shape[0]}"
        )
    if X.shape[0] == 0:
        raise ValidationError("Cannot search on an empty dataset")
    if not (np.all(np.isfinite(X)) and np.all(np.isfinite(y))):
        raise ValidationError("X and y must not contain NaN or infinite values")
    return X, y


def _evaluate(tree: ExpressionTree, X: np.ndarray, y: np.ndarray, parsimony: float):
    """Set the tree's loss (MSE, inf if incomplete) and selection score."""
    pred, complete = tree.eval_tree_array(X)
    if complete:
        with np.errstate(over="ignore", invalid="ignore"):
            loss = float(np.mean((pred - y) ** 2))
        tree.loss = loss if np.isfinite(loss) else float("inf")
    else:
        tree.loss = float("inf")
    tree.score = tree.loss + parsimony * tree.complexity()


class _Search:
    """State of one equation search."""

    def __init__(self, X, y, variable_names, options: SearchOptions):
        self.X = X
        self.y = y
        self.variables = variable_names
        self.options = options
        self.rng = random.Random(options.seed)
        self.hall_of_fame = HallOfFame(maxsize=options.maxsize)
        self.generation = 0

    def random_member(self, depth: int, method: str) -> ExpressionTree:
        opts = self.options
        tree = ExpressionTree.random_tree(
            variables=self.variables,
            max_depth=depth,
            binary_operators=opts.binary_operators,
            unary_operators=opts.unary_operators,
            method=method,
            rng=self.rng,
        )
        while tree.complexity() > opts.maxsize:
            depth = max(1, depth - 1)
            tree = ExpressionTree.random_tree(
                self.variables,
                depth,
                opts.binary_operators,
                opts.unary_operators,
                "grow",
                self.rng,
            )
        _evaluate(tree, self.X, self.y, opts.parsimony)
        return tree

    def initialize_population(self) -> list[ExpressionTree]:
        """Ramped half-and-half: vary depth and method."""
        opts = self.options
        depths = range(1, opts.max_initial_depth + 1)
        methods = ["grow", "full"]
        return [
            self.random_member(depths[i % len(depths)], methods[i % len(methods)])
            for i in range(opts.population_size)
        ]

    def breed(self, population: list[ExpressionTree], temperature: float) -> list[ExpressionTree]:
        """Produce the next generation of one population."""
        opts = self.options
        rng = self.rng
        population.sort(key=lambda t: t.score)
        new_population = [t.copy() for t in population[: opts.elitism]]

        while len(new_population) < opts.population_size:
            parent = tournament_selection(population, opts.tournament_size, rng)
            if rng.random() < opts.crossover_rate:
                other = tournament_selection(population, opts.tournament_size, rng)
                children = crossover(parent, other, opts.maxsize, rng)
            else:
                child = apply_mutation(
                    parent,
                    binary_operators=opts.binary_operators,
                    unary_operators=opts.unary_operators,
                    temperature=temperature,
                    rng=rng,
                )
                # Oversized offspring are discarded in favour of the parent
                children = (child if child.complexity() <= opts.maxsize else parent.copy(),)

            for child in children:
                if len(new_population) >= opts.population_size:
                    break
                child.birth = self.generation
                _evaluate(child, self.X, self.y, opts.parsimony)
                new_population.append(child)

        if rng.random() < opts.optimize_probability:
            new_population.sort(key=lambda t: t.score)
            for i in range(min(opts.optimize_top, len(new_population))):
                optimized = constant_optimization(new_population[i], self.X, self.y)
                _evaluate(optimized, self.X, self.y, opts.parsimony)
                if optimized.score < new_population[i].score:
                    new_population[i] = optimized

        return new_population

    def migrate(self, populations: list[list[ExpressionTree]]):
        """Ring migration of the best members, plus hall-of-fame reintroduction."""
        opts = self.options
        rng = self.rng
        size = opts.population_size

        if len(populations) > 1:
            n_migrants = max(1, int(opts.migration_rate * size))
            emigrants = [
                [t.copy() for t in sorted(pop, key=lambda t: t.score)[:n_migrants]]
                for pop in populations
            ]
            for i, pop in enumerate(populations):
                incoming = emigrants[i - 1]
                pop.sort(key=lambda t: t.score)
                pop[size - len(incoming) :] = incoming

        famous = self.hall_of_fame.members()
        n_famous = int(opts.hof_migration_rate * size)
        if famous and n_famous:
            for pop in populations:
                for _ in range(n_famous):
                    idx = rng.randrange(opts.elitism, size)
                    member = rng.choice(famous).copy()
                    _evaluate(member, self.X, self.y, opts.parsimony)
                    pop[idx] = member

    def run(self, niterations: int) -> HallOfFame:
        opts = self.options
        log = logger.info if opts.verbose else logger.debug
        start_time = time.time()

        populations = [self.initialize_population() for _ in range(opts.npopulations)]
        for pop in populations:
            self.hall_of_fame.update_all(pop)
        log(
            "Starting equation search with %d populations of %d, %d iterations",
            opts.npopulations,
            opts.population_size,
            niterations,
        )

        timed_out = False
        for iteration in range(niterations):
            for p, pop in enumerate(populations):
                for gen in range(opts.generations_per_iteration):
                    if opts.timeout and (time.time() - start_time) > opts.timeout:
                        timed_out = True
                        break
                    self.generation += 1
                    # Anneal constant step size over each iteration
                    temperature = 1.0 - gen / max(1, opts.generations_per_iteration)
                    pop = self.breed(pop, temperature)
                populations[p] = pop
                self.hall_of_fame.update_all(pop)
                if timed_out:
                    break

            if timed_out:
                log("Timeout after %.1fs in iteration %d", opts.timeout, iteration + 1)
                break

            self.migrate(populations)
            best = self.hall_of_fame.best()
            log(
                "Iteration %d/%d: best loss %.6g (%s), hall of fame %d",
                iteration + 1,
                niterations,
                best.loss if best else float("inf"),
                best.to_string() if best else "-",
                len(self.hall_of_fame),
            )

        return self.hall_of_fame


def equation_search(
    X,
    y,
    niterations: int = GP_NITERATIONS,
    variable_names: list[str] | None = None,
    options: SearchOptions | None = None,
) -> HallOfFame:
    """Search for equations predicting ``y`` from the columns of ``X``.

    Args:
        X: Input data of shape (n_samples, n_features)
        y: Target values of shape (n_samples,)
        niterations: Number of evolve/migrate rounds
        variable_names: Names of the columns (default: x0, x1, ...)
        options: Search configuration

    Returns:
        Hall of fame with the best equation found for each complexity
    """
    X, y = _check_data(X, y)
    if niterations < 1:
        raise ValidationError(f"niterations must be at least 1, got {niterations}")
    if variable_names is None:
        variable_names = [f"x{i}" for i in range(X.shape[1])]
    if len(variable_names) != X.shape[1]:
        raise ValidationError(
            f"Got {len(variable_names)} variable names for {X.shape[1]} columns"
        )
    options = options or SearchOptions()
    return _Search(X, y, list(variable_names), options).run(niterations)


def calculate_pareto_frontier(
    X,
    y,
    hall_of_fame: HallOfFame,
    options: SearchOptions | None = None,
) -> list[ParetoSolution]:
    """Dominating equations of the hall of fame, simplest first.

    Losses are recomputed on ``(X, y)``; an equation is kept only if its loss
    is strictly lower than that of every simpler member.
    """
    X, y = _check_data(X, y)
    parsimony = (options or SearchOptions()).parsimony
    candidates = []
    for member in hall_of_fame.members():
        tree = member.copy()
        _evaluate(tree, X, y, parsimony)
        candidates.append(
            ParetoSolution(
                expression=tree.to_string(),
                sympy_expr=node_to_symbolic(tree),
                loss=tree.loss,
                complexity=tree.complexity(),
                tree=tree,
            )
        )
    return dominating_solutions(candidates)


class SymbolicRegressor:
    """Equation search plus Pareto frontier behind a fit/predict interface.

    Example:
        >>> regressor = SymbolicRegressor(SearchOptions(seed=1), niterations=2)
        >>> X = np.linspace(0, 10, 100).reshape(-1, 1)
        >>> y = 3 * X[:, 0] + 1
        >>> regressor.fit(X, y, variable_names=['x']).best.sympy_expr
    """

    def __init__(self, options: SearchOptions | None = None, niterations: int = GP_NITERATIONS):
        self.options = options or SearchOptions()
        self.niterations = niterations
        self.hall_of_fame: HallOfFame | None = None
        self.dominating: list[ParetoSolution] = []
        self.pareto_front = ParetoFront()
        self.variable_names: list[str] = []

    def fit(self, X, y, variable_names: list[str] | None = None) -> SymbolicRegressor:
        if variable_names is None and isinstance(X, pd.DataFrame):
            variable_names = [str(c) for c in X.columns]
        X = np.asarray(X, dtype=float)
        if X.ndim == 1:
            X = X.reshape(-1, 1)
        self.variable_names = list(variable_names or [f"x{i}" for i in range(X.shape[1])])
        self.hall_of_fame = equation_search(
            X, y, self.niterations, self.variable_names, self.options
        )
        self.dominating = calculate_pareto_frontier(X, y, self.hall_of_fame, self.options)
        self.pareto_front = ParetoFront(self.dominating)
        if self.options.verbose:
            logger.info("%d dominating equations", len(self.dominating))
        return self

    def _check_fitted(self):
        if not self.dominating:
            raise NotFittedError("Model not fitted. Call fit() first.")

    @property
    def best(self) -> ParetoSolution:
        """Dominating equation with the lowest training loss."""
        self._check_fitted()
        return min(self.dominating, key=lambda s: s.loss)

    @property
    def simplest(self) -> ParetoSolution:
        """Dominating equation with the fewest nodes."""
        self._check_fitted()
        return self.dominating[0]

    def predict(self, X, solution: ParetoSolution | None = None) -> np.ndarray:
        """Predict with ``solution`` (default: the best dominating equation)."""
        solution = solution or self.best
        return solution.tree.evaluate(np.asarray(X, dtype=float))
