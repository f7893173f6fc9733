"""MoodGP package: mood diary analysis with genetic programming regression."""

__version__ = "1.0.0"

from . import analysis, config, logging_config, regression, symbolic_regression, types
from .analysis import prepare_analysis
from .analysis import run_analysis
from .regression import fit_linear_baseline
from .symbolic_regression import SearchOptions
from .symbolic_regression import SymbolicRegressor
from .symbolic_regression import calculate_pareto_frontier
from .symbolic_regression import equation_search
from .utils.data_loading import load_dataset

__all__ = [
    "config",
    "analysis",
    "regression",
    "symbolic_regression",
    "types",
    "logging_config",
    "load_dataset",
    "prepare_analysis",
    "run_analysis",
    "fit_linear_baseline",
    "SearchOptions",
    "SymbolicRegressor",
    "equation_search",
    "calculate_pareto_frontier",
]
