from .linear import LinearBaseline
from .linear import fit_linear_baseline

__all__ = ["LinearBaseline", "fit_linear_baseline"]
