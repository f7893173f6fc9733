"""Numeric helpers for daily time series.

All windows are trailing: the value for day ``i`` only looks at days up to
``i`` (or up to ``i - 1`` with ``only_past``), so the output is shorter than
the input by the window length.
"""

from __future__ import annotations

import numpy as np

from ..types import ValidationError


def _check_window(n: int) -> None:
    if not isinstance(n, (int, np.integer)) or n < 1:
        raise ValidationError(f"Window length must be a positive integer, got {n!r}")


def scale(A: np.ndarray) -> np.ndarray:
    """Center and scale columns to mean 0 and (sample) standard deviation 1."""
    A = np.asarray(A, dtype=float)
    std = A.std(axis=0, ddof=1)
    std = np.where(std == 0, 1.0, std)
    return (A - A.mean(axis=0)) / std


def _windows(data: np.ndarray, n: int, only_past: bool) -> np.ndarray:
    shift = 1 if only_past else 0
    if len(data) < n + shift:
        return np.empty((0, n))
    windows = np.lib.stride_tricks.sliding_window_view(data, n)
    # The last window contains the current day; drop it when looking only at the past
    return windows[: len(windows) - shift]


def n_days_average(data, n: int = 10, only_past: bool = False) -> np.ndarray:
    """Moving average of the last ``n`` days, either in- or excluding the current day.

    A window whose first day is missing yields NaN.
    """
    _check_window(n)
    data = np.asarray(data, dtype=float)
    windows = _windows(data, n, only_past)
    if windows.size == 0:
        return np.empty(0)
    result = windows.sum(axis=1) / n
    result[np.isnan(windows[:, 0])] = np.nan
    return result


def n_days_variance(data, n: int = 10, only_past: bool = False) -> np.ndarray:
    """Sample variance of the last ``n`` days, either in- or excluding the current day."""
    _check_window(n)
    data = np.asarray(data, dtype=float)
    windows = _windows(data, n, only_past)
    if windows.size == 0:
        return np.empty(0)
    if n == 1:
        return np.full(len(windows), np.nan)
    return windows.var(axis=1, ddof=1)


def smooth(data, smoothness: int = 10) -> np.ndarray:
    """Smooth by averaging neighbouring points ``smoothness`` times."""
    if smoothness < 0:
        raise ValidationError(f"Smoothness must be >= 0, got {smoothness}")
    result = np.asarray(data, dtype=float)
    for _ in range(smoothness):
        result = n_days_average(result, n=2)
    return result[1:]


def mean_squared_error(y_true, y_pred) -> float:
    """MSE that reports ``inf`` instead of raising on non-finite predictions."""
    from sklearn.metrics import mean_squared_error as _sk_mse

    y_true = np.asarray(y_true, dtype=float)
    y_pred = np.asarray(y_pred, dtype=float)
    if y_true.shape != y_pred.shape:
        raise ValidationError(
            f"Shape mismatch: y_true {y_true.shape} vs y_pred {y_pred.shape}"
        )
    if not np.all(np.isfinite(y_pred)):
        return float("inf")
    return float(_sk_mse(y_true, y_pred))
