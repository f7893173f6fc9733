"""Figures for exploring the responses and judging the predictions.

Figures are built with the object-oriented matplotlib API, so they work
headless (CLI, tests) as well as in the dashboard.
"""

from __future__ import annotations

import logging
import os

import numpy as np
import pandas as pd
from matplotlib.figure import Figure

from .utils.numeric import n_days_average
from .utils.numeric import scale
from .utils.numeric import smooth

logger = logging.getLogger(__name__)


def plot_correlation_heatmap(corr: pd.DataFrame) -> Figure:
    """Heatmap of the correlations between the response variables."""
    fig = Figure(figsize=(7, 6))
    ax = fig.add_subplot()
    image = ax.imshow(corr.to_numpy(), cmap="RdBu_r", vmin=-1, vmax=1)
    ax.set_xticks(range(len(corr.columns)), labels=corr.columns, rotation=45, ha="right")
    ax.set_yticks(range(len(corr.index)), labels=corr.index)
    ax.set_title("Correlation plot response variables")
    fig.colorbar(image, ax=ax)
    fig.tight_layout()
    return fig


def smoothed_series(values, window: int = 30, smoothing: int = 100) -> np.ndarray:
    """Scale, average over ``window`` days and smooth ``smoothing`` times."""
    scaled = scale(np.asarray(values, dtype=float).reshape(-1, 1))[:, 0]
    return smooth(n_days_average(scaled, n=window), smoothness=smoothing)


def plot_smoothed_responses(
    wellbeing,
    emotionality,
    window: int = 30,
    smoothing: int = 100,
    show_wellbeing: bool = True,
    show_emotionality: bool = False,
) -> Figure:
    """Long-term view of the response variables."""
    fig = Figure(figsize=(9, 4))
    ax = fig.add_subplot()
    series = []
    if show_wellbeing:
        series.append(("wellbeing", wellbeing))
    if show_emotionality:
        series.append(("emotionality", emotionality))
    for label, values in series:
        y = smoothed_series(values, window, smoothing)
        ax.plot(np.arange(1, len(y) + 1), y, label=label)
    ax.set_title("Response variable(s): smoothed and averaged")
    ax.set_xlabel("Day")
    ax.set_ylabel("Score")
    if series:
        ax.legend(loc="upper left")
    fig.tight_layout()
    return fig


def plot_predictions(y, y_pred, window: int = 1, smoothing: int = 0) -> Figure:
    """Original data versus model predictions, optionally averaged/smoothed."""
    y0 = smooth(n_days_average(y, n=window), smoothness=smoothing)
    y1 = smooth(n_days_average(y_pred, n=window), smoothness=smoothing)
    days = np.arange(1, len(y0) + 1)
    fig = Figure(figsize=(9, 4))
    ax = fig.add_subplot()
    ax.plot(days, y0, label="original data")
    ax.plot(days, y1, label="predictions")
    ax.set_xlabel("Day")
    ax.set_ylabel("Score")
    ax.legend(loc="upper left")
    fig.tight_layout()
    return fig


def save_figure(fig: Figure, directory: str, name: str) -> str:
    """Write ``fig`` as PNG into ``directory`` and return the path."""
    os.makedirs(directory, exist_ok=True)
    path = os.path.join(directory, f"{name}.png")
    fig.savefig(path, dpi=120)
    logger.info("Saved figure to %s", path)
    return path
