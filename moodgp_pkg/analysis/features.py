"""Lagged/aggregated predictor features.

For every aggregation period ``p`` the average of the past ``p`` days is
computed for both response variables and the habit predictors, and the
variance of the past ``p`` days for sleep duration and wake-up time. The
current day is never part of its own features.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from dataclasses import field

import numpy as np
import pandas as pd

from ..config import AGGREGATION_PERIODS
from ..types import ValidationError
from ..utils.numeric import n_days_average
from ..utils.numeric import n_days_variance

logger = logging.getLogger(__name__)

# (feature base name, source series, aggregation)
FEATURE_BASES = [
    ("wellbeing", "wellbeing", "mean"),
    ("emotionality", "emotionality", "mean"),
    ("meditation", "meditation", "mean"),
    ("exercise", "exercise", "mean"),
    ("sleepDuration", "sleepDuration", "mean"),
    ("sleepEnd", "sleepEnd", "mean"),
    ("sleepDurationVar", "sleepDuration", "var"),
    ("sleepEndVar", "sleepEnd", "var"),
]


@dataclass
class FeatureSet:
    """Feature matrix with tail-aligned targets.

    Attributes:
        X: One row per day, one column per feature
        targets: Response name -> target array aligned with ``X``
        periods: Aggregation periods the features were built from
    """

    X: pd.DataFrame
    targets: dict[str, np.ndarray]
    periods: list[int] = field(default_factory=list)

    @property
    def feature_names(self) -> list[str]:
        return list(self.X.columns)

    def target(self, name: str) -> np.ndarray:
        if name not in self.targets:
            raise ValidationError(
                f"Unknown response variable '{name}'; "
                f"choose from {', '.join(self.targets)}"
            )
        return self.targets[name]

    def __len__(self) -> int:
        return len(self.X)


def feature_names(periods: list[int]) -> list[str]:
    """Names of the generated features, in column order."""
    return [f"{base}Past{p}" for p in periods for base, _, _ in FEATURE_BASES]


def build_feature_matrix(
    wellbeing: np.ndarray,
    emotionality: np.ndarray,
    predictor: pd.DataFrame,
    periods: list[int] | None = None,
) -> FeatureSet:
    """Aggregate past data points into a feature matrix.

    Args:
        wellbeing: Daily wellbeing score (full length)
        emotionality: Daily emotionality score (full length)
        predictor: Cropped predictor frame; its last row is the same day as
            the last entry of the response series
        periods: Aggregation periods in days

    Returns:
        FeatureSet whose rows all refer to the same, most recent days
    """
    periods = list(periods or AGGREGATION_PERIODS)
    if not periods:
        raise ValidationError("At least one aggregation period is required")

    sources = {
        "wellbeing": np.asarray(wellbeing, dtype=float),
        "emotionality": np.asarray(emotionality, dtype=float),
    }
    for column in ("meditation", "exercise", "sleepDuration", "sleepEnd"):
        sources[column] = predictor[column].to_numpy(dtype=float)

    new_vars = []
    for p in periods:
        for _, source, aggregation in FEATURE_BASES:
            aggregate = n_days_average if aggregation == "mean" else n_days_variance
            new_vars.append(aggregate(sources[source], n=p, only_past=True))

    # Crop the new variables to be of the same size (aligned on the last day)
    min_size = min(len(v) for v in new_vars)
    if min_size == 0:
        raise ValidationError(
            f"Not enough days ({len(predictor)}) for an aggregation period of "
            f"{max(periods)} days"
        )
    columns = {
        name: values[len(values) - min_size :]
        for name, values in zip(feature_names(periods), new_vars)
    }
    X = pd.DataFrame(columns)

    targets = {
        name: sources[name][len(sources[name]) - min_size :]
        for name in ("wellbeing", "emotionality")
    }

    complete = X.notna().all(axis=1).to_numpy(copy=True)
    for values in targets.values():
        complete = complete & ~np.isnan(values)
    n_incomplete = int((~complete).sum())
    if n_incomplete:
        logger.warning("Dropping %d rows with missing feature values", n_incomplete)
        X = X[complete].reset_index(drop=True)
        targets = {name: values[complete] for name, values in targets.items()}

    logger.info("Built %d features over %d days", X.shape[1], X.shape[0])
    return FeatureSet(X=X, targets=targets, periods=periods)


def train_test_split_every_kth(n: int, k: int = 4) -> tuple[np.ndarray, np.ndarray]:
    """Row indices for a deterministic split: rows 0, k, 2k, ... form the test set.

    Returns:
        Tuple of (train indices, test indices)
    """
    if k < 2:
        raise ValidationError(f"Test stride must be at least 2, got {k}")
    if n < 2:
        raise ValidationError(f"Need at least two rows to split, got {n}")
    indices = np.arange(n)
    test_mask = indices % k == 0
    return indices[~test_mask], indices[test_mask]
