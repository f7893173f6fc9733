"""End-to-end analysis: responses -> features -> symbolic vs linear regression."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from dataclasses import field
from typing import Any

import numpy as np
import pandas as pd
import sympy as sp

from ..config import AGGREGATION_PERIODS
from ..config import CROP_COLUMN
from ..config import GP_NITERATIONS
from ..config import OUTPUT_PRECISION
from ..config import RESPONSE_CHOICES
from ..config import TEST_EVERY
from ..regression.linear import LinearBaseline
from ..regression.linear import fit_linear_baseline
from ..symbolic_regression import ParetoFront
from ..symbolic_regression import ParetoSolution
from ..symbolic_regression import SearchOptions
from ..symbolic_regression import SymbolicRegressor
from ..types import ValidationError
from ..utils.data_loading import crop_missing_leading
from ..utils.data_loading import split_variables
from ..utils.numeric import mean_squared_error
from .features import FeatureSet
from .features import build_feature_matrix
from .features import train_test_split_every_kth
from .responses import WellbeingComponent
from .responses import correlation_matrix
from .responses import derive_wellbeing
from .responses import emotionality as emotionality_of

logger = logging.getLogger(__name__)


@dataclass
class PreparedData:
    """Everything derived from the raw diary before any model is fitted."""

    response: pd.DataFrame
    correlations: pd.DataFrame
    wellbeing: WellbeingComponent
    emotionality: np.ndarray
    predictor: pd.DataFrame
    n_cropped: int
    features: FeatureSet


@dataclass
class ModelScore:
    """Train/test mean squared error of one model."""

    name: str
    train_mse: float
    test_mse: float

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "train_mse": self.train_mse, "test_mse": self.test_mse}


@dataclass
class AnalysisReport:
    """Outcome of comparing symbolic regression with the linear baseline."""

    response: str
    n_train: int
    n_test: int
    best: ParetoSolution
    simplest: ParetoSolution
    pareto_front: ParetoFront
    linear: LinearBaseline
    scores: dict[str, ModelScore]
    feature_names: list[str]
    y: np.ndarray
    train_idx: np.ndarray
    test_idx: np.ndarray
    predictions: dict[str, np.ndarray] = field(default_factory=dict)

    @property
    def n_dominating(self) -> int:
        return len(self.pareto_front)

    @property
    def equation(self) -> sp.Expr:
        return self.best.sympy_expr

    def predictions_for(self, subset: str = "all", model: str = "best") -> tuple[np.ndarray, np.ndarray]:
        """Targets and predictions for the 'all', 'train' or 'test' rows."""
        if subset == "all":
            idx = np.arange(len(self.y))
        elif subset == "train":
            idx = self.train_idx
        elif subset == "test":
            idx = self.test_idx
        else:
            raise ValidationError(f"Unknown subset '{subset}'; choose all, train or test")
        if model not in self.predictions:
            raise ValidationError(f"No predictions for model '{model}'")
        return self.y[idx], self.predictions[model][idx]

    def to_dict(self) -> dict[str, Any]:
        return {
            "response": self.response,
            "n_train": self.n_train,
            "n_test": self.n_test,
            "n_dominating": self.n_dominating,
            "best_equation": str(self.best.sympy_expr),
            "best_complexity": self.best.complexity,
            "simplest_equation": str(self.simplest.sympy_expr),
            "simplest_complexity": self.simplest.complexity,
            "scores": {name: score.to_dict() for name, score in self.scores.items()},
            "pareto_front": self.pareto_front.to_list(),
            "linear_formula": self.linear.formula,
            "linear_equation": self.linear.equation(),
        }

    def summary_lines(self, precision: int = OUTPUT_PRECISION) -> list[str]:
        """Human-readable narrative of the comparison."""

        def r(value: float) -> str:
            return f"{round(value, precision)}"

        isare, models = ("is", "model") if self.n_dominating == 1 else ("are", "models")
        best = self.scores["best"]
        simplest = self.scores["simplest"]
        linear = self.scores["linear"]
        lines = [
            f"Response variable: {self.response} "
            f"({self.n_train} train / {self.n_test} test days)",
            f"There {isare} {self.n_dominating} dominating {models}.",
            f"Genetic programming (lowest train loss): train MSE {r(best.train_mse)}, "
            f"test MSE {r(best.test_mse)}.",
            f"Genetic programming (simplest dominating): train MSE "
            f"{r(simplest.train_mse)}, test MSE {r(simplest.test_mse)}.",
            f"Linear regression: train MSE {r(linear.train_mse)}, "
            f"test MSE {r(linear.test_mse)}.",
            f"The full formula: {self.best.sympy_expr}",
            f"The linear model: {self.linear.equation()}",
        ]
        winner = min(self.scores.values(), key=lambda s: s.test_mse)
        lines.append(f"Lowest test MSE: {winner.name}.")
        return lines


def prepare_analysis(
    df: pd.DataFrame,
    periods: list[int] | None = None,
    crop_column: str = CROP_COLUMN,
) -> PreparedData:
    """Derive response variables and lagged features from the raw diary."""
    response, predictor = split_variables(df)
    correlations = correlation_matrix(response)
    wellbeing = derive_wellbeing(response)
    emo = emotionality_of(response)
    predictor_cropped, n_cropped = crop_missing_leading(predictor, crop_column)
    features = build_feature_matrix(
        wellbeing.values, emo, predictor_cropped, periods or AGGREGATION_PERIODS
    )
    return PreparedData(
        response=response,
        correlations=correlations,
        wellbeing=wellbeing,
        emotionality=emo,
        predictor=predictor_cropped,
        n_cropped=n_cropped,
        features=features,
    )


def _score(name: str, y_train, pred_train, y_test, pred_test) -> ModelScore:
    return ModelScore(
        name=name,
        train_mse=mean_squared_error(y_train, pred_train),
        test_mse=mean_squared_error(y_test, pred_test),
    )


def run_analysis(
    prepared: PreparedData,
    response: str = "wellbeing",
    k: int = TEST_EVERY,
    niterations: int = GP_NITERATIONS,
    options: SearchOptions | None = None,
) -> AnalysisReport:
    """Fit symbolic and linear regression on one response and compare them.

    Args:
        prepared: Output of :func:`prepare_analysis`
        response: 'wellbeing' or 'emotionality'
        k: Every k-th day (starting with the first) goes to the test set
        niterations: Equation search iterations
        options: Equation search configuration

    Returns:
        AnalysisReport with train/test MSE for every model
    """
    if response not in RESPONSE_CHOICES:
        raise ValidationError(
            f"Unknown response variable '{response}'; "
            f"choose from {', '.join(RESPONSE_CHOICES)}"
        )
    features = prepared.features
    X = features.X.to_numpy(dtype=float)
    y = features.target(response)
    train_idx, test_idx = train_test_split_every_kth(len(y), k)
    X_train, X_test = X[train_idx], X[test_idx]
    y_train, y_test = y[train_idx], y[test_idx]
    logger.info(
        "Analysing %s: %d train rows, %d test rows, %d features",
        response,
        len(train_idx),
        len(test_idx),
        X.shape[1],
    )

    regressor = SymbolicRegressor(options, niterations)
    regressor.fit(X_train, y_train, variable_names=features.feature_names)
    best, simplest = regressor.best, regressor.simplest

    linear = fit_linear_baseline(features.X.iloc[train_idx], y_train)

    predictions = {
        "best": regressor.predict(X, best),
        "simplest": regressor.predict(X, simplest),
        "linear": linear.predict(X),
    }
    scores = {
        name: _score(name, y_train, pred[train_idx], y_test, pred[test_idx])
        for name, pred in predictions.items()
    }
    for score in scores.values():
        logger.info(
            "%s: train MSE %.4f, test MSE %.4f", score.name, score.train_mse, score.test_mse
        )

    return AnalysisReport(
        response=response,
        n_train=len(train_idx),
        n_test=len(test_idx),
        best=best,
        simplest=simplest,
        pareto_front=regressor.pareto_front,
        linear=linear,
        scores=scores,
        feature_names=features.feature_names,
        y=y,
        train_idx=train_idx,
        test_idx=test_idx,
        predictions=predictions,
    )
