"""Ordinary least squares baseline.

Fits every engineered feature at once, the classical counterpart to the
symbolic regression model.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
import pandas as pd
from sklearn.linear_model import LinearRegression

from ..types import NotFittedError
from ..types import ValidationError


@dataclass
class LinearBaseline:
    """A fitted linear model.

    Attributes:
        coefficients: Feature name -> slope
        intercept: Constant term
        model: The underlying scikit-learn estimator
    """

    coefficients: pd.Series
    intercept: float
    model: LinearRegression | None = None

    @property
    def feature_names(self) -> list[str]:
        return list(self.coefficients.index)

    @property
    def formula(self) -> str:
        """Model formula in Wilkinson notation, e.g. ``response ~ a + b``."""
        return "response ~ " + " + ".join(self.feature_names)

    def predict(self, X) -> np.ndarray:
        if self.model is None:
            raise NotFittedError("Linear baseline has no fitted model")
        if isinstance(X, pd.DataFrame):
            X = X[self.feature_names]
        X = np.asarray(X, dtype=float)
        if X.ndim == 1:
            X = X.reshape(-1, 1)
        return self.model.predict(X)

    def equation(self, precision: int = 4) -> str:
        terms = [f"{self.intercept:.{precision}g}"]
        for name, coef in self.coefficients.items():
            sign = "-" if coef < 0 else "+"
            terms.append(f"{sign} {abs(coef):.{precision}g}*{name}")
        return " ".join(terms)


def fit_linear_baseline(
    X_train, y_train, feature_names: list[str] | None = None
) -> LinearBaseline:
    """Fit ``response ~ all features`` with an intercept.

    Args:
        X_train: Training features (DataFrame or array of shape (n_samples, n_features))
        y_train: Training targets
        feature_names: Column names when ``X_train`` is a plain array

    Returns:
        Fitted LinearBaseline
    """
    if isinstance(X_train, pd.DataFrame):
        feature_names = feature_names or [str(c) for c in X_train.columns]
    X = np.asarray(X_train, dtype=float)
    y = np.asarray(y_train, dtype=float).ravel()

    if X.ndim == 1:
        X = X.reshape(-1, 1)
    if X.shape[0] != y.shape[0]:
        raise ValidationError(f"X has {X.shape[0]} samples but y has {y.shape[0]}")
    if X.shape[0] < 2:
        raise ValidationError("Linear regression needs at least two samples")
    feature_names = feature_names or [f"x{i}" for i in range(X.shape[1])]
    if len(feature_names) != X.shape[1]:
        raise ValidationError(
            f"Got {len(feature_names)} feature names for {X.shape[1]} columns"
        )

    model = LinearRegression(fit_intercept=True)
    model.fit(X, y)
    return LinearBaseline(
        coefficients=pd.Series(model.coef_, index=feature_names),
        intercept=float(model.intercept_),
        model=model,
    )
