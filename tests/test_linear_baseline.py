import numpy as np
import pandas as pd
import pytest

from moodgp_pkg.regression import LinearBaseline
from moodgp_pkg.regression import fit_linear_baseline
from moodgp_pkg.types import NotFittedError
from moodgp_pkg.types import ValidationError


@pytest.fixture
def frame():
    rng = np.random.default_rng(1)
    X = pd.DataFrame({"sleepPast7": rng.normal(size=50), "exercisePast7": rng.normal(size=50)})
    y = 1.5 + 2.0 * X["sleepPast7"] - 0.5 * X["exercisePast7"]
    return X, y.to_numpy()


def test_recovers_exact_coefficients(frame):
    X, y = frame
    model = fit_linear_baseline(X, y)
    assert model.intercept == pytest.approx(1.5)
    assert model.coefficients["sleepPast7"] == pytest.approx(2.0)
    assert model.coefficients["exercisePast7"] == pytest.approx(-0.5)
    np.testing.assert_allclose(model.predict(X), y)


def test_formula_lists_every_feature(frame):
    X, y = frame
    model = fit_linear_baseline(X, y)
    assert model.formula == "response ~ sleepPast7 + exercisePast7"
    assert model.feature_names == ["sleepPast7", "exercisePast7"]


def test_predict_selects_columns_by_name(frame):
    X, y = frame
    model = fit_linear_baseline(X, y)
    np.testing.assert_allclose(model.predict(X[["exercisePast7", "sleepPast7"]]), y)


def test_array_input_gets_default_names(frame):
    X, y = frame
    model = fit_linear_baseline(X.to_numpy(), y)
    assert model.feature_names == ["x0", "x1"]
    np.testing.assert_allclose(model.predict(X.to_numpy()), y)


def test_equation_string(frame):
    X, y = frame
    equation = fit_linear_baseline(X, y).equation(precision=3)
    assert equation.startswith("1.5 + 2*sleepPast7")
    assert "- 0.5*exercisePast7" in equation


def test_invalid_inputs(frame):
    X, y = frame
    with pytest.raises(ValidationError):
        fit_linear_baseline(X, y[:-1])
    with pytest.raises(ValidationError):
        fit_linear_baseline(X.head(1), y[:1])
    with pytest.raises(ValidationError):
        fit_linear_baseline(X.to_numpy(), y, feature_names=["only_one"])


def test_unfitted_baseline():
    baseline = LinearBaseline(coefficients=pd.Series([1.0], index=["a"]), intercept=0.0)
    with pytest.raises(NotFittedError):
        baseline.predict(np.ones((2, 1)))
