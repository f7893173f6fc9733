import numpy as np
import pandas as pd
import pytest

from moodgp_pkg.config import PREDICTOR_COLUMNS
from moodgp_pkg.config import RESPONSE_COLUMNS
from moodgp_pkg.symbolic_regression import SearchOptions


def make_diary(n_days=150, n_missing_exercise=10, seed=0):
    """Synthetic mood diary with the same columns as the real export."""
    rng = np.random.default_rng(seed)
    mood = np.cumsum(rng.normal(0, 0.3, n_days))
    mood = 5 + 2 * (mood - mood.mean()) / (mood.std() + 1e-9)

    def score(sign, noise=0.7):
        return np.clip(5 + sign * (mood - 5) + rng.normal(0, noise, n_days), 0, 10)

    data = {
        "frustration": score(-1),
        "energy": score(1),
        "clarity": score(1),
        "happiness": score(1, noise=0.4),
        "guilt": score(-1),
        "emotionality": np.clip(rng.normal(5, 1.5, n_days), 0, 10),
        "anxiety": score(-1),
        "confidence": score(1),
        "sleepStart": rng.normal(23.5, 0.5, n_days),
        "sleepEnd": rng.normal(7.5, 0.6, n_days),
        "sleepDuration": rng.normal(8.0, 0.7, n_days),
        "sleepNap": rng.integers(0, 2, n_days).astype(float),
        "meditation": rng.integers(0, 2, n_days).astype(float),
        "exercise": rng.integers(0, 2, n_days).astype(float),
    }
    df = pd.DataFrame(data)[RESPONSE_COLUMNS + PREDICTOR_COLUMNS]
    df.loc[: n_missing_exercise - 1, "exercise"] = np.nan
    return df


@pytest.fixture
def diary():
    return make_diary()


@pytest.fixture
def diary_csv(tmp_path, diary):
    path = tmp_path / "moodsData.csv"
    diary.to_csv(path, sep=";", index=False)
    return str(path)


@pytest.fixture
def small_options():
    """A search budget small enough for unit tests."""
    return SearchOptions(
        npopulations=2,
        population_size=30,
        generations_per_iteration=5,
        maxsize=12,
        seed=7,
        verbose=False,
    )
