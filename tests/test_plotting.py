import os

import numpy as np
from matplotlib.figure import Figure

from moodgp_pkg.analysis import prepare_analysis
from moodgp_pkg.plotting import plot_correlation_heatmap
from moodgp_pkg.plotting import plot_predictions
from moodgp_pkg.plotting import plot_smoothed_responses
from moodgp_pkg.plotting import save_figure
from moodgp_pkg.plotting import smoothed_series


def test_correlation_heatmap(diary):
    prepared = prepare_analysis(diary, periods=[2])
    fig = plot_correlation_heatmap(prepared.correlations)
    assert isinstance(fig, Figure)
    assert fig.axes[0].get_title() == "Correlation plot response variables"


def test_smoothed_series_length():
    values = np.random.default_rng(0).normal(size=200)
    # 200 - 30 + 1 averaged values, minus 100 smoothing passes and the first point
    assert len(smoothed_series(values, window=30, smoothing=100)) == 200 - 29 - 100 - 1


def test_smoothed_responses_lines():
    rng = np.random.default_rng(0)
    wellbeing, emotionality = rng.normal(size=200), rng.normal(size=200)
    both = plot_smoothed_responses(wellbeing, emotionality, show_emotionality=True)
    assert [line.get_label() for line in both.axes[0].get_lines()] == ["wellbeing", "emotionality"]
    none = plot_smoothed_responses(wellbeing, emotionality, show_wellbeing=False)
    assert len(none.axes[0].get_lines()) == 0


def test_plot_predictions():
    y = np.arange(20, dtype=float)
    fig = plot_predictions(y, y + 1, window=3, smoothing=2)
    lines = fig.axes[0].get_lines()
    assert [line.get_label() for line in lines] == ["original data", "predictions"]
    assert len(lines[0].get_xdata()) == 20 - 2 - 2 - 1


def test_save_figure(tmp_path):
    fig = plot_predictions(np.ones(5), np.zeros(5))
    path = save_figure(fig, str(tmp_path / "out"), "predictions")
    assert os.path.exists(path)
    assert path.endswith("predictions.png")
