import logging

import pandas as pd
import streamlit as st

from moodgp_pkg import config
from moodgp_pkg.analysis import prepare_analysis
from moodgp_pkg.analysis import run_analysis
from moodgp_pkg.logging_config import setup_logging
from moodgp_pkg.plotting import plot_correlation_heatmap
from moodgp_pkg.plotting import plot_predictions
from moodgp_pkg.plotting import plot_smoothed_responses
from moodgp_pkg.symbolic_regression import SearchOptions
from moodgp_pkg.types import MoodGPError
from moodgp_pkg.utils.data_loading import load_dataset

# Page config
st.set_page_config(page_title="MoodGP", page_icon="🧬", layout="wide")

st.title("🧬 MoodGP")
st.markdown("### Genetic Programming for Regression on a mood diary")


class StreamlitLogHandler(logging.Handler):
    """Mirror search progress into a code block on the page."""

    def __init__(self, elem):
        super().__init__()
        self.elem = elem
        self.log_history = []

    def emit(self, record):
        self.log_history.append(self.format(record))
        # Show the tail only to keep the UI snappy
        self.elem.code("\n".join(self.log_history[-30:]), language="text")


@st.cache_data(show_spinner="Loading data...")
def cached_dataset(source: str, delimiter: str) -> pd.DataFrame:
    return load_dataset(source, delimiter=delimiter)


@st.cache_resource
def cached_prepared(source: str, delimiter: str, periods: tuple):
    return prepare_analysis(cached_dataset(source, delimiter), periods=list(periods))


# --- SIDEBAR ---
with st.sidebar:
    st.header("Settings")

    source = st.text_input("Data (path or URL)", config.DATA_URL)
    delimiter = st.text_input("Delimiter", config.DATA_DELIMITER)

    st.markdown("---")
    st.subheader("Genetic programming")
    niterations = st.slider("Iterations", 1, 20, config.GP_NITERATIONS)
    npopulations = st.slider("Populations", 1, 12, config.GP_NPOPULATIONS)
    population_size = st.slider("Population size", 20, 500, config.GP_POPULATION_SIZE, step=10)
    generations = st.slider(
        "Generations per iteration", 5, 100, config.GP_GENERATIONS_PER_ITERATION, step=5
    )
    seed = st.number_input("Seed (0 = random)", min_value=0, value=0, step=1)
    k = st.slider("Test set: every k-th day", 2, 10, config.TEST_EVERY)

setup_logging("INFO")

try:
    prepared = cached_prepared(source, delimiter, tuple(config.AGGREGATION_PERIODS))
except MoodGPError as e:
    st.error(f"Could not prepare the data: {e}")
    st.stop()

# --- EXPLORE ---
st.header("Explore and prepare data set")
col1, col2 = st.columns([1, 1])
with col1:
    st.pyplot(plot_correlation_heatmap(prepared.correlations))
with col2:
    st.markdown(
        f"The `wellbeing` variable explains **{prepared.wellbeing.explained_percent:.0f} %** "
        f"of the variance of all {len(prepared.wellbeing.loadings)} original variables."
    )
    st.dataframe(prepared.wellbeing.loadings.rename("loading"))
    if prepared.n_cropped:
        st.caption(f"{prepared.n_cropped} leading days without `exercise` were cropped.")

st.markdown("**Choose response variable(s) to display:**")
show_wellbeing = st.checkbox("Plot wellbeing", value=True)
show_emotionality = st.checkbox("Plot emotionality", value=False)
window = st.slider("Time frame to average over (days)", 1, 100, 30)
smoothing = st.slider("Degree of additional smoothing", 0, 200, 100)
st.pyplot(
    plot_smoothed_responses(
        prepared.wellbeing.values,
        prepared.emotionality,
        window=window,
        smoothing=smoothing,
        show_wellbeing=show_wellbeing,
        show_emotionality=show_emotionality,
    )
)

# --- ANALYSIS ---
st.header("The analysis")
response = st.radio("Choose response variable to analyse", config.RESPONSE_CHOICES, horizontal=True)

if st.button("🧬 Run equation search", use_container_width=True):
    st.markdown("### 📜 Execution Logs")
    handler = StreamlitLogHandler(st.empty())
    handler.setFormatter(logging.Formatter("%(message)s"))
    package_logger = logging.getLogger("moodgp_pkg")
    package_logger.addHandler(handler)
    try:
        with st.spinner("Evolving... (the search is the slow part)"):
            options = SearchOptions(
                npopulations=npopulations,
                population_size=population_size,
                generations_per_iteration=generations,
                seed=int(seed) or None,
            )
            st.session_state.report = run_analysis(
                prepared, response=response, k=k, niterations=niterations, options=options
            )
    except MoodGPError as e:
        st.error(f"Analysis failed: {e}")
    finally:
        package_logger.removeHandler(handler)

report = st.session_state.get("report")
if report is not None:
    st.success(f"Analysis of `{report.response}` complete.")
    for line in report.summary_lines(config.OUTPUT_PRECISION):
        st.markdown(line)

    st.markdown("### 🎯 Dominating equations")
    st.dataframe(report.pareto_front.to_dataframe(), use_container_width=True)

    scores = pd.DataFrame([s.to_dict() for s in report.scores.values()]).set_index("name")
    st.markdown("### 📊 Mean squared error")
    st.dataframe(scores)

    st.markdown("### 📈 Predictions")
    subset = st.radio("Plot predictions for which part of the data?", ["all", "train", "test"], horizontal=True)
    model = st.radio("Model", list(report.predictions), horizontal=True)
    window2 = st.slider("Time frame to average over (days) ", 1, 50, 1)
    smoothing2 = st.slider("Degree of additional smoothing ", 0, 100, 0)
    y, y_pred = report.predictions_for(subset, model)
    st.pyplot(plot_predictions(y, y_pred, window=window2, smoothing=smoothing2))
