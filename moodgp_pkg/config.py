"""Centralized configuration for MoodGP.

This module defines:
- Where the mood diary lives and how it is delimited
- Which columns are response and predictor variables
- Feature engineering windows and the train/test stride
- Genetic programming search defaults

Configuration can be overridden via:
- CLI flags (see cli/app.py)
- Environment variables (prefixed with MOODGP_)
"""

import os

VERSION = "1.0.0"

# Data source
DATA_URL = os.getenv(
    "MOODGP_DATA_URL",
    "https://github.com/jstaut/GeneticProgrammingRegression.jl/raw/main/moodsData.csv",
)
DATA_DELIMITER = os.getenv("MOODGP_DATA_DELIMITER", ";")

# Response variables, scored 0-10
RESPONSE_COLUMNS = [
    "frustration",
    "energy",
    "clarity",
    "happiness",
    "guilt",
    "emotionality",
    "anxiety",
    "confidence",
]
# Collapsed into wellbeing by PCA (everything except emotionality)
WELLBEING_COLUMNS = [c for c in RESPONSE_COLUMNS if c != "emotionality"]
# Loads positively on wellbeing after orientation
WELLBEING_ANCHOR = os.getenv("MOODGP_WELLBEING_ANCHOR", "happiness")

PREDICTOR_COLUMNS = [
    "sleepStart",
    "sleepEnd",
    "sleepDuration",
    "sleepNap",
    "meditation",
    "exercise",
]
# Leading rows where this column is missing are cropped
CROP_COLUMN = os.getenv("MOODGP_CROP_COLUMN", "exercise")

RESPONSE_CHOICES = ("wellbeing", "emotionality")
DEFAULT_RESPONSE = os.getenv("MOODGP_RESPONSE", "wellbeing")

# Feature engineering
AGGREGATION_PERIODS = [
    int(p) for p in os.getenv("MOODGP_AGGREGATION_PERIODS", "2,7,21,60").split(",")
]  # days
TEST_EVERY = int(os.getenv("MOODGP_TEST_EVERY", "4"))  # every k-th row is a test row

# Genetic Programming configuration
GP_NITERATIONS = int(os.getenv("MOODGP_GP_NITERATIONS", "4"))
GP_NPOPULATIONS = int(os.getenv("MOODGP_GP_NPOPULATIONS", "6"))
GP_POPULATION_SIZE = int(
    os.getenv("MOODGP_GP_POPULATION_SIZE", "100")
)  # Individuals per population
GP_GENERATIONS_PER_ITERATION = int(
    os.getenv("MOODGP_GP_GENERATIONS_PER_ITERATION", "20")
)
GP_MAXSIZE = int(os.getenv("MOODGP_GP_MAXSIZE", "20"))  # Max nodes per equation
GP_PARSIMONY = float(
    os.getenv("MOODGP_GP_PARSIMONY", "0.0032")
)  # Complexity penalty coefficient
GP_TIMEOUT = float(os.getenv("MOODGP_GP_TIMEOUT", "0")) or None  # seconds, 0 = none
GP_SEED = int(os.getenv("MOODGP_GP_SEED", "0")) or None  # 0 = unseeded
GP_BINARY_OPERATORS = [
    op for op in os.getenv("MOODGP_GP_BINARY_OPERATORS", "add,mul,div,sub,pow").split(",") if op
]
GP_UNARY_OPERATORS = [
    op for op in os.getenv("MOODGP_GP_UNARY_OPERATORS", "tanh,relu").split(",") if op
]

# Output
OUTPUT_PRECISION = int(os.getenv("MOODGP_OUTPUT_PRECISION", "4"))  # decimals for MSE
