import logging
import os

import numpy as np
import pandas as pd

from ..config import CROP_COLUMN
from ..config import DATA_DELIMITER
from ..config import PREDICTOR_COLUMNS
from ..config import RESPONSE_COLUMNS
from ..types import DatasetError

logger = logging.getLogger(__name__)


def _is_url(source: str) -> bool:
    return source.lower().startswith(("http://", "https://"))


def load_dataset(source: str, delimiter: str = DATA_DELIMITER) -> pd.DataFrame:
    """
    Load the mood diary from a CSV file or URL.

    Args:
        source: Local path or HTTP(S) URL of the CSV file.
        delimiter: Field separator (the diary export uses ';').

    Returns:
        DataFrame with one row per day.

    Raises:
        DatasetError: If the file cannot be read or lacks required columns.
    """
    if not _is_url(source) and not os.path.exists(source):
        raise DatasetError(f"File not found: {source}")

    try:
        df = pd.read_csv(source, sep=delimiter, header=0)
    except (OSError, UnicodeDecodeError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise DatasetError(f"Error reading CSV '{source}': {e}") from e

    # Clean column names (strip whitespace)
    df.columns = [str(col).strip() for col in df.columns]

    missing = [c for c in RESPONSE_COLUMNS + PREDICTOR_COLUMNS if c not in df.columns]
    if missing:
        raise DatasetError(f"Dataset is missing required columns: {', '.join(missing)}")

    # Coercion to numeric; non-numeric cells become NaN
    for col in RESPONSE_COLUMNS + PREDICTOR_COLUMNS:
        df[col] = pd.to_numeric(df[col], errors="coerce")

    logger.info("Loaded %d rows from '%s'", len(df), source)
    return df


def split_variables(df: pd.DataFrame) -> tuple[pd.DataFrame, pd.DataFrame]:
    """Separate the response variables from the predictor variables."""
    response = df[RESPONSE_COLUMNS].astype(float)
    predictor = df[PREDICTOR_COLUMNS]
    return response, predictor


def crop_missing_leading(
    predictor: pd.DataFrame, column: str = CROP_COLUMN
) -> tuple[pd.DataFrame, int]:
    """
    Drop the leading rows where ``column`` has not been recorded yet.

    Everything up to and including the last missing value is removed, so the
    remaining rows have a complete ``column``.

    Returns:
        Tuple of (cropped frame, number of dropped rows).
    """
    if column not in predictor.columns:
        raise DatasetError(f"Cannot crop on unknown column '{column}'")

    missing = np.flatnonzero(predictor[column].isna().to_numpy())
    n_dropped = int(missing[-1]) + 1 if missing.size else 0
    if n_dropped:
        logger.info("Cropped %d leading rows with missing '%s'", n_dropped, column)
    return predictor.iloc[n_dropped:].reset_index(drop=True), n_dropped
