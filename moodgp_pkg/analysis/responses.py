"""Response variables: correlations, the PCA wellbeing composite and emotionality."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np
import pandas as pd
from sklearn.decomposition import PCA

from ..config import WELLBEING_ANCHOR
from ..config import WELLBEING_COLUMNS
from ..types import ValidationError

logger = logging.getLogger(__name__)


@dataclass
class WellbeingComponent:
    """First principal component of the seven non-emotionality responses.

    Attributes:
        values: Projected daily wellbeing score
        loadings: Weight of each original variable in the component
        explained_variance_ratio: Share of total variance captured ("principal ratio")
    """

    values: np.ndarray
    loadings: pd.Series
    explained_variance_ratio: float

    @property
    def explained_percent(self) -> float:
        return float(np.round(self.explained_variance_ratio * 100))


def correlation_matrix(response: pd.DataFrame) -> pd.DataFrame:
    """Pearson correlations between all response variables."""
    return response.corr(method="pearson")


def derive_wellbeing(
    response: pd.DataFrame,
    columns: list[str] | None = None,
    anchor: str = WELLBEING_ANCHOR,
) -> WellbeingComponent:
    """Collapse the correlated response variables into a single ``wellbeing`` score.

    The PCA centres but does not scale the data. Principal components have an
    arbitrary sign; it is fixed so that ``anchor`` loads positively.
    """
    columns = columns or WELLBEING_COLUMNS
    data = response[columns].to_numpy(dtype=float)
    if data.shape[0] < 2:
        raise ValidationError("PCA needs at least two observations")
    if np.isnan(data).any():
        raise ValidationError("Response variables contain missing values")

    pca = PCA(n_components=1)
    projected = pca.fit_transform(data)[:, 0]
    loadings = pd.Series(pca.components_[0], index=columns)

    if anchor in loadings.index and loadings[anchor] < 0:
        projected = -projected
        loadings = -loadings

    ratio = float(pca.explained_variance_ratio_[0])
    logger.info(
        "wellbeing explains %.0f%% of the variance of %d variables",
        ratio * 100,
        len(columns),
    )
    return WellbeingComponent(
        values=projected, loadings=loadings, explained_variance_ratio=ratio
    )


def emotionality(response: pd.DataFrame) -> np.ndarray:
    """The second response variable, kept as-is."""
    return response["emotionality"].to_numpy(dtype=float)
