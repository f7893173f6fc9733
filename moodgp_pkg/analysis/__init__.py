"""Analysis stages: response variables, lagged features and the model comparison."""

from .features import FeatureSet
from .features import build_feature_matrix
from .features import train_test_split_every_kth
from .pipeline import AnalysisReport
from .pipeline import ModelScore
from .pipeline import PreparedData
from .pipeline import prepare_analysis
from .pipeline import run_analysis
from .responses import WellbeingComponent
from .responses import correlation_matrix
from .responses import derive_wellbeing
from .responses import emotionality

__all__ = [
    "FeatureSet",
    "build_feature_matrix",
    "train_test_split_every_kth",
    "AnalysisReport",
    "ModelScore",
    "PreparedData",
    "prepare_analysis",
    "run_analysis",
    "WellbeingComponent",
    "correlation_matrix",
    "derive_wellbeing",
    "emotionality",
]
