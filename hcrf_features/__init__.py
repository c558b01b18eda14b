"""Feature extraction layer for hidden-state conditional random fields."""

from .data import DataSequence, DataSet
from .models import Model
from .features import (
    Feature,
    FeatureKind,
    FeatureVector,
    RawFeatures,
    EdgeFeatures,
    LabelEdgeFeatures,
    GateNodeFeatures,
    FeatureGenerator,
)
from .utils import UNSET, FeatureError, PreconditionError, ConfigurationError, DataValidationError

__version__ = "0.1.0"

__all__ = [
    "DataSequence",
    "DataSet",
    "Model",
    "Feature",
    "FeatureKind",
    "FeatureVector",
    "RawFeatures",
    "EdgeFeatures",
    "LabelEdgeFeatures",
    "GateNodeFeatures",
    "FeatureGenerator",
    "UNSET",
    "FeatureError",
    "PreconditionError",
    "ConfigurationError",
    "DataValidationError",
]
