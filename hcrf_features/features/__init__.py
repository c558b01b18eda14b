"""Feature kinds: raw node features, transition features, gated node features, and the generator."""

from .base import Feature, FeatureKind, FeatureVector
from .raw import RawFeatures
from .edge import (
    EdgeFeatures,
    LabelEdgeFeatures,
    all_transitions_policy,
    state_matrix_policy,
)
from .gate import GateNodeFeatures
from .generator import FEATURE_KINDS, FeatureGenerator, build_feature_kinds

__all__ = [
    "Feature",
    "FeatureKind",
    "FeatureVector",
    "RawFeatures",
    "EdgeFeatures",
    "LabelEdgeFeatures",
    "all_transitions_policy",
    "state_matrix_policy",
    "GateNodeFeatures",
    "FEATURE_KINDS",
    "FeatureGenerator",
    "build_feature_kinds",
]
