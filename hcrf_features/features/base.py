# features/base.py
"""
Feature descriptors, the append-only FeatureVector, and the FeatureKind base class.

Every producer goes through two phases. `init(dataset, model)` checks the
model, reserves the producer's block of global indices and freezes whatever
it precomputed into a layout object. Extraction (`get_features`,
`get_all_features`) only reads that layout, so one initialised producer can
serve any number of threads as long as the model weights are not rewritten
mid-call.
"""

from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass
from typing import Iterable, Iterator, List, Optional, Tuple

import numpy as np
import pandas as pd

from ..data.sequence import DataSequence, DataSet
from ..models.model import Model
from ..utils.exceptions import ConfigurationError, PreconditionError
from ..utils.helpers import UNSET, check_index, check_optional_index


@dataclass(frozen=True)
class Feature:
    """
    One active feature.

    Attributes:
        global_id: Index into the model's global feature space.
        value: Feature value.
        node_index: Position the feature is attached to (-1 for descriptors).
        node_state: Hidden state at node_index.
        prev_node_index: Predecessor position for edge features, else -1.
        prev_node_state: Hidden state at prev_node_index, else -1.
        sequence_label: Sequence label the feature was computed under, else -1.
        dimension: Raw input dimension or gate index, -1 when not applicable.
    """
    global_id: int
    value: float
    node_index: int = -1
    node_state: int = -1
    prev_node_index: int = -1
    prev_node_state: int = -1
    sequence_label: int = -1
    dimension: int = -1


class FeatureVector:
    """
    Ordered, append-only collection of Feature.

    Indices are not sorted and may repeat; a repeated index is additive when
    the vector is scored against a weight vector.
    """

    def __init__(self, features: Optional[Iterable[Feature]] = None):
        self._features: List[Feature] = list(features or [])

    def append(self, feature: Feature) -> None:
        self._features.append(feature)

    def extend(self, features: Iterable[Feature]) -> None:
        self._features.extend(features)

    def pairs(self) -> List[Tuple[int, float]]:
        """(global_id, value) pairs in insertion order."""
        return [(f.global_id, f.value) for f in self._features]

    def dot(self, weights: np.ndarray) -> float:
        """Sum of weights[global_id] * value over all features."""
        if not self._features:
            return 0.0
        ids = np.fromiter((f.global_id for f in self._features), dtype=np.int64, count=len(self._features))
        values = np.fromiter((f.value for f in self._features), dtype=np.float64, count=len(self._features))
        return float(np.dot(np.asarray(weights)[ids], values))

    def to_frame(self) -> pd.DataFrame:
        """One row per feature, one column per Feature field."""
        columns = list(Feature.__dataclass_fields__)
        return pd.DataFrame([asdict(f) for f in self._features], columns=columns)

    def __len__(self) -> int:
        return len(self._features)

    def __iter__(self) -> Iterator[Feature]:
        return iter(self._features)

    def __getitem__(self, index: int) -> Feature:
        return self._features[index]

    def __repr__(self) -> str:
        return f"FeatureVector({len(self._features)} features)"


class FeatureKind(ABC):
    """
    Base class for all feature producers.

    Subclasses set `feature_type_id` (the key of their index block in the
    model) and implement `_build_layout`, `get_features`,
    `is_edge_feature_type` and `get_all_features`.

    Calling any extraction method before `init` raises PreconditionError.
    """

    feature_type_id: str = ""
    # LabelEdgeFeatures reads `label` as a sequence label; every other kind
    # reads it as a hidden-state restriction.
    conditions_on_sequence_label: bool = False

    def __init__(self):
        self._layout = None

    def init(self, dataset: DataSet, model: Model) -> None:
        """
        Precompute per-model state and reserve this kind's global indices.

        Args:
            dataset: Training data; only its raw dimension is inspected.
            model: Model whose sizes and index space this kind is laid out against.

        Raises:
            ConfigurationError: If the data set and model disagree on the raw
                dimension, or the kind's layout conflicts with an earlier one.
        """
        if len(dataset) > 0 and dataset.nb_raw_features != model.nb_raw_features:
            raise ConfigurationError(
                f"Data set has {dataset.nb_raw_features} raw features, "
                f"model declares {model.nb_raw_features}"
            )
        layout = self._build_layout(model)
        model.allocate(self.feature_type_id, layout.nb_features)
        self._layout = layout

    @abstractmethod
    def _build_layout(self, model: Model):
        """Return a frozen layout object exposing at least `nb_features`."""

    @abstractmethod
    def get_features(self, out: FeatureVector, sequence: DataSequence, model: Model,
                     node_index: int, prev_node_index: int, label: int = UNSET) -> None:
        """
        Append the features active at node_index (or on the edge prev_node_index -> node_index).

        Args:
            out: Vector to append to. Never cleared.
            sequence: Sequence being scored.
            model: Model the kind was initialised against.
            node_index: Current position.
            prev_node_index: Predecessor position, or -1 at the start of a sequence.
            label: Optional restriction; UNSET (-1) means all.
        """

    @abstractmethod
    def is_edge_feature_type(self) -> bool:
        """True for transition producers, False for node producers."""

    @abstractmethod
    def get_all_features(self, out: FeatureVector, model: Model, nb_raw_features: int) -> None:
        """Append one descriptor per feature this kind can ever emit, in index order."""

    @property
    def is_initialized(self) -> bool:
        return self._layout is not None

    @property
    def layout(self):
        if self._layout is None:
            raise PreconditionError(f"{type(self).__name__} used before init()")
        return self._layout

    @property
    def nb_features(self) -> int:
        return self.layout.nb_features

    def _check_call(self, sequence: DataSequence, model: Model, node_index: int,
                    prev_node_index: int, label: int, label_upper: int):
        """Shared precondition checks for get_features; returns the layout."""
        layout = self.layout
        if sequence.nb_raw_features != model.nb_raw_features:
            raise PreconditionError(
                f"Sequence has {sequence.nb_raw_features} raw features, "
                f"model declares {model.nb_raw_features}"
            )
        check_index(node_index, len(sequence), "node_index")
        check_optional_index(prev_node_index, len(sequence), "prev_node_index")
        check_optional_index(label, label_upper, "label")
        return layout

    def _label_states(self, model: Model, label: int) -> range:
        """Hidden states to emit for: just `label` if set, else all of them."""
        if label == UNSET:
            return range(model.nb_states)
        return range(label, label + 1)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(initialized={self.is_initialized})"
