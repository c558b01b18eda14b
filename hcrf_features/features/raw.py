# features/raw.py
from dataclasses import dataclass

from .base import Feature, FeatureKind, FeatureVector
from ..data.sequence import DataSequence
from ..models.model import Model
from ..utils.exceptions import PreconditionError
from ..utils.helpers import UNSET


@dataclass(frozen=True)
class RawLayout:
    nb_states: int
    nb_raw_features: int

    @property
    def nb_features(self) -> int:
        return self.nb_states * self.nb_raw_features


class RawFeatures(FeatureKind):
    """
    Node features copying each observed input dimension, once per hidden state.

    Local index of (state, dimension) is state * nb_raw_features + dimension;
    the value is the observation at (node_index, dimension), unmodified.
    """

    feature_type_id = "raw"

    def _build_layout(self, model: Model) -> RawLayout:
        return RawLayout(nb_states=model.nb_states, nb_raw_features=model.nb_raw_features)

    def is_edge_feature_type(self) -> bool:
        return False

    def get_features(self, out: FeatureVector, sequence: DataSequence, model: Model,
                     node_index: int, prev_node_index: int, label: int = UNSET) -> None:
        layout = self._check_call(sequence, model, node_index, prev_node_index, label, model.nb_states)
        offset = model.offset(self.feature_type_id)
        row = sequence.observations[node_index]
        nb_raw = layout.nb_raw_features
        for s in self._label_states(model, label):
            for d in range(nb_raw):
                out.append(Feature(
                    global_id=offset + s * nb_raw + d,
                    value=float(row[d]),
                    node_index=node_index,
                    node_state=s,
                    dimension=d,
                ))

    def get_all_features(self, out: FeatureVector, model: Model, nb_raw_features: int) -> None:
        layout = self.layout
        if nb_raw_features != layout.nb_raw_features:
            raise PreconditionError(
                f"Asked for {nb_raw_features} raw features, initialised with {layout.nb_raw_features}"
            )
        offset = model.offset(self.feature_type_id)
        for s in range(model.nb_states):
            for d in range(nb_raw_features):
                out.append(Feature(
                    global_id=offset + s * nb_raw_features + d,
                    value=0.0,
                    node_state=s,
                    dimension=d,
                ))
