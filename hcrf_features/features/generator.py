# features/generator.py
"""Holds the feature kinds of a model and concatenates their output per node or edge."""

from typing import Dict, List, Optional, Type

from .base import FeatureKind, FeatureVector
from .edge import EdgeFeatures, LabelEdgeFeatures
from .gate import GateNodeFeatures
from .raw import RawFeatures
from ..config.settings import Settings, settings as default_settings
from ..data.sequence import DataSequence, DataSet
from ..models.model import Model
from ..utils.exceptions import ConfigurationError, PreconditionError
from ..utils.helpers import UNSET
from ..utils.logger import get_logger

logger = get_logger(__name__)

FEATURE_KINDS: Dict[str, Type[FeatureKind]] = {
    "raw": RawFeatures,
    "edge": EdgeFeatures,
    "label_edge": LabelEdgeFeatures,
    "gate": GateNodeFeatures,
}


def build_feature_kinds(names: List[str], nb_gates: int = 1, window_size: int = 0) -> List[FeatureKind]:
    """
    Instantiate feature kinds by registry name, in the given order.

    Args:
        names: Keys of FEATURE_KINDS.
        nb_gates: Passed to GateNodeFeatures.
        window_size: Passed to GateNodeFeatures.

    Raises:
        ConfigurationError: For an unknown name.
    """
    kinds = []
    for name in names:
        try:
            cls = FEATURE_KINDS[name]
        except KeyError:
            raise ConfigurationError(
                f"Unknown feature kind '{name}'. Known kinds: {', '.join(sorted(FEATURE_KINDS))}"
            )
        if cls is GateNodeFeatures:
            kinds.append(GateNodeFeatures(nb_gates=nb_gates, window_size=window_size))
        else:
            kinds.append(cls())
    return kinds


class FeatureGenerator:
    """
    Routes feature kinds into the node pass or the edge pass and concatenates their output.

    The global index layout is the order in which kinds were added: each kind's
    block is allocated in the model when `init_features` reaches it.
    """

    def __init__(self, feature_kinds: Optional[List[FeatureKind]] = None):
        self._kinds: List[FeatureKind] = []
        for kind in feature_kinds or []:
            self.add_feature_kind(kind)

    @classmethod
    def from_settings(cls, config: Optional[Settings] = None) -> "FeatureGenerator":
        config = config or default_settings
        return cls(build_feature_kinds(config.feature_kinds, config.nb_gates, config.window_size))

    def add_feature_kind(self, kind: FeatureKind) -> None:
        if any(k.feature_type_id == kind.feature_type_id for k in self._kinds):
            raise ConfigurationError(f"A '{kind.feature_type_id}' feature kind is already registered")
        self._kinds.append(kind)

    @property
    def feature_kinds(self) -> List[FeatureKind]:
        return list(self._kinds)

    @property
    def node_kinds(self) -> List[FeatureKind]:
        return [k for k in self._kinds if not k.is_edge_feature_type()]

    @property
    def edge_kinds(self) -> List[FeatureKind]:
        return [k for k in self._kinds if k.is_edge_feature_type()]

    def find(self, type_id: str) -> FeatureKind:
        """Return the kind registered under type_id, e.g. to reach the gate for the gradient."""
        for kind in self._kinds:
            if kind.feature_type_id == type_id:
                return kind
        raise KeyError(type_id)

    def init_features(self, dataset: DataSet, model: Model) -> None:
        """Initialise every kind against the model, fixing the global index layout."""
        if not self._kinds:
            raise ConfigurationError("FeatureGenerator has no feature kinds")
        for kind in self._kinds:
            kind.init(dataset, model)
        layout = ", ".join(
            f"{type_id}@{offset}+{count}" for type_id, (offset, count) in model.feature_blocks.items()
        )
        logger.info(f"Initialised {len(self._kinds)} feature kinds, {model.nb_features} features: {layout}")

    def get_features(
        self,
        sequence: DataSequence,
        model: Model,
        node_index: int,
        prev_node_index: int = UNSET,
        state: int = UNSET,
        seq_label: int = UNSET,
    ) -> FeatureVector:
        """
        Features active at node_index (node pass) or on prev_node_index -> node_index (edge pass).

        Args:
            sequence: Sequence being scored.
            model: Model the kinds were initialised against.
            node_index: Current position.
            prev_node_index: -1 for the node pass, the predecessor position for the edge pass.
            state: Hidden-state restriction passed to kinds that take one.
            seq_label: Sequence label passed to label-conditioned kinds.
        """
        kinds = self.node_kinds if prev_node_index == UNSET else self.edge_kinds
        out = FeatureVector()
        for kind in kinds:
            label = seq_label if kind.conditions_on_sequence_label else state
            kind.get_features(out, sequence, model, node_index, prev_node_index, label)
        return out

    def get_all_features(self, model: Model, nb_raw_features: Optional[int] = None) -> FeatureVector:
        """Descriptors of every feature any kind can emit, in global index order."""
        if nb_raw_features is None:
            nb_raw_features = model.nb_raw_features
        out = FeatureVector()
        for kind in self._kinds:
            kind.get_all_features(out, model, nb_raw_features)
        return out

    def compute_potential(
        self,
        sequence: DataSequence,
        model: Model,
        node_index: int,
        prev_node_index: int = UNSET,
        state: int = UNSET,
        seq_label: int = UNSET,
    ) -> float:
        """Dot product of the active features with the model weights."""
        features = self.get_features(sequence, model, node_index, prev_node_index, state, seq_label)
        return features.dot(model.weights)

    def nb_features(self, model: Model) -> int:
        uninitialized = [k for k in self._kinds if not k.is_initialized]
        if uninitialized:
            raise PreconditionError(
                f"Feature kinds not initialised: {', '.join(type(k).__name__ for k in uninitialized)}"
            )
        return sum(k.nb_features for k in self._kinds)
