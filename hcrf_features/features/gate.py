# features/gate.py
"""
Gated node features: a one-layer network between the raw observations and the CRF.

For each position the kind builds a pre-gate vector (the raw observations of
a window of positions around it), takes its dot product with each gate's
weight row, and squashes the result through

    gate(x) = 1 / (1 + exp(x))

Note the sign: this is the decreasing logistic, and the gradient code that
consumes `gate_derivative` and `get_pre_gate_features` differentiates exactly
this form. Gate weights live in the model (one (nb_gates, gate_input_size)
array per gated feature type) and are read on every call.
"""

import math
from dataclasses import dataclass

import numpy as np

from .base import Feature, FeatureKind, FeatureVector
from ..data.sequence import DataSequence
from ..models.model import Model
from ..utils.exceptions import ConfigurationError, PreconditionError
from ..utils.helpers import UNSET, check_index, padded_window
from ..utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class GateLayout:
    nb_states: int
    nb_gates: int
    nb_features_per_gate: int
    window_size: int

    @property
    def gate_input_size(self) -> int:
        return self.nb_features_per_gate * (2 * self.window_size + 1)

    @property
    def nb_features(self) -> int:
        return self.nb_states * self.nb_gates


class GateNodeFeatures(FeatureKind):
    """
    Node features produced by `nb_gates` learned sigmoid gates, once per hidden state.

    Local index of (state, gate) is state * nb_gates + gate. Every state sees
    the same gate outputs; the CRF learns a separate weight for each pair.
    """

    feature_type_id = "gate"

    def __init__(self, nb_gates: int, window_size: int = 0):
        """
        Args:
            nb_gates: Number of independent gates.
            window_size: Context radius; 0 uses only the current position.
        """
        super().__init__()
        if nb_gates < 1:
            raise ConfigurationError(f"nb_gates must be >= 1, got {nb_gates}")
        if window_size < 0:
            raise ConfigurationError(f"window_size must be >= 0, got {window_size}")
        self.nb_gates = nb_gates
        self.window_size = window_size

    def _build_layout(self, model: Model) -> GateLayout:
        if model.nb_raw_features < 1:
            raise ConfigurationError("GateNodeFeatures needs a model with at least one raw feature")
        layout = GateLayout(
            nb_states=model.nb_states,
            nb_gates=self.nb_gates,
            nb_features_per_gate=model.nb_raw_features,
            window_size=self.window_size,
        )
        expected = (layout.nb_gates, layout.gate_input_size)
        weights = model.get_gate_weights(self.feature_type_id)
        if weights is None:
            model.set_gate_weights(self.feature_type_id, np.zeros(expected))
            logger.info(f"Initialised {expected[0]}x{expected[1]} gate weights to zero")
        elif weights.shape != expected:
            raise ConfigurationError(f"Model gate weights have shape {weights.shape}, expected {expected}")
        return layout

    def is_edge_feature_type(self) -> bool:
        return False

    def get_nb_features_per_gate(self) -> int:
        return self.layout.nb_features_per_gate

    def get_nb_gates(self) -> int:
        return self.nb_gates

    @property
    def gate_input_size(self) -> int:
        return self.layout.gate_input_size

    @staticmethod
    def gate(x: float) -> float:
        """1 / (1 + exp(x)), evaluated without overflowing for large |x|."""
        if x >= 0:
            e = math.exp(-x)
            return e / (1.0 + e)
        return 1.0 / (1.0 + math.exp(x))

    @classmethod
    def gate_derivative(cls, x: float) -> float:
        """d gate / dx = -gate(x) * (1 - gate(x))."""
        g = cls.gate(x)
        return -g * (1.0 - g)

    def get_pre_gate_features(self, sequence: DataSequence, model: Model, node_index: int) -> np.ndarray:
        """
        Raw inputs feeding every gate at node_index.

        Observations of positions node_index - window_size .. node_index + window_size,
        concatenated in position order; positions outside the sequence are zeros.
        The gradient calls this to get exactly the values the forward pass used.
        """
        layout = self.layout
        if sequence.nb_raw_features != layout.nb_features_per_gate:
            raise PreconditionError(
                f"Sequence has {sequence.nb_raw_features} raw features, "
                f"gates were built for {layout.nb_features_per_gate}"
            )
        check_index(node_index, len(sequence), "node_index")
        return padded_window(sequence.observations, node_index, layout.window_size)

    def gate_sums(self, sequence: DataSequence, model: Model, node_index: int) -> np.ndarray:
        """Pre-activation value of each gate at node_index."""
        weights = self._current_weights(model)
        return weights @ self.get_pre_gate_features(sequence, model, node_index)

    def _current_weights(self, model: Model) -> np.ndarray:
        layout = self.layout
        weights = model.get_gate_weights(self.feature_type_id)
        expected = (layout.nb_gates, layout.gate_input_size)
        if weights is None or weights.shape != expected:
            found = None if weights is None else weights.shape
            raise PreconditionError(f"Model gate weights have shape {found}, expected {expected}")
        return weights

    def get_features(self, out: FeatureVector, sequence: DataSequence, model: Model,
                     node_index: int, prev_node_index: int, label: int = UNSET) -> None:
        layout = self._check_call(sequence, model, node_index, prev_node_index, label, model.nb_states)
        gated = [self.gate(float(s)) for s in self.gate_sums(sequence, model, node_index)]
        offset = model.offset(self.feature_type_id)
        for s in self._label_states(model, label):
            for g, value in enumerate(gated):
                out.append(Feature(
                    global_id=offset + s * layout.nb_gates + g,
                    value=value,
                    node_index=node_index,
                    node_state=s,
                    dimension=g,
                ))

    def get_all_features(self, out: FeatureVector, model: Model, nb_raw_features: int) -> None:
        layout = self.layout
        offset = model.offset(self.feature_type_id)
        for s in range(layout.nb_states):
            for g in range(layout.nb_gates):
                out.append(Feature(
                    global_id=offset + s * layout.nb_gates + g,
                    value=0.0,
                    node_state=s,
                    dimension=g,
                ))
