# models/model.py
"""Model view consumed by the feature kinds: sizes, index allocation, weights."""

from typing import Dict, Optional, Tuple

import numpy as np

from ..utils.exceptions import ConfigurationError, PreconditionError
from ..utils.logger import get_logger

logger = get_logger(__name__)


class Model:
    """
    Sizes and parameters of a hidden-state CRF, as seen by the feature layer.

    Each feature kind owns one contiguous block of the global feature index
    space. Blocks are handed out by `allocate` in call order, so the layout is
    fixed by the order in which kinds are initialised and never moves after.

    Attributes:
        nb_states: Number of hidden states per position.
        nb_seq_labels: Number of sequence labels.
        nb_raw_features: Dimension of one observation vector.
        state_matrix: Boolean (nb_seq_labels, nb_states) table; True where a
            sequence label may use a hidden state.
        weights: One weight per allocated global feature.
    """

    def __init__(
        self,
        nb_states: int,
        nb_seq_labels: int = 1,
        nb_raw_features: int = 0,
        state_matrix: Optional[np.ndarray] = None,
    ):
        if nb_states < 1:
            raise ConfigurationError(f"nb_states must be >= 1, got {nb_states}")
        if nb_seq_labels < 1:
            raise ConfigurationError(f"nb_seq_labels must be >= 1, got {nb_seq_labels}")
        if nb_raw_features < 0:
            raise ConfigurationError(f"nb_raw_features must be >= 0, got {nb_raw_features}")
        self.nb_states = nb_states
        self.nb_seq_labels = nb_seq_labels
        self.nb_raw_features = nb_raw_features

        if state_matrix is None:
            state_matrix = np.ones((nb_seq_labels, nb_states), dtype=bool)
        state_matrix = np.array(state_matrix, dtype=bool)
        if state_matrix.shape != (nb_seq_labels, nb_states):
            raise ConfigurationError(
                f"state_matrix has shape {state_matrix.shape}, "
                f"expected ({nb_seq_labels}, {nb_states})"
            )
        state_matrix.setflags(write=False)
        self.state_matrix = state_matrix

        self._blocks: Dict[str, Tuple[int, int]] = {}
        self._nb_features = 0
        self.weights = np.zeros(0, dtype=np.float64)
        self._gate_weights: Dict[str, np.ndarray] = {}

    @classmethod
    def with_states_per_label(cls, states_per_label: int, nb_seq_labels: int,
                              nb_raw_features: int = 0) -> "Model":
        """
        Build a model whose hidden states are split into one block per label.

        Label l may only use states [l * states_per_label, (l + 1) * states_per_label).
        """
        nb_states = states_per_label * nb_seq_labels
        state_matrix = np.zeros((nb_seq_labels, nb_states), dtype=bool)
        for label in range(nb_seq_labels):
            state_matrix[label, label * states_per_label:(label + 1) * states_per_label] = True
        return cls(nb_states, nb_seq_labels, nb_raw_features, state_matrix=state_matrix)

    # ---- Global feature index allocation ----

    def allocate(self, type_id: str, count: int) -> int:
        """
        Reserve `count` global indices for a feature type and return the offset.

        Asking again for the same type with the same count returns the existing
        offset. A different count means two producers disagree about the layout.
        """
        if type_id in self._blocks:
            offset, existing = self._blocks[type_id]
            if existing != count:
                raise ConfigurationError(
                    f"Feature type '{type_id}' already holds {existing} indices, requested {count}"
                )
            return offset

        offset = self._nb_features
        self._blocks[type_id] = (offset, count)
        self._nb_features += count
        self.weights = np.concatenate([self.weights, np.zeros(count, dtype=np.float64)])
        logger.debug(f"Allocated {count} indices for '{type_id}' at offset {offset}")
        return offset

    def is_allocated(self, type_id: str) -> bool:
        return type_id in self._blocks

    def offset(self, type_id: str) -> int:
        try:
            return self._blocks[type_id][0]
        except KeyError:
            raise PreconditionError(f"Feature type '{type_id}' has no allocated indices")

    def global_index(self, type_id: str, local: int) -> int:
        """Map (feature type, local offset) to its global feature index."""
        try:
            offset, count = self._blocks[type_id]
        except KeyError:
            raise PreconditionError(f"Feature type '{type_id}' has no allocated indices")
        if not 0 <= local < count:
            raise PreconditionError(f"Local index {local} outside [0, {count}) for '{type_id}'")
        return offset + local

    @property
    def nb_features(self) -> int:
        return self._nb_features

    @property
    def feature_blocks(self) -> Dict[str, Tuple[int, int]]:
        """Copy of the allocation table: type_id -> (offset, count)."""
        return dict(self._blocks)

    def set_weights(self, weights) -> None:
        weights = np.asarray(weights, dtype=np.float64)
        if weights.shape != (self._nb_features,):
            raise PreconditionError(
                f"weights has shape {weights.shape}, expected ({self._nb_features},)"
            )
        self.weights = weights.copy()

    # ---- Gate weights ----

    def get_gate_weights(self, type_id: str) -> Optional[np.ndarray]:
        """Current gate weights for a gated feature type, or None if never set."""
        return self._gate_weights.get(type_id)

    def set_gate_weights(self, type_id: str, weights) -> None:
        """
        Replace the gate weights of a gated feature type.

        The array is swapped in whole, so an extraction call that already
        fetched the previous array keeps reading a consistent snapshot.
        """
        weights = np.array(weights, dtype=np.float64)
        if weights.ndim != 2:
            raise PreconditionError(f"Gate weights must be 2-D (nb_gates, inputs), got {weights.ndim}-D")
        weights.setflags(write=False)
        self._gate_weights[type_id] = weights

    def __repr__(self) -> str:
        return (
            f"Model(nb_states={self.nb_states}, nb_seq_labels={self.nb_seq_labels}, "
            f"nb_raw_features={self.nb_raw_features}, nb_features={self._nb_features})"
        )
