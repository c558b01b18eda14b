# features/edge.py
"""
Transition (edge) features.

Both kinds index transitions the same way: transition (prev_state, state) has
local index prev_state * nb_states + state. A feature mask is a boolean
(nb_seq_labels, nb_states ** 2) array saying which transitions are legal
under which sequence label.
"""

from dataclasses import dataclass
from typing import Callable, Union

import numpy as np

from .base import Feature, FeatureKind, FeatureVector
from ..data.sequence import DataSequence
from ..models.model import Model
from ..utils.exceptions import ConfigurationError
from ..utils.helpers import UNSET
from ..utils.logger import get_logger

logger = get_logger(__name__)

MaskPolicy = Callable[[Model], np.ndarray]


def all_transitions_policy(model: Model) -> np.ndarray:
    """Every transition is legal under every label."""
    return np.ones((model.nb_seq_labels, model.nb_states ** 2), dtype=bool)


def state_matrix_policy(model: Model) -> np.ndarray:
    """
    A transition is legal under a label when the label may use both of its states.

    With Model.with_states_per_label this confines each label to transitions
    inside its own block of hidden states.
    """
    allowed = model.state_matrix
    # (labels, prev, cur) -> (labels, prev * nb_states + cur)
    return (allowed[:, :, None] & allowed[:, None, :]).reshape(model.nb_seq_labels, -1)


@dataclass(frozen=True)
class EdgeLayout:
    nb_states: int
    mask: np.ndarray
    # Transitions legal under at least one label, used when no label is given
    any_label: np.ndarray

    @property
    def nb_features(self) -> int:
        return self.nb_states * self.nb_states


def _freeze(mask: np.ndarray, nb_states: int) -> EdgeLayout:
    mask = np.array(mask, dtype=bool)
    mask.setflags(write=False)
    any_label = mask.any(axis=0)
    any_label.setflags(write=False)
    return EdgeLayout(nb_states=nb_states, mask=mask, any_label=any_label)


class EdgeFeatures(FeatureKind):
    """
    Indicator features on transitions, one per (prev_state, state), value 1.

    Nothing is emitted for prev_node_index == -1. When `label` is set it is
    read as a hidden state and only transitions into that state are emitted.
    """

    feature_type_id = "edge"

    def compute_feature_mask(self, model: Model) -> np.ndarray:
        """All-true mask: plain edge features are not restricted by label."""
        return all_transitions_policy(model)

    def _build_layout(self, model: Model) -> EdgeLayout:
        return _freeze(self.compute_feature_mask(model), model.nb_states)

    def is_edge_feature_type(self) -> bool:
        return True

    def get_features(self, out: FeatureVector, sequence: DataSequence, model: Model,
                     node_index: int, prev_node_index: int, label: int = UNSET) -> None:
        layout = self._check_call(sequence, model, node_index, prev_node_index, label, model.nb_states)
        if prev_node_index == UNSET:
            return
        offset = model.offset(self.feature_type_id)
        n = layout.nb_states
        for prev in range(n):
            for cur in self._label_states(model, label):
                out.append(Feature(
                    global_id=offset + prev * n + cur,
                    value=1.0,
                    node_index=node_index,
                    node_state=cur,
                    prev_node_index=prev_node_index,
                    prev_node_state=prev,
                ))

    def get_all_features(self, out: FeatureVector, model: Model, nb_raw_features: int) -> None:
        n = self.layout.nb_states
        offset = model.offset(self.feature_type_id)
        for prev in range(n):
            for cur in range(n):
                out.append(Feature(
                    global_id=offset + prev * n + cur,
                    value=1.0,
                    node_state=cur,
                    prev_node_state=prev,
                ))


class LabelEdgeFeatures(FeatureKind):
    """
    Transition features restricted per sequence label by a feature mask.

    The mask comes from a pluggable policy: a callable taking the model and
    returning a (nb_seq_labels, nb_states ** 2) boolean array, or such an array
    directly. All labels share one block of nb_states ** 2 indices; a transition
    that is illegal under the requested label is simply not emitted. With no
    label given, a transition is emitted if any label allows it.
    """

    feature_type_id = "label_edge"
    conditions_on_sequence_label = True

    def __init__(self, mask_policy: Union[MaskPolicy, np.ndarray, None] = None):
        super().__init__()
        self.mask_policy = mask_policy if mask_policy is not None else state_matrix_policy

    def compute_feature_mask(self, model: Model) -> np.ndarray:
        """
        Evaluate the mask policy against the model and check its shape.

        Raises:
            ConfigurationError: If the policy's label count or transition count
                disagrees with the model.
        """
        if callable(self.mask_policy):
            mask = self.mask_policy(model)
        else:
            mask = self.mask_policy
        mask = np.array(mask, dtype=bool)
        if mask.ndim != 2:
            raise ConfigurationError(f"Feature mask must be 2-D, got {mask.ndim}-D")
        if mask.shape[0] != model.nb_seq_labels:
            raise ConfigurationError(
                f"Feature mask declares {mask.shape[0]} labels, model has {model.nb_seq_labels}"
            )
        if mask.shape[1] != model.nb_states ** 2:
            raise ConfigurationError(
                f"Feature mask has {mask.shape[1]} transitions, model has {model.nb_states ** 2}"
            )
        return mask

    def _build_layout(self, model: Model) -> EdgeLayout:
        layout = _freeze(self.compute_feature_mask(model), model.nb_states)
        logger.info(
            f"Label edge mask: {int(layout.mask.sum())} legal of "
            f"{layout.mask.size} (label, transition) pairs"
        )
        return layout

    def is_edge_feature_type(self) -> bool:
        return True

    def get_features(self, out: FeatureVector, sequence: DataSequence, model: Model,
                     node_index: int, prev_node_index: int, label: int = UNSET) -> None:
        layout = self._check_call(sequence, model, node_index, prev_node_index, label, model.nb_seq_labels)
        if prev_node_index == UNSET:
            return
        legal = layout.any_label if label == UNSET else layout.mask[label]
        offset = model.offset(self.feature_type_id)
        n = layout.nb_states
        for t in np.flatnonzero(legal):
            t = int(t)
            out.append(Feature(
                global_id=offset + t,
                value=1.0,
                node_index=node_index,
                node_state=t % n,
                prev_node_index=prev_node_index,
                prev_node_state=t // n,
                sequence_label=label,
            ))

    def get_all_features(self, out: FeatureVector, model: Model, nb_raw_features: int) -> None:
        n = self.layout.nb_states
        offset = model.offset(self.feature_type_id)
        for t in range(n * n):
            out.append(Feature(
                global_id=offset + t,
                value=1.0,
                node_state=t % n,
                prev_node_state=t // n,
            ))
