# tests/test_gate_features.py
"""Tests for GateNodeFeatures."""

import math

import numpy as np
import pytest

from hcrf_features.data.sequence import DataSequence, DataSet
from hcrf_features.features.base import FeatureVector
from hcrf_features.features.gate import GateNodeFeatures
from hcrf_features.models.model import Model
from hcrf_features.utils.exceptions import ConfigurationError, PreconditionError


def test_gate_function():
    """gate(0) is one half, the curve decreases and stays inside (0, 1)."""
    gate = GateNodeFeatures.gate
    assert gate(0.0) == 0.5
    xs = np.linspace(-30, 30, 121)
    values = [gate(float(x)) for x in xs]
    assert all(a > b for a, b in zip(values, values[1:]))
    assert all(0.0 < v < 1.0 for v in values)
    assert gate(1.6) == pytest.approx(1.0 / (1.0 + math.exp(1.6)))
    assert gate(-2.0) == pytest.approx(1.0 / (1.0 + math.exp(-2.0)))


def test_gate_derivative_matches_finite_difference():
    """The exposed derivative carries the decreasing sign."""
    for x in (-3.0, -0.5, 0.0, 0.7, 4.0):
        h = 1e-6
        numeric = (GateNodeFeatures.gate(x + h) - GateNodeFeatures.gate(x - h)) / (2 * h)
        assert GateNodeFeatures.gate_derivative(x) == pytest.approx(numeric, rel=1e-5)
        assert GateNodeFeatures.gate_derivative(x) < 0


def test_windowed_gate_end_to_end(short_sequence, single_state_model):
    """Window 1 with unit weights at the middle position sums all three observations."""
    gates = GateNodeFeatures(nb_gates=1, window_size=1)
    gates.init(DataSet([short_sequence]), single_state_model)
    single_state_model.set_gate_weights("gate", [[1.0, 1.0, 1.0]])

    out = FeatureVector()
    gates.get_features(out, short_sequence, single_state_model, 1, -1)

    assert len(out) == 1
    assert out[0].global_id == single_state_model.global_index("gate", 0)
    assert out[0].value == pytest.approx(1.0 / (1.0 + math.exp(1.6)))
    assert out[0].value == pytest.approx(0.168, abs=1e-3)


def test_pre_gate_features_length_and_padding(short_sequence, single_state_model):
    """At the first position the leading window slots are zero padding."""
    gates = GateNodeFeatures(nb_gates=2, window_size=2)
    gates.init(DataSet([short_sequence]), single_state_model)

    pre = gates.get_pre_gate_features(short_sequence, single_state_model, 0)
    assert pre.shape == (5,)
    np.testing.assert_array_equal(pre, [0.0, 0.0, 0.2, 0.5, 0.9])

    pre_last = gates.get_pre_gate_features(short_sequence, single_state_model, 2)
    np.testing.assert_array_equal(pre_last, [0.2, 0.5, 0.9, 0.0, 0.0])

    again = gates.get_pre_gate_features(short_sequence, single_state_model, 0)
    np.testing.assert_array_equal(pre, again)


def test_pre_gate_features_without_window(sample_sequence, sample_dataset, three_state_model):
    """With window 0 the pre-gate vector is the current observation."""
    gates = GateNodeFeatures(nb_gates=3)
    gates.init(sample_dataset, three_state_model)

    pre = gates.get_pre_gate_features(sample_sequence, three_state_model, 3)
    np.testing.assert_array_equal(pre, sample_sequence.observations[3])
    assert gates.get_nb_features_per_gate() == 2
    assert gates.get_nb_gates() == 3
    assert gates.gate_input_size == 2


def test_window_multi_feature_order(sample_sequence, sample_dataset, three_state_model):
    """Window slots are whole observation vectors in position order."""
    gates = GateNodeFeatures(nb_gates=1, window_size=1)
    gates.init(sample_dataset, three_state_model)

    pre = gates.get_pre_gate_features(sample_sequence, three_state_model, 2)
    assert pre.shape == (2 * 3,)
    np.testing.assert_array_equal(pre, sample_sequence.observations[1:4].reshape(-1))


def test_features_per_state_and_gate(sample_sequence, sample_dataset, three_state_model):
    """Every state receives nb_gates outputs, all inside (0, 1)."""
    gates = GateNodeFeatures(nb_gates=2, window_size=1)
    gates.init(sample_dataset, three_state_model)
    np.random.seed(3)
    weights = np.random.randn(2, 6)
    three_state_model.set_gate_weights("gate", weights)

    out = FeatureVector()
    gates.get_features(out, sample_sequence, three_state_model, 0, -1)

    assert len(out) == three_state_model.nb_states * 2
    offset = three_state_model.offset("gate")
    assert [f.global_id for f in out] == list(range(offset, offset + 6))
    pre = gates.get_pre_gate_features(sample_sequence, three_state_model, 0)
    expected = [GateNodeFeatures.gate(float(s)) for s in weights @ pre]
    for f in out:
        assert 0.0 < f.value < 1.0
        assert f.value == pytest.approx(expected[f.dimension])

    restricted = FeatureVector()
    gates.get_features(restricted, sample_sequence, three_state_model, 0, -1, 1)
    assert [f.node_state for f in restricted] == [1, 1]


def test_zero_weights_give_one_half(sample_sequence, sample_dataset, three_state_model):
    """Init fills missing gate weights with zeros."""
    gates = GateNodeFeatures(nb_gates=1)
    gates.init(sample_dataset, three_state_model)
    assert three_state_model.get_gate_weights("gate").shape == (1, 2)

    out = FeatureVector()
    gates.get_features(out, sample_sequence, three_state_model, 4, -1)
    assert all(f.value == 0.5 for f in out)


def test_weights_read_live(short_sequence, single_state_model):
    """Replacing the model's gate weights changes the next extraction."""
    gates = GateNodeFeatures(nb_gates=1)
    gates.init(DataSet([short_sequence]), single_state_model)

    single_state_model.set_gate_weights("gate", [[2.0]])
    out = FeatureVector()
    gates.get_features(out, short_sequence, single_state_model, 2, -1)
    assert out[0].value == pytest.approx(GateNodeFeatures.gate(1.8))

    np.testing.assert_allclose(gates.gate_sums(short_sequence, single_state_model, 2), [1.8])


def test_get_all_features(sample_dataset, three_state_model):
    """Descriptors cover nb_states x nb_gates indices."""
    gates = GateNodeFeatures(nb_gates=4, window_size=1)
    gates.init(sample_dataset, three_state_model)

    out = FeatureVector()
    gates.get_all_features(out, three_state_model, 2)
    assert len(out) == 12
    assert gates.nb_features == 12
    assert gates.is_edge_feature_type() is False


def test_invalid_configuration(sample_dataset, three_state_model):
    """Bad construction parameters and mismatched gate weights are rejected."""
    with pytest.raises(ConfigurationError):
        GateNodeFeatures(nb_gates=0)
    with pytest.raises(ConfigurationError):
        GateNodeFeatures(nb_gates=1, window_size=-1)

    three_state_model.set_gate_weights("gate", np.ones((2, 5)))
    with pytest.raises(ConfigurationError):
        GateNodeFeatures(nb_gates=2, window_size=1).init(sample_dataset, three_state_model)


def test_weight_shape_changed_after_init(sample_sequence, sample_dataset, three_state_model):
    """A torn or resized weight array is caught at extraction."""
    gates = GateNodeFeatures(nb_gates=2)
    gates.init(sample_dataset, three_state_model)
    three_state_model.set_gate_weights("gate", np.ones((2, 3)))
    with pytest.raises(PreconditionError):
        gates.get_features(FeatureVector(), sample_sequence, three_state_model, 0, -1)


def test_pre_gate_preconditions(sample_sequence, three_state_model):
    """Pre-gate access needs init and an in-range position."""
    gates = GateNodeFeatures(nb_gates=1)
    with pytest.raises(PreconditionError):
        gates.get_pre_gate_features(sample_sequence, three_state_model, 0)

    gates.init(DataSet(), three_state_model)
    with pytest.raises(PreconditionError):
        gates.get_pre_gate_features(sample_sequence, three_state_model, 5)
    with pytest.raises(PreconditionError):
        gates.get_pre_gate_features(DataSequence(np.zeros((2, 3))), three_state_model, 0)


def test_model_without_raw_features():
    """Gates need at least one raw input."""
    with pytest.raises(ConfigurationError):
        GateNodeFeatures(nb_gates=1).init(DataSet(), Model(nb_states=2))
