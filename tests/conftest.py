# tests/conftest.py
"""Shared fixtures for all tests."""

import numpy as np
import pandas as pd
import pytest

from hcrf_features.data.sequence import DataSequence, DataSet
from hcrf_features.models.model import Model


@pytest.fixture
def short_sequence() -> DataSequence:
    """Length-3 sequence with a single raw feature: 0.2, 0.5, 0.9."""
    return DataSequence([[0.2], [0.5], [0.9]], label=0)


@pytest.fixture
def single_state_model() -> Model:
    """One state, one label, one raw feature."""
    return Model(nb_states=1, nb_seq_labels=1, nb_raw_features=1)


@pytest.fixture
def sample_sequence() -> DataSequence:
    """Length-5 sequence with two raw features."""
    np.random.seed(42)
    return DataSequence(np.random.randn(5, 2), label=1)


@pytest.fixture
def sample_dataset(sample_sequence) -> DataSet:
    """Two sequences with two raw features each."""
    np.random.seed(7)
    other = DataSequence(pd.DataFrame(np.random.randn(4, 2), columns=["x", "y"]).to_numpy(), label=0)
    return DataSet([sample_sequence, other])


@pytest.fixture
def three_state_model() -> Model:
    """Three hidden states, two labels, two raw features, all states allowed for all labels."""
    return Model(nb_states=3, nb_seq_labels=2, nb_raw_features=2)


@pytest.fixture
def partitioned_model() -> Model:
    """Two labels with two private hidden states each (4 states total)."""
    return Model.with_states_per_label(states_per_label=2, nb_seq_labels=2, nb_raw_features=2)
