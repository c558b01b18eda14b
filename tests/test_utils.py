# tests/test_utils.py
"""Tests for logging setup and shared helpers."""

import logging

import numpy as np
import pytest

from hcrf_features.utils.exceptions import FeatureError, PreconditionError
from hcrf_features.utils.helpers import check_index, check_optional_index, padded_window
from hcrf_features.utils.logger import get_logger


def test_get_logger_configures_once(tmp_path):
    """Handlers are attached on first use only."""
    log_file = tmp_path / "logs" / "features.log"
    logger = get_logger("hcrf_features.test_logger", log_file=str(log_file))
    assert isinstance(logger, logging.Logger)
    assert len(logger.handlers) == 2
    assert log_file.parent.exists()

    again = get_logger("hcrf_features.test_logger")
    assert again is logger
    assert len(again.handlers) == 2


def test_index_checks():
    """UNSET is accepted only where optional."""
    assert check_index(0, 3, "i") == 0
    assert check_optional_index(-1, 3, "i") == -1
    with pytest.raises(PreconditionError):
        check_index(-1, 3, "i")
    with pytest.raises(FeatureError):
        check_optional_index(3, 3, "i")


def test_padded_window():
    """Rows outside the array are zero-filled."""
    obs = np.array([[1.0, 2.0], [3.0, 4.0]])
    np.testing.assert_array_equal(padded_window(obs, 0, 1), [0.0, 0.0, 1.0, 2.0, 3.0, 4.0])
    np.testing.assert_array_equal(padded_window(obs, 1, 0), [3.0, 4.0])
    np.testing.assert_array_equal(padded_window(obs, 0, 3)[:6], np.zeros(6))
