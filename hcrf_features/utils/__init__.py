"""Utility functions, custom exceptions, and logging setup."""

from .logger import get_logger
from .exceptions import (
    FeatureError,
    PreconditionError,
    ConfigurationError,
    DataValidationError,
)
from .helpers import UNSET, check_index, check_optional_index, padded_window

__all__ = [
    "get_logger",
    "FeatureError",
    "PreconditionError",
    "ConfigurationError",
    "DataValidationError",
    "UNSET",
    "check_index",
    "check_optional_index",
    "padded_window",
]
