# utils/exceptions.py
"""Custom exceptions for the feature layer.

Nothing in this package catches these: every one of them marks a caller bug
or a broken configuration and is meant to surface immediately.
"""


class FeatureError(Exception):
    """Base exception for all feature-layer errors."""
    pass


class PreconditionError(FeatureError):
    """Raised when an extraction call violates its contract (bad index, not initialised, shape mismatch)."""
    pass


class ConfigurationError(FeatureError):
    """Raised at init or build time when a producer disagrees with the model."""
    pass


class DataValidationError(FeatureError):
    """Raised when sequence observations are malformed."""
    pass
