"""Sequence containers consumed by the feature kinds."""

from .sequence import DataSequence, DataSet

__all__ = ["DataSequence", "DataSet"]
