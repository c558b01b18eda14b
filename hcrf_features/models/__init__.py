"""Model view: sizes, feature index allocation and parameters."""

from .model import Model

__all__ = ["Model"]
