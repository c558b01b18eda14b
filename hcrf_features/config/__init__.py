"""Configuration settings for the hCRF feature layer."""

from .settings import settings, Settings

__all__ = ["settings", "Settings"]
