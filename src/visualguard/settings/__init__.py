"""Layered configuration for VisualGuard."""

from visualguard.settings.config import Settings, get_settings

__all__ = ["Settings", "get_settings"]
