"""VisualGuard: automated visual QA for e-commerce storefront pages."""

from __future__ import annotations

try:
    from importlib.metadata import version

    __version__ = version("visualguard")
except Exception:
    __version__ = "0.0.0"
