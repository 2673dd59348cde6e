"""VisualGuard exception hierarchy.

Every failure the pipeline knows how to describe derives from
``VisualGuardError`` and is converted into a ``Failure`` result at the
pipeline boundary.
"""

from __future__ import annotations


class VisualGuardError(Exception):
    """Base exception for all VisualGuard-specific errors."""


class ConfigurationError(VisualGuardError):
    """Raised at startup when required configuration is missing or invalid."""


# ---------------------------------------------------------------------------
# Capture stage
# ---------------------------------------------------------------------------


class CaptureError(VisualGuardError):
    """Base for failures while rendering and capturing a page."""


class BrowserStartupError(CaptureError):
    """Raised when the browser executable could not be launched."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Browser failed to start: {reason}")


class NavigationError(CaptureError):
    """Raised when a page is unreachable or did not finish loading in time.

    Attributes:
        url: The address that was being loaded.
        reason: Human-readable cause.
    """

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"Page failed to load ({url}): {reason}")


class ScreenshotError(CaptureError):
    """Raised when the viewport screenshot could not be taken."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Screenshot capture failed: {reason}")


# ---------------------------------------------------------------------------
# Inference stage
# ---------------------------------------------------------------------------


class InferenceError(VisualGuardError):
    """Raised when the inference endpoint returns an error or a malformed response."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Inference request failed: {reason}")


class InferenceTimeout(InferenceError):
    """Raised when the inference call exceeds its deadline.

    Attributes:
        timeout_ms: The deadline that was exceeded.
    """

    def __init__(self, timeout_ms: int) -> None:
        self.timeout_ms = timeout_ms
        super().__init__(f"timeout after {timeout_ms / 1000:g}s, check network connectivity or retry later")
