"""Result models for a single storefront inspection.

``ImageArtifact`` is the captured first-viewport screenshot;
``InspectionResult`` is the only thing the pipeline hands back to callers.
"""

from __future__ import annotations

import base64
import binascii
import json
from dataclasses import dataclass
from typing import Any

# Leading marker of the all-clear report the model is instructed to emit.
ALL_CLEAR_MARKER = "✅"


@dataclass(frozen=True)
class ImageArtifact:
    """An encoded raster screenshot of the page's first viewport."""

    data: bytes
    width: int = 0
    height: int = 0
    media_type: str = "image/png"

    @property
    def base64(self) -> str:
        """Binary-to-text transport form of the image bytes."""
        return base64.b64encode(self.data).decode("ascii")

    @property
    def data_uri(self) -> str:
        """The image as an inline ``data:`` URI."""
        return f"data:{self.media_type};base64,{self.base64}"

    @property
    def size_bytes(self) -> int:
        return len(self.data)

    @classmethod
    def from_data_uri(cls, uri: str, *, width: int = 0, height: int = 0) -> "ImageArtifact":
        """Decode a ``data:<media>;base64,<payload>`` URI back into an artifact.

        Raises:
            ValueError: If *uri* is not a base64 data URI.
        """
        header, sep, payload = uri.partition(",")
        if not sep or not header.startswith("data:") or not header.endswith(";base64"):
            raise ValueError("Not a base64 data URI")
        media_type = header[len("data:") : -len(";base64")] or "application/octet-stream"
        try:
            data = base64.b64decode(payload, validate=True)
        except binascii.Error as exc:
            raise ValueError(f"Invalid base64 payload: {exc}") from exc
        return cls(data=data, width=width, height=height, media_type=media_type)


@dataclass(frozen=True)
class InspectionResult:
    """Outcome of one pipeline run: either a report with its screenshot, or a reason.

    Use :meth:`succeeded` / :meth:`failed` rather than the constructor.
    """

    success: bool
    report: str | None = None
    artifact: ImageArtifact | None = None
    error: str | None = None

    def __post_init__(self) -> None:
        if self.success:
            if self.report is None or self.artifact is None or self.error is not None:
                raise ValueError("A successful result needs a report and an artifact, and no error")
        elif self.error is None or self.report is not None or self.artifact is not None:
            raise ValueError("A failed result carries only an error reason")

    @classmethod
    def succeeded(cls, report: str, artifact: ImageArtifact) -> "InspectionResult":
        return cls(success=True, report=report, artifact=artifact)

    @classmethod
    def failed(cls, reason: str) -> "InspectionResult":
        return cls(success=False, error=reason)

    @property
    def is_all_clear(self) -> bool:
        """True when the report is the model's "no issues found" answer."""
        return bool(self.success and self.report and self.report.lstrip().startswith(ALL_CLEAR_MARKER))

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the wire shape returned by the HTTP API."""
        if self.success:
            return {
                "success": True,
                "report": self.report,
                "screenshot": self.artifact.data_uri,  # type: ignore[union-attr]
            }
        return {"success": False, "error": self.error}

    def to_json(self, indent: int = 2) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)
