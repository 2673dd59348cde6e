"""Value objects produced by the capture-and-analyze pipeline."""

from visualguard.models.result import ImageArtifact, InspectionResult

__all__ = ["ImageArtifact", "InspectionResult"]
