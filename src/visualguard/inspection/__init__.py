"""Vision-model inspection of captured storefront screenshots."""

from visualguard.inspection.client import InspectionClient

__all__ = ["InspectionClient"]
