"""Capture-and-analyze pipeline: the single entry point behind the API and CLI.

Runs the capture session, then the inspection client, and folds every
failure into ``InspectionResult.failed``. Nothing raised by either stage
escapes :meth:`InspectionPipeline.analyze`.
"""

from __future__ import annotations

import logging

from visualguard.browser.address import normalize_address
from visualguard.browser.capture import CaptureConfig, CaptureSession
from visualguard.browser.driver import BrowserDriver
from visualguard.exceptions import VisualGuardError
from visualguard.inspection.client import InspectionClient
from visualguard.llm.base import InferenceProvider
from visualguard.models.result import InspectionResult
from visualguard.settings.config import Settings

logger = logging.getLogger(__name__)


class InspectionPipeline:
    """Stateless orchestrator; safe to share between concurrent requests.

    Each :meth:`analyze` call gets its own browser process and its own
    inference request. Nothing pools or limits concurrent browsers.

    Args:
        driver: Browser capability.
        capture_config: Launch and timing configuration for capture sessions.
        client: Inspection client wrapping the inference provider.
    """

    def __init__(
        self,
        *,
        driver: BrowserDriver,
        capture_config: CaptureConfig,
        client: InspectionClient,
        provider: InferenceProvider | None = None,
    ) -> None:
        self._driver = driver
        self._capture_config = capture_config
        self._client = client
        self._provider = provider

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        driver: BrowserDriver | None = None,
        provider: InferenceProvider | None = None,
    ) -> "InspectionPipeline":
        """Build a pipeline after checking that required configuration is present.

        Raises:
            ConfigurationError: If the inference credential is missing.
        """
        settings.require_inference_credentials()

        if driver is None:
            from visualguard.browser.playwright_driver import PlaywrightDriver

            driver = PlaywrightDriver()
        if provider is None:
            from visualguard.llm.factory import create_inference_provider

            provider = create_inference_provider(settings.llm)

        return cls(
            driver=driver,
            capture_config=CaptureConfig.from_settings(settings.browser),
            client=InspectionClient.from_settings(provider, settings.llm),
            provider=provider,
        )

    async def analyze(self, raw_address: str) -> InspectionResult:
        """Inspect the first viewport of *raw_address*.

        Returns:
            ``InspectionResult.succeeded`` with the report and screenshot, or
            ``InspectionResult.failed`` with a reason. A screenshot captured
            before an inference failure is discarded.
        """
        try:
            address = normalize_address(raw_address)
        except ValueError as exc:
            return InspectionResult.failed(str(exc))

        logger.info("Inspecting storefront %s", address)
        try:
            artifact = await CaptureSession(self._driver, self._capture_config).run(address)
            logger.info("Requesting visual inspection for %s", address)
            report = await self._client.inspect(artifact)
        except VisualGuardError as exc:
            logger.error("Inspection of %s failed: %s", address, exc)
            return InspectionResult.failed(str(exc))
        except Exception as exc:
            logger.exception("Unexpected error while inspecting %s", address)
            return InspectionResult.failed(f"{type(exc).__name__}: {exc}")

        return InspectionResult.succeeded(report, artifact)

    async def aclose(self) -> None:
        """Release the inference provider's connection pool."""
        if self._provider is not None:
            await self._provider.aclose()


async def analyze(raw_address: str, settings: Settings | None = None) -> InspectionResult:
    """One-shot helper: build a pipeline from settings, inspect, and clean up.

    Raises:
        ConfigurationError: If the inference credential is missing.
    """
    if settings is None:
        from visualguard.settings import get_settings

        settings = get_settings()

    pipeline = InspectionPipeline.from_settings(settings)
    try:
        return await pipeline.analyze(raw_address)
    finally:
        await pipeline.aclose()
