"""Capture session: render one page in a fresh browser and screenshot its first viewport."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from visualguard.browser.driver import BrowserDriver, BrowserPage, LaunchOptions
from visualguard.exceptions import CaptureError, NavigationError, ScreenshotError
from visualguard.models.result import ImageArtifact
from visualguard.settings.config import BrowserSettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CaptureConfig:
    """Everything a capture session needs, resolved once from settings."""

    launch: LaunchOptions = field(default_factory=LaunchOptions)
    navigation_timeout_ms: int = 90_000
    network_idle_ms: int = 800
    settle_delay_ms: int = 1_500
    blocked_resource_types: tuple[str, ...] = ("media", "font")

    @classmethod
    def from_settings(cls, browser: BrowserSettings) -> "CaptureConfig":
        return cls(
            launch=LaunchOptions(
                executable_path=browser.executable_path or None,
                headless=browser.headless,
                sandbox=browser.sandbox,
                viewport_width=browser.viewport_width,
                viewport_height=browser.viewport_height,
                user_agent=browser.user_agent or None,
            ),
            navigation_timeout_ms=browser.navigation_timeout_ms,
            network_idle_ms=browser.network_idle_ms,
            settle_delay_ms=browser.settle_delay_ms,
            blocked_resource_types=tuple(browser.blocked_resource_types),
        )


class CaptureSession:
    """Single-use owner of one browser session.

    :meth:`run` launches a browser, filters media/font requests, navigates,
    waits for the page to settle and takes a viewport screenshot. The
    browser is always closed before :meth:`run` returns or raises.

    Args:
        driver: Browser capability used to launch the session.
        config: Launch and timing configuration.
    """

    def __init__(self, driver: BrowserDriver, config: CaptureConfig) -> None:
        self._driver = driver
        self._config = config
        self._used = False

    async def run(self, address: str) -> ImageArtifact:
        """Capture the first viewport of *address*.

        Raises:
            BrowserStartupError: The browser could not be launched.
            NavigationError: The page was unreachable or missed the navigation deadline.
            ScreenshotError: The screenshot could not be taken.
            RuntimeError: The session was already used.
        """
        if self._used:
            raise RuntimeError("CaptureSession is single-use; create a new one per inspection")
        self._used = True

        cfg = self._config
        async with self._driver.session(cfg.launch) as page:
            await page.block_resource_types(cfg.blocked_resource_types)
            await self._navigate(page, address)
            await self._settle(page)
            data = await self._screenshot(page)

        logger.info("Captured %dx%d viewport of %s (%d bytes)",
                    cfg.launch.viewport_width, cfg.launch.viewport_height, address, len(data))
        return ImageArtifact(
            data=data,
            width=cfg.launch.viewport_width,
            height=cfg.launch.viewport_height,
        )

    async def _navigate(self, page: BrowserPage, address: str) -> None:
        timeout_ms = self._config.navigation_timeout_ms
        logger.info("Opening %s (timeout=%dms)", address, timeout_ms)
        try:
            await asyncio.wait_for(page.goto(address, timeout_ms=timeout_ms), timeout=timeout_ms / 1000)
        except CaptureError:
            raise
        except TimeoutError as exc:
            raise NavigationError(address, f"navigation timeout of {timeout_ms}ms exceeded") from exc
        except Exception as exc:
            raise NavigationError(address, str(exc) or type(exc).__name__) from exc

    async def _settle(self, page: BrowserPage) -> None:
        """Wait for network quiescence, else fall back to a fixed delay.

        Pages with background polling never go idle, so a failure here is
        logged and absorbed rather than failing the capture.
        """
        cfg = self._config
        try:
            await asyncio.wait_for(
                page.wait_for_network_idle(idle_ms=cfg.network_idle_ms, timeout_ms=cfg.navigation_timeout_ms),
                timeout=cfg.navigation_timeout_ms / 1000,
            )
        except Exception as exc:
            logger.warning(
                "Network never went idle (%s); waiting %dms before capture",
                type(exc).__name__,
                cfg.settle_delay_ms,
            )
            await asyncio.sleep(cfg.settle_delay_ms / 1000)

    async def _screenshot(self, page: BrowserPage) -> bytes:
        try:
            return await page.screenshot()
        except CaptureError:
            raise
        except Exception as exc:
            raise ScreenshotError(str(exc) or type(exc).__name__) from exc
