"""Browser capability interfaces.

The capture session talks to a browser only through these classes, so a
fake can stand in for Playwright in tests without touching pipeline logic.
"""

from __future__ import annotations

import abc
import logging
from collections.abc import AsyncIterator, Collection
from contextlib import asynccontextmanager
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# Chromium flags for unprivileged container hosts where the OS sandbox is unavailable.
NO_SANDBOX_ARGS: tuple[str, ...] = ("--no-sandbox", "--disable-setuid-sandbox")


@dataclass(frozen=True)
class LaunchOptions:
    """How to start the browser and size its single page."""

    executable_path: str | None = None
    headless: bool = True
    sandbox: bool = True
    viewport_width: int = 1280
    viewport_height: int = 1080
    user_agent: str | None = None

    @property
    def args(self) -> list[str]:
        return [] if self.sandbox else list(NO_SANDBOX_ARGS)

    @property
    def viewport(self) -> dict[str, int]:
        return {"width": self.viewport_width, "height": self.viewport_height}


class BrowserPage(abc.ABC):
    """The single page of a browser session."""

    @abc.abstractmethod
    async def block_resource_types(self, resource_types: Collection[str]) -> None:
        """Abort every request whose resource type is in *resource_types*; allow the rest."""

    @abc.abstractmethod
    async def goto(self, url: str, *, timeout_ms: int) -> None:
        """Navigate and wait for DOM content loaded.

        Raises:
            NavigationError: If the page is unreachable or too slow.
        """

    @abc.abstractmethod
    async def wait_for_network_idle(self, *, idle_ms: int, timeout_ms: int) -> None:
        """Wait until no request has been in flight for *idle_ms*.

        Raises whatever the implementation raises on timeout; callers treat
        any failure here as "not idle".
        """

    @abc.abstractmethod
    async def screenshot(self) -> bytes:
        """Return a PNG of the current viewport only (never the full page).

        Raises:
            ScreenshotError: If the capture fails.
        """


class BrowserSession(abc.ABC):
    """An exclusively owned browser process with one page."""

    @property
    @abc.abstractmethod
    def page(self) -> BrowserPage:
        """The session's only page."""

    @abc.abstractmethod
    async def close(self) -> None:
        """Terminate the browser process."""


class BrowserDriver(abc.ABC):
    """Factory for fresh, isolated browser sessions."""

    @abc.abstractmethod
    async def launch(self, options: LaunchOptions) -> BrowserSession:
        """Start a new browser with a single page.

        Raises:
            BrowserStartupError: If the browser executable cannot be launched.
        """

    @asynccontextmanager
    async def session(self, options: LaunchOptions) -> AsyncIterator[BrowserPage]:
        """Launch a browser for the duration of the ``async with`` block.

        The browser is closed exactly once on every exit path, including
        exceptions and task cancellation.
        """
        browser = await self.launch(options)
        try:
            yield browser.page
        finally:
            try:
                await browser.close()
            except Exception as exc:
                logger.warning("Browser close failed: %s", exc)
            else:
                logger.debug("Browser session released")
