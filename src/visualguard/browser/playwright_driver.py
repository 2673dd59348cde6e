"""Playwright implementation of the browser capability interfaces.

Requires ``playwright install chromium`` to have been run at least once,
unless ``executable_path`` points at a locally installed Chrome.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Collection
from contextlib import AsyncExitStack

from playwright.async_api import (
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    Page,
    Playwright,
    TimeoutError as PlaywrightTimeout,
    async_playwright,
)

from visualguard.browser.driver import BrowserDriver, BrowserPage, BrowserSession, LaunchOptions
from visualguard.browser.network import NetworkIdleMonitor, ResourceFilter
from visualguard.exceptions import BrowserStartupError, NavigationError, ScreenshotError

logger = logging.getLogger(__name__)

# Chromium net error codes mapped to readable reasons.
_NAVIGATION_ERRORS: tuple[str, ...] = (
    "ERR_NAME_NOT_RESOLVED",
    "ERR_CONNECTION_REFUSED",
    "ERR_CONNECTION_RESET",
    "ERR_CONNECTION_CLOSED",
    "ERR_CONNECTION_TIMED_OUT",
    "ERR_INTERNET_DISCONNECTED",
    "ERR_SSL_PROTOCOL_ERROR",
    "ERR_CERT_AUTHORITY_INVALID",
    "ERR_CERT_COMMON_NAME_INVALID",
    "ERR_ADDRESS_UNREACHABLE",
)


def _first_line(exc: Exception) -> str:
    text = str(exc).strip()
    return text.splitlines()[0] if text else type(exc).__name__


def describe_navigation_error(exc: Exception, timeout_ms: int) -> str:
    """Turn a Playwright navigation exception into a short human-readable reason."""
    if isinstance(exc, PlaywrightTimeout):
        return f"navigation timeout of {timeout_ms}ms exceeded"
    message = str(exc)
    for code in _NAVIGATION_ERRORS:
        if code in message:
            return code.replace("ERR_", "").replace("_", " ").lower()
    return _first_line(exc)


class PlaywrightPage(BrowserPage):
    """A Playwright ``Page`` with request filtering and idle tracking attached."""

    def __init__(self, page: Page) -> None:
        self._page = page
        self._idle = NetworkIdleMonitor()
        self._idle.attach(page)
        self._filter: ResourceFilter | None = None

    async def block_resource_types(self, resource_types: Collection[str]) -> None:
        self._filter = ResourceFilter(resource_types)
        await self._page.route("**/*", self._filter.handle)

    async def goto(self, url: str, *, timeout_ms: int) -> None:
        try:
            await self._page.goto(url, wait_until="domcontentloaded", timeout=timeout_ms)
        except PlaywrightError as exc:
            reason = describe_navigation_error(exc, timeout_ms)
            logger.warning("Navigation to %s failed: %s", url, reason)
            raise NavigationError(url, reason) from exc

    async def wait_for_network_idle(self, *, idle_ms: int, timeout_ms: int) -> None:
        await self._idle.wait_for_idle(idle_ms=idle_ms, timeout_ms=timeout_ms)

    async def screenshot(self) -> bytes:
        try:
            data = await self._page.screenshot(type="png", full_page=False)
        except PlaywrightError as exc:
            raise ScreenshotError(str(exc)) from exc
        if self._filter is not None:
            logger.debug("Blocked %d media/font requests", self._filter.blocked_count)
        return data


class PlaywrightSession(BrowserSession):
    """Owns the Playwright driver process, the browser and its one context."""

    def __init__(self, playwright: Playwright, browser: Browser, context: BrowserContext, page: Page) -> None:
        self._playwright = playwright
        self._browser = browser
        self._context = context
        self._page = PlaywrightPage(page)

    @property
    def page(self) -> PlaywrightPage:
        return self._page

    async def close(self) -> None:
        try:
            try:
                await self._context.close()
            finally:
                await self._browser.close()
        finally:
            await self._playwright.stop()


async def _release(close: Callable[[], Awaitable[None]], what: str) -> None:
    try:
        await close()
    except Exception as exc:
        logger.warning("Failed to release %s after startup failure: %s", what, exc)


class PlaywrightDriver(BrowserDriver):
    """Launches a fresh headless Chromium per session.

    Whatever was started before a failure (or cancellation) is torn down
    before :meth:`launch` returns control; once the session object exists,
    it owns the teardown.
    """

    async def launch(self, options: LaunchOptions) -> PlaywrightSession:
        try:
            playwright = await async_playwright().start()
        except Exception as exc:
            logger.error("Could not start the Playwright driver: %s", exc)
            raise BrowserStartupError(_first_line(exc)) from exc

        async with AsyncExitStack() as cleanup:
            cleanup.push_async_callback(_release, playwright.stop, "Playwright driver")
            try:
                browser = await playwright.chromium.launch(
                    headless=options.headless,
                    executable_path=options.executable_path or None,
                    args=options.args,
                )
            except Exception as exc:
                logger.error(
                    "Could not launch browser (executable=%s): %s", options.executable_path or "bundled", exc
                )
                raise BrowserStartupError(_first_line(exc)) from exc

            cleanup.push_async_callback(_release, browser.close, "browser")
            try:
                context = await browser.new_context(viewport=options.viewport, user_agent=options.user_agent)
                page = await context.new_page()
            except Exception as exc:
                raise BrowserStartupError(_first_line(exc)) from exc

            session = PlaywrightSession(playwright, browser, context, page)
            cleanup.pop_all()

        logger.debug("Launched browser %s (headless=%s)", browser.version, options.headless)
        return session
