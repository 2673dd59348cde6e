"""VisualGuard test configuration: shared fakes and fixtures.

The fakes implement the browser and inference capability interfaces so
the pipeline runs end to end without Chromium or network access.
"""

from __future__ import annotations

import asyncio
from collections.abc import Collection

import pytest

from visualguard.browser.capture import CaptureConfig
from visualguard.browser.driver import BrowserDriver, BrowserPage, BrowserSession, LaunchOptions
from visualguard.llm.base import InferenceProvider, LLMResult

# Minimal PNG signature + payload; enough for byte-level round-trips.
FAKE_PNG = b"\x89PNG\r\n\x1a\n" + b"\x00\x00\x00\rIHDR" + bytes(range(64))

ALL_CLEAR_REPORT = "✅ Visual check passed: no obvious layout issues found."


# ---------------------------------------------------------------------------
# Fake browser
# ---------------------------------------------------------------------------


class FakePage(BrowserPage):
    """Scriptable page that records every call in ``calls``."""

    def __init__(
        self,
        *,
        goto_error: Exception | None = None,
        goto_delay: float = 0.0,
        idle_error: Exception | None = None,
        idle_delay: float = 0.0,
        screenshot_error: Exception | None = None,
        png: bytes = FAKE_PNG,
    ) -> None:
        self.goto_error = goto_error
        self.goto_delay = goto_delay
        self.idle_error = idle_error
        self.idle_delay = idle_delay
        self.screenshot_error = screenshot_error
        self.png = png
        self.calls: list[str] = []
        self.blocked_types: frozenset[str] = frozenset()
        self.visited: list[str] = []

    async def block_resource_types(self, resource_types: Collection[str]) -> None:
        self.calls.append("block")
        self.blocked_types = frozenset(resource_types)

    async def goto(self, url: str, *, timeout_ms: int) -> None:
        self.calls.append("goto")
        self.visited.append(url)
        if self.goto_delay:
            await asyncio.sleep(self.goto_delay)
        if self.goto_error is not None:
            raise self.goto_error

    async def wait_for_network_idle(self, *, idle_ms: int, timeout_ms: int) -> None:
        self.calls.append("idle")
        if self.idle_delay:
            await asyncio.sleep(self.idle_delay)
        if self.idle_error is not None:
            raise self.idle_error

    async def screenshot(self) -> bytes:
        self.calls.append("screenshot")
        if self.screenshot_error is not None:
            raise self.screenshot_error
        return self.png


class FakeSession(BrowserSession):
    def __init__(self, page: FakePage) -> None:
        self._page = page
        self.close_calls = 0

    @property
    def page(self) -> FakePage:
        return self._page

    async def close(self) -> None:
        self.close_calls += 1


class FakeDriver(BrowserDriver):
    """Hands out ``FakeSession`` objects around a shared ``FakePage``."""

    def __init__(self, page: FakePage | None = None, *, launch_error: Exception | None = None) -> None:
        self.page = page or FakePage()
        self.launch_error = launch_error
        self.sessions: list[FakeSession] = []
        self.launch_options: list[LaunchOptions] = []

    async def launch(self, options: LaunchOptions) -> FakeSession:
        self.launch_options.append(options)
        if self.launch_error is not None:
            raise self.launch_error
        session = FakeSession(self.page)
        self.sessions.append(session)
        return session

    @property
    def total_closes(self) -> int:
        return sum(s.close_calls for s in self.sessions)


# ---------------------------------------------------------------------------
# Fake inference provider
# ---------------------------------------------------------------------------


class FakeProvider(InferenceProvider):
    """Returns a canned report, raises, or stalls."""

    def __init__(self, content: str = ALL_CLEAR_REPORT, *, error: Exception | None = None, delay: float = 0.0) -> None:
        self.content = content
        self.error = error
        self.delay = delay
        self.requests: list[list[dict]] = []
        self.closed = False

    async def chat_with_images(
        self,
        messages: list[dict],
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> LLMResult:
        self.requests.append(messages)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return LLMResult(content=self.content, input_tokens=1200, output_tokens=30, model="fake-vl")

    async def aclose(self) -> None:
        self.closed = True


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture(autouse=True)
def _reset_settings_cache():
    """Clear the settings LRU cache between tests."""
    from visualguard.settings.config import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def fake_page() -> FakePage:
    return FakePage()


@pytest.fixture()
def fake_driver(fake_page: FakePage) -> FakeDriver:
    return FakeDriver(fake_page)


@pytest.fixture()
def fake_provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture()
def fast_capture_config() -> CaptureConfig:
    """Capture config with short timings so fallback paths run quickly."""
    return CaptureConfig(
        launch=LaunchOptions(viewport_width=1280, viewport_height=1080, user_agent="test-agent"),
        navigation_timeout_ms=200,
        network_idle_ms=10,
        settle_delay_ms=20,
    )


# ---------------------------------------------------------------------------
# Pytest markers
# ---------------------------------------------------------------------------


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests that require external services or real I/O")
    config.addinivalue_line("markers", "slow: marks tests that take more than a few seconds")
