"""Unit tests for the capture session (browser stage of the pipeline)."""

from __future__ import annotations

import time

import pytest

from conftest import FAKE_PNG, FakeDriver, FakePage
from visualguard.browser.capture import CaptureConfig, CaptureSession
from visualguard.browser.driver import LaunchOptions
from visualguard.exceptions import BrowserStartupError, NavigationError, ScreenshotError
from visualguard.settings.config import BrowserSettings


class TestCaptureHappyPath:
    @pytest.mark.anyio
    async def test_returns_viewport_artifact(self, fake_driver: FakeDriver, fast_capture_config: CaptureConfig) -> None:
        artifact = await CaptureSession(fake_driver, fast_capture_config).run("https://allbirds.com")

        assert artifact.data == FAKE_PNG
        assert (artifact.width, artifact.height) == (1280, 1080)
        assert artifact.media_type == "image/png"

    @pytest.mark.anyio
    async def test_steps_run_in_order(self, fake_driver: FakeDriver, fast_capture_config: CaptureConfig) -> None:
        await CaptureSession(fake_driver, fast_capture_config).run("https://allbirds.com")

        assert fake_driver.page.calls == ["block", "goto", "idle", "screenshot"]
        assert fake_driver.page.visited == ["https://allbirds.com"]

    @pytest.mark.anyio
    async def test_filter_blocks_media_and_fonts(self, fake_driver: FakeDriver, fast_capture_config: CaptureConfig) -> None:
        await CaptureSession(fake_driver, fast_capture_config).run("https://allbirds.com")
        assert fake_driver.page.blocked_types == {"media", "font"}

    @pytest.mark.anyio
    async def test_launch_options_passed_through(self, fake_driver: FakeDriver, fast_capture_config: CaptureConfig) -> None:
        await CaptureSession(fake_driver, fast_capture_config).run("https://allbirds.com")
        assert fake_driver.launch_options == [fast_capture_config.launch]

    @pytest.mark.anyio
    async def test_session_is_single_use(self, fake_driver: FakeDriver, fast_capture_config: CaptureConfig) -> None:
        session = CaptureSession(fake_driver, fast_capture_config)
        await session.run("https://allbirds.com")
        with pytest.raises(RuntimeError, match="single-use"):
            await session.run("https://allbirds.com")


class TestBrowserRelease:
    """The browser is closed exactly once on every path."""

    @pytest.mark.anyio
    async def test_released_on_success(self, fake_driver: FakeDriver, fast_capture_config: CaptureConfig) -> None:
        await CaptureSession(fake_driver, fast_capture_config).run("https://allbirds.com")
        assert fake_driver.total_closes == 1

    @pytest.mark.anyio
    async def test_released_on_navigation_failure(self, fast_capture_config: CaptureConfig) -> None:
        driver = FakeDriver(FakePage(goto_error=NavigationError("https://x.test", "name not resolved")))
        with pytest.raises(NavigationError):
            await CaptureSession(driver, fast_capture_config).run("https://x.test")
        assert driver.total_closes == 1

    @pytest.mark.anyio
    async def test_released_on_screenshot_failure(self, fast_capture_config: CaptureConfig) -> None:
        driver = FakeDriver(FakePage(screenshot_error=RuntimeError("target closed")))
        with pytest.raises(ScreenshotError, match="target closed"):
            await CaptureSession(driver, fast_capture_config).run("https://allbirds.com")
        assert driver.total_closes == 1

    @pytest.mark.anyio
    async def test_nothing_to_release_when_launch_fails(self, fast_capture_config: CaptureConfig) -> None:
        driver = FakeDriver(launch_error=BrowserStartupError("executable not found"))
        with pytest.raises(BrowserStartupError):
            await CaptureSession(driver, fast_capture_config).run("https://allbirds.com")
        assert driver.sessions == []


class TestNavigationFailures:
    @pytest.mark.anyio
    async def test_slow_navigation_becomes_timeout_error(self, fast_capture_config: CaptureConfig) -> None:
        page = FakePage(goto_delay=10)
        driver = FakeDriver(page)

        with pytest.raises(NavigationError, match="timeout"):
            await CaptureSession(driver, fast_capture_config).run("https://slow.test")

        assert "screenshot" not in page.calls
        assert driver.total_closes == 1

    @pytest.mark.anyio
    async def test_unexpected_goto_error_is_wrapped(self, fast_capture_config: CaptureConfig) -> None:
        driver = FakeDriver(FakePage(goto_error=OSError("socket closed")))
        with pytest.raises(NavigationError, match="socket closed") as info:
            await CaptureSession(driver, fast_capture_config).run("https://x.test")
        assert info.value.url == "https://x.test"


class TestSettleFallback:
    """Idle-detection failure downgrades to a fixed delay instead of failing."""

    @pytest.mark.anyio
    async def test_idle_error_falls_back_to_delay(self, fast_capture_config: CaptureConfig) -> None:
        page = FakePage(idle_error=RuntimeError("polling never stops"))
        driver = FakeDriver(page)

        start = time.monotonic()
        artifact = await CaptureSession(driver, fast_capture_config).run("https://allbirds.com")
        elapsed_ms = (time.monotonic() - start) * 1000

        assert artifact.data == FAKE_PNG
        assert page.calls == ["block", "goto", "idle", "screenshot"]
        assert elapsed_ms >= fast_capture_config.settle_delay_ms * 0.9

    @pytest.mark.anyio
    async def test_idle_timeout_falls_back_to_delay(self, fast_capture_config: CaptureConfig) -> None:
        page = FakePage(idle_delay=10)
        driver = FakeDriver(page)

        artifact = await CaptureSession(driver, fast_capture_config).run("https://allbirds.com")

        assert artifact.data == FAKE_PNG
        assert page.calls[-1] == "screenshot"
        assert driver.total_closes == 1


class TestCaptureConfig:
    def test_from_settings(self) -> None:
        browser = BrowserSettings(
            executable_path="",
            sandbox=False,
            viewport_width=1440,
            viewport_height=900,
            navigation_timeout_ms=1234,
        )
        cfg = CaptureConfig.from_settings(browser)

        assert cfg.launch.executable_path is None
        assert cfg.launch.args == ["--no-sandbox", "--disable-setuid-sandbox"]
        assert cfg.launch.viewport == {"width": 1440, "height": 900}
        assert cfg.navigation_timeout_ms == 1234
        assert cfg.blocked_resource_types == ("media", "font")
        assert "Chrome/" in (cfg.launch.user_agent or "")

    def test_sandboxed_launch_has_no_extra_args(self) -> None:
        assert LaunchOptions(sandbox=True).args == []
