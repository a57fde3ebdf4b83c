"""
Unit Tests for Browser Launcher
===============================

Driver lifecycle, remote versus local acquisition and guaranteed browser close.
"""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from pagesnap.config.settings import Settings
from pagesnap.core.rendering.browser_launcher import BrowserLauncher, RenderingError


@pytest.fixture
def mock_playwright():
    """Mock Playwright driver with a chromium browser type."""
    playwright = AsyncMock()
    playwright.chromium.launch.return_value = AsyncMock()
    playwright.chromium.connect_over_cdp.return_value = AsyncMock()
    return playwright


@pytest.fixture
def patched_async_playwright(mock_playwright):
    with patch("pagesnap.core.rendering.browser_launcher.async_playwright") as mock_async_playwright:
        mock_async_playwright.return_value.start = AsyncMock(return_value=mock_playwright)
        yield mock_async_playwright


class TestLifecycle:
    """Test driver start and stop."""

    def test_not_running_before_initialize(self, test_settings):
        launcher = BrowserLauncher(test_settings)
        assert launcher.is_running is False

    @pytest.mark.asyncio
    async def test_initialize_and_close(self, test_settings, patched_async_playwright, mock_playwright):
        launcher = BrowserLauncher(test_settings)

        await launcher.initialize()
        assert launcher.is_running is True

        await launcher.initialize()
        patched_async_playwright.return_value.start.assert_awaited_once()

        await launcher.close()
        mock_playwright.stop.assert_awaited_once()
        assert launcher.is_running is False

    @pytest.mark.asyncio
    async def test_concurrent_first_acquire_starts_driver_once(self, test_settings, mock_playwright):
        async def slow_start():
            await asyncio.sleep(0.01)
            return mock_playwright

        with patch("pagesnap.core.rendering.browser_launcher.async_playwright") as mock_async_playwright:
            mock_async_playwright.return_value.start = AsyncMock(side_effect=slow_start)
            launcher = BrowserLauncher(test_settings)

            async def use():
                async with launcher.acquire():
                    pass

            await asyncio.gather(use(), use(), use())

        assert mock_async_playwright.return_value.start.await_count == 1
        assert mock_playwright.chromium.launch.await_count == 3
        assert launcher.is_running is True

    @pytest.mark.asyncio
    async def test_initialize_failure(self, test_settings):
        with patch("pagesnap.core.rendering.browser_launcher.async_playwright") as mock_async_playwright:
            mock_async_playwright.return_value.start = AsyncMock(side_effect=Exception("driver missing"))

            with pytest.raises(RenderingError, match="Playwright initialization failed: driver missing"):
                await BrowserLauncher(test_settings).initialize()


class TestAcquire:
    """Test per-request browser acquisition."""

    @pytest.mark.asyncio
    async def test_local_launch(self, test_settings, patched_async_playwright, mock_playwright):
        launcher = BrowserLauncher(test_settings)
        browser = mock_playwright.chromium.launch.return_value

        async with launcher.acquire() as acquired:
            assert acquired is browser
            browser.close.assert_not_awaited()

        browser.close.assert_awaited_once()
        _, kwargs = mock_playwright.chromium.launch.call_args
        assert kwargs["headless"] is True
        mock_playwright.chromium.connect_over_cdp.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_remote_connect(self, patched_async_playwright, mock_playwright):
        settings = Settings(
            environment="testing",
            browser_endpoint="ws://browser.internal:9222",
            browser_connect_timeout_ms=5000,
        )
        launcher = BrowserLauncher(settings)

        async with launcher.acquire():
            pass

        mock_playwright.chromium.connect_over_cdp.assert_awaited_once_with(
            "ws://browser.internal:9222", timeout=5000
        )
        mock_playwright.chromium.launch.assert_not_awaited()
        mock_playwright.chromium.connect_over_cdp.return_value.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_browser_closed_on_error(self, test_settings, patched_async_playwright, mock_playwright):
        launcher = BrowserLauncher(test_settings)
        browser = mock_playwright.chromium.launch.return_value

        with pytest.raises(ValueError):
            async with launcher.acquire():
                raise ValueError("capture failed")

        browser.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_launch_failure(self, test_settings, patched_async_playwright, mock_playwright):
        mock_playwright.chromium.launch.side_effect = Exception("Executable doesn't exist")

        with pytest.raises(RenderingError, match="Browser launch failed: Executable doesn't exist"):
            async with BrowserLauncher(test_settings).acquire():
                pass

    @pytest.mark.asyncio
    async def test_connect_failure(self, patched_async_playwright, mock_playwright):
        mock_playwright.chromium.connect_over_cdp.side_effect = Exception("ECONNREFUSED")
        settings = Settings(environment="testing", browser_endpoint="ws://browser.internal:9222")

        with pytest.raises(RenderingError, match="Browser connection failed: ECONNREFUSED"):
            async with BrowserLauncher(settings).acquire():
                pass

    @pytest.mark.asyncio
    async def test_close_failure_does_not_mask_result(
        self, test_settings, patched_async_playwright, mock_playwright
    ):
        mock_playwright.chromium.launch.return_value.close.side_effect = Exception("already closed")

        async with BrowserLauncher(test_settings).acquire() as browser:
            assert browser is mock_playwright.chromium.launch.return_value
