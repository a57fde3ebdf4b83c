"""
Browser Launcher
================

Per-request browser acquisition. Connects to a hosted browser over CDP when an
endpoint is configured, otherwise launches a local headless Chromium.
Every browser handed out is closed when its context manager exits.
"""

from typing import Optional, Any, AsyncGenerator
import asyncio
from contextlib import asynccontextmanager

from playwright.async_api import async_playwright, Browser, Playwright

from pagesnap.config.logging import get_logger
from pagesnap.config.settings import Settings, get_settings

logger = get_logger(__name__)


class RenderingError(Exception):
    """Exception raised when acquiring a browser or rendering a page fails."""

    pass


class BrowserLauncher:
    """Owns the Playwright driver and hands out one browser per request."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self._playwright: Optional[Playwright] = None
        self._start_lock = asyncio.Lock()
        self.logger: Any = logger.bind(component="browser_launcher")  # structlog.BoundLoggerBase

    @property
    def is_running(self) -> bool:
        return self._playwright is not None

    async def initialize(self) -> None:
        """Start the Playwright driver."""
        if self._playwright is not None:
            return
        async with self._start_lock:
            # Concurrent first requests wait here; only one driver is started
            if self._playwright is not None:
                return
            try:
                self._playwright = await async_playwright().start()
                self.logger.info(
                    "Browser launcher initialized",
                    mode=self.settings.browser_mode,
                    endpoint=self.settings.browser_endpoint,
                )
            except Exception as e:
                self.logger.error("Failed to start Playwright", error=str(e))
                raise RenderingError(f"Playwright initialization failed: {e}")

    async def close(self) -> None:
        """Stop the Playwright driver."""
        if self._playwright:
            await self._playwright.stop()
            self._playwright = None
        self.logger.info("Browser launcher closed")

    @asynccontextmanager
    async def acquire(self) -> AsyncGenerator[Browser, None]:
        """Acquire a browser for the duration of one request."""
        if self._playwright is None:
            await self.initialize()

        browser = await self._open_browser()
        try:
            yield browser
        finally:
            try:
                await browser.close()
            except Exception as e:
                self.logger.warning("Browser close failed", error=str(e))

    async def _open_browser(self) -> Browser:
        assert self._playwright is not None
        chromium = self._playwright.chromium

        if self.settings.browser_endpoint:
            try:
                browser = await chromium.connect_over_cdp(
                    self.settings.browser_endpoint,
                    timeout=self.settings.browser_connect_timeout_ms,
                )
            except Exception as e:
                self.logger.error("Browser connection failed", error=str(e))
                raise RenderingError(f"Browser connection failed: {e}")
            self.logger.debug("Connected to hosted browser", endpoint=self.settings.browser_endpoint)
            return browser

        try:
            browser = await chromium.launch(
                headless=self.settings.playwright_headless,
                args=[
                    "--no-sandbox",
                    "--disable-setuid-sandbox",
                    "--disable-dev-shm-usage",
                ],
            )
        except Exception as e:
            self.logger.error("Browser launch failed", error=str(e))
            raise RenderingError(f"Browser launch failed: {e}")
        self.logger.debug("Launched local browser")
        return browser
