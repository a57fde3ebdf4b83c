"""
Page Renderer
=============

Playwright page operations for the three render modes: HTML content to PNG,
URL to full-page PNG, and URL to PDF. Each call acquires its own browser,
context and page and releases them before returning.
"""

from typing import Optional, Dict, Any, AsyncGenerator
import asyncio
from contextlib import asynccontextmanager

from playwright.async_api import Page

from pagesnap.config.logging import get_logger
from pagesnap.config.settings import Settings, get_settings
from pagesnap.core.rendering.browser_launcher import BrowserLauncher, RenderingError
from pagesnap.models.schemas import Viewport

logger = get_logger(__name__)


class PageRenderer:
    """Drives a browser page through load, settle and capture."""

    def __init__(self, launcher: BrowserLauncher, settings: Optional[Settings] = None):
        self.launcher = launcher
        self.settings = settings or get_settings()
        self.logger: Any = logger.bind(component="page_renderer")  # structlog.BoundLoggerBase

    async def capture_html(self, html: str, viewport: Viewport, full_page: bool) -> bytes:
        """
        Render HTML content to PNG.

        Args:
            html: HTML markup to load into the page
            viewport: Viewport size and device scale factor
            full_page: Capture the whole scrollable page instead of the viewport

        Returns:
            PNG bytes

        Raises:
            RenderingError: If any browser step fails
        """
        self.logger.info(
            "Rendering HTML",
            html_length=len(html),
            width=viewport.width,
            height=viewport.height,
            device_scale_factor=viewport.device_scale_factor,
            full_page=full_page,
        )

        async with self._open_page(viewport) as page:
            await self._step(
                "Content load", page.set_content(html, wait_until="networkidle")
            )

            # Script-driven content such as charts keeps painting after network idle
            if self.settings.html_settle_delay > 0:
                await asyncio.sleep(self.settings.html_settle_delay)

            png = await self._step("Screenshot", page.screenshot(type="png", full_page=full_page))

        self.logger.info("HTML render completed", file_size=len(png))
        return png

    async def capture_url(self, url: str, viewport: Viewport) -> bytes:
        """
        Navigate to a URL and capture the full page as PNG.

        The viewport height is nominal; the capture grows with the content.
        """
        self.logger.info("Capturing URL", url=url, width=viewport.width)

        async with self._open_page(viewport) as page:
            await self._step("Navigation", page.goto(url, wait_until="networkidle"))
            png = await self._step("Screenshot", page.screenshot(type="png", full_page=True))

        self.logger.info("URL capture completed", url=url, file_size=len(png))
        return png

    async def print_pdf(self, url: str) -> bytes:
        """Navigate to a URL and print it to PDF with background graphics."""
        self.logger.info("Printing URL to PDF", url=url)

        async with self._open_page(None) as page:
            await self._step("Navigation", page.goto(url, wait_until="networkidle"))
            pdf = await self._step("PDF generation", page.pdf(print_background=True))

        self.logger.info("PDF generation completed", url=url, file_size=len(pdf))
        return pdf

    @asynccontextmanager
    async def _open_page(self, viewport: Optional[Viewport]) -> AsyncGenerator[Page, None]:
        """Acquire a browser and yield a fresh page in its own context."""
        async with self.launcher.acquire() as browser:
            context_options: Dict[str, Any] = {}
            if viewport is not None:
                context_options["viewport"] = {"width": viewport.width, "height": viewport.height}
                context_options["device_scale_factor"] = viewport.device_scale_factor

            context = await self._step("Browser context", browser.new_context(**context_options))
            try:
                page = await self._step("Page creation", context.new_page())
                if self.settings.navigation_timeout_ms:
                    page.set_default_navigation_timeout(self.settings.navigation_timeout_ms)
                yield page
            finally:
                await context.close()

    async def _step(self, stage: str, awaitable: Any) -> Any:
        """Await one browser call, wrapping failures with the stage name."""
        try:
            return await awaitable
        except RenderingError:
            raise
        except Exception as e:
            self.logger.error(f"{stage} failed", error=str(e))
            raise RenderingError(f"{stage} failed: {e}")
