"""
Headless browser pool.

Owns the one long-lived Chromium process shared by every acquisition. The
browser is launched lazily on first use under an ``asyncio.Lock``; each
caller gets its own short-lived context and page through ``BrowserPool.page``,
which always closes them on exit. A semaphore caps how many pages are open
at once.

Example:
    >>> async with BrowserPool(settings) as pool:
    ...     async with pool.page(DESKTOP_VIEWPORT) as page:
    ...         await page.goto("https://example.com")
"""

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Optional

from playwright.async_api import (
    Browser,
    Error as PlaywrightError,
    Page,
    Playwright,
    async_playwright,
)
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from storesynth.config.settings import Settings, get_settings
from storesynth.utils.errors import AcquisitionError
from storesynth.utils.logger import get_logger

logger = get_logger(__name__)


# =============================================================================
# Viewports
# =============================================================================

@dataclass(frozen=True)
class Viewport:
    """Viewport size plus the mobile emulation flag Playwright sets per context."""
    width: int
    height: int
    is_mobile: bool = False


DESKTOP_VIEWPORT = Viewport(width=1920, height=1080)
MOBILE_VIEWPORT = Viewport(width=375, height=667, is_mobile=True)

CHROMIUM_ARGS = ["--no-sandbox", "--disable-setuid-sandbox"]


# =============================================================================
# Browser Pool
# =============================================================================

class BrowserPool:
    """
    Lazily launched, shared Chromium handle with scoped page release.

    Attributes:
        settings: Application settings
        semaphore: Bound on concurrently open pages
    """

    def __init__(self, settings: Optional[Settings] = None, playwright_factory=async_playwright):
        self.settings = settings or get_settings()
        self._playwright_factory = playwright_factory
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._lock = asyncio.Lock()
        self.semaphore = asyncio.Semaphore(self.settings.max_concurrent_pages)

    async def __aenter__(self) -> "BrowserPool":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    @property
    def is_running(self) -> bool:
        return self._browser is not None and self._browser.is_connected()

    async def get_browser(self) -> Browser:
        """
        Return the shared browser, launching it on first use.

        Raises:
            AcquisitionError: If every launch attempt failed
        """
        if self.is_running:
            return self._browser

        async with self._lock:
            # Another caller may have launched while we waited
            if self.is_running:
                return self._browser
            self._browser = await self._launch()
            return self._browser

    async def _launch(self) -> Browser:
        attempts = self.settings.browser_launch_retries
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(attempts),
                wait=wait_exponential(multiplier=0.5, min=0.5, max=5),
                retry=retry_if_exception_type(PlaywrightError),
                reraise=True,
            ):
                with attempt:
                    if self._playwright is None:
                        self._playwright = await self._playwright_factory().start()
                    browser = await self._playwright.chromium.launch(
                        headless=self.settings.browser_headless,
                        args=CHROMIUM_ARGS,
                    )
        except PlaywrightError as e:
            logger.error("Browser launch failed", attempts=attempts, error=str(e))
            raise AcquisitionError(f"Failed to launch browser: {e}") from e

        logger.info("Browser launched", headless=self.settings.browser_headless)
        return browser

    @asynccontextmanager
    async def page(self, viewport: Viewport = DESKTOP_VIEWPORT) -> AsyncIterator[Page]:
        """
        Open a page in a fresh browser context and always close both.

        Args:
            viewport: Viewport size and mobile flag for the context
        """
        async with self.semaphore:
            browser = await self.get_browser()
            context = await browser.new_context(
                viewport={"width": viewport.width, "height": viewport.height},
                is_mobile=viewport.is_mobile,
                has_touch=viewport.is_mobile,
            )
            try:
                yield await context.new_page()
            finally:
                try:
                    await context.close()
                except PlaywrightError as e:
                    logger.warning("Failed to close browser context", error=str(e))

    async def close(self) -> None:
        """Close the browser and stop the Playwright driver."""
        async with self._lock:
            if self._browser is not None:
                try:
                    await self._browser.close()
                except PlaywrightError as e:
                    logger.warning("Error closing browser", error=str(e))
                self._browser = None
            if self._playwright is not None:
                await self._playwright.stop()
                self._playwright = None
                logger.info("Browser pool closed")


__all__ = [
    "BrowserPool",
    "Viewport",
    "DESKTOP_VIEWPORT",
    "MOBILE_VIEWPORT",
]
