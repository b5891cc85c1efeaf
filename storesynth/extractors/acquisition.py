"""
Page acquisition.

Loads a target page in the shared headless browser, captures its rendered
HTML and computed styles, and takes full-page screenshots at a desktop and a
mobile viewport. The captured DOM is handed to the SignalExtractor and the
result is frozen into a ScrapedSite.

Example:
    >>> engine = AcquisitionEngine(browser_pool, settings=settings)
    >>> site = await engine.acquire("https://shop.example.com")
"""

import time
from typing import Any, Optional

from playwright.async_api import (
    Error as PlaywrightError,
    Page,
    TimeoutError as PlaywrightTimeoutError,
)

from storesynth.config.settings import Settings, get_settings
from storesynth.extractors.signal_extractor import (
    FOOTER_SELECTOR,
    HEADER_SELECTOR,
    SignalExtractor,
)
from storesynth.models.schemas import (
    ComputedStyle,
    DomSnapshot,
    Screenshots,
    ScrapedSite,
)
from storesynth.services.browser_service import (
    DESKTOP_VIEWPORT,
    MOBILE_VIEWPORT,
    BrowserPool,
)
from storesynth.utils.errors import AcquisitionError
from storesynth.utils.logger import get_logger

logger = get_logger(__name__)


# Distinct (color, background-color, font-family) triples in document order,
# plus the rendered header/footer heights.
RENDER_METRICS_SCRIPT = """
(selectors) => {
  const seen = new Set();
  const styles = [];
  for (const el of document.querySelectorAll('*')) {
    const cs = window.getComputedStyle(el);
    const key = [cs.color, cs.backgroundColor, cs.fontFamily].join('|');
    if (seen.has(key)) continue;
    seen.add(key);
    styles.push({color: cs.color, backgroundColor: cs.backgroundColor, fontFamily: cs.fontFamily});
  }
  const height = (selector) => {
    const el = document.querySelector(selector);
    return el ? el.offsetHeight : 0;
  };
  return {
    styles,
    headerHeight: height(selectors.header),
    footerHeight: height(selectors.footer),
  };
}
"""

HTTP_ERROR_STATUS = 400


class AcquisitionEngine:
    """
    Drives the browser pool to capture one ScrapedSite per call.

    Attributes:
        browser_pool: Shared browser handle
        extractor: Signal extractor applied to the captured DOM
        settings: Application settings
    """

    def __init__(
        self,
        browser_pool: BrowserPool,
        extractor: Optional[SignalExtractor] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.browser_pool = browser_pool
        self.extractor = extractor or SignalExtractor(self.settings)

    async def acquire(self, url: str) -> ScrapedSite:
        """
        Load ``url`` and capture its rendered state.

        Raises:
            AcquisitionError: On timeout, navigation failure, HTTP status
                >= 400 or browser crash
        """
        start_time = time.time()
        logger.info("Acquiring page", url=url)

        try:
            async with self.browser_pool.page(DESKTOP_VIEWPORT) as page:
                await self._navigate(page, url)
                html = await page.content()
                metrics = await page.evaluate(
                    RENDER_METRICS_SCRIPT,
                    {"header": HEADER_SELECTOR, "footer": FOOTER_SELECTOR},
                )
                desktop_png = await page.screenshot(full_page=True)

            async with self.browser_pool.page(MOBILE_VIEWPORT) as page:
                await self._navigate(page, url)
                mobile_png = await page.screenshot(full_page=True)

        except AcquisitionError:
            raise
        except PlaywrightTimeoutError as e:
            logger.error("Page load timed out", url=url, error=str(e))
            raise AcquisitionError(
                f"Timed out after {self.settings.navigation_timeout_seconds:g}s loading {url}",
                url=url,
            ) from e
        except PlaywrightError as e:
            logger.error("Page load failed", url=url, error=str(e))
            raise AcquisitionError(f"Failed to load {url}: {e}", url=url) from e

        snapshot = self._build_snapshot(url, html, metrics)
        signals, products = self.extractor.extract(snapshot)

        site = ScrapedSite(
            url=url,
            raw_html_prefix=html[: self.settings.raw_html_limit],
            design_signals=signals,
            candidate_products=products,
            screenshots=Screenshots(desktop=desktop_png, mobile=mobile_png),
        )

        logger.info(
            "Page acquired",
            url=url,
            duration_ms=int((time.time() - start_time) * 1000),
            html_chars=len(html),
            products=len(products),
        )
        return site

    async def _navigate(self, page: Page, url: str) -> None:
        response = await page.goto(
            url,
            wait_until=self.settings.navigation_wait_until,
            timeout=self.settings.navigation_timeout_ms,
        )
        if response is not None and response.status >= HTTP_ERROR_STATUS:
            raise AcquisitionError(
                f"HTTP {response.status} loading {url}",
                url=url,
                details={"status": response.status},
            )

    def _build_snapshot(self, url: str, html: str, metrics: Any) -> DomSnapshot:
        metrics = metrics if isinstance(metrics, dict) else {}
        styles = [
            ComputedStyle.model_validate(entry)
            for entry in metrics.get("styles") or []
            if isinstance(entry, dict)
        ]
        return DomSnapshot(
            url=url,
            html=html,
            computed_styles=styles,
            header_height=int(metrics.get("headerHeight") or 0),
            footer_height=int(metrics.get("footerHeight") or 0),
        )


__all__ = ["AcquisitionEngine", "RENDER_METRICS_SCRIPT"]
