"""
Design signal extraction.

Reads raw design signals out of a rendered page snapshot: the color palette
and font declarations from the computed-style metrics, structural presence
flags and page metadata from the DOM, and up to ``MAX_CANDIDATE_PRODUCTS``
product records found by an ordered list of selector strategies.

Example:
    >>> signals, products = SignalExtractor().extract(snapshot)
"""

import re
from dataclasses import dataclass
from typing import Iterable, Optional

from bs4 import BeautifulSoup, Tag

from storesynth.config.settings import Settings, get_settings
from storesynth.models.schemas import (
    CandidateProduct,
    ComputedStyle,
    DesignSignals,
    DomSnapshot,
    LayoutSignals,
)
from storesynth.utils.logger import get_logger

logger = get_logger(__name__)


# =============================================================================
# Selectors
# =============================================================================

HEADER_SELECTOR = 'header, [role="banner"], .header, #header'
NAV_SELECTOR = 'nav, [role="navigation"], .nav, .navbar'
MAIN_SELECTOR = 'main, [role="main"], .main-content, #main'
FOOTER_SELECTOR = 'footer, [role="contentinfo"], .footer, #footer'

TRANSPARENT_RGBA = re.compile(r"^rgba\(\s*[\d.]+\s*,\s*[\d.]+\s*,\s*[\d.]+\s*,\s*(?:0+(?:\.0*)?|\.0+)\s*\)$")


@dataclass(frozen=True)
class ProductStrategy:
    """One product container selector; strategies are tried in order."""
    name: str
    selector: str

    def match(self, soup: BeautifulSoup, limit: int) -> list[Tag]:
        return soup.select(self.selector, limit=limit)


PRODUCT_STRATEGIES: tuple[ProductStrategy, ...] = (
    ProductStrategy("microdata", '[itemtype*="Product"]'),
    ProductStrategy("product", ".product"),
    ProductStrategy("product-item", ".product-item"),
    ProductStrategy("product-card", ".product-card"),
    ProductStrategy("data-product", "[data-product]"),
)


@dataclass(frozen=True)
class FieldSource:
    """
    Where one product field can be read from inside a product element.

    Reads the attribute when ``attr`` is set, otherwise the element text,
    falling back to ``fallback_attr`` when the text is empty.
    """
    selector: str
    attr: Optional[str] = None
    fallback_attr: Optional[str] = None

    def read(self, element: Tag) -> str:
        node = element.select_one(self.selector)
        if node is None:
            return ""
        if self.attr:
            value = node.get(self.attr) or ""
        else:
            value = node.get_text(" ", strip=True)
            if not value and self.fallback_attr:
                value = node.get(self.fallback_attr) or ""
        return str(value).strip()


NAME_SOURCES = (
    FieldSource('[itemprop="name"]'),
    FieldSource(".product-title"),
    FieldSource(".product-name"),
    FieldSource("h2"),
    FieldSource("h3"),
)
PRICE_SOURCES = (
    FieldSource('[itemprop="price"]', fallback_attr="content"),
    FieldSource(".price"),
    FieldSource(".product-price"),
)
IMAGE_SOURCES = (
    FieldSource("img[src]", attr="src"),
    FieldSource("img[data-src]", attr="data-src"),
)
LINK_SOURCES = (
    FieldSource("a[href]", attr="href"),
)


# =============================================================================
# Pure helpers
# =============================================================================

def is_transparent(value: str) -> bool:
    """True for ``transparent`` and any ``rgba(...)`` with zero alpha."""
    normalized = value.strip().lower()
    return normalized == "transparent" or bool(TRANSPARENT_RGBA.match(normalized))


def collect_colors(styles: Iterable[ComputedStyle]) -> list[str]:
    """Foreground then background per element, first occurrence wins."""
    seen: set[str] = set()
    colors: list[str] = []
    for style in styles:
        for value in (style.color, style.background_color):
            value = (value or "").strip()
            if not value or is_transparent(value) or value in seen:
                continue
            seen.add(value)
            colors.append(value)
    return colors


def collect_fonts(styles: Iterable[ComputedStyle]) -> list[str]:
    seen: set[str] = set()
    fonts: list[str] = []
    for style in styles:
        value = (style.font_family or "").strip()
        if value and value not in seen:
            seen.add(value)
            fonts.append(value)
    return fonts


def first_value(element: Tag, sources: Iterable[FieldSource]) -> str:
    """Value from the first source that yields a non-empty string."""
    for source in sources:
        value = source.read(element)
        if value:
            return value
    return ""


def find_product_elements(
    soup: BeautifulSoup,
    limit: int,
    strategies: Iterable[ProductStrategy] = PRODUCT_STRATEGIES,
) -> tuple[Optional[str], list[Tag]]:
    """Run strategies in order; the first non-empty one is used exclusively."""
    for strategy in strategies:
        matches = strategy.match(soup, limit)
        if matches:
            return strategy.name, matches
    return None, []


def read_product(element: Tag) -> CandidateProduct:
    return CandidateProduct(
        name=first_value(element, NAME_SOURCES),
        price_text=first_value(element, PRICE_SOURCES),
        image_url=first_value(element, IMAGE_SOURCES) or None,
        link_url=first_value(element, LINK_SOURCES) or None,
    )


def _meta_content(soup: BeautifulSoup, name: str) -> Optional[str]:
    tag = soup.find("meta", attrs={"name": name})
    if tag is None:
        return None
    content = tag.get("content")
    return content.strip() if content else None


# =============================================================================
# Extractor
# =============================================================================

class SignalExtractor:
    """Turns a DomSnapshot into DesignSignals and candidate products."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    def extract(self, snapshot: DomSnapshot) -> tuple[DesignSignals, list[CandidateProduct]]:
        soup = BeautifulSoup(snapshot.html or "", "html.parser")

        colors = collect_colors(snapshot.computed_styles)
        fonts = collect_fonts(snapshot.computed_styles)
        layout = LayoutSignals(
            has_header=soup.select_one(HEADER_SELECTOR) is not None,
            has_nav=soup.select_one(NAV_SELECTOR) is not None,
            has_main_content=soup.select_one(MAIN_SELECTOR) is not None,
            has_footer=soup.select_one(FOOTER_SELECTOR) is not None,
            header_height=max(0, snapshot.header_height),
            footer_height=max(0, snapshot.footer_height),
        )

        title = soup.title.get_text(strip=True) if soup.title else ""
        signals = DesignSignals(
            colors=colors,
            fonts=fonts,
            layout=layout,
            page_title=title,
            meta_description=_meta_content(soup, "description"),
            meta_keywords=_meta_content(soup, "keywords"),
        )

        strategy, elements = find_product_elements(soup, self.settings.max_candidate_products)
        products = [read_product(element) for element in elements]

        logger.info(
            "Signals extracted",
            url=snapshot.url,
            colors=len(colors),
            fonts=len(fonts),
            products=len(products),
            product_strategy=strategy,
        )
        return signals, products


__all__ = [
    "SignalExtractor",
    "ProductStrategy",
    "FieldSource",
    "PRODUCT_STRATEGIES",
    "HEADER_SELECTOR",
    "NAV_SELECTOR",
    "MAIN_SELECTOR",
    "FOOTER_SELECTOR",
    "is_transparent",
    "collect_colors",
    "collect_fonts",
    "find_product_elements",
    "read_product",
]
