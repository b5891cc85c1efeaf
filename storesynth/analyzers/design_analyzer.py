"""
Design analysis.

Classifies raw design signals into a structured analysis: color roles,
typography roles with fallback stacks, layout structure and a product
structure summary. The classification is deterministic for a given page;
only the AI recommendation set varies, and any failure there is replaced by
a fixed fallback set so analysis never fails outright.

Example:
    >>> analyzer = DesignAnalyzer(llm_service=claude, settings=settings)
    >>> analysis = await analyzer.analyze(scraped_site)
    >>> analysis.colors.primary
    '#1a1a2e'
"""

import asyncio
import re
import time
from typing import Optional

from storesynth.analyzers.prompts import format_recommendation_prompt
from storesynth.config.settings import Settings, get_settings
from storesynth.models.schemas import (
    AIRecommendations,
    CandidateProduct,
    ColorAnalysis,
    ColorSwatch,
    ColorUsage,
    DesignAnalysis,
    DesignSignals,
    FontCategory,
    FontFace,
    LayoutAnalysis,
    LayoutDimensions,
    LayoutSignals,
    LayoutStructure,
    ProductStructure,
    RecommendationResult,
    RecommendationSource,
    ScrapedSite,
    TypographyAnalysis,
)
from storesynth.services.llm_service import ClaudeService
from storesynth.utils.errors import ExtractionDegraded
from storesynth.utils.logger import get_logger

logger = get_logger(__name__)


# =============================================================================
# Constants
# =============================================================================

DEFAULT_HEX = "#000000"
RGB_PATTERN = re.compile(r"rgba?\((\d+),\s*(\d+),\s*(\d+)")
HEX_PATTERN = re.compile(r"^#[0-9a-fA-F]{6}$")
SHORT_HEX_PATTERN = re.compile(r"^#[0-9a-fA-F]{3}$")

BACKGROUND_LUMA_THRESHOLD = 200
TEXT_LUMA_THRESHOLD = 50

SERIF_KEYWORDS = ("Times", "Georgia", "Garamond", "Serif")
MONOSPACE_KEYWORDS = ("Courier", "Monaco", "Consolas", "Monospace")

FONT_FALLBACKS = {
    FontCategory.SERIF: "Georgia, serif",
    FontCategory.MONOSPACE: "Courier New, monospace",
    FontCategory.SANS_SERIF: "Arial, sans-serif",
}

SAMPLE_PRODUCTS = 3
PROMPT_COLORS = 5
PROMPT_FONTS = 3

FALLBACK_RECOMMENDATIONS = AIRecommendations(
    improvements=["Modern design patterns", "Better color contrast", "Clear CTAs"],
    ux=["Simplified navigation", "Faster load times", "Better mobile experience"],
    mobile=["Touch-friendly buttons", "Responsive images", "Optimized fonts"],
    conversion=["Clear value proposition", "Trust badges", "Simplified checkout"],
)

AI_NOT_CONFIGURED = "AI service not configured"


# =============================================================================
# Colors
# =============================================================================

def normalize_color(value: str) -> str:
    """
    Normalize a CSS color to 6-digit hex.

    ``#rrggbb`` passes through unchanged, ``#rgb`` is expanded, ``rgb()`` and
    ``rgba()`` are converted; anything else becomes ``#000000``.
    """
    value = (value or "").strip()
    if HEX_PATTERN.match(value):
        return value
    if SHORT_HEX_PATTERN.match(value):
        return "#" + "".join(ch * 2 for ch in value[1:]).lower()

    match = RGB_PATTERN.search(value)
    if not match:
        return DEFAULT_HEX
    channels = (min(int(group), 255) for group in match.groups())
    return "#" + "".join(f"{channel:02x}" for channel in channels)


def hex_to_rgb(hex_color: str) -> tuple[int, int, int]:
    hex_color = normalize_color(hex_color).lstrip("#")
    return (
        int(hex_color[0:2], 16),
        int(hex_color[2:4], 16),
        int(hex_color[4:6], 16),
    )


def categorize_color(hex_color: str) -> ColorUsage:
    """Bucket a color by perceived brightness."""
    r, g, b = hex_to_rgb(hex_color)
    luma = 0.299 * r + 0.587 * g + 0.114 * b
    if luma > BACKGROUND_LUMA_THRESHOLD:
        return ColorUsage.BACKGROUND
    if luma < TEXT_LUMA_THRESHOLD:
        return ColorUsage.TEXT
    return ColorUsage.ACCENT


def analyze_colors(colors: list[str]) -> ColorAnalysis:
    # Roles follow extraction order; usage is informational only
    swatches = []
    for original in colors:
        hex_color = normalize_color(original)
        swatches.append(ColorSwatch(original=original, hex=hex_color, usage=categorize_color(hex_color)))

    defaults = ColorAnalysis()
    return ColorAnalysis(
        primary=swatches[0].hex if len(swatches) > 0 else defaults.primary,
        secondary=swatches[1].hex if len(swatches) > 1 else defaults.secondary,
        accent=swatches[2].hex if len(swatches) > 2 else defaults.accent,
        all=swatches,
    )


# =============================================================================
# Typography
# =============================================================================

def primary_family(declaration: str) -> str:
    """First family of a ``font-family`` declaration, quotes stripped."""
    cleaned = re.sub(r"['\"]", "", declaration or "")
    return cleaned.split(",")[0].strip()


def categorize_font(family: str) -> FontCategory:
    """Keyword membership, case-sensitive."""
    if any(keyword in family for keyword in SERIF_KEYWORDS):
        return FontCategory.SERIF
    if any(keyword in family for keyword in MONOSPACE_KEYWORDS):
        return FontCategory.MONOSPACE
    return FontCategory.SANS_SERIF


def font_fallback(family: str) -> str:
    return FONT_FALLBACKS[categorize_font(family)]


def analyze_typography(fonts: list[str]) -> TypographyAnalysis:
    faces = []
    for declaration in fonts:
        family = primary_family(declaration)
        if not family:
            continue
        faces.append(FontFace(family=family, category=categorize_font(family), fallback=font_fallback(family)))

    if not faces:
        return TypographyAnalysis()

    return TypographyAnalysis(
        heading=faces[0],
        body=faces[1] if len(faces) > 1 else faces[0],
        all=faces,
    )


# =============================================================================
# Layout & Products
# =============================================================================

def analyze_layout(layout: LayoutSignals) -> LayoutAnalysis:
    return LayoutAnalysis(
        structure=LayoutStructure(
            header=layout.has_header,
            navigation=layout.has_nav,
            main_content=layout.has_main_content,
            footer=layout.has_footer,
        ),
        dimensions=LayoutDimensions(
            header_height=layout.header_height,
            footer_height=layout.footer_height,
        ),
    )


def analyze_products(products: list[CandidateProduct]) -> Optional[ProductStructure]:
    if not products:
        return None
    return ProductStructure(
        count=len(products),
        has_images=any(product.image_url for product in products),
        has_prices=any(product.price_text for product in products),
        samples=[product.model_copy() for product in products[:SAMPLE_PRODUCTS]],
    )


# =============================================================================
# Recommendations
# =============================================================================

def fallback_result(error: str) -> RecommendationResult:
    return RecommendationResult(
        source=RecommendationSource.FALLBACK,
        recommendations=FALLBACK_RECOMMENDATIONS.model_copy(deep=True),
        error=error,
    )


async def get_recommendations(
    llm_service: Optional[ClaudeService],
    url: str,
    signals: DesignSignals,
    has_products: bool,
    timeout_seconds: float,
) -> RecommendationResult:
    """
    Ask the completion service for the four-category recommendation set.

    Every failure, including a missing service, a timeout or a reply that
    does not match the four-category shape, yields the fallback set.
    """
    if llm_service is None:
        return fallback_result(AI_NOT_CONFIGURED)

    system, prompt = format_recommendation_prompt(
        url=url,
        colors=[normalize_color(color) for color in signals.colors[:PROMPT_COLORS]],
        fonts=signals.fonts[:PROMPT_FONTS],
        has_products=has_products,
    )

    try:
        data = await asyncio.wait_for(
            llm_service.complete_json(prompt, system=system),
            timeout=timeout_seconds,
        )
        recommendations = AIRecommendations.model_validate(data)
    except Exception as e:
        error = str(e) or type(e).__name__
        logger.warning("AI recommendations unavailable, using fallback", url=url, error=error)
        return fallback_result(error)

    return RecommendationResult(source=RecommendationSource.AI, recommendations=recommendations)


# =============================================================================
# Analyzer
# =============================================================================

class DesignAnalyzer:
    """
    Turns a ScrapedSite into a DesignAnalysis.

    Attributes:
        llm_service: Completion service; ``None`` always serves the fallback
        settings: Application settings
    """

    def __init__(self, llm_service: Optional[ClaudeService] = None, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.llm_service = llm_service

    async def analyze(self, site: ScrapedSite) -> DesignAnalysis:
        start_time = time.time()

        result = await get_recommendations(
            self.llm_service,
            url=site.url,
            signals=site.design_signals,
            has_products=bool(site.candidate_products),
            timeout_seconds=self.settings.ai_timeout_seconds,
        )
        analysis = self._build(site, result.recommendations)

        logger.info(
            "Design analyzed",
            url=site.url,
            recommendation_source=result.source,
            products=analysis.products.count if analysis.products else 0,
            duration_ms=int((time.time() - start_time) * 1000),
        )
        return analysis

    def _build(self, site: ScrapedSite, recommendations: AIRecommendations) -> DesignAnalysis:
        signals = site.design_signals
        if not signals.colors or not signals.fonts:
            logger.warning(
                "Design signals resolved to defaults",
                url=site.url,
                missing_colors=not signals.colors,
                missing_fonts=not signals.fonts,
                category=ExtractionDegraded.__name__,
            )

        return DesignAnalysis(
            colors=analyze_colors(signals.colors),
            typography=analyze_typography(signals.fonts),
            layout=analyze_layout(signals.layout),
            products=analyze_products(site.candidate_products),
            ai_recommendations=recommendations,
        )


__all__ = [
    "DesignAnalyzer",
    "FALLBACK_RECOMMENDATIONS",
    "normalize_color",
    "hex_to_rgb",
    "categorize_color",
    "categorize_font",
    "font_fallback",
    "primary_family",
    "analyze_colors",
    "analyze_typography",
    "analyze_layout",
    "analyze_products",
    "get_recommendations",
    "fallback_result",
]
