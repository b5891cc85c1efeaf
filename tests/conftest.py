import pytest
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock, patch

from storesynth.config.settings import Settings, get_settings
from storesynth.models.schemas import (
    AIRecommendations,
    CandidateProduct,
    ComputedStyle,
    DesignSignals,
    DomSnapshot,
    LayoutSignals,
    Screenshots,
    ScrapedSite,
)
from storesynth.services.browser_service import DESKTOP_VIEWPORT, MOBILE_VIEWPORT
from storesynth.services.llm_service import ClaudeService

DESKTOP_PNG = b"\x89PNG\r\n\x1a\ndesktop"
MOBILE_PNG = b"\x89PNG\r\n\x1a\nmobile"

SAMPLE_HTML = """<!DOCTYPE html>
<html>
<head>
  <title>Acme Goods | Home</title>
  <meta name="description" content="Quality goods for everyone">
  <meta name="keywords" content="goods, widgets">
</head>
<body>
  <header class="site-header">
    <nav><a href="/">Home</a><a href="/shop">Shop</a></nav>
  </header>
  <main>
    <div class="product">
      <a href="/products/widget-1"><img src="/img/widget-1.jpg" alt="Widget One"></a>
      <h3 class="product-title">Widget One</h3>
      <span class="price">$19.99</span>
    </div>
    <div class="product">
      <a href="/products/widget-2"><img src="/img/widget-2.jpg" alt="Widget Two"></a>
      <h3 class="product-title">Widget Two</h3>
      <span class="price">$24.99</span>
    </div>
    <div class="product">
      <a href="/products/widget-3"><img data-src="/img/widget-3.jpg" alt="Widget Three"></a>
      <h3 class="product-title">Widget Three</h3>
      <span class="price">$29.99</span>
    </div>
  </main>
  <footer>&copy; Acme Goods</footer>
</body>
</html>
"""

BLOG_HTML = """<!DOCTYPE html>
<html>
<head><title>Notes</title></head>
<body>
  <main><article><h1>Hello</h1><p>No shop here.</p></article></main>
</body>
</html>
"""

SAMPLE_METRICS = {
    "styles": [
        {"color": "rgb(26, 26, 46)", "backgroundColor": "rgba(0, 0, 0, 0)",
         "fontFamily": '"Helvetica Neue", Arial, sans-serif'},
        {"color": "rgb(255, 255, 255)", "backgroundColor": "rgb(233, 69, 96)",
         "fontFamily": "Georgia, serif"},
        {"color": "rgb(26, 26, 46)", "backgroundColor": "transparent",
         "fontFamily": '"Helvetica Neue", Arial, sans-serif'},
    ],
    "headerHeight": 80,
    "footerHeight": 200,
}


# =============================================================================
# Settings
# =============================================================================

@pytest.fixture
def settings(tmp_path):
    """Real settings pointed at a temporary output directory."""
    return Settings(
        _env_file=None,
        ANTHROPIC_API_KEY="sk-ant-test-key",
        APP_ENV="development",
        OUTPUT_DIR=tmp_path / "outputs",
    )


@pytest.fixture
def settings_without_ai(tmp_path):
    return Settings(
        _env_file=None,
        ANTHROPIC_API_KEY="",
        APP_ENV="development",
        OUTPUT_DIR=tmp_path / "outputs",
    )


@pytest.fixture(autouse=True)
def patch_get_settings(settings):
    """Globally patch get_settings where it is imported directly."""
    get_settings.cache_clear()
    with patch("storesynth.main.get_settings", return_value=settings):
        with patch("storesynth.utils.formatters.get_settings", return_value=settings):
            yield settings
    get_settings.cache_clear()


# =============================================================================
# Sample data
# =============================================================================

@pytest.fixture
def sample_styles():
    return [ComputedStyle.model_validate(entry) for entry in SAMPLE_METRICS["styles"]]


@pytest.fixture
def sample_snapshot(sample_styles):
    return DomSnapshot(
        url="https://shop.example.com",
        html=SAMPLE_HTML,
        computed_styles=sample_styles,
        header_height=80,
        footer_height=200,
    )


@pytest.fixture
def sample_products():
    return [
        CandidateProduct(name="Widget One", price_text="$19.99",
                         image_url="/img/widget-1.jpg", link_url="/products/widget-1"),
        CandidateProduct(name="Widget Two", price_text="$24.99",
                         image_url="/img/widget-2.jpg", link_url="/products/widget-2"),
        CandidateProduct(name="Widget Three", price_text="$29.99",
                         image_url="/img/widget-3.jpg", link_url="/products/widget-3"),
    ]


@pytest.fixture
def sample_signals():
    return DesignSignals(
        colors=["rgb(26, 26, 46)", "rgb(255, 255, 255)", "rgb(233, 69, 96)", "#ABC"],
        fonts=['"Helvetica Neue", Arial, sans-serif', "Georgia, serif"],
        layout=LayoutSignals(
            has_header=True,
            has_nav=True,
            has_main_content=True,
            has_footer=True,
            header_height=80,
            footer_height=200,
        ),
        page_title="Acme Goods | Home",
        meta_description="Quality goods for everyone",
    )


@pytest.fixture
def sample_site(sample_signals, sample_products):
    return ScrapedSite(
        url="https://shop.example.com",
        raw_html_prefix=SAMPLE_HTML[:100],
        design_signals=sample_signals,
        candidate_products=sample_products,
        screenshots=Screenshots(desktop=DESKTOP_PNG, mobile=MOBILE_PNG),
    )


@pytest.fixture
def sample_recommendations():
    return AIRecommendations(
        improvements=["Increase hero contrast", "Use a bolder accent"],
        ux=["Add breadcrumb navigation"],
        mobile=["Enlarge tap targets"],
        conversion=["Show shipping costs early"],
    )


@pytest.fixture
def sample_analysis(settings, sample_site, sample_recommendations):
    from storesynth.analyzers.design_analyzer import DesignAnalyzer

    analyzer = DesignAnalyzer(llm_service=None, settings=settings)
    return analyzer._build(sample_site, sample_recommendations)


@pytest.fixture
def sample_analyze_result(settings, sample_site, sample_analysis):
    from storesynth.generators.template_synthesizer import TemplateSynthesizer
    from storesynth.models.schemas import AnalyzeResult, Preview, ScrapedSummary

    template = TemplateSynthesizer(settings=settings).synthesize(sample_analysis)
    return AnalyzeResult(
        source_url=sample_site.url,
        scraped_summary=ScrapedSummary(
            title=sample_site.design_signals.page_title,
            colors=sample_site.design_signals.colors,
            fonts=sample_site.design_signals.fonts,
            products_found=len(sample_site.candidate_products),
        ),
        analysis=sample_analysis,
        template=template,
        preview=Preview(**sample_site.screenshots.to_base64()),
    )


# =============================================================================
# Mock services
# =============================================================================

@pytest.fixture
def mock_llm_service(sample_recommendations):
    service = AsyncMock(spec=ClaudeService)
    service.complete_json.return_value = sample_recommendations.model_dump()
    return service


def make_page(html="", metrics=None, screenshot=b"", status=200):
    """Playwright page double with the calls acquisition makes."""
    page = AsyncMock()
    response = MagicMock()
    response.status = status
    page.goto.return_value = response
    page.content.return_value = html
    page.evaluate.return_value = metrics
    page.screenshot.return_value = screenshot
    return page


class FakeBrowserPool:
    """BrowserPool double handing out one prepared page per viewport."""

    def __init__(self, pages):
        self.pages = pages
        self.viewports = []
        self.closed = False

    @asynccontextmanager
    async def page(self, viewport=DESKTOP_VIEWPORT):
        self.viewports.append(viewport)
        yield self.pages[viewport]

    async def close(self):
        self.closed = True


@pytest.fixture
def page_factory():
    return make_page


@pytest.fixture
def fake_browser_pool():
    """Factory for a pool serving ``html`` at the desktop viewport."""
    def _create(html=SAMPLE_HTML, metrics=SAMPLE_METRICS, status=200):
        return FakeBrowserPool({
            DESKTOP_VIEWPORT: make_page(html=html, metrics=metrics, screenshot=DESKTOP_PNG, status=status),
            MOBILE_VIEWPORT: make_page(screenshot=MOBILE_PNG, status=status),
        })
    return _create


@pytest.fixture
def sample_html():
    return SAMPLE_HTML


@pytest.fixture
def blog_html():
    return BLOG_HTML


@pytest.fixture
def screenshot_pngs():
    """``(desktop, mobile)`` bytes served by the fake browser pool."""
    return DESKTOP_PNG, MOBILE_PNG
