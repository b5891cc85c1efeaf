import pytest
from unittest.mock import AsyncMock, MagicMock

from storesynth.analyzers.design_analyzer import FALLBACK_RECOMMENDATIONS
from storesynth.generators.rendering import load_markup
from storesynth.generators.store_files import StoreFileGenerator
from storesynth.generators.template_synthesizer import (
    TemplateSynthesizer,
    select_base_template,
    select_components,
)
from storesynth.models.schemas import DesignAnalysis, LayoutAnalysis, LayoutStructure, StoreStatus
from storesynth.services.store_repository import InMemoryStoreRepository
from storesynth.utils.errors import InputValidationError, PersistenceError, SynthesisError


@pytest.fixture
def synthesizer(settings):
    return TemplateSynthesizer(settings=settings)


def _analysis(header=True, footer=True, navigation=True, products=None) -> DesignAnalysis:
    return DesignAnalysis(
        layout=LayoutAnalysis(structure=LayoutStructure(header=header, footer=footer, navigation=navigation)),
        products=products,
        ai_recommendations=FALLBACK_RECOMMENDATIONS,
    )


# =============================================================================
# Selection
# =============================================================================

@pytest.mark.parametrize("header,footer,expected", [
    (True, True, "modern"),
    (True, False, "minimal"),
    (False, True, "minimal"),
    (False, False, "minimal"),
])
def test_select_base_template(header, footer, expected):
    assert select_base_template(_analysis(header=header, footer=footer)) == expected


def test_select_components_full(sample_analysis):
    components = select_components(sample_analysis)

    assert [c.type for c in components] == ["product-grid", "navigation", "search", "cart"]
    grid = components[0]
    assert grid.columns == 4
    assert grid.show_price is True
    assert grid.show_image is True
    assert components[1].style == "horizontal"
    assert components[1].position == "header"


def test_select_components_without_products_or_nav():
    components = select_components(_analysis(navigation=False))
    assert [c.type for c in components] == ["search", "cart"]


def test_select_components_grid_reflects_product_fields(sample_analysis):
    products = sample_analysis.products.model_copy(update={"has_prices": False})
    components = select_components(sample_analysis.model_copy(update={"products": products}))
    assert components[0].show_price is False
    assert components[0].show_image is True


# =============================================================================
# Synthesis
# =============================================================================

def test_synthesize(synthesizer, sample_analysis):
    template = synthesizer.synthesize(sample_analysis)

    assert template.id.startswith("custom-")
    assert template.name == "Custom Generated Template"
    assert template.base_template_id == "modern"
    assert template.customizations.colors == sample_analysis.colors
    assert template.customizations.typography == sample_analysis.typography
    assert "--color-primary: #1a1a2e;" in template.css
    assert "--color-secondary: #ffffff;" in template.css
    assert "--font-heading: Helvetica Neue, Arial, sans-serif;" in template.css
    assert "--font-body: Georgia, Georgia, serif;" in template.css
    assert template.html == load_markup()
    assert "{{storeName}}" in template.html


def test_synthesize_is_deterministic(synthesizer, sample_analysis):
    first = synthesizer.synthesize(sample_analysis)
    second = synthesizer.synthesize(sample_analysis)

    assert first.id != second.id
    assert first.css == second.css
    assert first.customizations == second.customizations


def test_get_templates(synthesizer):
    assert [entry.id for entry in synthesizer.get_templates()] == ["modern", "minimal"]


# =============================================================================
# Store creation
# =============================================================================

@pytest.mark.asyncio
async def test_create_store_from_catalog_template(synthesizer):
    record = await synthesizer.create_store(
        user_id="user-1",
        store_info={"name": "Acme Goods", "source_url": "https://acme.test"},
        template_id="modern",
    )

    assert record.user_id == "user-1"
    assert record.subdomain == "acmegoods"
    assert record.status == StoreStatus.DRAFT
    assert record.template.template_id == "modern"
    assert record.template.source_url == "https://acme.test"
    assert record.template.analyzed_data is None
    assert record.template.customizations.colors.primary == "#1a1a2e"
    assert record.template.customizations.fonts.heading == "Helvetica Neue"
    assert record.design.layout == "grid"
    assert record.design.theme == "light"
    assert [c.type for c in record.design.components] == ["product-grid", "navigation", "search", "cart"]
    assert record.settings.language == "en"
    assert record.settings.currency == "USD"
    assert record.settings.timezone == "UTC"
    assert record.seo.title == "Acme Goods"
    assert record.seo.description == "Welcome to Acme Goods"
    assert await synthesizer.repository.get(record.id) == record


@pytest.mark.asyncio
async def test_create_store_explicit_values_override_template(synthesizer):
    record = await synthesizer.create_store(
        user_id="user-1",
        store_info={
            "name": "Acme",
            "subdomain": "acme-shop",
            "currency": "EUR",
            "seoTitle": "Acme Shop",
            "seoDescription": "<p>Hand-made   goods</p>",
            "keywords": ["handmade"],
        },
        template_id="minimal",
        customizations={"colors": {"primary": "#ff0000"}, "fonts": {"body": "Inter"}, "theme": "dark"},
    )

    colors = record.template.customizations.colors
    assert (colors.primary, colors.secondary, colors.accent) == ("#ff0000", "#666666", "#0066cc")
    assert record.template.customizations.fonts.heading == "Georgia"
    assert record.template.customizations.fonts.body == "Inter"
    assert record.design.theme == "dark"
    assert record.design.layout == "single-column"
    assert record.subdomain == "acmeshop"
    assert record.settings.currency == "EUR"
    assert record.seo.title == "Acme Shop"
    assert record.seo.description == "Hand-made goods"
    assert record.seo.keywords == ["handmade"]
    assert record.template.analyzed_data["theme"] == "dark"


@pytest.mark.asyncio
async def test_create_store_from_analysis(synthesizer, sample_analysis):
    customizations = sample_analysis.model_dump(mode="json", by_alias=True)

    record = await synthesizer.create_store(
        user_id="user-1",
        store_info={"name": "Acme Goods"},
        customizations=customizations,
    )

    assert record.template.template_id.startswith("custom-")
    assert record.template.analyzed_data == customizations
    assert record.template.customizations.colors.primary == "#1a1a2e"
    assert record.template.customizations.fonts.heading == "Helvetica Neue"
    assert record.template.customizations.fonts.body == "Georgia"
    assert record.design.layout == "grid"
    assert [c.type for c in record.design.components] == ["product-grid", "navigation", "search", "cart"]


@pytest.mark.asyncio
async def test_create_store_unknown_template_synthesizes(synthesizer):
    record = await synthesizer.create_store(
        user_id="user-1",
        store_info={"name": "Acme"},
        template_id="retro",
        customizations={
            "colors": {"primary": "#123456"},
            "typography": {"heading": {"family": "Georgia", "category": "serif", "fallback": "Georgia, serif"}},
            "layout": {"structure": {"header": True, "footer": False}},
        },
    )

    assert record.template.template_id.startswith("custom-")
    assert record.template.customizations.colors.primary == "#123456"
    assert record.template.customizations.fonts.heading == "Georgia"
    # No header/footer in the analysis -> minimal base
    assert record.design.layout == "single-column"
    assert [c.type for c in record.design.components] == ["search", "cart"]


@pytest.mark.asyncio
@pytest.mark.parametrize("template_id,customizations", [
    (None, None),
    (None, {}),
    ("retro", None),
])
async def test_create_store_requires_template_or_customizations(synthesizer, template_id, customizations):
    with pytest.raises(SynthesisError):
        await synthesizer.create_store("user-1", {"name": "Acme"}, template_id, customizations)
    assert len(synthesizer.repository) == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("template_id,customizations", [
    (None, ["not", "an", "object"]),
    (None, {"colors": "red"}),
    ("modern", {"theme": "neon"}),
    ("modern", {"colors": {"primary": 12}}),
    (None, {"theme": "dark"}),
    (None, {"foo": 1}),
    ("retro", {"colors": {"primary": "#123456"}}),
])
async def test_create_store_invalid_customizations(synthesizer, template_id, customizations):
    with pytest.raises(SynthesisError):
        await synthesizer.create_store("user-1", {"name": "Acme"}, template_id, customizations)
    assert len(synthesizer.repository) == 0


@pytest.mark.asyncio
async def test_create_store_validates_identity_and_name(synthesizer):
    with pytest.raises(InputValidationError) as exc_info:
        await synthesizer.create_store("", {"name": "Acme"}, "modern")
    assert exc_info.value.code == "MISSING_USER_ID"

    with pytest.raises(InputValidationError) as exc_info:
        await synthesizer.create_store("user-1", {"name": "!!!"}, "modern")
    assert exc_info.value.code == "INVALID_SUBDOMAIN"


@pytest.mark.asyncio
async def test_create_store_subdomain_conflict(synthesizer):
    await synthesizer.create_store("user-1", {"name": "Acme"}, "modern")

    with pytest.raises(PersistenceError):
        await synthesizer.create_store("user-2", {"name": "ACME"}, "minimal")


@pytest.mark.asyncio
async def test_create_store_wraps_repository_failures(settings):
    repository = MagicMock()
    repository.upsert = AsyncMock(side_effect=RuntimeError("connection reset"))
    synthesizer = TemplateSynthesizer(repository=repository, settings=settings)

    with pytest.raises(PersistenceError, match="connection reset"):
        await synthesizer.create_store("user-1", {"name": "Acme"}, "modern")


@pytest.mark.asyncio
async def test_create_store_writes_files(settings):
    generator = StoreFileGenerator(settings)
    synthesizer = TemplateSynthesizer(file_generator=generator, settings=settings)

    record = await synthesizer.create_store("user-1", {"name": "Acme"}, "modern")

    store_dir = settings.output_dir / "stores" / "acme"
    assert (store_dir / "index.html").read_text(encoding="utf-8") == load_markup()
    assert "--color-primary: #1a1a2e;" in (store_dir / "css" / "store.css").read_text(encoding="utf-8")
    assert record.id in (store_dir / "store.json").read_text(encoding="utf-8")


@pytest.mark.asyncio
async def test_create_store_file_failure_is_not_fatal(settings):
    generator = MagicMock()
    generator.generate.side_effect = OSError("disk full")
    repository = InMemoryStoreRepository()
    synthesizer = TemplateSynthesizer(repository=repository, file_generator=generator, settings=settings)

    record = await synthesizer.create_store("user-1", {"name": "Acme"}, "modern")

    generator.generate.assert_called_once()
    assert await repository.get(record.id) is not None


@pytest.mark.asyncio
async def test_create_store_names_missing_analysis_fields(synthesizer):
    with pytest.raises(SynthesisError) as exc_info:
        await synthesizer.create_store("user-1", {"name": "Acme"}, None, {"colors": {"primary": "#123456"}})

    assert exc_info.value.details["missing"] == ["typography", "layout"]
    assert "typography, layout" in str(exc_info.value)
    assert len(synthesizer.repository) == 0
