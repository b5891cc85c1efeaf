import pytest
from pydantic import ValidationError

from storesynth.generators.catalog import (
    MINIMAL_TEMPLATE,
    MODERN_TEMPLATE,
    TemplateCatalog,
    build_default_catalog,
)


def test_default_catalog_entries():
    catalog = build_default_catalog()

    assert [entry.id for entry in catalog.list()] == ["modern", "minimal"]
    assert len(catalog) == 2
    assert "modern" in catalog
    assert "retro" not in catalog


def test_catalog_lookup():
    catalog = build_default_catalog()

    assert catalog.get("modern") is MODERN_TEMPLATE
    assert catalog.get("minimal") is MINIMAL_TEMPLATE
    assert catalog.get("unknown") is None
    assert catalog.get(None) is None
    assert catalog.get("") is None


def test_modern_template_definition():
    assert MODERN_TEMPLATE.layout == "grid"
    assert MODERN_TEMPLATE.default_colors.primary == "#1a1a2e"
    assert MODERN_TEMPLATE.default_colors.accent == "#e94560"
    assert MODERN_TEMPLATE.structure.hero.height == "600px"
    assert MODERN_TEMPLATE.structure.footer.columns == 4
    assert [c.type for c in MODERN_TEMPLATE.default_components] == ["product-grid", "navigation", "search", "cart"]


def test_minimal_template_definition():
    assert MINIMAL_TEMPLATE.layout == "single-column"
    assert MINIMAL_TEMPLATE.default_fonts.heading == "Georgia"
    assert MINIMAL_TEMPLATE.structure.hero is None
    assert [c.type for c in MINIMAL_TEMPLATE.default_components] == ["product-grid", "navigation", "cart"]


def test_entries_are_read_only():
    with pytest.raises(ValidationError):
        MODERN_TEMPLATE.name = "Changed"


def test_duplicate_ids_rejected():
    with pytest.raises(ValueError, match="Duplicate template id: modern"):
        TemplateCatalog([MODERN_TEMPLATE, MODERN_TEMPLATE])


def test_list_returns_a_copy():
    catalog = build_default_catalog()
    catalog.list().clear()
    assert len(catalog.list()) == 2
