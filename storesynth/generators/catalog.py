"""
Base template catalog.

A fixed, read-only set of named base templates. Built once at startup and
injected into the synthesizer; lookup is by id only.
"""

from typing import Iterable, Optional

from storesynth.models.schemas import (
    ComponentType,
    StoreColors,
    StoreFonts,
    StoreLayout,
    TemplateCatalogEntry,
    TemplateComponent,
    TemplateFooter,
    TemplateHeader,
    TemplateHero,
    TemplateStructure,
)


class TemplateCatalog:
    """Immutable id -> entry mapping preserving registration order."""

    def __init__(self, entries: Iterable[TemplateCatalogEntry]):
        self._entries: dict[str, TemplateCatalogEntry] = {}
        for entry in entries:
            if entry.id in self._entries:
                raise ValueError(f"Duplicate template id: {entry.id}")
            self._entries[entry.id] = entry

    def get(self, template_id: Optional[str]) -> Optional[TemplateCatalogEntry]:
        if not template_id:
            return None
        return self._entries.get(template_id)

    def list(self) -> list[TemplateCatalogEntry]:
        return list(self._entries.values())

    def __contains__(self, template_id: object) -> bool:
        return template_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)


def _header_components(*types: ComponentType) -> list[TemplateComponent]:
    components = []
    for component_type in types:
        if component_type == ComponentType.NAVIGATION:
            components.append(TemplateComponent(type=component_type, position="header", style="horizontal"))
        elif component_type == ComponentType.SEARCH:
            components.append(TemplateComponent(type=component_type, position="header", style="inline"))
        elif component_type == ComponentType.CART:
            components.append(TemplateComponent(type=component_type, position="header", style="icon"))
    return components


MODERN_TEMPLATE = TemplateCatalogEntry(
    id="modern",
    name="Modern Store",
    description="Clean and modern e-commerce template",
    preview="/templates/modern/preview.jpg",
    features=["Responsive", "SEO Optimized", "Fast Loading"],
    structure=TemplateStructure(
        header=TemplateHeader(type="sticky", components=["logo", "navigation", "search", "cart"]),
        hero=TemplateHero(type="slider", height="600px"),
        sections=["featured-products", "categories", "testimonials", "newsletter"],
        footer=TemplateFooter(columns=4, components=["about", "links", "contact", "social"]),
    ),
    layout=StoreLayout.GRID,
    default_colors=StoreColors(primary="#1a1a2e", secondary="#4a4e69", accent="#e94560"),
    default_fonts=StoreFonts(heading="Helvetica Neue", body="Arial"),
    default_components=[
        TemplateComponent(type=ComponentType.PRODUCT_GRID, columns=4, show_price=True, show_image=True),
        *_header_components(ComponentType.NAVIGATION, ComponentType.SEARCH, ComponentType.CART),
    ],
)

MINIMAL_TEMPLATE = TemplateCatalogEntry(
    id="minimal",
    name="Minimal Store",
    description="Simple and elegant design",
    preview="/templates/minimal/preview.jpg",
    features=["Minimalist", "Typography Focus", "White Space"],
    structure=TemplateStructure(
        header=TemplateHeader(type="simple", components=["logo", "navigation", "cart"]),
        sections=["products-grid", "about", "contact"],
        footer=TemplateFooter(columns=2, components=["copyright", "social"]),
    ),
    layout=StoreLayout.SINGLE_COLUMN,
    default_colors=StoreColors(primary="#000000", secondary="#666666", accent="#0066cc"),
    default_fonts=StoreFonts(heading="Georgia", body="Arial"),
    default_components=[
        TemplateComponent(type=ComponentType.PRODUCT_GRID, columns=3, show_price=True, show_image=True),
        *_header_components(ComponentType.NAVIGATION, ComponentType.CART),
    ],
)


def build_default_catalog() -> TemplateCatalog:
    """Build the catalog of base templates."""
    return TemplateCatalog([MODERN_TEMPLATE, MINIMAL_TEMPLATE])


__all__ = [
    "TemplateCatalog",
    "build_default_catalog",
    "MODERN_TEMPLATE",
    "MINIMAL_TEMPLATE",
]
