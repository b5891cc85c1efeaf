"""
Template synthesis and store creation.

``synthesize`` turns a DesignAnalysis into a GeneratedTemplate: a base
template choice, an ordered component list, a stylesheet whose custom
properties carry the analyzed colors and fonts, and the markup skeleton with
its ``{{token}}`` placeholders left unresolved.

``create_store`` resolves a template (catalog id or ad-hoc synthesis from
caller customizations), merges it with the caller's store details into a
draft StoreRecord, persists it and writes the store's static files on a
best-effort basis.
"""

import asyncio
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from storesynth.analyzers.design_analyzer import FALLBACK_RECOMMENDATIONS
from storesynth.config.settings import Settings, get_settings
from storesynth.generators.catalog import TemplateCatalog, build_default_catalog
from storesynth.generators.rendering import load_markup, render_stylesheet
from storesynth.generators.store_files import StoreFileGenerator
from storesynth.models.schemas import (
    ComponentType,
    DesignAnalysis,
    GeneratedTemplate,
    StoreColors,
    StoreCustomizations,
    StoreDesign,
    StoreFonts,
    StoreInfo,
    StoreLayout,
    StoreRecord,
    StoreSeo,
    StoreSettings,
    StoreTemplateInfo,
    StoreTheme,
    TemplateCatalogEntry,
    TemplateComponent,
    TemplateCustomizations,
)
from storesynth.services.store_repository import InMemoryStoreRepository, StoreRepository
from storesynth.services.validation_service import ValidationService
from storesynth.utils.errors import PersistenceError, SynthesisError
from storesynth.utils.logger import get_logger

logger = get_logger(__name__)

MODERN_TEMPLATE_ID = "modern"
MINIMAL_TEMPLATE_ID = "minimal"
PRODUCT_GRID_COLUMNS = 4

# Analysis sections an ad-hoc synthesis cannot do without
REQUIRED_ANALYSIS_SECTIONS = ("colors", "typography", "layout")


# =============================================================================
# Pure selection helpers
# =============================================================================

def select_base_template(analysis: DesignAnalysis) -> str:
    """``modern`` when the page has both a header and a footer, else ``minimal``."""
    structure = analysis.layout.structure
    if structure.header and structure.footer:
        return MODERN_TEMPLATE_ID
    return MINIMAL_TEMPLATE_ID


def select_components(analysis: DesignAnalysis) -> list[TemplateComponent]:
    """Ordered components: product grid, navigation, then search and cart always last."""
    components: list[TemplateComponent] = []

    if analysis.products is not None and analysis.products.count > 0:
        components.append(TemplateComponent(
            type=ComponentType.PRODUCT_GRID,
            columns=PRODUCT_GRID_COLUMNS,
            show_price=analysis.products.has_prices,
            show_image=analysis.products.has_images,
        ))

    if analysis.layout.structure.navigation:
        components.append(TemplateComponent(
            type=ComponentType.NAVIGATION,
            style="horizontal",
            position="header",
        ))

    components.append(TemplateComponent(type=ComponentType.SEARCH, position="header", style="inline"))
    components.append(TemplateComponent(type=ComponentType.CART, position="header", style="icon"))
    return components


def stylesheet_for(analysis: DesignAnalysis) -> str:
    return render_stylesheet(
        primary=analysis.colors.primary,
        secondary=analysis.colors.secondary,
        accent=analysis.colors.accent,
        heading_font=analysis.typography.heading.stack,
        body_font=analysis.typography.body.stack,
    )


# =============================================================================
# Synthesizer
# =============================================================================

class TemplateSynthesizer:
    """
    Generates templates from analyses and assembles store records.

    Attributes:
        catalog: Read-only base template catalog
        repository: Store persistence collaborator
        file_generator: Writes store files after creation; ``None`` skips it
    """

    def __init__(
        self,
        catalog: Optional[TemplateCatalog] = None,
        repository: Optional[StoreRepository] = None,
        file_generator: Optional[StoreFileGenerator] = None,
        validator: Optional[ValidationService] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.catalog = catalog if catalog is not None else build_default_catalog()
        self.repository = repository if repository is not None else InMemoryStoreRepository()
        self.file_generator = file_generator
        self.validator = validator or ValidationService()

    def get_templates(self) -> list[TemplateCatalogEntry]:
        return self.catalog.list()

    def synthesize(self, analysis: DesignAnalysis) -> GeneratedTemplate:
        """Build a template artifact from an analysis."""
        template = GeneratedTemplate(
            base_template_id=select_base_template(analysis),
            customizations=TemplateCustomizations(
                colors=analysis.colors,
                typography=analysis.typography,
                layout=analysis.layout,
                components=select_components(analysis),
            ),
            css=stylesheet_for(analysis),
            html=load_markup(),
        )
        logger.info(
            "Template synthesized",
            template_id=template.id,
            base_template=template.base_template_id,
            components=[component.type for component in template.customizations.components],
        )
        return template

    # =========================================================================
    # Store creation
    # =========================================================================

    async def create_store(
        self,
        user_id: str,
        store_info: StoreInfo | dict[str, Any],
        template_id: Optional[str] = None,
        customizations: Optional[dict[str, Any]] = None,
    ) -> StoreRecord:
        """
        Create and persist a draft store.

        Raises:
            InputValidationError: Missing user id or store name
            SynthesisError: No template could be resolved
            PersistenceError: The repository rejected the record
        """
        user_id = self.validator.validate_user_id(user_id)
        store_info = self.validator.validate_store_info(store_info)
        if customizations is not None and not isinstance(customizations, dict):
            raise SynthesisError("Customizations must be an object", details={"template_id": template_id})
        explicit = customizations or {}

        entry = self.catalog.get(template_id)
        if entry is not None:
            record = self._record_from_entry(user_id, store_info, entry, explicit)
            markup = load_markup()
        else:
            if template_id:
                logger.info("Template id not in catalog, synthesizing", template_id=template_id)
            generated = self.synthesize(self._analysis_from(customizations, template_id))
            record = self._record_from_generated(user_id, store_info, generated, explicit)
            markup = generated.html

        try:
            await self.repository.upsert(record)
        except PersistenceError:
            raise
        except Exception as e:
            logger.error("Store persistence failed", store_id=record.id, error=str(e))
            raise PersistenceError(f"Failed to save store: {e}") from e

        await self._generate_files(record, markup)

        logger.info(
            "Store created",
            store_id=record.id,
            user_id=user_id,
            subdomain=record.subdomain,
            template_id=record.template.template_id,
        )
        return record

    def _analysis_from(self, customizations: Optional[dict[str, Any]], template_id: Optional[str]) -> DesignAnalysis:
        if not customizations:
            raise SynthesisError(
                f"Unknown template '{template_id}' and no customizations to synthesize from"
                if template_id else "Either a template id or customizations is required",
                details={"template_id": template_id},
            )
        missing = [
            section for section in REQUIRED_ANALYSIS_SECTIONS
            if not isinstance(customizations.get(section), dict)
        ]
        if missing:
            raise SynthesisError(
                f"Customizations are missing required analysis fields: {', '.join(missing)}",
                details={"template_id": template_id, "missing": missing},
            )
        data = dict(customizations)
        if "aiRecommendations" not in data and "ai_recommendations" not in data:
            data["ai_recommendations"] = FALLBACK_RECOMMENDATIONS.model_dump()
        try:
            return DesignAnalysis.model_validate(data)
        except PydanticValidationError as e:
            raise SynthesisError(
                f"Customizations are not a valid design analysis: {e.error_count()} error(s)",
                details={"errors": e.errors(include_url=False, include_context=False, include_input=False)},
            ) from e

    def _record_from_entry(
        self,
        user_id: str,
        store_info: StoreInfo,
        entry: TemplateCatalogEntry,
        explicit: dict[str, Any],
    ) -> StoreRecord:
        return self._build_record(
            user_id,
            store_info,
            template_id=entry.id,
            layout=entry.layout,
            components=[component.model_copy() for component in entry.default_components],
            colors=entry.default_colors,
            fonts=entry.default_fonts,
            explicit=explicit,
        )

    def _record_from_generated(
        self,
        user_id: str,
        store_info: StoreInfo,
        generated: GeneratedTemplate,
        explicit: dict[str, Any],
    ) -> StoreRecord:
        analysis = generated.customizations
        base = self.catalog.get(generated.base_template_id)
        return self._build_record(
            user_id,
            store_info,
            template_id=generated.id,
            layout=base.layout if base else StoreLayout.SINGLE_COLUMN,
            components=list(analysis.components),
            colors=StoreColors(
                primary=analysis.colors.primary,
                secondary=analysis.colors.secondary,
                accent=analysis.colors.accent,
            ),
            fonts=StoreFonts(
                heading=analysis.typography.heading.family,
                body=analysis.typography.body.family,
            ),
            explicit=explicit,
        )

    def _build_record(
        self,
        user_id: str,
        store_info: StoreInfo,
        template_id: str,
        layout: StoreLayout,
        components: list[TemplateComponent],
        colors: StoreColors,
        fonts: StoreFonts,
        explicit: dict[str, Any],
    ) -> StoreRecord:
        try:
            # Explicit values override template defaults key by key
            if isinstance(explicit.get("colors"), dict):
                overrides = StoreColors.model_validate(explicit["colors"]).model_dump(exclude_unset=True)
                colors = colors.model_copy(update=overrides)
            if isinstance(explicit.get("fonts"), dict):
                overrides = StoreFonts.model_validate(explicit["fonts"]).model_dump(exclude_unset=True)
                fonts = fonts.model_copy(update=overrides)
            theme = StoreTheme(explicit.get("theme") or StoreTheme.LIGHT.value)
        except (PydanticValidationError, ValueError) as e:
            raise SynthesisError(f"Invalid customizations: {e}") from e

        description = store_info.seo_description or f"Welcome to {store_info.name}"
        return StoreRecord(
            user_id=user_id,
            name=store_info.name,
            subdomain=store_info.subdomain,
            template=StoreTemplateInfo(
                source_url=store_info.source_url,
                template_id=template_id,
                analyzed_data=explicit or None,
                customizations=StoreCustomizations(
                    colors=colors,
                    fonts=fonts,
                    logo=store_info.logo,
                    favicon=store_info.favicon,
                ),
            ),
            design=StoreDesign(layout=layout, theme=theme, components=components),
            settings=StoreSettings(
                language=store_info.language or "en",
                currency=store_info.currency or "USD",
                timezone=store_info.timezone or "UTC",
            ),
            seo=StoreSeo(
                title=store_info.seo_title or store_info.name,
                description=self.validator.sanitize_text(description, max_length=300),
                keywords=list(store_info.keywords),
            ),
        )

    async def _generate_files(self, record: StoreRecord, markup: str) -> None:
        if self.file_generator is None:
            return
        try:
            await asyncio.to_thread(self.file_generator.generate, record, markup)
        except Exception as e:
            logger.error("Store file generation failed", store_id=record.id, error=str(e))


__all__ = [
    "TemplateSynthesizer",
    "select_base_template",
    "select_components",
    "stylesheet_for",
]
