"""
Pydantic models and schemas for the Site-to-Store Synthesis Pipeline.

This module defines every data structure that flows through the pipeline,
ensuring type safety, validation and serialization consistency.

Models:
    - DomSnapshot / ScrapedSite: Acquisition output
    - DesignSignals / CandidateProduct: Raw signals read from the page
    - DesignAnalysis: Classified signals plus AI recommendations
    - GeneratedTemplate / TemplateCatalogEntry: Synthesis artifacts
    - StoreInfo / StoreRecord: Store creation input and persisted record
    - AnalyzeResult / GenerateStoreResult / ImproveDesignResult: External trigger responses

Python attributes are snake_case; ``to_api_dict()`` emits the camelCase
aliases used by external callers.
"""

from __future__ import annotations

import base64
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional, Self
from uuid import uuid4

from pydantic import (
    BaseModel as PydanticBaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
)
from pydantic.alias_generators import to_camel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# Base Configuration
# =============================================================================

class BaseModel(PydanticBaseModel):
    """Base model with common configuration for all schemas."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
        ser_json_timedelta="iso8601",
        ser_json_bytes="base64",
    )

    def to_json(self, **kwargs) -> str:
        """Serialize model to JSON string."""
        return self.model_dump_json(indent=2, **kwargs)

    def to_dict(self, **kwargs) -> dict[str, Any]:
        """Serialize model to dictionary."""
        return self.model_dump(**kwargs)

    def to_api_dict(self) -> dict[str, Any]:
        """Serialize to the JSON-compatible camelCase shape used by callers."""
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_json(cls, json_str: str) -> Self:
        """Deserialize model from JSON string."""
        return cls.model_validate_json(json_str)


def _serialize_timestamp(value: Optional[datetime]) -> Optional[str]:
    if not value:
        return None
    # Naive datetimes are treated as UTC
    if value.tzinfo is None:
        return value.isoformat() + "Z"
    return value.isoformat()


# =============================================================================
# Enums
# =============================================================================

class ColorUsage(str, Enum):
    """Informational color role derived from perceived brightness."""
    BACKGROUND = "background"
    TEXT = "text"
    ACCENT = "accent"


class FontCategory(str, Enum):
    """Generic font family category."""
    SERIF = "serif"
    SANS_SERIF = "sans-serif"
    MONOSPACE = "monospace"


class ComponentType(str, Enum):
    """Storefront components a template can carry."""
    PRODUCT_GRID = "product-grid"
    NAVIGATION = "navigation"
    SEARCH = "search"
    CART = "cart"


class RecommendationSource(str, Enum):
    """Producer of a recommendation set."""
    AI = "ai"
    FALLBACK = "fallback"


class StoreStatus(str, Enum):
    """Store lifecycle status. The pipeline only ever creates DRAFT records."""
    DRAFT = "draft"
    PUBLISHED = "published"
    MAINTENANCE = "maintenance"
    SUSPENDED = "suspended"


class StoreLayout(str, Enum):
    SINGLE_COLUMN = "single-column"
    TWO_COLUMN = "two-column"
    GRID = "grid"
    MASONRY = "masonry"


class StoreTheme(str, Enum):
    LIGHT = "light"
    DARK = "dark"
    AUTO = "auto"


class StorePlan(str, Enum):
    FREE = "free"
    BASIC = "basic"
    PRO = "pro"
    ENTERPRISE = "enterprise"


# =============================================================================
# Acquisition Models
# =============================================================================

class ComputedStyle(BaseModel):
    """Computed style triple of one rendered element."""

    color: str = ""
    background_color: str = ""
    font_family: str = ""


class DomSnapshot(BaseModel):
    """
    Rendered DOM state handed from the browser to the signal extractor.

    ``computed_styles`` holds the distinct (color, background, font) triples
    in document traversal order; the heights are measured by the browser.
    """

    url: str
    html: str = ""
    computed_styles: list[ComputedStyle] = Field(default_factory=list)
    header_height: int = 0
    footer_height: int = 0


class LayoutSignals(BaseModel):
    """Structural presence flags read from the page."""

    has_header: bool = False
    has_nav: bool = False
    has_main_content: bool = False
    has_footer: bool = False
    header_height: int = 0
    footer_height: int = 0


class DesignSignals(BaseModel):
    """Raw design signals in DOM traversal order."""

    colors: list[str] = Field(default_factory=list)
    fonts: list[str] = Field(default_factory=list)
    layout: LayoutSignals = Field(default_factory=LayoutSignals)
    page_title: str = ""
    meta_description: Optional[str] = None
    meta_keywords: Optional[str] = None


class CandidateProduct(BaseModel):
    """Best-effort product record read from a listing element."""

    name: str = ""
    price_text: str = ""
    image_url: Optional[str] = None
    link_url: Optional[str] = None


class Screenshots(BaseModel):
    """Full-page PNG captures."""

    desktop: bytes
    mobile: bytes

    def to_base64(self) -> dict[str, str]:
        return {
            "desktop": base64.b64encode(self.desktop).decode("ascii"),
            "mobile": base64.b64encode(self.mobile).decode("ascii"),
        }


class ScrapedSite(BaseModel):
    """
    Result of one acquisition call.

    Immutable and owned by the pipeline invocation that produced it; only
    derived fields ever reach persistence.
    """

    model_config = ConfigDict(frozen=True)

    url: str
    raw_html_prefix: str = ""
    design_signals: DesignSignals = Field(default_factory=DesignSignals)
    candidate_products: list[CandidateProduct] = Field(default_factory=list)
    screenshots: Screenshots
    captured_at: datetime = Field(default_factory=utcnow)

    @field_serializer("captured_at")
    def serialize_captured_at(self, value: datetime) -> Optional[str]:
        return _serialize_timestamp(value)


# =============================================================================
# Analysis Models
# =============================================================================

class ColorSwatch(BaseModel):
    original: str
    hex: str
    usage: ColorUsage


class ColorAnalysis(BaseModel):
    primary: str = "#000000"
    secondary: str = "#666666"
    accent: str = "#0066cc"
    all: list[ColorSwatch] = Field(default_factory=list)


class FontFace(BaseModel):
    family: str = "Arial"
    category: FontCategory = FontCategory.SANS_SERIF
    fallback: str = "Arial, sans-serif"

    @property
    def stack(self) -> str:
        """CSS font-family value: the family followed by its fallback stack."""
        return f"{self.family}, {self.fallback}"


class TypographyAnalysis(BaseModel):
    heading: FontFace = Field(default_factory=FontFace)
    body: FontFace = Field(default_factory=FontFace)
    all: list[FontFace] = Field(default_factory=list)


class LayoutStructure(BaseModel):
    header: bool = False
    navigation: bool = False
    main_content: bool = False
    footer: bool = False


class LayoutDimensions(BaseModel):
    header_height: int = 0
    footer_height: int = 0


class Breakpoints(BaseModel):
    mobile: int = 768
    tablet: int = 1024
    desktop: int = 1440


class LayoutRecommendations(BaseModel):
    mobile_first: bool = True
    responsive_grid: str = "flexbox"
    breakpoints: Breakpoints = Field(default_factory=Breakpoints)


class LayoutAnalysis(BaseModel):
    structure: LayoutStructure = Field(default_factory=LayoutStructure)
    dimensions: LayoutDimensions = Field(default_factory=LayoutDimensions)
    recommendations: LayoutRecommendations = Field(default_factory=LayoutRecommendations)


class ProductFieldMap(BaseModel):
    """Which CandidateProduct field carries each product attribute."""

    name_field: str = "name"
    price_field: str = "price_text"
    image_field: str = "image_url"
    link_field: str = "link_url"


class ProductStructure(BaseModel):
    count: int
    has_images: bool
    has_prices: bool
    structure: ProductFieldMap = Field(default_factory=ProductFieldMap)
    samples: list[CandidateProduct] = Field(default_factory=list, max_length=3)


class AIRecommendations(BaseModel):
    """Four-category recommendation set."""

    model_config = ConfigDict(extra="ignore")

    improvements: list[str]
    ux: list[str]
    mobile: list[str]
    conversion: list[str]


class RecommendationResult(BaseModel):
    """Tagged outcome of the recommendation call: either AI-produced or the fallback."""

    source: RecommendationSource
    recommendations: AIRecommendations
    error: Optional[str] = None

    @property
    def is_fallback(self) -> bool:
        return self.source == RecommendationSource.FALLBACK.value


class DesignAnalysis(BaseModel):
    """
    Classified design signals.

    Deterministic for a given ScrapedSite except for ``ai_recommendations``.
    """

    colors: ColorAnalysis = Field(default_factory=ColorAnalysis)
    typography: TypographyAnalysis = Field(default_factory=TypographyAnalysis)
    layout: LayoutAnalysis = Field(default_factory=LayoutAnalysis)
    products: Optional[ProductStructure] = None
    ai_recommendations: AIRecommendations


# =============================================================================
# Template Models
# =============================================================================

class TemplateComponent(BaseModel):
    """One storefront component; order in a component list is render order."""

    type: ComponentType
    position: Optional[str] = None
    style: Optional[str] = None
    columns: Optional[int] = None
    show_price: Optional[bool] = None
    show_image: Optional[bool] = None


class TemplateCustomizations(BaseModel):
    colors: ColorAnalysis
    typography: TypographyAnalysis
    layout: LayoutAnalysis
    components: list[TemplateComponent] = Field(default_factory=list)


class GeneratedTemplate(BaseModel):
    """Synthesized template artifact; ``html`` keeps its ``{{token}}`` placeholders."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: f"custom-{uuid4().hex[:12]}")
    name: str = "Custom Generated Template"
    base_template_id: str
    customizations: TemplateCustomizations
    css: str
    html: str


class StoreColors(BaseModel):
    model_config = ConfigDict(extra="ignore")

    primary: str = "#000000"
    secondary: str = "#666666"
    accent: str = "#0066cc"
    background: Optional[str] = None
    text: Optional[str] = None


class StoreFonts(BaseModel):
    model_config = ConfigDict(extra="ignore")

    heading: str = "Arial"
    body: str = "Arial"


class TemplateHeader(BaseModel):
    type: str
    components: list[str] = Field(default_factory=list)


class TemplateHero(BaseModel):
    type: str
    height: str


class TemplateFooter(BaseModel):
    columns: int
    components: list[str] = Field(default_factory=list)


class TemplateStructure(BaseModel):
    header: TemplateHeader
    hero: Optional[TemplateHero] = None
    sections: list[str] = Field(default_factory=list)
    footer: TemplateFooter


class TemplateCatalogEntry(BaseModel):
    """Read-only base template definition."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    preview: str
    features: list[str] = Field(default_factory=list)
    structure: TemplateStructure
    layout: StoreLayout = StoreLayout.SINGLE_COLUMN
    default_colors: StoreColors = Field(default_factory=StoreColors)
    default_fonts: StoreFonts = Field(default_factory=StoreFonts)
    default_components: list[TemplateComponent] = Field(default_factory=list)


# =============================================================================
# Store Models
# =============================================================================

class StoreInfo(BaseModel):
    """Caller-supplied store details for store creation."""

    name: str = Field(..., min_length=1, max_length=200)
    subdomain: Optional[str] = None
    source_url: Optional[str] = None
    logo: Optional[str] = None
    favicon: Optional[str] = None
    language: Optional[str] = None
    currency: Optional[str] = None
    timezone: Optional[str] = None
    seo_title: Optional[str] = None
    seo_description: Optional[str] = None
    keywords: list[str] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Store name cannot be blank")
        return v


class StoreCustomizations(BaseModel):
    colors: StoreColors = Field(default_factory=StoreColors)
    fonts: StoreFonts = Field(default_factory=StoreFonts)
    logo: Optional[str] = None
    favicon: Optional[str] = None


class StoreTemplateInfo(BaseModel):
    source_url: Optional[str] = None
    template_id: str
    analyzed_data: Optional[dict[str, Any]] = None
    customizations: StoreCustomizations = Field(default_factory=StoreCustomizations)


class StoreDesign(BaseModel):
    layout: StoreLayout = StoreLayout.SINGLE_COLUMN
    theme: StoreTheme = StoreTheme.LIGHT
    components: list[TemplateComponent] = Field(default_factory=list)


class StoreSettings(BaseModel):
    language: str = "en"
    currency: str = "USD"
    timezone: str = "UTC"


class StoreSeo(BaseModel):
    title: str
    description: str
    keywords: list[str] = Field(default_factory=list)


class StoreRecord(BaseModel):
    """Store record handed to the persistence collaborator."""

    id: str = Field(default_factory=lambda: uuid4().hex)
    user_id: str
    name: str
    domain: Optional[str] = None
    subdomain: str
    template: StoreTemplateInfo
    design: StoreDesign = Field(default_factory=StoreDesign)
    settings: StoreSettings = Field(default_factory=StoreSettings)
    seo: StoreSeo
    status: StoreStatus = StoreStatus.DRAFT
    plan: StorePlan = StorePlan.FREE
    created_at: datetime = Field(default_factory=utcnow)

    @field_serializer("created_at")
    def serialize_created_at(self, value: datetime) -> Optional[str]:
        return _serialize_timestamp(value)

    def public_url(self, host_suffix: str) -> str:
        """Custom domain when set, otherwise the subdomain under ``host_suffix``."""
        if self.domain:
            return f"https://{self.domain}"
        return f"https://{self.subdomain}.{host_suffix}"


# =============================================================================
# Trigger Responses
# =============================================================================

class ScrapedSummary(BaseModel):
    title: str = ""
    colors: list[str] = Field(default_factory=list)
    fonts: list[str] = Field(default_factory=list)
    products_found: int = 0


class Preview(BaseModel):
    """Base64-encoded screenshot bytes."""

    desktop: str
    mobile: str


class AnalyzeResult(BaseModel):
    source_url: str
    scraped_summary: ScrapedSummary
    analysis: DesignAnalysis
    template: GeneratedTemplate
    preview: Preview


class GenerateStoreResult(BaseModel):
    store_id: str
    url: str
    status: StoreStatus


class ImproveDesignResult(BaseModel):
    """Recommendations for an existing store's stored design."""

    store_id: str
    recommendations: AIRecommendations
    source: RecommendationSource
