"""Data models module for the Site-to-Store Synthesis Pipeline."""

from storesynth.models.schemas import (
    # Base Models
    BaseModel,

    # Enums
    ColorUsage,
    FontCategory,
    ComponentType,
    RecommendationSource,
    StoreStatus,
    StoreLayout,
    StoreTheme,

    # Acquisition Models
    ComputedStyle,
    DomSnapshot,
    LayoutSignals,
    DesignSignals,
    CandidateProduct,
    Screenshots,
    ScrapedSite,

    # Analysis Models
    ColorSwatch,
    ColorAnalysis,
    FontFace,
    TypographyAnalysis,
    LayoutAnalysis,
    ProductStructure,
    AIRecommendations,
    RecommendationResult,
    DesignAnalysis,

    # Template Models
    TemplateComponent,
    TemplateCustomizations,
    GeneratedTemplate,
    TemplateCatalogEntry,

    # Store Models
    StoreColors,
    StoreFonts,
    StoreInfo,
    StoreRecord,

    # Trigger Responses
    ScrapedSummary,
    Preview,
    AnalyzeResult,
    GenerateStoreResult,
    ImproveDesignResult,
)

__all__ = [
    "BaseModel",
    "ColorUsage",
    "FontCategory",
    "ComponentType",
    "RecommendationSource",
    "StoreStatus",
    "StoreLayout",
    "StoreTheme",
    "ComputedStyle",
    "DomSnapshot",
    "LayoutSignals",
    "DesignSignals",
    "CandidateProduct",
    "Screenshots",
    "ScrapedSite",
    "ColorSwatch",
    "ColorAnalysis",
    "FontFace",
    "TypographyAnalysis",
    "LayoutAnalysis",
    "ProductStructure",
    "AIRecommendations",
    "RecommendationResult",
    "DesignAnalysis",
    "TemplateComponent",
    "TemplateCustomizations",
    "GeneratedTemplate",
    "TemplateCatalogEntry",
    "StoreColors",
    "StoreFonts",
    "StoreInfo",
    "StoreRecord",
    "ScrapedSummary",
    "Preview",
    "AnalyzeResult",
    "GenerateStoreResult",
    "ImproveDesignResult",
]
