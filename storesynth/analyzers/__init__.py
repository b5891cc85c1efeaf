"""Analyzers module: design signal classification and AI recommendations."""

from storesynth.analyzers.design_analyzer import (
    DesignAnalyzer,
    FALLBACK_RECOMMENDATIONS,
    categorize_color,
    categorize_font,
    font_fallback,
    get_recommendations,
    normalize_color,
)
from storesynth.analyzers.prompts import format_recommendation_prompt

__all__ = [
    "DesignAnalyzer",
    "FALLBACK_RECOMMENDATIONS",
    "categorize_color",
    "categorize_font",
    "font_fallback",
    "get_recommendations",
    "normalize_color",
    "format_recommendation_prompt",
]
