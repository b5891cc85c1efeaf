"""
Design recommendation prompts.

The recommendation call sends the page URL, its leading colors and fonts and
whether products were found, and asks for a JSON object with exactly four
string-list categories. The reply is prefilled with ``{`` by ClaudeService.
"""

import json
from dataclasses import dataclass


@dataclass
class RecommendationPromptConfig:
    """Limits applied when summarizing signals for the prompt."""
    max_colors: int = 5
    max_fonts: int = 3


DEFAULT_RECOMMENDATION_CONFIG = RecommendationPromptConfig()

RECOMMENDATION_CATEGORIES = ("improvements", "ux", "mobile", "conversion")


# =============================================================================
# System Prompt
# =============================================================================

DESIGN_ADVISOR_SYSTEM = """You are a senior e-commerce UX and visual design consultant. You review storefronts and give short, concrete recommendations a designer can act on when rebuilding the store.

Rules:
- Base every recommendation on the signals provided.
- Each recommendation is one short imperative phrase.
- Respond with a single JSON object and nothing else."""


# =============================================================================
# User Prompt
# =============================================================================

DESIGN_RECOMMENDATION_USER = """<task>
Analyze this e-commerce website and provide design recommendations for its redesigned storefront.
</task>

<site_signals>
- URL: {url}
- Colors: {colors}
- Fonts: {fonts}
- Has Products: {has_products}
</site_signals>

<output_format>
Return a JSON object with exactly these keys, each an array of 3-5 strings:
{{
  "improvements": ["visual design improvements"],
  "ux": ["user experience enhancements"],
  "mobile": ["mobile optimization tips"],
  "conversion": ["conversion optimization suggestions"]
}}
</output_format>"""


def format_recommendation_prompt(
    url: str,
    colors: list[str],
    fonts: list[str],
    has_products: bool,
    config: RecommendationPromptConfig = DEFAULT_RECOMMENDATION_CONFIG,
) -> tuple[str, str]:
    """Format the recommendation prompt; returns ``(system, user)``."""
    user_prompt = DESIGN_RECOMMENDATION_USER.format(
        url=url,
        colors=json.dumps(colors[: config.max_colors]),
        fonts=json.dumps(fonts[: config.max_fonts]),
        has_products="true" if has_products else "false",
    )
    return DESIGN_ADVISOR_SYSTEM, user_prompt


__all__ = [
    "RecommendationPromptConfig",
    "DEFAULT_RECOMMENDATION_CONFIG",
    "RECOMMENDATION_CATEGORIES",
    "DESIGN_ADVISOR_SYSTEM",
    "DESIGN_RECOMMENDATION_USER",
    "format_recommendation_prompt",
]
