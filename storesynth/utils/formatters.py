"""
Analysis formatting utilities.

Renders an AnalyzeResult as a markdown report and writes the analyze
artifacts (JSON, template markup and stylesheet, screenshots, report) to disk.
"""

import base64
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

from storesynth.analyzers.prompts import RECOMMENDATION_CATEGORIES
from storesynth.config.settings import get_settings
from storesynth.models.schemas import AnalyzeResult, DesignAnalysis

logger = logging.getLogger(__name__)

CATEGORY_TITLES = {
    "improvements": "Design Improvements",
    "ux": "UX Enhancements",
    "mobile": "Mobile Optimization",
    "conversion": "Conversion Optimization",
}


def _cell(value: object) -> str:
    return str(value).replace("|", "-")


def _mark(present: bool) -> str:
    return "✅" if present else "❌"


def format_palette_table(analysis: DesignAnalysis) -> str:
    """
    Markdown table of the analyzed palette.

    | Role | Hex |
    |------|-----|
    | Primary | #1a1a2e |
    """
    rows = [
        f"| Primary | {analysis.colors.primary} |",
        f"| Secondary | {analysis.colors.secondary} |",
        f"| Accent | {analysis.colors.accent} |",
    ]
    return "| Role | Hex |\n|------|-----|\n" + "\n".join(rows)


def format_typography_table(analysis: DesignAnalysis) -> str:
    header = "| Role | Family | Category | Fallback |\n|------|--------|----------|----------|"
    rows = [
        f"| {role} | {_cell(face.family)} | {face.category} | {_cell(face.fallback)} |"
        for role, face in (("Heading", analysis.typography.heading), ("Body", analysis.typography.body))
    ]
    return header + "\n" + "\n".join(rows)


def format_layout_table(analysis: DesignAnalysis) -> str:
    structure = analysis.layout.structure
    dimensions = analysis.layout.dimensions
    rows = [
        f"| Header | {_mark(structure.header)} | {dimensions.header_height}px |",
        f"| Navigation | {_mark(structure.navigation)} | - |",
        f"| Main content | {_mark(structure.main_content)} | - |",
        f"| Footer | {_mark(structure.footer)} | {dimensions.footer_height}px |",
    ]
    return "| Region | Present | Height |\n|--------|---------|--------|\n" + "\n".join(rows)


def format_products_section(analysis: DesignAnalysis) -> str:
    products = analysis.products
    if products is None:
        return "*No product listing detected.*"

    lines = [
        f"- Products found: {products.count}",
        f"- With images: {'Yes' if products.has_images else 'No'}",
        f"- With prices: {'Yes' if products.has_prices else 'No'}",
    ]
    if products.samples:
        lines.append("")
        lines.append("| Product | Price |\n|---------|-------|")
        for sample in products.samples:
            name = sample.name[:60] + "..." if len(sample.name) > 60 else sample.name
            lines.append(f"| {_cell(name) or '-'} | {_cell(sample.price_text) or '-'} |")
    return "\n".join(lines)


def format_recommendations(analysis: DesignAnalysis) -> str:
    recommendations = analysis.ai_recommendations
    sections = []
    for category in RECOMMENDATION_CATEGORIES:
        items = getattr(recommendations, category)
        bullets = "\n".join(f"- {item}" for item in items) or "- None"
        sections.append(f"### {CATEGORY_TITLES[category]}\n\n{bullets}")
    return "\n\n".join(sections)


def generate_analysis_report(result: AnalyzeResult) -> str:
    """Assemble the markdown report for one analyze run."""
    analysis = result.analysis
    template = result.template
    summary = result.scraped_summary
    components = ", ".join(component.type for component in template.customizations.components)

    return f"""# Storefront Analysis: {summary.title or result.source_url}

**Source:** {result.source_url}
**Generated:** {datetime.now(timezone.utc).strftime('%Y-%m-%d %H:%M UTC')}

## Template

- Template ID: `{template.id}`
- Base template: **{template.base_template_id}**
- Components: {components}

## Colors

{format_palette_table(analysis)}

## Typography

{format_typography_table(analysis)}

## Layout

{format_layout_table(analysis)}

## Products

{format_products_section(analysis)}

## Recommendations

{format_recommendations(analysis)}
"""


def _slug(url: str) -> str:
    host = urlparse(url).netloc or url
    return "".join(ch if ch.isalnum() else "_" for ch in host.lower()).strip("_") or "site"


def save_analysis(result: AnalyzeResult, output_dir: Optional[Path] = None) -> Path:
    """
    Write the analyze artifacts into a timestamped directory.

    Files: ``analysis.json``, ``template.html``, ``template.css``,
    ``desktop.png``, ``mobile.png`` and ``report.md``.

    Returns:
        The directory the artifacts were written to
    """
    base_dir = Path(output_dir or get_settings().output_dir)
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    target = base_dir / f"{_slug(result.source_url)}_{timestamp}"
    target.mkdir(parents=True, exist_ok=True)

    (target / "analysis.json").write_text(
        json.dumps(result.to_api_dict(), indent=2, ensure_ascii=False),
        encoding="utf-8",
    )
    (target / "template.html").write_text(result.template.html, encoding="utf-8")
    (target / "template.css").write_text(result.template.css, encoding="utf-8")
    (target / "desktop.png").write_bytes(base64.b64decode(result.preview.desktop))
    (target / "mobile.png").write_bytes(base64.b64decode(result.preview.mobile))
    (target / "report.md").write_text(generate_analysis_report(result), encoding="utf-8")

    logger.info(f"Saved analysis artifacts to {target}")
    return target
