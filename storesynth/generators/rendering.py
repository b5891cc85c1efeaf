"""Stylesheet and markup rendering for synthesized templates."""

from functools import lru_cache
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

TEMPLATES_DIR = Path(__file__).parent / "templates"

STYLESHEET_TEMPLATE = "store.css.j2"
MARKUP_TEMPLATE = "store.html"

DEFAULT_TEXT_COLOR = "#333"
DEFAULT_BACKGROUND_COLOR = "#fff"


@lru_cache
def get_environment() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=select_autoescape(["html", "xml"]),
        keep_trailing_newline=True,
    )


def render_stylesheet(
    primary: str,
    secondary: str,
    accent: str,
    heading_font: str,
    body_font: str,
    text_color: str = DEFAULT_TEXT_COLOR,
    background_color: str = DEFAULT_BACKGROUND_COLOR,
) -> str:
    """
    Render the fixed stylesheet skeleton.

    Only the custom property values vary; every rule block is fixed.
    """
    template = get_environment().get_template(STYLESHEET_TEMPLATE)
    return template.render(
        primary=primary,
        secondary=secondary,
        accent=accent,
        heading_font=heading_font,
        body_font=body_font,
        text_color=text_color,
        background_color=background_color,
    )


@lru_cache
def load_markup() -> str:
    """Return the markup skeleton verbatim, ``{{token}}`` placeholders included."""
    env = get_environment()
    source, _, _ = env.loader.get_source(env, MARKUP_TEMPLATE)
    return source
