"""
Store file generation.

Writes the static files for a created store under
``OUTPUT_DIR/stores/<subdomain>/``: the markup skeleton, a stylesheet rendered
from the store's merged colors and fonts, and the store record as JSON.
Saved records can be read back to seed a repository.
"""

from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from storesynth.analyzers.design_analyzer import font_fallback
from storesynth.config.settings import Settings, get_settings
from storesynth.generators.rendering import (
    DEFAULT_BACKGROUND_COLOR,
    DEFAULT_TEXT_COLOR,
    load_markup,
    render_stylesheet,
)
from storesynth.models.schemas import StoreRecord
from storesynth.utils.logger import get_logger

logger = get_logger(__name__)


class StoreFileGenerator:
    """Writes ``index.html``, ``css/store.css`` and ``store.json`` for a store."""

    def __init__(self, settings: Optional[Settings] = None, output_dir: Optional[Path] = None):
        self.settings = settings or get_settings()
        self.output_dir = Path(output_dir or self.settings.output_dir) / "stores"

    def store_dir(self, record: StoreRecord) -> Path:
        return self.output_dir / record.subdomain

    def generate(self, record: StoreRecord, markup: Optional[str] = None) -> Path:
        """
        Write the store's files and return the directory they landed in.

        Args:
            record: Persisted store record
            markup: Template markup; the default skeleton when omitted
        """
        target = self.store_dir(record)
        (target / "css").mkdir(parents=True, exist_ok=True)

        colors = record.template.customizations.colors
        fonts = record.template.customizations.fonts
        css = render_stylesheet(
            primary=colors.primary,
            secondary=colors.secondary,
            accent=colors.accent,
            heading_font=f"{fonts.heading}, {font_fallback(fonts.heading)}",
            body_font=f"{fonts.body}, {font_fallback(fonts.body)}",
            text_color=colors.text or DEFAULT_TEXT_COLOR,
            background_color=colors.background or DEFAULT_BACKGROUND_COLOR,
        )

        (target / "index.html").write_text(markup or load_markup(), encoding="utf-8")
        (target / "css" / "store.css").write_text(css, encoding="utf-8")
        (target / "store.json").write_text(record.model_dump_json(indent=2, by_alias=True), encoding="utf-8")

        logger.info("Store files generated", store_id=record.id, path=str(target))
        return target

    def load_records(self) -> list[StoreRecord]:
        """Read back the ``store.json`` of every store written so far."""
        records = []
        for path in sorted(self.output_dir.glob("*/store.json")):
            try:
                records.append(StoreRecord.from_json(path.read_text(encoding="utf-8")))
            except ValidationError as e:
                logger.warning("Skipping unreadable store file", path=str(path), error=str(e))
        return records
