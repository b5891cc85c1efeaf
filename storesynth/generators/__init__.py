"""Generators module: template catalog, synthesis and store files."""

from storesynth.generators.catalog import TemplateCatalog, build_default_catalog
from storesynth.generators.store_files import StoreFileGenerator
from storesynth.generators.template_synthesizer import (
    TemplateSynthesizer,
    select_base_template,
    select_components,
)

__all__ = [
    "TemplateCatalog",
    "build_default_catalog",
    "StoreFileGenerator",
    "TemplateSynthesizer",
    "select_base_template",
    "select_components",
]
