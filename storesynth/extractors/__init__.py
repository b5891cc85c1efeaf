"""
Extractors module for the Site-to-Store Synthesis Pipeline.

Components:
    - AcquisitionEngine: Loads a page and captures DOM, styles and screenshots
    - SignalExtractor: Reads colors, fonts, layout flags and products from a snapshot
"""

from storesynth.extractors.acquisition import AcquisitionEngine
from storesynth.extractors.signal_extractor import (
    SignalExtractor,
    ProductStrategy,
    PRODUCT_STRATEGIES,
)

__all__ = [
    "AcquisitionEngine",
    "SignalExtractor",
    "ProductStrategy",
    "PRODUCT_STRATEGIES",
]
