"""
Services package for the Site-to-Store Synthesis Pipeline.

Services:
    - ClaudeService: JSON completions from Anthropic Claude
    - BrowserPool: Shared headless Chromium with scoped page release
    - StoreRepository: Store persistence collaborator
    - ValidationService: Input validation
"""

from storesynth.services.browser_service import (
    BrowserPool,
    Viewport,
    DESKTOP_VIEWPORT,
    MOBILE_VIEWPORT,
)
from storesynth.services.llm_service import (
    ClaudeService,
    ClaudeServiceError,
    InvalidJSONResponseError,
    MaxRetriesExceededError,
)
from storesynth.services.store_repository import InMemoryStoreRepository, StoreRepository
from storesynth.services.validation_service import ValidationService

__all__ = [
    # Browser
    "BrowserPool",
    "Viewport",
    "DESKTOP_VIEWPORT",
    "MOBILE_VIEWPORT",
    # LLM Service
    "ClaudeService",
    "ClaudeServiceError",
    "InvalidJSONResponseError",
    "MaxRetriesExceededError",
    # Persistence
    "StoreRepository",
    "InMemoryStoreRepository",
    # Validation
    "ValidationService",
]
