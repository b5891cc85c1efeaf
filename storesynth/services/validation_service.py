"""
Validation service for caller input.

Validates target URLs, store details and caller identity before any pipeline
stage runs.
"""

import re
from typing import Any
from urllib.parse import urlparse

from pydantic import ValidationError as PydanticValidationError

from storesynth.models.schemas import StoreInfo
from storesynth.utils.errors import InputValidationError
from storesynth.utils.logger import get_logger

logger = get_logger(__name__)


class ValidationService:
    """Service for validating pipeline input."""

    SCHEME_PATTERN = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.\-]*://")
    HOST_PATTERN = re.compile(r"^[a-z0-9]([a-z0-9\-]*[a-z0-9])?(\.[a-z0-9]([a-z0-9\-]*[a-z0-9])?)*(:\d+)?$", re.IGNORECASE)
    SUBDOMAIN_STRIP_PATTERN = re.compile(r"[^a-z0-9]")

    def validate_url(self, url: str) -> str:
        """
        Validate a target URL, prepending ``https://`` to bare domains.

        Raises:
            InputValidationError: With code ``INVALID_URL``
        """
        candidate = (url or "").strip()
        if not candidate:
            raise InputValidationError("URL is required", code="INVALID_URL")

        if not self.SCHEME_PATTERN.match(candidate):
            candidate = f"https://{candidate}"

        parsed = urlparse(candidate)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            logger.warning("Rejected URL", url=url)
            raise InputValidationError(
                f"Invalid URL: {url}",
                code="INVALID_URL",
                details={"url": url},
            )
        if not self.HOST_PATTERN.match(parsed.netloc.rsplit("@", 1)[-1]):
            logger.warning("Rejected URL host", url=url, host=parsed.netloc)
            raise InputValidationError(
                f"Invalid URL host: {parsed.netloc}",
                code="INVALID_URL",
                details={"url": url},
            )
        return candidate

    def validate_store_info(self, data: dict[str, Any] | StoreInfo) -> StoreInfo:
        """
        Parse store details and resolve the subdomain.

        Raises:
            InputValidationError: If the name is missing or yields no subdomain
        """
        if isinstance(data, StoreInfo):
            store_info = data
        else:
            try:
                store_info = StoreInfo.model_validate(data)
            except PydanticValidationError as e:
                logger.error("Store info validation failed", error=str(e))
                raise InputValidationError(
                    f"Invalid store info: {e}",
                    code="INVALID_STORE_INFO",
                    details={"errors": e.errors(include_url=False, include_context=False)},
                )

        subdomain = self.derive_subdomain(store_info.subdomain or store_info.name)
        if not subdomain:
            raise InputValidationError(
                f"Store name '{store_info.name}' does not yield a valid subdomain",
                code="INVALID_SUBDOMAIN",
                details={"name": store_info.name},
            )
        return store_info.model_copy(update={"subdomain": subdomain})

    def derive_subdomain(self, name: str) -> str:
        """Lowercase the name and strip everything but ``[a-z0-9]``."""
        return self.SUBDOMAIN_STRIP_PATTERN.sub("", (name or "").lower())

    def validate_user_id(self, user_id: str) -> str:
        if not user_id or not str(user_id).strip():
            raise InputValidationError("User id is required", code="MISSING_USER_ID")
        return str(user_id).strip()

    def sanitize_text(self, text: str, max_length: int = 1000) -> str:
        """Strip tags, collapse whitespace and truncate."""
        sanitized = re.sub(r"<[^>]+>", "", text)
        sanitized = re.sub(r"\s+", " ", sanitized).strip()
        return sanitized[:max_length]
