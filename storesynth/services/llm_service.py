"""
Claude completion service.

Wraps Anthropic's async client for the one call the pipeline makes: a JSON
completion. Transient failures (rate limits, 5xx, connection drops, timeouts)
are retried with exponential backoff; anything else fails immediately.

Example:
    >>> service = ClaudeService(settings)
    >>> data = await service.complete_json(prompt, system=SYSTEM_PROMPT)
"""

from __future__ import annotations

import asyncio
import json
import random
import re
import time
from typing import Any, Optional

import anthropic
from anthropic import APIError, APIStatusError, RateLimitError

from storesynth.config.settings import Settings, get_settings
from storesynth.utils.errors import AIServiceUnavailable
from storesynth.utils.logger import get_logger

logger = get_logger(__name__)

# Assistant prefill that pins the reply to a JSON object
JSON_PREFILL = "{"

MAX_BACKOFF_SECONDS = 30
RATE_LIMIT_BACKOFF_BASE = 5

CODE_BLOCK_PATTERN = re.compile(r"```(?:json)?\s*([\s\S]*?)```")
JSON_BODY_PATTERN = re.compile(r"(\{[\s\S]*\}|\[[\s\S]*\])")


class ClaudeServiceError(AIServiceUnavailable):
    """Base exception for Claude service errors."""
    pass


class MaxRetriesExceededError(ClaudeServiceError):
    """Every attempt ended in a transient failure."""
    pass


class InvalidJSONResponseError(ClaudeServiceError):
    """Raised when a JSON-mode completion does not parse."""

    def __init__(self, message: str, raw_response: str):
        super().__init__(message, details={"raw_response": raw_response[:500]})
        self.raw_response = raw_response


class ClaudeService:
    """
    JSON completions against the Claude Messages API.

    Attributes:
        settings: Application settings
        client: Anthropic API client
        max_retries: Attempts per request before giving up
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        api_key: Optional[str] = None,
        max_retries: Optional[int] = None,
    ):
        """
        Raises:
            ClaudeServiceError: If no API key is available
        """
        self.settings = settings or get_settings()
        if api_key is None and self.settings.anthropic_api_key is not None:
            api_key = self.settings.anthropic_api_key.get_secret_value()
        if not api_key:
            raise ClaudeServiceError("ANTHROPIC_API_KEY is not configured")

        self.max_retries = max_retries if max_retries is not None else self.settings.ai_max_retries
        # The SDK's own retries are off; _call_api owns backoff
        self.client = anthropic.AsyncAnthropic(
            api_key=api_key,
            timeout=self.settings.ai_timeout_seconds,
            max_retries=0,
        )
        logger.info("ClaudeService initialized", model=self.settings.claude_model, max_retries=self.max_retries)

    async def __aenter__(self) -> "ClaudeService":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        await self.client.close()
        logger.info("ClaudeService closed")

    async def complete_json(
        self,
        prompt: str,
        system: str = "",
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> Any:
        """
        Request a JSON answer and return it parsed.

        The assistant turn is prefilled with ``{`` so the model continues a
        JSON object instead of writing prose around it.

        Raises:
            InvalidJSONResponseError: If the reply does not parse as JSON
            ClaudeServiceError: On API failures
        """
        reply = await self._call_api(
            messages=[
                {"role": "user", "content": prompt},
                {"role": "assistant", "content": JSON_PREFILL},
            ],
            system=system,
            temperature=self.settings.recommendation_temperature if temperature is None else temperature,
            max_tokens=max_tokens or self.settings.claude_max_tokens,
        )

        full_text = JSON_PREFILL + reply
        try:
            return json.loads(self._extract_json(full_text))
        except json.JSONDecodeError as e:
            logger.warning("Completion was not valid JSON", error=str(e))
            raise InvalidJSONResponseError(f"Completion was not valid JSON: {e}", full_text)

    async def _call_api(
        self,
        messages: list[dict[str, str]],
        system: str,
        temperature: float,
        max_tokens: int,
    ) -> str:
        """
        Send one Messages request, retrying transient failures.

        Raises:
            ClaudeServiceError: On a non-retryable API error
            MaxRetriesExceededError: When every attempt failed
        """
        attempts = max(1, self.max_retries)
        last_error: Optional[Exception] = None

        for attempt in range(attempts):
            start_time = time.time()
            try:
                response = await self.client.messages.create(
                    model=self.settings.claude_model,
                    max_tokens=max_tokens,
                    temperature=temperature,
                    system=system,
                    messages=messages,
                )
            except (APIError, asyncio.TimeoutError) as e:
                last_error = e
                wait_time = self._retry_delay(e, attempt)
                logger.warning(
                    "Transient API failure, retrying",
                    attempt=attempt + 1,
                    wait_seconds=wait_time,
                    error=str(e) or type(e).__name__,
                )
                await asyncio.sleep(wait_time)
                continue

            logger.info(
                "API call successful",
                attempt=attempt + 1,
                duration_ms=int((time.time() - start_time) * 1000),
                input_tokens=response.usage.input_tokens,
                output_tokens=response.usage.output_tokens,
            )
            return "".join(getattr(block, "text", "") for block in response.content)

        logger.error("Max retries exceeded", attempts=attempts, last_error=str(last_error))
        raise MaxRetriesExceededError(f"Failed after {attempts} attempts: {last_error}")

    def _retry_delay(self, error: Exception, attempt: int) -> float:
        """Backoff before the next attempt; raises for errors not worth retrying."""
        if isinstance(error, RateLimitError):
            return self._calculate_backoff(attempt, base=RATE_LIMIT_BACKOFF_BASE)
        if isinstance(error, APIStatusError) and error.status_code < 500:
            logger.error("API request rejected", status_code=error.status_code, error=str(error))
            if error.status_code == 401:
                raise ClaudeServiceError(f"Authentication failed: {error}") from error
            raise ClaudeServiceError(f"API error: {error}") from error
        return self._calculate_backoff(attempt)

    def _extract_json(self, text: str) -> str:
        """Pull the JSON body out of text that may wrap it in markdown."""
        block = CODE_BLOCK_PATTERN.search(text)
        if block:
            return block.group(1).strip()

        bodies = JSON_BODY_PATTERN.findall(text)
        if bodies:
            return max(bodies, key=len)
        return text.strip()

    def _calculate_backoff(self, attempt: int, base: float = 1.0) -> float:
        """Exponential backoff with up to 10% jitter, capped."""
        backoff = base * (2 ** attempt)
        return min(backoff + random.uniform(0, backoff * 0.1), MAX_BACKOFF_SECONDS)


__all__ = [
    "ClaudeService",
    "ClaudeServiceError",
    "MaxRetriesExceededError",
    "InvalidJSONResponseError",
    "JSON_PREFILL",
]
