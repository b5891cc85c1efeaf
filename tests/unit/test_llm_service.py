import asyncio
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from anthropic import APIStatusError, RateLimitError

from storesynth.services.llm_service import (
    JSON_PREFILL,
    ClaudeService,
    ClaudeServiceError,
    InvalidJSONResponseError,
    MaxRetriesExceededError,
)


def _response(text: str, input_tokens: int = 50, output_tokens: int = 30):
    response = MagicMock()
    response.content = [MagicMock(text=text)]
    response.usage.input_tokens = input_tokens
    response.usage.output_tokens = output_tokens
    return response


def _status_error(cls, status_code: int):
    return cls(f"HTTP {status_code}", response=MagicMock(status_code=status_code), body=None)


def test_llm_service_init(settings):
    service = ClaudeService(settings=settings)
    assert service.settings == settings
    assert service.client is not None
    assert service.max_retries == settings.ai_max_retries


def test_llm_service_requires_api_key(settings_without_ai):
    with pytest.raises(ClaudeServiceError):
        ClaudeService(settings=settings_without_ai)


@pytest.mark.asyncio
async def test_complete_json_prefills_object(settings):
    service = ClaudeService(settings=settings)

    with patch.object(service.client.messages, "create", new_callable=AsyncMock) as mock_create:
        mock_create.return_value = _response('"ok": true, "items": [1, 2]}')

        data = await service.complete_json("Return JSON", system="Be terse")

    assert data == {"ok": True, "items": [1, 2]}
    kwargs = mock_create.call_args.kwargs
    assert kwargs["system"] == "Be terse"
    assert kwargs["model"] == settings.claude_model
    assert kwargs["max_tokens"] == settings.claude_max_tokens
    assert kwargs["temperature"] == settings.recommendation_temperature
    assert kwargs["messages"][-1] == {"role": "assistant", "content": JSON_PREFILL}


@pytest.mark.asyncio
async def test_complete_json_extracts_from_code_block(settings):
    service = ClaudeService(settings=settings)

    with patch.object(service.client.messages, "create", new_callable=AsyncMock) as mock_create:
        mock_create.return_value = _response('}\n```json\n{"ux": ["a"]}\n```')

        data = await service.complete_json("Return JSON")

    assert data == {"ux": ["a"]}


@pytest.mark.asyncio
async def test_complete_json_invalid_json(settings):
    service = ClaudeService(settings=settings)

    with patch.object(service.client.messages, "create", new_callable=AsyncMock) as mock_create:
        mock_create.return_value = _response("this is not json at all")

        with pytest.raises(InvalidJSONResponseError) as exc_info:
            await service.complete_json("Return JSON")

    assert exc_info.value.raw_response.startswith("{this is not json")


@pytest.mark.asyncio
async def test_complete_json_retries_transient_failures(settings):
    service = ClaudeService(settings=settings, max_retries=3)

    with patch.object(service.client.messages, "create", new_callable=AsyncMock) as mock_create, \
            patch.object(service, "_calculate_backoff", return_value=0):
        mock_create.side_effect = [
            asyncio.TimeoutError(),
            _status_error(RateLimitError, 429),
            _response('"recovered": true}'),
        ]

        data = await service.complete_json("Return JSON")

    assert data == {"recovered": True}
    assert mock_create.await_count == 3


@pytest.mark.asyncio
async def test_complete_json_max_retries_exceeded(settings):
    service = ClaudeService(settings=settings, max_retries=2)

    with patch.object(service.client.messages, "create", new_callable=AsyncMock) as mock_create, \
            patch.object(service, "_calculate_backoff", return_value=0):
        mock_create.side_effect = _status_error(APIStatusError, 503)

        with pytest.raises(MaxRetriesExceededError, match="Failed after 2 attempts"):
            await service.complete_json("Return JSON")

    assert mock_create.await_count == 2


@pytest.mark.asyncio
@pytest.mark.parametrize("status_code,message", [
    (401, "Authentication failed"),
    (400, "API error"),
])
async def test_complete_json_client_errors_are_not_retried(settings, status_code, message):
    service = ClaudeService(settings=settings, max_retries=3)

    with patch.object(service.client.messages, "create", new_callable=AsyncMock) as mock_create:
        mock_create.side_effect = _status_error(APIStatusError, status_code)

        with pytest.raises(ClaudeServiceError, match=message):
            await service.complete_json("Return JSON")

    assert mock_create.await_count == 1


def test_backoff_is_capped(settings):
    service = ClaudeService(settings=settings)
    assert service._calculate_backoff(10) == 30
    assert 1.0 <= service._calculate_backoff(0) <= 1.1
