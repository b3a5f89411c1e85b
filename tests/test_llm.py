"""Tests for the OpenRouter provider and provider factory."""
from types import SimpleNamespace
from unittest.mock import AsyncMock

import httpx
import openai
import pytest

from prochat.config import GENERIC_FAILURE_TEXT, OPENROUTER_BASE_URL
from prochat.errors import MalformedResponseError, RequestFailedError
from prochat.llm import ChatMessage, LLMProvider, create_llm_provider
from prochat.llm.providers import OpenRouterProvider

URL = f"{OPENROUTER_BASE_URL}/chat/completions"


def _completion(content, model="x-ai/grok-4"):
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
        model=model,
        usage=SimpleNamespace(prompt_tokens=3, completion_tokens=2, total_tokens=5),
    )


def _status_error(status: int, body):
    response = httpx.Response(status, request=httpx.Request("POST", URL))
    return openai.APIStatusError("request failed", response=response, body=body)


@pytest.fixture
def provider():
    """Provider with its HTTP call replaced by a mock."""
    p = OpenRouterProvider(api_key="sk-or-v1-test")
    p._client.chat.completions.create = AsyncMock(return_value=_completion("Hi there"))
    return p


@pytest.fixture
def turns():
    return [
        ChatMessage(role="system", content="be brief"),
        ChatMessage(role="user", content="Hello"),
    ]


class TestOpenRouterProvider:
    """Tests for OpenRouterProvider."""

    def test_client_configuration(self, provider):
        """Test base URL, attribution headers and disabled retries."""
        client = provider._client

        assert str(client.base_url).startswith(OPENROUTER_BASE_URL)
        assert client.default_headers["X-Title"] == "Pro-Chat"
        assert "HTTP-Referer" in client.default_headers
        assert client.max_retries == 0
        assert client.api_key == "sk-or-v1-test"

    @pytest.mark.asyncio
    async def test_successful_completion(self, provider, turns):
        """Test that the first choice becomes the reply."""
        response = await provider.chat_completion(
            turns, model="openai/gpt-4o", temperature=0.7, max_tokens=2000
        )

        assert response.content == "Hi there"
        assert response.usage == {"prompt_tokens": 3, "completion_tokens": 2, "total_tokens": 5}
        provider._client.chat.completions.create.assert_awaited_once_with(
            model="openai/gpt-4o",
            messages=[
                {"role": "system", "content": "be brief"},
                {"role": "user", "content": "Hello"},
            ],
            temperature=0.7,
            max_tokens=2000,
        )

    @pytest.mark.asyncio
    async def test_default_model_used_when_not_given(self, provider, turns):
        """Test fallback to the provider's own model."""
        await provider.chat_completion(turns)

        kwargs = provider._client.chat.completions.create.await_args.kwargs
        assert kwargs["model"] == provider.model == "x-ai/grok-4"

    @pytest.mark.parametrize(
        "body,reason",
        [
            ({"message": "invalid key"}, "invalid key"),
            ({"error": {"message": "rate limited", "code": 429}}, "rate limited"),
            ({"error": {}}, GENERIC_FAILURE_TEXT),
            ("<html>bad gateway</html>", GENERIC_FAILURE_TEXT),
            (None, GENERIC_FAILURE_TEXT),
        ],
    )
    @pytest.mark.asyncio
    async def test_status_error_reason(self, provider, turns, body, reason):
        """Test that error.message is used when present, else a generic reason."""
        provider._client.chat.completions.create.side_effect = _status_error(401, body)

        with pytest.raises(RequestFailedError) as exc_info:
            await provider.chat_completion(turns)

        assert exc_info.value.reason == reason
        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_authentication_error_is_mapped(self, provider, turns):
        """Test the SDK's 401 subclass is handled like any status error."""
        response = httpx.Response(401, request=httpx.Request("POST", URL))
        provider._client.chat.completions.create.side_effect = openai.AuthenticationError(
            "unauthorized", response=response, body={"message": "invalid key"}
        )

        with pytest.raises(RequestFailedError, match="invalid key"):
            await provider.chat_completion(turns)

    @pytest.mark.asyncio
    async def test_connection_error_is_mapped(self, provider, turns):
        """Test that transport failures become RequestFailedError."""
        provider._client.chat.completions.create.side_effect = openai.APIConnectionError(
            request=httpx.Request("POST", URL)
        )

        with pytest.raises(RequestFailedError) as exc_info:
            await provider.chat_completion(turns)

        assert exc_info.value.status_code is None

    @pytest.mark.parametrize(
        "completion",
        [
            SimpleNamespace(choices=[], model="m", usage=None),
            SimpleNamespace(choices=None, model="m", usage=None),
            _completion(None),
        ],
    )
    @pytest.mark.asyncio
    async def test_malformed_success_body(self, provider, turns, completion):
        """Test that a success without reply text is reported as malformed."""
        provider._client.chat.completions.create.return_value = completion

        with pytest.raises(MalformedResponseError):
            await provider.chat_completion(turns)

    @pytest.mark.asyncio
    async def test_close_closes_client(self, provider):
        """Test that close releases the HTTP client."""
        provider._client.close = AsyncMock()

        await provider.close()

        provider._client.close.assert_awaited_once()


class TestProviderFactory:
    """Tests for create_llm_provider."""

    def test_creates_openrouter_provider(self):
        """Test the supported provider type."""
        provider = create_llm_provider("OpenRouter", api_key="k", model="openai/gpt-4o")

        assert isinstance(provider, LLMProvider)
        assert isinstance(provider, OpenRouterProvider)
        assert provider.model == "openai/gpt-4o"

    def test_requires_api_key(self):
        """Test that a missing key is a configuration error."""
        with pytest.raises(TypeError, match="api_key"):
            create_llm_provider("openrouter")

    def test_rejects_unknown_provider(self):
        """Test that unsupported providers are refused."""
        with pytest.raises(ValueError, match="Unsupported provider"):
            create_llm_provider("ollama", api_key="k")
