from collections.abc import Mapping
from typing import Any

import openai
from openai import AsyncOpenAI

from ...config import (
    APP_REFERER,
    APP_TITLE,
    DEFAULT_MAX_TOKENS,
    DEFAULT_MODEL,
    DEFAULT_TEMPERATURE,
    GENERIC_FAILURE_TEXT,
    OPENROUTER_BASE_URL,
)
from ...errors import MalformedResponseError, RequestFailedError
from ..base import LLMProvider
from ..models import ChatMessage, LLMResponse


def _error_reason(body: object) -> str:
    """Pull ``error.message`` out of a non-success response body.

    The SDK hands over the ``error`` object when the body has one, and
    the whole body otherwise, so both shapes are accepted.
    """
    if isinstance(body, Mapping):
        error = body.get("error", body)
        if isinstance(error, Mapping):
            message = error.get("message")
            if isinstance(message, str) and message:
                return message
    return GENERIC_FAILURE_TEXT


class OpenRouterProvider(LLMProvider):
    """OpenRouter chat-completions provider.

    Hidden design decisions:
    - OpenAI-compatible client pointed at the OpenRouter base URL
    - Attribution headers (HTTP-Referer, X-Title)
    - Mapping SDK exceptions onto RequestFailedError / MalformedResponseError
    - Automatic retries are disabled; a failed turn is final
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        base_url: str = OPENROUTER_BASE_URL,
        **client_kwargs: Any
    ):
        """Initialize OpenRouter provider.

        Args:
            api_key: OpenRouter API key, sent as a bearer credential
            model: Default model identifier (e.g. 'x-ai/grok-4')
            base_url: API base URL
            **client_kwargs: Additional kwargs for AsyncOpenAI client
        """
        self._model = model
        client_kwargs.setdefault("max_retries", 0)
        client_kwargs.setdefault(
            "default_headers",
            {"HTTP-Referer": APP_REFERER, "X-Title": APP_TITLE},
        )
        self._client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            **client_kwargs
        )

    @property
    def model(self) -> str:
        """Get the default model name."""
        return self._model

    async def chat_completion(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        temperature: float = DEFAULT_TEMPERATURE,
        max_tokens: int | None = DEFAULT_MAX_TOKENS,
        **kwargs: Any
    ) -> LLMResponse:
        """Generate a chat completion through OpenRouter.

        Args:
            messages: Ordered turns, system turn first
            model: Model to use (overrides default)
            temperature: Sampling temperature
            max_tokens: Maximum tokens to generate
            **kwargs: Additional request parameters

        Returns:
            LLMResponse with the reply text

        Raises:
            RequestFailedError: Network failure or non-success status
            MalformedResponseError: Success status without choices[0].message.content
        """
        model_to_use = model or self._model

        request_params: dict[str, Any] = {
            "model": model_to_use,
            "messages": [{"role": msg.role, "content": msg.content} for msg in messages],
            "temperature": temperature,
            **kwargs
        }
        if max_tokens is not None:
            request_params["max_tokens"] = max_tokens

        try:
            completion = await self._client.chat.completions.create(**request_params)
        except openai.APIStatusError as e:
            raise RequestFailedError(_error_reason(e.body), status_code=e.status_code) from e
        except openai.APIResponseValidationError as e:
            raise MalformedResponseError(status_code=e.status_code) from e
        except openai.APIConnectionError as e:
            raise RequestFailedError(str(e) or GENERIC_FAILURE_TEXT) from e

        try:
            content = completion.choices[0].message.content
        except (AttributeError, IndexError, TypeError) as e:
            raise MalformedResponseError() from e
        if not isinstance(content, str):
            raise MalformedResponseError()

        usage = None
        if getattr(completion, "usage", None):
            usage = {
                "prompt_tokens": completion.usage.prompt_tokens,
                "completion_tokens": completion.usage.completion_tokens,
                "total_tokens": completion.usage.total_tokens
            }

        return LLMResponse(
            content=content,
            model=getattr(completion, "model", None) or model_to_use,
            usage=usage
        )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.close()
