"""
OpenAI-compatible chat-completion client

Shared implementation for providers that speak the OpenAI chat completions API
(OpenRouter, LMStudio).
"""

from __future__ import annotations

import time
from typing import Sequence

import openai
from openai import OpenAI

from rubric_gauge.domain.constants import DEFAULT_MODEL_TEMPERATURE
from rubric_gauge.domain.errors import EmptyResponseError
from rubric_gauge.domain.value_objects import Message, ModelResponse, TokenUsage
from rubric_gauge.infrastructure.model_clients.base import ModelClient, RetryMixin


class OpenAICompatibleClient(RetryMixin, ModelClient):
    """Chat client for OpenAI-compatible endpoints"""

    def __init__(
        self,
        model_name: str,
        api_model_name: str,
        base_url: str,
        api_key: str,
        timeout_seconds: float = 120,
        max_retries: int = 3,
        retry_delay_seconds: float = 1.0,
        default_headers: dict[str, str] | None = None,
    ):
        """
        Args:
            model_name: Model name as configured by the user
            api_model_name: Model name sent to the API
            base_url: API endpoint
            api_key: API key
            timeout_seconds: Request timeout in seconds
            max_retries: Maximum number of attempts (default: 3)
            retry_delay_seconds: Base delay for exponential backoff
            default_headers: Extra headers sent with every request
        """
        self.model_name = model_name
        self.api_model_name = api_model_name
        self.base_url = base_url
        self.max_retries = max_retries
        self.retry_delay_seconds = retry_delay_seconds
        self.client = OpenAI(
            base_url=base_url,
            api_key=api_key,
            timeout=timeout_seconds,
            max_retries=0,
            default_headers=default_headers,
        )

    def _extra_body(self, reasoning_effort: str | None) -> dict | None:
        """Provider-specific request fields"""
        return None

    def chat(
        self,
        messages: Sequence[Message],
        *,
        temperature: float | None = None,
        reasoning_effort: str | None = None,
    ) -> ModelResponse:
        """
        Send a conversation and retrieve the assistant reply

        Args:
            messages: Conversation (system messages included as-is)
            temperature: Sampling temperature (default: 1.0)
            reasoning_effort: Reasoning effort for reasoning models

        Returns:
            ModelResponse: The model's response

        Raises:
            EmptyResponseError: If the API returned an error body or no content
            openai.APIError: If the maximum number of retries is exceeded
        """
        def _call():
            start_time = time.time()
            response = self.client.chat.completions.create(
                model=self.api_model_name,
                messages=[m.to_dict() for m in messages],
                temperature=DEFAULT_MODEL_TEMPERATURE if temperature is None else temperature,
                extra_body=self._extra_body(reasoning_effort),
            )
            end_time = time.time()

            if response is None:
                raise EmptyResponseError("API returned null response")
            # OpenRouter reports some provider failures in the body of a 200 response
            error = getattr(response, "error", None)
            if error:
                message = error.get("message") if isinstance(error, dict) else str(error)
                raise EmptyResponseError(message or "Unknown API error")

            output = response.choices[0].message.content if response.choices else None
            if not output:
                raise EmptyResponseError("Empty response from API")

            # Retrieve token usage
            usage = TokenUsage()
            if response.usage:
                prompt_tokens = response.usage.prompt_tokens or 0
                completion_tokens = response.usage.completion_tokens or 0
                usage = TokenUsage(
                    prompt_tokens=prompt_tokens,
                    completion_tokens=completion_tokens,
                    total_tokens=response.usage.total_tokens or prompt_tokens + completion_tokens,
                )

            return ModelResponse(
                output=output,
                latency_ms=int((end_time - start_time) * 1000),
                model_name=self.model_name,
                usage=usage,
            )

        return self._with_retry(
            _call,
            retryable_exceptions=(
                openai.APIConnectionError,
                openai.RateLimitError,
                openai.InternalServerError,
            ),
        )
