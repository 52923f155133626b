"""
Anthropic Claude model client
"""

import os
import time
from typing import Sequence

from anthropic import Anthropic, APIConnectionError, RateLimitError, InternalServerError

from rubric_gauge.domain.constants import DEFAULT_MODEL_TEMPERATURE, REASONING_BUDGETS
from rubric_gauge.domain.errors import EmptyResponseError
from rubric_gauge.domain.value_objects import Message, ModelResponse, TokenUsage
from rubric_gauge.infrastructure.model_clients.base import ModelClient, RetryMixin, split_system


class ClaudeClient(RetryMixin, ModelClient):
    """Claude client using the Anthropic API"""

    def __init__(
        self,
        model_name: str,
        api_key: str | None = None,
        timeout_seconds: float = 120,
        max_retries: int = 3,
        retry_delay_seconds: float = 1.0,
        max_tokens: int = 4096,
    ):
        """
        Args:
            model_name: Model name (e.g. claude-sonnet-4-5-20250929)
            api_key: Anthropic API key (falls back to environment variable if not specified)
            timeout_seconds: Request timeout in seconds
            max_retries: Maximum number of attempts (default: 3)
            retry_delay_seconds: Base delay for exponential backoff
            max_tokens: Maximum number of output tokens, excluding any thinking budget
        """
        self.model_name = model_name
        self.api_key = api_key or os.environ.get("ANTHROPIC_API_KEY")
        self.max_retries = max_retries
        self.retry_delay_seconds = retry_delay_seconds
        self.max_tokens = max_tokens

        if not self.api_key:
            raise ValueError("ANTHROPIC_API_KEY is not set")

        self.client = Anthropic(api_key=self.api_key, timeout=timeout_seconds, max_retries=0)

    def chat(
        self,
        messages: Sequence[Message],
        *,
        temperature: float | None = None,
        reasoning_effort: str | None = None,
    ) -> ModelResponse:
        """
        Send a conversation and retrieve the assistant reply

        System messages are passed through the `system` parameter. A reasoning
        effort other than "none" enables extended thinking with the matching
        token budget (the API then requires temperature 1).

        Raises:
            EmptyResponseError: If the response has no text content
            anthropic.APIError: If the maximum number of retries is exceeded
        """
        system, turns = split_system(messages)
        params = {
            "model": self.model_name,
            "max_tokens": self.max_tokens,
            "temperature": DEFAULT_MODEL_TEMPERATURE if temperature is None else temperature,
            "messages": [m.to_dict() for m in turns],
        }
        if system:
            params["system"] = system

        budget = REASONING_BUDGETS.get(reasoning_effort or "none", 0)
        if budget:
            params["thinking"] = {"type": "enabled", "budget_tokens": budget}
            params["max_tokens"] = self.max_tokens + budget
            params["temperature"] = 1.0

        def _call():
            start_time = time.time()
            response = self.client.messages.create(**params)
            end_time = time.time()

            output = "".join(
                block.text for block in response.content if getattr(block, "type", None) == "text"
            ).strip()
            if not output:
                raise EmptyResponseError("Empty response from API")

            # Retrieve token usage
            input_tokens = getattr(response.usage, "input_tokens", 0) or 0
            output_tokens = getattr(response.usage, "output_tokens", 0) or 0

            return ModelResponse(
                output=output,
                latency_ms=int((end_time - start_time) * 1000),
                model_name=self.model_name,
                usage=TokenUsage(
                    prompt_tokens=input_tokens,
                    completion_tokens=output_tokens,
                    total_tokens=input_tokens + output_tokens,
                ),
            )

        return self._with_retry(
            _call,
            retryable_exceptions=(APIConnectionError, RateLimitError, InternalServerError),
        )
