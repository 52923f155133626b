"""
Vertex AI (Google GenAI SDK) model client
"""

import os
import time
from typing import Sequence

from google import genai
from google.api_core import exceptions as google_exceptions
from google.genai.types import GenerateContentConfig, HttpOptions, ThinkingConfig

from rubric_gauge.domain.constants import DEFAULT_MODEL_TEMPERATURE, REASONING_BUDGETS
from rubric_gauge.domain.errors import EmptyResponseError
from rubric_gauge.domain.value_objects import Message, ModelResponse, TokenUsage
from rubric_gauge.infrastructure.model_clients.base import ModelClient, RetryMixin, split_system


class VertexAIClient(RetryMixin, ModelClient):
    """Model client using Google GenAI SDK (via Vertex AI)"""

    def __init__(
        self,
        model_name: str,
        project_id: str | None = None,
        location: str | None = None,
        timeout_seconds: int = 120,
        max_retries: int = 3,
        retry_delay_seconds: float = 1.0,
    ):
        """
        Args:
            model_name: Model name, optionally prefixed with vertex/ (e.g. vertex/gemini-2.5-flash)
            project_id: GCP project ID (falls back to environment variable if not specified)
            location: Region (falls back to GCP_LOCATION, then "global")
            timeout_seconds: Timeout in seconds
            max_retries: Maximum number of attempts (default: 3)
            retry_delay_seconds: Base delay for exponential backoff
        """
        self.model_name = model_name
        self.api_model_name = model_name.removeprefix("vertex/")
        self.project_id = project_id or os.environ.get("GCP_PROJECT_ID")
        self.location = location or os.environ.get("GCP_LOCATION", "global")
        self.max_retries = max_retries
        self.retry_delay_seconds = retry_delay_seconds

        if not self.project_id:
            raise ValueError("GCP_PROJECT_ID is not set")

        # Timeout is configured via HttpOptions (milliseconds)
        self.client = genai.Client(
            vertexai=True,
            project=self.project_id,
            location=self.location,
            http_options=HttpOptions(timeout=timeout_seconds * 1000),
        )

    def chat(
        self,
        messages: Sequence[Message],
        *,
        temperature: float | None = None,
        reasoning_effort: str | None = None,
    ) -> ModelResponse:
        """
        Send a conversation and retrieve the assistant reply

        System messages become the system instruction; assistant turns are sent
        with the "model" role.

        Raises:
            EmptyResponseError: If the response has no text
        """
        system, turns = split_system(messages)
        contents = [
            {"role": "model" if m.role == "assistant" else "user", "parts": [{"text": m.content}]}
            for m in turns
        ]
        config = GenerateContentConfig(
            temperature=DEFAULT_MODEL_TEMPERATURE if temperature is None else temperature,
            system_instruction=system,
        )
        if reasoning_effort:
            config.thinking_config = ThinkingConfig(
                thinking_budget=REASONING_BUDGETS.get(reasoning_effort, 0)
            )

        def _call():
            start_time = time.time()
            response = self.client.models.generate_content(
                model=self.api_model_name,
                contents=contents,
                config=config,
            )
            end_time = time.time()

            if not response.text:
                raise EmptyResponseError("Empty response from API")

            # Retrieve token usage
            input_tokens = 0
            output_tokens = 0
            if getattr(response, "usage_metadata", None):
                input_tokens = getattr(response.usage_metadata, "prompt_token_count", 0) or 0
                output_tokens = getattr(response.usage_metadata, "candidates_token_count", 0) or 0

            return ModelResponse(
                output=response.text.strip(),
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
            retryable_exceptions=(
                google_exceptions.DeadlineExceeded,
                google_exceptions.ServiceUnavailable,
                google_exceptions.ResourceExhausted,
            ),
        )
