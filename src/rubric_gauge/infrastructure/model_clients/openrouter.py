"""
OpenRouter model client
"""

import os

from rubric_gauge.domain.constants import OPENROUTER_BASE_URL
from rubric_gauge.infrastructure.model_clients.openai_compatible import OpenAICompatibleClient

_PLACEHOLDER_KEY = "your_openrouter_api_key_here"


class OpenRouterClient(OpenAICompatibleClient):
    """Client for any model routed through OpenRouter (e.g. openai/gpt-4.1)"""

    def __init__(
        self,
        model_name: str,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout_seconds: float = 120,
        max_retries: int = 3,
        retry_delay_seconds: float = 1.0,
    ):
        """
        Args:
            model_name: OpenRouter model string (e.g. anthropic/claude-3.5-sonnet)
            base_url: API endpoint (falls back to OPENROUTER_BASE_URL env var)
            api_key: API key (falls back to OPENROUTER_API_KEY env var)
            timeout_seconds: Request timeout in seconds
            max_retries: Maximum number of attempts (default: 3)
            retry_delay_seconds: Base delay for exponential backoff
        """
        api_key = api_key or os.environ.get("OPENROUTER_API_KEY")
        if not api_key or api_key == _PLACEHOLDER_KEY:
            raise ValueError("OPENROUTER_API_KEY is not set")

        super().__init__(
            model_name=model_name,
            api_model_name=model_name.removeprefix("openrouter/"),
            base_url=base_url or os.environ.get("OPENROUTER_BASE_URL", OPENROUTER_BASE_URL),
            api_key=api_key,
            timeout_seconds=timeout_seconds,
            max_retries=max_retries,
            retry_delay_seconds=retry_delay_seconds,
            default_headers={
                "HTTP-Referer": "https://github.com/rubric-gauge",
                "X-Title": "rubric-gauge",
            },
        )

    def _extra_body(self, reasoning_effort: str | None) -> dict | None:
        # OpenRouter takes a nested reasoning object for reasoning models
        if reasoning_effort:
            return {"reasoning": {"effort": reasoning_effort}}
        return None
