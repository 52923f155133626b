"""
LMStudio (OpenAI-compatible local API) model client
"""

import os

from rubric_gauge.infrastructure.model_clients.openai_compatible import OpenAICompatibleClient


class LMStudioClient(OpenAICompatibleClient):
    """Client using LMStudio (OpenAI-compatible API)"""

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
            model_name: Model name (e.g. lmstudio/qwen2.5-7b)
            base_url: LMStudio API endpoint (falls back to LMSTUDIO_BASE_URL env var if not specified)
            api_key: API key (falls back to LMSTUDIO_API_KEY env var; usually not required for LMStudio)
            timeout_seconds: Request timeout in seconds
            max_retries: Maximum number of attempts (default: 3)
            retry_delay_seconds: Base delay for exponential backoff
        """
        # Configuration priority: argument > environment variable > default value
        super().__init__(
            model_name=model_name,
            api_model_name=model_name.removeprefix("lmstudio/"),
            base_url=base_url or os.environ.get("LMSTUDIO_BASE_URL", "http://localhost:1234/v1"),
            api_key=api_key or os.environ.get("LMSTUDIO_API_KEY", "lm-studio"),
            timeout_seconds=timeout_seconds,
            max_retries=max_retries,
            retry_delay_seconds=retry_delay_seconds,
        )
