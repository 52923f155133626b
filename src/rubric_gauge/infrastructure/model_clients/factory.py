"""
Model client factory

Creates the appropriate client instance based on the model name.
"""

from __future__ import annotations

from rubric_gauge.harness_config import HarnessConfig, load_config
from rubric_gauge.infrastructure.model_clients.base import ModelClient
from rubric_gauge.infrastructure.model_clients.claude import ClaudeClient
from rubric_gauge.infrastructure.model_clients.lmstudio import LMStudioClient
from rubric_gauge.infrastructure.model_clients.openrouter import OpenRouterClient
from rubric_gauge.infrastructure.model_clients.vertex_ai import VertexAIClient


def create_client(model_name: str, config: HarnessConfig | None = None) -> ModelClient:
    """
    Create the appropriate client based on the model name

    Routing:
        lmstudio/...  -> LMStudioClient
        vertex/...    -> VertexAIClient
        claude-...    -> ClaudeClient (direct Anthropic API)
        anything else -> OpenRouterClient (e.g. openai/gpt-4.1, anthropic/claude-3.5-sonnet)

    Args:
        model_name: Model name
        config: HarnessConfig (loads from env if not provided)

    Returns:
        ModelClient: The appropriate client instance
    """
    if config is None:
        config = load_config()

    timeout = config.isolation.timeout_seconds
    retries = config.isolation.max_retries
    retry_delay = config.isolation.retry_delay_seconds

    if model_name.startswith("lmstudio/"):
        return LMStudioClient(
            model_name,
            base_url=config.lmstudio.base_url,
            api_key=config.lmstudio.api_key,
            timeout_seconds=timeout,
            max_retries=retries,
            retry_delay_seconds=retry_delay,
        )
    elif model_name.startswith("vertex/"):
        return VertexAIClient(
            model_name, timeout_seconds=timeout, max_retries=retries, retry_delay_seconds=retry_delay
        )
    elif model_name.startswith("claude"):
        return ClaudeClient(
            model_name, timeout_seconds=timeout, max_retries=retries, retry_delay_seconds=retry_delay
        )
    else:
        return OpenRouterClient(
            model_name,
            base_url=config.openrouter.base_url,
            api_key=config.openrouter.api_key,
            timeout_seconds=timeout,
            max_retries=retries,
            retry_delay_seconds=retry_delay,
        )
