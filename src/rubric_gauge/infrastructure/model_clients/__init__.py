"""
Model client package

Provides a unified chat-completion interface to each LLM provider.
"""

from rubric_gauge.infrastructure.model_clients.base import ModelClient
from rubric_gauge.infrastructure.model_clients.factory import create_client
from rubric_gauge.domain.value_objects import ModelResponse

__all__ = ["ModelClient", "ModelResponse", "create_client"]
