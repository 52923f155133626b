"""
Model client base class and retry mixin

Defines the abstract chat-completion interface inherited by all model clients
and the RetryMixin that consolidates shared retry logic for transient
transport errors.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from typing import Sequence

from rubric_gauge.domain.value_objects import Message, ModelResponse

logger = logging.getLogger(__name__)


class RetryMixin:
    """Exponential backoff retry. Subclasses set self.max_retries and self.retry_delay_seconds."""

    max_retries: int = 3
    retry_delay_seconds: float = 1.0

    def _with_retry(self, fn, retryable_exceptions=(Exception,)):
        """
        Execute with exponential backoff retry.

        Args:
            fn: The function to retry (a callable with no arguments)
            retryable_exceptions: Tuple of exception types eligible for retry

        Returns:
            The return value of fn()

        Raises:
            ValueError: If max_retries is less than 1
            Exception: The last exception if max retries are exceeded
        """
        if self.max_retries < 1:
            raise ValueError("max_retries must be at least 1.")

        last_exception: Exception | None = None
        for attempt in range(self.max_retries):
            try:
                return fn()
            except retryable_exceptions as e:
                last_exception = e
                if attempt < self.max_retries - 1:
                    delay = self.retry_delay_seconds * (2 ** attempt)
                    logger.debug("Attempt %d failed (%s), retrying in %.1fs", attempt + 1, e, delay)
                    time.sleep(delay)

        assert last_exception is not None
        raise last_exception


def split_system(messages: Sequence[Message]) -> tuple[str | None, list[Message]]:
    """Separate system messages (joined) from the conversation turns"""
    system_parts = [m.content for m in messages if m.role == "system"]
    turns = [m for m in messages if m.role != "system"]
    return ("\n\n".join(system_parts) if system_parts else None), turns


class ModelClient(ABC):
    """Abstract base class for chat-completion model clients"""

    model_name: str

    @abstractmethod
    def chat(
        self,
        messages: Sequence[Message],
        *,
        temperature: float | None = None,
        reasoning_effort: str | None = None,
    ) -> ModelResponse:
        """
        Send a conversation and retrieve the assistant reply

        Raises:
            EmptyResponseError: If the provider returned no content
        """
        pass
