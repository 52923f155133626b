"""
Model Pricing

Fetches per-token pricing from OpenRouter and computes run costs. Falls back to
the MODEL_PRICING table when the price list cannot be fetched.
"""

from __future__ import annotations

import logging
import threading
from typing import Mapping

import httpx

from rubric_gauge.domain.constants import MODEL_PRICING, OPENROUTER_MODELS_URL
from rubric_gauge.domain.value_objects import ModelPricing, TokenUsage

logger = logging.getLogger(__name__)

OPENROUTER_MODEL_PREFIX = "openrouter/"

_pricing_cache: dict[str, ModelPricing] | None = None
_cache_lock = threading.Lock()


def _parse_price(value) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def fallback_pricing() -> dict[str, ModelPricing]:
    """MODEL_PRICING (USD / 1M tokens) converted to USD per token"""
    return {
        model: ModelPricing(
            prompt=prices["input"] / 1_000_000,
            completion=prices["output"] / 1_000_000,
        )
        for model, prices in MODEL_PRICING.items()
    }


def fetch_model_pricing(
    url: str = OPENROUTER_MODELS_URL,
    timeout_seconds: float = 15.0,
    use_cache: bool = True,
) -> dict[str, ModelPricing]:
    """
    Fetch model pricing from the OpenRouter models endpoint

    Args:
        url: Models endpoint
        timeout_seconds: Request timeout
        use_cache: Reuse the result of a previous successful fetch

    Returns:
        Mapping of model id -> ModelPricing (USD per token). On failure, the
        fallback table (not cached).
    """
    global _pricing_cache

    with _cache_lock:
        if use_cache and _pricing_cache is not None:
            return _pricing_cache

    try:
        response = httpx.get(url, timeout=timeout_seconds)
        response.raise_for_status()
        data = response.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.warning("Failed to fetch model pricing, using fallback table: %s", e)
        return fallback_pricing()

    pricing: dict[str, ModelPricing] = {}
    for model in data.get("data", []):
        model_id = model.get("id")
        prices = model.get("pricing") or {}
        if not model_id:
            continue
        pricing[model_id] = ModelPricing(
            prompt=_parse_price(prices.get("prompt")),
            completion=_parse_price(prices.get("completion")),
        )

    with _cache_lock:
        _pricing_cache = pricing
    return pricing


def clear_pricing_cache() -> None:
    global _pricing_cache
    with _cache_lock:
        _pricing_cache = None


def calculate_cost(usage: TokenUsage, model: str, pricing: Mapping[str, ModelPricing]) -> float:
    """Cost in USD of the given usage; 0 for models without pricing"""
    price_key = model.removeprefix(OPENROUTER_MODEL_PREFIX)
    model_pricing = pricing.get(price_key)
    if model_pricing is None:
        logger.debug("No pricing for model %s, cost counted as 0", model)
        return 0.0
    return (
        usage.prompt_tokens * model_pricing.prompt
        + usage.completion_tokens * model_pricing.completion
    )


def format_cost(cost: float) -> str:
    """Format cost as currency string"""
    return f"${cost:.2f}"


def format_cost_precise(cost: float) -> str:
    """Format cost with extra precision for small amounts (per-example costs)"""
    if cost >= 0.01:
        return f"${cost:.2f}"
    if cost >= 0.001:
        return f"${cost:.3f}"
    if cost >= 0.0001:
        return f"${cost:.4f}"
    return f"${cost:.5f}"
