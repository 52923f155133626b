"""
Unit tests for pricing.py
"""

import logging
from unittest.mock import MagicMock, patch

import httpx
import pytest

from rubric_gauge.domain.value_objects import ModelPricing, TokenUsage
from rubric_gauge.pricing import (
    calculate_cost,
    clear_pricing_cache,
    fallback_pricing,
    fetch_model_pricing,
    format_cost,
    format_cost_precise,
)


@pytest.fixture(autouse=True)
def _reset_cache():
    clear_pricing_cache()
    yield
    clear_pricing_cache()


def _models_response(data: list[dict]) -> MagicMock:
    response = MagicMock()
    response.json.return_value = {"data": data}
    return response


class TestFetchModelPricing:
    """fetch_model_pricing() tests"""

    @patch("rubric_gauge.pricing.httpx.get")
    def test_parses_models(self, mock_get):
        mock_get.return_value = _models_response([
            {"id": "openai/gpt-4.1", "pricing": {"prompt": "0.000002", "completion": "0.000008"}},
            {"id": "free/model", "pricing": {"prompt": "0", "completion": "0"}},
            {"id": "odd/model", "pricing": {"prompt": "n/a"}},
            {"pricing": {"prompt": "1"}},
        ])

        pricing = fetch_model_pricing()

        assert pricing["openai/gpt-4.1"] == ModelPricing(prompt=2e-6, completion=8e-6)
        assert pricing["free/model"] == ModelPricing(prompt=0.0, completion=0.0)
        assert pricing["odd/model"] == ModelPricing(prompt=0.0, completion=0.0)
        assert len(pricing) == 3

    @patch("rubric_gauge.pricing.httpx.get")
    def test_result_is_cached(self, mock_get):
        mock_get.return_value = _models_response([])

        fetch_model_pricing()
        fetch_model_pricing()

        mock_get.assert_called_once()

    @patch("rubric_gauge.pricing.httpx.get")
    def test_cache_bypass(self, mock_get):
        mock_get.return_value = _models_response([])

        fetch_model_pricing()
        fetch_model_pricing(use_cache=False)

        assert mock_get.call_count == 2

    @patch("rubric_gauge.pricing.httpx.get")
    def test_network_error_uses_fallback(self, mock_get):
        mock_get.side_effect = httpx.ConnectError("offline")

        pricing = fetch_model_pricing()

        assert pricing == fallback_pricing()
        # Fallback is not cached: next call tries again
        mock_get.side_effect = None
        mock_get.return_value = _models_response([])
        assert fetch_model_pricing() == {}

    @patch("rubric_gauge.pricing.httpx.get")
    def test_invalid_json_uses_fallback(self, mock_get):
        response = MagicMock()
        response.json.side_effect = ValueError("not json")
        mock_get.return_value = response

        assert fetch_model_pricing() == fallback_pricing()


class TestFallbackPricing:
    """fallback_pricing() tests"""

    def test_converted_to_per_token(self):
        pricing = fallback_pricing()
        assert pricing["openai/gpt-4.1"].prompt == pytest.approx(2.0e-6)
        assert pricing["openai/gpt-4.1"].completion == pytest.approx(8.0e-6)


class TestCalculateCost:
    """calculate_cost() tests"""

    def test_cost(self):
        pricing = {"m": ModelPricing(prompt=1e-6, completion=2e-6)}
        usage = TokenUsage(prompt_tokens=1000, completion_tokens=500, total_tokens=1500)
        assert calculate_cost(usage, "m", pricing) == pytest.approx(0.002)

    def test_unknown_model(self):
        assert calculate_cost(TokenUsage(10, 10, 20), "unknown", {}) == 0.0

    def test_openrouter_prefix_ignored(self):
        pricing = {"openai/gpt-4.1": ModelPricing(prompt=1e-6, completion=2e-6)}
        usage = TokenUsage(prompt_tokens=1000, completion_tokens=500, total_tokens=1500)
        assert calculate_cost(usage, "openrouter/openai/gpt-4.1", pricing) == pytest.approx(0.002)

    def test_unpriced_model_logged(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="rubric_gauge.pricing"):
            assert calculate_cost(TokenUsage(10, 10, 20), "lmstudio/qwen3", {}) == 0.0
        assert "No pricing for model lmstudio/qwen3" in caplog.text


class TestFormatCost:
    """format_cost() / format_cost_precise() tests"""

    def test_format_cost(self):
        assert format_cost(1.234) == "$1.23"
        assert format_cost(0) == "$0.00"

    @pytest.mark.parametrize("cost,expected", [
        (0.5, "$0.50"),
        (0.01, "$0.01"),
        (0.0042, "$0.004"),
        (0.00042, "$0.0004"),
        (0.000042, "$0.00004"),
        (0.0, "$0.00000"),
    ])
    def test_format_cost_precise(self, cost, expected):
        assert format_cost_precise(cost) == expected
