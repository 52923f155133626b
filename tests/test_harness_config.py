"""
Tests for harness_config.py
"""

import pytest

from rubric_gauge.harness_config import (
    EvaluationConfig,
    GraderConfig,
    HarnessConfig,
    IsolationConfig,
    LMStudioConfig,
    OpenRouterConfig,
    load_config,
)

ENV_KEYS = [
    "RUBRIC_GAUGE_DATASET",
    "RUBRIC_GAUGE_NUM_EXAMPLES",
    "RUBRIC_GAUGE_RANDOM_SAMPLE",
    "RUBRIC_GAUGE_CONCURRENCY",
    "RUBRIC_GAUGE_MODEL_TEMPERATURE",
    "RUBRIC_GAUGE_REASONING_EFFORT",
    "RUBRIC_GAUGE_OUTPUT_DIR",
    "RUBRIC_GAUGE_DATA_DIR",
    "RUBRIC_GAUGE_LOG_LEVEL",
    "RUBRIC_GAUGE_GRADER_MODEL",
    "HARNESS_TIMEOUT_SECONDS",
    "HARNESS_MAX_RETRIES",
    "HARNESS_RETRY_DELAY_SECONDS",
    "OPENROUTER_BASE_URL",
    "OPENROUTER_API_KEY",
    "LMSTUDIO_BASE_URL",
    "LMSTUDIO_API_KEY",
]


@pytest.fixture
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


class TestEvaluationConfig:
    """EvaluationConfig dataclass tests"""

    def test_defaults(self):
        config = EvaluationConfig()
        assert config.dataset == "main"
        assert config.num_examples is None
        assert config.random_sample is True
        assert config.concurrency == 5
        assert config.model_temperature == 1.0
        assert config.reasoning_effort is None
        assert config.output_dir == "results"


class TestGraderConfig:
    """GraderConfig dataclass tests"""

    def test_defaults(self):
        assert GraderConfig().grader_model == "openai/gpt-4.1"


class TestIsolationConfig:
    """IsolationConfig dataclass tests"""

    def test_defaults(self):
        config = IsolationConfig()
        assert config.timeout_seconds == 120
        assert config.max_retries == 3
        assert config.retry_delay_seconds == 1.0


class TestHarnessConfigValidate:
    """HarnessConfig.validate() tests"""

    def test_defaults_are_valid(self):
        config = HarnessConfig()
        assert config.validate() is config

    def test_unknown_dataset(self):
        config = HarnessConfig(evaluation=EvaluationConfig(dataset="easy"))
        with pytest.raises(ValueError, match="Unknown dataset"):
            config.validate()

    def test_concurrency_below_one(self):
        config = HarnessConfig(evaluation=EvaluationConfig(concurrency=0))
        with pytest.raises(ValueError, match="concurrency"):
            config.validate()

    def test_num_examples_below_one(self):
        config = HarnessConfig(evaluation=EvaluationConfig(num_examples=0))
        with pytest.raises(ValueError, match="num_examples"):
            config.validate()

    def test_unknown_reasoning_effort(self):
        config = HarnessConfig(evaluation=EvaluationConfig(reasoning_effort="extreme"))
        with pytest.raises(ValueError, match="reasoning effort"):
            config.validate()

    def test_max_retries_below_one(self):
        config = HarnessConfig(isolation=IsolationConfig(max_retries=0))
        with pytest.raises(ValueError, match="max_retries"):
            config.validate()

    def test_unknown_log_level(self):
        config = HarnessConfig(evaluation=EvaluationConfig(log_level="LOUD"))
        with pytest.raises(ValueError, match="Unknown log level"):
            config.validate()

    def test_log_level_case_insensitive(self):
        config = HarnessConfig(evaluation=EvaluationConfig(log_level="debug"))
        assert config.validate() is config


class TestHarnessConfigSerialization:
    """HarnessConfig to_dict / from_dict tests"""

    def test_to_dict_omits_api_keys(self):
        config = HarnessConfig(
            openrouter=OpenRouterConfig(api_key="sk-or-secret"),
            lmstudio=LMStudioConfig(api_key="local-secret"),
        )
        data = config.to_dict()
        assert "harness_config" in data
        assert "api_key" not in data["harness_config"]["openrouter"]
        assert "api_key" not in data["harness_config"]["lmstudio"]
        assert "sk-or-secret" not in str(data)

    def test_from_dict_with_key(self):
        config = HarnessConfig.from_dict({
            "harness_config": {
                "evaluation": {"dataset": "hard", "num_examples": 20},
                "grader": {"grader_model": "openai/gpt-4.1-mini"},
            }
        })
        assert config.evaluation.dataset == "hard"
        assert config.evaluation.num_examples == 20
        assert config.grader.grader_model == "openai/gpt-4.1-mini"
        assert config.isolation.max_retries == 3

    def test_from_dict_without_key(self):
        config = HarnessConfig.from_dict({"isolation": {"max_retries": 7}})
        assert config.isolation.max_retries == 7

    def test_from_dict_empty(self):
        config = HarnessConfig.from_dict({})
        assert config.evaluation.dataset == "main"

    def test_roundtrip_without_secrets(self):
        original = HarnessConfig(
            evaluation=EvaluationConfig(dataset="consensus", concurrency=8),
            openrouter=OpenRouterConfig(api_key="sk-or-secret"),
        )
        restored = HarnessConfig.from_dict(original.to_dict())
        assert restored.evaluation == original.evaluation
        assert restored.openrouter.api_key is None


class TestLoadConfig:
    """load_config() tests"""

    def test_defaults_without_env(self, clean_env):
        config = load_config()
        assert config.evaluation == EvaluationConfig()
        assert config.grader == GraderConfig()
        assert config.isolation == IsolationConfig()
        assert config.openrouter.api_key is None
        assert config.lmstudio == LMStudioConfig()

    def test_custom_env_values(self, clean_env):
        clean_env.setenv("RUBRIC_GAUGE_DATASET", "hard")
        clean_env.setenv("RUBRIC_GAUGE_NUM_EXAMPLES", "25")
        clean_env.setenv("RUBRIC_GAUGE_RANDOM_SAMPLE", "false")
        clean_env.setenv("RUBRIC_GAUGE_CONCURRENCY", "10")
        clean_env.setenv("RUBRIC_GAUGE_MODEL_TEMPERATURE", "0.3")
        clean_env.setenv("RUBRIC_GAUGE_REASONING_EFFORT", "low")
        clean_env.setenv("RUBRIC_GAUGE_OUTPUT_DIR", "out")
        clean_env.setenv("RUBRIC_GAUGE_GRADER_MODEL", "openai/gpt-4.1-mini")
        clean_env.setenv("HARNESS_TIMEOUT_SECONDS", "60")
        clean_env.setenv("HARNESS_MAX_RETRIES", "5")
        clean_env.setenv("HARNESS_RETRY_DELAY_SECONDS", "2.0")
        clean_env.setenv("OPENROUTER_API_KEY", "sk-or-test")
        clean_env.setenv("LMSTUDIO_BASE_URL", "http://custom:5678/v1")

        config = load_config()

        assert config.evaluation.dataset == "hard"
        assert config.evaluation.num_examples == 25
        assert config.evaluation.random_sample is False
        assert config.evaluation.concurrency == 10
        assert config.evaluation.model_temperature == 0.3
        assert config.evaluation.reasoning_effort == "low"
        assert config.evaluation.output_dir == "out"
        assert config.grader.grader_model == "openai/gpt-4.1-mini"
        assert config.isolation.timeout_seconds == 60
        assert config.isolation.max_retries == 5
        assert config.isolation.retry_delay_seconds == 2.0
        assert config.openrouter.api_key == "sk-or-test"
        assert config.lmstudio.base_url == "http://custom:5678/v1"

    def test_empty_num_examples_means_all(self, clean_env):
        clean_env.setenv("RUBRIC_GAUGE_NUM_EXAMPLES", "")
        assert load_config().evaluation.num_examples is None

    @pytest.mark.parametrize("value,expected", [
        ("1", True), ("yes", True), ("TRUE", True), ("false", False), ("0", False),
    ])
    def test_bool_env_variants(self, clean_env, value, expected):
        clean_env.setenv("RUBRIC_GAUGE_RANDOM_SAMPLE", value)
        assert load_config().evaluation.random_sample is expected

    def test_invalid_int_env_raises_error(self, clean_env):
        clean_env.setenv("RUBRIC_GAUGE_CONCURRENCY", "many")
        with pytest.raises(ValueError, match="RUBRIC_GAUGE_CONCURRENCY"):
            load_config()

    def test_invalid_float_env_raises_error(self, clean_env):
        clean_env.setenv("RUBRIC_GAUGE_MODEL_TEMPERATURE", "warm")
        with pytest.raises(ValueError, match="RUBRIC_GAUGE_MODEL_TEMPERATURE"):
            load_config()

    def test_out_of_range_env_rejected(self, clean_env):
        clean_env.setenv("RUBRIC_GAUGE_CONCURRENCY", "0")
        with pytest.raises(ValueError, match="concurrency"):
            load_config()
