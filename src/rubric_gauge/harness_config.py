"""
Evaluation Harness Configuration

Manages loading from environment variables and default values.
"""

import os
from dataclasses import dataclass, field, asdict

from rubric_gauge.domain.constants import (
    DATASET_URLS,
    DEFAULT_CONCURRENCY,
    DEFAULT_GRADER_MODEL,
    DEFAULT_MODEL_TEMPERATURE,
    OPENROUTER_BASE_URL,
    REASONING_EFFORTS,
)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _env_bool(key: str, default: bool) -> bool:
    """Convert an environment variable to bool"""
    val = os.environ.get(key)
    if val is None:
        return default
    return val.lower() in ("true", "1", "yes")


def _env_int(key: str, default: int) -> int:
    """Convert an environment variable to int"""
    val = os.environ.get(key)
    if val is None:
        return default
    try:
        return int(val)
    except ValueError:
        raise ValueError(f"The value '{val}' of environment variable '{key}' cannot be converted to an integer.")


def _env_optional_int(key: str) -> int | None:
    """Convert an environment variable to int, None when unset or empty"""
    val = os.environ.get(key)
    if val is None or not val.strip():
        return None
    return _env_int(key, 0)


def _env_float(key: str, default: float) -> float:
    """Convert an environment variable to float"""
    val = os.environ.get(key)
    if val is None:
        return default
    try:
        return float(val)
    except ValueError:
        raise ValueError(f"The value '{val}' of environment variable '{key}' cannot be converted to a number.")


def _env_str(key: str, default: str) -> str:
    """Get an environment variable as a string"""
    return os.environ.get(key, default)


def _env_optional_str(key: str) -> str | None:
    val = os.environ.get(key)
    return val if val else None


@dataclass
class EvaluationConfig:
    """Evaluation run configuration"""
    dataset: str = "main"  # main / hard / consensus
    num_examples: int | None = None  # None = the whole dataset
    random_sample: bool = True
    concurrency: int = DEFAULT_CONCURRENCY
    model_temperature: float = DEFAULT_MODEL_TEMPERATURE
    reasoning_effort: str | None = None
    output_dir: str = "results"
    data_dir: str = "data"
    log_level: str = "WARNING"


@dataclass
class GraderConfig:
    """Grader model configuration"""
    grader_model: str = DEFAULT_GRADER_MODEL


@dataclass
class IsolationConfig:
    """Provider call configuration"""
    timeout_seconds: int = 120
    max_retries: int = 3
    retry_delay_seconds: float = 1.0


@dataclass
class OpenRouterConfig:
    """OpenRouter configuration"""
    base_url: str = OPENROUTER_BASE_URL
    api_key: str | None = None


@dataclass
class LMStudioConfig:
    """LMStudio (OpenAI-compatible local LLM) configuration"""
    base_url: str = "http://localhost:1234/v1"
    api_key: str = "lm-studio"


@dataclass
class HarnessConfig:
    """Overall evaluation harness configuration"""
    evaluation: EvaluationConfig = field(default_factory=EvaluationConfig)
    grader: GraderConfig = field(default_factory=GraderConfig)
    isolation: IsolationConfig = field(default_factory=IsolationConfig)
    openrouter: OpenRouterConfig = field(default_factory=OpenRouterConfig)
    lmstudio: LMStudioConfig = field(default_factory=LMStudioConfig)

    def validate(self) -> "HarnessConfig":
        """
        Check value ranges

        Raises:
            ValueError: If a value is out of range
        """
        ev = self.evaluation
        if ev.dataset not in DATASET_URLS:
            raise ValueError(f"Unknown dataset: {ev.dataset} (available: {list(DATASET_URLS)})")
        if ev.concurrency < 1:
            raise ValueError("concurrency must be at least 1.")
        if ev.num_examples is not None and ev.num_examples < 1:
            raise ValueError("num_examples must be at least 1.")
        if ev.reasoning_effort is not None and ev.reasoning_effort not in REASONING_EFFORTS:
            raise ValueError(
                f"Unknown reasoning effort: {ev.reasoning_effort} (available: {REASONING_EFFORTS})"
            )
        if ev.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {ev.log_level} (available: {list(LOG_LEVELS)})")
        if self.isolation.max_retries < 1:
            raise ValueError("max_retries must be at least 1.")
        return self

    def to_dict(self) -> dict:
        """Convert to dictionary format (API keys omitted)"""
        data = asdict(self)
        data["openrouter"].pop("api_key", None)
        data["lmstudio"].pop("api_key", None)
        return {"harness_config": data}

    @classmethod
    def from_dict(cls, data: dict) -> "HarnessConfig":
        """Create from dictionary (handles presence/absence of harness_config key)"""
        config_data = data.get("harness_config", data)
        return cls(
            evaluation=EvaluationConfig(**config_data.get("evaluation", {})),
            grader=GraderConfig(**config_data.get("grader", {})),
            isolation=IsolationConfig(**config_data.get("isolation", {})),
            openrouter=OpenRouterConfig(**config_data.get("openrouter", {})),
            lmstudio=LMStudioConfig(**config_data.get("lmstudio", {})),
        )


def load_config() -> HarnessConfig:
    """
    Load configuration from environment variables

    Uses default values when environment variables are not set.

    Returns:
        HarnessConfig

    Raises:
        ValueError: If a variable cannot be converted or is out of range
    """
    evaluation = EvaluationConfig(
        dataset=_env_str("RUBRIC_GAUGE_DATASET", "main"),
        num_examples=_env_optional_int("RUBRIC_GAUGE_NUM_EXAMPLES"),
        random_sample=_env_bool("RUBRIC_GAUGE_RANDOM_SAMPLE", True),
        concurrency=_env_int("RUBRIC_GAUGE_CONCURRENCY", DEFAULT_CONCURRENCY),
        model_temperature=_env_float("RUBRIC_GAUGE_MODEL_TEMPERATURE", DEFAULT_MODEL_TEMPERATURE),
        reasoning_effort=_env_optional_str("RUBRIC_GAUGE_REASONING_EFFORT"),
        output_dir=_env_str("RUBRIC_GAUGE_OUTPUT_DIR", "results"),
        data_dir=_env_str("RUBRIC_GAUGE_DATA_DIR", "data"),
        log_level=_env_str("RUBRIC_GAUGE_LOG_LEVEL", "WARNING"),
    )
    grader = GraderConfig(
        grader_model=_env_str("RUBRIC_GAUGE_GRADER_MODEL", DEFAULT_GRADER_MODEL),
    )
    isolation = IsolationConfig(
        timeout_seconds=_env_int("HARNESS_TIMEOUT_SECONDS", 120),
        max_retries=_env_int("HARNESS_MAX_RETRIES", 3),
        retry_delay_seconds=_env_float("HARNESS_RETRY_DELAY_SECONDS", 1.0),
    )
    openrouter = OpenRouterConfig(
        base_url=_env_str("OPENROUTER_BASE_URL", OPENROUTER_BASE_URL),
        api_key=_env_optional_str("OPENROUTER_API_KEY"),
    )
    lmstudio = LMStudioConfig(
        base_url=_env_str("LMSTUDIO_BASE_URL", "http://localhost:1234/v1"),
        api_key=_env_str("LMSTUDIO_API_KEY", "lm-studio"),
    )
    return HarnessConfig(
        evaluation=evaluation,
        grader=grader,
        isolation=isolation,
        openrouter=openrouter,
        lmstudio=lmstudio,
    ).validate()
