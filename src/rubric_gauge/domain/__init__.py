"""
Domain Layer

Defines constants, entities, value objects and errors that form the core of the
business logic. Has no dependencies on external libraries.
"""

from rubric_gauge.domain.constants import (
    DATASET_URLS,
    DEFAULT_GRADER_MODEL,
    MODEL_PRICING,
    REASONING_EFFORTS,
    SYSTEM_PROMPT,
    THEME_NAMES,
)
from rubric_gauge.domain.entities import (
    BenchmarkExample,
    ExampleResult,
    RunPhase,
    RunState,
    ThemeScore,
)
from rubric_gauge.domain.errors import (
    DatasetError,
    EmptyResponseError,
    GraderReplyError,
    InvalidTransitionError,
    RubricGaugeError,
)
from rubric_gauge.domain.value_objects import (
    Message,
    ModelPricing,
    ModelResponse,
    RubricItem,
    RubricResult,
    TokenUsage,
)

__all__ = [
    # constants
    "DATASET_URLS",
    "DEFAULT_GRADER_MODEL",
    "MODEL_PRICING",
    "REASONING_EFFORTS",
    "SYSTEM_PROMPT",
    "THEME_NAMES",
    # entities
    "BenchmarkExample",
    "ExampleResult",
    "RunPhase",
    "RunState",
    "ThemeScore",
    # errors
    "DatasetError",
    "EmptyResponseError",
    "GraderReplyError",
    "InvalidTransitionError",
    "RubricGaugeError",
    # value objects
    "Message",
    "ModelPricing",
    "ModelResponse",
    "RubricItem",
    "RubricResult",
    "TokenUsage",
]
