"""
Domain Entities

Defines the primary data structures used in the evaluation process.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from rubric_gauge.domain.value_objects import Message, RubricItem, RubricResult, TokenUsage


@dataclass
class BenchmarkExample:
    """One labeled dataset example"""
    prompt_id: str
    prompt: list[Message]
    rubrics: list[RubricItem]
    example_tags: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "BenchmarkExample":
        return cls(
            prompt_id=data["prompt_id"],
            prompt=[Message.from_dict(m) for m in data["prompt"]],
            rubrics=[RubricItem.from_dict(r) for r in data["rubrics"]],
            example_tags=list(data.get("example_tags") or []),
        )

    @property
    def last_user_message(self) -> str | None:
        for message in reversed(self.prompt):
            if message.role == "user":
                return message.content
        return None


@dataclass(frozen=True)
class ExampleResult:
    """Scored result of a single example"""
    prompt_id: str
    model_response: str
    rubric_results: tuple[RubricResult, ...]
    achieved_points: float
    total_points: float
    score: float
    theme: str | None = None

    @classmethod
    def failed(cls, prompt_id: str, theme: str | None = None) -> "ExampleResult":
        """Zero-scored placeholder for an example that could not be evaluated"""
        return cls(
            prompt_id=prompt_id,
            model_response="",
            rubric_results=(),
            achieved_points=0,
            total_points=1,
            score=0.0,
            theme=theme,
        )

    def to_dict(self) -> dict:
        return {
            "prompt_id": self.prompt_id,
            "model_response": self.model_response,
            "rubric_results": [r.to_dict() for r in self.rubric_results],
            "achieved_points": self.achieved_points,
            "total_points": self.total_points,
            "score": self.score,
        }


@dataclass(frozen=True)
class ThemeScore:
    """Running score rollup for one theme"""
    theme: str
    examples: int = 0
    total_score: float = 0.0
    avg_score: float = 0.0

    def add(self, score: float) -> "ThemeScore":
        examples = self.examples + 1
        total_score = self.total_score + score
        return ThemeScore(
            theme=self.theme,
            examples=examples,
            total_score=total_score,
            avg_score=total_score / examples,
        )

    def to_dict(self) -> dict:
        return {
            "theme": self.theme,
            "examples": self.examples,
            "total_score": self.total_score,
            "avg_score": self.avg_score,
        }


class RunPhase(str, Enum):
    """Run lifecycle: loading -> running -> complete"""
    LOADING = "loading"
    RUNNING = "running"
    COMPLETE = "complete"

    @property
    def rank(self) -> int:
        return list(RunPhase).index(self)


@dataclass(frozen=True)
class RunState:
    """
    Snapshot of an evaluation run

    Produced only by the evaluation loop; listeners receive it read-only.
    """
    phase: RunPhase = RunPhase.LOADING
    start_time: float = field(default_factory=time.time)
    current_example: int = 0
    total_examples: int = 0
    current_rubric: int = 0
    total_rubrics: int = 0
    current_activity: str = "Initializing..."
    completed_examples: tuple[ExampleResult, ...] = ()
    model_tokens: TokenUsage = field(default_factory=TokenUsage)
    grader_tokens: TokenUsage = field(default_factory=TokenUsage)
    model_time_ms: int = 0
    grader_time_ms: int = 0
    theme_scores: Mapping[str, ThemeScore] = field(
        default_factory=lambda: MappingProxyType({})
    )
    last_completion_elapsed_ms: int = 0
    current_prompt: tuple[Message, ...] | None = None
    current_question: str | None = None
    current_answer: str | None = None
    last_error: str | None = None
    error_count: int = 0

    @classmethod
    def initial(cls, start_time: float | None = None) -> "RunState":
        if start_time is None:
            return cls()
        return cls(start_time=start_time)
