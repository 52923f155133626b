"""
Domain Value Objects

Defines immutable data structures representing values such as conversation
messages, rubric items, grading verdicts, token usage, and model responses.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Message:
    """One conversation turn"""
    role: str  # user / assistant / system
    content: str

    @classmethod
    def from_dict(cls, data: dict) -> "Message":
        return cls(role=data["role"], content=data["content"])

    def to_dict(self) -> dict:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class RubricItem:
    """A weighted, independently gradable criterion (points may be negative)"""
    criterion: str
    points: float
    tags: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: dict) -> "RubricItem":
        return cls(
            criterion=data["criterion"],
            points=data["points"],
            tags=tuple(data.get("tags") or ()),
        )


@dataclass(frozen=True)
class RubricResult:
    """Grader verdict for one rubric item"""
    criterion: str
    points: float
    criteria_met: bool
    explanation: str

    def to_dict(self) -> dict:
        return {
            "criterion": self.criterion,
            "points": self.points,
            "criteria_met": self.criteria_met,
            "explanation": self.explanation,
        }


@dataclass(frozen=True)
class TokenUsage:
    """Token counts for one or more model calls"""
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    def __post_init__(self):
        if self.prompt_tokens < 0:
            raise ValueError("prompt_tokens must be non-negative")
        if self.completion_tokens < 0:
            raise ValueError("completion_tokens must be non-negative")
        if self.total_tokens < 0:
            raise ValueError("total_tokens must be non-negative")

    def __add__(self, other: "TokenUsage") -> "TokenUsage":
        if not isinstance(other, TokenUsage):
            return NotImplemented
        return TokenUsage(
            prompt_tokens=self.prompt_tokens + other.prompt_tokens,
            completion_tokens=self.completion_tokens + other.completion_tokens,
            total_tokens=self.total_tokens + other.total_tokens,
        )

    def to_dict(self) -> dict:
        return {
            "prompt_tokens": self.prompt_tokens,
            "completion_tokens": self.completion_tokens,
            "total_tokens": self.total_tokens,
        }


@dataclass(frozen=True)
class ModelResponse:
    """Model response"""
    output: str
    latency_ms: int
    model_name: str
    usage: TokenUsage = field(default_factory=TokenUsage)


@dataclass(frozen=True)
class ModelPricing:
    """Per-token pricing in USD"""
    prompt: float = 0.0
    completion: float = 0.0
