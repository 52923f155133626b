"""
Run State Transitions

Events emitted by the evaluation loop and the pure reducer that folds them into
a new RunState. The reducer never mutates its input; every call returns a new
snapshot, so listeners can keep any snapshot they received.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Union

from rubric_gauge.domain.entities import ExampleResult, RunPhase, RunState
from rubric_gauge.domain.errors import InvalidTransitionError
from rubric_gauge.domain.value_objects import Message, TokenUsage
from rubric_gauge.scoring.scorer import update_theme_scores


@dataclass(frozen=True)
class RunStarted:
    start_time: float
    activity: str = "Loading dataset..."


@dataclass(frozen=True)
class ExamplesLoaded:
    total_examples: int


@dataclass(frozen=True)
class ExampleStarted:
    index: int  # 1-based
    prompt: tuple[Message, ...]
    question: str
    total_rubrics: int
    activity: str


@dataclass(frozen=True)
class ResponseGenerated:
    answer: str
    usage: TokenUsage
    elapsed_ms: int


@dataclass(frozen=True)
class RubricChunkGraded:
    graded: int
    total: int
    usage: TokenUsage
    elapsed_ms: int


@dataclass(frozen=True)
class ExampleCompleted:
    result: ExampleResult
    elapsed_since_start_ms: int


@dataclass(frozen=True)
class ExampleFailed:
    result: ExampleResult
    error: str
    elapsed_since_start_ms: int


@dataclass(frozen=True)
class RunCompleted:
    elapsed_since_start_ms: int


RunEvent = Union[
    RunStarted,
    ExamplesLoaded,
    ExampleStarted,
    ResponseGenerated,
    RubricChunkGraded,
    ExampleCompleted,
    ExampleFailed,
    RunCompleted,
]


def _move_to(state: RunState, phase: RunPhase) -> RunPhase:
    if phase.rank < state.phase.rank:
        raise InvalidTransitionError(f"Cannot move run from {state.phase.value} to {phase.value}")
    return phase


def _require_running(state: RunState, event: RunEvent) -> None:
    if state.phase is not RunPhase.RUNNING:
        raise InvalidTransitionError(
            f"{type(event).__name__} is only valid while running (phase: {state.phase.value})"
        )


def reduce(state: RunState, event: RunEvent) -> RunState:
    """
    Apply one event to a run state

    Args:
        state: Current snapshot (not modified)
        event: Event produced by the evaluation loop

    Returns:
        The next snapshot

    Raises:
        InvalidTransitionError: If the event would move the phase backwards or
            arrives in a phase where it is not valid
        TypeError: For an unknown event type
    """
    if isinstance(event, RunStarted):
        return replace(
            state,
            phase=_move_to(state, RunPhase.LOADING),
            start_time=event.start_time,
            current_activity=event.activity,
        )

    if isinstance(event, ExamplesLoaded):
        return replace(
            state,
            phase=_move_to(state, RunPhase.RUNNING),
            total_examples=event.total_examples,
            current_activity="Starting evaluation...",
        )

    if isinstance(event, ExampleStarted):
        _require_running(state, event)
        return replace(
            state,
            current_example=event.index,
            current_rubric=0,
            total_rubrics=event.total_rubrics,
            current_activity=event.activity,
            current_prompt=event.prompt,
            current_question=event.question,
            current_answer=None,
        )

    if isinstance(event, ResponseGenerated):
        _require_running(state, event)
        return replace(
            state,
            current_answer=event.answer,
            model_tokens=state.model_tokens + event.usage,
            model_time_ms=state.model_time_ms + event.elapsed_ms,
            current_activity=f"Grading rubrics 0/{state.total_rubrics}...",
        )

    if isinstance(event, RubricChunkGraded):
        _require_running(state, event)
        return replace(
            state,
            current_rubric=event.graded,
            grader_tokens=state.grader_tokens + event.usage,
            grader_time_ms=state.grader_time_ms + event.elapsed_ms,
            current_activity=f"Grading rubrics {event.graded}/{event.total}...",
        )

    if isinstance(event, ExampleCompleted):
        _require_running(state, event)
        theme_scores = update_theme_scores(state.theme_scores, event.result.theme, event.result.score)
        return replace(
            state,
            completed_examples=state.completed_examples + (event.result,),
            theme_scores=MappingProxyType(theme_scores),
            current_activity=f"Completed example {state.current_example}/{state.total_examples}",
            last_completion_elapsed_ms=event.elapsed_since_start_ms,
        )

    if isinstance(event, ExampleFailed):
        _require_running(state, event)
        return replace(
            state,
            completed_examples=state.completed_examples + (event.result,),
            current_activity=f"Error on example {state.current_example}",
            last_completion_elapsed_ms=event.elapsed_since_start_ms,
            last_error=event.error,
            error_count=state.error_count + 1,
        )

    if isinstance(event, RunCompleted):
        return replace(
            state,
            phase=_move_to(state, RunPhase.COMPLETE),
            current_example=state.total_examples,
            current_rubric=0,
            total_rubrics=0,
            current_activity="Evaluation complete",
            last_completion_elapsed_ms=event.elapsed_since_start_ms,
            current_prompt=None,
            current_question=None,
            current_answer=None,
        )

    raise TypeError(f"Unknown run event: {type(event).__name__}")
