"""
Evaluation Execution

Drives a run example by example: generate a response, grade every rubric item,
score, and publish a new RunState snapshot after each step. The loop is the only
writer of run state; listeners receive immutable snapshots.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Sequence, Union

from rubric_gauge.domain.constants import DEFAULT_CONCURRENCY, SYSTEM_PROMPT
from rubric_gauge.domain.entities import BenchmarkExample, ExampleResult, RunState
from rubric_gauge.domain.value_objects import Message, TokenUsage
from rubric_gauge.infrastructure.model_clients.base import ModelClient
from rubric_gauge.scoring.rubric_grader import RubricGrader
from rubric_gauge.scoring.scheduler import ChunkProgress, grade_example
from rubric_gauge.scoring.scorer import calculate_example_score, get_theme
from rubric_gauge.use_cases.run_state import (
    ExampleCompleted,
    ExampleFailed,
    ExampleStarted,
    ExamplesLoaded,
    ResponseGenerated,
    RubricChunkGraded,
    RunCompleted,
    RunEvent,
    RunStarted,
    reduce,
)

logger = logging.getLogger(__name__)

StateListener = Callable[[RunState], None]
ExampleSource = Union[Sequence[BenchmarkExample], Callable[[], Sequence[BenchmarkExample]]]


class StatePublisher:
    """One-directional fan-out of run-state snapshots to listeners"""

    def __init__(self) -> None:
        self._listeners: list[StateListener] = []

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a listener; returns a function that unsubscribes it"""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def publish(self, state: RunState) -> None:
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.warning("State listener %r failed", listener, exc_info=True)


class RunStateManager:
    """Owns the authoritative RunState and applies events to it"""

    def __init__(self, publisher: StatePublisher, start_time: float | None = None) -> None:
        self._publisher = publisher
        self._state = RunState.initial(start_time)

    @property
    def state(self) -> RunState:
        return self._state

    def elapsed_ms(self) -> int:
        return int((time.time() - self._state.start_time) * 1000)

    def dispatch(self, event: RunEvent) -> RunState:
        self._state = reduce(self._state, event)
        self._publisher.publish(self._state)
        return self._state


def evaluate_example(
    example: BenchmarkExample,
    model_client: ModelClient,
    grader: RubricGrader,
    manager: RunStateManager,
    *,
    concurrency: int = DEFAULT_CONCURRENCY,
    reasoning_effort: str | None = None,
    model_temperature: float | None = None,
) -> ExampleResult:
    """
    Generate a response for one example and grade it.

    Token usage and timings are folded into the run state through the manager:
    once after generation and once after every grading chunk.

    Args:
        example: Dataset example
        model_client: Client for the evaluated model
        grader: Grading protocol bound to the grader model
        manager: Run-state owner
        concurrency: Maximum number of grader calls in flight
        reasoning_effort: Reasoning effort passed to the evaluated model
        model_temperature: Sampling temperature for the evaluated model

    Returns:
        ExampleResult: Scored result

    Raises:
        Exception: Whatever the model client raises for the generation call
    """
    messages = [Message(role="system", content=SYSTEM_PROMPT), *example.prompt]

    start_time = time.time()
    response = model_client.chat(
        messages,
        temperature=model_temperature,
        reasoning_effort=reasoning_effort,
    )
    manager.dispatch(ResponseGenerated(
        answer=response.output,
        usage=response.usage,
        elapsed_ms=int((time.time() - start_time) * 1000),
    ))

    def _on_chunk(progress: ChunkProgress) -> None:
        usage = sum((g.usage for g in progress.grades), TokenUsage())
        manager.dispatch(RubricChunkGraded(
            graded=progress.graded,
            total=progress.total,
            usage=usage,
            elapsed_ms=progress.elapsed_ms,
        ))

    grades = grade_example(
        grader,
        example.prompt,
        response.output,
        example.rubrics,
        concurrency=concurrency,
        on_chunk=_on_chunk,
    )
    rubric_results = tuple(g.result for g in grades)
    example_score = calculate_example_score(rubric_results)

    return ExampleResult(
        prompt_id=example.prompt_id,
        model_response=response.output,
        rubric_results=rubric_results,
        achieved_points=example_score.achieved_points,
        total_points=example_score.total_points,
        score=example_score.score,
        theme=get_theme(example.example_tags),
    )


def run_evaluation(
    examples: ExampleSource,
    model_client: ModelClient,
    grader_client: ModelClient,
    *,
    concurrency: int = DEFAULT_CONCURRENCY,
    reasoning_effort: str | None = None,
    model_temperature: float | None = None,
    on_state: StateListener | None = None,
) -> RunState:
    """
    Execute an evaluation run.

    Examples are processed strictly in order. A failure on the first example is
    treated as misconfiguration (bad API key, wrong model id) and propagates.
    Failures on later examples are recorded as zero-scored placeholders and the
    run continues.

    Args:
        examples: Examples, or a callable that loads them (called while in the loading phase)
        model_client: Client for the evaluated model
        grader_client: Client for the grader model
        concurrency: Maximum number of grader calls in flight per example
        reasoning_effort: Reasoning effort passed to the evaluated model
        model_temperature: Sampling temperature for the evaluated model
        on_state: Listener receiving every published snapshot

    Returns:
        RunState: The final snapshot (phase complete)

    Raises:
        ValueError: If concurrency is less than 1
        Exception: The first example's failure
    """
    if concurrency < 1:
        raise ValueError("concurrency must be at least 1.")

    publisher = StatePublisher()
    if on_state is not None:
        publisher.subscribe(on_state)
    manager = RunStateManager(publisher)
    grader = RubricGrader(grader_client)

    manager.dispatch(RunStarted(start_time=manager.state.start_time))
    loaded = list(examples() if callable(examples) else examples)
    manager.dispatch(ExamplesLoaded(total_examples=len(loaded)))
    logger.info("Evaluating %d examples with %s", len(loaded), model_client.model_name)

    for index, example in enumerate(loaded, start=1):
        manager.dispatch(ExampleStarted(
            index=index,
            prompt=tuple(example.prompt),
            question=example.last_user_message or "(no question)",
            total_rubrics=len(example.rubrics),
            activity=f"Getting response from {model_client.model_name}...",
        ))

        try:
            result = evaluate_example(
                example,
                model_client,
                grader,
                manager,
                concurrency=concurrency,
                reasoning_effort=reasoning_effort,
                model_temperature=model_temperature,
            )
        except Exception as e:
            if index == 1:
                logger.error("First example %s failed, aborting run: %s", example.prompt_id, e)
                raise
            logger.warning("Example %s failed: %s", example.prompt_id, e)
            manager.dispatch(ExampleFailed(
                result=ExampleResult.failed(example.prompt_id, get_theme(example.example_tags)),
                error=str(e) or type(e).__name__,
                elapsed_since_start_ms=manager.elapsed_ms(),
            ))
            continue

        manager.dispatch(ExampleCompleted(
            result=result,
            elapsed_since_start_ms=manager.elapsed_ms(),
        ))
        logger.debug("Example %s scored %.3f", example.prompt_id, result.score)

    return manager.dispatch(RunCompleted(elapsed_since_start_ms=manager.elapsed_ms()))
