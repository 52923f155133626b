"""
Run state reducer tests
"""

import pytest

from rubric_gauge.domain.entities import ExampleResult, RunPhase, RunState
from rubric_gauge.domain.errors import InvalidTransitionError
from rubric_gauge.domain.value_objects import Message, TokenUsage
from rubric_gauge.use_cases.run_state import (
    ExampleCompleted,
    ExampleFailed,
    ExampleStarted,
    ExamplesLoaded,
    ResponseGenerated,
    RubricChunkGraded,
    RunCompleted,
    RunStarted,
    reduce,
)


def _running(total=3) -> RunState:
    state = reduce(RunState.initial(start_time=1000.0), RunStarted(start_time=1000.0))
    return reduce(state, ExamplesLoaded(total_examples=total))


def _started(state: RunState, index=1, rubrics=4) -> RunState:
    return reduce(state, ExampleStarted(
        index=index,
        prompt=(Message("user", "Question?"),),
        question="Question?",
        total_rubrics=rubrics,
        activity="Getting response from test-model...",
    ))


def _result(score=1.0, theme="hedging") -> ExampleResult:
    return ExampleResult(
        prompt_id="p",
        model_response="answer",
        rubric_results=(),
        achieved_points=score * 10,
        total_points=10,
        score=score,
        theme=theme,
    )


class TestPhaseTransitions:
    """Phase ordering"""

    def test_run_started_stays_loading(self):
        state = reduce(RunState.initial(start_time=0.0), RunStarted(start_time=5.0))
        assert state.phase is RunPhase.LOADING
        assert state.start_time == 5.0
        assert state.current_activity == "Loading dataset..."

    def test_examples_loaded_moves_to_running(self):
        state = _running(total=7)
        assert state.phase is RunPhase.RUNNING
        assert state.total_examples == 7

    def test_run_completed(self):
        state = reduce(_running(), RunCompleted(elapsed_since_start_ms=900))
        assert state.phase is RunPhase.COMPLETE
        assert state.current_activity == "Evaluation complete"
        assert state.last_completion_elapsed_ms == 900
        assert state.current_example == state.total_examples

    def test_cannot_move_backwards(self):
        complete = reduce(_running(), RunCompleted(elapsed_since_start_ms=1))
        with pytest.raises(InvalidTransitionError):
            reduce(complete, ExamplesLoaded(total_examples=1))
        with pytest.raises(InvalidTransitionError):
            reduce(complete, RunStarted(start_time=0.0))

    @pytest.mark.parametrize("event", [
        ExampleStarted(index=1, prompt=(), question="q", total_rubrics=1, activity="a"),
        ResponseGenerated(answer="a", usage=TokenUsage(), elapsed_ms=1),
        RubricChunkGraded(graded=1, total=1, usage=TokenUsage(), elapsed_ms=1),
        ExampleCompleted(result=ExampleResult.failed("p"), elapsed_since_start_ms=1),
    ])
    def test_example_events_require_running(self, event):
        with pytest.raises(InvalidTransitionError, match="only valid while running"):
            reduce(RunState.initial(), event)

    def test_unknown_event(self):
        with pytest.raises(TypeError, match="Unknown run event"):
            reduce(RunState.initial(), object())


class TestExampleProgress:
    """Per-example events"""

    def test_example_started_resets_current_example(self):
        state = _started(_running())
        state = reduce(state, ResponseGenerated(answer="old", usage=TokenUsage(), elapsed_ms=1))
        state = _started(state, index=2, rubrics=6)

        assert state.current_example == 2
        assert state.total_rubrics == 6
        assert state.current_rubric == 0
        assert state.current_answer is None
        assert state.current_question == "Question?"

    def test_response_generated_accumulates_model_usage(self):
        state = _started(_running())
        state = reduce(state, ResponseGenerated(
            answer="a", usage=TokenUsage(10, 5, 15), elapsed_ms=200
        ))
        state = reduce(state, ResponseGenerated(
            answer="b", usage=TokenUsage(1, 1, 2), elapsed_ms=50
        ))

        assert state.current_answer == "b"
        assert state.model_tokens == TokenUsage(11, 6, 17)
        assert state.model_time_ms == 250
        assert state.current_activity == "Grading rubrics 0/4..."

    def test_chunk_graded_accumulates_grader_usage(self):
        state = _started(_running())
        state = reduce(state, RubricChunkGraded(graded=2, total=4, usage=TokenUsage(20, 4, 24), elapsed_ms=300))
        state = reduce(state, RubricChunkGraded(graded=4, total=4, usage=TokenUsage(20, 4, 24), elapsed_ms=100))

        assert state.current_rubric == 4
        assert state.grader_tokens == TokenUsage(40, 8, 48)
        assert state.grader_time_ms == 400
        assert state.current_activity == "Grading rubrics 4/4..."

    def test_example_completed_updates_theme_scores(self):
        state = _started(_running())
        state = reduce(state, ExampleCompleted(result=_result(0.2), elapsed_since_start_ms=100))
        state = reduce(state, ExampleCompleted(result=_result(0.8), elapsed_since_start_ms=200))

        assert len(state.completed_examples) == 2
        assert state.theme_scores["hedging"].examples == 2
        assert state.theme_scores["hedging"].avg_score == pytest.approx(0.5)
        assert state.last_completion_elapsed_ms == 200

    def test_example_without_theme(self):
        state = reduce(_started(_running()), ExampleCompleted(
            result=_result(1.0, theme=None), elapsed_since_start_ms=1
        ))
        assert dict(state.theme_scores) == {}

    def test_example_failed_records_placeholder(self):
        state = _started(_running(), index=3)
        state = reduce(state, ExampleFailed(
            result=ExampleResult.failed("p3", theme="hedging"),
            error="timeout",
            elapsed_since_start_ms=500,
        ))

        assert len(state.completed_examples) == 1
        assert state.completed_examples[0].score == 0.0
        assert state.error_count == 1
        assert state.last_error == "timeout"
        assert state.current_activity == "Error on example 3"
        # Failures do not feed the theme rollup
        assert dict(state.theme_scores) == {}


class TestImmutability:
    """The reducer never modifies its input"""

    def test_input_state_unchanged(self):
        before = _started(_running())
        after = reduce(before, ExampleCompleted(result=_result(), elapsed_since_start_ms=1))

        assert before.completed_examples == ()
        assert dict(before.theme_scores) == {}
        assert after is not before

    def test_theme_scores_snapshot_is_read_only(self):
        state = reduce(_started(_running()), ExampleCompleted(result=_result(), elapsed_since_start_ms=1))
        with pytest.raises(TypeError):
            state.theme_scores["other"] = None
