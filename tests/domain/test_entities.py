"""
Domain entity tests
"""

import pytest
from dataclasses import FrozenInstanceError

from rubric_gauge.domain.entities import (
    BenchmarkExample,
    ExampleResult,
    RunPhase,
    RunState,
    ThemeScore,
)
from rubric_gauge.domain.value_objects import Message, RubricItem, RubricResult, TokenUsage


def _example_dict(**overrides) -> dict:
    data = {
        "prompt_id": "p-1",
        "prompt": [
            {"role": "user", "content": "I have a headache"},
            {"role": "assistant", "content": "How long has it lasted?"},
            {"role": "user", "content": "Two days"},
        ],
        "rubrics": [
            {"criterion": "Asks about severity", "points": 5, "tags": ["axis:context_awareness"]},
            {"criterion": "Recommends opioids", "points": -8},
        ],
        "example_tags": ["theme:context_seeking", "physician_agreed_category:enough-context"],
    }
    data.update(overrides)
    return data


class TestBenchmarkExample:
    """BenchmarkExample tests"""

    def test_from_dict(self):
        ex = BenchmarkExample.from_dict(_example_dict())
        assert ex.prompt_id == "p-1"
        assert len(ex.prompt) == 3
        assert ex.prompt[0] == Message(role="user", content="I have a headache")
        assert [r.points for r in ex.rubrics] == [5, -8]
        assert ex.rubrics[0].tags == ("axis:context_awareness",)
        assert ex.example_tags == ["theme:context_seeking", "physician_agreed_category:enough-context"]

    def test_from_dict_without_tags(self):
        data = _example_dict()
        del data["example_tags"]
        ex = BenchmarkExample.from_dict(data)
        assert ex.example_tags == []

    def test_from_dict_missing_required_field(self):
        data = _example_dict()
        del data["rubrics"]
        with pytest.raises(KeyError):
            BenchmarkExample.from_dict(data)

    def test_last_user_message(self):
        ex = BenchmarkExample.from_dict(_example_dict())
        assert ex.last_user_message == "Two days"

    def test_last_user_message_none_without_user_turn(self):
        ex = BenchmarkExample(
            prompt_id="p",
            prompt=[Message(role="system", content="sys")],
            rubrics=[RubricItem(criterion="c", points=1)],
        )
        assert ex.last_user_message is None


class TestExampleResult:
    """ExampleResult tests"""

    def test_failed_placeholder(self):
        r = ExampleResult.failed("p-9", theme="hedging")
        assert r.prompt_id == "p-9"
        assert r.model_response == ""
        assert r.rubric_results == ()
        assert r.achieved_points == 0
        assert r.total_points == 1
        assert r.score == 0.0
        assert r.theme == "hedging"

    def test_to_dict_excludes_theme(self):
        r = ExampleResult(
            prompt_id="p",
            model_response="answer",
            rubric_results=(RubricResult("c", 5, True, "met"),),
            achieved_points=5,
            total_points=5,
            score=1.0,
            theme="hedging",
        )
        d = r.to_dict()
        assert "theme" not in d
        assert d["rubric_results"] == [
            {"criterion": "c", "points": 5, "criteria_met": True, "explanation": "met"}
        ]
        assert d["score"] == 1.0

    def test_is_immutable(self):
        r = ExampleResult.failed("p")
        with pytest.raises(FrozenInstanceError):
            r.score = 1.0


class TestThemeScore:
    """ThemeScore tests"""

    def test_add_returns_new_value(self):
        t = ThemeScore(theme="hedging")
        t2 = t.add(0.5)
        assert t.examples == 0
        assert t2.examples == 1
        assert t2.avg_score == pytest.approx(0.5)

    def test_running_average(self):
        t = ThemeScore(theme="hedging").add(1.0).add(0.0).add(0.5)
        assert t.examples == 3
        assert t.total_score == pytest.approx(1.5)
        assert t.avg_score == pytest.approx(0.5)

    def test_to_dict(self):
        d = ThemeScore(theme="hedging").add(0.25).to_dict()
        assert d == {"theme": "hedging", "examples": 1, "total_score": 0.25, "avg_score": 0.25}


class TestRunPhase:
    """RunPhase tests"""

    def test_rank_order(self):
        assert RunPhase.LOADING.rank < RunPhase.RUNNING.rank < RunPhase.COMPLETE.rank

    def test_string_values(self):
        assert RunPhase.RUNNING == "running"


class TestRunState:
    """RunState tests"""

    def test_initial_defaults(self):
        state = RunState.initial(start_time=100.0)
        assert state.phase is RunPhase.LOADING
        assert state.start_time == 100.0
        assert state.current_activity == "Initializing..."
        assert state.completed_examples == ()
        assert state.model_tokens == TokenUsage()
        assert state.grader_tokens == TokenUsage()
        assert dict(state.theme_scores) == {}
        assert state.error_count == 0
        assert state.last_error is None

    def test_initial_uses_current_time(self):
        state = RunState.initial()
        assert state.start_time > 0

    def test_theme_scores_read_only(self):
        state = RunState.initial()
        with pytest.raises(TypeError):
            state.theme_scores["x"] = ThemeScore(theme="x")

    def test_is_immutable(self):
        state = RunState.initial()
        with pytest.raises(FrozenInstanceError):
            state.phase = RunPhase.COMPLETE
