"""
Score calculation

Pure functions computing per-example scores, the run's overall score and the
per-theme rollup from rubric results.
"""

from __future__ import annotations

import statistics
from dataclasses import dataclass
from typing import Iterable, Mapping, Sequence

from rubric_gauge.domain.constants import THEME_NAMES, THEME_TAG_PREFIX
from rubric_gauge.domain.entities import ExampleResult, ThemeScore
from rubric_gauge.domain.value_objects import RubricResult


@dataclass(frozen=True)
class ExampleScore:
    """Points and score of one example"""
    achieved_points: float
    total_points: float
    score: float


@dataclass(frozen=True)
class OverallScore:
    """Aggregate score of a run"""
    overall_score: float
    std_dev: float


def calculate_example_score(rubric_results: Sequence[RubricResult]) -> ExampleScore:
    """
    Calculate the score of a single example

    The total only counts positive rubric points. Achieved points count every met
    rubric, so a met negative rubric subtracts from the result. The score is not
    clipped here.

    Args:
        rubric_results: Grader verdicts for the example

    Returns:
        ExampleScore (score is 0 when total_points is 0)
    """
    total_points = sum(r.points for r in rubric_results if r.points > 0)
    achieved_points = sum(r.points for r in rubric_results if r.criteria_met)
    score = achieved_points / total_points if total_points > 0 else 0.0
    return ExampleScore(
        achieved_points=achieved_points,
        total_points=total_points,
        score=score,
    )


def calculate_overall_score(example_results: Sequence[ExampleResult]) -> OverallScore:
    """
    Calculate the overall score of a run

    Args:
        example_results: Completed example results (placeholders included)

    Returns:
        OverallScore: mean clipped to [0, 1] and the population standard
        deviation of the unclipped scores (both 0 when there are no results)
    """
    if not example_results:
        return OverallScore(overall_score=0.0, std_dev=0.0)

    scores = [r.score for r in example_results]
    mean = statistics.mean(scores)

    return OverallScore(
        overall_score=max(0.0, min(1.0, mean)),
        std_dev=statistics.pstdev(scores),
    )


def get_theme(tags: Iterable[str]) -> str | None:
    """Extract the theme name from example tags (first `theme:` tag wins)"""
    for tag in tags:
        if tag.startswith(THEME_TAG_PREFIX):
            return tag[len(THEME_TAG_PREFIX):]
    return None


def update_theme_scores(
    theme_scores: Mapping[str, ThemeScore],
    theme: str | None,
    score: float,
) -> dict[str, ThemeScore]:
    """
    Fold one example score into the theme rollup

    Args:
        theme_scores: Current rollup (not modified)
        theme: Theme of the example, or None
        score: Example score

    Returns:
        A new mapping; unchanged copy when theme is None
    """
    updated = dict(theme_scores)
    if not theme:
        return updated
    existing = updated.get(theme, ThemeScore(theme=theme))
    updated[theme] = existing.add(score)
    return updated


def sorted_theme_scores(theme_scores: Mapping[str, ThemeScore]) -> list[ThemeScore]:
    """Theme scores sorted by average score (descending)"""
    return sorted(theme_scores.values(), key=lambda t: t.avg_score, reverse=True)


def theme_display_name(theme: str) -> str:
    return THEME_NAMES.get(theme, theme)
