"""
Scoring sub-package

Provides the rubric grading protocol, the concurrent grading scheduler and the
score calculations.
"""

from rubric_gauge.scoring.rubric_grader import (
    GRADER_TEMPLATE,
    RubricGrade,
    RubricGrader,
    build_grader_prompt,
    grade_rubric_item,
    parse_grader_reply,
)
from rubric_gauge.scoring.scheduler import ChunkProgress, grade_example
from rubric_gauge.scoring.scorer import (
    ExampleScore,
    OverallScore,
    calculate_example_score,
    calculate_overall_score,
    get_theme,
    sorted_theme_scores,
    update_theme_scores,
)

__all__ = [
    # grading protocol
    "GRADER_TEMPLATE",
    "RubricGrade",
    "RubricGrader",
    "build_grader_prompt",
    "grade_rubric_item",
    "parse_grader_reply",
    # scheduler
    "ChunkProgress",
    "grade_example",
    # scorer
    "ExampleScore",
    "OverallScore",
    "calculate_example_score",
    "calculate_overall_score",
    "get_theme",
    "sorted_theme_scores",
    "update_theme_scores",
]
