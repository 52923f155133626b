"""
Console Reporting

ConsoleReporter is a run-state listener printing one line per finished example.
It is called for every snapshot (several per example) and only prints when
something worth showing changed. Also formats the end-of-run summary.
"""

from __future__ import annotations

import sys
import time
from typing import Mapping, TextIO

from rubric_gauge.domain.entities import RunPhase, RunState
from rubric_gauge.domain.value_objects import ModelPricing
from rubric_gauge.pricing import calculate_cost, format_cost, format_cost_precise
from rubric_gauge.scoring.scorer import (
    calculate_overall_score,
    sorted_theme_scores,
    theme_display_name,
)

BAR_WIDTH = 20


def format_duration(ms: float) -> str:
    seconds = int(ms // 1000)
    minutes = seconds // 60
    hours = minutes // 60
    if hours > 0:
        return f"{hours}h {minutes % 60}m {seconds % 60}s"
    if minutes > 0:
        return f"{minutes}m {seconds % 60}s"
    return f"{seconds}s"


def format_progress(current: int, total: int, score: float) -> str:
    """Progress bar line with the running score"""
    ratio = current / total if total else 0.0
    filled = int(ratio * BAR_WIDTH)
    bar = "█" * filled + "░" * (BAR_WIDTH - filled)
    return f"[{bar}] {current}/{total} ({ratio * 100:.1f}%) | Running score: {score * 100:.1f}%"


def estimate_remaining_ms(state: RunState, elapsed_ms: int) -> int:
    """ETA from the average time per finished example, minus time already spent on the current one"""
    completed = len(state.completed_examples)
    if completed == 0:
        return 0
    avg_per_example = state.last_completion_elapsed_ms / completed
    remaining = avg_per_example * (state.total_examples - completed)
    spent_on_current = elapsed_ms - state.last_completion_elapsed_ms
    return max(0, int(remaining - spent_on_current))


class ConsoleReporter:
    """Prints run progress from run-state snapshots"""

    def __init__(self, stream: TextIO | None = None, show_progress_bar: bool = True) -> None:
        self._stream = stream or sys.stdout
        self._show_progress_bar = show_progress_bar
        self._phase: RunPhase | None = None
        self._reported = 0

    def _print(self, text: str) -> None:
        print(text, file=self._stream, flush=True)

    def __call__(self, state: RunState) -> None:
        if state.phase is not self._phase:
            self._phase = state.phase
            if state.phase is RunPhase.RUNNING:
                self._print(f"\n=== Running Evaluation ({state.total_examples} examples) ===\n")
            elif state.phase is RunPhase.COMPLETE:
                self._print("\n=== Evaluation complete ===\n")

        completed = state.completed_examples
        while self._reported < len(completed):
            result = completed[self._reported]
            self._reported += 1
            prefix = f"[{self._reported}/{state.total_examples}] {result.prompt_id}"
            if not result.rubric_results and not result.model_response:
                self._print(f"{prefix} | ERROR: {state.last_error}")
                continue
            self._print(
                f"{prefix} | Score: {result.score:.2f} "
                f"({result.achieved_points:g}/{result.total_points:g} pts)"
            )
            if self._show_progress_bar:
                overall = calculate_overall_score(completed[:self._reported])
                elapsed_ms = int((time.time() - state.start_time) * 1000)
                eta = format_duration(estimate_remaining_ms(state, elapsed_ms))
                self._print(
                    f"  {format_progress(self._reported, state.total_examples, overall.overall_score)}"
                    f" | ETA {eta}"
                )


def format_summary(
    state: RunState,
    *,
    model: str,
    grader: str,
    dataset: str,
    pricing: Mapping[str, ModelPricing],
    reasoning_effort: str | None = None,
    total_time_ms: int | None = None,
) -> str:
    """Multi-line end-of-run summary"""
    overall = calculate_overall_score(state.completed_examples)
    example_count = len(state.completed_examples)
    model_cost = calculate_cost(state.model_tokens, model, pricing)
    grader_cost = calculate_cost(state.grader_tokens, grader, pricing)
    total_time_ms = state.last_completion_elapsed_ms if total_time_ms is None else total_time_ms

    effort = f" (effort: {reasoning_effort})" if reasoning_effort else ""
    lines = [
        "=" * 63,
        "                  RUBRIC EVALUATION RESULTS",
        "=" * 63,
        "",
        f"  Model:              {model}{effort}",
        f"  Grader:             {grader}",
        f"  Dataset:            {dataset} ({example_count} examples)",
        "",
        f"  OVERALL SCORE:      {overall.overall_score * 100:.2f}%",
        f"  Standard Dev:       {overall.std_dev * 100:.2f}%",
        "",
    ]

    themes = sorted_theme_scores(state.theme_scores)
    if themes:
        lines.append(f"  {'Theme':<32} {'Examples':>8} {'Score':>8}")
        lines.append(f"  {'-' * 32} {'-' * 8} {'-' * 8}")
        for t in themes:
            lines.append(f"  {theme_display_name(t.theme):<32} {t.examples:>8} {t.avg_score * 100:>7.1f}%")
        lines.append("")

    lines.extend([
        f"  Model tokens:       {state.model_tokens.prompt_tokens:,} in / "
        f"{state.model_tokens.completion_tokens:,} out",
        f"  Grader tokens:      {state.grader_tokens.prompt_tokens:,} in / "
        f"{state.grader_tokens.completion_tokens:,} out",
        f"  Cost:               {format_cost(model_cost + grader_cost)} "
        f"(model {format_cost(model_cost)}, grader {format_cost(grader_cost)}, "
        f"{format_cost_precise(model_cost / example_count if example_count else 0.0)}/example)",
        f"  Runtime:            {format_duration(total_time_ms)} "
        f"(model {format_duration(state.model_time_ms)} | grader {format_duration(state.grader_time_ms)})",
    ])
    if state.error_count:
        plural = "s" if state.error_count > 1 else ""
        lines.append(f"  Errors:             {state.error_count} error{plural}. Last error: {state.last_error}")
    lines.append("=" * 63)
    return "\n".join(lines)
