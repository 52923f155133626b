"""
Result Persistence

Builds the results document of a finished run and writes it as JSON, plus a
per-example CSV for spreadsheet use.
"""

from __future__ import annotations

import json
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Mapping

import pandas as pd

from rubric_gauge.domain.entities import RunState
from rubric_gauge.domain.value_objects import ModelPricing
from rubric_gauge.pricing import calculate_cost
from rubric_gauge.scoring.scorer import calculate_overall_score, sorted_theme_scores


def build_results_document(
    state: RunState,
    *,
    model: str,
    grader: str,
    dataset: str,
    pricing: Mapping[str, ModelPricing],
    reasoning_effort: str | None = None,
    timestamp: datetime | None = None,
    finished_at: float | None = None,
) -> dict:
    """
    Build the JSON-serializable results document

    Args:
        state: Final run state
        model: Evaluated model id
        grader: Grader model id
        dataset: Dataset name
        pricing: Model pricing used for cost estimates
        reasoning_effort: Reasoning effort, included only when set
        timestamp: Result timestamp (default: now, UTC)
        finished_at: Epoch seconds used for total_time_ms (default: now)

    Returns:
        dict
    """
    timestamp = timestamp or datetime.now(timezone.utc)
    finished_at = time.time() if finished_at is None else finished_at

    overall = calculate_overall_score(state.completed_examples)
    model_cost = calculate_cost(state.model_tokens, model, pricing)
    grader_cost = calculate_cost(state.grader_tokens, grader, pricing)
    example_count = len(state.completed_examples)

    document: dict = {"model": model}
    if reasoning_effort:
        document["reasoning_effort"] = reasoning_effort
    document.update({
        "grader": grader,
        "dataset": dataset,
        "timestamp": timestamp.isoformat(),
        "examples_evaluated": example_count,
        "overall_score": overall.overall_score,
        "std_dev": overall.std_dev,
        "model_tokens": state.model_tokens.to_dict(),
        "grader_tokens": state.grader_tokens.to_dict(),
        "model_cost": model_cost,
        "model_cost_per_example": model_cost / example_count if example_count else 0.0,
        "grader_cost": grader_cost,
        "total_cost": model_cost + grader_cost,
        "model_time_ms": state.model_time_ms,
        "model_time_per_example_ms": state.model_time_ms / example_count if example_count else 0.0,
        "grader_time_ms": state.grader_time_ms,
        "total_time_ms": int((finished_at - state.start_time) * 1000),
        "error_count": state.error_count,
        "last_error": state.last_error,
        "theme_scores": [t.to_dict() for t in sorted_theme_scores(state.theme_scores)],
        "example_results": [r.to_dict() for r in state.completed_examples],
    })
    return document


def results_filename(timestamp: datetime, model: str, example_count: int) -> str:
    """YYYY-MM-DD-HH-MM-SS_<model>_<n>.json (sorts chronologically)"""
    safe_timestamp = timestamp.strftime("%Y-%m-%d-%H-%M-%S")
    safe_model = model.replace("/", "_")
    return f"{safe_timestamp}_{safe_model}_{example_count}.json"


def example_results_frame(state: RunState) -> pd.DataFrame:
    """One row per example result"""
    rows = []
    for r in state.completed_examples:
        rows.append({
            "prompt_id": r.prompt_id,
            "theme": r.theme or "",
            "score": r.score,
            "achieved_points": r.achieved_points,
            "total_points": r.total_points,
            "rubrics_met": sum(1 for rr in r.rubric_results if rr.criteria_met),
            "rubric_count": len(r.rubric_results),
            "failed": not r.rubric_results and not r.model_response,
        })
    return pd.DataFrame(
        rows,
        columns=[
            "prompt_id", "theme", "score", "achieved_points", "total_points",
            "rubrics_met", "rubric_count", "failed",
        ],
    )


def save_results(
    state: RunState,
    *,
    model: str,
    grader: str,
    dataset: str,
    output_dir: str | Path,
    pricing: Mapping[str, ModelPricing],
    reasoning_effort: str | None = None,
    timestamp: datetime | None = None,
) -> Path:
    """
    Write the results JSON and the per-example CSV

    Args:
        state: Final run state
        model: Evaluated model id
        grader: Grader model id
        dataset: Dataset name
        output_dir: Output directory (created if missing)
        pricing: Model pricing used for cost estimates
        reasoning_effort: Reasoning effort, included only when set
        timestamp: Result timestamp (default: now, UTC)

    Returns:
        Path: Path of the JSON file (the CSV sits next to it as examples_<name>.csv)
    """
    timestamp = timestamp or datetime.now(timezone.utc)
    document = build_results_document(
        state,
        model=model,
        grader=grader,
        dataset=dataset,
        pricing=pricing,
        reasoning_effort=reasoning_effort,
        timestamp=timestamp,
    )

    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)
    json_path = output_path / results_filename(timestamp, model, len(state.completed_examples))
    with open(json_path, "w", encoding="utf-8") as f:
        json.dump(document, f, ensure_ascii=False, indent=2)

    example_results_frame(state).to_csv(
        output_path / f"examples_{json_path.stem}.csv", index=False
    )
    return json_path


def load_results(file_path: str | Path) -> dict:
    """Read a results JSON written by save_results"""
    with open(file_path, "r", encoding="utf-8") as f:
        return json.load(f)
