"""
rubric-gauge Result Viewer

Minimal Streamlit dashboard for browsing saved evaluation results.
Shows run metrics, theme breakdown, score distribution and per-example rubric grades.

Usage:
    pip install -e ".[viewer]"
    streamlit run src/rubric_gauge/viewer.py
    streamlit run src/rubric_gauge/viewer.py -- --results-dir results

Requires the package to be installed (e.g. via ``pip install -e .``).
"""

from __future__ import annotations

import argparse
from pathlib import Path

import pandas as pd
import plotly.graph_objects as go
import streamlit as st

from rubric_gauge.pricing import format_cost, format_cost_precise
from rubric_gauge.reporting import format_duration
from rubric_gauge.scoring.scorer import theme_display_name
from rubric_gauge.use_cases.results import load_results

# -- Colors --
SCORE_COLOR = "#1a73e8"
MET_COLOR = "#34a853"
UNMET_COLOR = "#ea4335"


def _short_model_name(name: str) -> str:
    """Shorten model name for display."""
    parts = name.split("/")
    return parts[-1] if len(parts) > 1 else name


def _find_result_files(results_dir: Path) -> list[Path]:
    """Results JSON files in results_dir, newest first (file names start with the timestamp)."""
    return sorted(results_dir.glob("*.json"), reverse=True)


def _runs_frame(documents: list[dict]) -> pd.DataFrame:
    """One row per run, for the comparison table."""
    rows = []
    for doc in documents:
        rows.append({
            "Model": _short_model_name(doc["model"]),
            "Effort": doc.get("reasoning_effort", ""),
            "Dataset": doc["dataset"],
            "Examples": doc["examples_evaluated"],
            "Score": round(doc["overall_score"] * 100, 2),
            "Std Dev": round(doc["std_dev"] * 100, 2),
            "Cost": format_cost(doc["total_cost"]),
            "Timestamp": doc["timestamp"],
        })
    return pd.DataFrame(rows)


def _theme_frame(document: dict) -> pd.DataFrame:
    """Theme breakdown of a results document."""
    rows = [
        {
            "Theme": theme_display_name(t["theme"]),
            "Examples": t["examples"],
            "Score": t["avg_score"],
        }
        for t in document.get("theme_scores", [])
    ]
    return pd.DataFrame(rows, columns=["Theme", "Examples", "Score"])


def _render_overview(document: dict) -> None:
    """Render headline metrics of one run."""
    st.header("Overview")
    examples = document["examples_evaluated"]

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Overall Score", f"{document['overall_score'] * 100:.2f}%")
    col2.metric("Std Dev", f"{document['std_dev'] * 100:.2f}%")
    col3.metric("Total Cost", format_cost(document["total_cost"]))
    col4.metric("Runtime", format_duration(document["total_time_ms"]))

    st.caption(
        f"Model cost {format_cost(document['model_cost'])} "
        f"({format_cost_precise(document['model_cost_per_example'])}/example), "
        f"grader cost {format_cost(document['grader_cost'])} | "
        f"model time {format_duration(document['model_time_ms'])}, "
        f"grader time {format_duration(document['grader_time_ms'])} | "
        f"{examples} examples"
    )
    if document.get("error_count"):
        st.warning(
            f"{document['error_count']} example(s) failed. Last error: {document.get('last_error')}"
        )


def _render_theme_scores(document: dict) -> None:
    """Render theme breakdown bar chart."""
    st.header("Themes")
    theme_df = _theme_frame(document)
    if theme_df.empty:
        st.info("No theme tags in this run.")
        return

    fig = go.Figure(go.Bar(
        x=theme_df["Score"],
        y=theme_df["Theme"],
        orientation="h",
        marker=dict(color=SCORE_COLOR),
        text=[f"{s:.1%} (n={n})" for s, n in zip(theme_df["Score"], theme_df["Examples"])],
        textposition="auto",
    ))
    fig.add_vline(
        x=document["overall_score"],
        line_dash="dash",
        line_color="#5f6368",
        line_width=1,
        annotation_text="overall",
        annotation_position="top",
        annotation_font=dict(size=11, color="#5f6368"),
    )
    fig.update_layout(
        xaxis_title="Average score",
        xaxis_range=[0, 1.05],
        yaxis=dict(autorange="reversed"),
        template="plotly_white",
        height=max(300, 40 * len(theme_df)),
    )
    st.plotly_chart(fig, use_container_width=True)


def _render_score_distribution(document: dict) -> None:
    """Render histogram of per-example scores."""
    st.header("Score Distribution")
    scores = [r["score"] for r in document["example_results"]]
    fig = go.Figure(go.Histogram(
        x=scores,
        xbins=dict(start=-1.0, end=1.0, size=0.05),
        marker=dict(color=SCORE_COLOR),
    ))
    fig.update_layout(
        xaxis_title="Example score",
        yaxis_title="Examples",
        template="plotly_white",
        height=350,
    )
    st.plotly_chart(fig, use_container_width=True)


def _render_examples(document: dict) -> None:
    """Render per-example drill-down with rubric grades."""
    st.header("Examples")
    results = document["example_results"]
    if not results:
        st.info("No examples in this run.")
        return

    table = pd.DataFrame([
        {
            "Prompt ID": r["prompt_id"],
            "Score": r["score"],
            "Points": f"{r['achieved_points']:g}/{r['total_points']:g}",
            "Rubrics": len(r["rubric_results"]),
        }
        for r in results
    ])
    st.dataframe(table, use_container_width=True, hide_index=True)

    prompt_ids = [r["prompt_id"] for r in results]
    selected = st.selectbox("Example", prompt_ids, index=0)
    result = next(r for r in results if r["prompt_id"] == selected)

    st.subheader("Model response")
    st.markdown(result["model_response"] or "_(no response)_")

    st.subheader("Rubric grades")
    for item in result["rubric_results"]:
        met = item["criteria_met"]
        icon = "✅" if met else "❌"
        color = MET_COLOR if met else UNMET_COLOR
        st.markdown(
            f"{icon} <span style='color:{color}'>**[{item['points']:g}]**</span> {item['criterion']}",
            unsafe_allow_html=True,
        )
        st.caption(item["explanation"])


def main() -> None:
    # Parse --results-dir from Streamlit args (after --)
    parser = argparse.ArgumentParser()
    parser.add_argument("--results-dir", default="results")
    args, _ = parser.parse_known_args()

    results_dir = Path(args.results_dir)

    st.set_page_config(page_title="rubric-gauge", layout="wide")
    st.title("rubric-gauge Results")

    if not results_dir.exists():
        st.error(f"Results directory not found: `{results_dir}`")
        st.info("Run an evaluation first:\n```\npython -m rubric_gauge.runner --model openai/gpt-4.1-mini -n 10\n```")
        return

    files = _find_result_files(results_dir)
    if not files:
        st.warning(f"No result files found in `{results_dir}/`")
        st.info("Run an evaluation first:\n```\npython -m rubric_gauge.runner --model openai/gpt-4.1-mini -n 10\n```")
        return

    documents = {f.name: load_results(f) for f in files}

    selected_name = st.sidebar.selectbox("Run", list(documents), index=0)
    document = documents[selected_name]

    st.sidebar.markdown("---")
    st.sidebar.markdown(f"**Model**: {document['model']}")
    if document.get("reasoning_effort"):
        st.sidebar.markdown(f"**Effort**: {document['reasoning_effort']}")
    st.sidebar.markdown(f"**Grader**: {document['grader']}")
    st.sidebar.markdown(f"**Dataset**: {document['dataset']}")
    st.sidebar.markdown(f"**Runs in directory**: {len(documents)}")

    _render_overview(document)
    _render_theme_scores(document)
    _render_score_distribution(document)
    _render_examples(document)

    st.header("All Runs")
    st.dataframe(_runs_frame(list(documents.values())), use_container_width=True, hide_index=True)


if __name__ == "__main__":
    main()
