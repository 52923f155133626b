"""
Use Cases Layer

Aggregates business logic and provides use cases called from the runner.
"""

from rubric_gauge.use_cases.evaluation import (
    RunStateManager,
    StatePublisher,
    evaluate_example,
    run_evaluation,
)
from rubric_gauge.use_cases.results import (
    build_results_document,
    example_results_frame,
    load_results,
    save_results,
)
from rubric_gauge.use_cases.run_state import reduce

__all__ = [
    # evaluation
    "RunStateManager",
    "StatePublisher",
    "evaluate_example",
    "run_evaluation",
    # results
    "build_results_document",
    "example_results_frame",
    "load_results",
    "save_results",
    # run state
    "reduce",
]
