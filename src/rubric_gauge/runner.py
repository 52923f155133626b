"""
rubric-gauge CLI Runner

Evaluates a model on a HealthBench dataset: generates a response per example,
grades it rubric by rubric with a grader model and writes the results.

Usage:
    python -m rubric_gauge.runner --model openai/gpt-3.5-turbo --examples 10
    python -m rubric_gauge.runner --model anthropic/claude-3.5-sonnet --dataset hard
    python -m rubric_gauge.runner --model openai/o3 --reasoning-effort high -c 10
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from functools import partial

from dotenv import load_dotenv

from rubric_gauge.dataset_loader import load_examples
from rubric_gauge.domain.constants import DATASET_URLS, REASONING_EFFORTS
from rubric_gauge.domain.errors import DatasetError
from rubric_gauge.harness_config import HarnessConfig, load_config
from rubric_gauge.infrastructure.model_clients.factory import create_client
from rubric_gauge.pricing import fetch_model_pricing
from rubric_gauge.reporting import ConsoleReporter, format_summary
from rubric_gauge.use_cases.evaluation import run_evaluation
from rubric_gauge.use_cases.results import save_results

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="rubric-gauge: Evaluate a model on a rubric-graded benchmark",
    )
    parser.add_argument(
        "-m", "--model",
        required=True,
        help="Model to evaluate (OpenRouter id, claude-*, vertex/*, lmstudio/*)",
    )
    parser.add_argument(
        "-n", "--examples",
        type=int,
        default=None,
        help="Number of examples to evaluate (default: all, or RUBRIC_GAUGE_NUM_EXAMPLES)",
    )
    parser.add_argument(
        "-d", "--dataset",
        choices=list(DATASET_URLS),
        default=None,
        help="Dataset variant (default: main, or RUBRIC_GAUGE_DATASET)",
    )
    parser.add_argument(
        "-g", "--grader",
        default=None,
        help="Grader model (default: RUBRIC_GAUGE_GRADER_MODEL or openai/gpt-4.1)",
    )
    parser.add_argument(
        "-o", "--output",
        default=None,
        help="Output directory (default: results)",
    )
    parser.add_argument(
        "-c", "--concurrency",
        type=int,
        default=None,
        help="Concurrent grading requests per example (default: 5)",
    )
    parser.add_argument(
        "-r", "--reasoning-effort",
        choices=REASONING_EFFORTS,
        default=None,
        help="Reasoning effort for reasoning models",
    )
    parser.add_argument(
        "--no-random-sample",
        action="store_true",
        help="Take the first N examples instead of a random sample",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for example sampling",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (default: WARNING, or RUBRIC_GAUGE_LOG_LEVEL)",
    )
    return parser.parse_args(argv)


def apply_args(config: HarnessConfig, args: argparse.Namespace) -> HarnessConfig:
    """Override env-based configuration with CLI flags"""
    evaluation = config.evaluation
    overrides = {
        "dataset": args.dataset,
        "num_examples": args.examples,
        "output_dir": args.output,
        "concurrency": args.concurrency,
        "reasoning_effort": args.reasoning_effort,
        "log_level": args.log_level,
    }
    evaluation = replace(evaluation, **{k: v for k, v in overrides.items() if v is not None})
    if args.no_random_sample:
        evaluation = replace(evaluation, random_sample=False)

    grader = config.grader
    if args.grader:
        grader = replace(grader, grader_model=args.grader)

    return replace(config, evaluation=evaluation, grader=grader).validate()


def main(argv: list[str] | None = None) -> int:
    load_dotenv(".env.local")
    load_dotenv()
    args = parse_args(argv)

    try:
        config = apply_args(load_config(), args)
    except ValueError as e:
        print(f"ERROR: {e}")
        return 1

    ev = config.evaluation
    logging.basicConfig(
        level=ev.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    grader_model = config.grader.grader_model

    print("\n=== rubric-gauge ===\n")
    print(f"  Model:       {args.model}")
    if ev.reasoning_effort:
        print(f"  Effort:      {ev.reasoning_effort}")
    print(f"  Grader:      {grader_model}")
    print(f"  Dataset:     {ev.dataset}")
    print(f"  Examples:    {ev.num_examples or 'all'}")
    print(f"  Concurrency: {ev.concurrency}")
    print()

    try:
        model_client = create_client(args.model, config)
        grader_client = create_client(grader_model, config)
    except ValueError as e:
        print(f"ERROR: {e}")
        return 1

    pricing = fetch_model_pricing()
    loader = partial(
        load_examples,
        ev.dataset,
        ev.num_examples,
        random_sample=ev.random_sample,
        data_dir=ev.data_dir,
        seed=args.seed,
    )

    try:
        final_state = run_evaluation(
            loader,
            model_client,
            grader_client,
            concurrency=ev.concurrency,
            reasoning_effort=ev.reasoning_effort,
            model_temperature=ev.model_temperature,
            on_state=ConsoleReporter(),
        )
    except DatasetError as e:
        print(f"\nERROR: {e}")
        return 1
    except Exception as e:
        logger.debug("Run aborted", exc_info=True)
        print(f"\nERROR: evaluation aborted on the first example: {e}")
        print("  Check the API key and the model ids.")
        return 1

    print(format_summary(
        final_state,
        model=args.model,
        grader=grader_model,
        dataset=ev.dataset,
        pricing=pricing,
        reasoning_effort=ev.reasoning_effort,
    ))

    results_path = save_results(
        final_state,
        model=args.model,
        grader=grader_model,
        dataset=ev.dataset,
        output_dir=ev.output_dir,
        pricing=pricing,
        reasoning_effort=ev.reasoning_effort,
    )
    print("\n=== Output ===\n")
    print(f"  Results: {results_path}")
    print(f"  Examples CSV: {results_path.with_name(f'examples_{results_path.stem}.csv')}")
    print()
    return 0


if __name__ == "__main__":
    sys.exit(main())
