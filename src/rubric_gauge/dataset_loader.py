"""
Dataset Loader

Downloads HealthBench JSONL datasets, caches them locally and parses them into
BenchmarkExample objects.
"""

from __future__ import annotations

import json
import logging
import random
from pathlib import Path

import httpx

from rubric_gauge.domain.constants import DATASET_URLS
from rubric_gauge.domain.entities import BenchmarkExample
from rubric_gauge.domain.errors import DatasetError

logger = logging.getLogger(__name__)


def get_local_path(dataset: str, data_dir: str | Path = "data") -> Path:
    return Path(data_dir) / f"{dataset}.jsonl"


def download_dataset(
    dataset: str,
    data_dir: str | Path = "data",
    timeout_seconds: float = 120.0,
) -> Path:
    """
    Download a dataset unless it is already cached

    Args:
        dataset: Dataset name (main / hard / consensus)
        data_dir: Cache directory
        timeout_seconds: Download timeout

    Returns:
        Path: Local JSONL path

    Raises:
        DatasetError: If the dataset is unknown or the download fails
    """
    if dataset not in DATASET_URLS:
        raise DatasetError(f"Unknown dataset: {dataset} (available: {list(DATASET_URLS)})")

    local_path = get_local_path(dataset, data_dir)
    if local_path.exists():
        logger.info("Using cached dataset: %s", local_path)
        return local_path

    url = DATASET_URLS[dataset]
    logger.info("Downloading %s dataset from %s", dataset, url)
    tmp_path = local_path.with_suffix(".jsonl.part")
    try:
        local_path.parent.mkdir(parents=True, exist_ok=True)
        with httpx.stream("GET", url, timeout=timeout_seconds, follow_redirects=True) as response:
            response.raise_for_status()
            with open(tmp_path, "wb") as f:
                for chunk in response.iter_bytes():
                    f.write(chunk)
        tmp_path.replace(local_path)
    except (httpx.HTTPError, OSError) as e:
        if tmp_path.exists():
            tmp_path.unlink()
        raise DatasetError(f"Failed to download dataset '{dataset}': {e}") from e

    logger.info("Dataset saved to %s", local_path)
    return local_path


def read_examples(file_path: str | Path) -> list[BenchmarkExample]:
    """
    Parse a JSONL dataset file

    Lines that are blank are ignored; lines that fail to parse are logged and skipped.

    Args:
        file_path: Path to the JSONL file

    Returns:
        list[BenchmarkExample]: Examples in file order

    Raises:
        FileNotFoundError: If the file does not exist
    """
    examples = []
    with open(file_path, "r", encoding="utf-8") as f:
        for line_no, line in enumerate(f, start=1):
            if not line.strip():
                continue
            try:
                examples.append(BenchmarkExample.from_dict(json.loads(line)))
            except (json.JSONDecodeError, KeyError, TypeError) as e:
                logger.warning("Failed to parse line %d of %s: %s", line_no, file_path, e)
    return examples


def select_examples(
    examples: list[BenchmarkExample],
    limit: int | None = None,
    random_sample: bool = True,
    seed: int | None = None,
) -> list[BenchmarkExample]:
    """
    Limit the example list

    Args:
        examples: All examples
        limit: Maximum number of examples (None = all)
        random_sample: Randomly sample instead of taking the first `limit`
        seed: Random seed for reproducible sampling

    Returns:
        list[BenchmarkExample]
    """
    if not limit or limit >= len(examples):
        return list(examples)
    if random_sample:
        return random.Random(seed).sample(examples, limit)
    return examples[:limit]


def load_examples(
    dataset: str,
    limit: int | None = None,
    *,
    random_sample: bool = True,
    data_dir: str | Path = "data",
    seed: int | None = None,
) -> list[BenchmarkExample]:
    """
    Load (downloading if needed) and sample a dataset

    Args:
        dataset: Dataset name (main / hard / consensus)
        limit: Maximum number of examples (None = all)
        random_sample: Randomly sample when limit is given
        data_dir: Cache directory
        seed: Random seed for reproducible sampling

    Returns:
        list[BenchmarkExample]

    Raises:
        DatasetError: If the dataset is unknown or cannot be downloaded
    """
    local_path = download_dataset(dataset, data_dir)
    all_examples = read_examples(local_path)
    examples = select_examples(all_examples, limit, random_sample=random_sample, seed=seed)
    logger.info(
        "Loaded %d of %d examples from %s dataset", len(examples), len(all_examples), dataset
    )
    return examples
