"""
Concurrent grading scheduler

Grades all rubric items of one example in consecutive chunks. Items inside a
chunk are graded in parallel threads; the next chunk starts only after the whole
chunk has finished. Results come back in rubric order.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Sequence

from rubric_gauge.domain.constants import DEFAULT_CONCURRENCY
from rubric_gauge.domain.value_objects import Message, RubricItem
from rubric_gauge.scoring.rubric_grader import RubricGrade, RubricGrader, fallback_result

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChunkProgress:
    """Outcome of one finished chunk"""
    graded: int  # rubric items graded so far, this chunk included
    total: int
    grades: tuple[RubricGrade, ...]
    elapsed_ms: int  # wall-clock time of this chunk


def chunked(items: Sequence, size: int) -> list[Sequence]:
    """Split items into consecutive chunks of at most `size`"""
    if size < 1:
        raise ValueError("chunk size must be at least 1.")
    return [items[i:i + size] for i in range(0, len(items), size)]


def grade_example(
    grader: RubricGrader,
    conversation: Sequence[Message],
    model_response: str,
    rubric_items: Sequence[RubricItem],
    *,
    concurrency: int = DEFAULT_CONCURRENCY,
    on_chunk: Callable[[ChunkProgress], None] | None = None,
) -> list[RubricGrade]:
    """
    Grade every rubric item of one example with bounded concurrency

    Args:
        grader: Grading protocol
        conversation: The example's conversation
        model_response: Response being graded
        rubric_items: Rubric items in dataset order
        concurrency: Maximum number of grader calls in flight (>= 1)
        on_chunk: Called on the calling thread after each chunk completes

    Returns:
        One RubricGrade per rubric item, in input order

    Raises:
        ValueError: If concurrency is less than 1
    """
    chunks = chunked(rubric_items, concurrency)
    grades: list[RubricGrade] = []
    if not chunks:
        return grades

    with ThreadPoolExecutor(max_workers=concurrency, thread_name_prefix="grader") as executor:
        for chunk in chunks:
            chunk_start = time.time()
            futures = [
                executor.submit(grader.grade, conversation, model_response, item)
                for item in chunk
            ]

            chunk_grades = []
            for item, future in zip(chunk, futures):
                try:
                    chunk_grades.append(future.result())
                except Exception as e:
                    logger.warning("Grader task failed for rubric %r: %s", item.criterion[:80], e)
                    chunk_grades.append(RubricGrade(result=fallback_result(item, e)))

            grades.extend(chunk_grades)
            logger.debug("Graded rubrics %d/%d", len(grades), len(rubric_items))

            if on_chunk is not None:
                on_chunk(ChunkProgress(
                    graded=len(grades),
                    total=len(rubric_items),
                    grades=tuple(chunk_grades),
                    elapsed_ms=int((time.time() - chunk_start) * 1000),
                ))

    return grades
