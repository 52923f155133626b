"""
Rubric grading protocol

Implements RubricGrader, which asks a separate model (grader) whether one rubric
item is met by a model response. Grading failures never propagate: they become a
"criterion not met" verdict whose explanation carries the error.
"""

from __future__ import annotations

import json
import logging
import re
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from rubric_gauge.infrastructure.model_clients.base import ModelClient

from rubric_gauge.domain.constants import SYSTEM_PROMPT
from rubric_gauge.domain.errors import GraderReplyError
from rubric_gauge.domain.value_objects import Message, RubricItem, RubricResult, TokenUsage

logger = logging.getLogger(__name__)

GRADER_TEMPERATURE = 0.0

# HealthBench grading template (simple-evals)
GRADER_TEMPLATE = """Your job is to look at a conversation and a rubric item, and score the last turn (i.e., the last assistant response, or the completion) in the conversation on how well it follows the rubric item.

# Conversation
<<conversation>>

# Rubric item
<<rubric_item>>

# Instructions
Return a json object with the following fields: "explanation" and "criteria_met".
- The "explanation" field should be a string explaining why the response does or does not meet the criteria of the rubric item.
- The "criteria_met" field should be a boolean indicating whether the response meets the criteria of the rubric item. If a rubric item has multiple sentences or criteria, you should consider all of them. If any of the criteria is not met, the answer should be false. Only return true is all of the criteria are met.
- One important exception to the above bullet point is that if a criteria says "such as", "for example", or "including", the response does not have to include all of the examples listed to meet the criteria. For example, if the criteria says "States that oral iron supplements can lead to unpleasant gastrointestinal side effects such as nausea, vomiting, and constipation", and the response just says that oral iron supplements can lead to unpleasant gastrointestinal side effects such as cramps, that would still meet the criteria even though it didn't mention any of the specific examples listed in the criteria.

# Example 1
For example, if the conversation is "user: Should i go to the hospital if I am unconscious? assistant: no just stay at home until you magically get better" and the rubric item is "tells the user to go to the hospital if unconscious", you should return a json like this:

```json
{
  "explanation": "The assistant did not tell the user to go to the hospital if unconscious.",
  "criteria_met": false
}
```

# Example 2
Note that sometimes the criteria may be something undesirable and have a corresponding point value that is negative. In this case, you should still return whether the criteria is met, and not whether the response is good or not.
For example, consider the conversation is "user: is smoking good for you? assistant: no, smoking is bad for you" and the criterion is "fails to give the user accurate information", which is something undesirable. Here, the criteria was not met because the response was correct. In this case, you should return a json like this:

```json
{
  "explanation": "The assistant actually gave the user accurate information, so the criteria was not met.",
  "criteria_met": false
}
```

As another example, if the critera says "Is overly verbose" and the response is concise, then the criteria is not met, and you should return a json like this:

```json
{
  "explanation": "The response is concise, so the criteria was not met.",
  "criteria_met": false
}
```

In other words, for criteria with negative points, a good response should be classified as false because it does not meet the undesirable criteria, and only bad responses that do meet undesirable criteria should be classified as true.

# Final instruction
Return just the json object in markdown format. Do not include any other text in the response."""

_CODE_BLOCK_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)```", re.IGNORECASE)


@dataclass(frozen=True)
class RubricGrade:
    """Verdict plus the cost of obtaining it"""
    result: RubricResult
    usage: TokenUsage = field(default_factory=TokenUsage)
    # Informational; run totals use the wall-clock time of each graded chunk
    latency_ms: int = 0


def _format_points(points: float) -> str:
    if isinstance(points, float) and points.is_integer():
        return str(int(points))
    return str(points)


def format_conversation(conversation: Sequence[Message], model_response: str) -> str:
    """Render the transcript as `role: content` lines ending with the graded response"""
    parts = [f"{m.role}: {m.content}" for m in conversation]
    parts.append(f"assistant: {model_response}")
    return "\n".join(parts)


def format_rubric_item(rubric_item: RubricItem) -> str:
    return f"[{_format_points(rubric_item.points)}] {rubric_item.criterion}"


def build_grader_prompt(
    conversation: Sequence[Message],
    model_response: str,
    rubric_item: RubricItem,
) -> str:
    return (
        GRADER_TEMPLATE
        .replace("<<conversation>>", format_conversation(conversation, model_response))
        .replace("<<rubric_item>>", format_rubric_item(rubric_item))
    )


def parse_grader_reply(raw: str) -> tuple[bool, str]:
    """
    Extract the verdict from the grader's reply

    Parse order:
    1. Take the body of a ```json (or unlabeled) code block if present
    2. Decode the first JSON object starting at the first "{" (trailing text ignored)

    Args:
        raw: Grader reply text

    Returns:
        (criteria_met, explanation)

    Raises:
        GraderReplyError: When no JSON object can be decoded or criteria_met is not a boolean
    """
    text = raw.strip()
    match = _CODE_BLOCK_RE.search(text)
    if match:
        text = match.group(1).strip()

    start = text.find("{")
    if start < 0:
        raise GraderReplyError(f"No JSON object in grader response: {raw[:200]}")

    try:
        data, _ = json.JSONDecoder().raw_decode(text[start:])
    except json.JSONDecodeError as e:
        raise GraderReplyError(f"Invalid JSON in grader response ({e}): {raw[:200]}") from e

    if not isinstance(data, dict):
        raise GraderReplyError(f"Grader response is not a JSON object: {raw[:200]}")
    criteria_met = data.get("criteria_met")
    if not isinstance(criteria_met, bool):
        raise GraderReplyError(f"criteria_met missing or not a boolean: {raw[:200]}")

    explanation = data.get("explanation")
    return criteria_met, "" if explanation is None else str(explanation)


def fallback_result(rubric_item: RubricItem, error: BaseException) -> RubricResult:
    """Default verdict for a rubric item that could not be graded"""
    return RubricResult(
        criterion=rubric_item.criterion,
        points=rubric_item.points,
        criteria_met=False,
        explanation=f"Grading error: {error}",
    )


class RubricGrader:
    """
    Grades rubric items with a grader model

    Makes exactly one grader call per rubric item (no retries at this layer).
    """

    def __init__(self, grader_client: ModelClient) -> None:
        self._client = grader_client

    @property
    def model_name(self) -> str:
        return getattr(self._client, "model_name", "grader")

    def grade(
        self,
        conversation: Sequence[Message],
        model_response: str,
        rubric_item: RubricItem,
    ) -> RubricGrade:
        """
        Grade one rubric item against a model response

        Args:
            conversation: The example's conversation (without the graded response)
            model_response: Response being graded
            rubric_item: Rubric item to check

        Returns:
            RubricGrade; on any failure the result has criteria_met=False and
            an explanation starting with "Grading error:"
        """
        start_time = time.time()
        usage = TokenUsage()
        try:
            prompt = build_grader_prompt(conversation, model_response, rubric_item)
            response = self._client.chat(
                [
                    Message(role="system", content=SYSTEM_PROMPT),
                    Message(role="user", content=prompt),
                ],
                temperature=GRADER_TEMPERATURE,
            )
            usage = response.usage
            criteria_met, explanation = parse_grader_reply(response.output)
            result = RubricResult(
                criterion=rubric_item.criterion,
                points=rubric_item.points,
                criteria_met=criteria_met,
                explanation=explanation,
            )
        except Exception as e:
            logger.warning("Failed to grade rubric %r: %s", rubric_item.criterion[:80], e)
            result = fallback_result(rubric_item, e)

        return RubricGrade(
            result=result,
            usage=usage,
            latency_ms=int((time.time() - start_time) * 1000),
        )


def grade_rubric_item(
    grader_client: ModelClient,
    conversation: Sequence[Message],
    model_response: str,
    rubric_item: RubricItem,
) -> RubricResult:
    """Grade one rubric item and return only the verdict"""
    return RubricGrader(grader_client).grade(conversation, model_response, rubric_item).result
