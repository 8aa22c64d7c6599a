# src/llm/relation_analyzer.py - v1
"""LLM relation analysis between two concepts.

Asks the chat model for a JSON object ``{relation, strength, description}``
restricted to the closed taxonomy, and always returns a well-formed
RelationJudgment: unparseable answers and provider errors are absorbed
into safe defaults instead of propagating.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from conceptgraph.core.models import RelationJudgment
from conceptgraph.graph.relation_normalizer import validate_relation_type
from conceptgraph.graph.taxonomy import DEFAULT_RELATION, VALID_RELATION_TYPES
from conceptgraph.llm.base_client import BaseLLMClient
from conceptgraph.llm.models import Message

logger = logging.getLogger(__name__)

MAX_DESCRIPTION_CHARS = 100
DEFAULT_STRENGTH = 0.5

PARSE_FAILURE_DESCRIPTION = "Relation could not be determined"
PROVIDER_FAILURE_DESCRIPTION = "Relation analysis failed due to a provider error"

SYSTEM_PROMPT = (
    "You are a knowledge network expert. Analyze the relationship between "
    "two concepts. Respond only with valid JSON."
)

_PROMPT_TEMPLATE = """Analyze the relationship between the concepts "{concept1}" and "{concept2}".
Respond with a JSON object with exactly these fields:
{{
  "relation": one of {relation_types},
  "strength": relationship strength between 0 and 1 (0.1 very weak, 1.0 very strong),
  "description": short explanation of the relationship (at most {max_chars} characters)
}}"""


class RelationAnalyzer:
    """Classifies concept pairs into the relation taxonomy with an LLM.

    Args:
        llm_client: Chat-completion client.
        max_tokens: Completion budget for the JSON answer.
        temperature: Sampling temperature.
    """

    def __init__(
        self,
        llm_client: BaseLLMClient,
        max_tokens: int = 300,
        temperature: float = 0.2,
    ) -> None:
        self._llm = llm_client
        self._max_tokens = max_tokens
        self._temperature = temperature

    def build_prompt(self, concept1: str, concept2: str) -> str:
        return _PROMPT_TEMPLATE.format(
            concept1=concept1,
            concept2=concept2,
            relation_types=", ".join(VALID_RELATION_TYPES),
            max_chars=MAX_DESCRIPTION_CHARS,
        )

    async def analyze_relation(self, concept1: str, concept2: str) -> RelationJudgment:
        """Return the relation judgment for (concept1, concept2). Never raises."""
        try:
            response = await self._llm.complete(
                messages=[Message(role="user", content=self.build_prompt(concept1, concept2))],
                system=SYSTEM_PROMPT,
                max_tokens=self._max_tokens,
                temperature=self._temperature,
                json_mode=True,
            )
        except Exception as exc:
            logger.error(
                "Relation analysis call failed for %r / %r via %s: %s",
                concept1, concept2, self._llm.provider_name, exc,
            )
            return RelationJudgment(
                relation=DEFAULT_RELATION,
                strength=0.0,
                description=PROVIDER_FAILURE_DESCRIPTION,
            )

        try:
            parsed = parse_relation_response(response.content)
        except (json.JSONDecodeError, TypeError, ValueError) as exc:
            logger.warning(
                "Relation analysis JSON parse failed for %r / %r: %s",
                concept1, concept2, exc,
            )
            return RelationJudgment(
                relation=DEFAULT_RELATION,
                strength=DEFAULT_STRENGTH,
                description=PARSE_FAILURE_DESCRIPTION,
            )

        return build_judgment(parsed)


def parse_relation_response(content: str) -> dict[str, Any]:
    """Decode the model answer, tolerating a surrounding code fence.

    Raises:
        json.JSONDecodeError: If the content is not JSON.
        TypeError: If the JSON is not an object.
    """
    text = content.strip()
    if text.startswith("```"):
        lines = text.split("\n")
        lines = [ln for ln in lines if not ln.strip().startswith("```")]
        text = "\n".join(lines)
    data = json.loads(text)
    if not isinstance(data, dict):
        raise TypeError(f"Expected a JSON object, got {type(data).__name__}")
    return data


def build_judgment(raw: dict[str, Any]) -> RelationJudgment:
    """Coerce a decoded answer into a RelationJudgment."""
    try:
        strength = float(raw.get("strength", DEFAULT_STRENGTH))
    except (TypeError, ValueError):
        strength = DEFAULT_STRENGTH
    if strength != strength:  # NaN
        strength = DEFAULT_STRENGTH

    description = raw.get("description") or ""
    if not isinstance(description, str):
        description = str(description)

    return RelationJudgment(
        relation=validate_relation_type(raw.get("relation")),
        strength=strength,
        description=description.strip()[:MAX_DESCRIPTION_CHARS],
    )
