"""Heuristic, non-LLM fact checker backed by an instant-answer search API."""

from __future__ import annotations

import re
from collections.abc import Sequence
from typing import Final

from ...core.models import AgentResult, Market, Outcome
from ...core.sanitization import MAX_TITLE_LENGTH
from ...core.search import DuckDuckGoSearchClient
from ..base import SwarmAgent

POSITIVE_KEYWORDS: Final[tuple[str, ...]] = (
    "confirmed",
    "verified",
    "true",
    "yes",
    "successful",
    "achieved",
    "passed",
    "approved",
)
NEGATIVE_KEYWORDS: Final[tuple[str, ...]] = (
    "false",
    "denied",
    "failed",
    "no",
    "rejected",
    "unsuccessful",
)

BASE_CONFIDENCE: Final[int] = 45
CONFIDENCE_PER_HIT: Final[int] = 4
MAX_CONFIDENCE: Final[int] = 65
# One side must outnumber the other by this factor to cast a vote
DOMINANCE_RATIO: Final[float] = 1.5


def count_keywords(text: str, keywords: Sequence[str]) -> int:
    """Whole-word, case-insensitive occurrences of any of ``keywords``."""
    return sum(
        len(re.findall(rf"\b{re.escape(word)}\b", text, re.IGNORECASE))
        for word in keywords
    )


def score_polarity(text: str) -> tuple[Outcome, int, int, int]:
    """Vote from keyword polarity: (outcome, confidence, positive, negative)."""
    positive = count_keywords(text, POSITIVE_KEYWORDS)
    negative = count_keywords(text, NEGATIVE_KEYWORDS)

    if positive > negative * DOMINANCE_RATIO:
        return (
            Outcome.YES,
            min(MAX_CONFIDENCE, BASE_CONFIDENCE + positive * CONFIDENCE_PER_HIT),
            positive,
            negative,
        )
    if negative > positive * DOMINANCE_RATIO:
        return (
            Outcome.NO,
            min(MAX_CONFIDENCE, BASE_CONFIDENCE + negative * CONFIDENCE_PER_HIT),
            positive,
            negative,
        )
    return Outcome.AMBIGUOUS, BASE_CONFIDENCE, positive, negative


class WebFactCheckAgent(SwarmAgent):
    """Counts polarity keywords in the search abstract for the market title."""

    name = "web-fact-checker"
    failure_confidence = 40
    failure_rationale = "Agent failed to fetch search results"

    def __init__(self, search_client: DuckDuckGoSearchClient | None) -> None:
        self._search_client = search_client

    @property
    def is_available(self) -> bool:
        return self._search_client is not None

    async def _run_async_impl(
        self, market: Market, prior_results: Sequence[AgentResult]
    ) -> AgentResult:
        if self._search_client is None:
            return self.degraded(
                "web search disabled", rationale="Web search is not configured"
            )

        query = f"{market.title[:MAX_TITLE_LENGTH]} {market.category}".strip()
        answer = await self._search_client.instant_answer(query)

        outcome, confidence, positive, negative = score_polarity(answer.abstract_text)
        return AgentResult(
            agent=self.name,
            outcome=outcome,
            confidence=confidence,
            rationale=(
                f"Found {positive} positive and {negative} negative indicators "
                "from search results."
            ),
            sources=[answer.abstract_url] if answer.abstract_url else [],
        )
