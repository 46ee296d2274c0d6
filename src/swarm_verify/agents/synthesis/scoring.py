"""Multi-dimensional quality scoring of a consensus.

Four independent dimension scores in [0, 100] are blended with fixed weights
into the final confidence that drives routing:

- factual: an independent backend call rates the consensus rationale
- consistency: penalises wording that contradicts the consensus outcome
- timestamp: penalises resolving before the market's resolution date
- sentiment: penalises absolutist, poorly hedged language
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Callable, Mapping, Sequence
from datetime import datetime, timezone
from typing import Final

from ...core.models import ConsensusResult, Market, Outcome, ScoringResult
from ...core.parsing import clamp_confidence, parse_score
from ...core.reasoning import GenerationConfig, ReasoningClient
from ...core.sanitization import sanitize_market

logger = logging.getLogger(__name__)

DEFAULT_WEIGHTS: Final[dict[str, float]] = {
    "factual": 0.45,
    "consistency": 0.25,
    "timestamp": 0.20,
    "sentiment": 0.10,
}

FACTUAL_FALLBACK_SCORE: Final[int] = 75
CONSISTENCY_PENALTY: Final[int] = 8
AGREEMENT_BONUS: Final[int] = 10
SENTIMENT_PENALTY: Final[int] = 15
NEAR_FUTURE_DAYS: Final[int] = 7
NEAR_FUTURE_SCORE: Final[int] = 70
FAR_FUTURE_SCORE: Final[int] = 30

CONTRADICTING_KEYWORDS: Final[dict[Outcome, tuple[str, ...]]] = {
    Outcome.YES: ("no", "not", "false", "failed", "unsuccessful", "rejected"),
    Outcome.NO: ("yes", "true", "successful", "approved", "confirmed"),
    Outcome.AMBIGUOUS: (),
}
ABSOLUTIST_KEYWORDS: Final[tuple[str, ...]] = (
    "obviously",
    "clearly",
    "definitely",
    "undoubtedly",
    "always",
    "never",
)

FACTUAL_INSTRUCTION: Final[str] = (
    "You are a factual accuracy reviewer. Provide an accuracy score."
)


def _count_words(text: str, words: Sequence[str]) -> int:
    lowered = text.lower()
    return sum(len(re.findall(rf"\b{re.escape(w)}\b", lowered)) for w in words)


def consistency_score(consensus: ConsensusResult) -> int:
    score = 100
    score -= CONSISTENCY_PENALTY * _count_words(
        consensus.rationale, CONTRADICTING_KEYWORDS[consensus.outcome]
    )
    if consensus.agent_votes.get(consensus.outcome.value, 0) > 1:
        score += AGREEMENT_BONUS
    return clamp_confidence(score)


def timestamp_score(resolution_date: datetime | None, now: datetime) -> int:
    """Full marks once the resolution date has passed; less the further out it is."""
    if resolution_date is None:
        return 100
    if resolution_date.tzinfo is None:
        resolution_date = resolution_date.replace(tzinfo=timezone.utc)

    days_until = (resolution_date - now).total_seconds() / 86400
    if days_until > NEAR_FUTURE_DAYS:
        return FAR_FUTURE_SCORE
    if days_until > 0:
        return NEAR_FUTURE_SCORE
    return 100


def sentiment_score(consensus: ConsensusResult) -> int:
    return clamp_confidence(
        100 - SENTIMENT_PENALTY * _count_words(consensus.rationale, ABSOLUTIST_KEYWORDS)
    )


def blend_scores(scores: Mapping[str, int], weights: Mapping[str, float]) -> int:
    blended = sum(scores[name] * weight for name, weight in weights.items())
    return clamp_confidence(math.floor(blended + 0.5))


class MultiDimensionalScorer:
    """Scores a consensus; only the factual dimension touches the network."""

    def __init__(
        self,
        client: ReasoningClient | None,
        generation_config: GenerationConfig | None = None,
        *,
        weights: Mapping[str, float] | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._client = client
        self._generation_config = generation_config or GenerationConfig()
        self._weights = dict(weights or DEFAULT_WEIGHTS)
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def factual_score(self, market: Market, consensus: ConsensusResult) -> int:
        if self._client is None:
            return FACTUAL_FALLBACK_SCORE

        sanitized = sanitize_market(market)
        prompt = (
            "Verify factual accuracy of this resolution:\n\n"
            f'Market: "{sanitized.title}"\n'
            f"Consensus: {consensus.outcome.value} ({consensus.confidence}% confidence)\n"
            f"Rationale: {consensus.rationale[:300]}\n\n"
            "Rate factual accuracy (0-100). Consider:\n"
            "- Are facts verifiable?\n"
            "- Is reasoning sound?\n"
            "- Any factual errors?\n\n"
            "Output: SCORE: <0-100>"
        )
        try:
            content = await self._client.generate(
                prompt, FACTUAL_INSTRUCTION, self._generation_config
            )
        except Exception as exc:
            logger.warning(
                "Factual scorer failed; using fallback score",
                extra={
                    "json_fields": {
                        "market_id": market.market_id,
                        "fallback": FACTUAL_FALLBACK_SCORE,
                        "error": str(exc),
                    }
                },
            )
            return FACTUAL_FALLBACK_SCORE
        return parse_score(content, FACTUAL_FALLBACK_SCORE)

    async def score(self, market: Market, consensus: ConsensusResult) -> ScoringResult:
        scores = {
            "factual": await self.factual_score(market, consensus),
            "consistency": consistency_score(consensus),
            "timestamp": timestamp_score(market.resolution_date, self._clock()),
            "sentiment": sentiment_score(consensus),
        }
        final_confidence = blend_scores(scores, self._weights)

        logger.info(
            "Multi-dimensional score computed",
            extra={
                "json_fields": {
                    "market_id": market.market_id,
                    "scores": scores,
                    "final_confidence": final_confidence,
                    "original_confidence": consensus.confidence,
                }
            },
        )
        return ScoringResult(
            final_confidence=final_confidence,
            original_confidence=consensus.confidence,
            **scores,
        )
