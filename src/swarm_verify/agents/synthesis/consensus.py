"""Majority-vote consensus with geometric-median confidence."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterator, Sequence
from typing import Final

import numpy as np

from ...core.models import AgentResult, ConsensusResult, Outcome
from ...core.parsing import clamp_confidence

logger = logging.getLogger(__name__)

# Weiszfeld weight is 1 / (distance + EPSILON) so coincident points stay finite
EPSILON: Final[float] = 1e-10
NEUTRAL_CONFIDENCE: Final[int] = 50
RATIONALE_CHARS_PER_AGENT: Final[int] = 200

VOTE_ORDER: Final[tuple[Outcome, ...]] = (Outcome.YES, Outcome.NO, Outcome.AMBIGUOUS)
# On equal vote counts the more conservative label wins
TIE_BREAK_PRIORITY: Final[dict[Outcome, int]] = {
    Outcome.AMBIGUOUS: 2,
    Outcome.NO: 1,
    Outcome.YES: 0,
}


def weiszfeld_iterates(
    points: Sequence[float],
    max_iterations: int = 100,
    tolerance: float = 1e-6,
) -> Iterator[float]:
    """Yield successive Weiszfeld estimates, starting from the arithmetic mean.

    Stops after ``max_iterations`` updates or once two successive estimates
    differ by less than ``tolerance``.
    """
    values = np.asarray(points, dtype=float)
    estimate = float(values.mean())
    yield estimate

    for _ in range(max_iterations):
        weights = 1.0 / (np.abs(values - estimate) + EPSILON)
        updated = float(np.dot(weights, values) / weights.sum())
        yield updated
        if abs(updated - estimate) < tolerance:
            return
        estimate = updated


def geometric_median(
    points: Sequence[float],
    max_iterations: int = 100,
    tolerance: float = 1e-6,
) -> float:
    """One-dimensional geometric median; an outlier-robust alternative to the mean."""
    if len(points) == 0:
        return float(NEUTRAL_CONFIDENCE)
    if len(points) == 1:
        return float(points[0])

    *_, estimate = weiszfeld_iterates(points, max_iterations, tolerance)
    return estimate


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def majority_outcome(groups: dict[Outcome, list[AgentResult]]) -> Outcome:
    return max(
        VOTE_ORDER,
        key=lambda outcome: (len(groups[outcome]), TIE_BREAK_PRIORITY[outcome]),
    )


def aggregate_consensus(
    results: Sequence[AgentResult],
    *,
    max_iterations: int = 100,
    tolerance: float = 1e-6,
) -> ConsensusResult:
    """Group votes by outcome and take the geometric median of the majority.

    Skipped agents are left out of the grouping altogether; degraded agents
    still vote.
    """
    voting = [r for r in results if not r.skipped]

    groups: dict[Outcome, list[AgentResult]] = {outcome: [] for outcome in VOTE_ORDER}
    for result in voting:
        groups[result.outcome].append(result)

    outcome = majority_outcome(groups)
    majority = groups[outcome]

    confidences = [r.confidence for r in majority]
    confidence = (
        clamp_confidence(
            _round_half_up(geometric_median(confidences, max_iterations, tolerance))
        )
        if confidences
        else NEUTRAL_CONFIDENCE
    )

    sources: list[str] = []
    for result in voting:
        for source in result.sources:
            if source not in sources:
                sources.append(source)

    consensus = ConsensusResult(
        outcome=outcome,
        confidence=confidence,
        rationale="\n\n".join(
            f"[{r.agent}] {r.rationale[:RATIONALE_CHARS_PER_AGENT]}" for r in majority
        ),
        sources=sources,
        agent_votes={o.value: len(groups[o]) for o in VOTE_ORDER},
    )

    logger.info(
        "Consensus reached",
        extra={
            "json_fields": {
                "outcome": outcome.value,
                "confidence": confidence,
                "agent_votes": consensus.agent_votes,
            }
        },
    )
    return consensus
