"""Optional search-grounded investigator agent."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Final

from ...core.models import AgentResult, Market
from ...core.parsing import parse_confidence, parse_outcome
from ...core.sanitization import SanitizedMarket
from ..base import LlmSwarmAgent

RATIONALE_CHARS: Final[int] = 300


class InvestigatorAgent(LlmSwarmAgent):
    """Grounded Gemini call; reports ``skipped`` when no key is configured.

    A skipped result is excluded from vote grouping entirely rather than
    entering the tally with zero weight.
    """

    name = "investigator"
    default_confidence = 55
    failure_confidence = 40
    failure_rationale = "Investigator agent failed"

    instruction = (
        "You are an investigative agent for prediction markets. "
        "Determine YES, NO, or AMBIGUOUS."
    )

    async def run(
        self, market: Market, prior_results: Sequence[AgentResult] = ()
    ) -> AgentResult:
        if not self.is_available:
            return AgentResult.skipped_result(
                self.name, "Investigator API key not configured"
            )
        return await super().run(market, prior_results)

    def build_prompt(
        self, market: SanitizedMarket, prior_results: Sequence[AgentResult]
    ) -> str:
        return (
            f'Market: "{market.title}"\n'
            f'Description: "{market.description}"\n'
            "Determine the outcome and provide confidence (0-100).\n\n"
            "Output format:\n"
            "OUTCOME: YES|NO|AMBIGUOUS\n"
            "CONFIDENCE: <0-100>"
        )

    def to_result(self, content: str) -> AgentResult:
        return AgentResult(
            agent=self.name,
            outcome=parse_outcome(content),
            confidence=parse_confidence(content, self.default_confidence),
            rationale=(content or "")[:RATIONALE_CHARS],
        )
