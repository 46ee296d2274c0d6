"""Adversarial skeptic agent.

Runs twice per resolution: once blind, contributing an independent vote, and
once seeded with the other agents' findings so it can challenge them.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Final

from ...core.models import AgentResult
from ...core.reasoning import GenerationConfig, ReasoningClient
from ...core.sanitization import SanitizedMarket
from ..base import LlmSwarmAgent

PRIOR_RATIONALE_CHARS: Final[int] = 300

SKEPTIC_AGENT_NAME: Final[str] = "skeptic"
CROSS_CHECK_AGENT_NAME: Final[str] = "skeptic-cross-check"


def summarize_findings(results: Sequence[AgentResult]) -> str:
    """Bounded-length digest of other agents' votes for the cross-check prompt."""
    lines = ["OTHER AGENTS' FINDINGS (verify these critically):"]
    for i, result in enumerate(results, 1):
        lines.append(
            f"Agent {i} ({result.agent}):\n"
            f"- Outcome: {result.outcome.value}\n"
            f"- Confidence: {result.confidence}%\n"
            f"- Rationale: {result.rationale[:PRIOR_RATIONALE_CHARS]}"
        )
    return "\n".join(lines)


class SkepticAgent(LlmSwarmAgent):
    """Defaults to AMBIGUOUS unless the evidence is overwhelming."""

    default_confidence = 50
    failure_confidence = 45
    failure_rationale = "Skeptic agent failed"

    instruction = """You are a PARANOID SKEPTIC agent for market resolution.

Your role:
1. ASSUME all claims are false until proven with overwhelming evidence
2. Look for contradictions, biases, and unreliable reasoning
3. Challenge assumptions and question weak evidence
4. Only accept outcomes backed by strong logical proof
5. Default to AMBIGUOUS if ANY doubt exists

Be extremely critical and conservative.

Output format:
OUTCOME: YES|NO|AMBIGUOUS
CONFIDENCE: <0-100>
RATIONALE: <the weaknesses and contradictions you found>"""

    def __init__(
        self,
        client: ReasoningClient | None,
        generation_config: GenerationConfig | None = None,
        *,
        name: str = SKEPTIC_AGENT_NAME,
    ) -> None:
        super().__init__(client, generation_config)
        self.name = name

    def build_prompt(
        self, market: SanitizedMarket, prior_results: Sequence[AgentResult]
    ) -> str:
        prompt = (
            f'Market: "{market.title}"\n'
            f'Description: "{market.description}"\n'
            f"Resolution Date: {market.resolution_date}\n\n"
            "Critically evaluate this market."
        )
        if prior_results:
            prompt += "\n\n" + summarize_findings(prior_results)
        return prompt

    def to_result(self, content: str) -> AgentResult:
        result = super().to_result(content)
        # The skeptic argues from the other agents' material, not its own sources
        result.sources = []
        return result
