"""Neutral, evidence-seeking research agent."""

from __future__ import annotations

from collections.abc import Sequence

from ...core.models import AgentResult
from ...core.sanitization import SanitizedMarket
from ..base import LlmSwarmAgent


class ResearchAgent(LlmSwarmAgent):
    """Asks the backend for an outcome, confidence, rationale and sources."""

    name = "research"
    default_confidence = 65
    failure_confidence = 40

    instruction = """You are a factual research agent for prediction market resolution.
Your task is to determine if the following market outcome is TRUE or FALSE.

Rules:
1. Use credible reasoning and established facts
2. If evidence is inconclusive or contradictory, return AMBIGUOUS
3. Provide confidence score (0-100) based on evidence quality
4. Be thorough but concise

Output format:
OUTCOME: YES|NO|AMBIGUOUS
CONFIDENCE: <0-100>
RATIONALE: <detailed explanation>
SOURCES: <any relevant URLs or references>"""

    def build_prompt(
        self, market: SanitizedMarket, prior_results: Sequence[AgentResult]
    ) -> str:
        return (
            f'Market Title: "{market.title}"\n'
            f'Description: "{market.description}"\n'
            f"Resolution Date: {market.resolution_date}\n"
            f"Category: {market.category}\n\n"
            "Determine the outcome with maximum accuracy."
        )
