"""Independent re-verification for mid-confidence resolutions."""

from __future__ import annotations

import asyncio
import logging
from typing import Final

from langfuse import observe

from ...core.models import Market, Resolution, SecondPassResult
from ...core.parsing import parse_agent_response, parse_labelled_section
from ...core.reasoning import GenerationConfig, ReasoningClient
from ...core.sanitization import sanitize_market
from ...core.settings import AppSettings

logger = logging.getLogger(__name__)

FAILURE_PENALTY: Final[int] = 5
FIRST_PASS_RATIONALE_CHARS: Final[int] = 300


class SecondPassReviewer:
    """Asks the backend to independently re-check a first-pass resolution.

    ``review`` never raises. When the call fails the first-pass outcome is
    kept and its confidence drops by ``FAILURE_PENALTY``.
    """

    def __init__(
        self,
        client: ReasoningClient | None,
        generation_config: GenerationConfig | None = None,
        *,
        timeout_seconds: float = 12.0,
    ) -> None:
        self._client = client
        self._generation_config = generation_config or GenerationConfig(temperature=0.1)
        self._timeout_seconds = timeout_seconds

    @classmethod
    def from_settings(
        cls, client: ReasoningClient | None, settings: AppSettings
    ) -> SecondPassReviewer:
        return cls(
            client,
            GenerationConfig(
                temperature=settings.second_pass_temperature,
                max_output_tokens=settings.max_output_tokens,
            ),
            timeout_seconds=settings.agent_timeout_seconds,
        )

    @staticmethod
    def build_instruction(first_pass: Resolution) -> str:
        return f"""You are a senior market resolution reviewer performing a second-pass verification.

First Pass Results:
- Outcome: {first_pass.outcome.value}
- Confidence: {first_pass.confidence}%
- Rationale: {first_pass.rationale[:FIRST_PASS_RATIONALE_CHARS]}

Your task: Independently verify if this outcome is correct. Consider:
1. Are there any contradictions in the evidence?
2. Could the outcome be interpreted differently?
3. Is the confidence level appropriate?

Output format:
OUTCOME: YES|NO|AMBIGUOUS
CONFIDENCE: <0-100>
VERIFICATION: <brief verification>"""

    @observe(name="second-pass-review")
    async def review(self, market: Market, first_pass: Resolution) -> SecondPassResult:
        logger.info(
            "Second pass review started",
            extra={"json_fields": {"market_id": market.market_id}},
        )
        try:
            if self._client is None:
                raise RuntimeError("Reasoning client required for second pass")

            sanitized = sanitize_market(market)
            prompt = (
                f'Market: "{sanitized.title}"\n'
                f'Description: "{sanitized.description}"\n\n'
                "Perform independent verification of the first pass outcome."
            )
            content = await asyncio.wait_for(
                self._client.generate(
                    prompt,
                    self.build_instruction(first_pass),
                    self._generation_config,
                ),
                timeout=self._timeout_seconds,
            )
        except Exception as exc:
            error = str(exc) or type(exc).__name__
            logger.warning(
                "Second pass review failed; keeping first pass with penalty",
                extra={
                    "json_fields": {"market_id": market.market_id, "error": error}
                },
            )
            return SecondPassResult(
                outcome=first_pass.outcome,
                confidence=max(0, first_pass.confidence - FAILURE_PENALTY),
                rationale="Second pass failed",
                first_pass_confidence=first_pass.confidence,
                error=error,
            )

        parsed = parse_agent_response(
            content,
            default_confidence=first_pass.confidence,
            default_outcome=first_pass.outcome,
        )
        result = SecondPassResult(
            outcome=parsed.outcome,
            confidence=parsed.confidence,
            rationale=parse_labelled_section(content, "VERIFICATION"),
            first_pass_confidence=first_pass.confidence,
        )
        logger.info(
            "Second pass review complete",
            extra={
                "json_fields": {
                    "market_id": market.market_id,
                    "outcome": result.outcome.value,
                    "confidence": result.confidence,
                    "first_pass_confidence": first_pass.confidence,
                }
            },
        )
        return result
