"""Base classes shared by the swarm agents."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence

from ..core.models import AgentResult, Market
from ..core.parsing import parse_agent_response
from ..core.reasoning import GenerationConfig, ReasoningClient
from ..core.sanitization import SanitizedMarket, sanitize_market

logger = logging.getLogger(__name__)


class SwarmAgent(ABC):
    """An independent procedure that votes on a market's outcome.

    ``run`` never raises: any failure inside ``_run_async_impl`` becomes a
    degraded ``AMBIGUOUS`` vote carrying ``failure_confidence`` and the error.
    """

    name: str = "agent"
    failure_confidence: int = 40
    failure_rationale: str = "Agent failed to process market"

    @property
    def is_available(self) -> bool:
        return True

    async def run(
        self, market: Market, prior_results: Sequence[AgentResult] = ()
    ) -> AgentResult:
        try:
            return await self._run_async_impl(market, prior_results)
        except Exception as exc:
            logger.warning(
                f"{self.name}: agent failed, degrading to AMBIGUOUS",
                extra={
                    "json_fields": {
                        "agent": self.name,
                        "market_id": market.market_id,
                        "error": str(exc),
                    }
                },
            )
            return self.degraded(str(exc))

    def degraded(self, error: str, rationale: str | None = None) -> AgentResult:
        return AgentResult.degraded(
            agent=self.name,
            confidence=self.failure_confidence,
            error=error,
            rationale=rationale or self.failure_rationale,
        )

    @abstractmethod
    async def _run_async_impl(
        self, market: Market, prior_results: Sequence[AgentResult]
    ) -> AgentResult:
        """Produce this agent's vote; may raise."""


class LlmSwarmAgent(SwarmAgent):
    """Agent backed by one reasoning-backend call with a role-specific prompt."""

    instruction: str = ""
    default_confidence: int = 65

    def __init__(
        self,
        client: ReasoningClient | None,
        generation_config: GenerationConfig | None = None,
    ) -> None:
        self._client = client
        self._generation_config = generation_config or GenerationConfig()

    @property
    def is_available(self) -> bool:
        return self._client is not None

    @abstractmethod
    def build_prompt(
        self, market: SanitizedMarket, prior_results: Sequence[AgentResult]
    ) -> str:
        """User prompt for this role."""

    async def _run_async_impl(
        self, market: Market, prior_results: Sequence[AgentResult]
    ) -> AgentResult:
        if self._client is None:
            raise RuntimeError(f"{self.name} has no reasoning client")

        prompt = self.build_prompt(sanitize_market(market), prior_results)
        content = await self._client.generate(
            prompt, self.instruction, self._generation_config
        )
        return self.to_result(content)

    def to_result(self, content: str) -> AgentResult:
        parsed = parse_agent_response(
            content, default_confidence=self.default_confidence
        )
        return AgentResult(
            agent=self.name,
            outcome=parsed.outcome,
            confidence=parsed.confidence,
            rationale=parsed.rationale,
            sources=parsed.sources,
        )
