"""Swarm-Verify orchestrator.

Resolution runs four strictly sequential phases:

1. Parallel research: every active phase-one agent runs concurrently, each
   under its own timeout. The join waits for all of them to settle.
2. Skeptic cross-check: the skeptic re-runs seeded with the phase-one
   findings of the other agents.
3. Consensus over phase one plus the cross-check vote.
4. Multi-dimensional scoring, then confidence routing.

Only a missing reasoning backend is fatal. Every agent or scorer failure is
absorbed as a lower-confidence signal.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from langfuse import observe

from ..core.exceptions import ReasoningBackendUnavailableError
from ..core.models import (
    AgentResult,
    AgentSummary,
    ConsensusResult,
    Market,
    Resolution,
    ScoringResult,
)
from ..core.reasoning import (
    GenerationConfig,
    ReasoningClient,
    build_investigator_client,
    build_reasoning_client,
)
from ..core.search import DuckDuckGoSearchClient
from ..core.settings import AppSettings
from .base import SwarmAgent
from .research import (
    CROSS_CHECK_AGENT_NAME,
    InvestigatorAgent,
    ResearchAgent,
    SkepticAgent,
    WebFactCheckAgent,
)
from .synthesis import MultiDimensionalScorer, aggregate_consensus, route_confidence

logger = logging.getLogger(__name__)

TIMEOUT_RATIONALE = "Agent timeout"


class SwarmOrchestrator:
    """Fan-out/fan-in resolution of one market at a time."""

    def __init__(
        self,
        reasoning_client: ReasoningClient | None,
        *,
        search_client: DuckDuckGoSearchClient | None = None,
        investigator_client: ReasoningClient | None = None,
        generation_config: GenerationConfig | None = None,
        scorer: MultiDimensionalScorer | None = None,
        agent_timeout_seconds: float = 12.0,
        scoring_enabled: bool = True,
        high_confidence_threshold: int = 90,
        mid_confidence_threshold: int = 85,
        median_max_iterations: int = 100,
        median_tolerance: float = 1e-6,
    ) -> None:
        self._client = reasoning_client
        self._agent_timeout_seconds = agent_timeout_seconds
        self._scoring_enabled = scoring_enabled
        self._high_threshold = high_confidence_threshold
        self._mid_threshold = mid_confidence_threshold
        self._median_max_iterations = median_max_iterations
        self._median_tolerance = median_tolerance

        config = generation_config or GenerationConfig()
        self.research_agent = ResearchAgent(reasoning_client, config)
        self.skeptic_agent = SkepticAgent(reasoning_client, config)
        self.cross_check_agent = SkepticAgent(
            reasoning_client, config, name=CROSS_CHECK_AGENT_NAME
        )
        self.web_fact_check_agent = WebFactCheckAgent(search_client)
        self.investigator_agent = InvestigatorAgent(investigator_client, config)
        self.scorer = scorer or MultiDimensionalScorer(reasoning_client, config)

        # Optional agents are decided once, here, not per call
        self.phase_one_agents: list[SwarmAgent] = [
            self.research_agent,
            self.skeptic_agent,
            self.web_fact_check_agent,
        ]
        self.skipped_agents: list[SwarmAgent] = []
        if self.investigator_agent.is_available:
            self.phase_one_agents.append(self.investigator_agent)
        else:
            self.skipped_agents.append(self.investigator_agent)

        logger.debug(
            "Initialized SwarmOrchestrator",
            extra={
                "json_fields": {
                    "phase_one_agents": [a.name for a in self.phase_one_agents],
                    "skipped_agents": [a.name for a in self.skipped_agents],
                }
            },
        )

    @classmethod
    def from_settings(cls, settings: AppSettings) -> SwarmOrchestrator:
        client = build_reasoning_client(settings)
        config = GenerationConfig(
            temperature=settings.agent_temperature,
            max_output_tokens=settings.max_output_tokens,
        )
        return cls(
            client,
            search_client=DuckDuckGoSearchClient.from_settings(settings),
            investigator_client=build_investigator_client(settings),
            generation_config=config,
            scorer=MultiDimensionalScorer(
                client, config, weights=settings.scoring_weights
            ),
            agent_timeout_seconds=settings.agent_timeout_seconds,
            scoring_enabled=settings.multi_model_scoring_enabled,
            high_confidence_threshold=settings.high_confidence_threshold,
            mid_confidence_threshold=settings.mid_confidence_threshold,
            median_max_iterations=settings.geometric_median_max_iterations,
            median_tolerance=settings.geometric_median_tolerance,
        )

    @property
    def reasoning_client(self) -> ReasoningClient | None:
        return self._client

    @property
    def is_available(self) -> bool:
        return self._client is not None

    def ensure_available(self) -> None:
        if self._client is None:
            logger.error("Reasoning backend unavailable; cannot resolve markets")
            raise ReasoningBackendUnavailableError(
                "Reasoning backend is not configured"
            )

    async def run_agent(
        self,
        agent: SwarmAgent,
        market: Market,
        prior_results: Sequence[AgentResult] = (),
    ) -> AgentResult:
        """Run one agent under the logical timeout; always returns a vote."""
        try:
            return await asyncio.wait_for(
                agent.run(market, prior_results), timeout=self._agent_timeout_seconds
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"{agent.name}: timed out",
                extra={
                    "json_fields": {
                        "agent": agent.name,
                        "market_id": market.market_id,
                        "timeout_seconds": self._agent_timeout_seconds,
                    }
                },
            )
            return agent.degraded(TIMEOUT_RATIONALE, rationale=TIMEOUT_RATIONALE)
        except Exception as exc:
            logger.exception(f"{agent.name}: unexpected failure")
            return agent.degraded(str(exc))

    async def run_parallel_research(self, market: Market) -> list[AgentResult]:
        # Each task owns one slot fixed at fan-out, so result order is stable
        results = await asyncio.gather(
            *(self.run_agent(agent, market) for agent in self.phase_one_agents)
        )
        skipped = [await agent.run(market) for agent in self.skipped_agents]
        return [*results, *skipped]

    async def run_cross_check(
        self, market: Market, phase_one: Sequence[AgentResult]
    ) -> AgentResult:
        findings = [
            r
            for r in phase_one
            if r.agent != self.skeptic_agent.name and not r.skipped
        ]
        return await self.run_agent(self.cross_check_agent, market, findings)

    async def run_scoring(
        self, market: Market, consensus: ConsensusResult
    ) -> ScoringResult | None:
        if not self._scoring_enabled:
            return None
        try:
            return await self.scorer.score(market, consensus)
        except Exception as exc:
            logger.warning(
                "Multi-dimensional scoring failed; using consensus confidence",
                extra={
                    "json_fields": {"market_id": market.market_id, "error": str(exc)}
                },
            )
            return None

    @observe(name="swarm-verify-resolution")
    async def resolve(self, market: Market) -> Resolution:
        """Resolve one market.

        Raises:
            ReasoningBackendUnavailableError: no reasoning backend configured
        """
        self.ensure_available()
        log_fields = {"market_id": market.market_id, "title": market.title[:80]}

        logger.info(
            "Phase 1: parallel agent research", extra={"json_fields": log_fields}
        )
        phase_one = await self.run_parallel_research(market)

        logger.info(
            "Phase 2: skeptic cross-check",
            extra={
                "json_fields": {
                    **log_fields,
                    "phase_one_votes": {r.agent: r.outcome.value for r in phase_one},
                }
            },
        )
        cross_check = await self.run_cross_check(market, phase_one)
        all_results = [*phase_one, cross_check]

        logger.info("Phase 3: consensus", extra={"json_fields": log_fields})
        consensus = aggregate_consensus(
            all_results,
            max_iterations=self._median_max_iterations,
            tolerance=self._median_tolerance,
        )

        logger.info("Phase 4: scoring and routing", extra={"json_fields": log_fields})
        scoring = await self.run_scoring(market, consensus)
        final_confidence = (
            scoring.final_confidence if scoring is not None else consensus.confidence
        )
        path = route_confidence(
            final_confidence,
            high_threshold=self._high_threshold,
            mid_threshold=self._mid_threshold,
        )

        resolution = Resolution(
            outcome=consensus.outcome,
            confidence=final_confidence,
            rationale=consensus.rationale,
            sources=consensus.sources,
            agent_votes=consensus.agent_votes,
            scoring_details=scoring.details() if scoring is not None else None,
            agents=[
                AgentSummary(
                    agent=r.agent,
                    outcome=r.outcome,
                    confidence=r.confidence,
                    skipped=r.skipped,
                    error=r.error,
                )
                for r in all_results
            ],
            path=path,
        )

        logger.info(
            "Swarm-Verify complete",
            extra={
                "json_fields": {
                    **log_fields,
                    "outcome": resolution.outcome.value,
                    "consensus_confidence": consensus.confidence,
                    "final_confidence": final_confidence,
                    "path": path.value,
                }
            },
        )
        return resolution
