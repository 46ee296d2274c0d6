"""Drives the engine per market: lookup, resolve, persist, escalate."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timezone

from ..agents import SwarmOrchestrator
from ..agents.synthesis import SecondPassReviewer
from ..core.exceptions import ResolutionNotFoundError
from ..core.models import (
    BatchResolutionItem,
    Outcome,
    Resolution,
    ResolutionPath,
    SecondPassResult,
)
from ..core.settings import AppSettings
from .repository import (
    InMemoryMarketRepository,
    InMemoryResolutionStore,
    MarketRepository,
    ResolutionStore,
)

logger = logging.getLogger(__name__)

SETTLEABLE_OUTCOMES = (Outcome.YES, Outcome.NO)


@dataclass
class MarketResolutionOutcome:
    """A first-pass resolution plus the second pass it triggered, if any."""

    market_id: str
    resolution: Resolution
    second_pass: SecondPassResult | None = None


class ResolutionService:
    """The engine's caller: owns persistence and what each path means."""

    def __init__(
        self,
        orchestrator: SwarmOrchestrator,
        reviewer: SecondPassReviewer,
        markets: MarketRepository,
        resolutions: ResolutionStore,
        *,
        second_pass_enabled: bool = True,
    ) -> None:
        self.orchestrator = orchestrator
        self.reviewer = reviewer
        self.markets = markets
        self.resolutions = resolutions
        self._second_pass_enabled = second_pass_enabled

    @classmethod
    def from_settings(
        cls,
        settings: AppSettings,
        markets: MarketRepository | None = None,
        resolutions: ResolutionStore | None = None,
    ) -> ResolutionService:
        orchestrator = SwarmOrchestrator.from_settings(settings)
        return cls(
            orchestrator,
            SecondPassReviewer.from_settings(orchestrator.reasoning_client, settings),
            markets or InMemoryMarketRepository(),
            resolutions or InMemoryResolutionStore(),
            second_pass_enabled=settings.second_pass_enabled,
        )

    @property
    def is_available(self) -> bool:
        return self.orchestrator.is_available

    async def resolve_market(self, market_id: str) -> MarketResolutionOutcome:
        """Resolve and persist one market.

        Raises:
            MarketNotFoundError: unknown market id
            ReasoningBackendUnavailableError: no reasoning backend configured
        """
        market = await self.markets.get_market(market_id)
        resolution = await self.orchestrator.resolve(market)
        await self.resolutions.save_resolution(market_id, resolution)

        outcome = MarketResolutionOutcome(market_id=market_id, resolution=resolution)

        if resolution.path is ResolutionPath.AUTO_RESOLVE:
            if resolution.outcome in SETTLEABLE_OUTCOMES:
                await self.markets.mark_resolved(market_id, resolution.outcome)
                logger.info(
                    "Market auto-resolved",
                    extra={
                        "json_fields": {
                            "market_id": market_id,
                            "outcome": resolution.outcome.value,
                        }
                    },
                )
        elif resolution.path is ResolutionPath.SECOND_PASS and self._second_pass_enabled:
            outcome.second_pass = await self.reviewer.review(market, resolution)
            await self.resolutions.save_second_pass(market_id, outcome.second_pass)
        elif resolution.path is ResolutionPath.SECOND_PASS:
            logger.info(
                "Second pass disabled, market left for review",
                extra={
                    "json_fields": {
                        "market_id": market_id,
                        "confidence": resolution.confidence,
                    }
                },
            )
        else:
            logger.info(
                "Market queued for manual review",
                extra={
                    "json_fields": {
                        "market_id": market_id,
                        "path": resolution.path.value,
                        "confidence": resolution.confidence,
                    }
                },
            )
        return outcome

    async def second_pass(self, market_id: str) -> SecondPassResult:
        """Re-verify the stored first pass for ``market_id`` on demand."""
        market = await self.markets.get_market(market_id)
        first_pass = await self.resolutions.get_resolution(market_id)
        if first_pass is None:
            raise ResolutionNotFoundError(market_id)

        result = await self.reviewer.review(market, first_pass)
        await self.resolutions.save_second_pass(market_id, result)
        return result

    async def resolve_batch(
        self, market_ids: Sequence[str]
    ) -> list[BatchResolutionItem]:
        """Resolve markets one after another; a failing market does not stop the rest.

        Raises:
            ReasoningBackendUnavailableError: checked once before the loop
        """
        self.orchestrator.ensure_available()

        items: list[BatchResolutionItem] = []
        for market_id in market_ids:
            try:
                resolved = await self.resolve_market(market_id)
            except Exception as exc:
                logger.exception(
                    "Batch resolution failed for market",
                    extra={"json_fields": {"market_id": market_id}},
                )
                items.append(
                    BatchResolutionItem(
                        market_id=market_id, status="failed", error=str(exc)
                    )
                )
                continue

            items.append(
                BatchResolutionItem(
                    market_id=market_id,
                    status="success",
                    outcome=resolved.resolution.outcome,
                    confidence=resolved.resolution.confidence,
                    path=resolved.resolution.path,
                )
            )

        logger.info(
            "Batch resolution finished",
            extra={
                "json_fields": {
                    "total": len(items),
                    "failed": sum(1 for i in items if i.status == "failed"),
                }
            },
        )
        return items

    async def run_due_markets(
        self, as_of: datetime | None = None
    ) -> list[BatchResolutionItem]:
        """Scheduled oracle sweep over every unresolved market that is due."""
        as_of = as_of or datetime.now(timezone.utc)
        due = await self.markets.list_due_markets(as_of)
        logger.info(
            "Oracle sweep started",
            extra={"json_fields": {"due_markets": len(due), "as_of": as_of.isoformat()}},
        )
        if not due:
            return []
        return await self.resolve_batch([m.market_id for m in due])
