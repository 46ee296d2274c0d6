"""Ledger-facing persistence interfaces and in-memory implementations."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Protocol

from ..core.exceptions import MarketNotFoundError
from ..core.models import Market, Outcome, Resolution, SecondPassResult


class MarketRepository(Protocol):
    async def get_market(self, market_id: str) -> Market: ...

    async def list_due_markets(self, as_of: datetime) -> list[Market]: ...

    async def mark_resolved(self, market_id: str, outcome: Outcome) -> None: ...


class ResolutionStore(Protocol):
    async def save_resolution(self, market_id: str, resolution: Resolution) -> None: ...

    async def get_resolution(self, market_id: str) -> Resolution | None: ...

    async def save_second_pass(
        self, market_id: str, result: SecondPassResult
    ) -> None: ...


class InMemoryMarketRepository:
    """Dict-backed market ledger for development and tests."""

    def __init__(self, markets: list[Market] | None = None) -> None:
        self._markets: dict[str, Market] = {m.market_id: m for m in markets or []}

    def add(self, market: Market) -> None:
        self._markets[market.market_id] = market

    async def get_market(self, market_id: str) -> Market:
        try:
            return self._markets[market_id]
        except KeyError:
            raise MarketNotFoundError(market_id) from None

    async def list_due_markets(self, as_of: datetime) -> list[Market]:
        if as_of.tzinfo is None:
            as_of = as_of.replace(tzinfo=timezone.utc)

        due: list[Market] = []
        for market in self._markets.values():
            if market.is_resolved or market.resolution_date is None:
                continue
            resolution_date = market.resolution_date
            if resolution_date.tzinfo is None:
                resolution_date = resolution_date.replace(tzinfo=timezone.utc)
            if resolution_date <= as_of:
                due.append(market)
        return due

    async def mark_resolved(self, market_id: str, outcome: Outcome) -> None:
        market = await self.get_market(market_id)
        self._markets[market_id] = market.model_copy(
            update={"is_resolved": True, "winning_outcome": outcome}
        )


class InMemoryResolutionStore:
    """Keeps the latest first pass and every second pass per market."""

    def __init__(self) -> None:
        self.resolutions: dict[str, Resolution] = {}
        self.second_passes: dict[str, list[SecondPassResult]] = {}

    async def save_resolution(self, market_id: str, resolution: Resolution) -> None:
        self.resolutions[market_id] = resolution

    async def get_resolution(self, market_id: str) -> Resolution | None:
        return self.resolutions.get(market_id)

    async def save_second_pass(self, market_id: str, result: SecondPassResult) -> None:
        self.second_passes.setdefault(market_id, []).append(result)
