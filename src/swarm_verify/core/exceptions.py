"""Exception hierarchy for the resolution engine.

Only configuration-fatal errors escape a resolution call. Agent, scorer and
second-pass failures are folded into lower confidence instead of raised.
"""

from __future__ import annotations


class SwarmVerifyError(Exception):
    """Base class for all Swarm-Verify errors."""


class ReasoningBackendUnavailableError(SwarmVerifyError):
    """The reasoning backend is not configured, so nothing can be resolved."""


class MarketNotFoundError(SwarmVerifyError):
    """The ledger has no market with the requested id."""

    def __init__(self, market_id: str) -> None:
        super().__init__(f"Market not found: {market_id}")
        self.market_id = market_id


class ResolutionNotFoundError(SwarmVerifyError):
    """No first-pass resolution is stored for the requested market."""

    def __init__(self, market_id: str) -> None:
        super().__init__(f"No resolution stored for market: {market_id}")
        self.market_id = market_id
