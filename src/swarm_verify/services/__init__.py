"""Services that call the engine and own persistence."""

from .repository import (
    InMemoryMarketRepository,
    InMemoryResolutionStore,
    MarketRepository,
    ResolutionStore,
)
from .resolution_service import MarketResolutionOutcome, ResolutionService

__all__ = [
    "InMemoryMarketRepository",
    "InMemoryResolutionStore",
    "MarketRepository",
    "MarketResolutionOutcome",
    "ResolutionService",
    "ResolutionStore",
]
