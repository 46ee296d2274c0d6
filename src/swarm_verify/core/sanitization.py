"""Prompt-injection hardening for market text sent to the reasoning backend."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Final

from .models import Market

MAX_TITLE_LENGTH: Final[int] = 200
MAX_DESCRIPTION_LENGTH: Final[int] = 300
MAX_CATEGORY_LENGTH: Final[int] = 50


@dataclass(frozen=True)
class SanitizedMarket:
    """Length-bounded, quote-escaped copy of the market fields used in prompts."""

    title: str
    description: str
    category: str
    resolution_date: str


def _truncate(value: str | None, limit: int) -> str:
    if not isinstance(value, str):
        return ""
    return value[:limit].replace('"', '\\"')


def sanitize_market(market: Market) -> SanitizedMarket:
    resolution_date = market.resolution_date or datetime.now(timezone.utc)
    return SanitizedMarket(
        title=_truncate(market.title, MAX_TITLE_LENGTH),
        description=_truncate(market.description, MAX_DESCRIPTION_LENGTH),
        category=_truncate(market.category, MAX_CATEGORY_LENGTH),
        resolution_date=resolution_date.isoformat(),
    )
