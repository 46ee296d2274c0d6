"""Tiered confidence routing."""

from __future__ import annotations

from ...core.models import ResolutionPath


def route_confidence(
    confidence: int,
    *,
    high_threshold: int = 90,
    mid_threshold: int = 85,
) -> ResolutionPath:
    """Map a final blended confidence to its resolution path.

    ``>= high_threshold`` auto-resolves, ``[mid_threshold, high_threshold)``
    gets a second pass, anything lower goes to manual review.
    """
    if confidence >= high_threshold:
        return ResolutionPath.AUTO_RESOLVE
    if confidence >= mid_threshold:
        return ResolutionPath.SECOND_PASS
    return ResolutionPath.MANUAL_REVIEW
