"""Synthesis stage: consensus, scoring, routing and second-pass review."""

from .consensus import aggregate_consensus, geometric_median
from .routing import route_confidence
from .scoring import MultiDimensionalScorer
from .second_pass_agent import SecondPassReviewer

__all__ = [
    "MultiDimensionalScorer",
    "SecondPassReviewer",
    "aggregate_consensus",
    "geometric_median",
    "route_confidence",
]
