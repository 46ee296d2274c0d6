"""FastAPI application and request guards."""

from .rate_limit import RateLimitDecision, RateLimiter

__all__ = ["RateLimitDecision", "RateLimiter"]
