"""Swarm-Verify: multi-agent consensus resolution for prediction markets."""

from .agents import SwarmOrchestrator
from .core.models import Market, Outcome, Resolution, ResolutionPath

__version__ = "0.1.0"
__all__ = ["Market", "Outcome", "Resolution", "ResolutionPath", "SwarmOrchestrator"]
