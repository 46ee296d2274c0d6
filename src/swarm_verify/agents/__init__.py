"""Swarm-Verify agents package."""

from __future__ import annotations

from .swarm_orchestrator import SwarmOrchestrator

__all__ = ["SwarmOrchestrator"]
