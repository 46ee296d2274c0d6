"""Data models for the Swarm-Verify resolution engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class Outcome(str, Enum):
    """Possible answers to a market question."""

    YES = "YES"
    NO = "NO"
    AMBIGUOUS = "AMBIGUOUS"


class ResolutionPath(str, Enum):
    """Where a resolution goes after confidence routing."""

    AUTO_RESOLVE = "auto-resolve"
    SECOND_PASS = "second-pass"
    MANUAL_REVIEW = "manual-review"


class CamelModel(BaseModel):
    """Base for API-facing schemas; serializes to camelCase."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )


class Market(CamelModel):
    """A prediction-market question as stored by the external ledger."""

    market_id: str = Field(description="Ledger identifier of the market")
    title: str = Field(description="The question being predicted")
    description: str = Field(default="", description="Resolution criteria and context")
    category: str = Field(default="", description="Market category")
    resolution_date: datetime | None = Field(
        default=None, description="When the market is supposed to resolve"
    )
    is_resolved: bool = Field(default=False)
    winning_outcome: Outcome | None = Field(default=None)


@dataclass
class AgentResult:
    """One agent's vote on a market."""

    agent: str
    outcome: Outcome
    confidence: int
    rationale: str = ""
    sources: list[str] = field(default_factory=list)
    timestamp: str = field(default_factory=utc_now_iso)
    error: str | None = None
    skipped: bool = False

    @classmethod
    def degraded(
        cls, agent: str, confidence: int, error: str, rationale: str
    ) -> AgentResult:
        """Placeholder vote for an agent that failed or timed out."""
        return cls(
            agent=agent,
            outcome=Outcome.AMBIGUOUS,
            confidence=confidence,
            rationale=rationale,
            error=error,
        )

    @classmethod
    def skipped_result(cls, agent: str, reason: str) -> AgentResult:
        """Placeholder for an optional agent whose backend is not configured."""
        return cls(
            agent=agent,
            outcome=Outcome.AMBIGUOUS,
            confidence=0,
            rationale=reason,
            skipped=True,
        )


@dataclass
class ConsensusResult:
    """Majority outcome with geometric-median confidence."""

    outcome: Outcome
    confidence: int
    rationale: str
    sources: list[str]
    agent_votes: dict[str, int]


@dataclass
class ScoringResult:
    """Per-dimension quality scores and the blended final confidence."""

    factual: int
    consistency: int
    timestamp: int
    sentiment: int
    final_confidence: int
    original_confidence: int

    def details(self) -> ScoringDetails:
        return ScoringDetails(
            factual=self.factual,
            consistency=self.consistency,
            timestamp=self.timestamp,
            sentiment=self.sentiment,
        )


# Pydantic schemas for engine outputs
class ScoringDetails(CamelModel):
    """Dimension scores reported alongside a resolution."""

    factual: int = Field(ge=0, le=100)
    consistency: int = Field(ge=0, le=100)
    timestamp: int = Field(ge=0, le=100)
    sentiment: int = Field(ge=0, le=100)


class AgentSummary(CamelModel):
    """Compact per-agent vote included in a resolution."""

    agent: str
    outcome: Outcome
    confidence: int = Field(ge=0, le=100)
    skipped: bool = False
    error: str | None = None


class Resolution(CamelModel):
    """Final first-pass output of one resolution call."""

    outcome: Outcome
    confidence: int = Field(ge=0, le=100, description="Final blended confidence")
    rationale: str
    sources: list[str]
    agent_votes: dict[str, int]
    scoring_details: ScoringDetails | None = Field(
        default=None, description="Absent when scoring degraded or is disabled"
    )
    agents: list[AgentSummary]
    path: ResolutionPath
    timestamp: str = Field(default_factory=utc_now_iso)


class SecondPassResult(CamelModel):
    """Independent re-verification of a mid-confidence resolution."""

    outcome: Outcome
    confidence: int = Field(ge=0, le=100)
    rationale: str
    is_second_pass: bool = True
    first_pass_confidence: int = Field(ge=0, le=100)
    error: str | None = None
    timestamp: str = Field(default_factory=utc_now_iso)


class BatchResolutionItem(CamelModel):
    """Per-market status inside a batch resolution."""

    market_id: str
    status: str = Field(description="success or failed")
    outcome: Outcome | None = None
    confidence: int | None = None
    path: ResolutionPath | None = None
    error: str | None = None
