from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

import httpx
import pytest

from swarm_verify.core.models import (
    AgentSummary,
    Market,
    Outcome,
    Resolution,
    ResolutionPath,
)
from swarm_verify.core.reasoning import GenerationConfig
from swarm_verify.core.search import DuckDuckGoSearchClient

# Substrings of each role's system instruction
ROLE_MARKERS = {
    "research": "factual research agent",
    "skeptic": "PARANOID SKEPTIC",
    "factual": "factual accuracy reviewer",
    "second_pass": "senior market resolution reviewer",
    "investigator": "investigative agent",
}


@dataclass
class RecordedCall:
    role: str
    prompt: str
    system_instruction: str
    generation_config: GenerationConfig


class FakeReasoningClient:
    """Answers each agent role with a scripted reply, delay or exception."""

    def __init__(
        self,
        responses: dict[str, Any] | None = None,
        delays: dict[str, float] | None = None,
    ) -> None:
        self.responses = dict(responses or {})
        self.delays = dict(delays or {})
        self.calls: list[RecordedCall] = []

    @staticmethod
    def role_for(prompt: str, system_instruction: str) -> str:
        for role, marker in ROLE_MARKERS.items():
            if marker in system_instruction:
                if role == "skeptic" and "OTHER AGENTS' FINDINGS" in prompt:
                    return "cross_check"
                return role
        raise AssertionError(f"Unexpected system instruction: {system_instruction[:60]}")

    async def generate(
        self,
        prompt: str,
        system_instruction: str,
        generation_config: GenerationConfig,
    ) -> str:
        role = self.role_for(prompt, system_instruction)
        self.calls.append(RecordedCall(role, prompt, system_instruction, generation_config))

        if role in self.delays:
            await asyncio.sleep(self.delays[role])
        response = self.responses.get(role, "")
        if isinstance(response, BaseException):
            raise response
        return response

    def prompts_for(self, role: str) -> list[str]:
        return [call.prompt for call in self.calls if call.role == role]


def agent_reply(
    outcome: str, confidence: int, rationale: str = "", sources: str = ""
) -> str:
    reply = f"OUTCOME: {outcome}\nCONFIDENCE: {confidence}\nRATIONALE: {rationale}"
    if sources:
        reply += f"\nSOURCES: {sources}"
    return reply


# Research YES/88, blind skeptic YES/70, cross-check YES/75
SCENARIO_RESPONSES: dict[str, Any] = {
    "research": agent_reply(
        "YES",
        88,
        "Official results confirm the event occurred before the deadline.",
        "https://example.com/report",
    ),
    "skeptic": agent_reply("YES", 70, "Evidence looks solid after review."),
    "cross_check": agent_reply("YES", 75, "Findings hold up under scrutiny."),
    "factual": "SCORE: 95",
}


def make_resolution(
    outcome: Outcome = Outcome.YES,
    confidence: int = 87,
    path: ResolutionPath = ResolutionPath.SECOND_PASS,
    rationale: str = "[research] Official results confirm the event occurred.",
) -> Resolution:
    return Resolution(
        outcome=outcome,
        confidence=confidence,
        rationale=rationale,
        sources=["https://example.com/report"],
        agent_votes={"YES": 3, "NO": 0, "AMBIGUOUS": 1},
        agents=[AgentSummary(agent="research", outcome=outcome, confidence=confidence)],
        path=path,
    )


@pytest.fixture
def now() -> datetime:
    return datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def market() -> Market:
    return Market(
        market_id="m1",
        title="Will event X occur by date D",
        description="Resolves YES if event X is officially reported before date D.",
        category="world",
        resolution_date=datetime.now(timezone.utc) - timedelta(days=1),
    )


@pytest.fixture
def fake_client() -> FakeReasoningClient:
    return FakeReasoningClient(SCENARIO_RESPONSES)


@pytest.fixture
def search_client_factory() -> Callable[..., DuckDuckGoSearchClient]:
    """Build a search client whose instant-answer endpoint is mocked."""

    def factory(
        abstract_text: str = "",
        abstract_url: str = "",
        status_code: int = 200,
    ) -> DuckDuckGoSearchClient:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                status_code,
                json={"AbstractText": abstract_text, "AbstractURL": abstract_url},
            )

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return DuckDuckGoSearchClient(client=client)

    return factory
