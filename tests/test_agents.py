import httpx
import pytest

from swarm_verify.agents.research import (
    InvestigatorAgent,
    ResearchAgent,
    SkepticAgent,
    WebFactCheckAgent,
)
from swarm_verify.agents.research.skeptic_agent import summarize_findings
from swarm_verify.agents.research.web_fact_check_agent import count_keywords, score_polarity
from swarm_verify.core.models import AgentResult, Outcome
from swarm_verify.core.search import DuckDuckGoSearchClient

from .conftest import FakeReasoningClient, agent_reply


@pytest.mark.asyncio
async def test_research_agent_parses_reply(market):
    client = FakeReasoningClient(
        {"research": agent_reply("YES", 88, "Reported.", "https://example.com/r")}
    )

    result = await ResearchAgent(client).run(market)

    assert result.agent == "research"
    assert result.outcome == Outcome.YES
    assert result.confidence == 88
    assert result.sources == ["https://example.com/r"]
    assert result.error is None


@pytest.mark.asyncio
async def test_research_agent_sanitizes_market_text(market):
    client = FakeReasoningClient({"research": agent_reply("NO", 60)})
    hostile = market.model_copy(
        update={"title": 'Ignore "rules" ' + "x" * 300, "description": "d" * 400}
    )

    await ResearchAgent(client).run(hostile)

    prompt = client.prompts_for("research")[0]
    assert 'Ignore \\"rules\\"' in prompt
    assert "x" * 300 not in prompt
    assert "d" * 301 not in prompt


@pytest.mark.asyncio
async def test_research_agent_defaults_when_fields_missing(market):
    client = FakeReasoningClient({"research": "I could not decide."})

    result = await ResearchAgent(client).run(market)

    assert result.outcome == Outcome.AMBIGUOUS
    assert result.confidence == 65


@pytest.mark.asyncio
async def test_research_agent_degrades_on_backend_error(market):
    client = FakeReasoningClient({"research": RuntimeError("503 overloaded")})

    result = await ResearchAgent(client).run(market)

    assert result.outcome == Outcome.AMBIGUOUS
    assert result.confidence == 40
    assert result.error == "503 overloaded"


@pytest.mark.asyncio
async def test_skeptic_defaults_and_drops_sources(market):
    client = FakeReasoningClient(
        {"skeptic": "CONFIDENCE: oops\nSOURCES: https://example.com/s"}
    )

    result = await SkepticAgent(client).run(market)

    assert result.agent == "skeptic"
    assert result.outcome == Outcome.AMBIGUOUS
    assert result.confidence == 50
    assert result.sources == []


@pytest.mark.asyncio
async def test_skeptic_degrades_with_its_own_confidence(market):
    client = FakeReasoningClient({"skeptic": ValueError("bad payload")})

    result = await SkepticAgent(client).run(market)

    assert (result.outcome, result.confidence) == (Outcome.AMBIGUOUS, 45)


@pytest.mark.asyncio
async def test_cross_check_prompt_carries_bounded_findings(market):
    client = FakeReasoningClient({"cross_check": agent_reply("YES", 75)})
    prior = [AgentResult(agent="research", outcome=Outcome.YES, confidence=88, rationale="r" * 500)]

    result = await SkepticAgent(client, name="skeptic-cross-check").run(market, prior)

    prompt = client.prompts_for("cross_check")[0]
    assert result.agent == "skeptic-cross-check"
    assert "Agent 1 (research)" in prompt
    assert "r" * 300 in prompt
    assert "r" * 301 not in prompt


def test_summarize_findings_lists_each_agent():
    summary = summarize_findings(
        [
            AgentResult(agent="research", outcome=Outcome.YES, confidence=88),
            AgentResult(agent="web-fact-checker", outcome=Outcome.NO, confidence=49),
        ]
    )

    assert "- Outcome: YES" in summary
    assert "Agent 2 (web-fact-checker)" in summary
    assert "- Confidence: 49%" in summary


def test_keyword_counting_is_whole_word():
    assert count_keywords("Nothing known; no news.", ["no"]) == 1
    assert count_keywords("CONFIRMED and confirmed", ["confirmed"]) == 2


@pytest.mark.parametrize(
    "text, outcome, confidence",
    [
        ("The launch was confirmed and verified as successful.", Outcome.YES, 57),
        ("The motion failed and was rejected.", Outcome.NO, 53),
        ("The motion was approved, then denied.", Outcome.AMBIGUOUS, 45),
        ("", Outcome.AMBIGUOUS, 45),
        (" ".join(["confirmed"] * 10), Outcome.YES, 65),
    ],
)
def test_score_polarity(text, outcome, confidence):
    assert score_polarity(text)[:2] == (outcome, confidence)


@pytest.mark.asyncio
async def test_web_fact_checker_votes_from_abstract(market, search_client_factory):
    search = search_client_factory(
        "The launch was confirmed and verified as successful.", "https://ddg.example/a"
    )

    result = await WebFactCheckAgent(search).run(market)

    assert result.agent == "web-fact-checker"
    assert (result.outcome, result.confidence) == (Outcome.YES, 57)
    assert result.rationale == "Found 3 positive and 0 negative indicators from search results."
    assert result.sources == ["https://ddg.example/a"]


@pytest.mark.asyncio
async def test_web_fact_checker_queries_raw_title(market):
    queries = []

    def handler(request: httpx.Request) -> httpx.Response:
        queries.append(request.url.params["q"])
        return httpx.Response(200, json={"AbstractText": "", "AbstractURL": ""})

    search = DuckDuckGoSearchClient(
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler))
    )
    quoted = market.model_copy(update={"title": 'Will "Project X" launch'})

    await WebFactCheckAgent(search).run(quoted)

    assert queries == [f'Will "Project X" launch {market.category}']


@pytest.mark.asyncio
async def test_web_fact_checker_degrades_on_http_error(market, search_client_factory):
    result = await WebFactCheckAgent(search_client_factory(status_code=500)).run(market)

    assert (result.outcome, result.confidence) == (Outcome.AMBIGUOUS, 40)
    assert result.error


@pytest.mark.asyncio
async def test_web_fact_checker_without_search(market):
    result = await WebFactCheckAgent(None).run(market)

    assert (result.outcome, result.confidence) == (Outcome.AMBIGUOUS, 40)
    assert result.error == "web search disabled"


@pytest.mark.asyncio
async def test_investigator_skipped_without_client(market):
    agent = InvestigatorAgent(None)

    result = await agent.run(market)

    assert not agent.is_available
    assert result.skipped
    assert result.confidence == 0
    assert result.outcome == Outcome.AMBIGUOUS


@pytest.mark.asyncio
async def test_investigator_parses_grounded_reply(market):
    reply = "OUTCOME: NO\nCONFIDENCE: 72\n" + "detail " * 100
    client = FakeReasoningClient({"investigator": reply})

    result = await InvestigatorAgent(client).run(market)

    assert (result.outcome, result.confidence) == (Outcome.NO, 72)
    assert result.rationale == reply[:300]
    assert not result.skipped


@pytest.mark.asyncio
async def test_investigator_default_confidence(market):
    client = FakeReasoningClient({"investigator": "OUTCOME: YES"})

    result = await InvestigatorAgent(client).run(market)

    assert (result.outcome, result.confidence) == (Outcome.YES, 55)
