import pytest

from swarm_verify.agents.synthesis import SecondPassReviewer
from swarm_verify.core.models import Outcome

from .conftest import FakeReasoningClient, make_resolution


@pytest.mark.asyncio
async def test_review_returns_revised_verdict(market):
    client = FakeReasoningClient(
        {
            "second_pass": (
                "OUTCOME: YES\nCONFIDENCE: 92\nVERIFICATION: Consistent with records."
            )
        }
    )
    first_pass = make_resolution(confidence=87)

    result = await SecondPassReviewer(client).review(market, first_pass)

    assert result.outcome == Outcome.YES
    assert result.confidence == 92
    assert result.rationale == "Consistent with records."
    assert result.is_second_pass is True
    assert result.first_pass_confidence == 87
    assert result.error is None


@pytest.mark.asyncio
async def test_review_is_told_the_first_pass(market):
    client = FakeReasoningClient({"second_pass": "OUTCOME: NO"})
    first_pass = make_resolution(rationale="r" * 400)

    await SecondPassReviewer(client).review(market, first_pass)

    call = client.calls[0]
    assert "- Outcome: YES" in call.system_instruction
    assert "- Confidence: 87%" in call.system_instruction
    assert "r" * 300 in call.system_instruction
    assert "r" * 301 not in call.system_instruction
    assert call.generation_config.temperature == 0.1


@pytest.mark.asyncio
async def test_missing_fields_default_to_first_pass(market):
    client = FakeReasoningClient({"second_pass": "Looks right to me."})

    result = await SecondPassReviewer(client).review(
        market, make_resolution(Outcome.NO, 86)
    )

    assert (result.outcome, result.confidence) == (Outcome.NO, 86)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "client",
    [
        None,
        FakeReasoningClient({"second_pass": RuntimeError("backend down")}),
        FakeReasoningClient({"second_pass": "OUTCOME: NO"}, delays={"second_pass": 1.0}),
    ],
)
async def test_failure_keeps_first_pass_with_penalty(market, client):
    reviewer = SecondPassReviewer(client, timeout_seconds=0.05)

    result = await reviewer.review(market, make_resolution(Outcome.YES, 88))

    assert result.outcome == Outcome.YES
    assert result.confidence == 83
    assert result.rationale == "Second pass failed"
    assert result.first_pass_confidence == 88
    assert result.error


@pytest.mark.asyncio
async def test_penalty_does_not_go_below_zero(market):
    reviewer = SecondPassReviewer(FakeReasoningClient({"second_pass": RuntimeError("x")}))

    result = await reviewer.review(market, make_resolution(confidence=3))

    assert result.confidence == 0
