import logging
from datetime import datetime, timedelta, timezone

import pytest

from swarm_verify.agents import SwarmOrchestrator
from swarm_verify.agents.synthesis import SecondPassReviewer
from swarm_verify.core.exceptions import (
    MarketNotFoundError,
    ReasoningBackendUnavailableError,
    ResolutionNotFoundError,
)
from swarm_verify.core.models import Market, Outcome, ResolutionPath
from swarm_verify.services import (
    InMemoryMarketRepository,
    InMemoryResolutionStore,
    ResolutionService,
)

from .conftest import SCENARIO_RESPONSES, FakeReasoningClient


def make_service(client, markets, *, second_pass_enabled=True):
    orchestrator = SwarmOrchestrator(client)
    return ResolutionService(
        orchestrator,
        SecondPassReviewer(client),
        InMemoryMarketRepository(markets),
        InMemoryResolutionStore(),
        second_pass_enabled=second_pass_enabled,
    )


def client_with_factual(score):
    return FakeReasoningClient(
        {
            **SCENARIO_RESPONSES,
            "factual": f"SCORE: {score}",
            "second_pass": "OUTCOME: YES\nCONFIDENCE: 91\nVERIFICATION: Confirmed.",
        }
    )


@pytest.mark.asyncio
async def test_auto_resolve_settles_market(market):
    service = make_service(client_with_factual(95), [market])

    outcome = await service.resolve_market("m1")

    assert outcome.resolution.path == ResolutionPath.AUTO_RESOLVE
    assert outcome.second_pass is None
    stored = await service.markets.get_market("m1")
    assert stored.is_resolved
    assert stored.winning_outcome == Outcome.YES
    assert await service.resolutions.get_resolution("m1") == outcome.resolution


@pytest.mark.asyncio
async def test_second_pass_is_stored_separately(market):
    service = make_service(client_with_factual(70), [market])

    outcome = await service.resolve_market("m1")

    assert outcome.resolution.path == ResolutionPath.SECOND_PASS
    assert outcome.second_pass is not None
    assert outcome.second_pass.confidence == 91
    assert service.resolutions.second_passes["m1"] == [outcome.second_pass]
    stored = await service.resolutions.get_resolution("m1")
    assert stored.path == ResolutionPath.SECOND_PASS
    assert not (await service.markets.get_market("m1")).is_resolved


@pytest.mark.asyncio
async def test_second_pass_can_be_disabled(market, caplog):
    caplog.set_level(logging.INFO, logger="swarm_verify.services.resolution_service")
    service = make_service(client_with_factual(70), [market], second_pass_enabled=False)

    outcome = await service.resolve_market("m1")

    assert outcome.resolution.path == ResolutionPath.SECOND_PASS
    assert outcome.second_pass is None
    assert service.resolutions.second_passes == {}
    messages = [record.getMessage() for record in caplog.records]
    assert "Second pass disabled, market left for review" in messages
    assert "Market queued for manual review" not in messages


@pytest.mark.asyncio
async def test_manual_review_leaves_market_open(market):
    service = make_service(client_with_factual(10), [market])

    outcome = await service.resolve_market("m1")

    assert outcome.resolution.path == ResolutionPath.MANUAL_REVIEW
    assert not (await service.markets.get_market("m1")).is_resolved


@pytest.mark.asyncio
async def test_unknown_market_raises():
    service = make_service(client_with_factual(95), [])

    with pytest.raises(MarketNotFoundError):
        await service.resolve_market("missing")


@pytest.mark.asyncio
async def test_batch_isolates_failures(market):
    m2 = market.model_copy(update={"market_id": "m2"})
    service = make_service(client_with_factual(95), [m2])

    items = await service.resolve_batch(["m1", "m2"])

    assert [i.market_id for i in items] == ["m1", "m2"]
    assert items[0].status == "failed"
    assert "m1" in items[0].error
    assert items[1].status == "success"
    assert items[1].outcome == Outcome.YES
    assert items[1].path == ResolutionPath.AUTO_RESOLVE


@pytest.mark.asyncio
async def test_batch_requires_backend(market):
    service = make_service(None, [market])

    with pytest.raises(ReasoningBackendUnavailableError):
        await service.resolve_batch(["m1"])


@pytest.mark.asyncio
async def test_on_demand_second_pass(market):
    service = make_service(client_with_factual(10), [market])

    with pytest.raises(ResolutionNotFoundError):
        await service.second_pass("m1")

    await service.resolve_market("m1")
    result = await service.second_pass("m1")

    assert result.is_second_pass
    assert service.resolutions.second_passes["m1"] == [result]


@pytest.mark.asyncio
async def test_run_due_markets_only_resolves_due_open_markets(market):
    now = datetime.now(timezone.utc)
    future = Market(
        market_id="future",
        title="Will Y happen next year",
        resolution_date=now + timedelta(days=365),
    )
    settled = market.model_copy(
        update={"market_id": "settled", "is_resolved": True, "winning_outcome": Outcome.NO}
    )
    undated = Market(market_id="undated", title="Open question")
    service = make_service(client_with_factual(95), [market, future, settled, undated])

    items = await service.run_due_markets(now)

    assert [i.market_id for i in items] == ["m1"]
    assert items[0].status == "success"


@pytest.mark.asyncio
async def test_run_due_markets_with_nothing_due():
    service = make_service(client_with_factual(95), [])

    assert await service.run_due_markets() == []
