"""HTTP surface of the resolution engine."""

from __future__ import annotations

import logging
import math
import secrets
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from typing import Annotated, Any

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import Field

from ..core.exceptions import (
    MarketNotFoundError,
    ReasoningBackendUnavailableError,
    ResolutionNotFoundError,
)
from ..core.models import CamelModel
from ..core.settings import AppSettings, settings
from ..observability import initialize_langfuse_tracing
from ..services import ResolutionService
from .rate_limit import RateLimiter

logger = logging.getLogger(__name__)


class BatchResolveRequest(CamelModel):
    market_ids: list[str] = Field(default_factory=list)


class RunJobsRequest(CamelModel):
    key: str = ""


def get_service(request: Request) -> ResolutionService:
    return request.app.state.service


def rate_limited(action: str) -> Callable[[Request], None]:
    """Dependency rejecting a client once it exceeds its per-minute allowance."""

    def dependency(request: Request) -> None:
        limiter: RateLimiter = request.app.state.rate_limiter
        client_key = request.client.host if request.client else "anonymous"
        decision = limiter.check(client_key, action)
        if not decision.allowed:
            logger.warning(
                "Rate limit exceeded",
                extra={
                    "json_fields": {
                        "client": client_key,
                        "action": action,
                        "limit": decision.limit,
                    }
                },
            )
            raise HTTPException(
                status_code=429,
                detail=f"Exceeded {action} limit ({decision.limit}/min)",
                headers={"Retry-After": str(math.ceil(decision.retry_after))},
            )

    return dependency


ServiceDep = Annotated[ResolutionService, Depends(get_service)]


def default_rate_limiter(app_settings: AppSettings) -> RateLimiter:
    per_minute = app_settings.resolve_requests_per_minute
    return RateLimiter(
        {
            "resolve": per_minute,
            "second_pass": per_minute,
            "batch_resolve": max(1, per_minute // 5),
        }
    )


def _error_response(status_code: int, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": str(exc)})


def create_app(
    service: ResolutionService | None = None,
    rate_limiter: RateLimiter | None = None,
    app_settings: AppSettings = settings,
) -> FastAPI:
    """Build the API around a resolution service.

    Arguments default to ones built from ``app_settings``.
    """

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        initialize_langfuse_tracing(app_settings)
        yield

    app = FastAPI(
        title=app_settings.app_name,
        description="Multi-agent resolution of prediction-market outcomes",
        lifespan=lifespan,
    )
    app.state.settings = app_settings
    app.state.service = service or ResolutionService.from_settings(app_settings)
    app.state.rate_limiter = rate_limiter or default_rate_limiter(app_settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(MarketNotFoundError)
    async def market_not_found(_: Request, exc: MarketNotFoundError) -> JSONResponse:
        return _error_response(404, exc)

    @app.exception_handler(ResolutionNotFoundError)
    async def resolution_not_found(
        _: Request, exc: ResolutionNotFoundError
    ) -> JSONResponse:
        return _error_response(404, exc)

    @app.exception_handler(ReasoningBackendUnavailableError)
    async def backend_unavailable(
        _: Request, exc: ReasoningBackendUnavailableError
    ) -> JSONResponse:
        return _error_response(503, exc)

    @app.get("/healthz")
    async def healthz(request: Request) -> dict[str, Any]:
        return {
            "status": "ok",
            "reasoningBackendAvailable": request.app.state.service.is_available,
        }

    # Registered before the single-market route so "batch" is not read as an id
    @app.post(
        "/api/swarm-resolve/batch",
        dependencies=[Depends(rate_limited("batch_resolve"))],
    )
    async def swarm_resolve_batch(
        body: BatchResolveRequest, service: ServiceDep
    ) -> dict[str, Any]:
        items = await service.resolve_batch(body.market_ids)
        return {
            "results": [i.model_dump(by_alias=True, mode="json") for i in items]
        }

    @app.post(
        "/api/swarm-resolve/{market_id}",
        dependencies=[Depends(rate_limited("resolve"))],
    )
    async def swarm_resolve(market_id: str, service: ServiceDep) -> dict[str, Any]:
        resolved = await service.resolve_market(market_id)
        body: dict[str, Any] = {
            "resolution": resolved.resolution.model_dump(by_alias=True, mode="json")
        }
        if resolved.second_pass is not None:
            body["secondPass"] = resolved.second_pass.model_dump(
                by_alias=True, mode="json"
            )
        return body

    @app.post(
        "/api/second-pass/{market_id}",
        dependencies=[Depends(rate_limited("second_pass"))],
    )
    async def second_pass(market_id: str, service: ServiceDep) -> dict[str, Any]:
        result = await service.second_pass(market_id)
        return result.model_dump(by_alias=True, mode="json")

    @app.post("/api/run-jobs")
    async def run_jobs(
        body: RunJobsRequest, request: Request, service: ServiceDep
    ) -> dict[str, Any]:
        secret = request.app.state.settings.cron_secret
        if not secret or not secrets.compare_digest(body.key, secret):
            logger.warning("Rejected scheduled sweep with invalid key")
            raise HTTPException(status_code=401, detail="Unauthorized")

        items = await service.run_due_markets()
        return {
            "success": True,
            "results": [i.model_dump(by_alias=True, mode="json") for i in items],
        }

    return app


app = create_app()
