"""Scheduled oracle sweep: asks the running service to resolve due markets."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone

import httpx

from .core import settings

logger = logging.getLogger(__name__)


async def run_oracle_sweep(
    app_url: str,
    key: str,
    *,
    timeout: float = 60.0,
    client: httpx.AsyncClient | None = None,
) -> bool:
    """POST the cron secret to ``{app_url}/api/run-jobs``; True on a 2xx reply."""
    url = f"{app_url.rstrip('/')}/api/run-jobs"
    logger.info(
        "Oracle cron job started",
        extra={
            "json_fields": {
                "url": url,
                "started_at": datetime.now(timezone.utc).isoformat(),
            }
        },
    )
    try:
        if client is None:
            async with httpx.AsyncClient(timeout=timeout) as owned:
                response = await owned.post(url, json={"key": key})
        else:
            response = await client.post(url, json={"key": key})
    except httpx.HTTPError as exc:
        logger.error("Error running oracle cron job: %s", exc)
        return False

    if response.is_success:
        logger.info(
            "Oracle jobs completed successfully",
            extra={"json_fields": {"response": response.text[:1000]}},
        )
        return True

    logger.error(
        "Oracle jobs failed",
        extra={
            "json_fields": {
                "status_code": response.status_code,
                "response": response.text[:1000],
            }
        },
    )
    return False


def main() -> int:
    succeeded = asyncio.run(
        run_oracle_sweep(
            settings.app_url, settings.cron_secret, timeout=settings.default_timeout
        )
    )
    return 0 if succeeded else 1


if __name__ == "__main__":
    raise SystemExit(main())
