"""Serve the resolution API with uvicorn."""

from __future__ import annotations

import uvicorn

from .core import settings


def main() -> None:
    uvicorn.run(
        "swarm_verify.api.server:app",
        host=settings.host,
        port=settings.port,
        log_config=None,
        reload=settings.debug,
    )


if __name__ == "__main__":
    main()
