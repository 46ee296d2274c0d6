"""Langfuse initialization for resolution and second-pass spans."""

from __future__ import annotations

import logging
import os
from typing import Final

from langfuse import get_client

from ..core.settings import AppSettings, settings

logger: Final = logging.getLogger(__name__)


def _set_env_if_missing(key: str, value: str) -> None:
    """Set an environment variable if it's not already set and value is non-empty."""
    if key in os.environ:
        return
    if value:
        os.environ[key] = value


def initialize_langfuse_tracing(app_settings: AppSettings = settings) -> bool:
    """Export Langfuse credentials from settings and authenticate the client.

    Without a key pair this is a no-op and the ``observe`` decorators on the
    orchestrator and reviewer stay inert. Returns whether tracing is active.
    """
    if not (app_settings.langfuse_public_key and app_settings.langfuse_secret_key):
        logger.info("Langfuse credentials not configured; tracing disabled")
        return False

    try:
        _set_env_if_missing("LANGFUSE_HOST", app_settings.langfuse_host)
        _set_env_if_missing("LANGFUSE_PUBLIC_KEY", app_settings.langfuse_public_key)
        _set_env_if_missing("LANGFUSE_SECRET_KEY", app_settings.langfuse_secret_key)
        _set_env_if_missing(
            "LANGFUSE_TRACING_ENVIRONMENT", app_settings.langfuse_tracing_environment
        )

        client = get_client()
        if client.auth_check():
            logger.info("Langfuse client authenticated; resolution tracing enabled")
            return True
        logger.warning("Langfuse authentication failed. Check SWARM_LANGFUSE_* settings.")
    except Exception as exc:
        logger.exception("Failed to initialize Langfuse tracing: %s", exc)
    return False
