"""Reasoning backend adapters.

The engine only needs one capability from an LLM provider: submit a system
instruction plus a user prompt and get free-form text back. Gemini and Groq
adapters are provided; anything with the same ``generate`` coroutine works.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol

import groq
from google import genai
from google.genai import errors as genai_errors
from google.genai import types
from groq import AsyncGroq

from .settings import AppSettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationConfig:
    """Sampling parameters for one backend call."""

    temperature: float = 0.3
    max_output_tokens: int = 1024


class ReasoningClient(Protocol):
    async def generate(
        self,
        prompt: str,
        system_instruction: str,
        generation_config: GenerationConfig,
    ) -> str: ...


class GeminiReasoningClient:
    """Gemini text generation through ``google.genai``'s async client."""

    def __init__(
        self,
        api_key: str,
        model: str,
        *,
        enable_search: bool = False,
        client: genai.Client | None = None,
    ) -> None:
        self._client = client or genai.Client(api_key=api_key)
        self._model = model
        self._enable_search = enable_search

    async def generate(
        self,
        prompt: str,
        system_instruction: str,
        generation_config: GenerationConfig,
    ) -> str:
        config = types.GenerateContentConfig(
            system_instruction=system_instruction or None,
            temperature=generation_config.temperature,
            max_output_tokens=generation_config.max_output_tokens,
            tools=(
                [types.Tool(google_search=types.GoogleSearch())]
                if self._enable_search
                else None
            ),
        )
        response = await self._client.aio.models.generate_content(
            model=self._model, contents=prompt, config=config
        )
        return response.text or ""


class GroqReasoningClient:
    """Chat completions through Groq's async SDK."""

    def __init__(
        self, api_key: str, model: str, *, client: AsyncGroq | None = None
    ) -> None:
        self._client = client or AsyncGroq(api_key=api_key)
        self._model = model

    async def generate(
        self,
        prompt: str,
        system_instruction: str,
        generation_config: GenerationConfig,
    ) -> str:
        messages = []
        if system_instruction:
            messages.append({"role": "system", "content": system_instruction})
        messages.append({"role": "user", "content": prompt})

        response = await self._client.chat.completions.create(
            model=self._model,
            messages=messages,
            temperature=generation_config.temperature,
            max_tokens=generation_config.max_output_tokens,
        )
        return response.choices[0].message.content or ""


def is_transient_error(exc: BaseException) -> bool:
    """Overload, rate-limit and connection failures are worth retrying."""
    if isinstance(exc, genai_errors.ServerError):
        return True
    if isinstance(exc, genai_errors.ClientError):
        return exc.code == 429
    return isinstance(
        exc, (groq.InternalServerError, groq.RateLimitError, groq.APIConnectionError)
    )


class RetryingReasoningClient:
    """Retries transient backend failures with multiplicative backoff."""

    BACKOFF_MULTIPLIER = 1.5

    def __init__(
        self,
        inner: ReasoningClient,
        *,
        max_retries: int = 2,
        backoff_seconds: float = 2.0,
    ) -> None:
        self._inner = inner
        self._max_retries = max_retries
        self._backoff_seconds = backoff_seconds

    async def generate(
        self,
        prompt: str,
        system_instruction: str,
        generation_config: GenerationConfig,
    ) -> str:
        backoff = self._backoff_seconds
        attempt = 0
        while True:
            try:
                return await self._inner.generate(
                    prompt, system_instruction, generation_config
                )
            except Exception as exc:
                if attempt >= self._max_retries or not is_transient_error(exc):
                    raise
                attempt += 1
                logger.warning(
                    "Reasoning backend overloaded; retrying",
                    extra={
                        "json_fields": {
                            "attempt": attempt,
                            "max_retries": self._max_retries,
                            "backoff_seconds": backoff,
                            "error": str(exc),
                        }
                    },
                )
                await asyncio.sleep(backoff)
                backoff *= self.BACKOFF_MULTIPLIER


def build_reasoning_client(settings: AppSettings) -> ReasoningClient | None:
    """Build the configured backend, or ``None`` when its key is missing."""
    inner: ReasoningClient | None = None
    if settings.reasoning_provider == "gemini" and settings.gemini_api_key:
        inner = GeminiReasoningClient(settings.gemini_api_key, settings.gemini_model)
    elif settings.reasoning_provider == "groq" and settings.groq_api_key:
        inner = GroqReasoningClient(settings.groq_api_key, settings.groq_model)

    if inner is None:
        logger.warning(
            "Reasoning backend is not configured",
            extra={"json_fields": {"provider": settings.reasoning_provider}},
        )
        return None

    return RetryingReasoningClient(
        inner,
        max_retries=settings.max_retries,
        backoff_seconds=settings.retry_backoff_seconds,
    )


def build_investigator_client(settings: AppSettings) -> ReasoningClient | None:
    """Search-grounded Gemini client for the optional Investigator agent."""
    if not settings.investigator_api_key:
        return None
    return RetryingReasoningClient(
        GeminiReasoningClient(
            settings.investigator_api_key,
            settings.investigator_model,
            enable_search=True,
        ),
        max_retries=settings.max_retries,
        backoff_seconds=settings.retry_backoff_seconds,
    )
