"""Tolerant extraction of structured fields from free-form agent text.

Agent output is untrusted input. Every function here returns a fully
populated value for any input, including ``None`` and non-string objects:
a reply the parser cannot read is treated exactly like an agent that
honestly answered ``AMBIGUOUS``.

Recognised fields (case-insensitive, markdown emphasis tolerated)::

    OUTCOME: YES|NO|AMBIGUOUS
    CONFIDENCE: <0-100>
    RATIONALE: <free text up to SOURCES:>
    SOURCES: <free text containing URLs>
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Final

from .models import Outcome

MAX_SOURCES: Final[int] = 3

_OUTCOME_RE = re.compile(r"OUTCOME[*\s]*:[*\s]*(YES|NO|AMBIGUOUS)\b", re.IGNORECASE)
_CONFIDENCE_RE = re.compile(r"CONFIDENCE[*\s]*:[*\s]*(\d{1,3})(?![.,]?\d)", re.IGNORECASE)
_RATIONALE_RE = re.compile(
    r"RATIONALE[*\s]*:[*\s]*(.+?)(?=\**\s*SOURCES[*\s]*:|$)", re.IGNORECASE | re.DOTALL
)
_SOURCES_RE = re.compile(r"SOURCES[*\s]*:\s*(.+)$", re.IGNORECASE | re.DOTALL)
_SCORE_RE = re.compile(r"SCORE[*\s]*:[*\s]*(\d{1,3})(?![.,]?\d)", re.IGNORECASE)
_URL_RE = re.compile(r"https?://[^\s)\]>\"']+")


@dataclass
class ParsedResponse:
    """Structured view of one agent reply."""

    outcome: Outcome
    confidence: int
    rationale: str = ""
    sources: list[str] = field(default_factory=list)


def clamp_confidence(value: float) -> int:
    return int(max(0, min(100, value)))


def _as_text(text: Any) -> str:
    return text if isinstance(text, str) else ""


def extract_field(text: Any, pattern: re.Pattern[str], fallback: str = "") -> str:
    """Return the first capture group of ``pattern`` in ``text`` or ``fallback``."""
    match = pattern.search(_as_text(text))
    return match.group(1).strip() if match else fallback


def extract_sources(text: Any, limit: int = MAX_SOURCES) -> list[str]:
    """Pull up to ``limit`` distinct URLs out of ``text``, in order of appearance."""
    sources: list[str] = []
    for url in _URL_RE.findall(_as_text(text)):
        url = url.rstrip(".,;")
        if url not in sources:
            sources.append(url)
        if len(sources) >= limit:
            break
    return sources


def parse_outcome(text: Any, default: Outcome = Outcome.AMBIGUOUS) -> Outcome:
    value = extract_field(text, _OUTCOME_RE)
    return Outcome(value.upper()) if value else default


def parse_confidence(text: Any, default: int) -> int:
    value = extract_field(text, _CONFIDENCE_RE)
    return clamp_confidence(int(value)) if value else clamp_confidence(default)


def parse_score(text: Any, default: int) -> int:
    """Read a ``SCORE: <0-100>`` line, as produced by the factual scorer."""
    value = extract_field(text, _SCORE_RE)
    return clamp_confidence(int(value)) if value else clamp_confidence(default)


def parse_agent_response(
    text: Any,
    *,
    default_confidence: int,
    default_outcome: Outcome = Outcome.AMBIGUOUS,
) -> ParsedResponse:
    """Parse a full agent reply; missing fields take the given defaults."""
    return ParsedResponse(
        outcome=parse_outcome(text, default_outcome),
        confidence=parse_confidence(text, default_confidence),
        rationale=extract_field(text, _RATIONALE_RE),
        sources=extract_sources(extract_field(text, _SOURCES_RE)),
    )


def parse_labelled_section(text: Any, label: str) -> str:
    """Everything after ``<label>:`` to the end of the text."""
    pattern = re.compile(rf"{re.escape(label)}[*\s]*:[*\s]*(.+)$", re.IGNORECASE | re.DOTALL)
    return extract_field(text, pattern)
