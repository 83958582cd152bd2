from __future__ import annotations
from collections.abc import Iterable
from .models import Finding, Match

CONTEXT_RADIUS = 40


def sanitize(snippet: str) -> str:
    """Escape markup delimiters and trim surrounding whitespace."""
    return snippet.replace("<", "&lt;").replace(">", "&gt;").strip()


def context_window(text: str, m: Match) -> str:
    """Raw text around a match, clamped to the text bounds."""
    start = max(0, m.offset - CONTEXT_RADIUS)
    end = min(len(text), m.offset + len(m.keyword) + CONTEXT_RADIUS)
    return text[start:end]


def extract(text: str, matches: Iterable[Match]) -> list[Finding]:
    return [
        Finding(
            keyword=m.keyword,
            snippet=sanitize(context_window(text, m)),
            position=m.offset,
        )
        for m in matches
    ]
