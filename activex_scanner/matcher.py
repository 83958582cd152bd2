from __future__ import annotations
import re
from collections.abc import Iterable
from functools import lru_cache
from .keywords import KeywordSpec
from .models import Match


@lru_cache(maxsize=256)
def _compile(keyword: str) -> re.Pattern[str]:
    # Escaped + IGNORECASE keeps offsets in the original text, which
    # str.lower().find() does not guarantee for every code point.
    # ASCII keywords fold ASCII-only: "ı", "ſ" and the Kelvin sign never match.
    flags = re.IGNORECASE
    if keyword.isascii():
        flags |= re.ASCII
    return re.compile(re.escape(keyword), flags)


def match(text: str, keywords: KeywordSpec | Iterable[str]) -> list[Match]:
    """Return every non-overlapping occurrence of each keyword in text.

    Results are grouped by keyword (vocabulary order), then by ascending offset.
    """
    if not isinstance(keywords, KeywordSpec):
        keywords = KeywordSpec.of(keywords)

    matches: list[Match] = []
    if not text:
        return matches

    for keyword in keywords:
        for m in _compile(keyword).finditer(text):
            matches.append(Match(keyword=keyword, offset=m.start()))

    return matches
