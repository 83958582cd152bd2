"""Keyword vocabulary for the ActiveX indicator scan.

The built-in list is loaded from activex_scanner/data/keywords.toml. Each
entry is a literal string; it is never interpreted as a pattern.
"""

from __future__ import annotations

import tomllib
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

_DATA_DIR = Path(__file__).parent / "data"


class InvalidKeywordError(ValueError):
    """Raised when the vocabulary contains something that is not a non-empty string."""


@dataclass(frozen=True)
class KeywordSpec:
    keywords: tuple[str, ...]

    def __post_init__(self) -> None:
        for kw in self.keywords:
            if not isinstance(kw, str) or not kw:
                raise InvalidKeywordError(f"Keyword must be a non-empty string: {kw!r}")

    @classmethod
    def of(cls, keywords: Iterable[str]) -> KeywordSpec:
        return cls(tuple(keywords))

    def __iter__(self) -> Iterator[str]:
        return iter(self.keywords)

    def __len__(self) -> int:
        return len(self.keywords)


def _load_default() -> KeywordSpec:
    with (_DATA_DIR / "keywords.toml").open("rb") as fh:
        data = tomllib.load(fh)
    return KeywordSpec.of(data["keywords"])


ACTIVEX_KEYWORDS: KeywordSpec = _load_default()
