from __future__ import annotations
import asyncio
from collections.abc import Awaitable, Callable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

MAX_FILE_SIZE = 10 * 1024 * 1024  # 10 MiB


class FileError(str, Enum):
    SIZE_LIMIT_EXCEEDED = "File exceeds 10MB size limit"
    READ_FAILURE = "Failed to read file content"


@dataclass(frozen=True)
class Match:
    keyword: str
    offset: int


@dataclass(frozen=True)
class Finding:
    keyword: str
    snippet: str  # HTML-escaped, trimmed
    position: int  # offset of the keyword in the original text


@dataclass
class FileResult:
    file_name: str
    findings: list[Finding] | None = None
    error: str | None = None

    @property
    def finding_count(self) -> int:
        return len(self.findings or [])

    @property
    def is_clean(self) -> bool:
        return self.error is None and not self.findings


@dataclass
class ScanBatch:
    results: list[FileResult] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.results)

    def __iter__(self) -> Iterator[FileResult]:
        return iter(self.results)

    def __getitem__(self, index: int) -> FileResult:
        return self.results[index]

    @property
    def total_findings(self) -> int:
        return sum(r.finding_count for r in self.results)

    @property
    def is_safe(self) -> bool:
        """True when no file in the batch produced a finding.

        File errors alone do not make a batch unsafe.
        """
        return self.total_findings == 0

    @property
    def problem_files(self) -> list[FileResult]:
        return [r for r in self.results if r.error is not None or r.findings]

    @property
    def errors(self) -> list[FileResult]:
        return [r for r in self.results if r.error is not None]


def decode_text(data: bytes) -> str:
    """Decode file bytes as UTF-8 the way a browser's readAsText does."""
    return data.decode("utf-8-sig", errors="replace")


@dataclass(frozen=True)
class SourceFile:
    """A file queued for scanning.

    ``read_text`` is awaited at most once, and only when the file passes the
    size gate. It may raise; the scanner records that as a read failure.
    """

    name: str
    size_bytes: int
    read_text: Callable[[], Awaitable[str]]

    @classmethod
    def from_bytes(cls, name: str, data: bytes) -> SourceFile:
        async def _read() -> str:
            return decode_text(data)

        return cls(name=name, size_bytes=len(data), read_text=_read)

    @classmethod
    def from_path(cls, path: str | Path) -> SourceFile:
        path = Path(path)
        try:
            size = path.stat().st_size
        except OSError:
            # Let the read step report it.
            size = 0

        async def _read() -> str:
            data = await asyncio.to_thread(path.read_bytes)
            return decode_text(data)

        return cls(name=path.name, size_bytes=size, read_text=_read)
