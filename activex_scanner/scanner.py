from __future__ import annotations
import asyncio
import logging
from collections.abc import AsyncIterator, Iterable
from .extractor import extract
from .keywords import ACTIVEX_KEYWORDS, KeywordSpec
from .matcher import match
from .models import (
    MAX_FILE_SIZE,
    FileError,
    FileResult,
    Finding,
    ScanBatch,
    SourceFile,
)

logger = logging.getLogger(__name__)


class ActiveXScanner:
    def __init__(
        self,
        keywords: Iterable[str] | None = None,
        max_file_size: int = MAX_FILE_SIZE,
        read_timeout: float | None = None,
    ) -> None:
        if keywords is None:
            self._keywords = ACTIVEX_KEYWORDS
        elif isinstance(keywords, KeywordSpec):
            self._keywords = keywords
        else:
            self._keywords = KeywordSpec.of(keywords)
        self._max_file_size = max_file_size
        self._read_timeout = read_timeout

    @property
    def keywords(self) -> KeywordSpec:
        return self._keywords

    def scan_text(self, text: str) -> list[Finding]:
        return extract(text, match(text, self._keywords))

    async def _read(self, source: SourceFile) -> str:
        if self._read_timeout is None:
            return await source.read_text()
        return await asyncio.wait_for(source.read_text(), self._read_timeout)

    async def scan_file(self, source: SourceFile) -> FileResult:
        if source.size_bytes > self._max_file_size:
            logger.warning("File %s exceeds size limit", source.name)
            return FileResult(
                file_name=source.name, error=FileError.SIZE_LIMIT_EXCEEDED.value
            )

        try:
            text = await self._read(source)
        except Exception:
            logger.warning("Failed to read %s", source.name, exc_info=True)
            return FileResult(file_name=source.name, error=FileError.READ_FAILURE.value)

        findings = self.scan_text(text)
        logger.debug("%s: %d finding(s)", source.name, len(findings))
        return FileResult(file_name=source.name, findings=findings)

    async def iter_scan(self, files: Iterable[SourceFile]) -> AsyncIterator[FileResult]:
        """Yield one FileResult per file, in input order, as each completes."""
        for source in files:
            yield await self.scan_file(source)

    async def scan(self, files: Iterable[SourceFile]) -> ScanBatch:
        batch = ScanBatch()
        async for result in self.iter_scan(files):
            batch.results.append(result)
        log_summary(batch)
        return batch


def log_summary(batch: ScanBatch) -> None:
    logger.info(
        "Scan summary: %d file(s), %d finding(s)", len(batch), batch.total_findings
    )
    for result in batch:
        if result.error is not None:
            logger.info("  %s: error: %s", result.file_name, result.error)
        else:
            logger.info("  %s: %d finding(s)", result.file_name, result.finding_count)
