import asyncio
import logging

import pytest
from activex_scanner import (
    MAX_FILE_SIZE,
    ActiveXScanner,
    FileError,
    FileResult,
    Finding,
    ScanBatch,
    SourceFile,
)


@pytest.fixture(scope="module")
def scanner():
    return ActiveXScanner()


def _failing_source(name: str, exc: Exception) -> SourceFile:
    async def _read() -> str:
        raise exc

    return SourceFile(name=name, size_bytes=10, read_text=_read)


def test_scan_text_single_finding(scanner):
    findings = scanner.scan_text("foo CreateObject( bar")
    assert findings == [
        Finding(keyword="CreateObject(", snippet="foo CreateObject( bar", position=4)
    ]


def test_scan_text_clean(scanner):
    assert scanner.scan_text("Sub Main()\nEnd Sub") == []


def test_custom_keywords():
    scanner = ActiveXScanner(keywords=["WScript.Shell"])
    assert [f.keyword for f in scanner.scan_text('CreateObject("wscript.shell")')] == [
        "WScript.Shell"
    ]


@pytest.mark.asyncio
async def test_oversized_file_is_never_read(scanner):
    reads: list[str] = []

    async def _read() -> str:
        reads.append("big.bas")
        return "ActiveX"

    files = [
        SourceFile(name="big.bas", size_bytes=11 * 1024 * 1024, read_text=_read),
        SourceFile.from_bytes("small.bas", b"Set x = ActiveX control"),
    ]
    batch = await scanner.scan(files)

    assert len(batch) == 2
    assert batch[0].file_name == "big.bas"
    assert batch[0].error == "File exceeds 10MB size limit"
    assert batch[0].findings is None
    assert reads == []
    assert batch[1].error is None
    assert [f.keyword for f in batch[1].findings] == ["ActiveX"]


@pytest.mark.asyncio
async def test_size_limit_is_inclusive(scanner):
    async def _read() -> str:
        return ""

    source = SourceFile(name="edge.txt", size_bytes=MAX_FILE_SIZE, read_text=_read)
    result = await scanner.scan_file(source)
    assert result.error is None
    assert result.findings == []


@pytest.mark.asyncio
async def test_read_failure_is_isolated(scanner):
    files = [
        _failing_source("broken.frm", OSError("disk gone")),
        SourceFile.from_bytes("ok.frm", b"Object={0713E8A2-850A-101B-AFC0-4210102A8DA7}"),
    ]
    batch = await scanner.scan(files)

    assert batch[0].error == FileError.READ_FAILURE.value
    assert batch[0].error == "Failed to read file content"
    assert batch[0].findings is None
    assert [f.keyword for f in batch[1].findings] == ["Object="]


@pytest.mark.asyncio
async def test_any_read_exception_is_a_read_failure(scanner):
    result = await scanner.scan_file(_failing_source("odd.txt", RuntimeError("boom")))
    assert result.error == "Failed to read file content"


@pytest.mark.asyncio
async def test_read_timeout():
    async def _slow() -> str:
        await asyncio.sleep(5)
        return "ActiveX"

    scanner = ActiveXScanner(read_timeout=0.01)
    result = await scanner.scan_file(SourceFile(name="slow.txt", size_bytes=7, read_text=_slow))
    assert result.error == "Failed to read file content"


@pytest.mark.asyncio
async def test_empty_batch(scanner):
    batch = await scanner.scan([])
    assert len(batch) == 0
    assert batch.is_safe
    assert batch.total_findings == 0


@pytest.mark.asyncio
async def test_batch_preserves_input_order(scanner):
    names = ["c.txt", "a.txt", "b.txt", "a.txt"]
    files = [SourceFile.from_bytes(n, b"nothing here") for n in names]
    batch = await scanner.scan(files)
    assert len(batch) == len(files)
    assert [r.file_name for r in batch] == names


@pytest.mark.asyncio
async def test_iter_scan_yields_in_order(scanner):
    files = [
        SourceFile.from_bytes("one.txt", b"ActiveX"),
        _failing_source("two.txt", OSError()),
        SourceFile.from_bytes("three.txt", b""),
    ]
    seen = [r.file_name async for r in scanner.iter_scan(files)]
    assert seen == ["one.txt", "two.txt", "three.txt"]


@pytest.mark.asyncio
async def test_from_path(tmp_path, scanner):
    path = tmp_path / "Module1.bas"
    path.write_bytes(b"\xef\xbb\xbfSet fso = CreateObject(\"Scripting.FileSystemObject\")")
    batch = await scanner.scan([SourceFile.from_path(path)])

    assert batch[0].file_name == "Module1.bas"
    assert [(f.keyword, f.position) for f in batch[0].findings] == [("CreateObject(", 10)]


@pytest.mark.asyncio
async def test_from_path_missing_file(tmp_path, scanner):
    batch = await scanner.scan([SourceFile.from_path(tmp_path / "nope.bas")])
    assert batch[0].error == "Failed to read file content"


@pytest.mark.asyncio
async def test_undecodable_bytes_replaced(scanner):
    result = await scanner.scan_file(SourceFile.from_bytes("bin.txt", b"\xff ActiveX"))
    assert result.findings[0].position == 2
    assert result.findings[0].snippet == "\ufffd ActiveX"


def test_batch_aggregates():
    batch = ScanBatch([
        FileResult("a.txt", findings=[Finding("ActiveX", "ActiveX", 0)]),
        FileResult("b.txt", findings=[]),
        FileResult("c.txt", error=FileError.READ_FAILURE.value),
        FileResult(
            "d.txt",
            findings=[Finding("Object=", "Object=", 0), Finding("ActiveX", "ActiveX", 9)],
        ),
    ])
    assert batch.total_findings == 3
    assert not batch.is_safe
    assert [r.file_name for r in batch.problem_files] == ["a.txt", "c.txt", "d.txt"]
    assert [r.file_name for r in batch.errors] == ["c.txt"]
    assert batch[1].is_clean
    assert not batch[2].is_clean


def test_errors_alone_keep_batch_safe():
    batch = ScanBatch([FileResult("big.bin", error=FileError.SIZE_LIMIT_EXCEEDED.value)])
    assert batch.is_safe
    assert batch.total_findings == 0


@pytest.mark.asyncio
async def test_batch_summary_logged(scanner, caplog):
    caplog.set_level(logging.INFO, logger="activex_scanner.scanner")
    huge = _failing_source("huge.bas", OSError())
    files = [
        SourceFile(name=huge.name, size_bytes=MAX_FILE_SIZE + 1, read_text=huge.read_text),
        SourceFile.from_bytes("hit.frm", b"ActiveX and ActiveX"),
        SourceFile.from_bytes("clean.txt", b"Option Explicit"),
    ]
    await scanner.scan(files)

    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert [r.getMessage() for r in warnings] == ["File huge.bas exceeds size limit"]

    messages = [r.getMessage() for r in caplog.records if r.levelno == logging.INFO]
    assert messages == [
        "Scan summary: 3 file(s), 2 finding(s)",
        "  huge.bas: error: File exceeds 10MB size limit",
        "  hit.frm: 2 finding(s)",
        "  clean.txt: 0 finding(s)",
    ]
