from __future__ import annotations

import os
from contextlib import asynccontextmanager
from typing import Annotated, Any

from fastapi import (
    Depends,
    FastAPI,
    File,
    HTTPException,
    Security,
    UploadFile,
    status,
)
from fastapi.middleware.cors import CORSMiddleware
from fastapi.security import APIKeyHeader
from pydantic import BaseModel

from activex_scanner import (
    ActiveXScanner,
    FileResult,
    ScanBatch,
    SourceFile,
)
from activex_scanner.models import decode_text

# ── Config ───────────────────────────────────────────────────────────────────

_API_KEY = os.getenv("API_KEY")
_READ_TIMEOUT = float(os.getenv("READ_TIMEOUT", "0")) or None
_api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


async def verify_api_key(key: Annotated[str | None, Security(_api_key_header)]) -> None:
    if not _API_KEY:
        return  # Auth disabled: no API_KEY configured
    if key == _API_KEY:
        return
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or missing API key",
    )


# ── Pydantic models (JSON API) ───────────────────────────────────────────────


class TextScanRequest(BaseModel):
    text: str
    file_name: str = "input.txt"


class FindingOut(BaseModel):
    keyword: str
    snippet: str
    position: int


class FileResultOut(BaseModel):
    file_name: str
    findings: list[FindingOut] | None = None
    error: str | None = None


class ScanBatchOut(BaseModel):
    results: list[FileResultOut]
    total_findings: int
    safe: bool


class KeywordsOut(BaseModel):
    keywords: list[str]


def _file_result_out(result: FileResult) -> FileResultOut:
    findings = None
    if result.findings is not None:
        findings = [
            FindingOut(keyword=f.keyword, snippet=f.snippet, position=f.position)
            for f in result.findings
        ]
    return FileResultOut(file_name=result.file_name, findings=findings, error=result.error)


def _batch_out(batch: ScanBatch) -> ScanBatchOut:
    return ScanBatchOut(
        results=[_file_result_out(r) for r in batch],
        total_findings=batch.total_findings,
        safe=batch.is_safe,
    )


def _upload_source(upload: UploadFile) -> SourceFile:
    size = upload.size
    if size is None:
        upload.file.seek(0, os.SEEK_END)
        size = upload.file.tell()
        upload.file.seek(0)

    async def _read() -> str:
        return decode_text(await upload.read())

    return SourceFile(name=upload.filename or "upload", size_bytes=size, read_text=_read)


# ── Scanner singleton ────────────────────────────────────────────────────────

_scanner: ActiveXScanner | None = None


@asynccontextmanager
async def lifespan(_: FastAPI):
    global _scanner
    _scanner = ActiveXScanner(read_timeout=_READ_TIMEOUT)
    yield
    _scanner = None


def _get_scanner() -> ActiveXScanner:
    assert _scanner is not None
    return _scanner


# ── FastAPI app ──────────────────────────────────────────────────────────────

app = FastAPI(title="activex-scanner", lifespan=lifespan)

_CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",")]
app.add_middleware(
    CORSMiddleware,
    allow_origins=_CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Routes ───────────────────────────────────────────────────────────────────


@app.get("/health")
async def health() -> dict[str, Any]:
    return {"status": "ok"}


@app.get("/keywords", response_model=KeywordsOut)
async def keywords() -> KeywordsOut:
    return KeywordsOut(keywords=list(_get_scanner().keywords))


@app.post("/scan", response_model=ScanBatchOut, dependencies=[Depends(verify_api_key)])
async def scan(files: Annotated[list[UploadFile], File()]) -> ScanBatchOut:
    batch = await _get_scanner().scan([_upload_source(f) for f in files])
    return _batch_out(batch)


@app.post(
    "/scan/text",
    response_model=FileResultOut,
    dependencies=[Depends(verify_api_key)],
)
async def scan_text(request: TextScanRequest) -> FileResultOut:
    source = SourceFile.from_bytes(request.file_name, request.text.encode("utf-8"))
    result = await _get_scanner().scan_file(source)
    return _file_result_out(result)
