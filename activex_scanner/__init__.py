"""activex-scanner: flag ActiveX / VB component indicators in text files."""
from .keywords import ACTIVEX_KEYWORDS, InvalidKeywordError, KeywordSpec
from .models import (
    MAX_FILE_SIZE,
    FileError,
    FileResult,
    Finding,
    Match,
    ScanBatch,
    SourceFile,
)
from .scanner import ActiveXScanner

__all__ = [
    "ACTIVEX_KEYWORDS",
    "MAX_FILE_SIZE",
    "ActiveXScanner",
    "FileError",
    "FileResult",
    "Finding",
    "InvalidKeywordError",
    "KeywordSpec",
    "Match",
    "ScanBatch",
    "SourceFile",
]
