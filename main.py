"""
Entry point: scan local files or serve the HTTP API via uvicorn.

Usage:
    uv run python main.py scan macros.bas form.frm
    uv run python main.py scan --json exported/*.cls
    uv run python main.py serve --host 0.0.0.0 --port 8080 --reload
"""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import json
import logging
import os
import sys

from activex_scanner import ActiveXScanner, ScanBatch, SourceFile
from activex_scanner.report import render_text


def _batch_json(batch: ScanBatch) -> str:
    payload = dataclasses.asdict(batch)
    payload["total_findings"] = batch.total_findings
    payload["safe"] = batch.is_safe
    return json.dumps(payload, indent=2, ensure_ascii=False)


def _scan(args: argparse.Namespace) -> int:
    scanner = ActiveXScanner(read_timeout=args.read_timeout)
    sources = [SourceFile.from_path(p) for p in args.paths]
    batch = asyncio.run(scanner.scan(sources))
    print(_batch_json(batch) if args.json else render_text(batch))
    return 0 if batch.is_safe else 1


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run(
        "api.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        workers=args.workers if not args.reload else 1,
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="ActiveX indicator scanner")
    sub = parser.add_subparsers(dest="command", required=True)

    scan = sub.add_parser("scan", help="Scan local text files")
    scan.add_argument("paths", nargs="+", help="Files to scan")
    scan.add_argument(
        "--json", action="store_true", help="Print the scan batch as JSON"
    )
    scan.add_argument(
        "--read-timeout",
        type=float,
        default=None,
        help="Per-file read timeout in seconds (default: none)",
    )
    scan.set_defaults(func=_scan)

    serve = sub.add_parser("serve", help="Start the HTTP API")
    serve.add_argument(
        "--host", default="127.0.0.1", help="Bind host (default: 127.0.0.1)"
    )
    serve.add_argument(
        "--port", type=int, default=8000, help="Bind port (default: 8000)"
    )
    serve.add_argument(
        "--reload", action="store_true", help="Enable auto-reload on code changes"
    )
    serve.add_argument(
        "--workers", type=int, default=1, help="Number of worker processes (default: 1)"
    )
    serve.set_defaults(func=_serve)
    return parser


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "WARNING").upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
