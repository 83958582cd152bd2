"""Plain-text rendering of a ScanBatch for terminal output.

Snippets are printed exactly as stored on the Finding, with "<" and ">"
escaped. Reversing the escape is not lossless, since the source text may
already contain "&lt;" literally.
"""

from __future__ import annotations
from .models import FileResult, ScanBatch

SAFE_TITLE = "No ActiveX indicators found"
WARNING_TITLE = "Possible ActiveX indicators detected"


def _file_block(result: FileResult) -> list[str]:
    if result.error is not None:
        return [f"{result.file_name}: {result.error}"]

    lines = [result.file_name]
    for f in result.findings or []:
        lines.append(f'  Found "{f.keyword}" at position {f.position}')
        for snippet_line in f.snippet.splitlines():
            lines.append(f"    | {snippet_line}")
    return lines


def render_text(batch: ScanBatch) -> str:
    if batch.is_safe:
        return "\n".join([
            SAFE_TITLE,
            f"Scanned {len(batch)} file(s) successfully.",
        ])

    lines = [WARNING_TITLE, ""]
    for result in batch.problem_files:
        lines.extend(_file_block(result))
        lines.append("")
    return "\n".join(lines).rstrip()
