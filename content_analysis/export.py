from __future__ import annotations

"""
Render query results as CSV artifacts and markdown tables.
"""

import os
import tempfile
from pathlib import Path

from .models import RectangularResult


NO_DATA_MARKER = "*No data found*"

_NEEDS_QUOTING = (",", '"', "\r", "\n")


def _current_umask() -> int:
    umask = os.umask(0)
    os.umask(umask)
    return umask


def atomic_write_text(path: Path, text: str) -> Path:
    """
    Write `text` to `path` via a temporary sibling file and a rename.

    Either the complete file lands at `path` or nothing does. The file ends up
    with the permissions a plain `open()` would give it.
    """
    path = Path(path)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
            handle.write(text)
        os.chmod(tmp_name, 0o666 & ~_current_umask())
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise
    return path


def encode_csv_field(value: str) -> str:
    if any(char in value for char in _NEEDS_QUOTING):
        return '"' + value.replace('"', '""') + '"'
    return value


def encode_csv(header: str, result: RectangularResult) -> str:
    """
    Header line verbatim, then one comma-separated line per row.

    Fields containing a comma, a double quote, a carriage return or a newline
    are quoted, with embedded quotes doubled.
    """
    lines = [header]
    for row in result:
        lines.append(",".join(encode_csv_field(value) for value in row))
    return "\n".join(lines) + "\n"


def write_csv(path: Path, header: str, result: RectangularResult) -> Path:
    return atomic_write_text(path, encode_csv(header, result))


def count_header_columns(header: str) -> int:
    """
    Number of non-blank segments in a pipe-delimited header line.
    """
    return sum(1 for segment in header.split("|") if segment.strip())


def render_markdown_table(header: str, result: RectangularResult) -> str:
    """
    Markdown table for `result` under a pipe-delimited `header` line.

    An empty result renders as the no-data marker instead of a table.
    """
    if result.is_empty:
        return NO_DATA_MARKER

    lines = [header]
    lines.append("|" + " --- |" * count_header_columns(header))
    for row in result:
        lines.append("| " + " | ".join(row) + " |")
    return "\n".join(lines)
