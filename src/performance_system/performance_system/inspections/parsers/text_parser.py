from __future__ import annotations

import re
from typing import Any

from .base import TableParser

# Comma, tab, or a run of two or more spaces separates columns.
_DELIMITER_RE = re.compile(r"[,\t]+|\s{2,}")


def split_line(line: str) -> list[str]:
    return [v.strip() for v in _DELIMITER_RE.split(line) if v.strip()]


class TextTableParser(TableParser):
    """Pasted text, CSV, TSV or whitespace-aligned text."""

    def read_cells(self, source: Any) -> list[list[Any]]:
        if isinstance(source, (bytes, bytearray)):
            source = bytes(source).decode("utf-8-sig")
        text = (source or "").strip()
        if not text:
            return []
        return [split_line(line) for line in text.splitlines() if line.strip()]
