from __future__ import annotations

from dataclasses import dataclass
from pathlib import PurePath

from ...core.exceptions import ImportFormatError
from .base import TableParser
from .excel_parser import ExcelTableParser
from .text_parser import TextTableParser

_EXCEL_SUFFIXES = {".xlsx", ".xlsm"}
_TEXT_SUFFIXES = {".csv", ".tsv", ".txt"}


@dataclass
class TableParserFactory:
    """Factory Pattern: choose the parser from the uploaded file name."""

    def for_filename(self, filename: str) -> TableParser:
        suffix = PurePath(filename or "").suffix.lower()
        if suffix in _EXCEL_SUFFIXES:
            return ExcelTableParser()
        if suffix in _TEXT_SUFFIXES:
            return TextTableParser()
        raise ImportFormatError(f"Định dạng tệp không được hỗ trợ: {filename or '-'}")

    def for_text(self) -> TableParser:
        return TextTableParser()
