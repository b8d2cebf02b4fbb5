from __future__ import annotations

import io
from typing import Any

import numpy as np
import pandas as pd

from .base import TableParser


def _clean_cell(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, np.generic):
        value = value.item()
    try:
        if pd.isna(value):
            return ""
    except (TypeError, ValueError):
        pass
    return value


class ExcelTableParser(TableParser):
    """First sheet of an .xlsx workbook (openpyxl engine), read by column position."""

    def read_cells(self, source: Any) -> list[list[Any]]:
        if isinstance(source, (bytes, bytearray)):
            source = io.BytesIO(bytes(source))
        df = pd.read_excel(source, sheet_name=0, header=None, dtype=object)
        df = df.dropna(how="all")

        rows: list[list[Any]] = []
        for values in df.itertuples(index=False, name=None):
            cells = [_clean_cell(v) for v in values]
            while cells and cells[-1] == "":
                cells.pop()
            if cells:
                rows.append(cells)
        return rows
