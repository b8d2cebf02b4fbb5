from __future__ import annotations

import math
import re
from datetime import date, datetime, timedelta
from typing import Any, Optional

from ..core.constants import SPREADSHEET_SERIAL_OFFSET

_UNIX_EPOCH = date(1970, 1, 1)

_ISO_RE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")
_SLASH_RE = re.compile(r"^(\d{4})/(\d{1,2})/(\d{1,2})$")
_DOT_RE = re.compile(r"^(\d{4})\.(\d{1,2})\.(\d{1,2})$")
_DATE_LIKE_RE = re.compile(r"^\d{4}[-/.]\d{1,2}[-/.]\d{1,2}$")
_SERIAL_RE = re.compile(r"^\d+(\.\d+)?$")


def is_date_like(value: Any) -> bool:
    """Cheap shape check used for header detection (no calendar validation)."""
    if isinstance(value, (date, datetime)):
        return True
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return not math.isnan(value) and value > 0
    text = str(value or "").strip()
    return bool(_DATE_LIKE_RE.match(text) or re.match(r"^\d+$", text))


def serial_to_date(serial: float) -> Optional[date]:
    """Spreadsheet serial day number -> date (fractional part is time of day)."""
    if math.isnan(serial) or serial <= 0:
        return None
    try:
        return _UNIX_EPOCH + timedelta(days=math.floor(serial - SPREADSHEET_SERIAL_OFFSET))
    except OverflowError:
        return None


def parse_inspection_date(value: Any) -> Optional[date]:
    """Parse an inspection date cell.

    Accepted: ``YYYY-MM-DD``, ``YYYY/M/D``, ``YYYY.M.D``, native date cells and
    spreadsheet serial numbers. Returns ``None`` when nothing matches.
    """

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return serial_to_date(float(value))

    text = str(value).strip()
    if not text:
        return None

    for pattern in (_ISO_RE, _SLASH_RE, _DOT_RE):
        m = pattern.match(text)
        if m:
            try:
                return date(int(m.group(1)), int(m.group(2)), int(m.group(3)))
            except ValueError:
                return None

    if _SERIAL_RE.match(text):
        return serial_to_date(float(text))
    return None
