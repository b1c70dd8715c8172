"""Shared utilities for cleaning spreadsheet cell values.

Source tables arrive as rows of raw cells exported from spreadsheets, so every
field has to be coerced before it can be compared or summed. This module
provides the coercions used by the normalizer and the report stages:

- Text: strip invisible characters, render integral floats without ``.0``
- Numbers: robust parsing of US/EU separators and "not available" sentinels
- Dates: multiple date format support
- Names: removal of parenthetical qualifiers such as ``Kim(Seoul)``
- Rounding: half-up rounding for percentage and projection fields

Examples:
    >>> to_text("  Kim  ")
    'Kim'
    >>> parse_fee("#N/A")
    0.0
    >>> strip_parenthetical("Kim(Seoul)")
    'Kim'
"""

from __future__ import annotations

import math
import re
from collections.abc import Iterable
from datetime import date, datetime
from typing import Any, Optional

import numpy as np
import pandas as pd

# Unicode characters that should be stripped from text
NBSP = "\u00a0"  # Non-breaking space
NNBSP = "\u202f"  # Narrow non-breaking space
ZW = "".join(chr(c) for c in (0x200B, 0x200C, 0x200D, 0xFEFF))  # Zero-width characters

DEFAULT_FEE_SENTINELS = ("#N/A", "N/A")

_ZW_RE = re.compile(r"[%s]" % re.escape(ZW))
_PAREN_RE = re.compile(r"\([^)]*\)")
# Strip currency symbols while preserving number separators
_CURRENCY_RE = re.compile(r"[^\d,.\-\(\)\s]")
# Free-form dates must carry a 4-digit year; rejects "Jan", "now", "today"
_YEAR_RE = re.compile(r"(?<!\d)\d{4}(?!\d)")

DATE_FORMATS = ("%Y-%m-%d", "%Y.%m.%d", "%Y/%m/%d", "%d/%m/%Y", "%Y%m%d")


def strip_invisibles(x: Any) -> Optional[str]:
    """Remove invisible and problematic whitespace characters from text.

    Args:
        x: Value to clean (string, number, or None).

    Returns:
        Cleaned string or None if input is None/NaN.

    Examples:
        >>> strip_invisibles("  Hello World  ")
        'Hello World'
        >>> strip_invisibles(None) is None
        True
    """
    if x is None or (isinstance(x, float) and math.isnan(x)):
        return None
    if isinstance(x, float) and x.is_integer():
        # Sheets hand back 1234.0 for a numeric code cell
        return str(int(x))
    s = str(x)
    s = s.replace("\r", "").replace("\t", " ").replace(NBSP, " ").replace(NNBSP, " ")
    s = _ZW_RE.sub("", s)
    s = re.sub(r"\s+", " ", s).strip()
    return s


def to_text(x: Any) -> str:
    """Coerce a cell to a trimmed string, using "" for absent values."""
    return strip_invisibles(x) or ""


def to_float(x: Any) -> Optional[float]:
    """Robustly parse numbers in various formats.

    Handles:
    - US format: '1,234.56' (comma thousands, dot decimal)
    - EU format: '1.234,56' (dot thousands, comma decimal)
    - Negative in parentheses: '(1,234.56)'
    - Currency symbols: '₩ 120,000'

    Args:
        x: Value to parse (string, number, or None).

    Returns:
        Parsed float value or None if parsing fails.

    Examples:
        >>> to_float("1,234.56")
        1234.56
        >>> to_float("1.234,56")
        1234.56
        >>> to_float("(1,234.56)")
        -1234.56
    """
    if x is None or isinstance(x, bool):
        return None
    if isinstance(x, (int, float, np.integer, np.floating)):
        v = float(x)
        return None if math.isnan(v) or math.isinf(v) else v
    s = str(x).strip()
    if not s:
        return None

    neg = False
    if s.startswith("(") and s.endswith(")"):
        neg, s = True, s[1:-1].strip()

    s = _CURRENCY_RE.sub("", s)
    s = re.sub(r"\s+", "", s)
    if not s or not re.search(r"\d", s):
        return None

    def _finalize(num_str: str) -> Optional[float]:
        try:
            v = float(num_str)
        except ValueError:
            return None
        if math.isnan(v) or math.isinf(v):
            return None
        return -v if neg else v

    # 1.234,56 (EU)
    if re.fullmatch(r"-?\d{1,3}(?:\.\d{3})+,\d{1,2}", s):
        return _finalize(s.replace(".", "").replace(",", "."))
    # 1,234.56 (US) or 120,000
    if re.fullmatch(r"-?\d{1,3}(?:,\d{3})+(?:\.\d+)?", s):
        return _finalize(s.replace(",", ""))
    if "," in s and "." not in s:
        return _finalize(s.replace(",", "."))
    return _finalize(s)


def parse_fee(x: Any, sentinels: Iterable[str] = DEFAULT_FEE_SENTINELS) -> float:
    """Parse a fee cell, treating blanks, sentinels and junk as 0.

    Examples:
        >>> parse_fee("120000")
        120000.0
        >>> parse_fee("N/A")
        0.0
    """
    text = to_text(x)
    if not text or text in set(sentinels):
        return 0.0
    value = to_float(x)
    return value if value is not None else 0.0


def to_int(x: Any) -> int:
    """Parse an integer cell, truncating decimals; absent or junk values are 0.

    Examples:
        >>> to_int("15")
        15
        >>> to_int("12.9")
        12
        >>> to_int("")
        0
    """
    value = to_float(x)
    if value is None:
        return 0
    return int(value)


def to_date(val: Any) -> Optional[date]:
    """Parse a date from various formats.

    Attempts the explicit formats in ``DATE_FORMATS`` first, then falls back
    to pandas auto-detection for text that carries a 4-digit year. Only the
    calendar date is kept.

    Args:
        val: Value to parse (string, date, Timestamp, or None).

    Returns:
        Parsed date or None if parsing fails.

    Examples:
        >>> to_date("2025-03-15")
        datetime.date(2025, 3, 15)
        >>> to_date("2025.03.15")
        datetime.date(2025, 3, 15)
        >>> to_date("not a date") is None
        True
    """
    if val is None or (isinstance(val, float) and math.isnan(val)):
        return None
    if isinstance(val, pd.Timestamp):
        return None if pd.isna(val) else val.date()
    if isinstance(val, datetime):
        return val.date()
    if isinstance(val, date):
        return val
    s = to_text(val)
    if not s:
        return None
    # Keep only the date part of "2025-03-15 10:21:00"
    head = s.split(" ", 1)[0]
    for fmt in DATE_FORMATS:
        try:
            return pd.to_datetime(head, format=fmt, errors="raise").date()
        except (ValueError, TypeError):
            pass
    if not _YEAR_RE.search(s):
        return None
    try:
        parsed = pd.to_datetime(s, errors="coerce")
    except (ValueError, TypeError, OverflowError):
        return None
    if pd.isna(parsed):
        return None
    return parsed.date()


def strip_parenthetical(name: Any) -> str:
    """Remove every parenthetical qualifier from a name.

    Examples:
        >>> strip_parenthetical("Kim(Seoul)")
        'Kim'
        >>> strip_parenthetical("Lee (retired) Jr")
        'Lee Jr'
    """
    return re.sub(r"\s+", " ", _PAREN_RE.sub("", to_text(name))).strip()


def round_half_up(x: float) -> int:
    """Round half away from negative infinity, like spreadsheet front-ends do.

    Python's built-in round() uses banker's rounding, which would report
    2 for 2.5.

    Examples:
        >>> round_half_up(2.5)
        3
        >>> round_half_up(2.4)
        2
    """
    if x is None or math.isnan(x) or math.isinf(x):
        return 0
    return int(math.floor(x + 0.5))
