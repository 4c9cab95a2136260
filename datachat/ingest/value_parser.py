"""
Infer a semantic type for raw cell values.

Strings are tried, in order, as boolean, integer, real, ISO-8601 date and
finally text. Detection runs on the trimmed string; text keeps the raw
value. Nothing here raises: anything that fails a more specific parse
falls through to text.
"""

import math
import re
from datetime import date, datetime
from typing import Any, Optional

import pandas as pd

from ..models.dataclasses import TypedValue
from ..models.enums import ValueKind


BOOLEAN_LITERALS = {"true": True, "false": False}

INTEGER_PATTERN = re.compile(r"^[+-]?\d+$")
REAL_PATTERN = re.compile(r"^[+-]?(\d+\.\d*|\.\d+|\d+)([eE][+-]?\d+)?$")

# YYYY-MM-DD with optional THH:MM[:SS[.fff]][Z|+HH:MM]; partial dates stay text
DATE_PATTERN = re.compile(
    r"^\d{4}-\d{2}-\d{2}"
    r"(T\d{2}:\d{2}(:\d{2}(\.\d+)?)?(Z|[+-]\d{2}:\d{2})?)?$"
)

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1

NULL = TypedValue(ValueKind.NULL)


class TypedValueParser:
    """Total inference function from raw values to TypedValue."""

    def infer(self, raw: Any) -> TypedValue:
        if raw is None:
            return NULL

        # bool before int: bool is an int subclass
        if isinstance(raw, bool):
            return TypedValue(ValueKind.BOOLEAN, raw)
        if isinstance(raw, int):
            return self._integer(raw)
        if isinstance(raw, float):
            if math.isnan(raw):
                return NULL
            return TypedValue(ValueKind.REAL, raw)
        if isinstance(raw, (date, datetime)):
            return TypedValue(ValueKind.DATE, raw)
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8", errors="replace")
        if not isinstance(raw, str):
            return TypedValue(ValueKind.TEXT, str(raw))

        return self._infer_text(raw)

    def _infer_text(self, raw: str) -> TypedValue:
        value = raw.strip()
        if not value:
            return NULL

        boolean = BOOLEAN_LITERALS.get(value.lower())
        if boolean is not None:
            return TypedValue(ValueKind.BOOLEAN, boolean)

        if INTEGER_PATTERN.match(value):
            try:
                return self._integer(int(value), raw)
            except ValueError:
                # Past the interpreter's int digit limit; tried as real below
                pass

        if REAL_PATTERN.match(value):
            number = float(value)
            if math.isfinite(number):
                return TypedValue(ValueKind.REAL, number)

        if DATE_PATTERN.match(value):
            parsed = self._parse_date(value)
            if parsed is not None:
                return TypedValue(ValueKind.DATE, parsed)

        return TypedValue(ValueKind.TEXT, raw)

    @staticmethod
    def _integer(number: int, raw: Optional[str] = None) -> TypedValue:
        # Out of SQLite INTEGER range: keep the magnitude as a real
        if number < INT64_MIN or number > INT64_MAX:
            try:
                return TypedValue(ValueKind.REAL, float(number))
            except OverflowError:
                return TypedValue(ValueKind.TEXT, raw if raw is not None else str(number))
        return TypedValue(ValueKind.INTEGER, number)

    @staticmethod
    def _parse_date(value: str):
        try:
            timestamp = pd.Timestamp(value)
        except (ValueError, OverflowError):
            return None
        if pd.isna(timestamp):
            return None
        if "T" in value:
            return timestamp.to_pydatetime()
        return timestamp.date()


_default_parser = TypedValueParser()


def infer_value(raw: Any) -> TypedValue:
    """Module-level shortcut for ``TypedValueParser().infer``."""
    return _default_parser.infer(raw)
