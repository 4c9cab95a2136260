"""
Test suite for type inference.

Run with:
    python -m pytest datachat/tests/test_value_parser.py -v
"""

import math
from datetime import date, datetime

from datachat.ingest.value_parser import TypedValueParser, infer_value
from datachat.models.dataclasses import TypedValue
from datachat.models.enums import ValueKind


def test_integers():
    """Test integer literals, signs and surrounding whitespace."""
    assert infer_value("42") == TypedValue(ValueKind.INTEGER, 42)
    assert infer_value("-7") == TypedValue(ValueKind.INTEGER, -7)
    assert infer_value("+3") == TypedValue(ValueKind.INTEGER, 3)
    assert infer_value("  12 ") == TypedValue(ValueKind.INTEGER, 12), "Whitespace is trimmed before detection"
    assert infer_value("2024").kind == ValueKind.INTEGER, "A bare year is an integer, not a date"


def test_integer_outside_int64_is_real():
    """Test that integers SQLite cannot store become REAL."""
    value = infer_value("9223372036854775808")
    assert value.kind == ValueKind.REAL
    assert value.value == float(2 ** 63)

    assert infer_value("9223372036854775807").kind == ValueKind.INTEGER
    assert infer_value(2 ** 70).kind == ValueKind.REAL


def test_reals():
    """Test decimal and exponent forms."""
    assert infer_value("3.14") == TypedValue(ValueKind.REAL, 3.14)
    assert infer_value("-0.5") == TypedValue(ValueKind.REAL, -0.5)
    assert infer_value(".5") == TypedValue(ValueKind.REAL, 0.5)
    assert infer_value("1e3") == TypedValue(ValueKind.REAL, 1000.0)
    assert infer_value("inf").kind == ValueKind.TEXT, "Non-finite spellings stay text"
    assert infer_value("NaN").kind == ValueKind.TEXT


def test_booleans_case_insensitive():
    assert infer_value("true") == TypedValue(ValueKind.BOOLEAN, True)
    assert infer_value("FALSE") == TypedValue(ValueKind.BOOLEAN, False)
    assert infer_value(" True ") == TypedValue(ValueKind.BOOLEAN, True)
    assert infer_value("yes").kind == ValueKind.TEXT, "Only true/false are boolean literals"


def test_dates():
    """Test ISO-8601 dates and date-times."""
    assert infer_value("2024-01-15") == TypedValue(ValueKind.DATE, date(2024, 1, 15))

    value = infer_value("2024-01-15T10:30:00")
    assert value.kind == ValueKind.DATE
    assert value.value == datetime(2024, 1, 15, 10, 30)

    assert infer_value("2024-13-45").kind == ValueKind.TEXT, "Invalid calendar dates fall through to text"
    assert infer_value("15/01/2024").kind == ValueKind.TEXT, "Only ISO-8601 is recognized"

    month = infer_value("2024-01")
    assert month == TypedValue(ValueKind.TEXT, "2024-01"), "A month without a day is not widened to a date"
    assert month.to_storage() == "2024-01"


def test_nulls():
    """Test empty, whitespace-only and missing values."""
    assert infer_value("").is_null
    assert infer_value("   ").is_null
    assert infer_value(None).is_null
    assert infer_value(float("nan")).is_null


def test_text_keeps_raw_string():
    value = infer_value("  hello world ")
    assert value.kind == ValueKind.TEXT
    assert value.value == "  hello world ", "Text keeps the untrimmed raw value"


def test_native_values():
    """Test values that arrive already typed."""
    assert infer_value(True) == TypedValue(ValueKind.BOOLEAN, True), "bool must not be taken for int"
    assert infer_value(5) == TypedValue(ValueKind.INTEGER, 5)
    assert infer_value(2.5) == TypedValue(ValueKind.REAL, 2.5)
    assert infer_value(date(2020, 2, 29)).kind == ValueKind.DATE
    assert infer_value(b"abc") == TypedValue(ValueKind.TEXT, "abc")


def test_to_storage():
    """Test the representation bound into the store."""
    assert TypedValue(ValueKind.BOOLEAN, True).to_storage() == 1
    assert TypedValue(ValueKind.BOOLEAN, False).to_storage() == 0
    assert TypedValue(ValueKind.DATE, date(2024, 1, 15)).to_storage() == "2024-01-15"
    assert TypedValue(ValueKind.DATE, datetime(2024, 1, 15, 10, 30)).to_storage() == "2024-01-15T10:30:00"
    assert TypedValue(ValueKind.NULL).to_storage() is None
    assert TypedValue(ValueKind.INTEGER, 7).to_storage() == 7


def test_inference_is_deterministic():
    """Test that the same input always gives the same result."""
    samples = ["1", "1.0", "true", "2024-01-01", "", "x", " 7 ", "1e400"]
    first = TypedValueParser()
    second = TypedValueParser()
    for raw in samples:
        assert first.infer(raw) == first.infer(raw) == second.infer(raw), f"Unstable for {raw!r}"


def test_never_raises():
    odd = ["1e400", "--1", "2024-02-30", "\x00", "9" * 400, "T", "-"]
    for raw in odd:
        value = infer_value(raw)
        assert isinstance(value, TypedValue)
        if value.kind == ValueKind.REAL:
            assert math.isfinite(value.value)
