"""Tests for the cell value codec."""

import os
import sys
from datetime import date, datetime
from decimal import Decimal

import pytest
from openpyxl.styles import NamedStyle

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from tests.sample_models import (
    ALICE,
    BOOKMARKS,
    Category,
    Person,
    Timestamped,
    ToDoItem,
)
from excel_marshal.codec import MAX_CELL_TEXT_LENGTH, decode, encode
from excel_marshal.document import BLANK, Cell, CellKind
from excel_marshal.errors import (
    UnresolvableValueError,
    UnresolvedReferenceError,
    UnsupportedTypeError,
)
from excel_marshal.schema import DataclassIntrospector

_INTROSPECTOR = DataclassIntrospector()


def prop(name, cls=ToDoItem):
    return _INTROSPECTOR.property_named(cls, name)


def text(value):
    return Cell(CellKind.TEXT, value)


def number(value, number_format="General"):
    return Cell(CellKind.NUMBER, value, number_format=number_format)


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------

class TestEncode:
    def test_text(self):
        cell = encode(prop("description"), "Buy milk")
        assert cell == text("Buy milk")

    def test_integer(self):
        cell = encode(prop("priority"), 3)
        assert cell.kind is CellKind.NUMBER
        assert cell.value == 3

    def test_decimal_stored_as_float(self):
        cell = encode(prop("cost"), Decimal("12.50"))
        assert cell.kind is CellKind.NUMBER
        assert isinstance(cell.value, float)
        assert cell.value == 12.5

    def test_boolean(self):
        cell = encode(prop("complete"), True)
        assert cell.kind is CellKind.BOOLEAN
        assert cell.value is True

    def test_date_uses_shared_style(self):
        style = NamedStyle(name="d", number_format="yyyy-mm-dd")
        first = encode(prop("due_by"), date(2024, 1, 1), date_style=style)
        second = encode(prop("due_by"), date(2024, 2, 2), date_style=style)
        assert first.style is style
        assert second.style is style
        assert first.is_date

    def test_enumeration_by_member_name(self):
        assert encode(prop("category"), Category.Domestic) == text("Domestic")

    def test_reference_as_bookmark(self):
        cell = encode(prop("owned_by"), ALICE, resolver=BOOKMARKS)
        assert cell == text("Person:1")

    def test_none_is_blank(self):
        for name in ("description", "cost", "due_by", "category", "owned_by"):
            assert encode(prop(name), None, resolver=BOOKMARKS) is BLANK

    def test_non_null_never_blank(self):
        assert not encode(prop("description"), "").is_blank
        assert not encode(prop("priority"), 0).is_blank
        assert not encode(prop("complete"), False).is_blank

    def test_formula_like_text_stays_text(self):
        assert encode(prop("description"), "=SUM(1,2)") == text("=SUM(1,2)")

    def test_text_too_long_rejected(self):
        with pytest.raises(UnresolvableValueError) as exc:
            encode(prop("description"), "x" * (MAX_CELL_TEXT_LENGTH + 1))
        assert exc.value.property_name == "description"

    def test_text_at_length_limit_accepted(self):
        cell = encode(prop("description"), "x" * MAX_CELL_TEXT_LENGTH)
        assert len(cell.value) == MAX_CELL_TEXT_LENGTH

    def test_control_characters_rejected(self):
        with pytest.raises(UnresolvableValueError):
            encode(prop("notes"), "bell\x07")

    def test_unsupported(self):
        with pytest.raises(UnsupportedTypeError) as exc:
            encode(prop("stamped_at", Timestamped), datetime(2024, 1, 1))
        assert "stamped_at" in str(exc.value)


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------

class TestDecode:
    def test_blank_is_none_for_every_kind(self):
        for name in ("description", "priority", "cost", "complete", "due_by",
                     "category", "owned_by"):
            assert decode(prop(name), BLANK, resolver=BOOKMARKS) is None

    def test_text_verbatim(self):
        assert decode(prop("description"), text("  spaced  ")) == "  spaced  "

    def test_text_from_number(self):
        assert decode(prop("description"), number(12.0)) == "12"
        assert decode(prop("description"), number(12.5)) == "12.5"

    def test_integer(self):
        assert decode(prop("priority"), number(3)) == 3
        assert decode(prop("priority"), number(3.0)) == 3
        assert decode(prop("priority"), text("7")) == 7

    def test_integer_rejects_fraction(self):
        with pytest.raises(UnresolvableValueError):
            decode(prop("priority"), number(3.5))

    def test_integer_rejects_text(self):
        with pytest.raises(UnresolvableValueError):
            decode(prop("priority"), text("three"))

    def test_decimal_property(self):
        value = decode(prop("cost"), number(12.5))
        assert isinstance(value, Decimal)
        assert value == Decimal("12.50")

    def test_float_property(self):
        value = decode(prop("ratio"), number(0.25))
        assert isinstance(value, float)
        assert value == 0.25

    def test_boolean(self):
        assert decode(prop("complete"), Cell(CellKind.BOOLEAN, False)) is False

    def test_boolean_rejects_text(self):
        with pytest.raises(UnresolvableValueError):
            decode(prop("complete"), text("yes"))

    def test_date_from_date_cell(self):
        cell = number(datetime(2024, 1, 1), number_format="yyyy-mm-dd")
        assert decode(prop("due_by"), cell) == date(2024, 1, 1)

    def test_date_from_serial_number(self):
        assert decode(prop("due_by"), number(45292)) == date(2024, 1, 1)

    def test_date_rejects_text(self):
        with pytest.raises(UnresolvableValueError):
            decode(prop("due_by"), text("2024-01-01"))

    def test_enumeration(self):
        assert decode(prop("category"), text("Other")) is Category.Other

    def test_enumeration_is_exact(self):
        for bad in ("other", "OTHER", " Other", "NotAMember"):
            with pytest.raises(UnresolvableValueError):
                decode(prop("category"), text(bad))

    def test_reference(self):
        assert decode(prop("owned_by"), text("Person:1"), BOOKMARKS) is ALICE

    def test_unresolved_reference(self):
        with pytest.raises(UnresolvedReferenceError) as exc:
            decode(prop("owned_by"), text("Person:99"), BOOKMARKS)
        assert exc.value.bookmark == "Person:99"
        assert exc.value.expected_type is Person

    def test_unsupported(self):
        with pytest.raises(UnsupportedTypeError):
            decode(prop("stamped_at", Timestamped), number(1))
