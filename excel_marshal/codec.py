"""
Cell value codec: converts one property value to a cell and back,
dispatching on the property's :class:`~excel_marshal.schema.Kind`.

Decimal values are written as floating-point numbers; values that need
more precision than a double can hold do not round-trip exactly.
"""

import datetime
from decimal import Decimal, InvalidOperation

from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.utils.datetime import from_excel

from .document import BLANK, CellKind, boolean_cell, number_cell, text_cell
from .errors import (
    UnresolvableValueError,
    UnresolvedReferenceError,
    UnsupportedTypeError,
)
from .schema import Kind

MAX_CELL_TEXT_LENGTH = 32767


# ------------------------------------------------------------------
# Encoding
# ------------------------------------------------------------------

def _encode_text(prop, value):
    if len(value) > MAX_CELL_TEXT_LENGTH:
        raise UnresolvableValueError(
            prop.name, value[:20] + "...",
            f"text longer than {MAX_CELL_TEXT_LENGTH} characters")
    if ILLEGAL_CHARACTERS_RE.search(value):
        raise UnresolvableValueError(
            prop.name, value, "contains characters not allowed in a cell")
    return text_cell(value)


def encode(prop, value, resolver=None, date_style=None):
    """Return the :class:`~excel_marshal.document.Cell` for *value*.

    Parameters
    ----------
    prop : PropertyDescriptor
        Property the value was read from.
    value : object
        The property value; ``None`` gives a blank cell.
    resolver : ReferenceResolver or None
        Supplies bookmarks for REFERENCE properties.
    date_style : openpyxl.styles.NamedStyle or None
        Style shared by every date cell of one document.
    """
    kind = prop.kind
    if kind is Kind.UNSUPPORTED:
        raise UnsupportedTypeError(prop.name, prop.value_kind.target)
    if value is None:
        return BLANK

    if kind is Kind.TEXT:
        return _encode_text(prop, str(value))
    if kind is Kind.INTEGER:
        return number_cell(int(value))
    if kind is Kind.DECIMAL:
        return number_cell(float(value))
    if kind is Kind.BOOLEAN:
        return boolean_cell(bool(value))
    if kind is Kind.DATE:
        if isinstance(value, datetime.datetime):
            value = value.date()
        return number_cell(value, style=date_style)
    if kind is Kind.ENUMERATION:
        return text_cell(value.name)
    if kind is Kind.REFERENCE:
        if resolver is None:
            raise UnsupportedTypeError(prop.name, prop.value_kind.target)
        return text_cell(resolver.bookmark_for(value))
    raise UnsupportedTypeError(prop.name, prop.value_kind.target)


# ------------------------------------------------------------------
# Decoding
# ------------------------------------------------------------------

def number_text(value):
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _decode_text(prop, cell):
    if cell.kind is CellKind.BOOLEAN:
        return "TRUE" if cell.value else "FALSE"
    if cell.kind is CellKind.NUMBER:
        if cell.is_date and isinstance(cell.value, datetime.date):
            return cell.value.isoformat()
        return number_text(cell.value)
    return cell.value


def _parse_number(prop, cell):
    """Numeric value of *cell* as a ``Decimal``."""
    if cell.kind is CellKind.NUMBER and not cell.is_date:
        return Decimal(str(cell.value))
    if cell.kind is CellKind.TEXT:
        try:
            return Decimal(cell.value.strip())
        except InvalidOperation:
            pass
    raise UnresolvableValueError(prop.name, cell.value, "expected a number")


def _decode_integer(prop, cell):
    number = _parse_number(prop, cell)
    if number != number.to_integral_value():
        raise UnresolvableValueError(prop.name, cell.value, "expected a whole number")
    return int(number)


def _decode_decimal(prop, cell):
    number = _parse_number(prop, cell)
    if prop.value_kind.target is float:
        return float(number)
    return number


def _decode_boolean(prop, cell):
    if cell.kind is not CellKind.BOOLEAN:
        raise UnresolvableValueError(prop.name, cell.value, "expected TRUE or FALSE")
    return bool(cell.value)


def _decode_date(prop, cell):
    if cell.kind is not CellKind.NUMBER:
        raise UnresolvableValueError(prop.name, cell.value, "expected a date")
    value = cell.value
    if isinstance(value, (int, float)):
        # Serial number without a date format
        value = from_excel(value)
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    raise UnresolvableValueError(prop.name, value, "expected a date")


def _decode_enumeration(prop, cell):
    enum_cls = prop.value_kind.target
    name = _decode_text(prop, cell)
    member = enum_cls.__members__.get(name)
    if member is None:
        raise UnresolvableValueError(
            prop.name, name, f"not a member of {enum_cls.__name__}")
    return member


def _decode_reference(prop, cell, resolver):
    target = prop.value_kind.target
    if resolver is None:
        raise UnsupportedTypeError(prop.name, target)
    bookmark = _decode_text(prop, cell)
    entity = resolver.lookup(bookmark, target)
    if entity is None:
        raise UnresolvedReferenceError(bookmark, target)
    return entity


_DECODERS = {
    Kind.TEXT: _decode_text,
    Kind.INTEGER: _decode_integer,
    Kind.DECIMAL: _decode_decimal,
    Kind.BOOLEAN: _decode_boolean,
    Kind.DATE: _decode_date,
    Kind.ENUMERATION: _decode_enumeration,
}


def decode(prop, cell, resolver=None):
    """Return the property value held by *cell*, or ``None`` when blank."""
    kind = prop.kind
    if kind is Kind.UNSUPPORTED:
        raise UnsupportedTypeError(prop.name, prop.value_kind.target)
    if cell.is_blank:
        return None
    if kind is Kind.REFERENCE:
        return _decode_reference(prop, cell, resolver)
    decoder = _DECODERS.get(kind)
    if decoder is None:
        raise UnsupportedTypeError(prop.name, prop.value_kind.target)
    return decoder(prop, cell)
