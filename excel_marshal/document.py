"""
Single-sheet workbook access on top of openpyxl.

The marshalling code only sees :class:`Document`, :class:`Row` and
:class:`Cell`; everything openpyxl-specific stays in this module.
"""

import datetime
import enum
import io
import logging
import re
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Optional

from openpyxl import Workbook, load_workbook
from openpyxl.styles import NamedStyle
from openpyxl.styles.numbers import is_date_format

from .errors import FormatError

logger = logging.getLogger(__name__)

MAX_SHEET_TITLE_LENGTH = 31
DATE_STYLE_NAME = "excel_marshal_date"

_INVALID_TITLE_CHARS = re.compile(r"[\[\]:*?/\\]")


class CellKind(enum.Enum):
    BLANK = "blank"
    TEXT = "text"
    NUMBER = "number"
    BOOLEAN = "boolean"


@dataclass(frozen=True)
class Cell:
    """Content of one cell.

    ``number_format`` is the display format read from the workbook;
    ``style`` is the shared named style applied when writing.
    """
    kind: CellKind
    value: Any = None
    number_format: Optional[str] = None
    style: Optional[NamedStyle] = field(default=None, compare=False)

    @property
    def is_blank(self):
        return self.kind is CellKind.BLANK

    @property
    def is_date(self):
        """True for numeric cells that present a date."""
        if self.kind is not CellKind.NUMBER:
            return False
        if isinstance(self.value, datetime.date):
            return True
        fmt = self.style.number_format if self.style is not None else self.number_format
        return bool(fmt) and is_date_format(fmt)


BLANK = Cell(CellKind.BLANK)


def text_cell(value):
    return Cell(CellKind.TEXT, value)


def number_cell(value, style=None):
    return Cell(CellKind.NUMBER, value, style=style)


def boolean_cell(value):
    return Cell(CellKind.BOOLEAN, value)


def cell_from_openpyxl(xl_cell):
    """Classify an openpyxl cell into a :class:`Cell`."""
    value = xl_cell.value
    if value is None or value == "":
        return BLANK
    if isinstance(value, bool):
        return Cell(CellKind.BOOLEAN, value)
    if isinstance(value, (int, float, Decimal, datetime.date, datetime.time,
                          datetime.timedelta)):
        return Cell(CellKind.NUMBER, value, number_format=xl_cell.number_format)
    return Cell(CellKind.TEXT, str(value))


def sheet_title(name):
    """Make *name* acceptable as an Excel worksheet title."""
    title = _INVALID_TITLE_CHARS.sub("_", name or "Sheet")
    return title[:MAX_SHEET_TITLE_LENGTH]


@dataclass
class Row:
    """One worksheet row; ``number`` is 0-based (header = 0)."""
    number: int
    cells: tuple = ()

    def cell(self, column):
        """Cell at the 1-based *column*; BLANK past the end of the row."""
        if 1 <= column <= len(self.cells):
            return cell_from_openpyxl(self.cells[column - 1])
        return BLANK

    def non_blank(self):
        """Yield ``(column, Cell)`` for every non-blank cell, left to right."""
        for ci in range(1, len(self.cells) + 1):
            cell = self.cell(ci)
            if not cell.is_blank:
                yield ci, cell


class Document:
    """The first worksheet of a workbook, read or written row by row."""

    def __init__(self, workbook, worksheet):
        self.workbook = workbook
        self.worksheet = worksheet
        self._next_row = 1

    @classmethod
    def new(cls, sheet_name=None):
        wb = Workbook()
        ws = wb.active
        ws.title = sheet_title(sheet_name)
        return cls(wb, ws)

    @classmethod
    def parse(cls, data):
        """Load a workbook from raw bytes.

        Formula cells yield their cached values.

        Raises
        ------
        FormatError
            If *data* is not a readable ``.xlsx`` workbook.
        """
        try:
            wb = load_workbook(io.BytesIO(data), data_only=True)
        except Exception as e:
            raise FormatError(f"Not a readable workbook: {e}") from e
        if not wb.worksheets:
            wb.close()
            raise FormatError("Workbook contains no worksheets")
        return cls(wb, wb.worksheets[0])

    # -- reading -----------------------------------------------------------

    def header(self):
        ws = self.worksheet
        cells = next(ws.iter_rows(min_row=1, max_row=1, min_col=1), ())
        return Row(0, tuple(cells))

    def data_rows(self):
        """Yield each row below the header, in order."""
        ws = self.worksheet
        for r, cells in enumerate(ws.iter_rows(min_row=2, min_col=1), start=1):
            yield Row(r, tuple(cells))

    # -- writing -----------------------------------------------------------

    def append_row(self, cells):
        """Write *cells* into the next free row, starting at column A."""
        ws = self.worksheet
        row = self._next_row
        for ci, cell in enumerate(cells, 1):
            if cell.is_blank:
                continue
            xl_cell = ws.cell(row=row, column=ci, value=cell.value)
            if cell.kind is CellKind.TEXT:
                # Text starting with "=" stays text, not a formula
                xl_cell.data_type = "s"
            if cell.style is not None:
                xl_cell.style = cell.style.name
        self._next_row += 1
        return row - 1

    def date_style(self, number_format):
        """Register and return the named style shared by all date cells."""
        style = NamedStyle(name=DATE_STYLE_NAME, number_format=number_format)
        self.workbook.add_named_style(style)
        return style

    def freeze_header(self):
        self.worksheet.freeze_panes = "A2"

    def save(self, target):
        """Save to a path or a binary file object."""
        self.workbook.save(target)

    def to_bytes(self):
        buf = io.BytesIO()
        self.workbook.save(buf)
        return buf.getvalue()

    def close(self):
        self.workbook.close()
