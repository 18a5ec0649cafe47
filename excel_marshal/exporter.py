"""
Export: records -> single-sheet workbook.

The header row holds the visible property names in declaration order; each
record becomes one data row.  The header row is frozen and every date cell
shares one named style created for the call.
"""

import logging
import os
import tempfile

from .binder import export_columns
from .codec import encode
from .document import Document, text_cell

logger = logging.getLogger(__name__)

DEFAULT_DATE_FORMAT = "yyyy-mm-dd"
XLSX_SUFFIX = ".xlsx"


def build_document(cls, records, introspector, resolver=None,
                   sheet_name=None, date_format=DEFAULT_DATE_FORMAT):
    """Marshal *records* into a new :class:`Document`.

    Any conversion error aborts the build; the partial document is closed
    and the error propagates.
    """
    props = export_columns(introspector, cls)
    doc = Document.new(sheet_name or cls.__name__)
    try:
        doc.append_row([text_cell(p.name) for p in props])

        date_style = doc.date_style(date_format)
        count = 0
        for record in records:
            doc.append_row([
                encode(p, p.read(record), resolver, date_style)
                for p in props
            ])
            count += 1

        doc.freeze_header()
    except Exception:
        doc.close()
        raise

    logger.info(f"Exported {count} {cls.__name__} record(s) "
                f"in {len(props)} column(s)")
    return doc


def export_records(cls, records, introspector, resolver=None,
                   output_path=None, output_dir=None, sheet_name=None,
                   date_format=DEFAULT_DATE_FORMAT):
    """Export *records* of type *cls* to an ``.xlsx`` file.

    Parameters
    ----------
    cls : type
        Record type; its visible properties become the columns.
    records : iterable
        Instances of *cls*, written in order.
    introspector : Introspector
        Supplies the property list.
    resolver : ReferenceResolver or None
        Supplies bookmarks for entity-valued properties.
    output_path : str or None
        Where to write.  When ``None`` a temporary file named after the
        sheet is created (in *output_dir* if given).
    output_dir : str or None
        Directory for the temporary file.
    sheet_name : str or None
        Worksheet title; defaults to the class name.
    date_format : str
        Number format applied to date cells.

    Returns
    -------
    str
        Path to the written workbook.
    """
    doc = build_document(cls, records, introspector, resolver,
                         sheet_name=sheet_name, date_format=date_format)
    temp_path = None
    try:
        if output_path is None:
            if output_dir:
                os.makedirs(output_dir, exist_ok=True)
            fd, temp_path = tempfile.mkstemp(
                prefix="excel_marshal-",
                suffix=f"{doc.worksheet.title}{XLSX_SUFFIX}",
                dir=output_dir or None,
            )
            os.close(fd)
            output_path = temp_path
        else:
            os.makedirs(os.path.dirname(output_path) or ".", exist_ok=True)
        doc.save(output_path)
    except Exception:
        if temp_path is not None and os.path.exists(temp_path):
            os.remove(temp_path)
        raise
    finally:
        doc.close()

    logger.info(f"Wrote {output_path}")
    return output_path


def export_to_bytes(cls, records, introspector, resolver=None,
                    sheet_name=None, date_format=DEFAULT_DATE_FORMAT):
    """Like :func:`export_records` but return the workbook bytes."""
    doc = build_document(cls, records, introspector, resolver,
                         sheet_name=sheet_name, date_format=date_format)
    try:
        return doc.to_bytes()
    finally:
        doc.close()
