"""
Import: workbook bytes -> records.

Columns are bound to properties by header name, so column order does not
matter and unknown columns are ignored.  A data row whose mapped cells are
all blank produces no record.  The first failing row aborts the whole
import with a :class:`~excel_marshal.errors.RowProcessingError`.
"""

import functools
import logging

from .binder import bind_columns
from .codec import decode
from .document import Document
from .errors import RowProcessingError
from .schema import new_transient_instance

logger = logging.getLogger(__name__)


def _import_row(cls, row, mapping, resolver, view_models, instance_factory):
    """Return the record for *row*, or ``None`` for a blank row."""
    cells = [(mapping[ci], row.cell(ci)) for ci in sorted(mapping)]
    if all(cell.is_blank for _, cell in cells):
        return None

    imported = instance_factory()
    for prop, cell in cells:
        if cell.is_blank:
            continue
        prop.write(imported, decode(prop, cell, resolver))

    if view_models is not None and view_models.is_view_model_type(cls):
        memento = view_models.memento_of(imported)
        return view_models.instantiate(cls, memento)
    return imported


def read_records(cls, doc, introspector, resolver=None, view_models=None,
                 instance_factory=None):
    """Import every data row of an already parsed :class:`Document`."""
    if instance_factory is None:
        instance_factory = functools.partial(new_transient_instance, cls)

    mapping = bind_columns(introspector, cls, doc.header())
    if not mapping:
        logger.warning(f"Header row binds no columns to {cls.__name__}; "
                       f"every row will be treated as blank")

    records = []
    skipped = 0
    for row in doc.data_rows():
        try:
            record = _import_row(cls, row, mapping, resolver, view_models,
                                 instance_factory)
        except Exception as e:
            raise RowProcessingError(row.number, str(e)) from e
        if record is None:
            skipped += 1
            logger.debug(f"Skipping blank row {row.number}")
            continue
        records.append(record)

    logger.info(f"Imported {len(records)} {cls.__name__} record(s) "
                f"from {len(mapping)} bound column(s), {skipped} blank row(s)")
    return records


def import_records(cls, data, introspector, resolver=None, view_models=None,
                   instance_factory=None):
    """Import records of type *cls* from workbook bytes.

    Parameters
    ----------
    cls : type
        Record type to materialise.
    data : bytes
        Raw ``.xlsx`` content; only the first worksheet is read.
    introspector : Introspector
        Resolves header names to properties.
    resolver : ReferenceResolver or None
        Resolves bookmarks in entity-valued columns.
    view_models : ViewModelBridge or None
        Rebuilds view-model types from a memento of each imported row.
    instance_factory : callable or None
        Zero-argument factory for transient instances.  Defaults to
        :func:`~excel_marshal.schema.new_transient_instance`.

    Returns
    -------
    list
        One record per non-blank data row, in row order.

    Raises
    ------
    FormatError
        If *data* is not a workbook.
    UnsupportedTypeError
        If a bound column's property has no cell conversion.
    RowProcessingError
        On the first row that fails; the cause is chained.
    """
    doc = Document.parse(data)
    try:
        return read_records(cls, doc, introspector, resolver, view_models,
                            instance_factory)
    finally:
        doc.close()


def import_file(cls, path, introspector, resolver=None, view_models=None,
                instance_factory=None):
    """Read *path* and pass its bytes to :func:`import_records`."""
    with open(path, "rb") as f:
        data = f.read()
    return import_records(cls, data, introspector, resolver, view_models,
                          instance_factory)
