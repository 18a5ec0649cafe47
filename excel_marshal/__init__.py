"""excel_marshal.

Exports collections of typed records to a single-sheet ``.xlsx`` workbook
and imports them back after offline editing:

  * **Export** – one header row with the visible property names, one data
    row per record, header frozen, dates formatted.
  * **Import** – columns bound to properties by header name, blank rows
    skipped, unknown columns ignored, the first failing row aborts the
    import.

Record types are dataclasses (or annotated classes).  Entity-valued
properties are written as bookmarks, and view-model types are rebuilt from
a memento of each imported row.
"""

from .bookmarks import BookmarkService
from .errors import (
    ExcelMarshalError,
    FormatError,
    RowProcessingError,
    UnresolvableValueError,
    UnresolvedReferenceError,
    UnsupportedTypeError,
)
from .exporter import export_records, export_to_bytes
from .importer import import_records
from .memento import ViewModelBridge
from .schema import DataclassIntrospector, Kind, column
from .service import ExcelService

__all__ = [
    "BookmarkService",
    "DataclassIntrospector",
    "ExcelMarshalError",
    "ExcelService",
    "FormatError",
    "Kind",
    "RowProcessingError",
    "UnresolvableValueError",
    "UnresolvedReferenceError",
    "UnsupportedTypeError",
    "ViewModelBridge",
    "column",
    "export_records",
    "export_to_bytes",
    "import_records",
]
