"""
Error types raised while marshalling records to and from workbooks.

Every error is fatal to the export or import call that raised it.  Row-level
failures during import are wrapped in :class:`RowProcessingError` with the
original error chained as ``__cause__``.
"""


class ExcelMarshalError(Exception):
    """Base class for all marshalling errors."""


class FormatError(ExcelMarshalError):
    """The supplied bytes are not a readable workbook."""


class UnsupportedTypeError(ExcelMarshalError):
    """A property's declared type has no cell conversion rule."""

    def __init__(self, property_name, python_type):
        self.property_name = property_name
        self.python_type = python_type
        type_name = getattr(python_type, "__name__", repr(python_type))
        super().__init__(
            f"Property '{property_name}' has unsupported type {type_name}"
        )


class UnresolvableValueError(ExcelMarshalError):
    """A cell holds a value that cannot be converted for its property."""

    def __init__(self, property_name, value, reason):
        self.property_name = property_name
        self.value = value
        self.reason = reason
        super().__init__(
            f"Cannot convert {value!r} for property '{property_name}': {reason}"
        )


class UnresolvedReferenceError(ExcelMarshalError):
    """A bookmark did not resolve to an entity."""

    def __init__(self, bookmark, expected_type):
        self.bookmark = bookmark
        self.expected_type = expected_type
        type_name = getattr(expected_type, "__name__", repr(expected_type))
        super().__init__(
            f"Bookmark '{bookmark}' does not resolve to a {type_name}"
        )


class RowProcessingError(ExcelMarshalError):
    """Any failure while importing one data row.

    ``row_number`` counts worksheet rows from 0, the header being row 0.
    """

    def __init__(self, row_number, message):
        self.row_number = row_number
        self.message = message
        super().__init__(
            f"Error processing Excel row nr. {row_number}. Message: {message}"
        )
