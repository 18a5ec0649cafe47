"""
Binds worksheet columns to record properties.

Export walks the visible properties in declaration order; import binds each
header cell to a property by exact name and ignores headers that match
nothing.
"""

import logging

from .codec import number_text
from .document import CellKind
from .errors import UnsupportedTypeError
from .schema import Kind

logger = logging.getLogger(__name__)


def export_columns(introspector, cls):
    """Return the visible properties of *cls*, one per column, in order."""
    props = list(introspector.exportable_properties(cls))
    for prop in props:
        if prop.kind is Kind.UNSUPPORTED:
            raise UnsupportedTypeError(prop.name, prop.value_kind.target)
    return props


def bind_columns(introspector, cls, header):
    """Build the ``{column_index: PropertyDescriptor}`` mapping for an import.

    Parameters
    ----------
    introspector : Introspector
        Resolves header text to properties.
    cls : type
        Record type being imported.
    header : Row
        Header row of the document.

    Returns
    -------
    dict[int, PropertyDescriptor]
        Keys are 1-based column indices.  Two columns with the same header
        name both map to the same property.
    """
    mapping = {}
    for column, cell in header.non_blank():
        if cell.kind is CellKind.NUMBER:
            name = number_text(cell.value)
        else:
            name = str(cell.value)
        prop = introspector.property_named(cls, name)
        if prop is None:
            logger.debug(f"Ignoring column {column} '{name}': "
                         f"no such property on {cls.__name__}")
            continue
        if prop.kind is Kind.UNSUPPORTED:
            raise UnsupportedTypeError(prop.name, prop.value_kind.target)
        mapping[column] = prop
        logger.debug(f"Column {column} -> {cls.__name__}.{prop.attribute}")
    return mapping
