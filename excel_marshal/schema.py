"""
Schema introspection: discovers the ordered set of properties of a record
type and the value kind each one marshals as.

Record types are normally dataclasses.  Plain classes work too; their
annotated attributes are used in declaration order (base classes first).
Per-field options are attached through :func:`column`::

    @dataclass
    class Item:
        name: str
        due_by: date = column(name="dueBy", default=None)
        internal_code: str = column(hidden=True, default=None)
"""

import dataclasses
import datetime
import enum
import inspect
import logging
import types
import typing
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Optional

logger = logging.getLogger(__name__)

# Keys used in dataclass field metadata
NAME_KEY = "excel_name"
HIDDEN_KEY = "excel_hidden"
READONLY_KEY = "excel_readonly"

_UNION_TYPES = tuple(
    t for t in (typing.Union, getattr(types, "UnionType", None)) if t is not None
)


class Kind(enum.Enum):
    """Closed set of value kinds a single cell can carry."""
    TEXT = "text"
    INTEGER = "integer"
    DECIMAL = "decimal"
    BOOLEAN = "boolean"
    DATE = "date"
    ENUMERATION = "enumeration"
    REFERENCE = "reference"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True)
class ValueKind:
    """A :class:`Kind` plus the Python type it is bound to.

    ``target`` is the enum class for ENUMERATION, the entity class for
    REFERENCE, ``Decimal`` or ``float`` for DECIMAL and the offending
    annotation for UNSUPPORTED.
    """
    kind: Kind
    target: Any = None


@dataclass(frozen=True)
class PropertyDescriptor:
    """One property of a record type that can occupy a column."""
    name: str
    attribute: str
    value_kind: ValueKind
    visible: bool = True
    writable: bool = True

    @property
    def kind(self):
        return self.value_kind.kind

    def read(self, record):
        return getattr(record, self.attribute, None)

    def write(self, record, value):
        if not self.writable:
            raise AttributeError(f"Property '{self.name}' is read-only")
        setattr(record, self.attribute, value)


def column(*, name=None, hidden=False, readonly=False, **field_kwargs):
    """Return a dataclass ``field`` carrying marshalling options.

    Parameters
    ----------
    name : str or None
        Header text for the column.  Defaults to the attribute name.
    hidden : bool
        Exclude the property from exports.  Imports still bind it by name.
    readonly : bool
        Reject writes during import.
    **field_kwargs
        Passed through to :func:`dataclasses.field`.
    """
    metadata = dict(field_kwargs.pop("metadata", None) or {})
    if name is not None:
        metadata[NAME_KEY] = name
    metadata[HIDDEN_KEY] = hidden
    metadata[READONLY_KEY] = readonly
    return dataclasses.field(metadata=metadata, **field_kwargs)


def _unwrap_optional(annotation):
    """``Optional[X]`` -> ``X``; other annotations are returned as-is."""
    if typing.get_origin(annotation) in _UNION_TYPES:
        args = [a for a in typing.get_args(annotation) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


def infer_value_kind(annotation) -> ValueKind:
    """Map a type annotation to the :class:`ValueKind` it marshals as."""
    annotation = _unwrap_optional(annotation)
    if typing.get_origin(annotation) is not None or not isinstance(annotation, type):
        return ValueKind(Kind.UNSUPPORTED, annotation)

    # bool before int, date after datetime: both are subclasses
    if issubclass(annotation, bool):
        return ValueKind(Kind.BOOLEAN)
    if issubclass(annotation, enum.Enum):
        return ValueKind(Kind.ENUMERATION, annotation)
    if issubclass(annotation, str):
        return ValueKind(Kind.TEXT)
    if issubclass(annotation, int):
        return ValueKind(Kind.INTEGER)
    if issubclass(annotation, (float, Decimal)):
        return ValueKind(Kind.DECIMAL, Decimal if issubclass(annotation, Decimal) else float)
    if issubclass(annotation, datetime.datetime):
        return ValueKind(Kind.UNSUPPORTED, annotation)
    if issubclass(annotation, datetime.date):
        return ValueKind(Kind.DATE)
    if dataclasses.is_dataclass(annotation):
        return ValueKind(Kind.REFERENCE, annotation)
    return ValueKind(Kind.UNSUPPORTED, annotation)


class DataclassIntrospector:
    """Builds :class:`PropertyDescriptor` lists from class annotations.

    Results are cached per class; descriptors are immutable so the cached
    tuples can be shared between calls.
    """

    def __init__(self):
        self._cache = {}

    def properties(self, cls):
        """All properties of *cls*, visible or not, in declaration order."""
        props = self._cache.get(cls)
        if props is None:
            props = tuple(self._build(cls))
            self._cache[cls] = props
            logger.debug(f"Introspected {cls.__name__}: "
                         f"{[p.name for p in props]}")
        return props

    def exportable_properties(self, cls):
        """Visible properties of *cls* in declaration order."""
        return [p for p in self.properties(cls) if p.visible]

    def property_named(self, cls, name) -> Optional[PropertyDescriptor]:
        """Exact (case-sensitive) lookup by header name."""
        for prop in self.properties(cls):
            if prop.name == name:
                return prop
        return None

    def _build(self, cls):
        hints = typing.get_type_hints(cls)

        if dataclasses.is_dataclass(cls):
            for f in dataclasses.fields(cls):
                meta = f.metadata or {}
                yield PropertyDescriptor(
                    name=meta.get(NAME_KEY, f.name),
                    attribute=f.name,
                    value_kind=infer_value_kind(hints.get(f.name, f.type)),
                    visible=not meta.get(HIDDEN_KEY, False),
                    writable=not meta.get(READONLY_KEY, False),
                )
            return

        seen = set()
        for klass in reversed(cls.__mro__):
            for attr in inspect.get_annotations(klass):
                if attr in seen or attr.startswith("_"):
                    continue
                if typing.get_origin(hints.get(attr)) is typing.ClassVar:
                    continue
                seen.add(attr)
                yield PropertyDescriptor(
                    name=attr,
                    attribute=attr,
                    value_kind=infer_value_kind(hints.get(attr)),
                )


def new_transient_instance(cls):
    """Create an empty instance of *cls* for an import row.

    Dataclass fields without a default are filled with ``None``.
    """
    if dataclasses.is_dataclass(cls):
        required = {
            f.name: None
            for f in dataclasses.fields(cls)
            if f.init
            and f.default is dataclasses.MISSING
            and f.default_factory is dataclasses.MISSING
        }
        return cls(**required)
    return cls()
