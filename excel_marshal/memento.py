"""
Mementos and plain values.

A *plain value* is the JSON/YAML-friendly form of a property value: dates
as ISO strings, decimals as strings, enum members by name and entities by
bookmark.  A *memento* is a URL-safe base64 string of a JSON object of
plain values, enough to rebuild a view-model instance.
"""

import base64
import binascii
import dataclasses
import datetime
import json
from decimal import Decimal, InvalidOperation

from .errors import (
    UnresolvableValueError,
    UnresolvedReferenceError,
    UnsupportedTypeError,
)
from .schema import Kind, new_transient_instance

_TRUE_WORDS = {"true", "yes", "y", "1"}
_FALSE_WORDS = {"false", "no", "n", "0"}


# ------------------------------------------------------------------
# Plain values
# ------------------------------------------------------------------

def to_plain(prop, value, resolver=None):
    """Convert a property value to its plain form."""
    kind = prop.kind
    if kind is Kind.UNSUPPORTED:
        raise UnsupportedTypeError(prop.name, prop.value_kind.target)
    if value is None:
        return None
    if kind is Kind.TEXT:
        return str(value)
    if kind is Kind.INTEGER:
        return int(value)
    if kind is Kind.DECIMAL:
        return str(value) if isinstance(value, Decimal) else float(value)
    if kind is Kind.BOOLEAN:
        return bool(value)
    if kind is Kind.DATE:
        return value.isoformat()
    if kind is Kind.ENUMERATION:
        return value.name
    if resolver is None:
        raise UnsupportedTypeError(prop.name, prop.value_kind.target)
    return resolver.bookmark_for(value)


def from_plain(prop, raw, resolver=None):
    """Inverse of :func:`to_plain`; also accepts YAML-native dates."""
    kind = prop.kind
    target = prop.value_kind.target
    if kind is Kind.UNSUPPORTED:
        raise UnsupportedTypeError(prop.name, target)
    if raw is None:
        return None
    try:
        if kind is Kind.TEXT:
            return str(raw)
        if kind is Kind.INTEGER:
            return int(raw)
        if kind is Kind.DECIMAL:
            return float(raw) if target is float else Decimal(str(raw))
        if kind is Kind.BOOLEAN:
            return _plain_bool(raw)
        if kind is Kind.DATE:
            if isinstance(raw, datetime.datetime):
                return raw.date()
            if isinstance(raw, datetime.date):
                return raw
            return datetime.date.fromisoformat(str(raw))
    except (ValueError, TypeError, InvalidOperation) as e:
        raise UnresolvableValueError(prop.name, raw, str(e)) from e

    if kind is Kind.ENUMERATION:
        member = target.__members__.get(str(raw))
        if member is None:
            raise UnresolvableValueError(
                prop.name, raw, f"not a member of {target.__name__}")
        return member

    if resolver is None:
        raise UnsupportedTypeError(prop.name, target)
    entity = resolver.lookup(str(raw), target)
    if entity is None:
        raise UnresolvedReferenceError(raw, target)
    return entity


def _plain_bool(raw):
    if isinstance(raw, bool):
        return raw
    word = str(raw).strip().lower()
    if word in _TRUE_WORDS:
        return True
    if word in _FALSE_WORDS:
        return False
    raise ValueError(f"not a boolean: {raw!r}")


# ------------------------------------------------------------------
# Memento strings
# ------------------------------------------------------------------

def encode_memento(values):
    payload = json.dumps(values, sort_keys=True, separators=(",", ":"))
    return base64.urlsafe_b64encode(payload.encode("utf-8")).decode("ascii")


def decode_memento(memento):
    try:
        payload = base64.urlsafe_b64decode(memento.encode("ascii"))
        values = json.loads(payload.decode("utf-8"))
    except (binascii.Error, UnicodeError, ValueError) as e:
        raise ValueError(f"Malformed memento: {e}") from e
    if not isinstance(values, dict):
        raise ValueError("Malformed memento: expected an object")
    return values


# ------------------------------------------------------------------
# View-model bridge
# ------------------------------------------------------------------

class ViewModelBridge:
    """Rebuilds view-model records from a template instance.

    A record type is a view model when it sets ``__view_model__ = True``.
    ``instantiate`` calls ``cls.from_memento(values)`` when the type defines
    it, with *values* keyed by attribute name; otherwise the instance is
    constructed directly from the values.
    """

    def __init__(self, introspector, resolver=None):
        self.introspector = introspector
        self.resolver = resolver

    def is_view_model_type(self, cls):
        return bool(getattr(cls, "__view_model__", False))

    def memento_of(self, instance):
        props = self.introspector.properties(type(instance))
        values = {
            p.attribute: to_plain(p, p.read(instance), self.resolver)
            for p in props
        }
        return encode_memento(values)

    def instantiate(self, cls, memento):
        raw = decode_memento(memento)
        values = {
            p.attribute: from_plain(p, raw[p.attribute], self.resolver)
            for p in self.introspector.properties(cls)
            if p.attribute in raw
        }

        factory = getattr(cls, "from_memento", None)
        if callable(factory):
            return factory(values)

        if dataclasses.is_dataclass(cls):
            init_names = {f.name for f in dataclasses.fields(cls) if f.init}
            instance = cls(**{k: v for k, v in values.items() if k in init_names})
            for k, v in values.items():
                if k not in init_names:
                    setattr(instance, k, v)
            return instance

        instance = new_transient_instance(cls)
        for k, v in values.items():
            setattr(instance, k, v)
        return instance
