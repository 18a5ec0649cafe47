"""
Bookmarks: opaque strings that identify one entity by type and identifier.

A bookmark has the form ``<TypeName>:<identifier>``.  The
:class:`BookmarkService` keeps an in-memory registry of entities; an
application with its own persistence supplies any object with the same
``bookmark_for`` / ``lookup`` methods instead.
"""

import logging
from typing import Optional, Protocol

logger = logging.getLogger(__name__)

SEPARATOR = ":"


class ReferenceResolver(Protocol):
    def bookmark_for(self, entity) -> str: ...

    def lookup(self, bookmark: str, expected_type: type) -> Optional[object]: ...


def parse_bookmark(bookmark):
    """Split a bookmark into ``(type_name, identifier)``.

    Raises
    ------
    ValueError
        If *bookmark* has no separator.
    """
    type_name, sep, identifier = str(bookmark).partition(SEPARATOR)
    if not sep or not type_name or not identifier:
        raise ValueError(f"Malformed bookmark: {bookmark!r}")
    return type_name, identifier


class BookmarkService:
    """In-memory registry mapping bookmarks to entities."""

    def __init__(self, entities=(), id_attribute="id"):
        self.id_attribute = id_attribute
        self._entities = {}
        for entity in entities:
            self.register(entity)

    def _identifier(self, entity):
        identifier = getattr(entity, self.id_attribute, None)
        if identifier is None:
            raise ValueError(
                f"{type(entity).__name__} has no '{self.id_attribute}' to bookmark")
        return str(identifier)

    def register(self, entity):
        """Make *entity* resolvable; returns its bookmark."""
        bookmark = self.bookmark_for(entity)
        self._entities[bookmark] = entity
        return bookmark

    def bookmark_for(self, entity):
        return f"{type(entity).__name__}{SEPARATOR}{self._identifier(entity)}"

    def lookup(self, bookmark, expected_type):
        """Return the registered entity, or ``None``.

        Malformed bookmarks and entities that are not instances of
        *expected_type* also give ``None``.
        """
        try:
            parse_bookmark(bookmark)
        except ValueError:
            logger.debug(f"Malformed bookmark {bookmark!r}")
            return None
        entity = self._entities.get(str(bookmark))
        if entity is None or not isinstance(entity, expected_type):
            return None
        return entity

    def __len__(self):
        return len(self._entities)
