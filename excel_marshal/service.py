"""
``ExcelService``: one object holding the configuration and collaborators
needed to export and import records.
"""

import logging
import os

from .bookmarks import BookmarkService
from .config import DEFAULTS
from .exporter import export_records, export_to_bytes
from .importer import import_file, import_records
from .memento import ViewModelBridge
from .schema import DataclassIntrospector

logger = logging.getLogger(__name__)


class ExcelService:
    """Export records to ``.xlsx`` and import them back.

    Parameters
    ----------
    config : dict or None
        Settings as returned by :func:`~excel_marshal.config.load_config`.
    introspector : Introspector or None
        Defaults to :class:`~excel_marshal.schema.DataclassIntrospector`.
    resolver : ReferenceResolver or None
        Defaults to an empty :class:`~excel_marshal.bookmarks.BookmarkService`.
    view_models : ViewModelBridge or None
        Defaults to a :class:`~excel_marshal.memento.ViewModelBridge` over
        the same introspector and resolver.
    """

    def __init__(self, config=None, introspector=None, resolver=None,
                 view_models=None):
        self.config = dict(DEFAULTS)
        self.config.update(config or {})
        self.introspector = introspector or DataclassIntrospector()
        self.resolver = resolver if resolver is not None else BookmarkService(
            id_attribute=self.config["bookmark_id_attribute"])
        self.view_models = view_models or ViewModelBridge(
            self.introspector, self.resolver)

    def to_excel(self, cls, records, output_path=None):
        """Write *records* to a workbook and return its path."""
        return export_records(
            cls, records, self.introspector, self.resolver,
            output_path=output_path,
            output_dir=self.config["output_dir"],
            sheet_name=self.config["sheet_name"],
            date_format=self.config["date_format"],
        )

    def to_bytes(self, cls, records):
        """Return the workbook for *records* as bytes."""
        return export_to_bytes(
            cls, records, self.introspector, self.resolver,
            sheet_name=self.config["sheet_name"],
            date_format=self.config["date_format"],
        )

    def from_excel(self, cls, source, instance_factory=None):
        """Import records of *cls* from workbook bytes or a file path."""
        if isinstance(source, (str, os.PathLike)):
            logger.info(f"Reading {source}")
            return import_file(cls, source, self.introspector, self.resolver,
                               self.view_models, instance_factory)
        return import_records(cls, source, self.introspector, self.resolver,
                              self.view_models, instance_factory)
