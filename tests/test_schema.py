"""Tests for schema introspection and column binding."""

import os
import sys
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import ClassVar, Optional

import pytest
from openpyxl import Workbook

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from tests.sample_models import Category, Item, Person, Timestamped, ToDoItem
from excel_marshal.binder import bind_columns, export_columns
from excel_marshal.document import Row
from excel_marshal.errors import UnsupportedTypeError
from excel_marshal.schema import (
    DataclassIntrospector,
    Kind,
    column,
    infer_value_kind,
    new_transient_instance,
)


@pytest.fixture
def introspector():
    return DataclassIntrospector()


def _header_row(*names):
    wb = Workbook()
    ws = wb.active
    for ci, name in enumerate(names, 1):
        ws.cell(row=1, column=ci, value=name)
    return Row(0, tuple(next(ws.iter_rows(min_row=1, max_row=1))))


# ---------------------------------------------------------------------------
# Kind inference
# ---------------------------------------------------------------------------

class TestInferValueKind:
    @pytest.mark.parametrize("annotation, kind", [
        (str, Kind.TEXT),
        (int, Kind.INTEGER),
        (float, Kind.DECIMAL),
        (Decimal, Kind.DECIMAL),
        (bool, Kind.BOOLEAN),
        (date, Kind.DATE),
        (Category, Kind.ENUMERATION),
        (Person, Kind.REFERENCE),
        (Optional[str], Kind.TEXT),
    ])
    def test_kinds(self, annotation, kind):
        assert infer_value_kind(annotation).kind is kind

    def test_decimal_target_follows_annotation(self):
        assert infer_value_kind(Decimal).target is Decimal
        assert infer_value_kind(float).target is float

    def test_enum_and_reference_targets(self):
        assert infer_value_kind(Category).target is Category
        assert infer_value_kind(Person).target is Person

    def test_datetime_and_collections_unsupported(self):
        assert infer_value_kind(datetime).kind is Kind.UNSUPPORTED
        assert infer_value_kind(list).kind is Kind.UNSUPPORTED
        assert infer_value_kind(dict).target is dict


# ---------------------------------------------------------------------------
# Introspector
# ---------------------------------------------------------------------------

class TestDataclassIntrospector:
    def test_declaration_order_and_name_override(self, introspector):
        names = [p.name for p in introspector.exportable_properties(Item)]
        assert names == ["name", "cost", "dueBy", "owner"]

    def test_attribute_keeps_python_name(self, introspector):
        prop = introspector.property_named(Item, "dueBy")
        assert prop.attribute == "due_by"
        assert prop.kind is Kind.DATE

    def test_hidden_excluded_from_export_but_bindable(self, introspector):
        exported = [p.name for p in introspector.exportable_properties(ToDoItem)]
        assert "internal_ref" not in exported
        assert introspector.property_named(ToDoItem, "internal_ref") is not None

    def test_lookup_is_exact(self, introspector):
        assert introspector.property_named(Item, "Name") is None
        assert introspector.property_named(Item, "due_by") is None

    def test_results_cached(self, introspector):
        assert introspector.properties(Item) is introspector.properties(Item)

    def test_readonly_rejects_write(self, introspector):
        prop = introspector.property_named(ToDoItem, "created_by")
        item = ToDoItem(description="x")
        with pytest.raises(AttributeError):
            prop.write(item, "someone")

    def test_plain_annotated_class(self, introspector):
        class Plain:
            kind_count: ClassVar[int] = 0
            title: str
            amount: int
            _private: str

        props = introspector.properties(Plain)
        assert [p.name for p in props] == ["title", "amount"]


class TestNewTransientInstance:
    def test_required_fields_filled_with_none(self):
        item = new_transient_instance(Item)
        assert item.name is None
        assert item.cost is None
        assert item.owner is None

    def test_plain_class(self):
        class Plain:
            pass

        assert isinstance(new_transient_instance(Plain), Plain)


# ---------------------------------------------------------------------------
# Binder
# ---------------------------------------------------------------------------

class TestBindColumns:
    def test_binds_by_name_any_order(self, introspector):
        mapping = bind_columns(introspector, Item, _header_row("owner", "name"))
        assert {c: p.name for c, p in mapping.items()} == {1: "owner", 2: "name"}

    def test_unknown_and_blank_headers_ignored(self, introspector):
        mapping = bind_columns(
            introspector, Item, _header_row("name", None, "doesNotExist", "cost"))
        assert sorted(mapping) == [1, 4]

    def test_duplicate_names_bind_both_columns(self, introspector):
        mapping = bind_columns(introspector, Item, _header_row("name", "name"))
        assert mapping[1] is mapping[2]

    def test_unsupported_bound_property_fails(self, introspector):
        with pytest.raises(UnsupportedTypeError) as exc:
            bind_columns(introspector, Timestamped, _header_row("stamped_at"))
        assert exc.value.property_name == "stamped_at"

    def test_export_columns_unsupported_fails(self, introspector):
        with pytest.raises(UnsupportedTypeError):
            export_columns(introspector, Timestamped)

    def test_numeric_header_matches_whole_number_name(self, introspector):
        @dataclass
        class Yearly:
            total: int = column(name="2024", default=None)

        for header in (2024, 2024.0):
            mapping = bind_columns(introspector, Yearly, _header_row(header))
            assert mapping[1].attribute == "total"
