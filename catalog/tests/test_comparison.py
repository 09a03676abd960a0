"""Tests for the field-rule comparison engine."""

import pytest

from catalog.comparison import (
    ValueKind,
    best_item_for_field,
    classify_value,
    compare_items,
    field_differs,
    search_items,
    sort_fields,
)
from catalog.models import ComparableField, ComparableItem, ComparisonRule, FieldType


def _field(rule=ComparisonRule.HIGHER_IS_BETTER, field_id="hz", ftype=FieldType.NUMBER, **kwargs):
    return ComparableField(id=field_id, label=field_id, type=ftype, comparison_rule=rule, **kwargs)


def _item(item_id, **specs):
    return ComparableItem(id=item_id, name=f"TV {item_id}", specs=specs)


class TestBestItemForField:
    """Tests for best_item_for_field."""

    def test_higher_is_better_picks_largest(self):
        items = [_item("a", hz=120), _item("b", hz=144)]
        assert best_item_for_field(_field(), items) == "b"

    def test_lower_is_better_picks_smallest(self):
        field_def = _field(ComparisonRule.LOWER_IS_BETTER, field_id="lag")
        items = [_item("a", lag=9.2), _item("b", lag=5.1), _item("c", lag=13)]
        assert best_item_for_field(field_def, items) == "b"

    def test_absent_value_never_seeds(self):
        items = [_item("a"), _item("b", hz=100)]
        assert best_item_for_field(_field(), items) == "b"

    def test_none_value_never_seeds(self):
        items = [_item("a", hz=None), _item("b", hz=100)]
        assert best_item_for_field(_field(), items) == "b"

    @pytest.mark.parametrize("rule", [ComparisonRule.EQUAL, ComparisonRule.NONE])
    def test_equal_and_none_rules_have_no_best(self, rule):
        items = [_item("a", hz=60), _item("b", hz=240)]
        assert best_item_for_field(_field(rule), items) is None

    @pytest.mark.parametrize("items", [[], [_item("a", hz=120)]])
    def test_fewer_than_two_items(self, items):
        assert best_item_for_field(_field(), items) is None

    def test_tie_keeps_first_item(self):
        a, b = _item("a", hz=100), _item("b", hz=100)
        assert best_item_for_field(_field(), [a, b]) == "a"
        assert best_item_for_field(_field(), [b, a]) == "b"

    def test_non_numeric_values_are_never_promoted(self):
        items = [_item("a", hz=100), _item("b", hz="fast"), _item("c", hz=True)]
        assert best_item_for_field(_field(), items) == "a"

    def test_all_non_numeric_returns_seed(self):
        field_def = _field(field_id="os", ftype=FieldType.TEXT)
        items = [_item("a"), _item("b", os="Tizen"), _item("c", os="WebOS")]
        assert best_item_for_field(field_def, items) == "b"

    def test_orphaned_spec_keys_are_ignored(self):
        items = [_item("a", hz=120, removed=1), _item("b", hz=60, removed=5)]
        assert best_item_for_field(_field(), items) == "a"


class TestFieldDiffers:
    """Tests for field_differs."""

    def test_same_values(self):
        assert field_differs("hz", [_item("a", hz=120), _item("b", hz=120)]) is False

    def test_different_values(self):
        assert field_differs("hz", [_item("a", hz=120), _item("b", hz=144)]) is True

    @pytest.mark.parametrize("value", [False, 0, ""])
    def test_absent_differs_from_falsy_values(self, value):
        assert field_differs("x", [_item("a"), _item("b", x=value)]) is True
        assert field_differs("x", [_item("a", x=value), _item("b")]) is True

    def test_all_absent_is_not_different(self):
        assert field_differs("x", [_item("a"), _item("b"), _item("c")]) is False

    def test_boolean_and_int_differ(self):
        assert field_differs("x", [_item("a", x=True), _item("b", x=1)]) is True
        assert field_differs("x", [_item("a", x=0), _item("b", x=False)]) is True

    def test_compares_by_value(self):
        assert field_differs("x", [_item("a", x=[1, 2]), _item("b", x=[1, 2])]) is False

    @pytest.mark.parametrize("items", [[], [_item("a", hz=1)]])
    def test_fewer_than_two_items(self, items):
        assert field_differs("hz", items) is False

    def test_symmetric_under_reversal(self):
        items = [_item("a", hz=120), _item("b", hz=120), _item("c")]
        assert field_differs("hz", items) == field_differs("hz", list(reversed(items)))


class TestClassifyValue:
    """Tests for classify_value."""

    def test_absent(self):
        assert classify_value(None, _field()).kind == ValueKind.ABSENT

    def test_boolean_field(self):
        field_def = _field(ComparisonRule.EQUAL, field_id="hdr", ftype=FieldType.BOOLEAN)
        assert classify_value(True, field_def).kind == ValueKind.BOOLEAN_TRUE
        assert classify_value(False, field_def).kind == ValueKind.BOOLEAN_FALSE

    def test_boolean_is_never_scalar(self):
        assert classify_value(True, _field()).kind == ValueKind.BOOLEAN_TRUE

    def test_scalar_carries_unit(self):
        display = classify_value(120, _field(unit="Hz"))
        assert display.kind == ValueKind.SCALAR
        assert display.to_dict() == {"kind": "scalar", "value": 120, "unit": "Hz"}

    def test_zero_is_scalar_not_absent(self):
        assert classify_value(0, _field()).kind == ValueKind.SCALAR


class TestCompareItems:
    """Tests for the full comparison table."""

    def test_rows_follow_field_order(self):
        fields = [
            _field(field_id="b", order=2),
            _field(field_id="a", order=1),
            _field(field_id="c", order=1),
        ]
        table = compare_items(fields, [_item("x"), _item("y")])
        assert [row.field.id for row in table.rows] == ["a", "c", "b"]

    def test_row_contents(self):
        hz = _field(unit="Hz")
        a = _item("a", hz=120)
        b = _item("b", hz=144)
        b.manual_best_fields = {"hz"}

        row = compare_items([hz], [a, b]).rows[0]

        assert row.best_item_id == "b"
        assert row.differs is True
        assert row.manual_best_item_ids == ["b"]
        assert row.cells["a"].value == 120

    def test_to_dict_is_serializable(self):
        table = compare_items([_field()], [_item("a", hz=1), _item("b")])
        data = table.to_dict()
        assert data["rows"][0]["cells"]["b"] == {"kind": "absent"}
        assert [i["id"] for i in data["items"]] == ["a", "b"]


class TestHelpers:
    def test_sort_fields_is_stable(self):
        fields = [_field(field_id=str(i), order=0) for i in range(5)]
        assert [f.id for f in sort_fields(fields)] == ["0", "1", "2", "3", "4"]

    def test_search_items_matches_name_and_brand(self):
        items = [
            ComparableItem(id="1", name="OLED C3", brand="LG"),
            ComparableItem(id="2", name="Bravia A80L", brand="Sony"),
        ]
        assert [i.id for i in search_items(items, "lg")] == ["1"]
        assert [i.id for i in search_items(items, "BRAVIA")] == ["2"]
        assert len(search_items(items, "  ")) == 2
