"""Tests for the data model: fields, items, spec decoding, selection, sync documents."""

import pytest

from catalog.errors import MalformedDocument, SelectionFull, ValidationError
from catalog.models import (
    ComparableField,
    ComparableItem,
    ComparisonRule,
    FieldType,
    Selection,
    SyncDocument,
    decode_spec_value,
    make_slug,
    normalize_specs,
)


class TestComparableField:
    """Tests for ComparableField."""

    def test_from_dict_snake_case(self):
        f = ComparableField.from_dict({
            "id": "refresh_rate",
            "label": "Refresh rate",
            "type": "number",
            "unit": "Hz",
            "order": 4,
            "is_highlightable": True,
            "comparison_rule": "higher_is_better",
        })
        assert f.type == FieldType.NUMBER
        assert f.comparison_rule == ComparisonRule.HIGHER_IS_BETTER
        assert f.is_highlightable is True

    def test_from_dict_camel_case(self):
        f = ComparableField.from_dict({
            "id": "x",
            "label": "X",
            "type": "single-select",
            "options": ["a", "b"],
            "comparisonRule": "lower-is-better",
            "isHighlightable": True,
        })
        assert f.type == FieldType.SELECT
        assert f.comparison_rule == ComparisonRule.LOWER_IS_BETTER
        assert f.is_highlightable is True

    def test_to_dict_round_trip(self):
        f = ComparableField(id="res", label="Resolution", type=FieldType.SELECT, options=["4K", "8K"], order=2)
        assert ComparableField.from_dict(f.to_dict()) == f

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            ComparableField.from_dict({"id": "x", "label": "X", "type": "color"})

    def test_unknown_rule_rejected(self):
        with pytest.raises(ValidationError):
            ComparableField.from_dict({"id": "x", "label": "X", "comparison_rule": "biggest"})

    def test_select_requires_options(self):
        with pytest.raises(ValidationError):
            ComparableField(id="x", label="X", type=FieldType.SELECT).validate()

    def test_options_only_for_select(self):
        with pytest.raises(ValidationError):
            ComparableField(id="x", label="X", type=FieldType.TEXT, options=["a"]).validate()

    def test_empty_id_rejected(self):
        with pytest.raises(ValidationError):
            ComparableField(id=" ", label="X").validate()


class TestComparableItem:
    """Tests for ComparableItem."""

    def test_slug_derived_from_name(self):
        item = ComparableItem(id="1", name="LG OLED  C3")
        assert item.slug == "lg-oled-c3"

    def test_explicit_slug_kept(self):
        assert ComparableItem(id="1", name="LG", slug="custom").slug == "custom"

    def test_primary_image(self):
        assert ComparableItem(id="1", name="A", images=["x.png", "y.png"]).primary_image == "x.png"
        assert ComparableItem(id="1", name="A").primary_image is None

    def test_from_dict_drops_null_specs(self):
        item = ComparableItem.from_dict({"id": "1", "name": "A", "specs": {"hz": None, "size": 55}})
        assert item.specs == {"size": 55}
        assert "hz" not in item.specs

    def test_from_dict_reads_manual_best_fields(self):
        item = ComparableItem.from_dict({"id": "1", "name": "A", "manualBestFields": ["hz", "hz"]})
        assert item.manual_best_fields == {"hz"}

    def test_to_dict_round_trip(self):
        item = ComparableItem(
            id="1", name="A", brand="B", images=["i"], specs={"hz": 120}, manual_best_fields={"hz"}
        )
        assert ComparableItem.from_dict(item.to_dict()) == item

    def test_specs_must_be_mapping(self):
        with pytest.raises(ValidationError):
            ComparableItem.from_dict({"id": "1", "name": "A", "specs": [1, 2]})


class TestSpecDecoding:
    """Tests for decode_spec_value and normalize_specs."""

    @pytest.mark.parametrize("ftype", [FieldType.NUMBER, FieldType.RATING, FieldType.DIMENSION])
    def test_numeric_strings_parsed(self, ftype):
        f = ComparableField(id="n", label="N", type=ftype)
        assert decode_spec_value(f, "120") == 120
        assert decode_spec_value(f, "7.5") == 7.5

    def test_number_rejects_boolean(self):
        f = ComparableField(id="n", label="N", type=FieldType.NUMBER)
        with pytest.raises(ValidationError):
            decode_spec_value(f, True)

    def test_number_rejects_text(self):
        f = ComparableField(id="n", label="N", type=FieldType.NUMBER)
        with pytest.raises(ValidationError):
            decode_spec_value(f, "fast")

    @pytest.mark.parametrize("raw", ["nan", "inf", "-Infinity", "1e400", float("nan"), float("inf")])
    def test_number_rejects_non_finite(self, raw):
        f = ComparableField(id="n", label="N", type=FieldType.NUMBER)
        with pytest.raises(ValidationError):
            decode_spec_value(f, raw)

    def test_boolean_accepts_strings(self):
        f = ComparableField(id="b", label="B", type=FieldType.BOOLEAN)
        assert decode_spec_value(f, "true") is True
        assert decode_spec_value(f, False) is False
        with pytest.raises(ValidationError):
            decode_spec_value(f, 1)

    def test_select_must_be_an_option(self):
        f = ComparableField(id="s", label="S", type=FieldType.SELECT, options=["4K", "8K"])
        assert decode_spec_value(f, "8K") == "8K"
        with pytest.raises(ValidationError):
            decode_spec_value(f, "16K")

    def test_normalize_keeps_orphans_and_drops_empty(self):
        fields = [ComparableField(id="hz", label="Hz", type=FieldType.NUMBER)]
        specs = normalize_specs({"hz": "144", "gone": "legacy", "blank": "", "none": None}, fields)
        assert specs == {"hz": 144, "gone": "legacy"}


class TestSelection:
    """Tests for Selection."""

    def test_rejects_fifth_item(self):
        selection = Selection(["a", "b", "c", "d"])
        with pytest.raises(SelectionFull):
            selection.add("e")
        assert selection.ids == ["a", "b", "c", "d"]

    def test_duplicate_add_is_noop(self):
        selection = Selection(["a"])
        selection.add("a")
        assert len(selection) == 1

    def test_toggle(self):
        selection = Selection()
        assert selection.toggle("a") is True
        assert "a" in selection
        assert selection.toggle("a") is False
        assert selection.ids == []

    def test_keeps_order(self):
        selection = Selection(["c", "a", "b"])
        selection.remove("a")
        assert selection.ids == ["c", "b"]

    def test_clear(self):
        selection = Selection(["a", "b", "c", "d"])
        assert selection.is_full
        selection.clear()
        assert len(selection) == 0
        assert not selection.is_full


class TestSyncDocument:
    """Tests for SyncDocument parsing."""

    def test_missing_collections_stay_none(self):
        doc = SyncDocument.from_dict({"fields": []})
        assert doc.fields == []
        assert doc.items is None

    def test_legacy_keys(self):
        doc = SyncDocument.from_dict({
            "models": [{"id": "1", "name": "A"}],
            "lastUpdated": "2024-01-01T00:00:00Z",
        })
        assert doc.items[0].id == "1"
        assert doc.last_updated == "2024-01-01T00:00:00Z"

    @pytest.mark.parametrize("payload", [None, [], "x", {"fields": "nope"}, {"items": {}}])
    def test_malformed_payloads(self, payload):
        with pytest.raises(MalformedDocument):
            SyncDocument.from_dict(payload)

    def test_malformed_entry(self):
        with pytest.raises(MalformedDocument):
            SyncDocument.from_dict({"fields": [{"id": "x", "label": "X", "type": "color"}]})


def test_make_slug():
    assert make_slug("  Samsung S95C OLED ") == "samsung-s95c-oled"
