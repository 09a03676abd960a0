"""Field-rule comparison engine.

Pure functions over fields and items: which item is best for a field,
whether a field differs across the compared items, and how a raw value is
classified for display.

Example:
    from catalog.comparison import best_item_for_field, field_differs

    best_id = best_item_for_field(refresh_rate, [lg_c3, samsung_s95c])
    highlight = field_differs("refresh_rate", [lg_c3, samsung_s95c])
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from catalog.models import ComparableField, ComparableItem, ComparisonRule, FieldType

__all__ = [
    "ValueKind",
    "ValueDisplay",
    "ComparisonRow",
    "ComparisonTable",
    "is_numeric",
    "best_item_for_field",
    "field_differs",
    "classify_value",
    "sort_fields",
    "search_items",
    "compare_items",
]

_MISSING = object()


class ValueKind:
    ABSENT = "absent"
    BOOLEAN_TRUE = "boolean_true"
    BOOLEAN_FALSE = "boolean_false"
    SCALAR = "scalar"


@dataclass(frozen=True)
class ValueDisplay:
    kind: str
    value: Any = None
    unit: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"kind": self.kind}
        if self.kind == ValueKind.SCALAR:
            data["value"] = self.value
            if self.unit:
                data["unit"] = self.unit
        return data


def is_numeric(value: Any) -> bool:
    """True for int/float values. Booleans are not numeric here."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def best_item_for_field(field_def: ComparableField, items: Sequence[ComparableItem]) -> Optional[str]:
    """Return the id of the best item for a field, or None.

    The first item with a defined value seeds the best. Later numeric values
    replace it only when strictly better than a numeric best, so ties keep
    the earlier item and non-numeric values are never promoted. A numeric
    rule over non-numeric values therefore returns the seed item.
    """
    rule = field_def.comparison_rule
    if rule in (ComparisonRule.NONE, ComparisonRule.EQUAL) or len(items) < 2:
        return None

    best_id: Optional[str] = None
    best_value: Any = None

    for item in items:
        value = item.specs.get(field_def.id)
        if value is None:
            continue

        if best_id is None:
            best_id, best_value = item.id, value
            continue

        if not (is_numeric(value) and is_numeric(best_value)):
            continue

        if rule == ComparisonRule.HIGHER_IS_BETTER and value > best_value:
            best_id, best_value = item.id, value
        elif rule == ComparisonRule.LOWER_IS_BETTER and value < best_value:
            best_id, best_value = item.id, value

    return best_id


def _same_value(a: Any, b: Any) -> bool:
    # True == 1 and 0 == False in Python; compare types too.
    if a is _MISSING or b is _MISSING:
        return a is b
    if isinstance(a, bool) or isinstance(b, bool):
        return type(a) is type(b) and a == b
    return a == b


def field_differs(field_id: str, items: Sequence[ComparableItem]) -> bool:
    """True if any item's value for field_id differs from the first item's.

    An absent value differs from every defined value, including False and 0.
    """
    if len(items) < 2:
        return False
    first = items[0].specs.get(field_id, _MISSING)
    return any(not _same_value(item.specs.get(field_id, _MISSING), first) for item in items[1:])


def classify_value(value: Any, field_def: ComparableField) -> ValueDisplay:
    """Classify a raw value as absent, boolean true/false or a scalar with unit."""
    if value is None or value is _MISSING:
        return ValueDisplay(ValueKind.ABSENT)
    if field_def.type == FieldType.BOOLEAN or isinstance(value, bool):
        return ValueDisplay(ValueKind.BOOLEAN_TRUE if value else ValueKind.BOOLEAN_FALSE)
    return ValueDisplay(ValueKind.SCALAR, value, field_def.unit)


def sort_fields(fields: Sequence[ComparableField]) -> List[ComparableField]:
    """Fields in display order; sorted() is stable so ties keep insertion order."""
    return sorted(fields, key=lambda f: f.order)


def search_items(items: Sequence[ComparableItem], term: Optional[str]) -> List[ComparableItem]:
    """Filter items whose name or brand contains term (case-insensitive)."""
    if not term or not term.strip():
        return list(items)
    needle = term.strip().lower()
    return [i for i in items if needle in i.name.lower() or needle in i.brand.lower()]


@dataclass
class ComparisonRow:
    field: ComparableField
    best_item_id: Optional[str]
    differs: bool
    manual_best_item_ids: List[str] = field(default_factory=list)
    cells: Dict[str, ValueDisplay] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "field": self.field.to_dict(),
            "best_item_id": self.best_item_id,
            "differs": self.differs,
            "manual_best_item_ids": self.manual_best_item_ids,
            "cells": {item_id: cell.to_dict() for item_id, cell in self.cells.items()},
        }


@dataclass
class ComparisonTable:
    items: List[ComparableItem]
    rows: List[ComparisonRow]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "items": [i.to_dict() for i in self.items],
            "rows": [r.to_dict() for r in self.rows],
        }


def compare_items(fields: Sequence[ComparableField], items: Sequence[ComparableItem]) -> ComparisonTable:
    """Build the full comparison table for the selected items."""
    rows = []
    for field_def in sort_fields(fields):
        rows.append(
            ComparisonRow(
                field=field_def,
                best_item_id=best_item_for_field(field_def, items),
                differs=field_differs(field_def.id, items),
                manual_best_item_ids=[i.id for i in items if field_def.id in i.manual_best_fields],
                cells={i.id: classify_value(i.specs.get(field_def.id), field_def) for i in items},
            )
        )
    return ComparisonTable(items=list(items), rows=rows)
