"""Data models for comparable fields, catalog items and sync documents."""

import math
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Set

from catalog.config import MAX_SELECTION
from catalog.errors import MalformedDocument, SelectionFull, ValidationError

__all__ = [
    "FieldType",
    "ComparisonRule",
    "ComparableField",
    "ComparableItem",
    "Selection",
    "SyncDocument",
    "NUMERIC_TYPES",
    "decode_spec_value",
    "normalize_specs",
    "make_slug",
    "utc_now_iso",
]


class FieldType(str, Enum):
    TEXT = "text"
    NUMBER = "number"
    BOOLEAN = "boolean"
    SELECT = "select"
    RATING = "rating"
    DIMENSION = "dimension"
    RANGE = "range"


class ComparisonRule(str, Enum):
    HIGHER_IS_BETTER = "higher_is_better"
    LOWER_IS_BETTER = "lower_is_better"
    EQUAL = "equal"
    NONE = "none"


NUMERIC_TYPES = frozenset({FieldType.NUMBER, FieldType.RATING, FieldType.DIMENSION})


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def make_slug(name: str) -> str:
    """Derive a URL slug from an item name ("LG OLED C3" -> "lg-oled-c3")."""
    return re.sub(r"\s+", "-", name.strip().lower())


def _first(data: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the value of the first key present in data."""
    for key in keys:
        if key in data:
            return data[key]
    return default


@dataclass
class ComparableField:
    """One comparable attribute shared by every catalog item."""

    id: str
    label: str
    type: FieldType = FieldType.TEXT
    comparison_rule: ComparisonRule = ComparisonRule.NONE
    order: int = 0
    unit: Optional[str] = None
    is_highlightable: bool = False
    options: Optional[List[str]] = None

    # Display hints only
    highlight_color: Optional[str] = None
    highlight_icon: Optional[str] = None

    def validate(self) -> None:
        """Check the field invariants.

        Raises:
            ValidationError: If the id is empty or ``options`` does not
                match the field type.
        """
        if not self.id or not str(self.id).strip():
            raise ValidationError("Field id is required")
        if not self.label:
            raise ValidationError(f"Field {self.id!r} needs a label")
        if self.type == FieldType.SELECT:
            if not self.options:
                raise ValidationError(f"Select field {self.id!r} needs options")
        elif self.options is not None:
            raise ValidationError(f"Field {self.id!r} has options but is not a select field")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data: Dict[str, Any] = {
            "id": self.id,
            "label": self.label,
            "type": self.type.value,
            "order": self.order,
            "is_highlightable": self.is_highlightable,
            "comparison_rule": self.comparison_rule.value,
        }
        if self.unit:
            data["unit"] = self.unit
        if self.options is not None:
            data["options"] = list(self.options)
        if self.highlight_color:
            data["highlight_color"] = self.highlight_color
        if self.highlight_icon:
            data["highlight_icon"] = self.highlight_icon
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ComparableField":
        """Create from dictionary (snake_case or camelCase keys).

        Raises:
            ValidationError: If ``type`` or ``comparison_rule`` is unknown.
        """
        if not isinstance(data, dict):
            raise ValidationError("Field must be an object")
        raw_type = data.get("type") or FieldType.TEXT.value
        raw_rule = _first(data, "comparison_rule", "comparisonRule") or ComparisonRule.NONE.value
        if raw_type == "single-select":
            raw_type = FieldType.SELECT.value
        try:
            field_type = FieldType(raw_type)
        except ValueError:
            raise ValidationError(f"Unknown field type: {raw_type!r}") from None
        try:
            rule = ComparisonRule(str(raw_rule).replace("-", "_"))
        except ValueError:
            raise ValidationError(f"Unknown comparison rule: {raw_rule!r}") from None

        options = data.get("options")
        return cls(
            id=str(data.get("id", "")),
            label=str(data.get("label", "")),
            type=field_type,
            comparison_rule=rule,
            order=int(data.get("order") or 0),
            unit=data.get("unit") or None,
            is_highlightable=bool(_first(data, "is_highlightable", "isHighlightable", default=False)),
            options=list(options) if options is not None else None,
            highlight_color=_first(data, "highlight_color", "highlightColor"),
            highlight_icon=_first(data, "highlight_icon", "highlightIcon"),
        )


@dataclass
class ComparableItem:
    """One catalog entry (a TV model).

    ``specs`` is sparse: unset fields are absent, never stored as null.
    Keys naming deleted fields are kept as they are.
    """

    id: str
    name: str
    brand: str = ""
    slug: str = ""
    images: List[str] = field(default_factory=list)
    specs: Dict[str, Any] = field(default_factory=dict)
    manual_best_fields: Set[str] = field(default_factory=set)
    description: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.slug and self.name:
            self.slug = make_slug(self.name)

    @property
    def primary_image(self) -> Optional[str]:
        return self.images[0] if self.images else None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data: Dict[str, Any] = {
            "id": self.id,
            "brand": self.brand,
            "name": self.name,
            "slug": self.slug,
            "images": list(self.images),
            "specs": dict(self.specs),
        }
        if self.manual_best_fields:
            data["manual_best_fields"] = sorted(self.manual_best_fields)
        if self.description:
            data["description"] = self.description
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ComparableItem":
        """Create from dictionary (snake_case or camelCase keys)."""
        if not isinstance(data, dict):
            raise ValidationError("Item must be an object")
        specs = data.get("specs") or {}
        if not isinstance(specs, dict):
            raise ValidationError(f"Item {data.get('id')!r} specs must be an object")
        images = data.get("images") or []
        if isinstance(images, str):
            images = [images]
        manual = _first(data, "manual_best_fields", "manualBestFields", default=None) or []
        return cls(
            id=str(data.get("id", "")),
            name=str(data.get("name", "")),
            brand=str(data.get("brand") or ""),
            slug=str(data.get("slug") or ""),
            images=list(images),
            specs={k: v for k, v in specs.items() if v is not None},
            manual_best_fields=set(manual),
            description=data.get("description"),
        )


def _parse_number(field_def: ComparableField, raw: Any) -> Any:
    if isinstance(raw, bool):
        raise ValidationError(f"{field_def.id}: expected a number, got a boolean")
    value = raw
    if isinstance(raw, str):
        text = raw.strip()
        try:
            value = int(text)
        except ValueError:
            try:
                value = float(text)
            except ValueError:
                pass
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, float):
        # NaN and infinity are not JSON compliant and break comparisons
        if not math.isfinite(value):
            raise ValidationError(f"{field_def.id}: expected a finite number, got {raw!r}")
        return value
    raise ValidationError(f"{field_def.id}: expected a number, got {raw!r}")


def decode_spec_value(field_def: ComparableField, raw: Any) -> Any:
    """Decode a raw spec value into the shape required by the field type.

    Raises:
        ValidationError: If the value cannot represent the field type.
    """
    ftype = field_def.type

    if ftype in NUMERIC_TYPES:
        return _parse_number(field_def, raw)

    if ftype == FieldType.BOOLEAN:
        if isinstance(raw, bool):
            return raw
        if isinstance(raw, str) and raw.strip().lower() in ("true", "false"):
            return raw.strip().lower() == "true"
        raise ValidationError(f"{field_def.id}: expected true/false, got {raw!r}")

    if ftype == FieldType.SELECT:
        if raw in (field_def.options or []):
            return raw
        raise ValidationError(
            f"{field_def.id}: {raw!r} is not one of {field_def.options}"
        )

    if ftype == FieldType.RANGE:
        if isinstance(raw, bool) or not isinstance(raw, (str, int, float)):
            raise ValidationError(f"{field_def.id}: expected a range, got {raw!r}")
        return raw

    # text
    if not isinstance(raw, str):
        raise ValidationError(f"{field_def.id}: expected text, got {raw!r}")
    return raw


def normalize_specs(specs: Dict[str, Any], fields: Iterable[ComparableField]) -> Dict[str, Any]:
    """Decode every known spec value and drop unset ones.

    Keys that do not name a known field are kept untouched.
    """
    by_id = {f.id: f for f in fields}
    result: Dict[str, Any] = {}
    for key, raw in specs.items():
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            continue
        field_def = by_id.get(key)
        result[key] = decode_spec_value(field_def, raw) if field_def else raw
    return result


class Selection:
    """Ordered set of item ids picked for comparison, at most MAX_SELECTION."""

    def __init__(self, item_ids: Optional[Iterable[str]] = None, limit: int = MAX_SELECTION):
        self.limit = limit
        self._ids: List[str] = []
        for item_id in item_ids or []:
            self.add(item_id)

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._ids

    def __iter__(self):
        return iter(self._ids)

    @property
    def ids(self) -> List[str]:
        return list(self._ids)

    @property
    def is_full(self) -> bool:
        return len(self._ids) >= self.limit

    def add(self, item_id: str) -> None:
        """Add an item id.

        Raises:
            SelectionFull: If the selection already holds ``limit`` ids.
        """
        if item_id in self._ids:
            return
        if self.is_full:
            raise SelectionFull(self.limit)
        self._ids.append(item_id)

    def remove(self, item_id: str) -> None:
        if item_id in self._ids:
            self._ids.remove(item_id)

    def toggle(self, item_id: str) -> bool:
        """Add or remove an item id. Returns True if it is now selected."""
        if item_id in self._ids:
            self.remove(item_id)
            return False
        self.add(item_id)
        return True

    def clear(self) -> None:
        self._ids.clear()


@dataclass
class SyncDocument:
    """The single consolidated record mirrored to the remote backend."""

    fields: Optional[List[ComparableField]] = None
    items: Optional[List[ComparableItem]] = None
    last_updated: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fields": [f.to_dict() for f in self.fields or []],
            "items": [i.to_dict() for i in self.items or []],
            "last_updated": self.last_updated,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "SyncDocument":
        """Parse a remote payload.

        A collection missing from the payload stays ``None`` so callers can
        tell "not stored" from "stored empty".

        Raises:
            MalformedDocument: If the payload or a collection has the wrong shape.
        """
        if not isinstance(data, dict):
            raise MalformedDocument("Sync payload must be an object")

        raw_fields = data.get("fields")
        raw_items = _first(data, "items", "models")
        for name, raw in (("fields", raw_fields), ("items", raw_items)):
            if raw is not None and not isinstance(raw, list):
                raise MalformedDocument(f"Sync payload {name} must be a list")

        try:
            fields = [ComparableField.from_dict(f) for f in raw_fields] if raw_fields is not None else None
            items = [ComparableItem.from_dict(i) for i in raw_items] if raw_items is not None else None
        except (TypeError, ValueError) as e:
            raise MalformedDocument(f"Sync payload entry is invalid: {e}") from e

        return cls(
            fields=fields,
            items=items,
            last_updated=_first(data, "last_updated", "lastUpdated"),
        )
