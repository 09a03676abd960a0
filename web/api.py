"""Public API endpoints: catalog, comparison selection and comparison table.

The comparison flow:
1. GET /api/catalog - fields and (optionally searched) items
2. POST /api/selection/<id> - toggle an item into the session selection (max 4)
3. POST /api/compare - best value and difference flags per field
4. POST /api/compare/summary - optional AI summary of the selection
"""

import logging
from typing import List, Optional, Tuple, Union

from flask import Blueprint, Response, current_app, jsonify, request, session

from catalog.comparison import compare_items, search_items, sort_fields
from catalog.config import MAX_SELECTION
from catalog.data_access import CatalogData, DataAccess
from catalog.errors import SelectionFull
from catalog.models import ComparableItem, Selection

from . import summarizer

__all__ = ["api", "get_data_access"]

logger = logging.getLogger(__name__)

# Create blueprint for API
api = Blueprint("api", __name__, url_prefix="/api")

SELECTION_KEY = "selection"


def get_data_access() -> DataAccess:
    """Data access service built by the app factory."""
    return current_app.extensions["data_access"]


def _get_selection() -> Selection:
    return Selection(session.get(SELECTION_KEY, [])[:MAX_SELECTION])


def _store_selection(selection: Selection) -> None:
    session[SELECTION_KEY] = selection.ids


def _resolve_items(
    catalog: CatalogData,
) -> Tuple[Optional[List[ComparableItem]], Optional[Tuple[Response, int]]]:
    """Pick the items to compare from the request body or the session selection.

    Returns (items, error_response). Unknown ids are skipped.
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    item_ids = data.get("item_ids")

    if item_ids is None:
        item_ids = _get_selection().ids
    elif not isinstance(item_ids, list) or not all(isinstance(i, str) for i in item_ids):
        return None, (jsonify({"error": "item_ids must be a list of strings"}), 400)
    elif len(item_ids) > MAX_SELECTION:
        return None, (jsonify({"error": f"You can compare at most {MAX_SELECTION} models"}), 400)

    by_id = {item.id: item for item in catalog.items}
    return [by_id[i] for i in item_ids if i in by_id], None


@api.route("/catalog", methods=["GET"])
def get_catalog() -> Response:
    """Return all fields (display order) and items, optionally searched.

    Query params:
        q: case-insensitive search on item name or brand
    """
    catalog = get_data_access().load_all()
    items = search_items(catalog.items, request.args.get("q"))
    return jsonify({
        "fields": [f.to_dict() for f in sort_fields(catalog.fields)],
        "items": [i.to_dict() for i in items],
    })


@api.route("/selection", methods=["GET"])
def get_selection() -> Response:
    selection = _get_selection()
    return jsonify({"selection": selection.ids, "max": MAX_SELECTION})


@api.route("/selection/<item_id>", methods=["POST"])
def toggle_selection(item_id: str) -> Union[Tuple[Response, int], Response]:
    """Add an item to the comparison selection, or remove it if present."""
    catalog = get_data_access().load_all()
    if not any(item.id == item_id for item in catalog.items):
        return jsonify({"error": f"Unknown item: {item_id}"}), 404

    selection = _get_selection()
    try:
        selected = selection.toggle(item_id)
    except SelectionFull as e:
        return jsonify({"error": str(e), "selection": selection.ids}), 409

    _store_selection(selection)
    return jsonify({"selected": selected, "selection": selection.ids})


@api.route("/selection", methods=["DELETE"])
def clear_selection() -> Response:
    session.pop(SELECTION_KEY, None)
    return jsonify({"selection": []})


@api.route("/compare", methods=["POST"])
def compare() -> Union[Tuple[Response, int], Response]:
    """Comparison table for the requested items.

    Request JSON (optional):
        {"item_ids": ["lg-c3", "samsung-s95c"]}  // defaults to the session selection

    Response JSON:
        {
            "items": [...],
            "rows": [
                {
                    "field": {...},
                    "best_item_id": "samsung-s95c",
                    "differs": true,
                    "manual_best_item_ids": [],
                    "cells": {"lg-c3": {"kind": "scalar", "value": 120, "unit": "Hz"}, ...}
                }
            ]
        }
    """
    catalog = get_data_access().load_all()
    items, error = _resolve_items(catalog)
    if error:
        return error

    table = compare_items(catalog.fields, items)
    return jsonify(table.to_dict())


@api.route("/compare/summary", methods=["POST"])
def compare_summary() -> Union[Tuple[Response, int], Response]:
    """AI-written summary and verdict for the requested items."""
    if not summarizer.is_available():
        return jsonify({"error": "AI summary is not available"}), 503

    catalog = get_data_access().load_all()
    items, error = _resolve_items(catalog)
    if error:
        return error
    if len(items) < 2:
        return jsonify({"error": "Select at least 2 models to compare"}), 400

    result = summarizer.get_ai_comparison(items, catalog.fields)
    if result is None:
        return jsonify({"error": "AI summary failed, please try again"}), 502
    return jsonify(result)
