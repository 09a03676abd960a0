"""Admin endpoints: password gate, field/item CRUD and cloud sync settings.

Every write goes through the data access facade, so the local cache is
updated first and the cloud copy is pushed when sync is connected. A failed
push answers 502 with ``local_saved: true``.
"""

import logging
import uuid
from typing import Any, Callable, Dict, List, Tuple, Union

from flask import Blueprint, Response, jsonify, request, session

from catalog.data_access import SaveResult
from catalog.errors import (
    ConfigurationInvalid,
    LocalWriteError,
    ValidationError,
    WriteFailure,
)
from catalog.models import ComparableField, ComparableItem

from .api import get_data_access
from .auth import SESSION_FLAG, get_credential, require_admin

__all__ = ["admin"]

logger = logging.getLogger(__name__)

admin = Blueprint("admin", __name__, url_prefix="/admin")

PLACEHOLDER_IMAGE = "https://picsum.photos/400/300"

JsonResponse = Union[Tuple[Response, int], Response]


def _json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _save_response(result: SaveResult, **extra: Any) -> JsonResponse:
    payload = {**result.to_dict(), **extra}
    if result.remote_error:
        logger.warning(f"Saved locally but cloud push failed: {result.remote_error}")
        return jsonify(payload), 502
    return jsonify(payload), 200


def _run_save(save: Callable[[], SaveResult], **extra: Any) -> JsonResponse:
    """Run a save and map catalog errors to HTTP responses."""
    try:
        result = save()
    except ValueError as e:
        # ValidationError and malformed numbers from from_dict
        return jsonify({"error": str(e)}), 400
    except LocalWriteError as e:
        logger.error(f"Local write failed: {e}")
        return jsonify({"error": str(e), "local_saved": False}), 500
    return _save_response(result, **extra)


# ---------- AUTH ----------


@admin.route("/login", methods=["POST"])
def login() -> JsonResponse:
    password = _json_body().get("password", "")
    if not get_credential().check(password):
        return jsonify({"error": "Incorrect password"}), 401
    session[SESSION_FLAG] = True
    return jsonify({"authenticated": True})


@admin.route("/logout", methods=["POST"])
def logout() -> Response:
    session.pop(SESSION_FLAG, None)
    return jsonify({"authenticated": False})


@admin.route("/password", methods=["POST"])
@require_admin
def change_password() -> JsonResponse:
    data = _json_body()
    try:
        get_credential().change(data.get("current", ""), data.get("new", ""), data.get("confirm", ""))
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    return jsonify({"message": "Password changed"})


# ---------- FIELDS ----------


def _parse_fields(raw: Any) -> List[ComparableField]:
    if not isinstance(raw, list):
        raise ValidationError("fields must be a list")
    return [ComparableField.from_dict(f) for f in raw]


def _parse_items(raw: Any) -> List[ComparableItem]:
    if not isinstance(raw, list):
        raise ValidationError("items must be a list")
    return [ComparableItem.from_dict(i) for i in raw]


@admin.route("/fields", methods=["PUT"])
@require_admin
def replace_fields() -> JsonResponse:
    """Replace the whole field collection."""
    data = _json_body()
    return _run_save(lambda: get_data_access().save_fields(_parse_fields(data.get("fields"))))


@admin.route("/fields", methods=["POST"])
@require_admin
def upsert_field() -> JsonResponse:
    """Create or update one field (matched by id)."""
    data = _json_body()
    dao = get_data_access()
    fields = dao.load_all().fields

    if not data.get("id"):
        data["id"] = f"f_{uuid.uuid4().hex[:6]}"
    if data.get("order") is None:
        existing = next((f for f in fields if f.id == data["id"]), None)
        data["order"] = existing.order if existing else len(fields) + 1

    def save() -> SaveResult:
        new_field = ComparableField.from_dict(data)
        updated = [new_field if f.id == new_field.id else f for f in fields]
        if not any(f.id == new_field.id for f in fields):
            updated.append(new_field)
        return dao.save_fields(updated)

    return _run_save(save, field=data)


@admin.route("/fields/<field_id>", methods=["DELETE"])
@require_admin
def delete_field(field_id: str) -> JsonResponse:
    """Delete a field. Item specs keep their now-orphaned values."""
    dao = get_data_access()
    fields = dao.load_all().fields
    if not any(f.id == field_id for f in fields):
        return jsonify({"error": f"Unknown field: {field_id}"}), 404
    return _run_save(lambda: dao.save_fields([f for f in fields if f.id != field_id]))


# ---------- ITEMS ----------


@admin.route("/items", methods=["PUT"])
@require_admin
def replace_items() -> JsonResponse:
    """Replace the whole item collection."""
    data = _json_body()
    return _run_save(lambda: get_data_access().save_items(_parse_items(data.get("items"))))


@admin.route("/items", methods=["POST"])
@require_admin
def upsert_item() -> JsonResponse:
    """Create or update one item (matched by id)."""
    data = _json_body()
    if not data.get("name"):
        return jsonify({"error": "name is required"}), 400

    if not data.get("id"):
        data["id"] = uuid.uuid4().hex[:9]
    if not data.get("brand"):
        data["brand"] = "Unknown"
    if not data.get("images"):
        data["images"] = [PLACEHOLDER_IMAGE]

    dao = get_data_access()
    items = dao.load_all().items

    def save() -> SaveResult:
        new_item = ComparableItem.from_dict(data)
        updated = [new_item if i.id == new_item.id else i for i in items]
        if not any(i.id == new_item.id for i in items):
            updated.append(new_item)
        return dao.save_items(updated)

    return _run_save(save, item_id=data["id"])


@admin.route("/items/<item_id>", methods=["DELETE"])
@require_admin
def delete_item(item_id: str) -> JsonResponse:
    dao = get_data_access()
    items = dao.load_all().items
    if not any(i.id == item_id for i in items):
        return jsonify({"error": f"Unknown item: {item_id}"}), 404
    return _run_save(lambda: dao.save_items([i for i in items if i.id != item_id]))


# ---------- CLOUD SYNC ----------


@admin.route("/sync", methods=["GET"])
@require_admin
def sync_status() -> Response:
    return jsonify(get_data_access().sync_status())


@admin.route("/sync/connect", methods=["POST"])
@require_admin
def sync_connect() -> JsonResponse:
    """Configure the remote, test it and push the local catalog.

    Request JSON:
        {"endpoint": "https://xyz.supabase.co", "credential": "<anon key>"}
    """
    data = _json_body()
    dao = get_data_access()
    try:
        result = dao.connect(data.get("endpoint", ""), data.get("credential", ""))
    except ConfigurationInvalid as e:
        return jsonify({"error": str(e), **dao.sync_status()}), 400
    except LocalWriteError as e:
        return jsonify({"error": str(e)}), 500

    status_code = 200 if result.ok else 502
    return jsonify({**result.to_dict(), **dao.sync_status()}), status_code


@admin.route("/sync/test", methods=["POST"])
@require_admin
def sync_test() -> JsonResponse:
    result = get_data_access().test_connectivity()
    return jsonify(result.to_dict()), 200 if result.ok else 502


@admin.route("/sync/push", methods=["POST"])
@require_admin
def sync_push() -> JsonResponse:
    """Push the local catalog to the cloud now."""
    dao = get_data_access()
    if not dao.remote.is_connected:
        return jsonify({"error": "Not connected to database"}), 409
    try:
        document = dao.push_merged()
    except WriteFailure as e:
        return jsonify({"error": str(e)}), 502
    return jsonify({"last_updated": document.last_updated})


@admin.route("/sync/disconnect", methods=["POST"])
@require_admin
def sync_disconnect() -> Response:
    dao = get_data_access()
    dao.disconnect()
    return jsonify(dao.sync_status())


@admin.route("/sync/setup-sql", methods=["GET"])
@require_admin
def sync_setup_sql() -> Response:
    return jsonify({"sql": get_data_access().remote.setup_sql()})
