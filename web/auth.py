"""Single shared admin password gate.

The password lives in the local store (``adminPassword``) once changed and
falls back to DEFAULT_ADMIN_PASSWORD. The logged-in flag is kept in the
signed Flask session for the length of the browser session.
"""

import hmac
from functools import wraps
from typing import Callable, Optional

from flask import current_app, jsonify, session

from catalog.config import ADMIN_PASSWORD_KEY
from catalog.errors import MalformedLocalData, ValidationError
from catalog.local_store import LocalStore

from .config import DEFAULT_ADMIN_PASSWORD, MIN_PASSWORD_LENGTH

__all__ = ["AdminCredential", "require_admin", "get_credential", "SESSION_FLAG"]

SESSION_FLAG = "admin_authenticated"


class AdminCredential:
    """Read, check and change the shared admin password."""

    def __init__(self, store: LocalStore, default_password: str = DEFAULT_ADMIN_PASSWORD):
        self.store = store
        self.default_password = default_password

    def _current(self) -> str:
        try:
            stored: Optional[str] = self.store.get_json(ADMIN_PASSWORD_KEY)
        except MalformedLocalData:
            stored = None
        return stored or self.default_password

    def check(self, password: str) -> bool:
        if not isinstance(password, str):
            return False
        return hmac.compare_digest(password.encode("utf-8"), self._current().encode("utf-8"))

    def change(self, current: str, new: str, confirm: str) -> None:
        """Replace the password.

        Raises:
            ValidationError: If the current password is wrong, the new one is
                too short or the confirmation does not match.
        """
        if not self.check(current):
            raise ValidationError("Current password is incorrect")
        if not new or len(new) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"New password must be at least {MIN_PASSWORD_LENGTH} characters")
        if new != confirm:
            raise ValidationError("New password and confirmation do not match")
        self.store.set_json(ADMIN_PASSWORD_KEY, new)


def require_admin(view: Callable) -> Callable:
    """Reject requests without an admin session."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        if not session.get(SESSION_FLAG):
            return jsonify({"error": "Authentication required"}), 401
        return view(*args, **kwargs)

    return wrapper


def get_credential() -> AdminCredential:
    return current_app.extensions["admin_credential"]
