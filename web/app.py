"""Flask web app for the TV catalog and comparison.

Builds the data layer once per app (local SQLite cache plus optional cloud
sync) and hands it to the API and admin blueprints through the app.

Run locally with:
    python -m web.app
"""

import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

# Load environment variables from .env file before reading config
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

from catalog.data_access import DataAccess
from catalog.local_store import LocalStore
from catalog.logging_config import setup_logging
from catalog.remote_sync import RemoteSyncAdapter

from .admin import admin
from .api import api
from .auth import AdminCredential
from .config import FLASK_DEBUG, FLASK_HOST, FLASK_PORT, SECRET_KEY

__all__ = ["create_app"]

logger = logging.getLogger(__name__)


def build_data_access(db_path: Optional[str] = None) -> DataAccess:
    """Construct the data access service with its storage and network dependencies."""
    store = LocalStore(db_path) if db_path else LocalStore()
    return DataAccess(store, RemoteSyncAdapter(store))


def create_app(data_access: Optional[DataAccess] = None, testing: bool = False) -> Flask:
    """Create the Flask app.

    Args:
        data_access: Prebuilt data layer (tests inject one); built from
            config when omitted.
        testing: Enable Flask testing mode.
    """
    app = Flask(__name__)
    app.config["SECRET_KEY"] = SECRET_KEY
    app.config["TESTING"] = testing
    app.json.sort_keys = False

    if data_access is None:
        data_access = build_data_access()

    app.extensions["data_access"] = data_access
    app.extensions["admin_credential"] = AdminCredential(data_access.store)

    app.register_blueprint(api)
    app.register_blueprint(admin)

    logger.info(f"App ready (remote sync: {data_access.remote.state.value})")
    return app


if __name__ == "__main__":
    setup_logging(level=logging.DEBUG if FLASK_DEBUG else logging.INFO)
    create_app().run(host=FLASK_HOST, port=FLASK_PORT, debug=FLASK_DEBUG)
