"""Centralized configuration for the TV compare web app."""

import os

# LLM Configuration (optional AI comparison summary)
LLM_MODEL = os.getenv("LLM_MODEL", "gpt-5-mini")
SUMMARY_LANGUAGE = os.getenv("SUMMARY_LANGUAGE", "English")

# Flask app settings (allow env overrides; default debug off for safety)
# Render sets PORT dynamically; fall back to FLASK_PORT or 5000 for local.
FLASK_HOST = os.getenv("FLASK_HOST", "0.0.0.0")
FLASK_PORT = int(os.getenv("FLASK_PORT", os.getenv("PORT", "5000")))
FLASK_DEBUG = os.getenv("FLASK_DEBUG", "False").lower() == "true"
SECRET_KEY = os.getenv("FLASK_SECRET_KEY", "dev-secret-key-change-me")

# Admin gate: single shared password, stored locally once changed
DEFAULT_ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "admin")
MIN_PASSWORD_LENGTH = 4
