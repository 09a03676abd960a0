"""Logging utilities for the TV compare web app.

Provides structured JSONL logging for LLM interactions.
"""

import json
import os
from datetime import datetime
from pathlib import Path
from typing import Any, Dict

__all__ = ["log_interaction", "LOG_DIR"]

LOG_DIR = Path(os.getenv("WEB_LOG_DIR", str(Path(__file__).parent / "logs")))


def _log_file() -> Path:
    LOG_DIR.mkdir(parents=True, exist_ok=True)
    return LOG_DIR / f"llm_interactions_{datetime.now().strftime('%Y%m%d')}.jsonl"


def log_interaction(event_type: str, data: Dict[str, Any]) -> None:
    """Log LLM interactions to a structured JSONL file.

    Args:
        event_type: Type of event (llm_call_summary, llm_response_summary, llm_error, etc.)
        data: Event-specific data to log
    """
    log_entry = {"timestamp": datetime.now().isoformat(), "event_type": event_type, **data}
    with open(_log_file(), "a", encoding="utf-8") as f:
        f.write(json.dumps(log_entry, ensure_ascii=False, default=str) + "\n")
