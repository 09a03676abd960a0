"""Optional AI comparison summary for the selected TV models.

Best-effort enrichment: without an OPENAI_API_KEY, or on any LLM failure,
``get_ai_comparison`` returns None and the comparison works as before.
"""

import json
import logging
import os
from typing import Any, Dict, List, Optional, Sequence

from catalog.comparison import sort_fields
from catalog.models import ComparableField, ComparableItem

from .config import LLM_MODEL, SUMMARY_LANGUAGE
from .logging_utils import log_interaction

__all__ = ["get_ai_comparison", "is_available", "build_comparison_prompt", "SYSTEM_INSTRUCTION"]

logger = logging.getLogger(__name__)

SYSTEM_INSTRUCTION = f"""You are an expert consumer electronics consultant specializing in TVs.
Compare the provided TV models based on their specifications.
Provide a concise summary highlighting key differences, pros, and cons.
Finally, give a clear verdict on which TV is better for: 1. Gaming, 2. Movies, 3. Budget.
Write in {SUMMARY_LANGUAGE}. Output JSON only."""


def _get_openai_client():
    """Get OpenAI client (lazy initialization)."""
    from openai import OpenAI
    return OpenAI()


def is_available() -> bool:
    return bool(os.getenv("OPENAI_API_KEY"))


def _models_payload(items: Sequence[ComparableItem], fields: Sequence[ComparableField]) -> List[Dict[str, Any]]:
    ordered = sort_fields(fields)
    return [
        {
            "name": item.name,
            "brand": item.brand,
            "specs": [
                {"label": f.label, "value": item.specs.get(f.id), "unit": f.unit}
                for f in ordered
            ],
        }
        for item in items
    ]


def build_comparison_prompt(items: Sequence[ComparableItem], fields: Sequence[ComparableField]) -> str:
    """Build the user prompt listing every model with its labelled specs."""
    models_json = json.dumps(_models_payload(items, fields), indent=2, ensure_ascii=False)
    return (
        "Compare the following TV models:\n"
        f"{models_json}\n\n"
        "Return a JSON object with this structure:\n"
        "{\n"
        '  "summary": "Detailed comparison summary...",\n'
        '  "verdict": "Verdict summary (Best for X, Y, Z)..."\n'
        "}"
    )


def get_ai_comparison(
    items: Sequence[ComparableItem],
    fields: Sequence[ComparableField],
) -> Optional[Dict[str, str]]:
    """Ask the LLM for a comparison summary.

    Returns:
        Dict with "summary" and "verdict", or None if unavailable or failed.
    """
    if not is_available():
        logger.warning("OPENAI_API_KEY not set, AI summary unavailable")
        return None

    prompt = build_comparison_prompt(items, fields)
    log_interaction(
        "llm_call_summary",
        {"model": LLM_MODEL, "prompt": prompt, "item_ids": [i.id for i in items]},
    )

    try:
        client = _get_openai_client()
        resp = client.responses.create(
            model=LLM_MODEL,
            instructions=SYSTEM_INSTRUCTION,
            input=[{"role": "user", "content": [{"type": "input_text", "text": prompt}]}],
        )

        for item in resp.output:
            if hasattr(item, "content") and item.content is not None:
                raw = item.content[0].text  # type: ignore[union-attr]

                log_interaction(
                    "llm_response_summary",
                    {"model": LLM_MODEL, "raw_response": raw},
                )

                try:
                    parsed = json.loads(raw)
                except json.JSONDecodeError as e:
                    log_interaction(
                        "llm_parse_error",
                        {"error": str(e), "raw": raw, "stage": "summary"},
                    )
                    return None

                if not isinstance(parsed, dict):
                    return None
                return {
                    "summary": str(parsed.get("summary", "")),
                    "verdict": str(parsed.get("verdict", "")),
                }

    except Exception as e:
        log_interaction("llm_error", {"error": str(e), "stage": "summary"})
        logger.exception("Error calling LLM for comparison summary")

    return None
