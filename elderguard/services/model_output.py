# elderguard/services/model_output.py
from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, Optional

logger = logging.getLogger("elderguard.model_output")

_FENCE_RE = re.compile(r"```(?:json)?", re.IGNORECASE)


def strip_code_fences(text: str) -> str:
    return _FENCE_RE.sub("", text or "").strip()


def parse_json_object(text: str) -> Optional[Dict[str, Any]]:
    """JSON object from a model answer, tolerating ```json fences. None otherwise."""
    try:
        parsed = json.loads(strip_code_fences(text))
    except ValueError:
        return None
    return parsed if isinstance(parsed, dict) else None


def empty_bait_intel() -> Dict[str, list]:
    return {"upi_ids": [], "phone_numbers": [], "links": [], "bank_accounts": []}


def parse_warrant_response(text: str) -> Dict[str, Any]:
    parsed = parse_json_object(text)
    if parsed is None:
        logger.info("Warrant answer is not JSON, returning raw text")
        return {"risk": "unknown", "message": text, "extracted_text": "", "entities": {}}
    return parsed


def parse_bait_response(text: str) -> Dict[str, Any]:
    parsed = parse_json_object(text)
    if parsed is None:
        logger.info("Bait answer is not JSON, using raw text as reply")
        return {"reply_to_scammer": text, "extracted_intel": empty_bait_intel()}
    return parsed
