# elderguard/services/llm.py
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol

import requests

logger = logging.getLogger("elderguard.llm")

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"


class GenerationError(Exception):
    """The generative model could not produce an answer."""


@dataclass(frozen=True)
class Attachment:
    data_base64: str
    media_type: str


class TextGenerator(Protocol):
    def generate(self, prompt: str, attachment: Optional[Attachment] = None) -> str:
        ...


def _response_text(body: Dict[str, Any]) -> str:
    candidates = body.get("candidates") or []
    if not candidates:
        return ""
    parts = (candidates[0].get("content") or {}).get("parts") or []
    return "".join(p.get("text", "") for p in parts if isinstance(p, dict))


class GeminiClient:
    """
    Gemini `generateContent` over plain REST.
    Retries a few times on network errors and non-2xx answers.
    """
    def __init__(
        self,
        *,
        api_key: str,
        model: str = "gemini-flash-latest",
        timeout_seconds: int = 30,
        max_retries: int = 2,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.timeout_seconds = timeout_seconds
        self.max_retries = max(1, max_retries)
        self._http = session or requests.Session()

    @property
    def url(self) -> str:
        return f"{GEMINI_BASE_URL}/{self.model}:generateContent"

    def build_payload(self, prompt: str, attachment: Optional[Attachment] = None) -> Dict[str, Any]:
        parts: List[Dict[str, Any]] = [{"text": prompt}]
        if attachment is not None:
            parts.append({
                "inline_data": {
                    "mime_type": attachment.media_type,
                    "data": attachment.data_base64,
                }
            })
        return {"contents": [{"role": "user", "parts": parts}]}

    def generate(self, prompt: str, attachment: Optional[Attachment] = None) -> str:
        if not self.api_key:
            raise GenerationError("GEMINI_API_KEY is not configured")

        payload = self.build_payload(prompt, attachment)
        last_error = "no attempt made"

        for attempt in range(1, self.max_retries + 1):
            try:
                resp = self._http.post(
                    self.url,
                    json=payload,
                    headers={"x-goog-api-key": self.api_key},
                    timeout=self.timeout_seconds,
                )
                if 200 <= resp.status_code < 300:
                    text = _response_text(resp.json())
                    logger.info(f"Gemini success | model={self.model} | chars={len(text)} | attempt={attempt}")
                    return text

                last_error = f"status={resp.status_code}"
                logger.warning(
                    f"Gemini non-2xx | model={self.model} | status={resp.status_code} | body={resp.text[:200]}"
                )

            except (requests.RequestException, ValueError) as e:
                last_error = str(e)
                logger.error(f"Gemini error | model={self.model} | attempt={attempt} | err={e}")

            if attempt < self.max_retries:
                # small backoff
                time.sleep(min(1.5 * attempt, 4.0))

        raise GenerationError(f"Gemini call failed after {self.max_retries} attempt(s): {last_error}")
