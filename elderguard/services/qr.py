# elderguard/services/qr.py
from __future__ import annotations

import io
import logging
from typing import Dict, Mapping, Optional
from urllib.parse import unquote

import cv2
import numpy as np
from PIL import Image, UnidentifiedImageError

from elderguard.services.intel import RiskTier
from elderguard.services.messages import normalize_lang

logger = logging.getLogger("elderguard.qr")

UPI_SCHEME = "upi://"

# Narrative words that on their own make a QR high risk.
VISUAL_RISK_MARKERS = ("high_risk", "suspicious", "tamper")


def parse_upi_string(raw: Optional[str]) -> Dict[str, str]:
    """
    Parse a `upi://pay?pa=...&pn=...` deep link into its query parameters.

    Anything that is not a UPI link yields {}. Malformed segments never fail
    the parse: `foo` becomes {"foo": ""}, and a repeated key keeps its last value.
    """
    data: Dict[str, str] = {}
    if not raw or not raw.startswith(UPI_SCHEME):
        return data

    _, sep, query = raw.partition("?")
    if not sep or not query:
        return data

    for segment in query.split("&"):
        key, _, value = segment.partition("=")
        if not key:
            continue
        data[key] = unquote(value)
    return data


def assess_qr_risk(payload: Mapping[str, str], visual_analysis: Optional[str]) -> RiskTier:
    vis = (visual_analysis or "").lower()
    if any(marker in vis for marker in VISUAL_RISK_MARKERS):
        return "high"

    pa = payload.get("pa") or ""
    if len(pa) < 5:
        return "high"

    pn = payload.get("pn")
    if not pn or pn == "unknown":
        return "medium"

    return "low"


def decode_qr_pixels(width: int, height: int, buffer: bytes, channels: int = 1) -> Optional[str]:
    """Decode a QR payload from a raw 8-bit pixel buffer. None when nothing is found."""
    try:
        shape = (height, width) if channels == 1 else (height, width, channels)
        pixels = np.frombuffer(buffer, dtype=np.uint8).reshape(shape)
        data, _, _ = cv2.QRCodeDetector().detectAndDecode(pixels)
    except (ValueError, cv2.error) as e:
        logger.warning(f"QR decode failed | size={width}x{height} channels={channels} | err={e}")
        return None
    return data or None


def decode_qr_image(data: bytes) -> Optional[str]:
    """Decode a QR payload from an encoded image (PNG, JPEG, WebP, ...)."""
    try:
        with Image.open(io.BytesIO(data)) as img:
            gray = img.convert("L")
    except (UnidentifiedImageError, OSError) as e:
        logger.warning(f"QR image unreadable | bytes={len(data)} | err={e}")
        return None
    return decode_qr_pixels(gray.width, gray.height, gray.tobytes(), channels=1)


_QR_TEMPLATES = {
    "en": (
        "QR decoded:\n- UPI ID: {upi}\n- Merchant: {merchant}\n- Amount: ₹{amount}\n\n"
        "Visual check: {visual}\n\n"
        "Advice: Verify merchant name matches display and confirm with bank or 1930 before paying."
    ),
    "hi": (
        "QR से decode हुआ:\n- UPI ID: {upi}\n- Merchant: {merchant}\n- Amount: ₹{amount}\n\n"
        "Visual check: {visual}\n\n"
        "सलाह: भुगतान करने से पहले merchant का नाम check करें और अपने bank या 1930 से confirm करें।"
    ),
    "mr": (
        "QR मधून decode झाले:\n- UPI ID: {upi}\n- Merchant: {merchant}\n- Amount: ₹{amount}\n\n"
        "Visual तपासणी: {visual}\n\n"
        "सल्ला: पेमेंट करण्यापूर्वी merchant चे नाव तपासा आणि बँक किंवा 1930 शी खात्री करा."
    ),
}


def build_qr_message(lang: str, payload: Mapping[str, str], visual_analysis: str) -> str:
    return _QR_TEMPLATES[normalize_lang(lang)].format(
        upi=payload.get("pa") or "unknown",
        merchant=payload.get("pn") or "unknown",
        amount=payload.get("am") or "not specified",
        visual=visual_analysis,
    )
