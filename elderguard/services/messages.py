# elderguard/services/messages.py
from __future__ import annotations

from typing import Dict

SUPPORTED_LANGS = ("en", "hi", "mr")
DEFAULT_LANG = "en"

LANGUAGE_NAMES = {"en": "English", "hi": "Hindi", "mr": "Marathi"}

MESSAGES: Dict[str, Dict[str, str]] = {
    "empty_scan": {
        "en": "Please enter something to scan.",
        "hi": "कृपया स्कैन के लिए टेक्स्ट / UPI डालें.",
        "mr": "कृपया तपासण्यासाठी मजकूर / UPI टाका.",
    },
    "scan_error": {
        "en": "Error, please try again later.",
        "hi": "कुछ गड़बड़ हो गयी, बाद में try करें.",
        "mr": "चूक झाली, नंतर पुन्हा प्रयत्न करा.",
    },
    "missing_warrant": {
        "en": "Please select a warrant file first.",
        "hi": "कृपया पहले warrant फ़ाइल चुनें.",
        "mr": "कृपया प्रथम warrant फाईल निवडा.",
    },
    "warrant_error": {
        "en": "Error analyzing warrant. Please try again later.",
        "hi": "Warrant analyse करने में गड़बड़ हुई, बाद में try करें.",
        "mr": "Warrant विश्लेषणात चूक. नंतर पुन्हा प्रयत्न करा.",
    },
    "missing_qr": {
        "en": "Please select a QR code image first.",
        "hi": "कृपया पहले QR code image चुनें.",
        "mr": "कृपया प्रथम QR code image निवडा.",
    },
    "qr_not_decoded": {
        "en": "Could not decode QR code. Please upload a clear image.",
        "hi": "QR code नहीं पढ़ा जा सका। कृपया साफ़ image upload करें।",
        "mr": "QR code वाचता आला नाही. कृपया स्पष्ट image अपलोड करा.",
    },
    "qr_error": {
        "en": "Error analyzing QR code. Please try again later.",
        "hi": "QR code analyse करने में गड़बड़ हुई, बाद में try करें.",
        "mr": "QR code विश्लेषणात चूक. नंतर पुन्हा प्रयत्न करा.",
    },
    "bait_error": {
        "en": "Error talking as Ramesh Uncle, please try again later.",
        "hi": "Ramesh Uncle से बात करने में गड़बड़ हुई, कृपया बाद में try करें.",
        "mr": "Ramesh Uncle शी बोलताना चूक झाली, नंतर पुन्हा प्रयत्न करा.",
    },
    "warrant_done": {
        "en": "Analysis complete.",
        "hi": "विश्लेषण पूरा हुआ।",
        "mr": "विश्लेषण पूर्ण झाले.",
    },
    # {risk} is filled with the upper-cased tier
    "account_prefix": {
        "en": "Account-context analysis ({risk} RISK): ",
        "hi": "खाते संदर्भ विश्लेषण ({risk} RISK): ",
        "mr": "Account संदर्भ विश्लेषण ({risk} RISK): ",
    },
}


def normalize_lang(lang: str) -> str:
    lang = (lang or "").strip().lower()
    return lang if lang in SUPPORTED_LANGS else DEFAULT_LANG


def language_name(lang: str) -> str:
    return LANGUAGE_NAMES[normalize_lang(lang)]


def localize(key: str, lang: str, **kwargs: str) -> str:
    variants = MESSAGES[key]
    text = variants.get(normalize_lang(lang)) or variants[DEFAULT_LANG]
    return text.format(**kwargs) if kwargs else text


def account_risk_note(lang: str, risk: str, rationale: str) -> str:
    return localize("account_prefix", lang, risk=risk.upper()) + rationale
