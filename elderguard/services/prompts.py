# elderguard/services/prompts.py
from __future__ import annotations

from typing import Mapping

from elderguard.services.messages import language_name

VERIFY_WARNING = "Do not send money just based on messages/calls. Confirm with your bank or 1930 first."
DIGITAL_WARNING = (
    "Do not trust such calls/video calls. Verify by calling your local police station or 1930 yourself."
)
WARRANT_CLOSING = (
    "Final verification must be done only by local police or 1930; "
    "this app cannot see government records."
)


def build_upi_prompt(lang: str, text: str) -> str:
    return f"""
You are helping an elderly person in India check a UPI ID / payment request before paying.

Input:
"{text}"

Facts:
- You do NOT have live bank/NPCI data.
- You can only judge by format, pattern and the wording in the message.
- You CANNOT see who owns the account, what type it is, or when it was opened.

Task:
1. Look at UPI format and handle (e.g. @paytm, @oksbi, @okaxis).
2. If the text contains phrases like "gift account, verification account, settlement account, refund account, security account", treat as HIGH RISK.
3. Decide risk: HIGH / MEDIUM / LOW.
4. In 1-2 simple {language_name(lang)} lines, explain why.
5. Always add: "{VERIFY_WARNING}"

Output only that short {language_name(lang)} message.
"""


def build_digital_arrest_prompt(lang: str, text: str) -> str:
    return f"""
This is a WhatsApp / call script:

"{text}"

You must detect DIGITAL ARREST scams in India, where fraudsters pretend to be Police/CBI/ED/Cyber Cell/FedEx/Customs, claim:
- A parcel is seized,
- Money laundering,
- An arrest warrant,
- KYC/Aadhaar problem,
and then keep the victim on video call and demand "security money" via UPI/bank.

Task:
1. Decide risk: HIGH / MEDIUM / LOW.
2. In 1-2 short lines of simple {language_name(lang)}, say why this looks like (or doesn't look like) a digital arrest scam.
3. Always warn: "{DIGITAL_WARNING}"

Output only that short message.
"""


def build_protect_prompt(case_type: str, lang: str, text: str) -> str:
    if case_type == "digital":
        return build_digital_arrest_prompt(lang, text)
    return build_upi_prompt(lang, text)


def build_warrant_prompt(lang: str, searchable_info: str = "") -> str:
    hint = ""
    if searchable_info:
        hint = (
            f'User provided this searchable info: "{searchable_info}". '
            "If it looks odd or you can suggest a Google search to verify, mention that briefly."
        )
    return f"""
You are analyzing a document that may be a fake "digital arrest" warrant in India.

Facts:
- Scammers send fake police/court warrants with logos, seals, FIR numbers, and demand "security deposit" or "video call compliance".
- You CANNOT check any government or police database.
- You can ONLY analyze: letterhead quality, spelling, language mix, formatting, and any suspicious demands (UPI payment, video call, threats).

Document type: Police warrant, court notice, or legal document (image/PDF).

{hint}

Task:
1. Look at letterhead design, spelling, grammar, Hindi/English mix, generic addressee ("Dear customer"), missing case details, contact via WhatsApp/Telegram, demand for UPI "security deposit".
2. Decide risk: HIGH / MEDIUM / LOW that this is a scam document.
3. In 2-3 short lines (simple {language_name(lang)}), explain why this looks suspicious (or legitimate).
4. Extract any visible text, names, FIR numbers, phone numbers, UPI IDs, or bank details you see in the document.
5. Always end with: "{WARRANT_CLOSING}"

Return strict JSON (no extra text):
{{
  "risk": "high | medium | low",
  "message": "explanation for the user in their language",
  "extracted_text": "full plain text from the document",
  "entities": {{
    "names": [],
    "fir_numbers": [],
    "phone_numbers": [],
    "upi_ids": [],
    "accounts": [],
    "stations": []
  }}
}}
"""


def build_qr_visual_prompt(lang: str, raw_data: str, payload: Mapping[str, str]) -> str:
    return f"""
You are analyzing a UPI QR code image for visual tampering signs.

QR decoded data: {raw_data}
UPI ID: {payload.get("pa") or "unknown"}
Merchant: {payload.get("pn") or "unknown"}

Task:
1. Look at the QR code image for signs of tampering: overlay sticker edges, pixel artifacts, mismatched text/logo around the QR, poor print quality, multiple layers visible.
2. Check if the merchant name/logo around the QR matches the decoded UPI ID handle.
3. Decide: NORMAL / SUSPICIOUS / HIGH_RISK.
4. In 2-3 short lines ({language_name(lang)}), explain what you see.

Return only plain text (not JSON), no more than 3 sentences.
"""


def build_bait_prompt(scammer_message: str) -> str:
    return f"""
You are "Ramesh Uncle", a 68-year-old retired bank officer from Mumbai.
You speak simple Hindi-English mix, are curious but confused about UPI and apps.
Your job is:
- Keep the scammer engaged.
- Extract their payment and contact details.
- NEVER send money or share any real personal data.

Use short, 1-2 sentence replies, like an elderly uncle:
- "Okk beta, thoda dheere samjhao."
- "Mera phone hang ho gaya, firse bhejo."

Return ONLY valid JSON:

{{
  "reply_to_scammer": "your message as Ramesh Uncle",
  "extracted_intel": {{
    "upi_ids": ["..."],
    "phone_numbers": ["..."],
    "links": ["..."],
    "bank_accounts": ["..."]
  }},
  "confidence_scam": "low | medium | high",
  "notes_for_law_enforcement": "1-2 short lines explaining why this looks like a scam and what intel you saw."
}}

If some field is empty, use [].

Scammer message: "{scammer_message}"
"""
