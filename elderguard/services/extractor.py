# elderguard/services/extractor.py
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional


# --- Regex patterns (practical for IN scams) ---

# UPI: handle@psp
UPI_RE = re.compile(r"\b[\w.\-]+@\w+\b")

# Indian phone: optional +, optional 91, then exactly 10 digits
PHONE_RE = re.compile(r"(?<!\d)\+?(?:91)?\d{10}\b")

URL_RE = re.compile(r"https?://[^\s\"']+", re.IGNORECASE)

# Bank account-ish: 9 to 18 digits
BANK_ACCT_RE = re.compile(r"\b\d{9,18}\b")

# IFSC: e.g., HDFC0001234
IFSC_RE = re.compile(r"\b[A-Z]{4}0[A-Z0-9]{6}\b", re.IGNORECASE)


@dataclass(frozen=True)
class ExtractedEntities:
    upi_ids: List[str] = field(default_factory=list)
    phone_numbers: List[str] = field(default_factory=list)
    links: List[str] = field(default_factory=list)
    bank_accounts: List[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.upi_ids or self.phone_numbers or self.links or self.bank_accounts)

    def all_values(self) -> List[str]:
        return [*self.upi_ids, *self.phone_numbers, *self.links, *self.bank_accounts]


def extract_entities(text: Optional[str]) -> ExtractedEntities:
    """
    Extract UPI IDs, phone numbers, links and account-like numbers from free text.

    Categories are matched independently: a bare 10-digit number shows up both
    as a phone number and as a bank account candidate.
    """
    t = text or ""
    return ExtractedEntities(
        upi_ids=UPI_RE.findall(t),
        phone_numbers=PHONE_RE.findall(t),
        links=URL_RE.findall(t),
        bank_accounts=BANK_ACCT_RE.findall(t),
    )


def extract_account_numbers(text: Optional[str]) -> List[str]:
    return BANK_ACCT_RE.findall(text or "")


def extract_ifsc_codes(text: Optional[str]) -> List[str]:
    return IFSC_RE.findall(text or "")
