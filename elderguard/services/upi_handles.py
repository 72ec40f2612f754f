# elderguard/services/upi_handles.py
from __future__ import annotations

import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional


@dataclass(frozen=True)
class HandleInfo:
    handle: str
    psp: str
    note: str

    def to_dict(self) -> dict:
        return {"handle": self.handle, "psp": self.psp, "note": self.note}


# Read-only after import.
KNOWN_UPI_HANDLES: Mapping[str, HandleInfo] = MappingProxyType({
    "okaxis": HandleInfo("okaxis", "Axis Bank UPI handle", "Large bank PSP, still cannot verify receiver account."),
    "oksbi": HandleInfo("oksbi", "SBI UPI handle", "State Bank PSP; format alone cannot prove safety."),
    "ybl": HandleInfo("ybl", "Yes Bank UPI handle", "Used by many apps like PhonePe etc."),
    "paytm": HandleInfo("paytm", "Paytm UPI handle", "Wallet/PSP; always double-check beneficiary details."),
    "okhdfcbank": HandleInfo("okhdfcbank", "HDFC Bank UPI handle", "Bank PSP; treat unknown beneficiaries with caution."),
    "icici": HandleInfo("icici", "ICICI Bank UPI handle", "Bank PSP; cannot see account type or age."),
})

HANDLE_RE = re.compile(r"@(\w+)")


def get_handle_info(handle: str) -> Optional[HandleInfo]:
    return KNOWN_UPI_HANDLES.get((handle or "").strip().lstrip("@").lower())


def lookup_upi_handle(text: Optional[str]) -> Optional[HandleInfo]:
    """Registry entry for the first @handle in the text, if it is a known PSP."""
    m = HANDLE_RE.search(text or "")
    if not m:
        return None
    return get_handle_info(m.group(1))
