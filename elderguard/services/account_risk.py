# elderguard/services/account_risk.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from elderguard.services.extractor import extract_account_numbers, extract_ifsc_codes
from elderguard.services.intel import RiskTier

# Wording scammers use for mule / pass-through accounts.
FLAG_PHRASES = (
    "gift account",
    "gift wallet",
    "temporary account",
    "verification account",
    "settlement account",
    "gateway account",
    "refund account",
    "promo account",
    "offer account",
    "test account",
    "security account",
)

ACCOUNT_REASON = (
    "Bare bank account number detected; this app cannot see owner name, "
    "account type or when it was opened."
)
IFSC_REASON = "IFSC code present, which usually indicates a direct bank transfer request."
VERIFY_REASON = (
    "Treat this as an unknown beneficiary and confirm independently with your own "
    "bank or cyber helpline 1930 before any transfer."
)


@dataclass(frozen=True)
class AccountContextFinding:
    risk: RiskTier = "low"
    rationale: str = ""
    accounts: List[str] = field(default_factory=list)
    ifsc_codes: List[str] = field(default_factory=list)
    flags: List[str] = field(default_factory=list)

    @property
    def active(self) -> bool:
        return bool(self.rationale)


def analyze_account_context(text: Optional[str]) -> AccountContextFinding:
    """
    Local, model-independent risk read on bank-transfer wording.

    Tier: any flagged phrase -> high, else a bare account number -> medium,
    else low. Text with no account, IFSC or flagged phrase gets the neutral
    finding (low, no rationale).
    """
    raw = text or ""
    lower = raw.lower()

    accounts = extract_account_numbers(raw)
    ifsc_codes = extract_ifsc_codes(raw)
    flags = [p for p in FLAG_PHRASES if p in lower]

    if not (accounts or ifsc_codes or flags):
        return AccountContextFinding()

    risk: RiskTier = "low"
    reasons: List[str] = []

    if accounts:
        reasons.append(ACCOUNT_REASON)
    if ifsc_codes:
        reasons.append(IFSC_REASON)

    if flags:
        risk = "high"
        reasons.append(
            f"Suspicious wording found: {', '.join(flags)}. "
            "Scammers often use such terms for mule / pass-through accounts."
        )
    elif accounts:
        risk = "medium"

    reasons.append(VERIFY_REASON)

    return AccountContextFinding(
        risk=risk,
        rationale=" ".join(reasons),
        accounts=accounts,
        ifsc_codes=ifsc_codes,
        flags=flags,
    )
