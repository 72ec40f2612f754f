# elderguard/services/report.py
from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

from elderguard.services.intel import IntelCollection

REPORT_TITLE = "ElderGuard Scam Report"


def _joined(values: Sequence[str]) -> str:
    return ", ".join(values) or "None"


def build_report_text(
    intel: IntelCollection,
    *,
    account_risk_note: str = "",
    warrant_result: str = "",
    qr_result: str = "",
    conversation: Iterable[Tuple[str, str]] = (),
) -> str:
    """
    Flat text report for pasting into the 1930 / cybercrime.gov.in form.
    Read-only over the given state.
    """
    lines: List[str] = [
        REPORT_TITLE,
        "-" * len(REPORT_TITLE),
        f"UPI IDs: {_joined(intel.upi_ids)}",
        f"Phones: {_joined(intel.phone_numbers)}",
        f"Links: {_joined(intel.links)}",
        f"Bank Accounts / Numbers: {_joined(intel.bank_accounts)}",
        "",
    ]

    for label, note in (
        ("Local account-risk note", account_risk_note),
        ("Warrant analysis", warrant_result),
        ("QR code analysis", qr_result),
    ):
        if note:
            lines.append(f"{label}: {note}")
            lines.append("")

    lines.append("Conversation:")
    lines.extend(f"{sender}: {message}" for sender, message in conversation)
    return "\n".join(lines)
