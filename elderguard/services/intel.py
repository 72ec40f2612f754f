# elderguard/services/intel.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Literal, Optional, Tuple

from elderguard.services.extractor import ExtractedEntities, extract_entities

RiskTier = Literal["low", "medium", "high", "unknown"]

INTEL_CATEGORIES = ("upi_ids", "phone_numbers", "links", "bank_accounts")


def _union(existing: Iterable[str], new: Iterable[str]) -> Tuple[str, ...]:
    # Exact-string dedupe; first-seen order is what the UI shows.
    return tuple(dict.fromkeys([*existing, *(v for v in new if v)]))


@dataclass(frozen=True)
class IntelCollection:
    """Session-scoped, duplicate-free intel. Only ever grows."""

    upi_ids: Tuple[str, ...] = ()
    phone_numbers: Tuple[str, ...] = ()
    links: Tuple[str, ...] = ()
    bank_accounts: Tuple[str, ...] = ()

    @classmethod
    def from_text(cls, text: Optional[str]) -> "IntelCollection":
        return merge_intel(cls(), extract_entities(text))

    def to_dict(self) -> Dict[str, List[str]]:
        return {
            "upiIds": list(self.upi_ids),
            "phoneNumbers": list(self.phone_numbers),
            "links": list(self.links),
            "bankAccounts": list(self.bank_accounts),
        }


@dataclass(frozen=True)
class ScanResult:
    risk: RiskTier = "unknown"
    rationale: str = ""
    entities: Tuple[str, ...] = field(default_factory=tuple)


def merge_intel(
    existing: IntelCollection, extracted: Optional[ExtractedEntities]
) -> IntelCollection:
    """
    Merge one extraction into the running collection (set union per category).

    No case folding or normalization: `Abc@OKSBI` and `abc@oksbi` are kept as
    two entries. Merging the same extraction twice is a no-op.
    """
    if extracted is None or extracted.is_empty():
        return existing

    return IntelCollection(
        **{
            key: _union(getattr(existing, key), getattr(extracted, key))
            for key in INTEL_CATEGORIES
        }
    )


def normalize_tier(value: object) -> RiskTier:
    """Map a model-supplied risk label ("HIGH", " medium ") onto a tier."""
    tier = str(value or "").strip().lower()
    if tier in ("low", "medium", "high"):
        return tier  # type: ignore[return-value]
    return "unknown"
