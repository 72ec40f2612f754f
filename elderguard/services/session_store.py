# elderguard/services/session_store.py
from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from elderguard.services.extractor import extract_entities
from elderguard.services.intel import IntelCollection, ScanResult, merge_intel
from elderguard.services.report import build_report_text

SCAMMER = "Scammer"
BAIT_PERSONA = "Ramesh Uncle (AI)"


@dataclass
class SessionState:
    session_id: str
    created_at: float = field(default_factory=time.time)
    updated_at: float = field(default_factory=time.time)

    intel: IntelCollection = field(default_factory=IntelCollection)

    account_risk_note: str = ""
    protect_result: str = ""
    warrant_result: str = ""
    qr_result: str = ""

    # (sender label, message)
    conversation: List[Tuple[str, str]] = field(default_factory=list)

    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)


class InMemorySessionStore:
    """
    In-memory store, one SessionState per session id.
    Sessions never share state; every mutation of a session holds its lock.
    """
    def __init__(self):
        self._store: Dict[str, SessionState] = {}
        self._lock = threading.Lock()

    def get_or_create(self, session_id: str) -> SessionState:
        with self._lock:
            s = self._store.get(session_id)
            if not s:
                s = SessionState(session_id=session_id)
                self._store[session_id] = s
            return s

    def get(self, session_id: str) -> Optional[SessionState]:
        with self._lock:
            return self._store.get(session_id)

    def drop(self, session_id: str) -> bool:
        with self._lock:
            return self._store.pop(session_id, None) is not None

    def update_timestamp(self, s: SessionState) -> None:
        s.updated_at = time.time()

    def ingest_text(self, s: SessionState, text: Optional[str]) -> IntelCollection:
        """
        Extract entities from text and merge them into the session's intel (dedupe).
        """
        extracted = extract_entities(text)
        with s.lock:
            s.intel = merge_intel(s.intel, extracted)
            self.update_timestamp(s)
            return s.intel

    def apply_scan(self, s: SessionState, scan: ScanResult) -> IntelCollection:
        # Raw entity strings are re-extracted so each lands in its category.
        return self.ingest_text(s, " ".join(scan.entities))

    def set_notes(self, s: SessionState, **notes: str) -> None:
        with s.lock:
            for name, value in notes.items():
                if name not in ("account_risk_note", "protect_result", "warrant_result", "qr_result"):
                    raise AttributeError(f"unknown session note: {name}")
                setattr(s, name, value)
            self.update_timestamp(s)

    def append_turns(self, s: SessionState, *turns: Tuple[str, str]) -> None:
        with s.lock:
            s.conversation.extend(turns)
            self.update_timestamp(s)

    def build_report(self, s: SessionState) -> str:
        with s.lock:
            return build_report_text(
                s.intel,
                account_risk_note=s.account_risk_note,
                warrant_result=s.warrant_result,
                qr_result=s.qr_result,
                conversation=list(s.conversation),
            )

    def transcript(self, s: SessionState) -> List[Tuple[str, str]]:
        with s.lock:
            return list(s.conversation)
