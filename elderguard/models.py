# elderguard/models.py
from __future__ import annotations

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class ProtectScanRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    sessionId: str = "default-session"
    text: str = ""
    caseType: Literal["upi", "digital"] = "upi"
    lang: str = "en"


class BaitRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    sessionId: str = "default-session"
    scammerMessage: str = ""
    lang: str = "en"


class IntelPayload(BaseModel):
    upiIds: List[str] = Field(default_factory=list)
    phoneNumbers: List[str] = Field(default_factory=list)
    links: List[str] = Field(default_factory=list)
    bankAccounts: List[str] = Field(default_factory=list)


class HandleInfoPayload(BaseModel):
    handle: str
    psp: str
    note: str


class ProtectScanResponse(BaseModel):
    status: str = "success"
    result: str
    accountRisk: Literal["low", "medium", "high", "unknown"] = "low"
    accountRiskNote: str = ""
    accountFlags: List[str] = Field(default_factory=list)
    handleInfo: Optional[HandleInfoPayload] = None
    intel: IntelPayload = Field(default_factory=IntelPayload)


class ConversationTurn(BaseModel):
    sender: str
    msg: str


class BaitResponse(BaseModel):
    status: str = "success"
    reply: str
    confidenceScam: Optional[str] = None
    notesForLawEnforcement: Optional[str] = None
    conversation: List[ConversationTurn] = Field(default_factory=list)
    intel: IntelPayload = Field(default_factory=IntelPayload)


class ErrorResponse(BaseModel):
    status: str = "error"
    message: str


class IntelResponse(BaseModel):
    sessionId: str
    intel: IntelPayload


def intel_payload(intel_dict: Dict[str, List[str]]) -> IntelPayload:
    return IntelPayload(**intel_dict)
