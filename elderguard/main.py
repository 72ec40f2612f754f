# elderguard/main.py
import logging
from functools import lru_cache
from typing import Any, Callable, Dict, List, Optional

from fastapi import Depends, FastAPI, File, Form, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from elderguard.config import Settings, get_settings
from elderguard.models import (
    BaitRequest,
    BaitResponse,
    ConversationTurn,
    ErrorResponse,
    HandleInfoPayload,
    IntelResponse,
    ProtectScanRequest,
    ProtectScanResponse,
    intel_payload,
)
from elderguard.services.account_risk import analyze_account_context
from elderguard.services.intel import IntelCollection, ScanResult, normalize_tier
from elderguard.services.llm import GeminiClient, TextGenerator
from elderguard.services.messages import account_risk_note, localize, normalize_lang
from elderguard.services.model_output import parse_bait_response, parse_warrant_response
from elderguard.services.prompts import (
    build_bait_prompt,
    build_protect_prompt,
    build_qr_visual_prompt,
    build_warrant_prompt,
)
from elderguard.services.qr import assess_qr_risk, build_qr_message, decode_qr_image, parse_upi_string
from elderguard.services.report import build_report_text
from elderguard.services.session_store import BAIT_PERSONA, SCAMMER, InMemorySessionStore
from elderguard.services.upi_handles import get_handle_info, lookup_upi_handle
from elderguard.services.uploads import UploadTooLarge, stage_upload
from elderguard.utils.auth import require_api_key

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("elderguard")

app = FastAPI(title="ElderGuard API", version="1.0.0")
store = InMemorySessionStore()

app.add_middleware(
    CORSMiddleware,
    allow_origins=[get_settings().cors_origin],
    allow_methods=["*"],
    allow_headers=["*"],
)


# ----------------------------
# Dependencies (overridable in tests)
# ----------------------------
def get_store() -> InMemorySessionStore:
    return store


@lru_cache(maxsize=4)
def _gemini_client(settings: Settings) -> GeminiClient:
    return GeminiClient(
        api_key=settings.gemini_api_key,
        model=settings.gemini_model,
        timeout_seconds=settings.gemini_timeout_seconds,
        max_retries=settings.gemini_max_retries,
    )


def get_generator(settings: Settings = Depends(get_settings)) -> TextGenerator:
    return _gemini_client(settings)


def get_qr_decoder() -> Callable[[bytes], Optional[str]]:
    return decode_qr_image


# ----------------------------
# Helpers
# ----------------------------
def _safe_list(value: Any) -> List[str]:
    return [str(v) for v in value if v] if isinstance(value, list) else []


def _safe_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _error(message: str, status_code: int = 200) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(message=message).model_dump())


# ----------------------------
# Basic routes
# ----------------------------
@app.get("/")
def root():
    return {"status": "ok", "message": "ElderGuard backend is running"}


@app.get("/health")
def health():
    return {"status": "ok"}


@app.exception_handler(Exception)
def global_exception_handler(request, exc: Exception):
    logger.exception(f"Unhandled error | path={request.url.path} | err={exc}")
    return _error("Something went wrong, please try again later.", status_code=500)


# ----------------------------
# Protect mode: UPI / digital-arrest text scan
# ----------------------------
@app.post("/api/protect/scan", response_model=ProtectScanResponse)
def protect_scan(
    req: ProtectScanRequest,
    sessions: InMemorySessionStore = Depends(get_store),
    generator: TextGenerator = Depends(get_generator),
    _: None = Depends(require_api_key),
):
    lang = normalize_lang(req.lang)
    session = sessions.get_or_create(req.sessionId)
    text = req.text or ""

    if not text.strip():
        sessions.set_notes(session, account_risk_note="")
        return ProtectScanResponse(
            status="error",
            result=localize("empty_scan", lang),
            intel=intel_payload(session.intel.to_dict()),
        )

    logger.info(f"sessionId={req.sessionId} caseType={req.caseType} lang={lang} text={text[:120]}")

    finding = analyze_account_context(text)
    intel = sessions.apply_scan(
        session,
        ScanResult(risk=finding.risk, rationale=finding.rationale, entities=(text,)),
    )
    note = account_risk_note(lang, finding.risk, finding.rationale) if finding.active else ""
    sessions.set_notes(session, account_risk_note=note)

    status = "success"
    try:
        result = generator.generate(build_protect_prompt(req.caseType, lang, text))
    except Exception as e:
        logger.exception(f"Protect scan model call failed | sessionId={req.sessionId} | err={e}")
        result = localize("scan_error", lang)
        status = "error"
    sessions.set_notes(session, protect_result=result)

    handle = lookup_upi_handle(text)
    return ProtectScanResponse(
        status=status,
        result=result,
        accountRisk=finding.risk,
        accountRiskNote=note,
        accountFlags=finding.flags,
        handleInfo=HandleInfoPayload(**handle.to_dict()) if handle else None,
        intel=intel_payload(intel.to_dict()),
    )


# ----------------------------
# Warrant document analysis
# ----------------------------
@app.post("/api/analyse-warrant")
def analyse_warrant(
    file: Optional[UploadFile] = File(default=None),
    lang: str = Form(default="en"),
    searchableInfo: str = Form(default=""),
    sessionId: str = Form(default="default-session"),
    settings: Settings = Depends(get_settings),
    sessions: InMemorySessionStore = Depends(get_store),
    generator: TextGenerator = Depends(get_generator),
    _: None = Depends(require_api_key),
):
    lang = normalize_lang(lang)
    if file is None or not file.filename:
        return _error(localize("missing_warrant", lang), status_code=400)

    logger.info(f"sessionId={sessionId} warrant file={file.filename} lang={lang}")
    session = sessions.get_or_create(sessionId)

    try:
        with stage_upload(
            file.file,
            filename=file.filename,
            declared_type=file.content_type,
            upload_dir=settings.upload_dir,
            max_bytes=settings.max_upload_bytes,
        ) as staged:
            response_text = generator.generate(
                build_warrant_prompt(lang, searchableInfo),
                staged.attachment(),
            )
    except UploadTooLarge as e:
        logger.warning(f"Warrant upload rejected | sessionId={sessionId} | {e}")
        return _error(str(e), status_code=413)
    except Exception as e:
        logger.exception(f"Warrant analysis failed | sessionId={sessionId} | err={e}")
        return _error(localize("warrant_error", lang))

    parsed = parse_warrant_response(response_text)
    entities = _safe_dict(parsed.get("entities"))
    scan = ScanResult(
        risk=normalize_tier(parsed.get("risk")),
        rationale=str(parsed.get("message") or localize("warrant_done", lang)),
        entities=(
            str(parsed.get("extracted_text") or ""),
            *_safe_list(entities.get("upi_ids")),
            *_safe_list(entities.get("phone_numbers")),
            *_safe_list(entities.get("accounts")),
        ),
    )
    intel = sessions.apply_scan(session, scan)
    sessions.set_notes(session, warrant_result=scan.rationale)

    return {
        **parsed,
        "status": "success",
        "risk": scan.risk,
        "message": scan.rationale,
        "intel": intel.to_dict(),
    }


# ----------------------------
# UPI QR code analysis
# ----------------------------
@app.post("/api/analyse-qr")
def analyse_qr(
    file: Optional[UploadFile] = File(default=None),
    lang: str = Form(default="en"),
    sessionId: str = Form(default="default-session"),
    settings: Settings = Depends(get_settings),
    sessions: InMemorySessionStore = Depends(get_store),
    generator: TextGenerator = Depends(get_generator),
    decode_qr: Callable[[bytes], Optional[str]] = Depends(get_qr_decoder),
    _: None = Depends(require_api_key),
):
    lang = normalize_lang(lang)
    if file is None or not file.filename:
        return _error(localize("missing_qr", lang), status_code=400)

    logger.info(f"sessionId={sessionId} qr file={file.filename} lang={lang}")
    session = sessions.get_or_create(sessionId)

    try:
        with stage_upload(
            file.file,
            filename=file.filename,
            declared_type=file.content_type,
            upload_dir=settings.upload_dir,
            max_bytes=settings.max_upload_bytes,
            default_type="image/jpeg",
        ) as staged:
            raw = decode_qr(staged.data)
            if not raw:
                message = localize("qr_not_decoded", lang)
                sessions.set_notes(session, qr_result=message)
                return {"status": "success", "risk": "unknown", "message": message, "qr_decoded": False}

            logger.info(f"sessionId={sessionId} QR decoded: {raw[:120]}")
            payload = parse_upi_string(raw)
            visual = generator.generate(
                build_qr_visual_prompt(lang, raw, payload),
                staged.attachment(),
            )
    except UploadTooLarge as e:
        logger.warning(f"QR upload rejected | sessionId={sessionId} | {e}")
        return _error(str(e), status_code=413)
    except Exception as e:
        logger.exception(f"QR analysis failed | sessionId={sessionId} | err={e}")
        return _error(localize("qr_error", lang))

    message = build_qr_message(lang, payload, visual)
    scan = ScanResult(
        risk=assess_qr_risk(payload, visual),
        rationale=message,
        entities=tuple(v for v in [payload.get("pa")] if v),
    )
    intel = sessions.apply_scan(session, scan)
    sessions.set_notes(session, qr_result=message)

    return {
        "status": "success",
        "qr_decoded": True,
        "qr_raw_data": raw,
        "upi_id": payload.get("pa") or "Not found",
        "merchant_name": payload.get("pn") or "Not found",
        "amount": payload.get("am") or "Not specified",
        "transaction_note": payload.get("tn") or "None",
        "visual_analysis": visual,
        "risk": scan.risk,
        "message": message,
        "intel": intel.to_dict(),
    }


# ----------------------------
# Bait mode: decoy persona conversation
# ----------------------------
@app.post("/api/bait", response_model=BaitResponse)
def bait(
    req: BaitRequest,
    sessions: InMemorySessionStore = Depends(get_store),
    generator: TextGenerator = Depends(get_generator),
    _: None = Depends(require_api_key),
):
    lang = normalize_lang(req.lang)
    scammer_msg = (req.scammerMessage or "").strip()
    if not scammer_msg:
        return _error(localize("empty_scan", lang), status_code=400)

    logger.info(f"sessionId={req.sessionId} bait text={scammer_msg[:120]}")
    session = sessions.get_or_create(req.sessionId)

    try:
        response_text = generator.generate(build_bait_prompt(scammer_msg)).strip()
    except Exception as e:
        logger.exception(f"Bait model call failed | sessionId={req.sessionId} | err={e}")
        return _error(localize("bait_error", lang))

    parsed = parse_bait_response(response_text)
    reply = str(parsed.get("reply_to_scammer") or response_text)
    extracted = _safe_dict(parsed.get("extracted_intel"))
    notes = parsed.get("notes_for_law_enforcement")

    sessions.append_turns(session, (SCAMMER, scammer_msg), (BAIT_PERSONA, reply))
    intel = sessions.apply_scan(
        session,
        ScanResult(
            risk=normalize_tier(parsed.get("confidence_scam")),
            rationale=str(notes or ""),
            entities=(
                scammer_msg,
                *_safe_list(extracted.get("upi_ids")),
                *_safe_list(extracted.get("phone_numbers")),
                *_safe_list(extracted.get("links")),
                *_safe_list(extracted.get("bank_accounts")),
            ),
        ),
    )

    return BaitResponse(
        reply=reply,
        confidenceScam=parsed.get("confidence_scam") if isinstance(parsed.get("confidence_scam"), str) else None,
        notesForLawEnforcement=str(notes) if notes else None,
        conversation=[ConversationTurn(sender=s, msg=m) for s, m in sessions.transcript(session)],
        intel=intel_payload(intel.to_dict()),
    )


# ----------------------------
# Session intel + report
# ----------------------------
@app.get("/api/sessions/{session_id}/intel", response_model=IntelResponse)
def session_intel(
    session_id: str,
    sessions: InMemorySessionStore = Depends(get_store),
    _: None = Depends(require_api_key),
):
    s = sessions.get(session_id)
    intel = s.intel if s else IntelCollection()
    return IntelResponse(sessionId=session_id, intel=intel_payload(intel.to_dict()))


@app.get("/api/sessions/{session_id}/report", response_class=PlainTextResponse)
def session_report(
    session_id: str,
    sessions: InMemorySessionStore = Depends(get_store),
    _: None = Depends(require_api_key),
):
    s = sessions.get(session_id)
    if not s:
        return build_report_text(IntelCollection())
    return sessions.build_report(s)


@app.delete("/api/sessions/{session_id}")
def end_session(
    session_id: str,
    sessions: InMemorySessionStore = Depends(get_store),
    _: None = Depends(require_api_key),
):
    return {"sessionId": session_id, "ended": sessions.drop(session_id)}


@app.get("/api/upi-handles/{handle}", response_model=HandleInfoPayload)
def upi_handle(handle: str, _: None = Depends(require_api_key)):
    info = get_handle_info(handle)
    if not info:
        return _error(f"Unknown UPI handle: {handle}", status_code=404)
    return HandleInfoPayload(**info.to_dict())


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=5000)
