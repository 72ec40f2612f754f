import json
import os

from elderguard.config import Settings, get_settings
from elderguard.main import app

PROTECT_TEXT = "Send 10,000 to abcd9877@okaxis gift account, A/C 123456789012 IFSC HDFC0001234"
UPI_QR = "upi://pay?pa=abc@oksbi&pn=Test%20Shop&am=500"


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}
    assert client.get("/").json()["status"] == "ok"


# ----------------------------
# Protect scan
# ----------------------------
def test_protect_scan_runs_local_analysis_and_model(client, generator):
    resp = client.post("/api/protect/scan", json={"sessionId": "s1", "text": PROTECT_TEXT, "lang": "en"})
    body = resp.json()

    assert resp.status_code == 200
    assert body["status"] == "success"
    assert body["result"] == generator.reply
    assert body["accountRisk"] == "high"
    assert body["accountFlags"] == ["gift account"]
    assert body["accountRiskNote"].startswith("Account-context analysis (HIGH RISK): ")
    assert body["handleInfo"]["psp"] == "Axis Bank UPI handle"
    assert body["intel"]["upiIds"] == ["abcd9877@okaxis"]
    assert body["intel"]["bankAccounts"] == ["123456789012"]

    prompt, attachment = generator.calls[0]
    assert PROTECT_TEXT in prompt
    assert attachment is None


def test_protect_scan_digital_case_uses_digital_prompt(client, generator):
    client.post("/api/protect/scan", json={"text": "CBI officer here, you are under arrest", "caseType": "digital"})
    assert "DIGITAL ARREST" in generator.calls[0][0]


def test_protect_scan_blank_text_skips_model(client, generator):
    body = client.post("/api/protect/scan", json={"text": "   ", "lang": "hi"}).json()

    assert body["status"] == "error"
    assert body["result"] == "कृपया स्कैन के लिए टेक्स्ट / UPI डालें."
    assert generator.calls == []


def test_protect_scan_model_failure_is_localized(client, generator, sessions):
    generator.fail = True
    body = client.post("/api/protect/scan", json={"sessionId": "s1", "text": PROTECT_TEXT, "lang": "mr"}).json()

    assert body["status"] == "error"
    assert body["result"] == "चूक झाली, नंतर पुन्हा प्रयत्न करा."
    # local analysis still lands in the session
    assert sessions.get("s1").intel.upi_ids == ("abcd9877@okaxis",)


def test_repeated_scans_do_not_duplicate_intel(client):
    for _ in range(2):
        client.post("/api/protect/scan", json={"sessionId": "s1", "text": PROTECT_TEXT})
    intel = client.get("/api/sessions/s1/intel").json()["intel"]

    assert intel["upiIds"] == ["abcd9877@okaxis"]
    assert intel["bankAccounts"] == ["123456789012"]


def test_sessions_do_not_share_intel(client):
    client.post("/api/protect/scan", json={"sessionId": "a", "text": "pay x@ybl"})
    client.post("/api/protect/scan", json={"sessionId": "b", "text": "pay y@ybl"})

    assert client.get("/api/sessions/a/intel").json()["intel"]["upiIds"] == ["x@ybl"]
    assert client.get("/api/sessions/b/intel").json()["intel"]["upiIds"] == ["y@ybl"]


# ----------------------------
# Warrant
# ----------------------------
def _post_warrant(client, **data):
    return client.post(
        "/api/analyse-warrant",
        files={"file": ("warrant.pdf", b"%PDF-1.4 fake warrant", "application/pdf")},
        data={"lang": "en", "sessionId": "w1", **data},
    )


def test_warrant_json_answer_feeds_intel(client, generator, upload_dir):
    generator.reply = "```json\n" + json.dumps({
        "risk": "HIGH",
        "message": "Fake letterhead and UPI deposit demand.",
        "extracted_text": "Pay security deposit to fraud@ybl or call 9876543210",
        "entities": {"upi_ids": ["fraud@ybl"], "accounts": ["123456789012"]},
    }) + "\n```"

    body = _post_warrant(client, searchableInfo="Andheri police station").json()

    assert body["status"] == "success"
    assert body["risk"] == "high"
    assert body["message"] == "Fake letterhead and UPI deposit demand."
    assert body["intel"]["upiIds"] == ["fraud@ybl"]
    assert body["intel"]["phoneNumbers"] == ["9876543210"]
    assert body["intel"]["bankAccounts"] == ["9876543210", "123456789012"]

    prompt, attachment = generator.calls[0]
    assert "Andheri police station" in prompt
    assert attachment.media_type == "application/pdf"
    assert os.listdir(upload_dir) == []


def test_warrant_plain_text_answer_falls_back(client, generator):
    generator.reply = "Looks forged. Final verification must be done only by local police or 1930."
    body = _post_warrant(client).json()

    assert body["risk"] == "unknown"
    assert body["message"] == generator.reply
    assert body["extracted_text"] == ""
    assert "Warrant analysis: Looks forged." in client.get("/api/sessions/w1/report").text


def test_warrant_model_failure_cleans_up(client, generator, upload_dir):
    generator.fail = True
    resp = _post_warrant(client)

    assert resp.status_code == 200
    assert resp.json() == {"status": "error", "message": "Error analyzing warrant. Please try again later."}
    assert os.listdir(upload_dir) == []


def test_warrant_without_file(client):
    resp = client.post("/api/analyse-warrant", data={"lang": "hi"})

    assert resp.status_code == 400
    assert resp.json()["message"] == "कृपया पहले warrant फ़ाइल चुनें."


def test_warrant_too_large(client, settings, generator):
    app.dependency_overrides[get_settings] = lambda: Settings(upload_dir=settings.upload_dir, max_upload_bytes=4)
    resp = _post_warrant(client)

    assert resp.status_code == 413
    assert generator.calls == []


# ----------------------------
# QR
# ----------------------------
def _post_qr(client, filename="qr.png"):
    return client.post(
        "/api/analyse-qr",
        files={"file": (filename, b"\x89PNG fake", "image/png")},
        data={"lang": "en", "sessionId": "q1"},
    )


def test_qr_clean_payload_is_low(client, generator, decoder, upload_dir):
    decoder.payload = UPI_QR
    generator.reply = "NORMAL. Looks normal, no issues."
    body = _post_qr(client).json()

    assert body["qr_decoded"] is True
    assert body["upi_id"] == "abc@oksbi"
    assert body["merchant_name"] == "Test Shop"
    assert body["amount"] == "500"
    assert body["transaction_note"] == "None"
    assert body["risk"] == "low"
    assert "Merchant: Test Shop" in body["message"]
    assert body["intel"]["upiIds"] == ["abc@oksbi"]
    assert generator.calls[0][1].media_type == "image/png"
    assert os.listdir(upload_dir) == []


def test_qr_tamper_narrative_is_high(client, generator, decoder):
    decoder.payload = UPI_QR
    generator.reply = "Possible tamper: sticker overlay on the code."

    assert _post_qr(client).json()["risk"] == "high"


def test_qr_not_decoded_is_a_normal_answer(client, generator, decoder):
    decoder.payload = None
    resp = _post_qr(client)
    body = resp.json()

    assert resp.status_code == 200
    assert body["qr_decoded"] is False
    assert body["risk"] == "unknown"
    assert body["message"] == "Could not decode QR code. Please upload a clear image."
    assert generator.calls == []


def test_qr_model_failure_is_localized(client, generator, decoder, upload_dir):
    decoder.payload = UPI_QR
    generator.fail = True
    body = _post_qr(client).json()

    assert body == {"status": "error", "message": "Error analyzing QR code. Please try again later."}
    assert os.listdir(upload_dir) == []


# ----------------------------
# Bait + report
# ----------------------------
def test_bait_conversation_and_report(client, generator):
    generator.reply = json.dumps({
        "reply_to_scammer": "Okk beta, link firse bhejo.",
        "extracted_intel": {
            "upi_ids": [],
            "phone_numbers": ["+919812345678"],
            "links": ["https://fake-kyc.in/verify"],
            "bank_accounts": [],
        },
        "confidence_scam": "high",
        "notes_for_law_enforcement": "Impersonates CBI and demands UPI payment.",
    })

    body = client.post(
        "/api/bait", json={"sessionId": "b1", "scammerMessage": "Pay fine to cbi.officer@paytm now"}
    ).json()

    assert body["reply"] == "Okk beta, link firse bhejo."
    assert body["confidenceScam"] == "high"
    assert body["conversation"] == [
        {"sender": "Scammer", "msg": "Pay fine to cbi.officer@paytm now"},
        {"sender": "Ramesh Uncle (AI)", "msg": "Okk beta, link firse bhejo."},
    ]
    assert body["intel"]["upiIds"] == ["cbi.officer@paytm"]
    assert body["intel"]["phoneNumbers"] == ["+919812345678"]
    assert body["intel"]["links"] == ["https://fake-kyc.in/verify"]

    report = client.get("/api/sessions/b1/report").text
    assert "UPI IDs: cbi.officer@paytm" in report
    assert report.endswith(
        "Conversation:\nScammer: Pay fine to cbi.officer@paytm now\nRamesh Uncle (AI): Okk beta, link firse bhejo."
    )


def test_bait_plain_text_reply(client, generator):
    generator.reply = "Arre beta, mera phone hang ho gaya."
    body = client.post("/api/bait", json={"sessionId": "b2", "scammerMessage": "Hello sir"}).json()

    assert body["reply"] == "Arre beta, mera phone hang ho gaya."
    assert body["confidenceScam"] is None


def test_bait_model_failure(client, generator):
    generator.fail = True
    body = client.post("/api/bait", json={"sessionId": "b3", "scammerMessage": "Hello sir"}).json()

    assert body["status"] == "error"
    assert client.get("/api/sessions/b3/report").text.endswith("Conversation:")


def test_bait_empty_message(client, generator):
    assert client.post("/api/bait", json={"scammerMessage": " "}).status_code == 400
    assert generator.calls == []


def test_report_for_unknown_session_is_minimal(client):
    resp = client.get("/api/sessions/nobody/report")

    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/plain")
    assert "UPI IDs: None" in resp.text
    assert "Bank Accounts / Numbers: None" in resp.text
    assert resp.text.endswith("Conversation:")


def test_end_session_discards_intel(client):
    client.post("/api/protect/scan", json={"sessionId": "gone", "text": "pay x@ybl"})

    assert client.delete("/api/sessions/gone").json() == {"sessionId": "gone", "ended": True}
    assert client.get("/api/sessions/gone/intel").json()["intel"]["upiIds"] == []


# ----------------------------
# Handles + auth
# ----------------------------
def test_upi_handle_lookup(client):
    assert client.get("/api/upi-handles/OKSBI").json()["psp"] == "SBI UPI handle"
    assert client.get("/api/upi-handles/nobank").status_code == 404


def test_api_key_enforced_when_configured(client, settings):
    app.dependency_overrides[get_settings] = lambda: Settings(upload_dir=settings.upload_dir, api_key="secret")

    assert client.get("/api/upi-handles/ybl").status_code == 401
    assert client.get("/api/upi-handles/ybl", headers={"x-api-key": "secret"}).status_code == 200
    assert client.get("/health").status_code == 200
