from typing import List, Optional, Tuple

import pytest
from fastapi.testclient import TestClient

from elderguard.config import Settings, get_settings
from elderguard.main import app, get_generator, get_qr_decoder, get_store
from elderguard.services.llm import Attachment, GenerationError
from elderguard.services.session_store import InMemorySessionStore


class FakeGenerator:
    """Stands in for the Gemini client; records every call."""

    def __init__(self, reply: str = "LOW risk. Confirm with your bank or 1930 first."):
        self.reply = reply
        self.fail = False
        self.calls: List[Tuple[str, Optional[Attachment]]] = []

    def generate(self, prompt: str, attachment: Optional[Attachment] = None) -> str:
        self.calls.append((prompt, attachment))
        if self.fail:
            raise GenerationError("quota exceeded")
        return self.reply


class FakeDecoder:
    def __init__(self, payload: Optional[str] = None):
        self.payload = payload

    def __call__(self, data: bytes) -> Optional[str]:
        return self.payload


@pytest.fixture
def upload_dir(tmp_path):
    return tmp_path / "uploads"


@pytest.fixture
def settings(upload_dir):
    return Settings(upload_dir=str(upload_dir), max_upload_bytes=1024 * 1024)


@pytest.fixture
def generator():
    return FakeGenerator()


@pytest.fixture
def decoder():
    return FakeDecoder()


@pytest.fixture
def sessions():
    return InMemorySessionStore()


@pytest.fixture
def client(settings, generator, decoder, sessions):
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_generator] = lambda: generator
    app.dependency_overrides[get_qr_decoder] = lambda: decoder
    app.dependency_overrides[get_store] = lambda: sessions
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
