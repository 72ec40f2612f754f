import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    gemini_api_key: str = ""
    gemini_model: str = "gemini-flash-latest"
    gemini_timeout_seconds: int = 30
    gemini_max_retries: int = 2
    api_key: str = ""
    environment: str = "production"
    upload_dir: str = "uploads"
    max_upload_bytes: int = 10 * 1024 * 1024
    cors_origin: str = "http://localhost:3000"


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"Env var {name} must be an integer, got {raw!r}")


def get_settings() -> Settings:
    # GEMINI_API_KEY may be empty: the service still boots and model
    # calls answer with a localized error until the key is configured.
    return Settings(
        gemini_api_key=os.getenv("GEMINI_API_KEY", "").strip(),
        gemini_model=os.getenv("GEMINI_MODEL", "gemini-flash-latest").strip(),
        gemini_timeout_seconds=_int_env("GEMINI_TIMEOUT_SECONDS", 30),
        gemini_max_retries=_int_env("GEMINI_MAX_RETRIES", 2),
        api_key=os.getenv("ELDERGUARD_API_KEY", "").strip(),
        environment=os.getenv("ENVIRONMENT", "production").strip(),
        upload_dir=os.getenv("UPLOAD_DIR", "uploads").strip(),
        max_upload_bytes=_int_env("MAX_UPLOAD_BYTES", 10 * 1024 * 1024),
        cors_origin=os.getenv("CORS_ORIGIN", "http://localhost:3000").strip(),
    )
