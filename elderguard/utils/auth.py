from fastapi import Depends, Header, HTTPException

from elderguard.config import Settings, get_settings


def require_api_key(
    x_api_key: str = Header(default="", alias="x-api-key"),
    settings: Settings = Depends(get_settings),
) -> None:
    # Open when no key is configured (local single-user setup).
    if not settings.api_key:
        return
    if not x_api_key or x_api_key.strip() != settings.api_key:
        raise HTTPException(status_code=401, detail="Unauthorized: invalid API key")
