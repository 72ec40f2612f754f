# elderguard/services/uploads.py
from __future__ import annotations

import base64
import logging
import os
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass
from typing import BinaryIO, Iterator, Optional

from elderguard.services.llm import Attachment

logger = logging.getLogger("elderguard.uploads")

GENERIC_MEDIA_TYPE = "application/octet-stream"

EXTENSION_MEDIA_TYPES = {
    ".pdf": "application/pdf",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".webp": "image/webp",
}

CHUNK_SIZE = 64 * 1024


class UploadTooLarge(Exception):
    def __init__(self, limit: int):
        super().__init__(f"upload exceeds {limit} bytes")
        self.limit = limit


@dataclass(frozen=True)
class StagedUpload:
    path: str
    filename: str
    media_type: str
    data: bytes

    def attachment(self) -> Attachment:
        return Attachment(
            data_base64=base64.b64encode(self.data).decode("ascii"),
            media_type=self.media_type,
        )


def resolve_media_type(
    filename: Optional[str],
    declared: Optional[str],
    default: str = GENERIC_MEDIA_TYPE,
) -> str:
    """Declared type first, then the extension table, then `default`."""
    if declared and declared.strip():
        return declared.strip()
    ext = os.path.splitext(filename or "")[1].lower()
    return EXTENSION_MEDIA_TYPES.get(ext, default)


@contextmanager
def stage_upload(
    stream: BinaryIO,
    *,
    filename: Optional[str],
    declared_type: Optional[str],
    upload_dir: str,
    max_bytes: int,
    default_type: str = GENERIC_MEDIA_TYPE,
) -> Iterator[StagedUpload]:
    """
    Copy an uploaded blob to a temp file under `upload_dir` and yield it.
    The temp file is removed on every exit path.
    """
    os.makedirs(upload_dir, exist_ok=True)
    fd, path = tempfile.mkstemp(dir=upload_dir, prefix="upload-")
    try:
        size = 0
        with os.fdopen(fd, "wb") as out:
            while True:
                chunk = stream.read(CHUNK_SIZE)
                if not chunk:
                    break
                size += len(chunk)
                if size > max_bytes:
                    raise UploadTooLarge(max_bytes)
                out.write(chunk)

        with open(path, "rb") as f:
            data = f.read()

        media_type = resolve_media_type(filename, declared_type, default_type)
        logger.info(f"Upload staged | file={filename} | type={media_type} | bytes={size}")
        yield StagedUpload(path=path, filename=filename or "", media_type=media_type, data=data)
    finally:
        if os.path.exists(path):
            os.remove(path)
