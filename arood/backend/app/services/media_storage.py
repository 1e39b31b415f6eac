# backend/app/services/media_storage.py
import os
import secrets
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from fastapi import UploadFile
from starlette.concurrency import run_in_threadpool

from app.core.config import settings
from app.core.constants import ALLOWED_MEDIA_TYPES
from app.core.exceptions import ValidationFailed
from app.core.logging import logger

MEDIA_SUBDIR = "screen-ads"
CHUNK_SIZE = 1024 * 1024


@dataclass
class StoredMedia:
    file_name: str
    original_file_name: str
    file_path: str
    url: str
    mime_type: str
    media_type: str
    file_size: int


class MediaStorage:
    """Saves campaign media to local disk under a type and size allowlist"""

    def __init__(self, upload_dir: Optional[str] = None, max_bytes: Optional[int] = None):
        self.root = Path(upload_dir or settings.UPLOAD_DIR)
        self.max_bytes = max_bytes or settings.MAX_UPLOAD_BYTES

    @property
    def directory(self) -> Path:
        return self.root / MEDIA_SUBDIR

    def _check_type(self, upload: UploadFile) -> str:
        mime_type = (upload.content_type or "").lower()
        if mime_type not in ALLOWED_MEDIA_TYPES:
            raise ValidationFailed(
                "نوع الملف غير مدعوم. يسمح فقط بصور JPG و PNG وفيديو MP4",
                "Unsupported file type. Only JPG, PNG images and MP4 videos are allowed",
                field="media_file",
            )
        return mime_type

    async def _read_limited(self, upload: UploadFile) -> bytes:
        chunks = []
        size = 0
        while True:
            chunk = await upload.read(CHUNK_SIZE)
            if not chunk:
                break
            size += len(chunk)
            if size > self.max_bytes:
                raise ValidationFailed(
                    "حجم الملف يتجاوز الحد المسموح (20 ميجابايت)",
                    f"File exceeds the maximum size of {self.max_bytes} bytes",
                    field="media_file",
                )
            chunks.append(chunk)
        return b"".join(chunks)

    async def save(self, upload: UploadFile) -> StoredMedia:
        mime_type = self._check_type(upload)
        content = await self._read_limited(upload)
        if not content:
            raise ValidationFailed("الملف فارغ", "Uploaded file is empty", field="media_file")

        original_name = os.path.basename(upload.filename or "media")
        extension = Path(original_name).suffix.lower()
        file_name = f"ad-{int(time.time() * 1000)}-{secrets.token_hex(4)}{extension}"
        path = self.directory / file_name

        def write():
            self.directory.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content)

        await run_in_threadpool(write)
        logger.info(f"Stored campaign media {file_name} ({len(content)} bytes)")

        return StoredMedia(
            file_name=file_name,
            original_file_name=original_name,
            file_path=str(path),
            url=f"/uploads/{MEDIA_SUBDIR}/{file_name}",
            mime_type=mime_type,
            media_type=ALLOWED_MEDIA_TYPES[mime_type].value,
            file_size=len(content),
        )

    async def discard(self, media: StoredMedia) -> None:
        """Remove a stored file whose database record was never committed"""
        await run_in_threadpool(Path(media.file_path).unlink, missing_ok=True)
