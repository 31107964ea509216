"""
Attachment Storage

Stores uploaded bytes under settings.UPLOAD_DIR with a random storage key.
Only the key is kept on the TaskAttachment row.
"""
import logging
import uuid
from pathlib import Path
from typing import Tuple

from fastapi import UploadFile

from app.core.config import settings
from app.core.exceptions import ValidationFailed

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024


def upload_dir() -> Path:
    path = Path(settings.UPLOAD_DIR)
    path.mkdir(parents=True, exist_ok=True)
    return path


def save_upload(upload: UploadFile) -> Tuple[str, int]:
    """Write an upload to disk and return (storage_key, size)."""
    suffix = Path(upload.filename or "").suffix
    storage_key = f"{uuid.uuid4().hex}{suffix}"
    target = upload_dir() / storage_key

    size = 0
    with target.open("wb") as out:
        while True:
            chunk = upload.file.read(CHUNK_SIZE)
            if not chunk:
                break
            size += len(chunk)
            if size > settings.MAX_UPLOAD_SIZE:
                break
            out.write(chunk)

    if size == 0 or size > settings.MAX_UPLOAD_SIZE:
        target.unlink(missing_ok=True)
        if size == 0:
            raise ValidationFailed("No file uploaded", field="file")
        raise ValidationFailed("File too large", field="file", max_size=settings.MAX_UPLOAD_SIZE)

    logger.debug("Stored upload %s as %s (%d bytes)", upload.filename, storage_key, size)
    return storage_key, size


def delete_stored_file(storage_key: str) -> None:
    (Path(settings.UPLOAD_DIR) / storage_key).unlink(missing_ok=True)
