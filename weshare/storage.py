"""
Blob storage for verification documents and profile images.

Paths handed out by the store are relative, always use forward slashes and
are what gets persisted on the database rows:

- verification documents: ``{user_id}/{submission_id}/{filename}``
- profile images: ``profile/{user_id}.{ext}``
"""

import os
from functools import lru_cache
from pathlib import Path, PurePosixPath
from typing import Dict, List

from weshare.config import settings
from weshare.exceptions import ValidationError

IMAGE_TYPES = ["image/jpeg", "image/png", "image/webp"]
DOCUMENT_TYPES = IMAGE_TYPES + ["application/pdf"]

EXTENSION_BY_MIME: Dict[str, str] = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "application/pdf": "pdf",
}

MIME_BY_EXTENSION: Dict[str, str] = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".webp": "image/webp",
    ".pdf": "application/pdf",
}


class BlobStore:
    """Key/bytes store interface"""

    def save(self, key: str, data: bytes) -> str:
        raise NotImplementedError

    def read(self, path: str) -> bytes:
        raise NotImplementedError

    def exists(self, path: str) -> bool:
        raise NotImplementedError

    def delete(self, path: str) -> None:
        raise NotImplementedError


class LocalBlobStore(BlobStore):
    """Stores blobs as files below a root directory"""

    def __init__(self, root: str):
        self.root = Path(root)

    def _full_path(self, key: str) -> Path:
        return self.root.joinpath(*PurePosixPath(key).parts)

    def save(self, key: str, data: bytes) -> str:
        full_path = self._full_path(key)
        full_path.parent.mkdir(parents=True, exist_ok=True)
        full_path.write_bytes(data)
        return PurePosixPath(key).as_posix()

    def read(self, path: str) -> bytes:
        return self._full_path(path).read_bytes()

    def exists(self, path: str) -> bool:
        return self._full_path(path).is_file()

    def delete(self, path: str) -> None:
        self._full_path(path).unlink(missing_ok=True)


@lru_cache()
def get_verification_store() -> BlobStore:
    return LocalBlobStore(os.path.join(settings.STORAGE_ROOT, "driver-verification"))


@lru_cache()
def get_profile_store() -> BlobStore:
    return LocalBlobStore(settings.STORAGE_ROOT)


def document_key(user_id: int, submission_id: int, filename: str) -> str:
    return f"{user_id}/{submission_id}/{filename}"


def profile_image_key(user_id: int, extension: str) -> str:
    return f"profile/{user_id}.{extension}"


def validate_upload(content_type: str, size: int, allowed_types: List[str]) -> str:
    """Check MIME type and size of an upload, returning the file extension"""
    if content_type not in allowed_types:
        raise ValidationError(
            f"Invalid file type. Allowed: {', '.join(allowed_types)}",
            details=[{"field": "file", "message": f"Unsupported content type {content_type}"}],
        )
    if size > settings.MAX_UPLOAD_BYTES:
        max_mb = settings.MAX_UPLOAD_BYTES // (1024 * 1024)
        raise ValidationError(
            f"File too large. Max size: {max_mb}MB",
            details=[{"field": "file", "message": f"{size} bytes exceeds limit"}],
        )
    return EXTENSION_BY_MIME.get(content_type, "bin")


def content_type_for(path: str) -> str:
    return MIME_BY_EXTENSION.get(PurePosixPath(path).suffix.lower(), "application/octet-stream")
