import time
import uuid
from typing import Optional

from fastapi import UploadFile

from sortie.services.storage_service import FileStorage

ALLOWED_EXTENSIONS = {"jpg", "jpeg", "png", "gif", "webp", "svg"}


def file_extension(filename: str) -> str:
    if "." not in filename:
        return ""
    return filename.rsplit(".", 1)[-1].lower()


def is_image(filename: Optional[str]) -> bool:
    return bool(filename) and file_extension(filename) in ALLOWED_EXTENSIONS


def build_key(filename: str, owner_id: int, prefix: Optional[str] = None) -> str:
    """<prefix>/<owner>/<millis>_<rand>.<ext>: namespaced by uploader and time."""
    ext = file_extension(filename) or "bin"
    name = f"{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}.{ext}"
    parts = [prefix, str(owner_id), name] if prefix else [str(owner_id), name]
    return "/".join(parts)


def save_file(
    storage: FileStorage,
    file: UploadFile,
    owner_id: int,
    prefix: Optional[str] = None,
) -> str:
    key = build_key(file.filename, owner_id, prefix)
    storage.upload(key, file.file.read())
    return storage.public_url(key)
