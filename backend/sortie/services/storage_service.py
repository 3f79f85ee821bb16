import logging
import os
from pathlib import Path
from typing import Iterable, Optional

from sortie.core.config import settings

logger = logging.getLogger(__name__)


class StorageError(Exception):
    pass


class FileStorage:
    """Uploaded images on local disk, served as static files.

    Keys are relative paths such as ``7/1718000000000_ab12cd34.jpg`` or
    ``trips/7/1718000000000_ab12cd34.jpg``; the public URL is the key
    appended to ``public_url``.
    """

    def __init__(self, root: str, public_url: str):
        self.root = Path(root).resolve()
        self.public_base = public_url.rstrip("/")

    def _path(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if self.root not in path.parents:
            raise StorageError(f"Invalid storage key: {key}")
        return path

    def upload(self, key: str, data: bytes) -> str:
        path = self._path(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "xb") as f:
                f.write(data)
        except OSError as e:
            raise StorageError(f"Upload of {key} failed: {e}") from e

        logger.info("Stored %s (%d bytes)", key, len(data))
        return key

    def public_url(self, key: str) -> str:
        return f"{self.public_base}/{key}"

    def key_from_url(self, url: str) -> Optional[str]:
        prefix = f"{self.public_base}/"
        if not url or not url.startswith(prefix):
            return None
        return url[len(prefix):]

    def exists(self, key: str) -> bool:
        return self._path(key).is_file()

    def remove(self, keys: Iterable[str]) -> None:
        for key in keys:
            try:
                os.remove(self._path(key))
            except OSError as e:
                raise StorageError(f"Removal of {key} failed: {e}") from e
            logger.info("Removed %s", key)


_storage = None


def get_storage() -> FileStorage:
    global _storage
    if _storage is None:
        _storage = FileStorage(settings.STORAGE_ROOT, settings.STORAGE_PUBLIC_URL)
    return _storage
