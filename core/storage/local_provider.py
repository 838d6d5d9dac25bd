from __future__ import annotations

from pathlib import Path
from uuid import uuid4

from core.storage.provider import ImageStorageProvider
from core.storage.types import StorageBackend, StoredImage


class LocalImageStorageProvider(ImageStorageProvider):
    backend_name = StorageBackend.LOCAL.value

    def __init__(self, root_dir: str) -> None:
        self._root = Path(root_dir)
        self._root.mkdir(parents=True, exist_ok=True)

    @property
    def root(self) -> Path:
        return self._root

    def save_image(self, *, file_name: str, mime_type: str, payload: bytes) -> StoredImage:
        extension = Path(file_name).suffix.lower()
        object_key = f"{uuid4().hex}{extension}"
        file_path = self._root / object_key
        file_path.write_bytes(payload)
        return StoredImage(
            object_key=object_key,
            path=file_path.as_posix(),
            backend=StorageBackend.LOCAL,
            mime_type=mime_type,
            size=file_path.stat().st_size,
        )

    def delete_image(self, *, path: str) -> None:
        file_path = Path(path)
        if file_path.resolve().parent != self._root.resolve():
            raise ValueError(f"Refusing to delete file outside storage root: {path}")
        file_path.unlink(missing_ok=True)
