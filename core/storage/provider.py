from __future__ import annotations

from typing import Protocol

from core.storage.types import StoredImage


class ImageStorageProvider(Protocol):
    backend_name: str

    def save_image(self, *, file_name: str, mime_type: str, payload: bytes) -> StoredImage:
        ...

    def delete_image(self, *, path: str) -> None:
        ...
