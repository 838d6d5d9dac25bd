from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class StorageBackend(str, Enum):
    LOCAL = "local"


@dataclass(frozen=True)
class StoredImage:
    object_key: str
    path: str
    backend: StorageBackend
    mime_type: str
    size: int


@dataclass(frozen=True)
class ImageUpload:
    file_name: str
    mime_type: str
    payload: bytes
