from core.storage.manager import ImageStorageManager
from core.storage.types import ImageUpload, StorageBackend, StoredImage

__all__ = [
    "ImageStorageManager",
    "ImageUpload",
    "StorageBackend",
    "StoredImage",
]
