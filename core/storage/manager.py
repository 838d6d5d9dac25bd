from __future__ import annotations

from threading import Lock

from core.settings import get_settings
from core.storage.local_provider import LocalImageStorageProvider
from core.storage.provider import ImageStorageProvider


class ImageStorageManager:
    _instance: "ImageStorageManager | None" = None
    _lock = Lock()

    def __init__(self, provider: ImageStorageProvider) -> None:
        self._provider = provider

    @classmethod
    def configure(cls, provider: ImageStorageProvider) -> "ImageStorageManager":
        with cls._lock:
            cls._instance = cls(provider)
            return cls._instance

    @classmethod
    def configure_from_settings(cls) -> "ImageStorageManager":
        settings = get_settings()
        return cls.configure(LocalImageStorageProvider(root_dir=settings.storage_local_root))

    @classmethod
    def get_instance(cls) -> "ImageStorageManager":
        if cls._instance is None:
            return cls.configure_from_settings()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        with cls._lock:
            cls._instance = None

    @property
    def provider(self) -> ImageStorageProvider:
        return self._provider
