from __future__ import annotations

import copy
from types import SimpleNamespace
from typing import Any

import pytest
from bson import ObjectId
from pymongo.errors import OperationFailure

from core.settings import Settings
from core.storage.local_provider import LocalImageStorageProvider
from core.storage.manager import ImageStorageManager
from repositories import place_repo, user_repo
from services import place_service


def _matches(row: dict[str, Any], filter_dict: dict[str, Any]) -> bool:
    return all(row.get(key) == value for key, value in filter_dict.items())


class _FakeCursor:
    def __init__(self, rows: list[dict[str, Any]]) -> None:
        self._rows = rows

    def __aiter__(self):
        self._iter = iter(self._rows)
        return self

    async def __anext__(self) -> dict[str, Any]:
        try:
            return next(self._iter)
        except StopIteration:
            raise StopAsyncIteration


class _FakeCollection:
    def __init__(self, database: "FakeDatabase", name: str) -> None:
        self._database = database
        self._name = name

    @property
    def rows(self) -> dict[Any, dict[str, Any]]:
        return self._database.data.setdefault(self._name, {})

    def _maybe_fail(self, operation: str) -> None:
        if (self._name, operation) in self._database.fail_on:
            raise OperationFailure(f"simulated {operation} failure on {self._name}")

    async def create_index(self, *_: Any, **__: Any) -> str:
        return "idx"

    async def find_one(self, filter_dict: dict[str, Any], session: Any = None):
        self._maybe_fail("find_one")
        for row in self.rows.values():
            if _matches(row, filter_dict):
                return copy.deepcopy(row)
        return None

    def find(self, filter_dict: dict[str, Any]) -> _FakeCursor:
        self._maybe_fail("find")
        return _FakeCursor([copy.deepcopy(row) for row in self.rows.values() if _matches(row, filter_dict)])

    async def insert_one(self, document: dict[str, Any], session: Any = None):
        self._maybe_fail("insert_one")
        document.setdefault("_id", ObjectId())
        self.rows[document["_id"]] = copy.deepcopy(document)
        return SimpleNamespace(inserted_id=document["_id"])

    async def update_one(self, filter_dict: dict[str, Any], update: dict[str, Any], session: Any = None):
        self._maybe_fail("update_one")
        for row in self.rows.values():
            if _matches(row, filter_dict):
                self._apply(row, update)
                return SimpleNamespace(matched_count=1, modified_count=1)
        return SimpleNamespace(matched_count=0, modified_count=0)

    async def find_one_and_update(self, filter_dict: dict[str, Any], update: dict[str, Any], return_document=None):
        self._maybe_fail("find_one_and_update")
        for row in self.rows.values():
            if _matches(row, filter_dict):
                self._apply(row, update)
                return copy.deepcopy(row)
        return None

    async def delete_one(self, filter_dict: dict[str, Any], session: Any = None):
        self._maybe_fail("delete_one")
        for key, row in list(self.rows.items()):
            if _matches(row, filter_dict):
                del self.rows[key]
                return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)

    @staticmethod
    def _apply(row: dict[str, Any], update: dict[str, Any]) -> None:
        for key, value in update.get("$set", {}).items():
            row[key] = value
        for key, value in update.get("$push", {}).items():
            row.setdefault(key, []).append(value)
        for key, value in update.get("$pull", {}).items():
            row[key] = [item for item in row.get(key, []) if item != value]


class _FakeTransaction:
    def __init__(self, database: "FakeDatabase") -> None:
        self._database = database
        self._snapshot: dict[str, Any] = {}

    async def __aenter__(self) -> "_FakeTransaction":
        self._snapshot = copy.deepcopy(self._database.data)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        if exc_type is not None:
            self._database.data = self._snapshot
            self._database.aborts += 1
        else:
            self._database.commits += 1
        return False


class _FakeSession:
    def __init__(self, database: "FakeDatabase") -> None:
        self._database = database

    async def __aenter__(self) -> "_FakeSession":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        return False

    def start_transaction(self) -> _FakeTransaction:
        return _FakeTransaction(self._database)


class FakeClient:
    def __init__(self, database: "FakeDatabase") -> None:
        self._database = database

    async def start_session(self) -> _FakeSession:
        return _FakeSession(self._database)


class FakeDatabase:
    """In-memory stand-in for the motor database with transaction rollback."""

    def __init__(self) -> None:
        self.data: dict[str, dict[Any, dict[str, Any]]] = {"places": {}, "users": {}}
        self.fail_on: set[tuple[str, str]] = set()
        self.commits = 0
        self.aborts = 0

    def __getattr__(self, name: str) -> _FakeCollection:
        if name.startswith("_"):
            raise AttributeError(name)
        return _FakeCollection(self, name)

    def add_user(self, name: str = "Max Schwarz") -> ObjectId:
        user_id = ObjectId()
        self.data["users"][user_id] = {
            "_id": user_id,
            "name": name,
            "email": f"{name.split()[0].lower()}@example.com",
            "image": "uploads/images/avatar.png",
            "places": [],
        }
        return user_id


@pytest.fixture
def fake_mongo(monkeypatch: pytest.MonkeyPatch) -> FakeDatabase:
    database = FakeDatabase()
    fake_client = FakeClient(database)
    monkeypatch.setattr(place_repo, "get_database", lambda: database)
    monkeypatch.setattr(place_repo, "get_client", lambda: fake_client)
    monkeypatch.setattr(user_repo, "get_database", lambda: database)
    return database


@pytest.fixture
def app_settings(monkeypatch: pytest.MonkeyPatch, tmp_path) -> Settings:
    settings = Settings(
        env="test",
        mongo_url="mongodb://localhost:27017",
        db_name="places_test",
        locationiq_api_key="test-key",
        locationiq_search_url="https://geocode.test/v1/search.php",
        geocoding_timeout_seconds=5.0,
        storage_local_root=str(tmp_path / "images"),
        max_image_bytes=1024,
        cors_origins=(),
        debug_include_error_details=False,
        log_level="INFO",
        host="127.0.0.1",
        port=8000,
    )
    monkeypatch.setattr(place_service, "get_settings", lambda: settings)
    return settings


@pytest.fixture
def image_storage(app_settings: Settings):
    provider = LocalImageStorageProvider(root_dir=app_settings.storage_local_root)
    ImageStorageManager.configure(provider)
    yield provider
    ImageStorageManager.reset()
