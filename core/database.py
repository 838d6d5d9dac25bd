from __future__ import annotations

from functools import lru_cache

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from core.settings import get_settings


@lru_cache(maxsize=1)
def get_client() -> AsyncIOMotorClient:
    settings = get_settings()
    # Motor connects lazily; building the client never touches the network.
    return AsyncIOMotorClient(settings.mongo_url, serverSelectionTimeoutMS=2000, tz_aware=True)


def get_database() -> AsyncIOMotorDatabase:
    return get_client()[get_settings().db_name]


async def ping() -> None:
    await get_client().admin.command("ping")
