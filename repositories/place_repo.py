from __future__ import annotations

import logging

from bson import ObjectId
from pymongo import ReturnDocument

from core.database import get_client, get_database
from core.errors import resource_not_found
from schemas.imports import to_object_id
from schemas.place import PlaceBase, PlaceOut

logger = logging.getLogger(__name__)

_PLACE_INDEXES_READY = False


async def _ensure_place_indexes() -> None:
    global _PLACE_INDEXES_READY
    if _PLACE_INDEXES_READY:
        return

    await get_database().places.create_index("creator", name="idx_place_creator")
    _PLACE_INDEXES_READY = True


async def get_place_by_id(place_id: str) -> PlaceOut | None:
    """Raises ``bson.errors.InvalidId`` when ``place_id`` is not an ObjectId."""
    row = await get_database().places.find_one({"_id": ObjectId(place_id)})
    if row is None:
        return None
    return PlaceOut(**row)


async def get_places_by_creator(user_id: str) -> list[PlaceOut]:
    creator_id = ObjectId(user_id)

    await _ensure_place_indexes()
    cursor = get_database().places.find({"creator": creator_id})
    places: list[PlaceOut] = []
    async for row in cursor:
        places.append(PlaceOut(**row))
    return places


async def update_place_fields(place_id: str, update_dict: dict) -> PlaceOut | None:
    row = await get_database().places.find_one_and_update(
        {"_id": ObjectId(place_id)},
        {"$set": update_dict},
        return_document=ReturnDocument.AFTER,
    )
    if row is None:
        return None
    return PlaceOut(**row)


async def create_place_for_creator(place: PlaceBase) -> PlaceOut:
    """Insert a place and append it to its creator's ``places`` list atomically.

    Raises a 404 ``AppException`` (aborting the transaction) when the creator
    no longer exists at write time.
    """
    creator_id = to_object_id(place.creator)
    if creator_id is None:
        raise resource_not_found("User", place.creator)

    document = place.model_dump()
    document["creator"] = creator_id

    db = get_database()
    async with await get_client().start_session() as session:
        async with session.start_transaction():
            result = await db.places.insert_one(document, session=session)
            pushed = await db.users.update_one(
                {"_id": creator_id},
                {"$push": {"places": result.inserted_id}},
                session=session,
            )
            if pushed.matched_count != 1:
                raise resource_not_found("User", place.creator)

    document["_id"] = result.inserted_id
    return PlaceOut(**document)


async def delete_place_for_creator(place: PlaceOut) -> None:
    """Remove a place and detach it from its creator in one transaction.

    The transaction context commits on exit, so returning means the commit
    has completed.
    """
    place_id = ObjectId(place.id)
    creator_id = to_object_id(place.creator)

    db = get_database()
    async with await get_client().start_session() as session:
        async with session.start_transaction():
            deleted = await db.places.delete_one({"_id": place_id}, session=session)
            if deleted.deleted_count != 1:
                raise resource_not_found("Place", place.id)
            if creator_id is None:
                logger.warning("place_without_valid_creator place_id=%s creator=%s", place.id, place.creator)
                return
            pulled = await db.users.update_one(
                {"_id": creator_id},
                {"$pull": {"places": place_id}},
                session=session,
            )
            if pulled.matched_count != 1:
                logger.warning("place_creator_missing place_id=%s creator=%s", place.id, place.creator)
