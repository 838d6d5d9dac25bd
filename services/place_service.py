from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any

from bson.errors import InvalidId
from pydantic import ValidationError
from pymongo.errors import PyMongoError

from core.errors import resource_not_found, storage_error, transaction_failed, validation_failed
from core.settings import get_settings
from core.storage import ImageStorageManager, ImageUpload
from core.validation_errors import validation_exception
from repositories import place_repo, user_repo
from schemas.place import PlaceBase, PlaceCreate, PlaceOut, PlaceUpdate
from services.geocoding_service import GeocodingClient

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = {"image/png", "image/jpeg", "image/jpg"}

# A malformed id fails the lookup itself and maps to STORAGE_ERROR.
LOOKUP_ERRORS = (PyMongoError, InvalidId)


@lru_cache(maxsize=1)
def get_geocoding_client() -> GeocodingClient:
    return GeocodingClient.from_settings(get_settings())


def image_read_limit() -> int:
    """Bytes to read from an upload: one past the limit so oversize files are still detected."""
    return get_settings().max_image_bytes + 1


def _validate_image(image: ImageUpload | None) -> ImageUpload:
    if image is None:
        raise validation_failed(details={"field": "image", "reason": "An image file is required."})
    if image.mime_type not in ALLOWED_IMAGE_TYPES:
        raise validation_failed(
            details={"field": "image", "reason": "Unsupported image type.", "allowed": sorted(ALLOWED_IMAGE_TYPES)},
        )
    max_bytes = get_settings().max_image_bytes
    if not image.payload or len(image.payload) > max_bytes:
        raise validation_failed(
            details={"field": "image", "reason": "Image is empty or too large.", "max_size_bytes": max_bytes},
        )
    return image


def _discard_image(path: str) -> None:
    try:
        ImageStorageManager.get_instance().provider.delete_image(path=path)
    except Exception:
        logger.warning("image_cleanup_failed path=%s", path, exc_info=True)


async def get_place_by_id(place_id: str) -> PlaceOut:
    try:
        place = await place_repo.get_place_by_id(place_id)
    except LOOKUP_ERRORS as err:
        raise storage_error("Something went wrong, could not find a place.") from err

    if place is None:
        raise resource_not_found("Place", place_id)
    return place


async def get_places_by_user_id(user_id: str) -> list[PlaceOut]:
    try:
        places = await place_repo.get_places_by_creator(user_id)
    except LOOKUP_ERRORS as err:
        raise storage_error("Fetching places failed, please try again later.") from err

    # An unknown user and a user without places both land here.
    if not places:
        raise resource_not_found("Places for user", user_id)
    return places


async def create_place(fields: dict[str, Any], image: ImageUpload | None) -> PlaceOut:
    try:
        payload = PlaceCreate.model_validate(fields)
    except ValidationError as err:
        raise validation_exception(err) from err
    upload = _validate_image(image)

    coordinates = await get_geocoding_client().resolve_coordinates(payload.address)

    try:
        creator = await user_repo.get_user_by_id(payload.creator)
    except LOOKUP_ERRORS as err:
        raise storage_error("Creating place failed, please try again.") from err
    if creator is None:
        raise resource_not_found("User", payload.creator)

    stored = ImageStorageManager.get_instance().provider.save_image(
        file_name=upload.file_name,
        mime_type=upload.mime_type,
        payload=upload.payload,
    )
    place = PlaceBase(
        title=payload.title,
        description=payload.description,
        image=stored.path,
        address=payload.address,
        location=coordinates,
        creator=payload.creator,
    )

    try:
        created = await place_repo.create_place_for_creator(place)
    except PyMongoError as err:
        logger.exception("create_place_transaction_failed creator=%s", payload.creator)
        _discard_image(stored.path)
        raise transaction_failed("Creating place failed, please try again.") from err
    except Exception:
        _discard_image(stored.path)
        raise

    logger.info("place_created place_id=%s creator=%s", created.id, created.creator)
    return created


async def update_place(place_id: str, fields: dict[str, Any]) -> PlaceOut:
    try:
        payload = PlaceUpdate.model_validate(fields)
    except ValidationError as err:
        raise validation_exception(err) from err

    try:
        existing = await place_repo.get_place_by_id(place_id)
    except LOOKUP_ERRORS as err:
        raise storage_error("Something went wrong, could not update place.") from err
    if existing is None:
        raise resource_not_found("Place", place_id)

    try:
        updated = await place_repo.update_place_fields(
            place_id,
            {"title": payload.title, "description": payload.description},
        )
    except LOOKUP_ERRORS as err:
        raise storage_error("Something went wrong, could not update place.") from err
    if updated is None:
        raise resource_not_found("Place", place_id)
    return updated


async def delete_place(place_id: str) -> None:
    try:
        place = await place_repo.get_place_by_id(place_id)
    except LOOKUP_ERRORS as err:
        raise storage_error("Something went wrong, could not delete place.") from err
    if place is None:
        raise resource_not_found("Place", place_id)

    try:
        await place_repo.delete_place_for_creator(place)
    except PyMongoError as err:
        logger.exception("delete_place_transaction_failed place_id=%s", place_id)
        raise transaction_failed("Something went wrong, could not delete place.") from err

    logger.info("place_deleted place_id=%s creator=%s", place.id, place.creator)
    _discard_image(place.image)
