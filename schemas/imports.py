from __future__ import annotations

from typing import Any

from bson import ObjectId


def to_object_id(value: str) -> ObjectId | None:
    if isinstance(value, ObjectId):
        return value
    if not ObjectId.is_valid(value):
        return None
    return ObjectId(value)


def stringify_object_ids(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, list):
        return [stringify_object_ids(item) for item in value]
    return value
