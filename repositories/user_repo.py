from __future__ import annotations

from bson import ObjectId

from core.database import get_database
from schemas.user import UserOut


async def get_user_by_id(user_id: str) -> UserOut | None:
    """Raises ``bson.errors.InvalidId`` when ``user_id`` is not an ObjectId."""
    row = await get_database().users.find_one({"_id": ObjectId(user_id)})
    if row is None:
        return None
    return UserOut(**row)
