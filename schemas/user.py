from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from schemas.imports import stringify_object_ids


class UserOut(BaseModel):
    id: str | None = Field(default=None, alias="_id")
    name: str | None = None
    email: str | None = None
    image: str | None = None
    places: list[str] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def convert_objectid(cls, values):
        if isinstance(values, dict):
            values = dict(values)
            for key in ("_id", "places"):
                if key in values:
                    values[key] = stringify_object_ids(values[key])
        return values

    model_config = ConfigDict(populate_by_name=True)
