from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from schemas.imports import stringify_object_ids

DESCRIPTION_MIN_LENGTH = 5


class Coordinates(BaseModel):
    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)


class PlaceUpdate(BaseModel):
    title: str = Field(min_length=1)
    description: str = Field(min_length=DESCRIPTION_MIN_LENGTH)

    @field_validator("title", "description", mode="before")
    @classmethod
    def strip_text(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip()
        return value


class PlaceCreate(PlaceUpdate):
    address: str = Field(min_length=1)
    creator: str = Field(min_length=1)

    @field_validator("address", "creator", mode="before")
    @classmethod
    def strip_reference(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip()
        return value


class PlaceBase(BaseModel):
    title: str
    description: str
    image: str
    address: str
    location: Coordinates
    creator: str


class PlaceOut(PlaceBase):
    id: str | None = Field(default=None, alias="_id")

    @model_validator(mode="before")
    @classmethod
    def convert_objectid(cls, values):
        if isinstance(values, dict):
            values = dict(values)
            for key in ("_id", "creator"):
                if key in values:
                    values[key] = stringify_object_ids(values[key])
        return values

    model_config = ConfigDict(populate_by_name=True)
