from fastapi import APIRouter, File, Form, Request, UploadFile

from core.response_envelope import document_response
from core.storage import ImageUpload
from schemas.place import PlaceUpdate
from services.place_service import (
    create_place,
    delete_place,
    get_place_by_id,
    image_read_limit,
    update_place,
)

router = APIRouter(prefix="/places", tags=["Places"])

PLACE_EXAMPLE = {
    "place": {
        "id": "65f1c2a9e4b0a1b2c3d4e5f6",
        "title": "Empire State Building",
        "description": "One of the most famous sky scrapers in the world!",
        "image": "uploads/images/0f8fad5bd9cb469fa16570867728950e.jpg",
        "address": "20 W 34th St, New York, NY 10001",
        "location": {"lat": 40.7484405, "lng": -73.9878584},
        "creator": "65f1c2a9e4b0a1b2c3d4e5a1",
    }
}


@router.get("/{place_id}")
@document_response(
    message="Place fetched successfully",
    success_example=PLACE_EXAMPLE,
    response_codes={404: "Place not found"},
)
async def fetch_place(place_id: str, request: Request):
    place = await get_place_by_id(place_id)
    return {"place": place.model_dump()}


@router.post("")
@document_response(
    message="Place created successfully",
    status_code=201,
    success_example=PLACE_EXAMPLE,
    response_codes={404: "Creator not found", 422: "Invalid input or address could not be geocoded"},
)
async def create_new_place(
    request: Request,
    title: str | None = Form(default=None),
    description: str | None = Form(default=None),
    address: str | None = Form(default=None),
    creator: str | None = Form(default=None),
    image: UploadFile | None = File(default=None),
):
    upload = None
    if image is not None:
        upload = ImageUpload(
            file_name=image.filename or "",
            mime_type=image.content_type or "",
            payload=await image.read(image_read_limit()),
        )

    fields = {"title": title, "description": description, "address": address, "creator": creator}
    place = await create_place({key: value for key, value in fields.items() if value is not None}, upload)
    return {"place": place.model_dump()}


@router.patch("/{place_id}")
@document_response(
    message="Place updated successfully",
    success_example=PLACE_EXAMPLE,
    response_codes={404: "Place not found", 422: "Invalid input"},
)
async def patch_place(place_id: str, payload: PlaceUpdate, request: Request):
    place = await update_place(place_id, payload.model_dump())
    return {"place": place.model_dump()}


@router.delete("/{place_id}")
@document_response(message="Deleted place.", success_example=None, response_codes={404: "Place not found"})
async def remove_place(place_id: str, request: Request):
    await delete_place(place_id)
    return None
