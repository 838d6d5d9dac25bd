from fastapi import APIRouter, Request

from core.response_envelope import document_response
from services.place_service import get_places_by_user_id

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/{user_id}/places")
@document_response(
    message="Places fetched successfully",
    success_example={"places": []},
    response_codes={404: "No places found for the user"},
)
async def list_user_places(user_id: str, request: Request):
    places = await get_places_by_user_id(user_id)
    return {"places": [place.model_dump() for place in places]}
