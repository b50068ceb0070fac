"""
Saved Trips Router
Bookmarks of public (or own) trips
"""

from fastapi import APIRouter, Depends, HTTPException

from tobugo.core.deps import get_storage
from tobugo.core.security import get_current_user_id
from tobugo.models.common import APIResponse
from tobugo.models.review import SavedTrip, SavedTripCreate
from tobugo.router.review import visible_trip
from tobugo.router.trip import trip_to_wire

router = APIRouter(prefix="/saved-trips", tags=["Saved Trips"])


def _same_user(user_id: str, current_user: str) -> None:
    if user_id != current_user:
        raise HTTPException(status_code=403, detail="Cannot manage another user's saved trips")


@router.get("/user/{user_id}", response_model=APIResponse)
async def list_saved_trips(
    user_id: str,
    current_user: str = Depends(get_current_user_id),
    storage=Depends(get_storage),
):
    _same_user(user_id, current_user)
    trips = await storage.list_saved_trips_by_user(user_id)
    return APIResponse(code=0, msg="ok", data=[trip_to_wire(t) for t in trips])


@router.post("", status_code=201, response_model=APIResponse)
async def save_trip(
    body: SavedTripCreate,
    user_id: str = Depends(get_current_user_id),
    storage=Depends(get_storage),
):
    await visible_trip(body.trip_id, user_id, storage)
    saved = await storage.create_saved_trip(SavedTrip(user_id=user_id, trip_id=body.trip_id))
    return APIResponse(code=0, msg="created", data=saved.model_dump(mode="json"))


@router.delete("/{user_id}/{trip_id}", response_model=APIResponse)
async def unsave_trip(
    user_id: str,
    trip_id: str,
    current_user: str = Depends(get_current_user_id),
    storage=Depends(get_storage),
):
    _same_user(user_id, current_user)
    if not await storage.delete_saved_trip(user_id, trip_id):
        raise HTTPException(status_code=404, detail="Trip is not in saved trips")
    return APIResponse(code=0, msg="Trip removed from saved trips", data={"trip_id": trip_id})
