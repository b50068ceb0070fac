"""
Trip Router
Saved trips, community feed, itinerary revisions and purchase-gated export
"""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from tobugo.core.deps import generation_http_error, get_services, get_storage
from tobugo.core.errors import GenerationError
from tobugo.core.security import get_current_user_id, get_optional_user_id
from tobugo.models.common import APIResponse
from tobugo.models.trip import Trip, TripCreate, TripUpdate

router = APIRouter(prefix="/trips", tags=["Trips"])


class OptimizeTripRequest(BaseModel):
    feedback: str = Field(..., description="Free-text change request")


def trip_to_wire(trip: Trip) -> dict:
    return trip.model_dump(mode="json", by_alias=True)


async def _owned_trip(trip_id: str, user_id: str, storage) -> Trip:
    trip = await storage.get_trip(trip_id)
    if trip is None:
        raise HTTPException(status_code=404, detail="Trip not found")
    if trip.user_id != user_id:
        raise HTTPException(status_code=403, detail="Not your trip")
    return trip


@router.get("/public", response_model=APIResponse)
async def list_public_trips(storage=Depends(get_storage)):
    trips = await storage.list_public_trips()
    return APIResponse(code=0, msg="ok", data=[trip_to_wire(t) for t in trips])


@router.get("/user/{user_id}", response_model=APIResponse)
async def list_user_trips(
    user_id: str,
    current_user: str = Depends(get_current_user_id),
    storage=Depends(get_storage),
):
    if user_id != current_user:
        raise HTTPException(status_code=403, detail="Cannot list another user's trips")
    trips = await storage.list_trips_by_user(user_id)
    return APIResponse(code=0, msg="ok", data=[trip_to_wire(t) for t in trips])


@router.get("/{trip_id}", response_model=APIResponse)
async def get_trip(
    trip_id: str,
    current_user: str | None = Depends(get_optional_user_id),
    storage=Depends(get_storage),
):
    trip = await storage.get_trip(trip_id)
    if trip is None or (not trip.is_public and trip.user_id != current_user):
        raise HTTPException(status_code=404, detail="Trip not found")
    return APIResponse(code=0, msg="ok", data=trip_to_wire(trip))


@router.post("", status_code=201, response_model=APIResponse)
async def create_trip(
    body: TripCreate,
    user_id: str = Depends(get_current_user_id),
    storage=Depends(get_storage),
):
    trip = await storage.create_trip(Trip(user_id=user_id, **body.model_dump(exclude_none=True)))
    print(f"[trip] Created trip {trip.id} ({trip.destination}) for user {user_id}")
    return APIResponse(code=0, msg="created", data=trip_to_wire(trip))


@router.put("/{trip_id}", response_model=APIResponse)
async def update_trip(
    trip_id: str,
    body: TripUpdate,
    user_id: str = Depends(get_current_user_id),
    storage=Depends(get_storage),
):
    await _owned_trip(trip_id, user_id, storage)
    updates = body.model_dump(exclude_unset=True)
    if not updates:
        raise HTTPException(status_code=400, detail="No fields to update")
    trip = await storage.update_trip(trip_id, updates)
    return APIResponse(code=0, msg="ok", data=trip_to_wire(trip))


@router.delete("/{trip_id}", response_model=APIResponse)
async def delete_trip(
    trip_id: str,
    user_id: str = Depends(get_current_user_id),
    storage=Depends(get_storage),
):
    await _owned_trip(trip_id, user_id, storage)
    await storage.delete_trip(trip_id)
    return APIResponse(code=0, msg="Trip deleted successfully", data={"id": trip_id})


@router.post("/{trip_id}/optimize", response_model=APIResponse)
async def optimize_trip(
    trip_id: str,
    body: OptimizeTripRequest,
    user_id: str = Depends(get_current_user_id),
    services=Depends(get_services),
):
    """Revise the saved itinerary from feedback and store the new version."""
    trip = await _owned_trip(trip_id, user_id, services.storage)
    if trip.itinerary is None:
        raise HTTPException(status_code=409, detail="Trip has no itinerary yet")

    try:
        itinerary = await services.optimizer_agent.optimize(trip.itinerary, body.feedback)
    except GenerationError as e:
        raise generation_http_error(e)

    updated = await services.storage.update_trip(
        trip_id,
        {"itinerary": itinerary, "start_date": itinerary.first_date, "end_date": itinerary.last_date},
    )
    return APIResponse(code=0, msg="ok", data=trip_to_wire(updated))


@router.get("/{trip_id}/export", response_model=APIResponse)
async def export_trip(
    trip_id: str,
    user_id: str = Depends(get_current_user_id),
    storage=Depends(get_storage),
):
    """
    Itinerary payload for the PDF renderer. The purchase flag is set by the
    payment webhook; this route only reads it.
    """
    trip = await _owned_trip(trip_id, user_id, storage)
    if not trip.has_purchased:
        raise HTTPException(status_code=402, detail="Purchase required to export this itinerary")
    if trip.itinerary is None:
        raise HTTPException(status_code=409, detail="Trip has no itinerary yet")
    return APIResponse(
        code=0,
        msg="ok",
        data={
            "title": trip.title,
            "destination": trip.destination,
            "itinerary": trip.itinerary.to_wire(),
        },
    )
