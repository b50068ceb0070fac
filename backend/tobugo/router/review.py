"""
Review Router
Ratings and comments on shared trips
"""

from fastapi import APIRouter, Depends, HTTPException

from tobugo.core.deps import get_storage
from tobugo.core.security import get_current_user_id, get_optional_user_id
from tobugo.models.common import APIResponse
from tobugo.models.review import Review, ReviewCreate

router = APIRouter(prefix="/reviews", tags=["Reviews"])


def review_to_wire(review: Review) -> dict:
    return review.model_dump(mode="json")


async def visible_trip(trip_id: str, user_id: str | None, storage):
    """The trip if it is public or belongs to user_id; 404 otherwise."""
    trip = await storage.get_trip(trip_id)
    if trip is None or (not trip.is_public and trip.user_id != user_id):
        raise HTTPException(status_code=404, detail="Trip not found")
    return trip


@router.get("/trip/{trip_id}", response_model=APIResponse)
async def list_trip_reviews(
    trip_id: str,
    current_user: str | None = Depends(get_optional_user_id),
    storage=Depends(get_storage),
):
    await visible_trip(trip_id, current_user, storage)
    reviews = await storage.list_reviews_by_trip(trip_id)
    return APIResponse(code=0, msg="ok", data=[review_to_wire(r) for r in reviews])


@router.get("/user/{user_id}", response_model=APIResponse)
async def list_user_reviews(
    user_id: str,
    current_user: str = Depends(get_current_user_id),
    storage=Depends(get_storage),
):
    if user_id != current_user:
        raise HTTPException(status_code=403, detail="Cannot list another user's reviews")
    reviews = await storage.list_reviews_by_user(user_id)
    return APIResponse(code=0, msg="ok", data=[review_to_wire(r) for r in reviews])


@router.post("", status_code=201, response_model=APIResponse)
async def create_review(
    body: ReviewCreate,
    user_id: str = Depends(get_current_user_id),
    storage=Depends(get_storage),
):
    if body.trip_id is not None:
        await visible_trip(body.trip_id, user_id, storage)
    review = await storage.create_review(Review(user_id=user_id, **body.model_dump()))
    print(f"[review] {user_id} rated {review.target_type} {review.target_id}: {review.rating}/5")
    return APIResponse(code=0, msg="created", data=review_to_wire(review))
