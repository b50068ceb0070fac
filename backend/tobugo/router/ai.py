"""
AI Router
Itinerary generation and optimization without persistence
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from tobugo.core.deps import generation_http_error, get_services
from tobugo.core.errors import GenerationError
from tobugo.models.common import APIResponse
from tobugo.models.itinerary import Itinerary
from tobugo.models.preference import TravelPreferences

router = APIRouter(prefix="/ai", tags=["AI"])


class OptimizeRequest(BaseModel):
    itinerary: Itinerary
    feedback: str = Field(..., description="Free-text change request, e.g. 'less walking on day 2'")


@router.post("/generate-itinerary", response_model=APIResponse)
async def generate_itinerary(body: TravelPreferences, services=Depends(get_services)):
    """
    Generate a normalized itinerary from (possibly partial) preferences.
    Missing dates are backfilled from today and the requested duration.
    """
    print(f"[ai] Generate itinerary for destination={body.destination!r}")
    try:
        itinerary = await services.itinerary_agent.synthesize(body)
    except GenerationError as e:
        raise generation_http_error(e)
    return APIResponse(code=0, msg="ok", data={"itinerary": itinerary.to_wire()})


@router.post("/optimize-itinerary", response_model=APIResponse)
async def optimize_itinerary(body: OptimizeRequest, services=Depends(get_services)):
    try:
        itinerary = await services.optimizer_agent.optimize(body.itinerary, body.feedback)
    except GenerationError as e:
        raise generation_http_error(e)
    return APIResponse(code=0, msg="ok", data={"itinerary": itinerary.to_wire()})
