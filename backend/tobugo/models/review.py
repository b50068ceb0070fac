"""
Community models: reviews left on shared trips, and trips a user bookmarked
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from tobugo.models.trip import generate_id

ReviewTarget = Literal["trip", "accommodation", "activity"]


class Review(BaseModel):
    id: str = Field(default_factory=generate_id)
    user_id: str = Field(..., description="Author (identity provider subject)")
    trip_id: str | None = None
    target_type: ReviewTarget = "trip"
    target_id: str = Field(..., description="Trip id, or the reviewed accommodation/activity name")
    rating: int = Field(..., ge=1, le=5)
    comment: str | None = None
    helpful: int = Field(default=0, ge=0)

    created_at: datetime = Field(default_factory=datetime.utcnow)


class ReviewCreate(BaseModel):
    """Request body; the author comes from the bearer token."""

    trip_id: str | None = None
    target_type: ReviewTarget = "trip"
    target_id: str | None = None
    rating: int = Field(..., ge=1, le=5)
    comment: str | None = Field(default=None, max_length=2000)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"trip_id": "3f9c0a...", "target_type": "trip", "rating": 5, "comment": "Great pacing"}
        }
    )

    @model_validator(mode="after")
    def _resolve_target(self) -> "ReviewCreate":
        # A trip review targets the trip itself
        if self.target_id is None and self.trip_id is not None:
            self.target_id = self.trip_id
        if self.target_type == "trip" and self.trip_id is None:
            raise ValueError("trip reviews need a trip_id")
        if not self.target_id:
            raise ValueError("target_id is required")
        return self


class SavedTrip(BaseModel):
    id: str = Field(default_factory=generate_id)
    user_id: str
    trip_id: str

    created_at: datetime = Field(default_factory=datetime.utcnow)


class SavedTripCreate(BaseModel):
    trip_id: str
