"""
Trip model: a saved itinerary owned by one user
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from tobugo.models.itinerary import Itinerary
from tobugo.models.preference import PartialPreferences


def generate_id() -> str:
    return uuid.uuid4().hex


class Trip(BaseModel):
    """
    Persisted trip record.

    has_purchased is owned by the payment collaborator; this service only reads
    it to decide whether the itinerary can be exported.
    """

    id: str = Field(default_factory=generate_id)
    user_id: str = Field(..., description="Owner (identity provider subject)")
    title: str = Field(..., description="Display title, e.g. 'Paris getaway'")
    destination: str
    start_date: str | None = Field(default=None, description="YYYY-MM-DD")
    end_date: str | None = Field(default=None, description="YYYY-MM-DD")
    budget: float | None = None
    preferences: PartialPreferences | None = None
    itinerary: Itinerary | None = None
    is_public: bool = False
    has_purchased: bool = False

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "user_id": "123456789",
                "title": "Paris getaway",
                "destination": "Paris, France",
                "start_date": "2025-03-15",
                "end_date": "2025-03-17",
                "budget": 1500,
                "is_public": False,
            }
        }
    )


class TripCreate(BaseModel):
    title: str
    destination: str
    start_date: str | None = None
    end_date: str | None = None
    budget: float | None = None
    preferences: PartialPreferences | None = None
    itinerary: Itinerary | None = None
    is_public: bool = False


class TripUpdate(BaseModel):
    title: str | None = None
    destination: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    budget: float | None = None
    preferences: PartialPreferences | None = None
    itinerary: Itinerary | None = None
    is_public: bool | None = None
