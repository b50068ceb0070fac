"""
Itinerary models

These are the repaired, trusted shapes produced by agents.normalizer. The wire
format is camelCase to match what the generative model emits and what the web
client renders; values are never mutated after normalization.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

ActivityCategory = Literal["flight", "accommodation", "activity", "transport", "meal"]

CATEGORIES: tuple[str, ...] = ("flight", "accommodation", "activity", "transport", "meal")

# Activity category -> costBreakdown bucket
BREAKDOWN_BUCKETS: dict[str, str] = {
    "flight": "flights",
    "accommodation": "accommodation",
    "activity": "activities",
    "meal": "meals",
    "transport": "transport",
}


class Activity(BaseModel):
    """One scheduled slot within a day."""

    time: str = Field(default="09:00", description="HH:MM 24-hour")
    title: str = Field(default="Activity")
    description: str = Field(default="")
    category: ActivityCategory = Field(default="activity")
    cost: float = Field(default=0.0, ge=0, description="USD, non-negative")
    location: str = Field(default="")

    model_config = ConfigDict(frozen=True)


class Day(BaseModel):
    date: str = Field(..., description="YYYY-MM-DD")
    activities: list[Activity] = Field(default_factory=list)
    total_cost: float = Field(default=0.0, alias="totalCost")

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class Itinerary(BaseModel):
    """
    Complete trip plan.

    total_cost and cost_breakdown are whatever the model supplied when numeric,
    otherwise the sums computed by the normalizer.
    """

    days: list[Day] = Field(..., min_length=1)
    total_cost: float = Field(default=0.0, alias="totalCost")
    cost_breakdown: dict[str, float] = Field(default_factory=dict, alias="costBreakdown")

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "days": [
                    {
                        "date": "2025-03-15",
                        "activities": [
                            {
                                "time": "09:00",
                                "title": "Louvre Museum",
                                "description": "Morning visit",
                                "category": "activity",
                                "cost": 22,
                                "location": "Rue de Rivoli",
                            }
                        ],
                        "totalCost": 22,
                    }
                ],
                "totalCost": 22,
                "costBreakdown": {
                    "flights": 0,
                    "accommodation": 0,
                    "activities": 22,
                    "meals": 0,
                    "transport": 0,
                },
            }
        }
    )

    @property
    def first_date(self) -> str:
        return self.days[0].date

    @property
    def last_date(self) -> str:
        return self.days[-1].date

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)
