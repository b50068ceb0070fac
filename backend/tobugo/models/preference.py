"""
Travel preference models

TravelPreferences is the input to itinerary synthesis. PartialPreferences is
what the chat extractor accumulates turn by turn. Both accept the loose shapes
the chat model and the web client send (budget as "$1,500 USD", travelers as
"2", a single activity as a bare string).
"""

import math
import re
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

_NUMBER_RE = re.compile(r"\d+(?:,\d{3})*(?:\.\d+)?")
_INT_RE = re.compile(r"\d+")


def _finite(value: int | float | str) -> float | None:
    """float(value), or None for NaN, infinities and ints too large for a float."""
    try:
        number = float(value)
    except OverflowError:
        return None
    return number if math.isfinite(number) else None


def coerce_budget(value: Any) -> float | None:
    """Numbers pass through; strings like "$1,000 - $1,500" yield their first amount."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = _finite(value)
        return number if number is not None and number >= 0 else None
    if isinstance(value, str):
        match = _NUMBER_RE.search(value)
        if match:
            return _finite(match.group(0).replace(",", ""))
    return None


def coerce_count(value: Any) -> int | None:
    """Positive integer from a number or the first integer in a string ("5 days" -> 5)."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if _finite(value) is None:
            return None
        count = int(value)
        return count if count >= 1 else None
    if isinstance(value, str):
        match = _INT_RE.search(value)
        if match:
            try:
                count = int(match.group(0))
            except ValueError:
                # more digits than int() will parse
                return None
            return count if count >= 1 else None
    return None


def coerce_string_list(value: Any) -> list[str] | None:
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        return [value] if value else None
    if isinstance(value, (list, tuple)):
        items = [str(v).strip() for v in value if v is not None and str(v).strip()]
        return items or None
    return None


def coerce_optional_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class _PreferenceFields(BaseModel):
    destination: str | None = Field(default=None, description="City/country name")
    start_date: str | None = Field(
        default=None,
        alias="startDate",
        validation_alias=AliasChoices("startDate", "start_date"),
        description="YYYY-MM-DD",
    )
    end_date: str | None = Field(
        default=None,
        alias="endDate",
        validation_alias=AliasChoices("endDate", "end_date"),
        description="YYYY-MM-DD",
    )
    duration: int | None = Field(
        default=None,
        validation_alias=AliasChoices("duration", "days"),
        description="Trip length in days, used only to backfill missing dates",
    )
    budget: float | None = Field(default=None, description="Total budget in USD")
    accommodation_type: str | None = Field(
        default=None,
        alias="accommodationType",
        validation_alias=AliasChoices("accommodationType", "accommodation_type"),
    )
    activities: list[str] | None = Field(
        default=None,
        validation_alias=AliasChoices("activities", "activityInterests", "activity_interests"),
        description="Ordered activity interests",
    )
    travel_style: str | None = Field(
        default=None,
        alias="travelStyle",
        validation_alias=AliasChoices("travelStyle", "travel_style"),
    )
    dietary_restrictions: list[str] | None = Field(
        default=None,
        alias="dietaryRestrictions",
        validation_alias=AliasChoices("dietaryRestrictions", "dietary_restrictions"),
    )

    model_config = ConfigDict(populate_by_name=True)

    @field_validator(
        "destination", "start_date", "end_date", "accommodation_type", "travel_style", mode="before"
    )
    @classmethod
    def _clean_text(cls, value: Any) -> str | None:
        return coerce_optional_text(value)

    @field_validator("budget", mode="before")
    @classmethod
    def _clean_budget(cls, value: Any) -> float | None:
        return coerce_budget(value)

    @field_validator("duration", mode="before")
    @classmethod
    def _clean_duration(cls, value: Any) -> int | None:
        return coerce_count(value)

    @field_validator("activities", "dietary_restrictions", mode="before")
    @classmethod
    def _clean_lists(cls, value: Any) -> list[str] | None:
        return coerce_string_list(value)

    def to_wire(self) -> dict[str, Any]:
        """camelCase dict without empty fields, as sent to the model and the client."""
        return self.model_dump(by_alias=True, exclude_none=True)


class PartialPreferences(_PreferenceFields):
    """Whatever the conversation has established so far; every field optional."""

    travelers: int | None = Field(
        default=None,
        validation_alias=AliasChoices("travelers", "travelerCount", "traveler_count"),
    )

    @field_validator("travelers", mode="before")
    @classmethod
    def _clean_travelers(cls, value: Any) -> int | None:
        return coerce_count(value)

    def merged(self, other: "PartialPreferences | None") -> "PartialPreferences":
        """Return a new value where the non-empty fields of ``other`` win."""
        data = self.model_dump(exclude_none=True)
        if other is not None:
            data.update(other.model_dump(exclude_none=True))
        return PartialPreferences(**data)


class TravelPreferences(_PreferenceFields):
    """
    Complete preferences handed to the itinerary synthesizer.
    Dates may still be missing here; dates.backfill_dates fills them in.
    """

    destination: str = Field(..., description="City/country name")
    travelers: int = Field(
        default=1,
        validation_alias=AliasChoices("travelers", "travelerCount", "traveler_count"),
    )

    @field_validator("travelers", mode="before")
    @classmethod
    def _clean_travelers(cls, value: Any) -> int:
        # Unparseable or missing counts mean a solo traveler
        return coerce_count(value) or 1

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "destination": "Paris, France",
                "startDate": "2025-03-15",
                "endDate": "2025-03-17",
                "budget": 1500,
                "travelers": 2,
                "accommodationType": "Boutique hotel",
                "activities": ["museums", "food tours"],
                "travelStyle": "Relaxed",
                "dietaryRestrictions": ["vegetarian"],
            }
        }
    )
