"""
Itinerary normalization.

Turns an untrusted, model-produced itinerary document into an Itinerary whose
costs add up. Per-field omissions are repaired silently; a document without
days is the one thing that cannot be repaired and raises ValidationError.

Pure: same document + same preferences -> same Itinerary. The input is never
modified.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from typing import Any

from tobugo.agents.dates import shift
from tobugo.core.errors import ValidationError
from tobugo.models.itinerary import BREAKDOWN_BUCKETS, CATEGORIES, Activity, Day, Itinerary
from tobugo.models.preference import TravelPreferences

# Leading decimal, the way JavaScript's parseFloat reads "45.50 USD"
_LEADING_FLOAT_RE = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")

ACTIVITY_DEFAULTS: dict[str, str] = {
    "time": "09:00",
    "title": "Activity",
    "description": "",
    "category": "activity",
    "location": "",
}


class UntrustedDocument:
    """
    Coercion rules for model output, one per field shape.

    Every rule is total: it accepts any value and returns something of the
    target type.
    """

    @staticmethod
    def is_number(value: Any) -> bool:
        if not isinstance(value, (int, float)) or isinstance(value, bool):
            return False
        try:
            return math.isfinite(float(value))
        except OverflowError:
            # JSON integers with hundreds of digits
            return False

    @classmethod
    def coerce_cost(cls, value: Any) -> float:
        if cls.is_number(value):
            return float(value) if value > 0 else 0.0
        if isinstance(value, str):
            match = _LEADING_FLOAT_RE.match(value)
            if match:
                parsed = float(match.group(0))
                if math.isfinite(parsed) and parsed > 0:
                    return parsed
        return 0.0

    @staticmethod
    def coerce_text(value: Any, default: str) -> str:
        if isinstance(value, str):
            return value if value else default
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return default

    @staticmethod
    def coerce_sequence(value: Any) -> list[Any]:
        if isinstance(value, (list, tuple)):
            return list(value)
        return []

    @staticmethod
    def coerce_mapping(value: Any) -> Mapping[str, Any]:
        return value if isinstance(value, Mapping) else {}

    @staticmethod
    def coerce_category(item: Mapping[str, Any]) -> str:
        # "type" is what older prompts asked for
        raw = item.get("category")
        if not raw:
            raw = item.get("type")
        if isinstance(raw, str):
            key = raw.strip().lower()
            if key in CATEGORIES:
                return key
        return ACTIVITY_DEFAULTS["category"]

    @staticmethod
    def unwrap(raw: Any) -> Any:
        """Strip a single ``{"itinerary": {...}}`` envelope."""
        if isinstance(raw, Mapping):
            inner = raw.get("itinerary")
            if isinstance(inner, Mapping):
                return inner
        return raw


doc = UntrustedDocument


def normalize_activity(raw: Any) -> Activity:
    item = doc.coerce_mapping(raw)
    return Activity(
        time=doc.coerce_text(item.get("time"), ACTIVITY_DEFAULTS["time"]),
        title=doc.coerce_text(item.get("title"), ACTIVITY_DEFAULTS["title"]),
        description=doc.coerce_text(item.get("description"), ACTIVITY_DEFAULTS["description"]),
        category=doc.coerce_category(item),
        cost=doc.coerce_cost(item.get("cost")),
        location=doc.coerce_text(item.get("location"), ACTIVITY_DEFAULTS["location"]),
    )


def normalize_day(raw: Any, index: int, preferences: TravelPreferences) -> Day:
    day = doc.coerce_mapping(raw)
    activities = [normalize_activity(a) for a in doc.coerce_sequence(day.get("activities"))]

    supplied_total = day.get("totalCost")
    if doc.is_number(supplied_total):
        total_cost = float(supplied_total)
    else:
        total_cost = sum(a.cost for a in activities)

    date = day.get("date")
    if not isinstance(date, str) or not date.strip():
        # Position in the list is the authoritative ordering
        date = shift(preferences.start_date, index, "start date")

    return Day(date=date, activities=activities, total_cost=total_cost)


def compute_cost_breakdown(days: list[Day]) -> dict[str, float]:
    breakdown = {bucket: 0.0 for bucket in BREAKDOWN_BUCKETS.values()}
    for day in days:
        for activity in day.activities:
            bucket = BREAKDOWN_BUCKETS.get(activity.category, "activities")
            breakdown[bucket] += activity.cost
    return breakdown


def normalize(raw: Any, preferences: TravelPreferences) -> Itinerary:
    """
    Repair ``raw`` into an Itinerary.

    Order matters: activities -> day totals -> day dates -> cost breakdown
    (only when absent) -> grand total (only when not numeric).
    """
    document = doc.coerce_mapping(doc.unwrap(raw))

    raw_days = document.get("days")
    if not isinstance(raw_days, (list, tuple)) or len(raw_days) == 0:
        raise ValidationError(
            "Invalid itinerary: missing days array",
            user_message="The generated itinerary had no days. Please try again.",
        )

    days = [normalize_day(d, i, preferences) for i, d in enumerate(raw_days)]

    supplied_breakdown = document.get("costBreakdown")
    if isinstance(supplied_breakdown, Mapping):
        # Partial breakdowns are trusted as-is, only their values are coerced
        cost_breakdown = {str(k): doc.coerce_cost(v) for k, v in supplied_breakdown.items()}
    else:
        cost_breakdown = compute_cost_breakdown(days)

    supplied_total = document.get("totalCost")
    if doc.is_number(supplied_total):
        total_cost = float(supplied_total)
    else:
        total_cost = sum(d.total_cost for d in days)

    return Itinerary(days=days, total_cost=total_cost, cost_breakdown=cost_breakdown)


__all__ = [
    "UntrustedDocument",
    "normalize",
    "normalize_activity",
    "normalize_day",
    "compute_cost_breakdown",
]
