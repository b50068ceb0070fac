from __future__ import annotations

import json
import re
import time
from typing import Any

from tobugo.agents.dates import backfill_dates, trip_length
from tobugo.agents.llm import GenerativeModel
from tobugo.agents.normalizer import normalize
from tobugo.agents.retry import RetryPolicy
from tobugo.core.config import DEBUG
from tobugo.core.errors import MalformedOutputError
from tobugo.models.itinerary import Itinerary
from tobugo.models.preference import TravelPreferences


AGENT_LABEL = "itinerary"

_FENCE_RE = re.compile(r"```(?:json)?\s*|\s*```", re.IGNORECASE)


# ====== Prompt ======

OUTPUT_SHAPE = """
IMPORTANT: Return ONLY a JSON object with this exact structure:
{
  "days": [
    {
      "date": "YYYY-MM-DD",
      "activities": [
        {
          "time": "HH:MM",
          "title": "Activity name",
          "description": "Activity description",
          "category": "flight|accommodation|activity|transport|meal",
          "cost": 100,
          "location": "Location name"
        }
      ],
      "totalCost": 500
    }
  ],
  "totalCost": 1500,
  "costBreakdown": {
    "flights": 600,
    "accommodation": 400,
    "activities": 300,
    "meals": 150,
    "transport": 50
  }
}

Do NOT include markdown code fences, prose, or any wrapper objects. Return only the JSON.
"""

SYSTEM = (
    """
You are a professional travel planner AI. Create detailed, realistic travel itineraries with accurate cost estimates.

Key requirements:
- Provide realistic cost estimates in USD
- Include specific times and locations
- Balance activities throughout each day
- Consider travel time between locations
- Include accommodation, meals, transport, and activities
- Provide a comprehensive cost breakdown
"""
    + OUTPUT_SHAPE
)


def build_user_prompt(preferences: TravelPreferences) -> str:
    budget = f"${preferences.budget:g}" if preferences.budget is not None else "Flexible"
    activities = ", ".join(preferences.activities or []) or "General sightseeing"
    dietary = ", ".join(preferences.dietary_restrictions or []) or "None"
    return (
        "Create a travel itinerary for:\n"
        f"- Destination: {preferences.destination}\n"
        f"- Dates: {preferences.start_date} to {preferences.end_date} ({trip_length(preferences)} days)\n"
        f"- Budget: {budget}\n"
        f"- Travelers: {preferences.travelers}\n"
        f"- Accommodation: {preferences.accommodation_type or 'Mid-range hotels'}\n"
        f"- Preferred activities: {activities}\n"
        f"- Travel style: {preferences.travel_style or 'Balanced'}\n"
        f"- Dietary restrictions: {dietary}\n\n"
        "Include flights, accommodation, daily activities, meals, and local transport with realistic pricing."
    )


def strip_code_fences(text: str) -> str:
    return _FENCE_RE.sub("", text).strip()


def parse_model_output(text: str | None) -> dict[str, Any]:
    """
    Fence-strip and parse the model's reply as one JSON object.
    Raises MalformedOutputError; parse failures are not retried.
    """
    cleaned = strip_code_fences(text or "")
    if not cleaned:
        raise MalformedOutputError(
            "Empty response from model",
            user_message="The AI returned an empty itinerary. Please try again.",
        )
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise MalformedOutputError(
            f"Model output is not valid JSON: {e}",
            user_message="The AI returned an itinerary we could not read. Please try again.",
        ) from e
    if not isinstance(data, dict):
        raise MalformedOutputError(
            f"Model output is a JSON {type(data).__name__}, expected an object",
            user_message="The AI returned an itinerary we could not read. Please try again.",
        )
    return data


async def generate_normalized(
    model: GenerativeModel,
    retry: RetryPolicy,
    system_instruction: str,
    user_content: str,
    preferences: TravelPreferences,
    operation: str,
) -> Itinerary:
    """Shared path for synthesis and optimization: call -> parse -> normalize."""
    response = await retry.run(
        lambda: model.invoke(system_instruction, user_content, response_format="json"),
        operation=operation,
    )
    if DEBUG:
        print(f"[{AGENT_LABEL}] Raw model response: {strip_code_fences(response.text or '')[:500]}...")
    data = parse_model_output(response.text)
    return normalize(data, preferences)


# ====== Agent Implementation ======


class ItineraryAgent:
    """
    Itinerary synthesizer.

    Holds no per-request state: the model and retry policy are shared
    collaborators, and every call works only on its arguments.
    """

    def __init__(self, model: GenerativeModel, retry: RetryPolicy | None = None) -> None:
        self.model = model
        self.retry = retry or RetryPolicy()

    async def synthesize(self, preferences: TravelPreferences) -> Itinerary:
        t0 = time.time()
        print("\n" + "=" * 80)
        print("  ITINERARY AGENT START")
        print("=" * 80)

        prefs = backfill_dates(preferences)
        print(f"[DEBUG] Input:")
        print(f"  - Destination: {prefs.destination}")
        print(f"  - Dates: {prefs.start_date} -> {prefs.end_date}")
        print(f"  - Budget: {prefs.budget}")
        print(f"  - Travelers: {prefs.travelers}")

        itinerary = await generate_normalized(
            self.model,
            self.retry,
            SYSTEM,
            build_user_prompt(prefs),
            prefs,
            operation="generate itinerary",
        )

        total_activities = sum(len(day.activities) for day in itinerary.days)
        print("\n" + "=" * 80)
        print("  ITINERARY AGENT COMPLETE")
        print("=" * 80)
        print(f"[RESULT] Destination: {prefs.destination}")
        print(f"[RESULT] Days generated: {len(itinerary.days)}")
        print(f"[RESULT] Total activities in itinerary: {total_activities}")
        print(f"[RESULT] Total cost: {itinerary.total_cost:.2f}")
        total_latency = (time.time() - t0) * 1000
        print(f"[PERF] Total itinerary agent latency: {total_latency:.2f}ms ({total_latency/1000:.2f}s)")
        return itinerary


__all__ = [
    "ItineraryAgent",
    "SYSTEM",
    "OUTPUT_SHAPE",
    "build_user_prompt",
    "strip_code_fences",
    "parse_model_output",
    "generate_normalized",
]
