from __future__ import annotations

import json
import time
from datetime import date

from tobugo.agents.dates import parse_date
from tobugo.agents.itinerary_agent import OUTPUT_SHAPE, generate_normalized
from tobugo.agents.llm import GenerativeModel
from tobugo.agents.retry import RetryPolicy
from tobugo.core.errors import ValidationError
from tobugo.models.itinerary import Itinerary
from tobugo.models.preference import TravelPreferences


AGENT_LABEL = "optimizer"

SYSTEM = (
    """
You are a travel planner optimizing an existing itinerary based on user feedback.

Modify the itinerary according to the user's requests while maintaining:
- Realistic costs and timing
- Logical, chronological flow between activities
- Comprehensive cost tracking

Always return the complete itinerary, not only the changed days.
"""
    + OUTPUT_SHAPE
)


def build_user_prompt(current: Itinerary, feedback: str) -> str:
    return (
        f"Current itinerary: {json.dumps(current.to_wire(), ensure_ascii=False)}\n\n"
        f"User feedback: {feedback}\n\n"
        "Please modify the itinerary according to this feedback."
    )


def preferences_from_itinerary(current: Itinerary, today: date | None = None) -> TravelPreferences:
    """
    Synthetic preferences for normalizing an optimized itinerary: the date
    span comes from the current plan's first and last day.
    """
    fallback = (today or date.today()).isoformat()

    def _usable(value: str) -> str:
        try:
            return parse_date(value).isoformat()
        except ValidationError:
            return fallback

    return TravelPreferences(
        destination="Unknown",
        start_date=_usable(current.first_date),
        end_date=_usable(current.last_date),
        budget=current.total_cost,
    )


class OptimizerAgent:
    """Revises an itinerary from free-text feedback and re-normalizes it."""

    def __init__(self, model: GenerativeModel, retry: RetryPolicy | None = None) -> None:
        self.model = model
        self.retry = retry or RetryPolicy()

    async def optimize(self, current: Itinerary, feedback: str) -> Itinerary:
        feedback = (feedback or "").strip()
        if not feedback:
            raise ValidationError("Missing feedback", user_message="Tell us what to change first.")

        t0 = time.time()
        print(f"[{AGENT_LABEL}] Optimizing {len(current.days)}-day itinerary with feedback: {feedback[:200]}")

        itinerary = await generate_normalized(
            self.model,
            self.retry,
            SYSTEM,
            build_user_prompt(current, feedback),
            preferences_from_itinerary(current),
            operation="optimize itinerary",
        )

        print(f"[RESULT] Days: {len(current.days)} -> {len(itinerary.days)}")
        print(f"[RESULT] Total cost: {current.total_cost:.2f} -> {itinerary.total_cost:.2f}")
        print(f"[PERF] Total optimizer latency: {(time.time() - t0) * 1000:.2f}ms")
        return itinerary


__all__ = ["OptimizerAgent", "SYSTEM", "build_user_prompt", "preferences_from_itinerary"]
