# orchestrator_agent.py - Chat turn -> preferences -> itinerary -> saved trip
from __future__ import annotations

import time
from typing import Any

from langchain_core.messages import AIMessage
from langgraph.graph import END, StateGraph

from tobugo.agents.agent_state import AgentState
from tobugo.agents.itinerary_agent import ItineraryAgent
from tobugo.agents.preference_agent import PreferenceAgent
from tobugo.core.errors import GenerationError
from tobugo.db.database import Storage
from tobugo.models.itinerary import Itinerary
from tobugo.models.preference import PartialPreferences, TravelPreferences
from tobugo.models.trip import Trip

AGENT_LABEL = "orchestrator"


def _route_after_extraction(state: AgentState) -> str:
    agent_data = state.get("agent_data", {}) or {}
    if agent_data.get("ready") and state.get("auto_generate", True):
        print(f"[{AGENT_LABEL}] Preferences complete, generating itinerary")
        return "synthesize"
    return "end"


def _route_after_synthesis(state: AgentState) -> str:
    agent_data = state.get("agent_data", {}) or {}
    return "persist" if agent_data.get("itinerary") is not None else "end"


class PlanningWorkflow:
    """
    LangGraph workflow for one chat turn:

        extract_preferences --(ready & auto_generate)--> synthesize_itinerary
            --(itinerary produced)--> persist_itinerary --> END

    A generation failure ends the graph with agent_data["error"] set; the
    conversational reply is still returned to the user.
    """

    def __init__(
        self,
        preference_agent: PreferenceAgent,
        itinerary_agent: ItineraryAgent,
        storage: Storage,
    ) -> None:
        self.preference_agent = preference_agent
        self.itinerary_agent = itinerary_agent
        self.storage = storage
        self.app = self._build_graph()

    # ---- Nodes ----
    async def _extract_preferences(self, state: AgentState) -> dict[str, Any]:
        agent_data = dict(state.get("agent_data", {}) or {})
        prior = state.get("preferences") or PartialPreferences()
        result = await self.preference_agent.extract_turn(state.get("history") or [], prior)

        agent_data.update(
            {
                "reply": result.reply,
                "preferences": result.partial_preferences,
                "ready": result.ready_to_generate,
                "fallback": result.fallback,
            }
        )
        return {
            "agent_data": agent_data,
            "messages": [AIMessage(content=f"[preference] ready={result.ready_to_generate}")],
        }

    async def _synthesize_itinerary(self, state: AgentState) -> dict[str, Any]:
        agent_data = dict(state.get("agent_data", {}) or {})
        partial: PartialPreferences = agent_data["preferences"]
        try:
            preferences = TravelPreferences.model_validate(partial.model_dump(exclude_none=True))
            itinerary = await self.itinerary_agent.synthesize(preferences)
        except GenerationError as e:
            print(f"[{AGENT_LABEL}] Itinerary generation failed: {type(e).__name__}: {e}")
            agent_data["error"] = {
                "kind": getattr(e, "kind", type(e).__name__),
                "message": e.user_message,
                "status_code": e.status_code,
            }
            return {"agent_data": agent_data, "done": True}

        agent_data["itinerary"] = itinerary
        return {
            "agent_data": agent_data,
            "messages": [AIMessage(content=f"[itinerary] Generated {len(itinerary.days)} days.")],
        }

    async def _persist_itinerary(self, state: AgentState) -> dict[str, Any]:
        agent_data = dict(state.get("agent_data", {}) or {})
        itinerary: Itinerary = agent_data["itinerary"]
        preferences: PartialPreferences = agent_data["preferences"]
        trip_id = state.get("trip_id")

        fields = {
            "destination": preferences.destination or "Unknown",
            "start_date": itinerary.first_date,
            "end_date": itinerary.last_date,
            "budget": preferences.budget,
            "preferences": preferences,
            "itinerary": itinerary,
        }
        user_id = state.get("user_id") or "anonymous"
        trip = None
        if trip_id:
            existing = await self.storage.get_trip(trip_id)
            # Only the owner's trip is overwritten; anyone else gets a fresh trip
            if existing is not None and existing.user_id == user_id:
                trip = await self.storage.update_trip(trip_id, fields)
            elif existing is not None:
                print(f"[{AGENT_LABEL}] Trip {trip_id} belongs to another user; saving a new trip")
        if trip is None:
            trip = await self.storage.create_trip(
                Trip(
                    user_id=user_id,
                    title=f"Trip to {fields['destination']}",
                    **fields,
                )
            )
        print(f"[{AGENT_LABEL}] Saved itinerary to trip {trip.id}")
        agent_data["trip_id"] = trip.id
        return {"agent_data": agent_data, "trip_id": trip.id, "done": True}

    # ---- Graph ----
    def _build_graph(self):
        g = StateGraph(AgentState)
        g.add_node("extract_preferences", self._extract_preferences)
        g.add_node("synthesize_itinerary", self._synthesize_itinerary)
        g.add_node("persist_itinerary", self._persist_itinerary)

        g.set_entry_point("extract_preferences")
        g.add_conditional_edges(
            "extract_preferences",
            _route_after_extraction,
            {"synthesize": "synthesize_itinerary", "end": END},
        )
        g.add_conditional_edges(
            "synthesize_itinerary",
            _route_after_synthesis,
            {"persist": "persist_itinerary", "end": END},
        )
        g.add_edge("persist_itinerary", END)
        return g.compile()

    # ---- Public API ----
    async def run(self, initial_state: AgentState) -> AgentState:
        base: AgentState = {
            "messages": [],
            "agent_data": {},
            "auto_generate": True,
            "done": False,
        }
        base.update(initial_state or {})

        t0 = time.time()
        print(f"\n{'=' * 60}")
        print("Starting planning workflow")
        print(f"Session ID: {base.get('session_id', 'N/A')}")
        print(f"{'=' * 60}\n")

        result = await self.app.ainvoke(base)

        agent_data = result.get("agent_data", {}) or {}
        print(f"\n{'=' * 60}")
        print(f"Planning workflow completed in {(time.time() - t0) * 1000:.2f}ms")
        print(f"Ready: {agent_data.get('ready')} | Trip: {agent_data.get('trip_id', 'N/A')}")
        if agent_data.get("error"):
            print(f"Error: {agent_data['error']['message']}")
        print(f"{'=' * 60}\n")
        return result


__all__ = ["PlanningWorkflow"]
