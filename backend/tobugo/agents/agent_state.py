# agent_state.py - Shared state for the planning workflow graph
from typing import Annotated, Any, TypedDict

from langgraph.graph.message import add_messages


class AgentState(TypedDict, total=False):
    """
    State schema for the chat -> itinerary LangGraph workflow.
    Each node returns the keys it changed.

    Inputs:
    - session_id / user_id / trip_id: who and what this turn belongs to
    - history: ordered ConversationTurn list, latest user turn included
    - preferences: PartialPreferences accumulated by earlier turns
    - auto_generate: whether a ready conversation should trigger synthesis

    Generic storage:
    - agent_data: every node's output
      - agent_data["reply"], agent_data["preferences"], agent_data["ready"]  # PreferenceAgent
      - agent_data["itinerary"]                                             # ItineraryAgent
      - agent_data["trip_id"]                                               # persistence
      - agent_data["error"] = {"kind", "message", "status_code"}            # failed synthesis

    Note:
    - agent_data has no reducer; nodes must copy it before updating.
    """

    # ========== Core Communication Fields ==========
    messages: Annotated[list, add_messages]

    # ========== Identifiers ==========
    session_id: str
    user_id: str | None
    trip_id: str | None

    # ========== Inputs ==========
    history: list[Any]
    preferences: Any
    auto_generate: bool

    # ========== Workflow Control ==========
    done: bool

    # ========== Generic Storage ==========
    agent_data: dict[str, Any]
