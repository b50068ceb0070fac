"""
Process-wide collaborators.

Built once in the FastAPI lifespan and stored on app.state.services; routers
reach them through the dependencies in tobugo.core.deps.
"""

from dataclasses import dataclass

from tobugo.agents.itinerary_agent import ItineraryAgent
from tobugo.agents.llm import load_model
from tobugo.agents.optimizer_agent import OptimizerAgent
from tobugo.agents.orchestrator_agent import PlanningWorkflow
from tobugo.agents.preference_agent import PreferenceAgent
from tobugo.agents.retry import RetryPolicy
from tobugo.core.config import CHAT_MODEL, ITINERARY_MODEL
from tobugo.db.database import Storage, create_storage


@dataclass
class Services:
    storage: Storage
    preference_agent: PreferenceAgent
    itinerary_agent: ItineraryAgent
    optimizer_agent: OptimizerAgent
    workflow: PlanningWorkflow


def assemble_services(
    storage: Storage,
    chat_model,
    itinerary_model,
    retry: RetryPolicy | None = None,
) -> Services:
    retry = retry or RetryPolicy()
    preference_agent = PreferenceAgent(chat_model)
    itinerary_agent = ItineraryAgent(itinerary_model, retry)
    optimizer_agent = OptimizerAgent(itinerary_model, retry)
    return Services(
        storage=storage,
        preference_agent=preference_agent,
        itinerary_agent=itinerary_agent,
        optimizer_agent=optimizer_agent,
        workflow=PlanningWorkflow(preference_agent, itinerary_agent, storage),
    )


def build_services() -> Services:
    """Wire everything from configuration."""
    return assemble_services(
        storage=create_storage(),
        chat_model=load_model(CHAT_MODEL),
        itinerary_model=load_model(ITINERARY_MODEL),
    )
