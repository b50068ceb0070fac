import asyncio
import json
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from tobugo.agents.retry import RetryPolicy
from tobugo.db.database import InMemoryStorage
from tobugo.models.chat import ConversationTurn
from tobugo.models.preference import PartialPreferences
from tobugo.models.trip import Trip
from tobugo.services import assemble_services


def print_section(title: str) -> None:
    print("\n" + "=" * 80)
    print(f"  {title}")
    print("=" * 80)


READY_REPLY = json.dumps(
    {
        "response": "Great, generating your Porto itinerary now!",
        "extractedPreferences": {"destination": "Porto", "startDate": "2025-09-01", "endDate": "2025-09-02"},
        "shouldGenerateItinerary": True,
    }
)
NOT_READY_REPLY = json.dumps(
    {
        "response": "Where would you like to go?",
        "extractedPreferences": {"budget": "900"},
        "shouldGenerateItinerary": False,
    }
)
ITINERARY_REPLY = json.dumps(
    {
        "days": [
            {"date": "2025-09-01", "activities": [{"title": "Port cellar tour", "category": "activity", "cost": 25}]},
            {"date": "2025-09-02", "activities": [{"title": "Francesinha", "category": "meal", "cost": 15}]},
        ]
    }
)


@pytest.fixture
def storage():
    return InMemoryStorage()


def _services(storage, chat_model, itinerary_model, sleeps):
    return assemble_services(storage, chat_model, itinerary_model, RetryPolicy(sleep=sleeps))


def _state(message: str, **extra):
    state = {
        "session_id": "s1",
        "user_id": "user_alice",
        "history": [ConversationTurn(role="user", content=message)],
        "preferences": PartialPreferences(),
    }
    state.update(extra)
    return state


def test_ready_conversation_generates_and_saves_a_trip(storage, fake_model, sleeps):
    print_section("PLANNING WORKFLOW: READY")
    chat_model = fake_model(READY_REPLY)
    itinerary_model = fake_model(ITINERARY_REPLY)
    services = _services(storage, chat_model, itinerary_model, sleeps)

    result = asyncio.run(services.workflow.run(_state("Porto, Sept 1-2")))
    agent_data = result["agent_data"]

    assert agent_data["ready"] is True
    assert agent_data["reply"] == "Great, generating your Porto itinerary now!"
    assert agent_data["itinerary"].total_cost == 40.0
    assert "error" not in agent_data

    trip_id = agent_data["trip_id"]
    trip = asyncio.run(storage.get_trip(trip_id))
    assert trip.user_id == "user_alice"
    assert trip.title == "Trip to Porto"
    assert (trip.start_date, trip.end_date) == ("2025-09-01", "2025-09-02")
    assert trip.itinerary == agent_data["itinerary"]
    assert len(itinerary_model.calls) == 1


def test_incomplete_conversation_stops_after_reply(storage, fake_model, sleeps):
    itinerary_model = fake_model(ITINERARY_REPLY)
    services = _services(storage, fake_model(NOT_READY_REPLY), itinerary_model, sleeps)

    result = asyncio.run(services.workflow.run(_state("Somewhere cheap")))
    agent_data = result["agent_data"]

    assert agent_data["ready"] is False
    assert agent_data["preferences"].budget == 900.0
    assert "itinerary" not in agent_data
    assert itinerary_model.calls == []
    assert storage.trips == {}


def test_auto_generate_off_skips_synthesis(storage, fake_model, sleeps):
    itinerary_model = fake_model(ITINERARY_REPLY)
    services = _services(storage, fake_model(READY_REPLY), itinerary_model, sleeps)

    result = asyncio.run(services.workflow.run(_state("Porto", auto_generate=False)))

    assert result["agent_data"]["ready"] is True
    assert itinerary_model.calls == []
    assert storage.trips == {}


def test_existing_trip_is_updated_in_place(storage, fake_model, sleeps):
    existing = Trip(user_id="user_alice", title="Summer", destination="Porto")
    asyncio.run(storage.create_trip(existing))
    services = _services(storage, fake_model(READY_REPLY), fake_model(ITINERARY_REPLY), sleeps)

    result = asyncio.run(services.workflow.run(_state("Porto", trip_id=existing.id)))

    assert result["agent_data"]["trip_id"] == existing.id
    assert len(storage.trips) == 1
    trip = asyncio.run(storage.get_trip(existing.id))
    assert trip.title == "Summer"
    assert trip.itinerary is not None
    assert trip.preferences.destination == "Porto"


def test_generation_failure_keeps_the_reply(storage, fake_model, sleeps):
    services = _services(
        storage, fake_model(READY_REPLY), fake_model(Exception("503 Service Unavailable")), sleeps
    )

    result = asyncio.run(services.workflow.run(_state("Porto")))
    agent_data = result["agent_data"]

    assert agent_data["reply"] == "Great, generating your Porto itinerary now!"
    assert agent_data["error"]["status_code"] == 503
    assert agent_data["error"]["kind"] == "overloaded"
    assert "temporarily overloaded" in agent_data["error"]["message"]
    assert sleeps.delays == [2.0, 4.0]
    assert storage.trips == {}


def test_another_users_trip_is_never_overwritten(storage, fake_model, sleeps):
    print_section("PLANNING WORKFLOW: FOREIGN TRIP")
    bobs = Trip(user_id="user_bob", title="Tokyo spring", destination="Tokyo")
    asyncio.run(storage.create_trip(bobs))
    services = _services(storage, fake_model(READY_REPLY), fake_model(ITINERARY_REPLY), sleeps)

    result = asyncio.run(services.workflow.run(_state("Porto", trip_id=bobs.id)))

    new_id = result["agent_data"]["trip_id"]
    assert new_id != bobs.id
    assert asyncio.run(storage.get_trip(new_id)).user_id == "user_alice"
    untouched = asyncio.run(storage.get_trip(bobs.id))
    assert (untouched.destination, untouched.itinerary) == ("Tokyo", None)


def test_missing_trip_id_creates_a_new_trip(storage, fake_model, sleeps):
    services = _services(storage, fake_model(READY_REPLY), fake_model(ITINERARY_REPLY), sleeps)

    result = asyncio.run(services.workflow.run(_state("Porto", trip_id="gone")))

    assert result["agent_data"]["trip_id"] != "gone"
    assert len(storage.trips) == 1
