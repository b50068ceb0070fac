"""
Test suite for the chat preference extractor
Covers merging across turns, readiness gating and the canned fallback reply
"""

import asyncio
import json
import sys
from pathlib import Path

# Add parent directory to path to import tobugo modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from tobugo.agents.preference_agent import FALLBACK_REPLIES, PreferenceAgent, detect_language, render_history
from tobugo.models.chat import ConversationTurn
from tobugo.models.preference import PartialPreferences


def print_section(title: str):
    """Print a formatted section header"""
    print("\n" + "=" * 80)
    print(f"  {title}")
    print("=" * 80)


def _history(*messages: str) -> list[ConversationTurn]:
    roles = ["user", "assistant"]
    return [ConversationTurn(role=roles[i % 2], content=m) for i, m in enumerate(messages)]


def _reply(text: str, preferences: dict | None = None, ready: bool = False) -> str:
    return json.dumps(
        {"response": text, "extractedPreferences": preferences or {}, "shouldGenerateItinerary": ready}
    )


def test_preference_agent(fake_model):
    """Two turns: destination first, then dates and budget complete the picture"""

    print_section("TURN 1")
    model = fake_model(
        _reply("Lisbon sounds great! When are you going?", {"destination": "Lisbon", "travelers": "2"}),
        _reply(
            "Perfect, I have everything I need.",
            {"startDate": "2025-05-10", "endDate": "2025-05-14", "budget": "$2,000 USD"},
            ready=True,
        ),
    )
    agent = PreferenceAgent(model)

    history = _history("I want to go to Lisbon with my partner")
    first = asyncio.run(agent.extract_turn(history))
    print(json.dumps(first.partial_preferences.to_wire(), indent=2))

    assert first.reply == "Lisbon sounds great! When are you going?"
    assert first.partial_preferences.destination == "Lisbon"
    assert first.partial_preferences.travelers == 2
    assert first.ready_to_generate is False
    assert first.fallback is False

    print_section("TURN 2")
    history = _history(
        "I want to go to Lisbon with my partner",
        first.reply,
        "May 10 to 14, around $2000",
    )
    second = asyncio.run(agent.extract_turn(history, first.partial_preferences))
    print(json.dumps(second.partial_preferences.to_wire(), indent=2))

    merged = second.partial_preferences
    assert merged.destination == "Lisbon"
    assert merged.travelers == 2
    assert merged.start_date == "2025-05-10"
    assert merged.end_date == "2025-05-14"
    assert merged.budget == 2000.0
    assert second.ready_to_generate is True

    # Earlier preferences are sent back to the model as context
    assert '"destination": "Lisbon"' in model.calls[1]["system_instruction"]
    assert "User: May 10 to 14, around $2000" in model.calls[1]["user_content"]


def test_ready_flag_without_destination_is_ignored(fake_model):
    model = fake_model(_reply("Great, let's plan!", {"budget": 800}, ready=True))
    result = asyncio.run(PreferenceAgent(model).extract_turn(_history("Cheap trip please")))
    assert result.partial_preferences.budget == 800.0
    assert result.ready_to_generate is False


def test_ready_flag_must_be_boolean_true(fake_model):
    model = fake_model(_reply("Okay!", {"destination": "Rome"}, ready="true"))
    result = asyncio.run(PreferenceAgent(model).extract_turn(_history("Rome")))
    assert result.ready_to_generate is False


def test_destination_from_earlier_turn_satisfies_readiness(fake_model):
    model = fake_model(_reply("Generating now.", {"duration": "5 days"}, ready=True))
    prior = PartialPreferences(destination="Tokyo")
    result = asyncio.run(PreferenceAgent(model).extract_turn(_history("Five days"), prior))
    assert result.partial_preferences.duration == 5
    assert result.partial_preferences.destination == "Tokyo"
    assert result.ready_to_generate is True


def test_fenced_reply_and_loose_shapes(fake_model):
    reply = "```json\n" + _reply(
        "Noted!",
        {"activities": "hiking", "dietaryRestrictions": ["vegan", ""]},
    ) + "\n```"
    result = asyncio.run(PreferenceAgent(fake_model(reply)).extract_turn(_history("I like hiking, vegan")))
    assert result.partial_preferences.activities == ["hiking"]
    assert result.partial_preferences.dietary_restrictions == ["vegan"]


def test_provider_failure_falls_back_in_english(fake_model):
    prior = PartialPreferences(destination="Paris", budget=1200)
    model = fake_model(Exception("503 Service Unavailable"))
    result = asyncio.run(PreferenceAgent(model).extract_turn(_history("I want to travel next week"), prior))

    assert result.fallback is True
    assert result.reply == FALLBACK_REPLIES["en"]
    assert result.partial_preferences == prior
    assert result.ready_to_generate is False
    # Not retried
    assert len(model.calls) == 1


def test_unparseable_reply_falls_back_in_spanish(fake_model):
    model = fake_model("Claro, ¿a dónde quieres ir?")
    result = asyncio.run(PreferenceAgent(model).extract_turn(_history("Hola, quiero viajar a México")))
    assert result.fallback is True
    assert result.reply == FALLBACK_REPLIES["es"]


def test_reply_without_response_text_falls_back(fake_model):
    model = fake_model(json.dumps({"extractedPreferences": {"destination": "Rome"}, "shouldGenerateItinerary": True}))
    result = asyncio.run(PreferenceAgent(model).extract_turn(_history("Rome")))
    assert result.fallback is True
    assert result.partial_preferences.destination is None


def test_detect_language():
    assert detect_language(_history("Quiero un viaje de una semana con mi familia")) == "es"
    assert detect_language(_history("I want a trip for my family")) == "en"
    assert detect_language(_history("¿Cuánto cuesta?")) == "es"
    assert detect_language([]) == "en"


def test_render_history():
    text = render_history(_history("Hi", "Hello! Where to?", "Rome"))
    assert text == "User: Hi\nAssistant: Hello! Where to?\nUser: Rome"
