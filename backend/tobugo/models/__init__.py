"""
Models package for API payloads and stored documents
"""

from tobugo.models.chat import ChatSession, ConversationTurn
from tobugo.models.itinerary import Activity, Day, Itinerary
from tobugo.models.preference import PartialPreferences, TravelPreferences
from tobugo.models.review import Review, SavedTrip
from tobugo.models.trip import Trip

__all__ = [
    "Activity",
    "ChatSession",
    "ConversationTurn",
    "Day",
    "Itinerary",
    "PartialPreferences",
    "Review",
    "SavedTrip",
    "Trip",
    "TravelPreferences",
]
