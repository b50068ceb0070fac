"""TobuGo: chat-driven travel itinerary planning service."""

__version__ = "1.0.0"
