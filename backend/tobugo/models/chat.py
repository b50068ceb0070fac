"""
Chat session models
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from tobugo.models.preference import PartialPreferences
from tobugo.models.trip import generate_id


def _now_iso() -> str:
    return datetime.utcnow().isoformat()


class ConversationTurn(BaseModel):
    """One message in a planning conversation. Never edited once appended."""

    id: str = Field(default_factory=generate_id)
    role: Literal["user", "assistant"]
    content: str
    timestamp: str = Field(default_factory=_now_iso)

    model_config = ConfigDict(frozen=True)


class ChatSession(BaseModel):
    id: str = Field(default_factory=generate_id)
    user_id: str | None = None
    trip_id: str | None = None
    messages: list[ConversationTurn] = Field(default_factory=list)
    status: Literal["active", "completed", "cancelled"] = "active"
    preferences: PartialPreferences = Field(default_factory=PartialPreferences)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
