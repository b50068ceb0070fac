# preference_agent.py - Chat-driven travel preference extraction
from __future__ import annotations

import json
import re
import time
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from tobugo.agents.itinerary_agent import strip_code_fences
from tobugo.agents.llm import GenerativeModel
from tobugo.models.chat import ConversationTurn
from tobugo.models.preference import PartialPreferences

AGENT_LABEL = "preference"

# ========== Fallback replies ==========

FALLBACK_REPLIES: dict[str, str] = {
    "es": "Lo siento, tuve un problema técnico. ¿Podrías repetir tu mensaje?",
    "en": "Sorry, I ran into a technical problem. Could you repeat your message?",
}

_SPANISH_HINT_RE = re.compile(r"[¿¡ñáéíóú]", re.IGNORECASE)
_SPANISH_WORDS = frozenset(
    {
        "hola", "quiero", "viaje", "viajar", "días", "dias", "semana", "presupuesto",
        "personas", "gracias", "para", "por", "con", "una", "un", "el", "la", "los",
        "las", "de", "en", "y", "mi", "me", "que", "del", "hotel", "comida",
    }
)
_ENGLISH_WORDS = frozenset(
    {
        "hello", "hi", "want", "trip", "travel", "days", "week", "budget", "people",
        "thanks", "for", "with", "the", "a", "an", "of", "in", "and", "my", "me",
        "to", "i", "we", "is", "are",
    }
)


def detect_language(history: Sequence[ConversationTurn]) -> str:
    """Pick "es" or "en" from the latest user message."""
    latest = next((t.content for t in reversed(history) if t.role == "user"), "")
    if _SPANISH_HINT_RE.search(latest):
        return "es"
    words = re.findall(r"[a-záéíóúñ]+", latest.lower())
    spanish = sum(1 for w in words if w in _SPANISH_WORDS)
    english = sum(1 for w in words if w in _ENGLISH_WORDS)
    return "es" if spanish > english else "en"


# ========== Prompt ==========

SYSTEM = """You are a friendly travel planning assistant. Your goal is to gather travel preferences so an itinerary can be generated.

Current conversation context: {context}

Guidelines:
- Ask one question at a time to avoid overwhelming the user
- Be conversational and helpful
- Extract travel information from user responses
- Keep responses concise but friendly
- Always respond in the same language the user is using

Key information to gather:
1. Destination
2. Travel dates
3. Budget range
4. Number of travelers
5. Accommodation preferences
6. Activity interests
7. Travel style
8. Any restrictions

Respond with JSON containing:
{{
  "response": "your conversational response",
  "extractedPreferences": {{
    "destination": "string (city/country name)",
    "startDate": "YYYY-MM-DD format",
    "endDate": "YYYY-MM-DD format",
    "duration": "number of days",
    "budget": "number (in USD) or string like '$1500'",
    "travelers": "number of people",
    "accommodationType": "string description",
    "activities": "array of activity strings",
    "travelStyle": "string description",
    "dietaryRestrictions": "array of restriction strings"
  }},
  "shouldGenerateItinerary": boolean
}}

IMPORTANT:
- Only include extractedPreferences fields that were mentioned or can be inferred from the conversation.
- Use the YYYY-MM-DD format for startDate and endDate.
- Set shouldGenerateItinerary to true only once the destination, the dates (or enough information to infer them, such as a duration) and a budget signal are known."""


def render_history(history: Sequence[ConversationTurn]) -> str:
    return "\n".join(
        f"{'User' if turn.role == 'user' else 'Assistant'}: {turn.content}" for turn in history
    )


# ========== Data Models ==========


@dataclass
class ExtractionResult:
    reply: str
    partial_preferences: PartialPreferences = field(default_factory=PartialPreferences)
    ready_to_generate: bool = False
    fallback: bool = False


# ========== Preference Agent ==========


class PreferenceAgent:
    """
    Conversation -> partial preferences.

    Responsibilities:
    - Ask the chat model for the next reply and whatever preferences it can support
    - Merge them over what earlier turns established
    - Decide whether enough is known to generate an itinerary

    This call is not retried: a failed turn answers with a canned apology
    instead of blocking the conversation.
    """

    def __init__(self, model: GenerativeModel) -> None:
        self.model = model

    def _system_instruction(self, prior: PartialPreferences) -> str:
        context = json.dumps({"preferences": prior.to_wire()}, ensure_ascii=False)
        return SYSTEM.format(context=context)

    def _fallback(self, history: Sequence[ConversationTurn], prior: PartialPreferences) -> ExtractionResult:
        return ExtractionResult(
            reply=FALLBACK_REPLIES[detect_language(history)],
            partial_preferences=prior,
            ready_to_generate=False,
            fallback=True,
        )

    @staticmethod
    def _read_reply(text: str) -> dict[str, Any]:
        data = json.loads(strip_code_fences(text or ""))
        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object, got {type(data).__name__}")
        reply = data.get("response")
        if not isinstance(reply, str) or not reply.strip():
            raise ValueError("missing response text")
        return data

    async def extract_turn(
        self,
        history: Sequence[ConversationTurn],
        prior: PartialPreferences | None = None,
    ) -> ExtractionResult:
        prior = prior or PartialPreferences()
        t0 = time.time()
        print(f"[{AGENT_LABEL}] Processing conversation with {len(history)} turns")

        try:
            response = await self.model.invoke(
                self._system_instruction(prior),
                f"Conversation so far:\n{render_history(history)}\n\nRespond to the latest user message.",
                response_format="json",
            )
            data = self._read_reply(response.text)
            extracted_raw = data.get("extractedPreferences")
            extracted = PartialPreferences.model_validate(
                extracted_raw if isinstance(extracted_raw, dict) else {}
            )
        except Exception as e:
            print(f"[{AGENT_LABEL}] Error processing conversation: {type(e).__name__}: {e}")
            return self._fallback(history, prior)

        merged = prior.merged(extracted)
        ready = data.get("shouldGenerateItinerary") is True and bool(merged.destination)

        print(f"[{AGENT_LABEL}] Extracted preferences: {json.dumps(extracted.to_wire(), ensure_ascii=False)}")
        print(f"[{AGENT_LABEL}] Ready to generate: {ready}")
        print(f"[PERF] Preference extraction latency: {(time.time() - t0) * 1000:.2f}ms")

        return ExtractionResult(
            reply=data["response"].strip(),
            partial_preferences=merged,
            ready_to_generate=ready,
        )


__all__ = [
    "PreferenceAgent",
    "ExtractionResult",
    "FALLBACK_REPLIES",
    "detect_language",
    "render_history",
]
