"""
Generative model collaborator.

Wraps a LangChain chat model behind one call:
    invoke(system_instruction, user_content, response_format="json") -> LLMResponse

Instances are built once at startup and shared; nothing here retries, that is
RetryPolicy's job.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.prompts import ChatPromptTemplate
from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_openai import ChatOpenAI

from tobugo.core.config import (
    GOOGLE_AI_API_KEY,
    LLM_PROVIDER,
    LLM_TEMPERATURE,
    OPENAI_API_KEY,
)

# Variables, not literals: the instructions contain JSON braces
PROMPT = ChatPromptTemplate.from_messages(
    [
        ("system", "{system_instruction}"),
        ("user", "{user_content}"),
    ]
)


@dataclass(frozen=True)
class LLMResponse:
    text: str


class LLMUnavailableError(RuntimeError):
    """No API key or client for the configured provider."""


def build_chat_model(
    model_name: str,
    response_format: str = "json",
    provider: str | None = None,
) -> BaseChatModel:
    """
    Create the provider chat model.

    LangChain's own retries are disabled (max_retries=0) so the backoff policy
    sees every failure.
    """
    provider = (provider or LLM_PROVIDER).lower()
    if provider == "openai":
        if not OPENAI_API_KEY:
            raise LLMUnavailableError("No API key found in OPENAI_API_KEY")
        kwargs: dict[str, Any] = {}
        if response_format == "json":
            kwargs["model_kwargs"] = {"response_format": {"type": "json_object"}}
        return ChatOpenAI(
            model=model_name,
            temperature=LLM_TEMPERATURE,
            api_key=OPENAI_API_KEY,
            max_retries=0,
            **kwargs,
        )

    if not GOOGLE_AI_API_KEY:
        raise LLMUnavailableError("No API key found in GOOGLE_AI_API_KEY or GEMINI_API_KEY")
    kwargs = {}
    if response_format == "json":
        kwargs["response_mime_type"] = "application/json"
    return ChatGoogleGenerativeAI(
        model=model_name,
        temperature=LLM_TEMPERATURE,
        google_api_key=GOOGLE_AI_API_KEY,
        max_retries=0,
        **kwargs,
    )


def message_text(message: Any) -> str:
    """Flatten a chat model reply (str content or a list of parts) to text."""
    content = getattr(message, "content", message)
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type", "text") == "text":
                parts.append(str(part.get("text", "")))
        return "".join(parts)
    return "" if content is None else str(content)


class GenerativeModel:
    """A configured chat model plus the prompt shape every agent uses."""

    def __init__(self, llm: BaseChatModel, model_name: str = "") -> None:
        self.llm = llm
        self.model_name = model_name or getattr(llm, "model", "") or ""
        self._chain = PROMPT | llm

    @classmethod
    def from_config(cls, model_name: str, response_format: str = "json") -> "GenerativeModel":
        return cls(build_chat_model(model_name, response_format=response_format), model_name)

    async def invoke(
        self,
        system_instruction: str,
        user_content: str,
        response_format: str = "json",
    ) -> LLMResponse:
        # response_format is fixed when the client is built; kept for the call contract
        reply = await self._chain.ainvoke(
            {"system_instruction": system_instruction, "user_content": user_content}
        )
        return LLMResponse(text=message_text(reply))


class UnavailableModel:
    """Stand-in when the provider client could not be built; every call fails."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        self.model_name = "unavailable"

    async def invoke(
        self,
        system_instruction: str,
        user_content: str,
        response_format: str = "json",
    ) -> LLMResponse:
        raise LLMUnavailableError(f"LLM unavailable: {self.reason}")


def load_model(model_name: str, response_format: str = "json") -> GenerativeModel | UnavailableModel:
    try:
        return GenerativeModel.from_config(model_name, response_format=response_format)
    except LLMUnavailableError as e:
        print(f"[llm] LLM unavailable for {model_name}: {e}")
        return UnavailableModel(str(e))


__all__ = [
    "LLMResponse",
    "LLMUnavailableError",
    "GenerativeModel",
    "UnavailableModel",
    "load_model",
    "build_chat_model",
    "message_text",
]
