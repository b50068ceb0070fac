import asyncio
import sys
from pathlib import Path
from unittest.mock import patch

import pytest
from langchain_core.language_models.fake_chat_models import FakeListChatModel
from langchain_core.messages import AIMessage

sys.path.insert(0, str(Path(__file__).parent.parent))

from tobugo.agents.llm import (
    GenerativeModel,
    LLMUnavailableError,
    UnavailableModel,
    build_chat_model,
    load_model,
    message_text,
)
from tobugo.agents.retry import RetryPolicy, classify_error
from tobugo.core.errors import PermanentProviderError


def test_generative_model_returns_reply_text():
    model = GenerativeModel(FakeListChatModel(responses=['{"days": []}']), "fake")
    response = asyncio.run(model.invoke("You are a planner {not a variable}", "Plan {this}"))
    assert response.text == '{"days": []}'


def test_message_text_flattens_content_parts():
    assert message_text(AIMessage(content="plain")) == "plain"
    assert message_text(AIMessage(content=[{"type": "text", "text": '{"a"'}, ": 1}"])) == '{"a": 1}'
    assert message_text(AIMessage(content=[{"type": "image_url", "image_url": "x"}])) == ""
    assert message_text("raw") == "raw"


def test_missing_google_key_is_reported():
    with patch("tobugo.agents.llm.GOOGLE_AI_API_KEY", None):
        with pytest.raises(LLMUnavailableError):
            build_chat_model("gemini-2.5-pro", provider="google")


def test_missing_openai_key_is_reported():
    with patch("tobugo.agents.llm.OPENAI_API_KEY", None):
        with pytest.raises(LLMUnavailableError):
            build_chat_model("gpt-4o-mini", provider="openai")


def test_load_model_without_key_degrades_to_unavailable_model():
    with patch("tobugo.agents.llm.GOOGLE_AI_API_KEY", None), patch("tobugo.agents.llm.LLM_PROVIDER", "google"):
        model = load_model("gemini-2.5-flash")
    assert isinstance(model, UnavailableModel)
    with pytest.raises(LLMUnavailableError):
        asyncio.run(model.invoke("system", "user"))


def test_unavailable_model_is_not_retried(sleeps):
    model = UnavailableModel("No API key found in GOOGLE_AI_API_KEY or GEMINI_API_KEY")
    assert classify_error(LLMUnavailableError("LLM unavailable")) is None

    policy = RetryPolicy(sleep=sleeps)
    with pytest.raises(PermanentProviderError):
        asyncio.run(policy.run(lambda: model.invoke("system", "user")))
    assert sleeps.delays == []
