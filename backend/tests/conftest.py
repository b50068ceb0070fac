import sys
from pathlib import Path

import pytest

# Allow importing from backend/tobugo
sys.path.insert(0, str(Path(__file__).parent.parent))

from tobugo.agents.llm import LLMResponse


class FakeModel:
    """
    Scripted stand-in for GenerativeModel.
    Each call consumes the next outcome; the last one repeats. Exceptions are raised.
    """

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls: list[dict] = []

    async def invoke(self, system_instruction, user_content, response_format="json"):
        self.calls.append(
            {
                "system_instruction": system_instruction,
                "user_content": user_content,
                "response_format": response_format,
            }
        )
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, BaseException):
            raise outcome
        return LLMResponse(text=outcome)


class SleepRecorder:
    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def fake_model():
    return FakeModel


@pytest.fixture
def sleeps():
    return SleepRecorder()

