import copy
import pytest
from unittest.mock import AsyncMock
from fastapi.testclient import TestClient
from server.main import app
from parallel.llm.client_factory import reset_clients
from parallel.llm.providers.base import ToolCallResponse
from parallel.llm.prompts import GENERATE_SELVES_TOOL_NAME
from parallel.models.persona import Dimension


def _flat_self(dimension: str, confidence: float) -> dict:
    return {
        "archetype_name": f"The {dimension.title()}",
        "dimension": dimension,
        "personality_traits": ["Curious", "Steady", "Honest"],
        "reasoning_analysis": f"The {dimension} reading of the dilemma.",
        "suggested_action": "Take one concrete step this week.",
        "emotional_prediction": "Relief, then resolve.",
        "confidence_score": confidence,
        "timeline_week": "A first step is taken.",
        "timeline_month": "The step becomes a habit.",
        "timeline_year": "The habit becomes a life.",
        "why_this_self": "It matches how you feel right now.",
        "hidden_costs": "Some comfort is lost.",
        "internal_resistance": "Fear of getting it wrong.",
        "future_roadmap": "Weeks.\n\nMonths.\n\nSix months.\n\nOne year.",
    }


TOOL_ARGUMENTS = {
    "identity_mirror": "You are standing at a threshold, not a wall.",
    "selves": [
        _flat_self(d.value, c)
        for d, c in zip(Dimension, (0.87, 0.72, 0.91, 0.78, 0.84))
    ],
    "hidden_self": {
        **{k: v for k, v in _flat_self("hidden", 0.8).items() if k != "dimension"},
        "archetype_name": "The Alchemist",
        "myth_deity": "Hermes Trismegistus",
        "myth_domain": "Transmutation",
        "myth_symbol": "⚗️",
    },
}


@pytest.fixture
def tool_arguments():
    """Raw tool-call arguments as a well-behaved model would send them."""
    return copy.deepcopy(TOOL_ARGUMENTS)


@pytest.fixture(scope="session")
def test_client():
    # Use TestClient context manager to trigger FastAPI lifespan events
    with TestClient(app) as client:
        yield client


class ManualScheduler:
    """Collects timers so tests can fire them without sleeping."""

    class Handle:
        def __init__(self, delay, callback):
            self.delay = delay
            self.callback = callback
            self.cancelled = False

        def cancel(self):
            self.cancelled = True

    def __init__(self):
        self.handles = []

    def call_later(self, delay, callback):
        handle = self.Handle(delay, callback)
        self.handles.append(handle)
        return handle

    def pending(self):
        return [h for h in self.handles if not h.cancelled]

    def fire_all(self):
        """Fire every pending timer once."""
        for handle in list(self.handles):
            if handle.cancelled:
                continue
            handle.cancelled = True
            handle.callback()


@pytest.fixture
def scheduler():
    return ManualScheduler()


# LLM client mock - always active to prevent real API calls
@pytest.fixture(autouse=True)
def mock_llm_clients(monkeypatch):
    """Mock the chat client used by the generation pipeline."""
    reset_clients()

    mock_chat_client = AsyncMock()
    mock_chat_client.call_tool = AsyncMock(return_value=ToolCallResponse(
        name=GENERATE_SELVES_TOOL_NAME,
        arguments=copy.deepcopy(TOOL_ARGUMENTS),
        model="mock-model"
    ))

    monkeypatch.setattr("parallel.llm.llm_selves.get_chat_client", lambda: mock_chat_client)
    yield mock_chat_client
    reset_clients()
