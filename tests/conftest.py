from unittest.mock import AsyncMock, Mock

import pytest

from app.services.ai_service import AiResponder
from app.services.backend_api import AuthCheckResult, ToyutoyuApiClient
from app.services.conversation_service import ConversationHandler
from app.services.line_service import LineMessagingClient
from app.services.llm import LLMProvider, LLMResponse
from app.services.session_store import SessionStore


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingLineClient(LineMessagingClient):
    """LINE client that records API calls instead of sending them."""

    def __init__(self, token: str = "test-token"):
        super().__init__(token)
        self.calls: list[tuple[str, dict]] = []

    async def _post(self, action: str, payload: dict) -> None:
        self.calls.append((action, payload))

    def texts(self) -> list[str]:
        return [
            message["text"]
            for _action, payload in self.calls
            for message in payload["messages"]
            if message["type"] == "text"
        ]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return SessionStore(login_flow_ttl_seconds=600, logged_in_ttl_seconds=3600, clock=clock)


@pytest.fixture
def line():
    return RecordingLineClient()


@pytest.fixture
def backend():
    client = Mock(spec=ToyutoyuApiClient)
    client.auth_check = AsyncMock(return_value=AuthCheckResult(success=True, user_id="42"))
    client.get_user_points = AsyncMock(return_value=1234)
    return client


@pytest.fixture
def llm_provider():
    provider = Mock(spec=LLMProvider)
    provider.generate.return_value = LLMResponse(content="AIの回答です", model="gpt-4o-mini")
    return provider


@pytest.fixture
def ai(llm_provider):
    return AiResponder(provider=llm_provider, model="gpt-4o-mini")


@pytest.fixture
def handler(store, line, backend, ai):
    return ConversationHandler(store=store, line=line, backend=backend, ai=ai)
