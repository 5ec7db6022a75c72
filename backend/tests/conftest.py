"""
NotesWise Backend: Test Configuration (conftest.py)
=====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Provider backends are simulated with httpx.MockTransport, so adapters
       run their real request building and response parsing with no network.

Fixture Hierarchy:
    ├── make_config:       Build a ProviderConfig for a named provider
    ├── mock_backend:      Scriptable httpx.MockTransport that records requests
    ├── transport_options: TransportOptions bound to mock_backend, no retry delay
    ├── stub_ai_service:   AIService double for route tests
    └── test_client:       HTTPX AsyncClient over the FastAPI app
"""

import json
import os
from typing import Any, Callable, Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock

# Set test configuration BEFORE any app imports
os.environ["ELEVENLABS_API_KEY"] = "test-elevenlabs-key"
os.environ["OPENAI_API_KEY"] = "test-openai-key"
os.environ["AI_DEFAULT_PROVIDER"] = "openai"
os.environ["TRUSTED_USER_HEADER"] = "X-User-ID"
os.environ["LOG_LEVEL"] = "WARNING"

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.config import ProviderConfig
from app.services.ai_service import AIService
from app.services.transport import TransportOptions


# ══════════════════════════════════════════════════════════════════════════
# Simulated Provider Backend
# ══════════════════════════════════════════════════════════════════════════

class MockBackend:
    """
    Scriptable stand-in for a remote provider.

    Queue responses with `reply()` / `fail_with()`; each request pops the next
    one (the last one repeats). Every request is kept in `requests`.
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self._responses: List[Callable[[httpx.Request], httpx.Response]] = []

    def reply(
        self,
        status_code: int = 200,
        json_body: Any = None,
        content: Optional[bytes] = None,
    ) -> "MockBackend":
        def respond(request: httpx.Request) -> httpx.Response:
            if content is not None:
                return httpx.Response(status_code, content=content)
            return httpx.Response(status_code, json=json_body)

        self._responses.append(respond)
        return self

    def fail_with(self, exc_type: type, message: str = "simulated failure") -> "MockBackend":
        def respond(request: httpx.Request) -> httpx.Response:
            raise exc_type(message, request=request)

        self._responses.append(respond)
        return self

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self._responses:
            return httpx.Response(500, text="no response scripted")
        responder = self._responses.pop(0) if len(self._responses) > 1 else self._responses[0]
        return responder(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> Dict[str, Any]:
        return json.loads(self.last_request.content)


# ── Canned provider responses ─────────────────────────────────────────────

def openai_body(text: Any) -> Dict[str, Any]:
    return {"choices": [{"message": {"role": "assistant", "content": text}}]}


def anthropic_body(text: Any) -> Dict[str, Any]:
    return {"content": [{"type": "text", "text": text}]}


def gemini_body(text: Any) -> Dict[str, Any]:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


# ══════════════════════════════════════════════════════════════════════════
# Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def make_config() -> Callable[..., ProviderConfig]:
    """Build a ProviderConfig with test defaults; override any field by keyword."""
    defaults = {
        "openai": ("https://api.openai.test/v1", "gpt-4o-mini"),
        "anthropic": ("https://api.anthropic.test/v1", "claude-3-5-haiku-latest"),
        "gemini": ("https://gemini.test", "gemini-1.5-flash"),
    }

    def _make(name: str = "openai", **overrides: Any) -> ProviderConfig:
        base_url, model = defaults.get(name, ("https://provider.test", "model-x"))
        fields = {
            "name": name,
            "api_key": f"{name}-secret",
            "base_url": base_url,
            "default_model": model,
            "enabled": True,
        }
        fields.update(overrides)
        return ProviderConfig(**fields)

    return _make


@pytest.fixture
def mock_backend() -> MockBackend:
    return MockBackend()


@pytest.fixture
def transport_options(mock_backend: MockBackend) -> TransportOptions:
    """Single attempt, zero backoff, all traffic to mock_backend."""
    return TransportOptions(
        timeout=5.0,
        retry_attempts=1,
        retry_min_wait=0,
        retry_max_wait=0,
        transport=mock_backend.transport,
    )


@pytest.fixture
def stub_ai_service() -> MagicMock:
    """
    AIService double with async methods mocked.

    Defaults describe a healthy deployment with openai and gemini enabled;
    tests override return values as needed.
    """
    service = MagicMock(spec=AIService)
    service.factory = MagicMock()
    service.factory.default_provider = "openai"
    service.list_available_providers.return_value = ["openai", "gemini"]
    service.summarize = AsyncMock(return_value="A short summary.")
    service.generate_text = AsyncMock(return_value="Generated text.")
    service.generate_flashcards = AsyncMock(return_value=[])
    service.synthesize_audio = AsyncMock(return_value="QVVESU8=")
    service.synthesize_flashcard_audio = AsyncMock()
    service.check_providers_health = AsyncMock(return_value={"openai": True, "gemini": False})
    return service


@pytest_asyncio.fixture
async def test_client(stub_ai_service: MagicMock):
    """
    HTTPX AsyncClient routed straight into the FastAPI app.

    Requests are unauthenticated unless they send the X-User-ID header.
    """
    from app.main import create_app

    app = create_app(ai_service=stub_ai_service)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
