"""
NotesWise Backend: Route Tests
================================

What:  HTTP-level tests for /api/ai/* and /health.
How:   The app is created with a stubbed AIService; requests go through
       ASGITransport. Authentication is simulated with the trusted X-User-ID
       header configured in conftest.

What we test:
    ✅ Missing user id → 401 with the standard error body
    ✅ Blank input → 400 before any AI call
    ✅ AI unavailability is a 200 with an empty value, not an error
    ✅ Provider listing and aggregate health
    ✅ NoteService is wired over the same AIService
"""

from unittest.mock import MagicMock

import pytest

from app.exceptions import NotesWiseError, ProviderNotFoundError
from app.main import create_app
from app.routes.ai import get_note_service
from app.schemas.ai import FlashcardAudioResult, FlashcardItem
from app.services.note_service import NoteService

AUTH = {"X-User-ID": "user-1"}


class TestAuthentication:

    @pytest.mark.asyncio
    async def test_missing_user_is_401(self, test_client):
        response = await test_client.post("/api/ai/generate-summary", json={"content": "x"})

        assert response.status_code == 401
        body = response.json()
        assert body["error"] == "unauthorized"
        assert body["request_id"] == response.headers["X-Request-ID"]

    @pytest.mark.asyncio
    async def test_client_request_id_echoed(self, test_client):
        response = await test_client.get(
            "/api/ai/providers", headers={**AUTH, "X-Request-ID": "abc123"}
        )

        assert response.headers["X-Request-ID"] == "abc123"


class TestGeneration:

    @pytest.mark.asyncio
    async def test_generate_summary(self, test_client, stub_ai_service):
        response = await test_client.post(
            "/api/ai/generate-summary",
            json={"content": "Mitochondria produce ATP.", "provider": "gemini"},
            headers=AUTH,
        )

        assert response.status_code == 200
        assert response.json() == {"summary": "A short summary."}
        stub_ai_service.summarize.assert_awaited_once_with("Mitochondria produce ATP.", "gemini")

    @pytest.mark.asyncio
    async def test_blank_content_is_400(self, test_client, stub_ai_service):
        response = await test_client.post(
            "/api/ai/generate-summary", json={"content": "   "}, headers=AUTH
        )

        assert response.status_code == 400
        assert response.json()["details"] == {"field": "content"}
        stub_ai_service.summarize.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unavailable_provider_is_empty_not_error(self, test_client, stub_ai_service):
        stub_ai_service.summarize.return_value = ""

        response = await test_client.post(
            "/api/ai/generate-summary", json={"content": "text"}, headers=AUTH
        )

        assert response.status_code == 200
        assert response.json() == {"summary": ""}

    @pytest.mark.asyncio
    async def test_generate_text(self, test_client, stub_ai_service):
        response = await test_client.post(
            "/api/ai/generate-text", json={"prompt": "Say hi"}, headers=AUTH
        )

        assert response.json() == {"text": "Generated text."}

    @pytest.mark.asyncio
    async def test_generate_flashcards(self, test_client, stub_ai_service):
        stub_ai_service.generate_flashcards.return_value = [
            FlashcardItem(question="What do mitochondria produce?", answer="ATP")
        ]

        response = await test_client.post(
            "/api/ai/generate-flashcards", json={"content": "Mitochondria..."}, headers=AUTH
        )

        assert response.status_code == 200
        assert response.json() == {
            "flashcards": [{"question": "What do mitochondria produce?", "answer": "ATP"}]
        }

    @pytest.mark.asyncio
    async def test_generate_audio(self, test_client, stub_ai_service):
        response = await test_client.post(
            "/api/ai/generate-audio", json={"text": "Hello"}, headers=AUTH
        )

        assert response.json() == {"audio_content": "QVVESU8="}
        stub_ai_service.synthesize_audio.assert_awaited_once_with("Hello", "burt")

    @pytest.mark.asyncio
    async def test_flashcard_audio(self, test_client, stub_ai_service):
        stub_ai_service.synthesize_flashcard_audio.return_value = FlashcardAudioResult(
            question_audio="cQ==", answer_audio=None
        )

        response = await test_client.post(
            "/api/ai/flashcard-audio",
            json={"question": "Q", "answer": "A", "mode": "question"},
            headers=AUTH,
        )

        assert response.status_code == 200
        assert response.json() == {"question_audio": "cQ==", "answer_audio": None}

    @pytest.mark.asyncio
    async def test_flashcard_audio_bad_mode_is_422(self, test_client):
        response = await test_client.post(
            "/api/ai/flashcard-audio",
            json={"question": "Q", "answer": "A", "mode": "sideways"},
            headers=AUTH,
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_summary_probe(self, test_client, stub_ai_service):
        response = await test_client.post(
            "/api/ai/test-summary", json={"content": "text", "provider": "gemini"}, headers=AUTH
        )

        assert response.json() == {
            "summary": "A short summary.",
            "provider": "gemini",
            "is_success": True,
        }

    @pytest.mark.asyncio
    async def test_provider_error_from_service_maps_to_404(self, test_client, stub_ai_service):
        stub_ai_service.generate_text.side_effect = ProviderNotFoundError("mistral")

        response = await test_client.post(
            "/api/ai/generate-text", json={"prompt": "x", "provider": "mistral"}, headers=AUTH
        )

        assert response.status_code == 404
        assert response.json()["error"] == "provider_not_found"


class TestProviders:

    @pytest.mark.asyncio
    async def test_list_providers(self, test_client):
        response = await test_client.get("/api/ai/providers", headers=AUTH)

        assert response.json() == {"providers": ["openai", "gemini"]}

    @pytest.mark.asyncio
    async def test_providers_health(self, test_client):
        response = await test_client.get("/api/ai/health", headers=AUTH)

        assert response.json() == {
            "status": "healthy",
            "providers": {"openai": True, "gemini": False},
        }

    @pytest.mark.asyncio
    async def test_all_unhealthy(self, test_client, stub_ai_service):
        stub_ai_service.check_providers_health.return_value = {"openai": False}

        response = await test_client.get("/api/ai/health", headers=AUTH)

        assert response.json()["status"] == "unhealthy"


class TestLiveness:

    @pytest.mark.asyncio
    async def test_health_needs_no_auth_and_makes_no_provider_calls(
        self, test_client, stub_ai_service
    ):
        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["default_provider"] == "openai"
        assert body["providers"] == ["openai", "gemini"]
        stub_ai_service.check_providers_health.assert_not_awaited()


class TestServiceWiring:

    def test_note_service_shares_the_ai_service(self, stub_ai_service):
        app = create_app(ai_service=stub_ai_service)
        request = MagicMock(app=app)

        note_service = get_note_service(request)

        assert isinstance(note_service, NoteService)
        assert note_service is app.state.note_service
        assert note_service.ai_service is stub_ai_service


class TestErrorBodies:

    @pytest.mark.asyncio
    async def test_server_error_withholds_context(self, test_client, stub_ai_service):
        stub_ai_service.generate_text.side_effect = NotesWiseError(
            "Store unavailable", context={"dsn": "internal-host"}
        )

        response = await test_client.post(
            "/api/ai/generate-text", json={"prompt": "hi"}, headers=AUTH
        )

        assert response.status_code == 500
        assert "details" not in response.json()
        assert "internal-host" not in response.text
