"""
NotesWise Backend: AI Route Handlers
======================================

What:  HTTP endpoints over AIService under /api/ai.
Why:   The frontend needs on-demand summaries, flashcards and audio, plus a way
       to see which providers are configured and answering.
How:   Each handler validates input, calls AIService and wraps the plain value
       it returns. AI failures are NOT errors here: an unavailable provider
       yields an empty summary / empty flashcard list / empty audio with 200.

Authentication:
    Every endpoint requires `request.state.user_id`, set upstream by the
    authentication layer. A missing id is a 401.
"""

import logging

from fastapi import APIRouter, Depends, Request

from app.exceptions import UnauthorizedError, ValidationError
from app.schemas.ai import (
    FlashcardAudioResult,
    FlashcardItem,
    GenerateAudioRequest,
    GenerateAudioResponse,
    GenerateFlashcardAudioRequest,
    GenerateFlashcardsRequest,
    GenerateFlashcardsResponse,
    GenerateSummaryRequest,
    GenerateSummaryResponse,
    GenerateTextRequest,
    GenerateTextResponse,
    ProvidersHealthResponse,
    ProvidersResponse,
    SummaryProbeRequest,
    SummaryProbeResponse,
)
from app.schemas.note import ErrorResponse
from app.services.ai_service import AIService
from app.services.note_service import NoteService

logger = logging.getLogger(__name__)


# ── Dependencies ──────────────────────────────────────────────────────────

def get_ai_service(request: Request) -> AIService:
    """The AIService built during startup (see main.lifespan)."""
    return request.app.state.ai_service


def get_note_service(request: Request) -> NoteService:
    """The NoteService wired over the same AIService (see main.create_app)."""
    return request.app.state.note_service


def get_current_user_id(request: Request) -> str:
    user_id = getattr(request.state, "user_id", None)
    if not user_id:
        raise UnauthorizedError()
    return user_id


def _require_text(value: str, field: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field.capitalize()} is required", field=field)
    return value


# ── Router Configuration ──────────────────────────────────────────────────
router = APIRouter(
    prefix="/api/ai",
    tags=["AI"],
    dependencies=[Depends(get_current_user_id)],
    responses={
        400: {"description": "Invalid input", "model": ErrorResponse},
        401: {"description": "Not authenticated", "model": ErrorResponse},
    },
)


@router.get("/providers", response_model=ProvidersResponse, summary="List enabled providers")
async def list_providers(ai_service: AIService = Depends(get_ai_service)) -> ProvidersResponse:
    return ProvidersResponse(providers=ai_service.list_available_providers())


@router.get(
    "/health",
    response_model=ProvidersHealthResponse,
    summary="Probe every enabled provider",
    description=(
        "Sends a small summary request through each enabled provider, one after "
        "another. Each probe is a real, billable generation."
    ),
)
async def providers_health(
    ai_service: AIService = Depends(get_ai_service),
) -> ProvidersHealthResponse:
    health = await ai_service.check_providers_health()
    status = "healthy" if any(health.values()) else "unhealthy"
    if status == "unhealthy":
        logger.warning("No provider passed its health probe: %s", health)
    return ProvidersHealthResponse(status=status, providers=health)


@router.post("/test-summary", response_model=SummaryProbeResponse, summary="Try one provider")
async def test_summary(
    body: SummaryProbeRequest,
    ai_service: AIService = Depends(get_ai_service),
) -> SummaryProbeResponse:
    content = _require_text(body.content, "content")
    summary = await ai_service.summarize(content, body.provider)
    return SummaryProbeResponse(
        summary=summary,
        provider=body.provider or "default",
        is_success=bool(summary),
    )


@router.post("/generate-summary", response_model=GenerateSummaryResponse)
async def generate_summary(
    body: GenerateSummaryRequest,
    ai_service: AIService = Depends(get_ai_service),
) -> GenerateSummaryResponse:
    content = _require_text(body.content, "content")
    return GenerateSummaryResponse(summary=await ai_service.summarize(content, body.provider))


@router.post("/generate-text", response_model=GenerateTextResponse)
async def generate_text(
    body: GenerateTextRequest,
    ai_service: AIService = Depends(get_ai_service),
) -> GenerateTextResponse:
    prompt = _require_text(body.prompt, "prompt")
    return GenerateTextResponse(text=await ai_service.generate_text(prompt, body.provider))


@router.post("/generate-flashcards", response_model=GenerateFlashcardsResponse)
async def generate_flashcards(
    body: GenerateFlashcardsRequest,
    ai_service: AIService = Depends(get_ai_service),
) -> GenerateFlashcardsResponse:
    content = _require_text(body.content, "content")
    cards = await ai_service.generate_flashcards(content, body.provider)
    return GenerateFlashcardsResponse(flashcards=cards)


@router.post("/generate-audio", response_model=GenerateAudioResponse)
async def generate_audio(
    body: GenerateAudioRequest,
    ai_service: AIService = Depends(get_ai_service),
) -> GenerateAudioResponse:
    text = _require_text(body.text, "text")
    return GenerateAudioResponse(audio_content=await ai_service.synthesize_audio(text, body.voice))


@router.post("/flashcard-audio", response_model=FlashcardAudioResult)
async def flashcard_audio(
    body: GenerateFlashcardAudioRequest,
    ai_service: AIService = Depends(get_ai_service),
) -> FlashcardAudioResult:
    card = FlashcardItem(
        question=_require_text(body.question, "question"),
        answer=_require_text(body.answer, "answer"),
    )
    return await ai_service.synthesize_flashcard_audio(card, body.voice, body.mode)
