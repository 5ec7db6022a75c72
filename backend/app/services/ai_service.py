"""
NotesWise Backend: AI Orchestration Service
=============================================

What:  Single entry point the rest of the application uses for AI features:
       summaries, free text, flashcards, text-to-speech and provider health.
Why:   Callers (note workflow, routes) want plain values (a summary string, a
       list of flashcards, base64 audio), never adapter results or provider
       exceptions.
How:   Resolves a provider through ProviderFactory, calls it, and unwraps the
       GenerationResult. Every failure degrades to a neutral value.
Who:   Built once at startup by `build_ai_service()`; stored on app.state.

Degradation table:
    summarize / generate_text       → ""  on any failure
    generate_flashcards             → []  on any failure
    synthesize_audio                → ""  on any failure
    synthesize_flashcard_audio      → failed half is None, other half kept
    is_provider_healthy             → False on any failure

The only exception callers can see is ValidationError from
synthesize_flashcard_audio when the audio mode is unknown.
"""

import logging
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Union

import httpx

from app.exceptions import NotesWiseError, ValidationError
from app.schemas.ai import (
    AudioMode,
    BulkAudioResult,
    FlashcardAudioResult,
    FlashcardItem,
    GenerationRequest,
    GenerationResult,
)
from app.services.elevenlabs_service import DEFAULT_VOICE, ElevenLabsService
from app.services.llm_base import LLMProvider, parse_flashcards
from app.services.provider_factory import ProviderFactory
from app.services.transport import TransportOptions

logger = logging.getLogger(__name__)


class AIService:
    """
    Orchestrates the text providers and the audio backend.

    Stateless apart from its two collaborators, both of which are read-only
    after construction, so one instance serves all concurrent requests.
    """

    def __init__(self, factory: ProviderFactory, audio: ElevenLabsService):
        self.factory = factory
        self.audio = audio

    # ── Provider resolution ───────────────────────────────────────────────

    def _resolve(self, provider_name: Optional[str]) -> LLMProvider:
        if provider_name:
            return self.factory.create(provider_name)
        return self.factory.create_default()

    async def _generate(
        self,
        operation: str,
        provider_name: Optional[str],
        call: Callable[[LLMProvider], Awaitable[GenerationResult]],
    ) -> Optional[GenerationResult]:
        """Resolve the provider and run `call`; None if nothing usable came back."""
        try:
            provider = self._resolve(provider_name)
            result = await call(provider)
        except NotesWiseError as e:
            logger.warning("%s unavailable (provider=%s): %s", operation, provider_name, e.message)
            return None
        except Exception:
            logger.exception("%s failed unexpectedly (provider=%s)", operation, provider_name)
            return None

        if not result.success:
            logger.warning(
                "%s failed via %s: %s", operation, result.provider or provider_name, result.error
            )
            return None
        return result

    # ── Text generation ───────────────────────────────────────────────────

    async def summarize(self, content: str, provider_name: Optional[str] = None) -> str:
        """Summarize `content`. Returns "" when no provider produced one."""
        request = GenerationRequest(content=content)
        result = await self._generate(
            "Summary generation", provider_name, lambda p: p.generate_summary(request)
        )
        return result.content if result else ""

    async def generate_text(self, prompt: str, provider_name: Optional[str] = None) -> str:
        request = GenerationRequest(content=prompt)
        result = await self._generate(
            "Text generation", provider_name, lambda p: p.generate_text(request)
        )
        return result.content if result else ""

    async def generate_flashcards(
        self, content: str, provider_name: Optional[str] = None
    ) -> List[FlashcardItem]:
        """
        Generate study flashcards from `content`.

        Returns:
            Validated flashcards, or [] when generation or parsing failed.
        """
        request = GenerationRequest(content=content)
        result = await self._generate(
            "Flashcard generation", provider_name, lambda p: p.generate_flashcards(request)
        )
        if result is None:
            return []
        try:
            return parse_flashcards(result.content)
        except ValueError as e:
            logger.warning("Discarding unparseable flashcards from %s: %s", result.provider, str(e))
            return []

    # ── Audio ─────────────────────────────────────────────────────────────

    async def synthesize_audio(self, text: str, voice: str = DEFAULT_VOICE) -> str:
        """Base64 audio for `text`, or "" when synthesis failed."""
        try:
            return await self.audio.synthesize(text, voice)
        except NotesWiseError as e:
            logger.warning("Text-to-speech produced no audio: %s", e.message)
            return ""
        except Exception:
            logger.exception("Text-to-speech audio system raised an unexpected error")
            return ""

    async def synthesize_flashcard_audio(
        self,
        flashcard: FlashcardItem,
        voice: str = DEFAULT_VOICE,
        mode: Union[AudioMode, str] = AudioMode.BOTH,
    ) -> FlashcardAudioResult:
        """
        Synthesize the requested side(s) of one flashcard.

        Each side is synthesized independently: a failure on one side leaves
        that side None and does not affect the other.

        Raises:
            ValidationError: `mode` is not "question", "answer" or "both"
        """
        audio_mode = _coerce_mode(mode)
        result = FlashcardAudioResult()

        if audio_mode in (AudioMode.QUESTION, AudioMode.BOTH):
            result.question_audio = await self.synthesize_audio(flashcard.question, voice) or None
        if audio_mode in (AudioMode.ANSWER, AudioMode.BOTH):
            result.answer_audio = await self.synthesize_audio(flashcard.answer, voice) or None
        return result

    async def synthesize_flashcard_set_audio(
        self,
        flashcards: Iterable[FlashcardItem],
        voice: str = DEFAULT_VOICE,
        mode: Union[AudioMode, str] = AudioMode.BOTH,
    ) -> BulkAudioResult:
        """
        Synthesize audio for several flashcards, one after another.

        A card counts as generated when every requested side produced audio;
        otherwise it counts as an error. Processing always continues.
        """
        audio_mode = _coerce_mode(mode)
        bulk = BulkAudioResult()

        for card in flashcards:
            item = await self.synthesize_flashcard_audio(card, voice, audio_mode)
            bulk.items.append(item)
            if _is_complete(item, audio_mode):
                bulk.generated_count += 1
            else:
                bulk.error_count += 1

        logger.info(
            "Flashcard audio batch finished: %d generated, %d errors",
            bulk.generated_count,
            bulk.error_count,
        )
        return bulk

    # ── Provider status ───────────────────────────────────────────────────

    async def is_provider_healthy(self, provider_name: str) -> bool:
        try:
            provider = self.factory.create(provider_name)
            return await provider.is_healthy()
        except NotesWiseError as e:
            logger.info("Provider '%s' not healthy: %s", provider_name, e.message)
            return False
        except Exception:
            logger.exception("Health check for provider '%s' raised", provider_name)
            return False

    def list_available_providers(self) -> List[str]:
        return self.factory.list_available()

    async def check_providers_health(self) -> Dict[str, bool]:
        """Probe each enabled provider in turn, keyed by provider name."""
        return {
            name: await self.is_provider_healthy(name)
            for name in self.list_available_providers()
        }


def _coerce_mode(mode: Union[AudioMode, str]) -> AudioMode:
    try:
        return AudioMode(mode.lower() if isinstance(mode, str) else mode)
    except ValueError:
        raise ValidationError(
            f"Invalid audio mode '{mode}'. Use one of: question, answer, both",
            field="mode",
        ) from None


def _is_complete(item: FlashcardAudioResult, mode: AudioMode) -> bool:
    if mode in (AudioMode.QUESTION, AudioMode.BOTH) and item.question_audio is None:
        return False
    if mode in (AudioMode.ANSWER, AudioMode.BOTH) and item.answer_audio is None:
        return False
    return True


def build_ai_service(
    settings: Any, transport: Optional[httpx.AsyncBaseTransport] = None
) -> AIService:
    """
    Wire an AIService from application settings.

    Raises:
        ConfigurationError: ELEVENLABS_API_KEY is not configured
    """
    options = TransportOptions.from_settings(settings, transport=transport)
    audio = ElevenLabsService(
        api_key=settings.elevenlabs_api_key,
        base_url=settings.elevenlabs_base_url,
        options=options,
    )
    factory = ProviderFactory.from_settings(settings, transport=transport)
    return AIService(factory=factory, audio=audio)
