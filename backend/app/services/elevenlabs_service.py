"""
NotesWise Backend: ElevenLabs Text-to-Speech Service
======================================================

What:  Converts text to speech with the ElevenLabs API and returns base64 audio.
Why:   Flashcards can be studied by ear; the frontend plays the returned audio
       directly from a data URI, so the payload is base64 text rather than bytes.
How:   POST {base_url}/v1/text-to-speech/{voice_id} with the `xi-api-key` header.
       Transport failures are retried (tenacity, via post_with_retry); a non-2xx
       status is not.

Unlike the text adapters, this service RAISES on failure (AudioSynthesisError).
AIService is the boundary that turns those into empty audio.

Voices:
    Callers pass a symbolic name. Unknown names fall back to the default voice
    instead of failing, so a stale client setting still produces audio.
"""

import base64
import logging
import time
from types import MappingProxyType
from typing import List, Mapping, Optional

import httpx

from app.exceptions import AudioSynthesisError, ConfigurationError, ValidationError
from app.services.transport import TransportOptions, post_with_retry

logger = logging.getLogger(__name__)


DEFAULT_VOICE = "burt"
TTS_MODEL_ID = "eleven_multilingual_v2"

VOICES: Mapping[str, str] = MappingProxyType({
    "burt": "4YYIPFl9wE5c4L2eu2Gb",
})

VOICE_SETTINGS = {"stability": 0.5, "similarity_boost": 0.5}


class ElevenLabsService:
    """ElevenLabs speech synthesis client."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.elevenlabs.io",
        options: Optional[TransportOptions] = None,
    ):
        if not api_key:
            raise ConfigurationError(
                "ElevenLabs API key is not configured",
                context={"setting": "ELEVENLABS_API_KEY"},
            )
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._options = options or TransportOptions()

    @staticmethod
    def resolve_voice(voice: Optional[str]) -> str:
        """Map a symbolic voice name to an ElevenLabs voice id (default on miss)."""
        key = (voice or "").strip().lower()
        if key not in VOICES:
            if key:
                logger.debug("Unknown voice '%s', using '%s'", voice, DEFAULT_VOICE)
            key = DEFAULT_VOICE
        return VOICES[key]

    @staticmethod
    def available_voices() -> List[str]:
        return list(VOICES)

    async def synthesize(self, text: str, voice: str = DEFAULT_VOICE) -> str:
        """
        Synthesize `text` and return the audio as base64.

        Args:
            text:   Text to read aloud (must not be blank)
            voice:  Symbolic voice name; unknown names use the default voice

        Returns:
            Base64-encoded MPEG audio.

        Raises:
            ValidationError: Blank text
            AudioSynthesisError: Non-2xx response or transport failure
        """
        if not text or not text.strip():
            raise ValidationError("Text to synthesize must not be empty", field="text")

        voice_id = self.resolve_voice(voice)
        url = f"{self._base_url}/v1/text-to-speech/{voice_id}"
        payload = {
            "text": text,
            "model_id": TTS_MODEL_ID,
            "voice_settings": VOICE_SETTINGS,
        }
        start_time = time.perf_counter()

        try:
            async with self._options.client() as client:
                response = await post_with_retry(
                    client,
                    url,
                    self._options,
                    json=payload,
                    headers={"xi-api-key": self._api_key, "Accept": "audio/mpeg"},
                )
        except httpx.HTTPError as e:
            logger.warning("ElevenLabs request failed: %s", str(e))
            raise AudioSynthesisError(
                "Network error calling ElevenLabs API",
                context={"voice_id": voice_id, "error_type": type(e).__name__},
            ) from e

        if not response.is_success:
            logger.error(
                "ElevenLabs API error: %d - %s", response.status_code, response.text[:500]
            )
            raise AudioSynthesisError(
                f"ElevenLabs API error: {response.status_code}",
                status_code=response.status_code,
                context={"voice_id": voice_id},
            )

        audio = response.content
        duration_ms = (time.perf_counter() - start_time) * 1000
        logger.info(
            "ElevenLabs synthesis completed in %.0fms (%d chars → %d bytes)",
            duration_ms,
            len(text),
            len(audio),
        )
        return base64.b64encode(audio).decode("ascii")
